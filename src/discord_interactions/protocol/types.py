"""Contract constants for Discord interaction webhooks."""

from __future__ import annotations

from enum import IntEnum, IntFlag


# Request headers carrying the Ed25519 signature (hex) and its timestamp.
SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"

# Byte lengths fixed by Ed25519
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64


class InteractionType(IntEnum):
    """The type of interaction a request carries.

    Using ``IntEnum`` so that ``InteractionType.PING == 1`` is True and the
    members serialize to plain JSON numbers.
    """

    PING = 1
    COMMAND = 2


class InteractionResponseType(IntEnum):
    """The type of response sent back for an interaction."""

    # Acknowledge a PING
    PONG = 1
    # Acknowledge a command without sending a message
    ACKNOWLEDGE = 2
    # Respond with a message
    CHANNEL_MESSAGE = 3
    # Respond with a message, showing the user's input
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    # Acknowledge a command without sending a message, showing the user's input
    ACKNOWLEDGE_WITH_SOURCE = 5


class InteractionResponseFlags(IntFlag):
    """Bit flags for the ``flags`` field of a response message."""

    EPHEMERAL = 1 << 6
