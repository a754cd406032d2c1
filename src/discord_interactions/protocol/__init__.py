"""Interaction protocol -- constants, errors and Ed25519 verification.

Public API re-exports for ``discord_interactions.protocol``.
"""

from discord_interactions.protocol.types import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    InteractionType,
    InteractionResponseType,
    InteractionResponseFlags,
)

from discord_interactions.protocol.errors import (
    InteractionsError,
    ConfigurationError,
    RequestRejectedError,
    InvalidHeadersError,
    InvalidSignatureError,
    InvalidPayloadError,
)

from discord_interactions.protocol.crypto import (
    generate_keypair,
    serialize_signing_key,
    deserialize_signing_key,
    serialize_verify_key,
    deserialize_verify_key,
    signed_message,
    sign_message,
    sign_interaction,
    verify,
    verify_key,
)

__all__ = [
    # Types
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "PUBLIC_KEY_SIZE",
    "SIGNATURE_SIZE",
    "InteractionType",
    "InteractionResponseType",
    "InteractionResponseFlags",
    # Errors
    "InteractionsError",
    "ConfigurationError",
    "RequestRejectedError",
    "InvalidHeadersError",
    "InvalidSignatureError",
    "InvalidPayloadError",
    # Crypto
    "generate_keypair",
    "serialize_signing_key",
    "deserialize_signing_key",
    "serialize_verify_key",
    "deserialize_verify_key",
    "signed_message",
    "sign_message",
    "sign_interaction",
    "verify",
    "verify_key",
]
