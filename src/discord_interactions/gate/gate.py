"""Request gate: verify an interaction request before any app logic runs.

A request moves through ``AwaitHeaders -> AwaitBody -> Verifying`` and ends
either accepted or rejected:

- missing headers are rejected before the body is read;
- a bad signature is rejected after the body is read;
- a verified PING is answered with a PONG by the gate itself;
- any other verified interaction is handed downstream, parsed.

Every rejection is terminal for that request only.  Nothing is retried --
signature failures are not transient.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, Mapping

from nacl.signing import VerifyKey

from discord_interactions.gate.body import BodySource, read_raw_body
from discord_interactions.protocol.crypto import deserialize_verify_key, verify_key
from discord_interactions.protocol.errors import (
    ConfigurationError,
    InvalidHeadersError,
    InvalidPayloadError,
    InvalidSignatureError,
    RequestRejectedError,
)
from discord_interactions.protocol.types import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    InteractionResponseType,
    InteractionType,
)

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class GateResponse:
    """A response the gate sends itself, bypassing downstream logic."""

    status_code: int
    body: bytes
    media_type: str

    @classmethod
    def from_error(cls, exc: RequestRejectedError) -> GateResponse:
        return cls(exc.status_code, exc.detail.encode("utf-8"), TEXT_MEDIA_TYPE)

    @classmethod
    def pong(cls) -> GateResponse:
        body = json.dumps(
            {"type": int(InteractionResponseType.PONG)}, separators=(",", ":")
        )
        return cls(200, body.encode("utf-8"), JSON_MEDIA_TYPE)


@dataclass
class GateResult:
    """Outcome of running one request through the gate.

    ``accepted`` is True only when downstream logic should run; in that case
    ``interaction`` holds the parsed payload.  Otherwise ``response`` is the
    reply to send.
    """

    accepted: bool
    response: GateResponse | None = None
    interaction: Any = None
    raw_body: bytes | None = None
    body_source: BodySource | None = None


def extract_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """Return ``(signature, timestamp)`` from *headers*, case-insensitively.

    Raises:
        InvalidHeadersError: If either header is missing or empty.
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}
    signature = lowered.get(SIGNATURE_HEADER.lower())
    timestamp = lowered.get(TIMESTAMP_HEADER.lower())
    if not signature or not timestamp:
        raise InvalidHeadersError()
    return signature, timestamp


def parse_interaction(raw_body: bytes) -> Any:
    """Decode a verified body into an interaction payload.

    Falsy JSON scalars (``null``, ``false``, ``0``, ``""``) yield an empty
    payload.  Any other JSON value, object or not, is returned as decoded;
    only ``type`` is ever inspected.

    Raises:
        InvalidPayloadError: If the body is not UTF-8 JSON.
    """
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidPayloadError(f"Invalid payload: {exc}") from exc
    # Empty arrays and objects are kept as they are.
    if not isinstance(payload, (list, dict)) and not payload:
        return {}
    return payload


def is_ping(interaction: Any) -> bool:
    """Return True if *interaction* is a PING liveness check."""
    if not isinstance(interaction, Mapping):
        return False
    kind = interaction.get("type")
    # JSON true would otherwise compare equal to 1.
    if isinstance(kind, bool):
        return False
    return kind == InteractionType.PING


class InteractionGate:
    """Verifies interaction requests against one application public key.

    The key is parsed once at construction and never mutated, so a single
    gate can serve any number of concurrent requests.

    Raises:
        ConfigurationError: If *public_key* is missing or malformed.
    """

    def __init__(self, public_key: str | bytes | VerifyKey | None) -> None:
        if not public_key:
            raise ConfigurationError("You must specify a Discord client public key")
        try:
            self._verify_key = deserialize_verify_key(public_key)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"Invalid Discord client public key: {exc}") from exc

    @property
    def verify_key(self) -> VerifyKey:
        return self._verify_key

    async def process(
        self,
        headers: Mapping[str, str],
        body: Any = None,
        stream: AsyncIterable[bytes] | None = None,
    ) -> GateResult:
        """Run one request through the gate.

        Args:
            headers: Request headers (any case).
            body: A body an earlier stage already materialized, or ``None``.
            stream: The raw request byte stream, read when *body* is ``None``.

        Returns:
            A :class:`GateResult`.  Request-terminal errors are turned into a
            response rather than raised.
        """
        try:
            signature, timestamp = extract_headers(headers)
        except InvalidHeadersError as exc:
            logger.debug("Rejected interaction: %s", exc)
            return GateResult(accepted=False, response=GateResponse.from_error(exc))

        raw_body, source = await read_raw_body(body, stream)

        if not verify_key(raw_body, signature, timestamp, self._verify_key):
            exc = InvalidSignatureError()
            logger.debug("Rejected interaction: %s (body source=%s)", exc, source.value)
            return GateResult(
                accepted=False,
                response=GateResponse.from_error(exc),
                raw_body=raw_body,
                body_source=source,
            )

        try:
            interaction = parse_interaction(raw_body)
        except InvalidPayloadError as exc:
            logger.debug("Rejected interaction: %s", exc)
            return GateResult(
                accepted=False,
                response=GateResponse.from_error(exc),
                raw_body=raw_body,
                body_source=source,
            )

        if is_ping(interaction):
            logger.debug("Answered PING")
            return GateResult(
                accepted=False,
                response=GateResponse.pong(),
                interaction=interaction,
                raw_body=raw_body,
                body_source=source,
            )

        return GateResult(
            accepted=True,
            interaction=interaction,
            raw_body=raw_body,
            body_source=source,
        )
