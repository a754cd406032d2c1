"""Client-side helpers for exercising an interactions endpoint.

When an interactions URL is registered, the platform checks it by sending a
signed PING, which must be answered with a PONG, and a PING with a bad
signature, which must be rejected with ``401``.  :func:`check_endpoint` runs
the same two requests against any URL, signed with a local keypair.

Usage::

    from discord_interactions.protocol import generate_keypair
    from discord_interactions.sdk.probe import check_endpoint

    sk, vk = generate_keypair()   # run the server with vk as its public key
    result = await check_endpoint("http://localhost:8000/interactions", sk)
    assert result.ok, result.errors
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
from nacl.signing import SigningKey

from discord_interactions.protocol.crypto import sign_interaction
from discord_interactions.protocol.types import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    InteractionResponseType,
    InteractionType,
)

logger = logging.getLogger(__name__)


def build_signed_request(
    payload: dict[str, Any],
    signing_key: SigningKey,
    timestamp: str | None = None,
) -> tuple[bytes, dict[str, str]]:
    """Serialize *payload* and sign it.

    Returns:
        A ``(body, headers)`` tuple ready to POST.  ``timestamp`` defaults
        to the current Unix time in seconds.
    """
    if timestamp is None:
        timestamp = str(int(time.time()))
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign_interaction(body, timestamp, signing_key),
        TIMESTAMP_HEADER: timestamp,
    }
    return body, headers


def _corrupt_signature(signature_hex: str) -> str:
    """Flip the lowest bit of the first signature byte."""
    raw = bytearray(bytes.fromhex(signature_hex))
    raw[0] ^= 0x01
    return raw.hex()


@dataclass
class EndpointCheckResult:
    """Outcome of :func:`check_endpoint`."""

    url: str
    ping_ok: bool = False
    rejects_bad_signature: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.ping_ok and self.rejects_bad_signature


async def check_endpoint(
    url: str,
    signing_key: SigningKey,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> EndpointCheckResult:
    """Validate that *url* verifies signatures and answers PINGs.

    Args:
        url: The interactions endpoint.
        signing_key: Key whose public half the endpoint was configured with.
        client: Optional client to reuse (tests pass one with a mock
            transport).  A temporary client is created otherwise.
        timeout: Per-request timeout for the temporary client.

    Transport errors are recorded in ``errors`` rather than raised.
    """
    result = EndpointCheckResult(url=url)
    own_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)

    body, headers = build_signed_request(
        {"type": int(InteractionType.PING)}, signing_key
    )
    try:
        resp = await client.post(url, content=body, headers=headers)
        if resp.status_code != 200:
            result.errors.append(f"PING returned HTTP {resp.status_code}, expected 200")
        else:
            try:
                data = resp.json()
            except ValueError:
                data = None
            if isinstance(data, dict) and data.get("type") == InteractionResponseType.PONG:
                result.ping_ok = True
            else:
                result.errors.append(f"PING answered with {resp.text!r}, expected a PONG")

        bad_headers = dict(headers)
        bad_headers[SIGNATURE_HEADER] = _corrupt_signature(headers[SIGNATURE_HEADER])
        resp = await client.post(url, content=body, headers=bad_headers)
        if resp.status_code == 401:
            result.rejects_bad_signature = True
        else:
            result.errors.append(
                f"Bad signature returned HTTP {resp.status_code}, expected 401"
            )
    except httpx.HTTPError as exc:
        logger.warning("Endpoint check against %s failed: %s", url, exc)
        result.errors.append(f"Request failed: {exc}")
    finally:
        if own_client:
            await client.aclose()

    return result
