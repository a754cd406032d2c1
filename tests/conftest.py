"""Shared test fixtures for interaction verification tests."""

from __future__ import annotations

import json

import pytest
from nacl.signing import SigningKey

from discord_interactions.protocol.crypto import serialize_verify_key, sign_interaction
from discord_interactions.protocol.types import SIGNATURE_HEADER, TIMESTAMP_HEADER


@pytest.fixture()
def keypair():
    """Return an Ed25519 (signing_key, verify_key) tuple."""
    sk = SigningKey.generate()
    return sk, sk.verify_key


@pytest.fixture()
def public_key_hex(keypair) -> str:
    _, vk = keypair
    return serialize_verify_key(vk)


@pytest.fixture()
def timestamp() -> str:
    return "1700000000"


@pytest.fixture()
def sign_request(keypair, timestamp):
    """Return a helper building ``(body, headers)`` for a payload.

    ``payload`` may be a dict (serialized compactly) or raw bytes.
    """
    sk, _ = keypair

    def _sign(payload, ts: str = timestamp, key: SigningKey | None = None):
        if isinstance(payload, (bytes, bytearray)):
            body = bytes(payload)
        else:
            body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        headers = {
            SIGNATURE_HEADER: sign_interaction(body, ts, key or sk),
            TIMESTAMP_HEADER: ts,
        }
        return body, headers

    return _sign
