"""Cryptographic primitives for interaction verification.

Wraps PyNaCl (libsodium) for Ed25519 signing and verification.  Keys and
signatures travel as lowercase hex, which is how the platform encodes them.

This module never hand-rolls crypto -- every operation delegates to PyNaCl.
"""

from __future__ import annotations

import nacl.exceptions
from nacl.signing import SigningKey, VerifyKey


# ---------------------------------------------------------------------------
# Key generation and serialization
# ---------------------------------------------------------------------------

def generate_keypair() -> tuple[SigningKey, VerifyKey]:
    """Generate an Ed25519 keypair.

    Returns:
        A ``(signing_key, verify_key)`` tuple.
    """
    sk = SigningKey.generate()
    return sk, sk.verify_key


def serialize_signing_key(key: SigningKey) -> str:
    """Serialize a signing key to hex (32-byte seed)."""
    return key.encode().hex()


def deserialize_signing_key(s: str) -> SigningKey:
    """Restore a signing key from its hex-encoded seed."""
    return SigningKey(bytes.fromhex(s.strip()))


def serialize_verify_key(key: VerifyKey) -> str:
    """Serialize a verify (public) key to hex."""
    return key.encode().hex()


def deserialize_verify_key(key: str | bytes | VerifyKey) -> VerifyKey:
    """Coerce *key* into a :class:`VerifyKey`.

    Accepts a hex string, the raw 32 key bytes, or an existing verify key.

    Raises:
        ValueError: If the hex is malformed.
        TypeError: If *key* has an unsupported type.
        nacl.exceptions.ValueError: If the key is not 32 bytes long.
    """
    if isinstance(key, VerifyKey):
        return key
    if isinstance(key, str):
        return VerifyKey(bytes.fromhex(key.strip()))
    if isinstance(key, (bytes, bytearray, memoryview)):
        return VerifyKey(bytes(key))
    raise TypeError(f"Unsupported public key type: {type(key).__name__}")


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------

def signed_message(timestamp: str | bytes, raw_body: bytes) -> bytes:
    """Return the bytes covered by an interaction signature.

    The timestamp is UTF-8 encoded and prepended to the body with no
    delimiter.
    """
    if isinstance(timestamp, str):
        timestamp = timestamp.encode("utf-8")
    return bytes(timestamp) + bytes(raw_body)


def sign_message(data: bytes, signing_key: SigningKey) -> str:
    """Sign *data* with the Ed25519 *signing_key*.

    Returns:
        The 64-byte signature as a hex string.
    """
    return signing_key.sign(data).signature.hex()


def sign_interaction(
    raw_body: bytes, timestamp: str, signing_key: SigningKey
) -> str:
    """Sign an interaction body the way the platform does."""
    return sign_message(signed_message(timestamp, raw_body), signing_key)


# ---------------------------------------------------------------------------
# Verification
#
# Both functions fold every failure into ``False``.  Malformed signatures and
# keys surface from PyNaCl as ``nacl.exceptions.ValueError`` /
# ``TypeError`` rather than ``BadSignatureError``, and attacker-controlled
# input must never escape as an exception.
# ---------------------------------------------------------------------------

def verify(
    signature: bytes, message: bytes, public_key: bytes | VerifyKey
) -> bool:
    """Check an Ed25519 *signature* over *message* under *public_key*.

    Returns:
        ``True`` if the signature is valid, ``False`` otherwise -- including
        for signatures or keys of the wrong length or off the curve.
    """
    try:
        vk = deserialize_verify_key(public_key)
        vk.verify(bytes(message), bytes(signature))
    except (nacl.exceptions.CryptoError, ValueError, TypeError):
        return False
    return True


def verify_key(
    raw_body: bytes,
    signature: str | bytes,
    timestamp: str | bytes,
    client_public_key: str | bytes | VerifyKey,
) -> bool:
    """Validate an interaction request against its signature and key.

    Args:
        raw_body: The exact request body bytes.
        signature: The ``X-Signature-Ed25519`` header (hex) or raw bytes.
        timestamp: The ``X-Signature-Timestamp`` header.
        client_public_key: The application's public key (hex, bytes or
            :class:`VerifyKey`).

    Returns:
        ``True`` if verification succeeded, ``False`` otherwise.
    """
    try:
        if isinstance(signature, str):
            signature = bytes.fromhex(signature.strip())
        message = signed_message(timestamp, raw_body)
    except (ValueError, TypeError):
        return False
    return verify(signature, message, client_public_key)
