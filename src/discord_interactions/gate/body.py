"""Raw request body acquisition.

Signature verification needs the body exactly as transmitted, but a hosting
framework may already have consumed the stream before the gate runs.  The
body is therefore sourced in priority order:

1. bytes already materialized by an earlier stage -- used verbatim;
2. text already materialized -- re-encoded as UTF-8;
3. a parsed object (e.g. from a JSON body parser) -- re-serialized, which
   is best effort and logged as a warning;
4. nothing materialized -- the raw stream is read to completion.

Path 4 is the recommended integration: mount the gate before anything that
reads the body.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, AsyncIterable

logger = logging.getLogger(__name__)

_TAMPERED_BODY_WARNING = (
    "Request body was already parsed, probably by another middleware. "
    "Re-serializing it for signature verification may not reproduce the "
    "signed bytes; mount the interaction gate before any body parser so it "
    "receives the raw stream."
)


class BodySource(str, Enum):
    """Where the raw body bytes were obtained from."""

    RAW = "raw"
    TEXT = "text"
    PARSED = "parsed"
    STREAM = "stream"


def classify_body(materialized: Any) -> BodySource:
    """Return the :class:`BodySource` that applies to *materialized*."""
    if materialized is None:
        return BodySource.STREAM
    if isinstance(materialized, (bytes, bytearray, memoryview)):
        return BodySource.RAW
    if isinstance(materialized, str):
        return BodySource.TEXT
    return BodySource.PARSED


async def read_stream(stream: AsyncIterable[bytes]) -> bytes:
    """Accumulate every chunk of *stream* in arrival order.

    Nothing is returned until the stream is exhausted.  If the stream raises
    (client disconnect, cancellation) the partial chunks are dropped with
    the exception.
    """
    chunks: list[bytes] = []
    async for chunk in stream:
        if chunk:
            chunks.append(bytes(chunk))
    return b"".join(chunks)


async def read_raw_body(
    materialized: Any = None,
    stream: AsyncIterable[bytes] | None = None,
) -> tuple[bytes, BodySource]:
    """Obtain the raw body bytes for signature verification.

    Args:
        materialized: A body an earlier stage already produced, or ``None``.
        stream: The request byte stream, read only when nothing was
            materialized.

    Returns:
        A ``(raw_body, source)`` tuple.

    Raises:
        ValueError: If no body was materialized and no stream was given.
    """
    source = classify_body(materialized)

    if source is BodySource.RAW:
        return bytes(materialized), source

    if source is BodySource.TEXT:
        return materialized.encode("utf-8"), source

    if source is BodySource.PARSED:
        logger.warning(_TAMPERED_BODY_WARNING)
        # Compact separators and raw non-ASCII match the sender's encoder.
        serialized = json.dumps(
            materialized, separators=(",", ":"), ensure_ascii=False
        )
        return serialized.encode("utf-8"), source

    if stream is None:
        raise ValueError("No materialized body and no stream to read from")
    return await read_stream(stream), source
