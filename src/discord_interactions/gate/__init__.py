"""Request gate -- body acquisition, verification and the ASGI middleware."""

from discord_interactions.gate.body import BodySource, classify_body, read_raw_body
from discord_interactions.gate.gate import (
    GateResponse,
    GateResult,
    InteractionGate,
    extract_headers,
    is_ping,
    parse_interaction,
)
from discord_interactions.gate.middleware import InteractionVerificationMiddleware

__all__ = [
    "BodySource",
    "classify_body",
    "read_raw_body",
    "GateResponse",
    "GateResult",
    "InteractionGate",
    "extract_headers",
    "is_ping",
    "parse_interaction",
    "InteractionVerificationMiddleware",
]
