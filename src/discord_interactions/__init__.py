"""discord-interactions -- verify and answer Discord interaction webhooks.

Top-level convenience re-exports::

    from discord_interactions import InteractionGate, verify_key
    from discord_interactions.gate.middleware import InteractionVerificationMiddleware
"""

__version__ = "0.1.0"

from discord_interactions.protocol import (  # noqa: E402
    ConfigurationError,
    InteractionResponseFlags,
    InteractionResponseType,
    InteractionType,
    InteractionsError,
    verify,
    verify_key,
)
from discord_interactions.gate.gate import GateResult, InteractionGate  # noqa: E402

__all__ = [
    "__version__",
    "ConfigurationError",
    "InteractionGate",
    "GateResult",
    "InteractionResponseFlags",
    "InteractionResponseType",
    "InteractionType",
    "InteractionsError",
    "verify",
    "verify_key",
]
