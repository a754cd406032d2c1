"""Interactions SDK -- client-side signing and endpoint checks."""

from discord_interactions.sdk.probe import (
    EndpointCheckResult,
    build_signed_request,
    check_endpoint,
)

__all__ = ["EndpointCheckResult", "build_signed_request", "check_endpoint"]
