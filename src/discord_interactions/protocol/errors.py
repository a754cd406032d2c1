"""Interactions exception hierarchy.

All package-specific exceptions inherit from :class:`InteractionsError`.
"""

from __future__ import annotations


class InteractionsError(Exception):
    """Base exception for all interaction verification errors."""


class ConfigurationError(InteractionsError):
    """Raised at setup time when the gate cannot be configured."""


class RequestRejectedError(InteractionsError):
    """Base for errors that terminate a single request.

    Subclasses fix the HTTP ``status_code`` and the plain-text ``detail``
    sent back to the client.
    """

    status_code: int = 400
    detail: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.detail)


class InvalidHeadersError(RequestRejectedError):
    """Raised when a signature or timestamp header is missing or empty."""

    status_code = 401
    detail = "Invalid headers"


class InvalidSignatureError(RequestRejectedError):
    """Raised when the request signature does not verify."""

    status_code = 401
    detail = "Invalid signature"


class InvalidPayloadError(RequestRejectedError):
    """Raised when a verified body is not valid UTF-8 JSON."""

    status_code = 400
    detail = "Invalid payload"
