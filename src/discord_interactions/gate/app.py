"""FastAPI application factory for an interactions endpoint."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from fastapi import FastAPI
from fastapi.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from discord_interactions import __version__
from discord_interactions.gate.config import Settings
from discord_interactions.gate.gate import InteractionGate
from discord_interactions.gate.middleware import InteractionVerificationMiddleware
from discord_interactions.gate.models import HealthResponse

logger = logging.getLogger(__name__)

InteractionHandler = Callable[[Any], Union[Any, Awaitable[Any]]]

_STATUS_TO_ERROR = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    501: "not_implemented",
}


def create_app(
    settings: Settings | None = None,
    handler: InteractionHandler | None = None,
) -> FastAPI:
    """Create a FastAPI app that serves verified interactions.

    The verification middleware guards ``settings.interactions_path``.  PINGs
    are answered by the middleware; every other verified interaction is
    passed to *handler*, whose return value is sent back as JSON.  Without a
    handler those interactions get ``501``.

    Raises:
        ConfigurationError: If no valid public key is configured.
    """
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.debug:
        logging.getLogger("discord_interactions").setLevel(logging.DEBUG)

    # Starlette builds middleware lazily; parse the key now so a bad key
    # fails at startup instead of on the first request.  The middleware gets
    # the parsed VerifyKey, which deserialize_verify_key passes through as is.
    gate = InteractionGate(settings.public_key)

    app = FastAPI(title="Discord Interactions", version=__version__)
    app.state.settings = settings
    app.state.interaction_handler = handler

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": _STATUS_TO_ERROR.get(exc.status_code, "error"),
                "detail": exc.detail,
            },
        )

    app.add_middleware(
        InteractionVerificationMiddleware,
        public_key=gate.verify_key,
        paths=[settings.interactions_path],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Liveness check. Not signature-gated."""
        return HealthResponse(status="ok", version=__version__)

    @app.post(settings.interactions_path)
    async def interactions(request: Request):
        """Dispatch a verified, non-PING interaction to the handler."""
        interaction_handler = request.app.state.interaction_handler
        if interaction_handler is None:
            raise HTTPException(status_code=501, detail="No interaction handler configured")

        result = interaction_handler(request.state.interaction)
        if inspect.isawaitable(result):
            result = await result
        return result

    logger.info("Serving interactions on %s", settings.interactions_path)
    return app
