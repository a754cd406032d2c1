"""ASGI middleware running the interaction gate in front of an app.

Usage::

    from fastapi import FastAPI, Request
    from discord_interactions.gate.middleware import InteractionVerificationMiddleware

    app = FastAPI()
    app.add_middleware(
        InteractionVerificationMiddleware,
        public_key="<application public key hex>",
        paths=["/interactions"],
    )

    @app.post("/interactions")
    async def interactions(request: Request):
        interaction = request.state.interaction
        ...

This is a pure ASGI middleware (not ``BaseHTTPMiddleware``) so it can read
the request stream chunk by chunk and replay the exact bytes downstream.
"""

from __future__ import annotations

import logging
from typing import Iterable

from nacl.signing import VerifyKey
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from discord_interactions.gate.gate import GateResponse, InteractionGate

logger = logging.getLogger(__name__)


def _replay_receive(raw_body: bytes, receive: Receive) -> Receive:
    """Return a ``receive`` that yields *raw_body* once, then defers to *receive*."""
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": raw_body, "more_body": False}
        return await receive()

    return replay


def _route_path(scope: Scope) -> str:
    """Return the request path relative to where the app is mounted.

    Under a ``Mount`` (or a server ``--root-path``), ``scope["path"]`` keeps
    the full path and the prefix is carried in ``root_path``.
    """
    path = scope["path"]
    root_path = scope.get("root_path", "")
    if not root_path or not path.startswith(root_path):
        return path
    rest = path[len(root_path):]
    if rest and not rest.startswith("/"):
        return path
    return rest or "/"


def _to_response(gate_response: GateResponse) -> Response:
    return Response(
        content=gate_response.body,
        status_code=gate_response.status_code,
        media_type=gate_response.media_type,
    )


class InteractionVerificationMiddleware:
    """Verify interaction signatures before requests reach the app.

    Args:
        app: The downstream ASGI app.
        public_key: The application's Ed25519 public key (hex, bytes or
            :class:`VerifyKey`).  Required.
        paths: Request paths to gate.  ``None`` gates every HTTP request.

    If an earlier middleware already read the body it must leave it on
    ``request.state.body`` (bytes, str or a parsed object); otherwise the
    body is read from the ASGI stream.  Accepted requests carry the parsed
    payload on ``request.state.interaction`` and the verified bytes on
    ``request.state.raw_body``.
    """

    def __init__(
        self,
        app: ASGIApp,
        public_key: str | bytes | VerifyKey | None,
        paths: Iterable[str] | None = ("/interactions",),
    ) -> None:
        self.app = app
        self.gate = InteractionGate(public_key)
        self.paths = frozenset(paths) if paths is not None else None

    def _should_gate(self, scope: Scope) -> bool:
        if scope["type"] != "http":
            return False
        return self.paths is None or _route_path(scope) in self.paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not self._should_gate(scope):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        materialized = getattr(request.state, "body", None)
        stream = request.stream() if materialized is None else None

        try:
            result = await self.gate.process(
                request.headers, body=materialized, stream=stream
            )
        except ClientDisconnect:
            logger.debug("Client disconnected before the body was complete")
            return

        if result.response is not None:
            await _to_response(result.response)(scope, receive, send)
            return

        request.state.interaction = result.interaction
        request.state.raw_body = result.raw_body
        await self.app(scope, _replay_receive(result.raw_body, receive), send)
