"""Shared fixtures for gate and middleware tests."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from discord_interactions.gate.middleware import InteractionVerificationMiddleware


class BodyStashMiddleware:
    """Stand-in for a body parser that runs before the gate.

    Reads the whole body and leaves ``transform(raw)`` on
    ``request.state.body``.
    """

    def __init__(self, app, transform) -> None:
        self.app = app
        self.transform = transform

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] == "http":
            request = Request(scope, receive)
            raw = await request.body()
            request.state.body = self.transform(raw)
        await self.app(scope, receive, send)


@pytest.fixture()
def downstream_calls() -> list[dict]:
    return []


@pytest.fixture()
def make_app(public_key_hex, downstream_calls):
    """Return a factory for a FastAPI app guarded by the middleware.

    ``/interactions`` echoes the interaction and the body it received;
    ``/open`` is not gated.  Pass ``transform`` to simulate an earlier
    middleware that already consumed the body.
    """

    def _make(transform=None, paths=("/interactions",)) -> FastAPI:
        app = FastAPI()
        app.add_middleware(
            InteractionVerificationMiddleware,
            public_key=public_key_hex,
            paths=paths,
        )
        if transform is not None:
            app.add_middleware(BodyStashMiddleware, transform=transform)

        @app.post("/interactions")
        async def interactions(request: Request):
            body = await request.body()
            downstream_calls.append(
                {
                    "interaction": request.state.interaction,
                    "raw_body": request.state.raw_body,
                    "body": body,
                }
            )
            return {"type": 4, "data": {"content": "hello"}}

        @app.post("/open")
        async def open_route(request: Request):
            return {"received": (await request.body()).decode("utf-8")}

        return app

    return _make


@pytest.fixture()
def client(make_app):
    with TestClient(make_app()) as c:
        yield c
