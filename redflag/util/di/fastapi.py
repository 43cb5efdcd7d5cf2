"""FastAPI wiring that opens a Scope.UOW container per HTTP request."""

from dishka import AsyncContainer
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Send
from starlette.types import Scope as ASGIScope

from redflag.util.di.scope import Scope


class ContainerMiddleware:
    """Pure ASGI middleware; dishka's stock one would open Scope.REQUEST instead.

    The Request is handed to the UOW scope as context, so providers can read
    cookies and headers from it.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: ASGIScope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=Scope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app: FastAPI) -> None:
    """Attach the root container and the per-request scope middleware."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
