"""
restmount — FastAPI Router Adapter (default)
==============================================

What:  Implements the Routeable contract on top of a FastAPI application.
How:   Each binding becomes `app.add_api_route(path, endpoint, methods=[m])`
       where the endpoint forwards the request and its path parameters to
       the generic handler. Generated routes appear in /docs (except OPTIONS).
Who:   Used by new_api() and the app factory; pass an existing FastAPI app to
       mount resources next to hand-written routes.
"""

from typing import Any, Optional

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import Response

from restmount.routing.base import RouteHandler, install_error_handlers, to_brace_path


class FastAPIRouter:
    """Routeable backed by FastAPI's router."""

    def __init__(self, app: Optional[FastAPI] = None):
        self.app = app if app is not None else FastAPI()
        install_error_handlers(self.app)

    def handle(self, method: str, path: str, handler: RouteHandler) -> None:
        async def endpoint(request: Request) -> Response:
            return await handler(request, dict(request.path_params))

        self.app.add_api_route(
            to_brace_path(path),
            endpoint,
            methods=[method],
            name=f"{method.lower()} {path}",
            include_in_schema=method != "OPTIONS",
        )

    def handler(self) -> Any:
        return self.app
