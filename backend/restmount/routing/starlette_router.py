"""
restmount — Starlette Router Adapter
======================================

What:  Routeable for deployments that want plain Starlette (no OpenAPI, no
       FastAPI dependency injection) underneath the generated resources.
How:   Appends a `starlette.routing.Route` per binding to the app's router.
"""

from typing import Any, Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from restmount.routing.base import RouteHandler, install_error_handlers, to_brace_path


class StarletteRouter:
    def __init__(self, app: Optional[Starlette] = None):
        self.app = app if app is not None else Starlette()
        install_error_handlers(self.app)

    def handle(self, method: str, path: str, handler: RouteHandler) -> None:
        async def endpoint(request: Request) -> Response:
            return await handler(request, dict(request.path_params))

        self.app.router.routes.append(
            Route(to_brace_path(path), endpoint, methods=[method])
        )

    def handler(self) -> Any:
        return self.app
