"""
restmount — Router Abstraction
================================

What:  The contract the registration engine needs from an HTTP router.
How:   `handle(method, path, handler)` binds one verb on one path. Paths use
       `:name` segments (`/posts/:id`); adapters translate them to their own
       placeholder syntax and pass the extracted values to the handler as a
       `{name: value}` dict. `handler()` returns the ASGI application.

Every adapter also answers:
    unknown path                  → 404 {"error": "Not Found"}
    known path, unregistered verb → 405 {"error": "Method Not Allowed"},
                                    Allow: every verb bound to the path
"""

import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set

from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from restmount.exceptions import MethodNotAllowedError

RouteHandler = Callable[[Request, Dict[str, str]], Awaitable[Response]]

_PARAM_SEGMENT = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class Routeable(Protocol):
    def handle(self, method: str, path: str, handler: RouteHandler) -> None: ...

    def handler(self) -> Any: ...


def to_brace_path(path: str) -> str:
    """`/posts/:id` → `/posts/{id}` (Starlette/FastAPI placeholder syntax)."""
    return _PARAM_SEGMENT.sub(r"{\1}", path)


def error_response(
    status_code: int, message: str, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def allowed_methods(request: Request) -> List[str]:
    """Verbs registered on the request's path, across every route bound to it."""
    methods: Set[str] = set()
    for route in getattr(request.app, "routes", []):
        route_methods = getattr(route, "methods", None)
        if not route_methods:
            continue
        match, _ = route.matches(request.scope)
        if match == Match.PARTIAL:
            methods |= route_methods
    return sorted(methods)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render router-level HTTP errors (404, 405) in the resource error shape.

    Each binding is its own route, so the router's Allow header names only
    the first route it tried; 405 responses list every verb on the path.
    """
    headers = getattr(exc, "headers", None)
    if exc.status_code == MethodNotAllowedError.status_code:
        detail = MethodNotAllowedError().message
        methods = allowed_methods(request)
        if methods:
            headers = {**(headers or {}), "Allow": ", ".join(methods)}
    else:
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(exc.status_code, detail, headers=headers)


def install_error_handlers(app: Any) -> None:
    """Attach the JSON not-found/not-allowed handlers to a Starlette or FastAPI app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
