"""
restmount — Request ID Middleware
===================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   RequestIDMiddleware (ASGI) honours an incoming X-Request-ID or creates
       one, and stores it in a ContextVar. `bind_request_id` is a resource
       middleware that copies it onto the pooled APIContext and stages the
       response header, so generated handlers and loggers can use ctx.request_id.
Who:   Installed by the app factory; bind_request_id via api.use_middleware().
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from restmount.context import APIContext

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header if present
        2. Otherwise generate a short UUID
        3. Store in the ContextVar and request.state
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response


def bind_request_id(ctx: APIContext, request: Request) -> None:
    """
    Resource middleware: put the request ID on the context.

    Falls back to the header, then to a fresh ID, when the ASGI middleware
    is not installed.
    """
    rid = (
        getattr(request.state, "request_id", "")
        or request.headers.get(REQUEST_ID_HEADER)
        or new_request_id()
    )
    ctx.request_id = rid
    ctx.response_headers[REQUEST_ID_HEADER] = rid
