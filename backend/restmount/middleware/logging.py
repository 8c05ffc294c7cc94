"""
restmount — Access Logging Middleware
=======================================

What:  One access-log line per HTTP request, tagged with the resource that
       served it.
How:   Times the downstream app, then reads what the generated binding left
       on `request.state` (the resource name) and the request ID ContextVar.
       Requests no resource handled (404s, docs) are logged with resource "-".
Who:   Installed by the app factory after RequestIDMiddleware.

Line format:
    <METHOD> <path> → <status> [<resource>] <ms>ms rid=<request id>

    GET /api/notes → 200 [notes] 3.2ms rid=1a2b3c4d

Level: 5xx → ERROR, 4xx → WARNING, otherwise INFO. Request bodies are never
logged; records may contain personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from restmount.middleware.request_id import request_id_var

logger = logging.getLogger("restmount.access")


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        resource = getattr(request.state, "resource", "-")
        rid = request_id_var.get("")
        logger.log(
            level_for_status(response.status_code),
            "%s %s → %d [%s] %.1fms rid=%s",
            request.method,
            request.url.path,
            response.status_code,
            resource,
            elapsed_ms,
            rid,
            extra={
                "resource": resource,
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
