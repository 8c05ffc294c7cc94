"""
restmount — Middleware Package
================================

Two layers of cross-cutting behavior:

ASGI middleware (wraps the whole app, added with app.add_middleware):
    Request → [Request ID] → [Logging] → [CORS] → Router

Resource middleware (the API chain, added with api.use_middleware):
    Binding → acquire context → mw1(ctx, request) → mw2(ctx, request) → handler
    Runs sequentially, in registration order, for generated routes only.
"""

from restmount.middleware.logging import RequestLoggingMiddleware
from restmount.middleware.request_id import (
    RequestIDMiddleware,
    bind_request_id,
    request_id_var,
)

__all__ = [
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "bind_request_id",
    "request_id_var",
]
