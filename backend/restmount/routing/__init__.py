"""
restmount — Routing Package
=============================

Router Inventory:
    - base.py:              Routeable contract, path translation, JSON 404/405
    - fastapi_router.py:    FastAPIRouter (default)
    - starlette_router.py:  StarletteRouter
"""

from restmount.routing.base import RouteHandler, Routeable, to_brace_path
from restmount.routing.fastapi_router import FastAPIRouter
from restmount.routing.starlette_router import StarletteRouter

__all__ = [
    "FastAPIRouter",
    "RouteHandler",
    "Routeable",
    "StarletteRouter",
    "to_brace_path",
]
