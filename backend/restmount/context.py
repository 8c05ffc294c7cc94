"""
restmount — Per-Request Context & Pool
========================================

What:  The scratch object threaded through the middleware chain and the CRUD
       handler of one request, and the pool it is borrowed from.
How:   ContextPool hands out idle contexts (allocating through its factory
       only when none is idle), resets every context on acquisition, and
       takes it back on release. `borrow()` wraps both in a context manager
       so release happens on every exit path.
Who:   Each generated route binding borrows exactly one context per request.

Ownership:
    A released context belongs to the pool again. Middlewares and handlers
    must not keep references to it (or to its `values`) past the request;
    the next borrower will reset and reuse it.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from restmount.resolver import URLInfo

logger = logging.getLogger(__name__)


class APIContext:
    """
    Mutable per-request state.

    Attributes:
        values:            Free-form key/value scratch space for middlewares
        info:              URL info resolved for the current request
        request_id:        Correlation ID (set by bind_request_id)
        response_headers:  Headers staged by middlewares, copied onto the
                           response before the context is released
    """

    def __init__(self) -> None:
        self.values: Dict[str, Any] = {}
        self.info: Optional[URLInfo] = None
        self.request_id: str = ""
        self.response_headers: Dict[str, str] = {}

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def reset(self) -> None:
        """Discard everything from the previous request."""
        self.values = {}
        self.info = None
        self.request_id = ""
        self.response_headers = {}


ContextFactory = Callable[[], APIContext]


class ContextPool:
    """
    Concurrency-safe pool of APIContext objects.

    The lock is held only for list operations and never across an await,
    so acquisition is safe from both asyncio tasks and worker threads.

    Args:
        factory:   Called when no idle context is available
        max_idle:  Keep at most this many idle contexts; extras are dropped
                   on release. None keeps them all.
    """

    def __init__(self, factory: ContextFactory, max_idle: Optional[int] = None):
        self._factory = factory
        self._max_idle = max_idle
        self._idle: List[APIContext] = []
        self._lock = threading.Lock()
        self.created = 0

    def acquire(self) -> APIContext:
        with self._lock:
            ctx = self._idle.pop() if self._idle else None
        if ctx is None:
            ctx = self._factory()
            with self._lock:
                self.created += 1
            logger.debug("Allocated context #%d", self.created)
        ctx.reset()
        return ctx

    def release(self, ctx: APIContext) -> None:
        with self._lock:
            if self._max_idle is not None and len(self._idle) >= self._max_idle:
                return
            self._idle.append(ctx)

    @contextmanager
    def borrow(self) -> Iterator[APIContext]:
        ctx = self.acquire()
        try:
            yield ctx
        finally:
            self.release(ctx)

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)
