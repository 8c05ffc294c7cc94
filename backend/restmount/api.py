"""
restmount — API Registry
==========================

What:  The composition root: owns the storage handle, router, URL info,
       registered resources, middleware chain and context pool.
How:   Created once per service through one of the constructors below, then
       populated during startup with add_resource()/use_middleware(). Nothing
       is ever unregistered.
Who:   Application factories (see restmount.main) and tests.

Constructors:
    new_api(prefix)                              static resolver, no base URL
    new_api_with_base_url(prefix, base_url)      static resolver
    new_api_with_resolver(prefix, resolver)      custom (e.g. request-aware)
    new_api_with_routing(prefix, resolver, r)    custom router adapter too

Example:
    api = new_api("v1", storage=SQLAlchemyStorage(session_factory))
    api.use_middleware(bind_request_id)
    api.add_resource(Post)
    app = api.handler()     # ASGI application
"""

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from starlette.requests import Request
from fastapi.responses import JSONResponse

from restmount.config import Settings
from restmount.context import APIContext, ContextPool
from restmount.exceptions import RestMountError
from restmount.resolver import StaticResolver, URLInfo, URLResolver
from restmount.resource import Resource, register_resource
from restmount.routing.base import Routeable, error_response
from restmount.routing.fastapi_router import FastAPIRouter
from restmount.storage import Storage

logger = logging.getLogger(__name__)

# (ctx, request) → None, sync or async
Middleware = Callable[[APIContext, Request], Any]
ContextAllocator = Callable[["API"], APIContext]


class API:
    """
    Registry of REST resources.

    Args:
        prefix:    Path prefix of every generated route ("v1" → /v1/posts)
        resolver:  Base URL resolver (static or request-aware)
        router:    Routeable adapter the bindings are registered on
        storage:   Storage contract implementation; may be set later
        settings:  Per-registry configuration (page size, content type,
                   error status policy, pool bound). Defaults to a fresh
                   Settings() read from the environment.
        default_limit: Overrides settings.default_page_limit
    """

    def __init__(
        self,
        prefix: str,
        resolver: URLResolver,
        router: Routeable,
        storage: Optional[Storage] = None,
        settings: Optional[Settings] = None,
        default_limit: Optional[int] = None,
    ):
        settings = settings if settings is not None else Settings()
        self.storage = storage
        self.content_type = settings.content_type
        self.default_limit = default_limit if default_limit is not None else settings.default_page_limit
        self.legacy_error_status = settings.legacy_error_status
        self.info = URLInfo(prefix=prefix, resolver=resolver)
        self.resources: List[Resource] = []
        self.middlewares: List[Middleware] = []
        self._router = router
        self._context_allocator: Optional[ContextAllocator] = None
        self.context_pool = ContextPool(
            self._allocate_context, max_idle=settings.context_pool_max_idle
        )

    # ── Registration ──────────────────────────────────────────────────────

    def add_resource(self, descriptor: Any) -> Resource:
        """
        Expose a mapped model as a REST collection.

        `descriptor` is either a model class such as `Post` or an instance
        such as `Post()`, used only as a type template.

        Raises:
            InvalidResourceKindError: anything else was passed
        """
        resource = register_resource(self, descriptor)
        self.resources.append(resource)
        return resource

    def use_middleware(self, *middlewares: Middleware) -> None:
        """Append middlewares; they run in registration order before every handler."""
        self.middlewares.extend(middlewares)

    def set_context_allocator(self, allocator: Optional[ContextAllocator]) -> None:
        """Replace the default APIContext factory used when the pool is empty."""
        self._context_allocator = allocator

    def set_storage(self, storage: Storage) -> None:
        self.storage = storage

    # ── Accessors ─────────────────────────────────────────────────────────

    @property
    def router(self) -> Routeable:
        return self._router

    def handler(self) -> Any:
        """The ASGI application serving every registered resource."""
        return self._router.handler()

    # ── Request-time helpers ──────────────────────────────────────────────

    def _allocate_context(self) -> APIContext:
        if self._context_allocator is not None:
            return self._context_allocator(self)
        return APIContext()

    async def run_middleware_chain(self, ctx: APIContext, request: Request) -> None:
        for middleware in self.middlewares:
            result = middleware(ctx, request)
            if inspect.isawaitable(result):
                await result

    def respond(
        self, content: Any, status_code: int = 200, headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        return JSONResponse(
            content=content,
            status_code=status_code,
            headers=headers,
            media_type=self.content_type,
        )

    def handle_error(self, exc: RestMountError, request: Optional[Request] = None) -> JSONResponse:
        """
        Translate a request failure into `{"error": "<message>"}`.

        The status comes from the exception class, or is always 404 when
        legacy_error_status is enabled.
        """
        status_code = 404 if self.legacy_error_status else exc.status_code
        path = request.url.path if request is not None else ""
        if status_code >= 500:
            logger.error("%s on %s: %s | Context: %s", type(exc).__name__, path, exc.message, exc.context)
        else:
            logger.info("%s on %s: %s", type(exc).__name__, path, exc.message)
        return error_response(status_code, exc.message)


# ══════════════════════════════════════════════════════════════════════════
# Constructors
# ══════════════════════════════════════════════════════════════════════════


def new_api(prefix: str = "", **kwargs: Any) -> API:
    """API on a fresh FastAPI app with no base URL in generated links."""
    return API(prefix, StaticResolver(""), FastAPIRouter(), **kwargs)


def new_api_with_base_url(prefix: str, base_url: str, **kwargs: Any) -> API:
    """Like new_api, but links are prefixed with `base_url` (http://localhost/v1/...)."""
    return API(prefix, StaticResolver(base_url.rstrip("/")), FastAPIRouter(), **kwargs)


def new_api_with_resolver(prefix: str, resolver: URLResolver, **kwargs: Any) -> API:
    return API(prefix, resolver, FastAPIRouter(), **kwargs)


def new_api_with_routing(
    prefix: str, resolver: URLResolver, router: Routeable, **kwargs: Any
) -> API:
    """Full control: custom resolver and router adapter (e.g. StarletteRouter)."""
    return API(prefix, resolver, router, **kwargs)
