"""
restmount — Resource Registration Engine
==========================================

What:  Turns one mapped model into seven route bindings on the API's router.
How:   At registration time, once per model:
       1. Resolve the mapped class (class or template instance accepted)
       2. Build its RecordSchema (identity, decode/encode)
       3. Compute the canonical name (EntityNamer, else pluralized kebab-case)
       4. Compute base path `/{prefix}/{name}` and item path `{base}/:id`
       5. Register each (method, path) with a binding closed over the
          Resource only. Bindings hold no per-request state.

Request lifecycle of every binding:
    ┌──────────┐   ┌───────────┐   ┌─────────────┐   ┌─────────┐   ┌──────────┐
    │ Acquire  │──▶│ Reset +   │──▶│ Middleware  │──▶│ Handler │──▶│ Release  │
    │ context  │   │ URL info  │   │ chain       │   │         │   │ context  │
    └──────────┘   └───────────┘   └─────────────┘   └─────────┘   └──────────┘
    Release runs on every exit path. RestMountError raised by a middleware or
    handler is translated by API.handle_error; anything else propagates to
    the application's catch-all handler after the context is released.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Tuple

from starlette.requests import Request
from starlette.responses import Response

from restmount import handlers
from restmount.context import APIContext
from restmount.exceptions import RestMountError
from restmount.naming import resource_name
from restmount.records import RecordSchema, resolve_model
from restmount.routing.base import RouteHandler

if TYPE_CHECKING:
    from restmount.api import API

logger = logging.getLogger(__name__)

ResourceHandler = Callable[["Resource", APIContext, Request, Dict[str, str]], Awaitable[Response]]


@dataclass(frozen=True)
class Resource:
    """A registered model exposed as a REST collection."""

    model: type
    name: str
    api: "API"
    schema: RecordSchema
    base_path: str

    @property
    def item_path(self) -> str:
        return self.base_path + "/:id"

    def bindings(self) -> List[Tuple[str, str, ResourceHandler]]:
        return [
            ("OPTIONS", self.base_path, handlers.handle_options_collection),
            ("OPTIONS", self.item_path, handlers.handle_options_item),
            ("GET", self.base_path, handlers.handle_index),
            ("GET", self.item_path, handlers.handle_read),
            ("POST", self.base_path, handlers.handle_create),
            ("PATCH", self.item_path, handlers.handle_update),
            ("DELETE", self.item_path, handlers.handle_delete),
        ]


def base_path_for(prefix: str, name: str) -> str:
    prefix = prefix.strip("/")
    if prefix:
        return f"/{prefix}/{name}"
    return f"/{name}"


def bind(resource: Resource, handler: ResourceHandler) -> RouteHandler:
    """Wrap a generic handler in the pooled-context request lifecycle."""
    api = resource.api

    async def route(request: Request, params: Dict[str, str]) -> Response:
        request.state.resource = resource.name
        with api.context_pool.borrow() as ctx:
            ctx.info = api.info.for_request(request)
            try:
                await api.run_middleware_chain(ctx, request)
                response = await handler(resource, ctx, request, params)
            except RestMountError as exc:
                response = api.handle_error(exc, request)
            for key, value in ctx.response_headers.items():
                response.headers[key] = value
            return response

    return route


def register_resource(api: "API", descriptor: Any) -> Resource:
    """
    Register `descriptor` on `api` and return the new Resource.

    Raises:
        InvalidResourceKindError: descriptor is not a mapped model (class or
            instance) with a single-column primary key.
    """
    model = resolve_model(descriptor)
    schema = RecordSchema(model)
    template = schema.zero_value() if isinstance(descriptor, type) else descriptor
    name = resource_name(model, template)

    if any(existing.name == name for existing in api.resources):
        logger.warning("Resource name '%s' registered twice; their routes collide", name)

    resource = Resource(
        model=model,
        name=name,
        api=api,
        schema=schema,
        base_path=base_path_for(api.info.prefix, name),
    )
    for method, path, handler in resource.bindings():
        api.router.handle(method, path, bind(resource, handler))

    logger.info(
        "Registered resource %s → %s, %s", model.__name__, resource.base_path, resource.item_path
    )
    return resource
