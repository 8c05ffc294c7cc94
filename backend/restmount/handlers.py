"""
restmount — Generic CRUD Handlers
===================================

What:  The list/read/create/update/delete/options operations shared by every
       registered resource.
How:   Each handler receives the Resource it serves (model, RecordSchema,
       owning API), the borrowed context, the request and its path params.
       It talks to the store only through the Storage contract and REPORTS
       failures by raising RestMountError subclasses; it never writes an
       error body itself. The route binding translates errors in one place.
Who:   Bound to routes by the registration engine (restmount.resource).

Handler → failure mapping:
    handle_index   QueryFailureError
    handle_read    InvalidIdentityError, NotFoundError, QueryFailureError
    handle_create  DecodeFailureError, PersistFailureError
    handle_update  InvalidIdentityError, DecodeFailureError, NotFoundError,
                   QueryFailureError, PersistFailureError
    handle_delete  NotFoundError, DeleteFailureError
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from starlette.requests import Request
from starlette.responses import Response

from restmount.context import APIContext
from restmount.exceptions import (
    DeleteFailureError,
    InvalidIdentityError,
    NotFoundError,
    PersistFailureError,
    QueryFailureError,
    StorageError,
)
from restmount.records import INT64_MAX, parse_int64

if TYPE_CHECKING:
    from restmount.resource import Resource

logger = logging.getLogger(__name__)

COLLECTION_ALLOW = "GET,POST,PATCH,OPTIONS"
ITEM_ALLOW = "GET,PATCH,DELETE,OPTIONS"


def _parse_int(raw: Optional[str]) -> Optional[int]:
    """Query parameter → int64, or None when absent, not a number or out of range."""
    if raw is None or raw == "":
        return None
    try:
        return parse_int64(raw)
    except InvalidIdentityError:
        return None


def pagination(request: Request, default_limit: int) -> Tuple[int, int]:
    """
    Read `page` and `limit` and return (limit, offset).

    page:   1-based, defaults to 1, clamped to >= 1
    limit:  defaults to `default_limit` when absent, unparsable or < 1
    offset: (page - 1) * limit, capped at the int64 maximum
    """
    page = _parse_int(request.query_params.get("page")) or 1
    if page < 1:
        page = 1
    limit = _parse_int(request.query_params.get("limit"))
    if limit is None or limit < 1:
        limit = default_limit
    return limit, min((page - 1) * limit, INT64_MAX)


async def handle_options_collection(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    return Response(status_code=204, headers={"Allow": COLLECTION_ALLOW})


async def handle_options_item(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    return Response(status_code=204, headers={"Allow": ITEM_ALLOW})


async def handle_index(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    """
    GET /{name}?page=&limit=

    Responds with a bare JSON array; no totals are reported.
    """
    api = resource.api
    limit, offset = pagination(request, api.default_limit)
    try:
        records = await api.storage.find(resource.model, limit=limit, offset=offset)
    except StorageError as exc:
        raise QueryFailureError(context=exc.context) from exc
    return api.respond(resource.schema.encode_many(records))


async def handle_read(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    """GET /{name}/:id"""
    api = resource.api
    identity = resource.schema.parse_identity(params.get("id"))
    try:
        record = await api.storage.find_by_id(resource.model, identity)
    except StorageError as exc:
        raise QueryFailureError(context=exc.context) from exc
    if record is None:
        raise NotFoundError(resource=resource.name, resource_id=str(identity))
    return api.respond(resource.schema.encode(record))


async def handle_create(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    """
    POST /{name}

    The body is decoded onto a zero-value record and persisted; the response
    carries the stored record and a Location header for it.
    """
    api = resource.api
    schema = resource.schema
    record = schema.build(schema.decode(await request.body()))
    try:
        record = await api.storage.create(record)
    except StorageError as exc:
        raise PersistFailureError(context=exc.context) from exc

    identity = schema.identity(record)
    logger.info("Created %s %s", resource.name, identity)
    headers = {}
    if ctx.info is not None:
        headers["Location"] = ctx.info.url_for(f"{resource.base_path}/{identity}")
    return api.respond(schema.encode(record), headers=headers)


async def handle_update(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    """
    PATCH /{name}/:id

    Only fields present in the body are written; everything else keeps its
    stored value. An identity inside the body is ignored. The response is
    the merged record as stored after the update.
    """
    api = resource.api
    schema = resource.schema
    identity = schema.parse_identity(params.get("id"))
    changes = schema.decode(await request.body())
    changes.pop(schema.identity_key, None)

    try:
        existing = await api.storage.find_by_id(resource.model, identity)
    except StorageError as exc:
        raise QueryFailureError(context=exc.context) from exc
    if existing is None:
        raise NotFoundError(
            message="Unable to find object for update",
            resource=resource.name,
            resource_id=str(identity),
        )
    if not changes:
        return api.respond(schema.encode(existing))

    try:
        updated = await api.storage.update_fields(existing, changes)
    except StorageError as exc:
        raise PersistFailureError(message="Failed to update object", context=exc.context) from exc
    if updated is None:
        # Deleted between the lookup and the write
        raise NotFoundError(
            message="Unable to find object for update",
            resource=resource.name,
            resource_id=str(identity),
        )
    return api.respond(schema.encode(updated))


async def handle_delete(
    resource: "Resource", ctx: APIContext, request: Request, params: Dict[str, str]
) -> Response:
    """
    DELETE /{name}/:id

    The identity is passed to the store as an opaque string. Deleting an
    identity with no row (including a second DELETE) is a NotFoundError.
    """
    api = resource.api
    raw_id = params.get("id", "")
    try:
        deleted = await api.storage.delete_by_id(resource.model, raw_id)
    except StorageError as exc:
        raise DeleteFailureError(context=exc.context) from exc
    if not deleted:
        raise NotFoundError(resource=resource.name, resource_id=raw_id)
    logger.info("Deleted %s %s", resource.name, raw_id)
    return Response(status_code=204)
