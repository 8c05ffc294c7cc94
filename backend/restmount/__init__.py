"""
restmount — REST CRUD endpoints generated from SQLAlchemy models
==================================================================

Architecture:

    ┌─────────────────────────────────────┐
    │   API registry (api.py)             │  ← resources, middleware, pool
    ├─────────────────────────────────────┤
    │   Registration engine (resource.py) │  ← names, paths, route bindings
    ├─────────────────────────────────────┤
    │   CRUD handlers (handlers.py)       │  ← list/read/create/update/delete
    ├─────────────────────────────────────┤
    │   Storage contract (storage.py)     │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
    Router adapters (routing/) and URL resolvers (resolver.py) plug in at
    the top; contexts (context.py) are pooled per request.
"""

__version__ = "1.0.0"

from restmount.api import (  # noqa: E402
    API,
    new_api,
    new_api_with_base_url,
    new_api_with_resolver,
    new_api_with_routing,
)
from restmount.context import APIContext, ContextPool  # noqa: E402
from restmount.exceptions import (  # noqa: E402
    DecodeFailureError,
    DeleteFailureError,
    InvalidIdentityError,
    InvalidResourceKindError,
    MethodNotAllowedError,
    NotFoundError,
    PersistFailureError,
    QueryFailureError,
    RestMountError,
    StorageError,
)
from restmount.naming import EntityNamer  # noqa: E402
from restmount.resolver import (  # noqa: E402
    RequestAwareURLResolver,
    RequestHostResolver,
    StaticResolver,
    URLInfo,
    URLResolver,
)
from restmount.resource import Resource  # noqa: E402
from restmount.storage import SQLAlchemyStorage, Storage  # noqa: E402

__all__ = [
    "API",
    "APIContext",
    "ContextPool",
    "DecodeFailureError",
    "DeleteFailureError",
    "EntityNamer",
    "InvalidIdentityError",
    "InvalidResourceKindError",
    "MethodNotAllowedError",
    "NotFoundError",
    "PersistFailureError",
    "QueryFailureError",
    "RequestAwareURLResolver",
    "RequestHostResolver",
    "Resource",
    "RestMountError",
    "SQLAlchemyStorage",
    "StaticResolver",
    "Storage",
    "URLInfo",
    "URLResolver",
    "__version__",
    "new_api",
    "new_api_with_base_url",
    "new_api_with_resolver",
    "new_api_with_routing",
]
