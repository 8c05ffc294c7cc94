"""
restmount — FastAPI Application Factory
=========================================

What:  Builds the demo service: the Note and Category models served as REST
       collections by a restmount API.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn restmount.main:app`) or the `restmount` console script.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │                                                      │
    │  ASGI Middleware:                                    │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐                  │
    │  │  Req ID  │→│ Logging  │→│ CORS │                  │
    │  └──────────┘ └──────────┘ └──────┘                  │
    │                                                      │
    │  restmount API (FastAPIRouter on this app):          │
    │  ┌──────────────────────────────────────────────┐    │
    │  │ /{prefix}/notes       /{prefix}/notes/:id    │    │
    │  │ /{prefix}/categories  /{prefix}/categories/:id│   │
    │  └──────────────────────────────────────────────┘    │
    │                                                      │
    │  Storage: SQLAlchemyStorage → async engine           │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create missing tables
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restmount import __version__
from restmount.api import API, new_api_with_routing
from restmount.config import Settings, settings as default_settings
from restmount.database import Base, build_engine, build_session_factory, create_tables, dispose_engine
from restmount.middleware import RequestIDMiddleware, RequestLoggingMiddleware, bind_request_id
from restmount.middleware.request_id import request_id_var
from restmount.models import Category, Note
from restmount.resolver import RequestHostResolver, StaticResolver, URLResolver
from restmount.routing import FastAPIRouter
from restmount.storage import SQLAlchemyStorage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # Third-party libraries are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Catch-all for errors the resource bindings do not translate.

    Generated routes already answer RestMountError with `{"error": ...}`;
    anything else (a bug, a lost connection outside the storage layer)
    ends here. The stack trace is logged, never returned.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def build_resolver(settings: Settings) -> URLResolver:
    """A fixed base URL when configured, otherwise the host of each request."""
    if settings.base_url:
        return StaticResolver(settings.base_url)
    return RequestHostResolver()


def build_api(app: FastAPI, settings: Settings, storage: SQLAlchemyStorage) -> API:
    api = new_api_with_routing(
        settings.api_prefix,
        build_resolver(settings),
        FastAPIRouter(app),
        storage=storage,
        settings=settings,
    )
    api.use_middleware(bind_request_id)
    api.add_resource(Note)
    api.add_resource(Category)
    return api


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: FastAPI instance with the demo resources registered. The API
    registry is available as `app.state.api`.
    """
    settings = settings if settings is not None else default_settings
    engine = build_engine(settings)
    storage = SQLAlchemyStorage(build_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings)
        logger.info("restmount %s starting up...", __version__)
        await create_tables(engine, Base)
        for resource in app.state.api.resources:
            logger.info("Serving %s at %s", resource.model.__name__, resource.base_path)

        yield

        logger.info("restmount shutting down...")
        await dispose_engine(engine)
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="restmount",
        description="REST CRUD endpoints generated from SQLAlchemy models.",
        version=__version__,
        lifespan=lifespan,
    )

    # Last added = first to execute: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    app.state.api = build_api(app, settings, storage)
    app.state.engine = engine
    return app


def run() -> None:
    """Console entry point: serve the demo app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "restmount.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


app = create_app()
