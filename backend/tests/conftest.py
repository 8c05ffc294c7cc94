"""
restmount — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings pointing at a per-test SQLite file
    ├── engine: Async engine with tables created, disposed afterwards
    ├── storage: SQLAlchemyStorage over that engine
    ├── api: Registry with Note and Category registered under /v1
    ├── client: HTTPX AsyncClient talking to api.handler()
    └── mock_storage: AsyncMock implementing the storage contract
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any restmount imports
os.environ["RESTMOUNT_DATABASE_URL"] = "sqlite+aiosqlite:///./restmount_test.db"
os.environ["RESTMOUNT_LOG_LEVEL"] = "WARNING"
os.environ["RESTMOUNT_BASE_URL"] = ""
os.environ["RESTMOUNT_API_PREFIX"] = ""

from restmount.api import API, new_api  # noqa: E402
from restmount.config import Settings  # noqa: E402
from restmount.database import build_engine, build_session_factory, create_tables, dispose_engine  # noqa: E402
from restmount.models import Category, Note  # noqa: E402
from restmount.storage import SQLAlchemyStorage  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """
    Settings for one test.

    A file database (not :memory:) so every pooled connection sees the same
    tables.
    """
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'restmount.db'}",
        default_page_limit=25,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = build_engine(test_settings)
    await create_tables(engine)
    yield engine
    await dispose_engine(engine)


@pytest.fixture
def storage(engine) -> SQLAlchemyStorage:
    return SQLAlchemyStorage(build_session_factory(engine))


@pytest.fixture
def api(storage, test_settings) -> API:
    """
    Registry serving /v1/notes and /v1/categories with no base URL.

    Usage:
        async def test_list(api, client):
            response = await client.get("/v1/notes")
    """
    api = new_api("v1", storage=storage, settings=test_settings)
    api.add_resource(Note)
    api.add_resource(Category)
    return api


def make_client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def client(api) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed directly to the registry's ASGI app.

    No server is started; requests go through ASGITransport.
    """
    async with make_client(api.handler()) as client:
        yield client


@pytest.fixture
def mock_storage():
    """
    Storage contract double for handler tests.

    Every operation is an AsyncMock; tests set return values or side effects.
    """
    storage = AsyncMock()
    storage.find = AsyncMock(return_value=[])
    storage.find_by_id = AsyncMock(return_value=None)
    storage.create = AsyncMock()
    storage.update_fields = AsyncMock()
    storage.delete_by_id = AsyncMock(return_value=0)
    return storage
