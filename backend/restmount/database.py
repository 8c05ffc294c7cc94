"""
restmount — Database Engine & Session Management
==================================================

What:  Async SQLAlchemy engine, session factory and declarative base.
How:   `build_engine()` creates an async engine from Settings with connection
       pooling; `build_session_factory()` wraps it in an async_sessionmaker
       that SQLAlchemyStorage draws one session per operation from.
Who:   The app factory (restmount.main) and tests.
When:  Engine is built once per application; sessions are short-lived.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs skip the sizing arguments; the aiosqlite dialect manages its
    own pool.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from restmount.config import Settings


class Base(DeclarativeBase):
    """
    Base class for models exposed through restmount.

    Any DeclarativeBase subclass works with `API.add_resource`; this one is
    shared by the bundled demo models so `create_tables()` can find them.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings`.

    SQL echo is enabled only at DEBUG log level.
    """
    kwargs = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory with expire_on_commit=False.

    Records returned by the storage layer are read after their session has
    closed (to serialize them), so attributes must stay loaded past commit.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine, base: type = Base) -> None:
    """Create every table registered on `base.metadata` that is missing."""
    async with engine.begin() as conn:
        await conn.run_sync(base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections. Called during application shutdown."""
    await engine.dispose()
