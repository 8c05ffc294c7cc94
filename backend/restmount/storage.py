"""
restmount — Storage Contract & SQLAlchemy Implementation
==========================================================

What:  The five operations the CRUD handlers need from a data store, and the
       async SQLAlchemy implementation used by default.
How:   SQLAlchemyStorage opens one AsyncSession per operation from an
       async_sessionmaker. Each session commits on success, rolls back on a
       database error and is always closed. Database errors, and integers
       the driver cannot bind (OverflowError), are logged and re-raised as
       StorageError; handlers map that to the failure of the
       operation at hand (query/persist/delete).
Who:   Shared by every resource of an API; concurrent handlers use it with no
       coordination of their own (the database's isolation applies).

Storage contract:
    find(model, limit=, offset=)   → list of records in primary key order
    find_by_id(model, identity)     → record or None
    create(record)                  → the persisted record (identity filled in)
    update_fields(record, changes)  → the updated record, or None if it vanished
    delete_by_id(model, identity)   → number of rows deleted
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Type

from sqlalchemy import delete, inspect as sa_inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restmount.exceptions import InvalidIdentityError, StorageError
from restmount.records import parse_int64

logger = logging.getLogger(__name__)


class Storage(Protocol):
    async def find(self, model: Type[Any], *, limit: int, offset: int) -> List[Any]: ...

    async def find_by_id(self, model: Type[Any], identity: Any) -> Optional[Any]: ...

    async def create(self, record: Any) -> Any: ...

    async def update_fields(self, record: Any, changes: Dict[str, Any]) -> Optional[Any]: ...

    async def delete_by_id(self, model: Type[Any], identity: Any) -> int: ...


class SQLAlchemyStorage:
    """Storage contract over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str, **context: Any) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except (SQLAlchemyError, OverflowError) as exc:
                await session.rollback()
                logger.error(
                    "Storage %s failed: %s | Context: %s",
                    operation,
                    type(exc).__name__,
                    context,
                )
                raise StorageError(
                    operation=operation,
                    context={**context, "error_type": type(exc).__name__},
                ) from exc

    async def find(self, model: Type[Any], *, limit: int, offset: int) -> List[Any]:
        identity_column = sa_inspect(model).primary_key[0]
        stmt = select(model).order_by(identity_column).limit(limit).offset(offset)
        async with self._session("find", model=model.__name__, limit=limit, offset=offset) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_by_id(self, model: Type[Any], identity: Any) -> Optional[Any]:
        async with self._session("find_by_id", model=model.__name__, identity=identity) as session:
            return await session.get(model, identity)

    async def create(self, record: Any) -> Any:
        async with self._session("create", model=type(record).__name__) as session:
            session.add(record)
            await session.flush()
            # Pick up server-side defaults (timestamps, sequences)
            await session.refresh(record)
            return record

    async def update_fields(self, record: Any, changes: Dict[str, Any]) -> Optional[Any]:
        model = type(record)
        identity = sa_inspect(record).identity
        async with self._session("update", model=model.__name__, identity=identity) as session:
            current = await session.get(model, identity)
            if current is None:
                return None
            for key, value in changes.items():
                setattr(current, key, value)
            await session.flush()
            await session.refresh(current)
            return current

    async def delete_by_id(self, model: Type[Any], identity: Any) -> int:
        identity_column = sa_inspect(model).primary_key[0]
        try:
            value = _coerce_identity(identity_column, identity)
        except (TypeError, ValueError, InvalidIdentityError):
            # Cannot equal any stored key
            logger.debug("Identity %r does not fit %s", identity, identity_column)
            return 0
        stmt = delete(model).where(identity_column == value)
        async with self._session("delete", model=model.__name__, identity=identity) as session:
            result = await session.execute(stmt)
            return result.rowcount


def _coerce_identity(column: Any, identity: Any) -> Any:
    """
    Cast a string identity to the Python type of the key column.

    Integer keys go through the same strict int64 parser as the read path,
    so whitespace, underscores and out-of-range values match nothing.
    """
    if not isinstance(identity, str):
        return identity
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return identity
    if python_type is str:
        return identity
    if python_type is int:
        return parse_int64(identity)
    return python_type(identity)
