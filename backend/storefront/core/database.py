"""
Engine, sessions and schema helpers for the store database.

One async engine is built from ``settings.database_url`` at import time.
Request handlers get a session through ``get_db``; scripts and background
code use ``session_scope`` directly. Both commit when the block finishes
and roll back when it raises.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from storefront.core.config import settings
from storefront.models.base import Base


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite ignores ON DELETE CASCADE / SET NULL unless asked per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_async_engine(url: str = settings.database_url) -> AsyncEngine:
    """
    Build the async engine for ``url``.

    SQLite (local development and tests) runs on a single shared
    connection so an in-memory database survives between sessions, with
    foreign keys switched on. PostgreSQL keeps the driver's pool and
    pre-pings connections, which managed hosts drop when idle.
    """
    if _is_sqlite(url):
        engine = create_async_engine(
            url,
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(url, future=True, pool_pre_ping=True)


engine = get_async_engine()

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Open a session that commits on success and rolls back on error.

    Example:
        async with session_scope() as session:
            await AdminUserRepository(session).create("owner@example.com")
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_schema() -> None:
    """Create every table registered on ``Base`` that does not exist yet."""
    from storefront import models  # noqa: F401 - registers the mapped classes

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def init_db() -> None:
    """
    Startup hook.

    Migrations are managed outside the service; tables are only created
    here when DB_CREATE_ALL is set, which local development relies on.
    """
    if settings.db_create_all:
        await create_schema()


async def close_db() -> None:
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding the request's session.

    The handler's writes are committed after it returns. Any exception
    raised by the handler (including the domain errors that become 4xx
    responses) rolls the whole request back.
    """
    async with session_scope() as session:
        yield session
