"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

create_app() builds one engine + session factory per application and keeps
them on app.state, so each app (and each test) owns its own pool. get_db
hands every request its own session and closes it afterwards; closing a
session with an open transaction rolls it back.
"""

import anyio
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for a database URL.

    PostgreSQL gets a sized pool (min 5, max 20 connections). SQLite
    (local dev and tests) gets foreign key enforcement switched on, which
    it leaves off by default.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=5,
        max_overflow=15,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory — each request gets its own session."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db(request: Request) -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes.

    The close is shielded so a request cancelled by the timeout middleware
    still hands its connection back to the pool.
    """
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        with anyio.CancelScope(shield=True):
            await session.close()
