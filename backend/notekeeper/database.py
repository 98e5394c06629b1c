"""
NoteKeeper Backend — Database Handle & Session Management
===========================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` handle owns the engine (connection pool) and session
       factory. It is created when the application starts, stored on
       `app.state.db`, and disposed when the application stops.
Who:   Request handlers receive sessions via the `get_db_session` dependency.
When:  Handle per process; session per request.

Architecture Decision:
    No module-level engine. The pool is shared state with a lifecycle, so it
    is passed explicitly (app.state → dependency → services). Tests build a
    handle against aiosqlite without touching global state.

Connection Pooling Strategy:
    pool_size / max_overflow bound the number of concurrently in-flight store
    operations. Requests beyond capacity wait for a pooled connection
    (pool_timeout) instead of being rejected.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notekeeper.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models and Alembic.
    """
    pass


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine and its connection pool.

    SQLite (used by the test-suite) runs on a static/null pool, so the queue
    pool arguments are only passed for server databases.
    """
    kwargs = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


class Database:
    """
    Shared store handle: the engine plus a session factory.

    expire_on_commit=False keeps ORM attributes readable after a commit
    without another round-trip.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(create_engine_from_settings(settings))

    async def dispose(self) -> None:
        """Close every pooled connection. Called once at shutdown."""
        await self.engine.dispose()
        logger.info("Database pool disposed")


async def ensure_schema(db: Database) -> None:
    """
    Create the named_notes table (and its unique constraint) if absent.

    The users table is owned elsewhere and is never created here.
    """
    from notekeeper.models.note import NamedNote
    from notekeeper.models.user import User  # noqa: F401  (foreign key target)

    async with db.engine.begin() as conn:
        await conn.run_sync(
            lambda sync_conn: NamedNote.__table__.create(sync_conn, checkfirst=True)
        )
    logger.info("Schema ensured: named_notes")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the handle created in the lifespan."""
    return request.app.state.db


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the handle's factory
        2. Yields it to the route handler
        3. On error: rolls back (writes commit inside the note service)
        4. Always: closes the session (returns connection to pool)
    """
    db = get_database(request)
    async with db.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
