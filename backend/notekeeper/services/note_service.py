"""
NoteKeeper Backend — Note Service (Note Store Accessor)
=========================================================

What:  Owner-scoped CRUD against the `named_notes` table.
Why:   Keeps every persistence rule (ownership, uniqueness, not-found
       detection) in one place, independent of HTTP concerns.
How:   Each method takes a request-scoped session and an already resolved
       owner id. Every store round-trip is bounded by `timeout_seconds`.
Who:   Called by the note route handlers.

Error Handling Strategy:
    Missing rows raise NotFoundError. Anything else (driver errors, lost
    connections, timeouts) is logged with context and re-raised as
    DatabaseError; the client only ever sees a generic message. Nothing is
    retried.

Create-or-ignore:
    create() inserts with ON CONFLICT (user_id, name) DO NOTHING. A duplicate
    name is a successful no-op that keeps the existing content. This is not
    an upsert. The unique constraint, not application locking, decides the
    winner when several requests create the same name concurrently.

Design Decision:
    NoteService is stateless apart from its timeout. The session is passed
    per call, so one instance serves every request.
"""

import asyncio
import logging
from typing import Any, Awaitable, List, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import DatabaseError, NotFoundError
from notekeeper.models.note import NamedNote

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NoteService:
    """
    Business logic layer for named notes.

    Responsibilities:
        - list_names(): note names of one owner, ascending
        - create(): create-or-ignore
        - get(): single note by exact name
        - update(): replace content of an existing note
        - delete(): remove an existing note
    """

    def __init__(self, timeout_seconds: float = 3.0):
        self.timeout_seconds = timeout_seconds

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)

    def _store_error(self, operation: str, exc: Exception, **context: Any) -> DatabaseError:
        if isinstance(exc, asyncio.TimeoutError):
            logger.error("%s timed out after %.1fs %s", operation, self.timeout_seconds, context)
        else:
            logger.error("%s failed: %s %s", operation, str(exc), context, exc_info=True)
        context["error_type"] = type(exc).__name__
        return DatabaseError(context={"operation": operation, **context})

    async def list_names(self, db: AsyncSession, owner_id: int) -> List[str]:
        """
        Names of all notes owned by `owner_id`, ascending.

        Query plan:
            SELECT name FROM named_notes WHERE user_id = :owner ORDER BY name
            → served by the (user_id, name) unique index

        Returns an empty list when the owner has no notes.
        """
        try:
            result = await self._bounded(
                db.execute(
                    select(NamedNote.name)
                    .where(NamedNote.user_id == owner_id)
                    .order_by(NamedNote.name.asc())
                )
            )
            return list(result.scalars().all())
        except Exception as e:
            raise self._store_error("list notes", e, owner_id=owner_id)

    async def create(self, db: AsyncSession, owner_id: int, name: str, content: str) -> bool:
        """
        Insert a note unless the owner already has one with this name.

        The name is stored exactly as given; callers validate it beforehand.

        Returns:
            True when a row was inserted, False when the name already existed.
        """
        stmt = (
            self._insert_for(db)
            .values(user_id=owner_id, name=name, content=content)
            .on_conflict_do_nothing(index_elements=["user_id", "name"])
        )

        async def _insert() -> int:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount

        try:
            inserted = await self._bounded(_insert())
        except Exception as e:
            raise self._store_error("create note", e, owner_id=owner_id)

        if not inserted:
            logger.info("Note already exists, create ignored (owner=%s)", owner_id)
        return bool(inserted)

    async def get(self, db: AsyncSession, owner_id: int, name: str) -> NamedNote:
        """
        Fetch one note by exact, case-sensitive name.

        Raises:
            NotFoundError: No such note for this owner (including names that
                           exist for other owners)
            DatabaseError: Query execution failed
        """
        try:
            result = await self._bounded(
                db.execute(
                    select(NamedNote).where(
                        NamedNote.user_id == owner_id,
                        NamedNote.name == name,
                    )
                )
            )
            note = result.scalar_one_or_none()
        except Exception as e:
            raise self._store_error("get note", e, owner_id=owner_id)

        if note is None:
            raise NotFoundError(resource="note")
        return note

    async def update(self, db: AsyncSession, owner_id: int, name: str, content: str) -> None:
        """
        Replace the content of an existing note. Never creates a row.

        Raises:
            NotFoundError: No row matched (owner, name)
        """
        stmt = (
            update(NamedNote)
            .where(NamedNote.user_id == owner_id, NamedNote.name == name)
            .values(content=content)
            .execution_options(synchronize_session=False)
        )
        matched = await self._write(db, stmt, "update note", owner_id)
        if matched == 0:
            raise NotFoundError(resource="note")

    async def delete(self, db: AsyncSession, owner_id: int, name: str) -> None:
        """
        Remove an existing note.

        Raises:
            NotFoundError: No row matched (owner, name)
        """
        stmt = (
            delete(NamedNote)
            .where(NamedNote.user_id == owner_id, NamedNote.name == name)
            .execution_options(synchronize_session=False)
        )
        matched = await self._write(db, stmt, "delete note", owner_id)
        if matched == 0:
            raise NotFoundError(resource="note")

    async def _write(self, db: AsyncSession, stmt, operation: str, owner_id: int) -> int:
        """Execute a write, commit it, and return the affected row count."""

        async def _execute() -> int:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount

        try:
            return await self._bounded(_execute())
        except Exception as e:
            raise self._store_error(operation, e, owner_id=owner_id)

    @staticmethod
    def _insert_for(db: AsyncSession):
        """
        Dialect-specific INSERT supporting ON CONFLICT DO NOTHING.

        PostgreSQL in production, SQLite in the test-suite.
        """
        bind = db.bind
        if bind is not None and bind.dialect.name == "sqlite":
            return sqlite.insert(NamedNote)
        return postgresql.insert(NamedNote)
