"""
NoteKeeper Backend — Note Service Unit Tests
==============================================

What:  Tests for NoteService (list, create, get, update, delete).
How:   Mock DB sessions; no real database. Behaviour against a real store
       is covered in test_notes_api.py.

What we test:
    ✅ Not-found detection from empty results and zero affected rows
    ✅ Writes commit; not-found writes still raise
    ✅ Driver errors and timeouts become DatabaseError
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from notekeeper.exceptions import DatabaseError, NotFoundError
from notekeeper.services.note_service import NoteService


def _rowcount_result(count):
    result = MagicMock()
    result.rowcount = count
    return result


class TestNoteServiceList:

    def setup_method(self):
        self.service = NoteService(timeout_seconds=0.5)

    @pytest.mark.asyncio
    async def test_list_names_empty(self, mock_db_session):
        """An owner without notes gets an empty list, not an error."""
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_names(mock_db_session, 1) == []

    @pytest.mark.asyncio
    async def test_list_names_returns_query_order(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = ["a", "b", "c"]
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_names(mock_db_session, 1) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_list_names_store_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("select", {}, Exception("gone"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.list_names(mock_db_session, 1)

        assert exc_info.value.context["operation"] == "list notes"


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService(timeout_seconds=0.5)

    @pytest.mark.asyncio
    async def test_create_inserts_and_commits(self, mock_db_session):
        mock_db_session.execute.return_value = _rowcount_result(1)

        inserted = await self.service.create(mock_db_session, 1, "todo", "milk")

        assert inserted is True
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_duplicate_is_ignored(self, mock_db_session):
        """ON CONFLICT DO NOTHING affects zero rows; that is still success."""
        mock_db_session.execute.return_value = _rowcount_result(0)

        inserted = await self.service.create(mock_db_session, 1, "todo", "eggs")

        assert inserted is False

    @pytest.mark.asyncio
    async def test_create_timeout_is_store_error(self, mock_db_session):
        async def slow_execute(*args, **kwargs):
            await asyncio.sleep(5)

        mock_db_session.execute = AsyncMock(side_effect=slow_execute)
        service = NoteService(timeout_seconds=0.01)

        with pytest.raises(DatabaseError) as exc_info:
            await service.create(mock_db_session, 1, "todo", "milk")

        assert exc_info.value.context["error_type"] == "TimeoutError"
        mock_db_session.commit.assert_not_awaited()


class TestNoteServiceGet:

    def setup_method(self):
        self.service = NoteService(timeout_seconds=0.5)

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session):
        note = MagicMock(id=3, user_id=1, content="milk")
        note.name = "todo"
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = note
        mock_db_session.execute.return_value = mock_result

        assert await self.service.get(mock_db_session, 1, "todo") is note

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError):
            await self.service.get(mock_db_session, 1, "missing")

    @pytest.mark.asyncio
    async def test_get_store_error_is_not_not_found(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("pool closed"))

        with pytest.raises(DatabaseError):
            await self.service.get(mock_db_session, 1, "todo")


class TestNoteServiceUpdateDelete:

    def setup_method(self):
        self.service = NoteService(timeout_seconds=0.5)

    @pytest.mark.asyncio
    async def test_update_existing(self, mock_db_session):
        mock_db_session.execute.return_value = _rowcount_result(1)

        await self.service.update(mock_db_session, 1, "todo", "bread")

        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _rowcount_result(0)

        with pytest.raises(NotFoundError):
            await self.service.update(mock_db_session, 1, "missing", "bread")

    @pytest.mark.asyncio
    async def test_delete_existing(self, mock_db_session):
        mock_db_session.execute.return_value = _rowcount_result(1)

        await self.service.delete(mock_db_session, 1, "todo")

        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _rowcount_result(0)

        with pytest.raises(NotFoundError):
            await self.service.delete(mock_db_session, 1, "missing")

    @pytest.mark.asyncio
    async def test_delete_store_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("delete", {}, Exception("gone"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.delete(mock_db_session, 1, "todo")

        assert exc_info.value.context["operation"] == "delete note"
