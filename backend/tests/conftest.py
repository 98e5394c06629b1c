"""
NoteKeeper Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Reusable test infrastructure (mocked sessions, a real SQLite store,
       an HTTP client bound to the app).

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── test_settings: Settings pointing at a per-test SQLite file
    ├── database: Database handle with users/named_notes created and seeded
    ├── app: FastAPI app wired to that handle
    └── test_client: HTTPX AsyncClient driving the app in-process
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep the import-time app away from any real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from notekeeper.config import Settings  # noqa: E402
from notekeeper.database import Base, Database  # noqa: E402
from notekeeper.main import create_app  # noqa: E402
from notekeeper.models.note import NamedNote  # noqa: E402,F401
from notekeeper.models.user import User  # noqa: E402

ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
        result = await note_service.get(mock_db_session, 1, "todo")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.bind = None
    return session


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notekeeper.db'}",
        store_timeout_seconds=3.0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """
    A real store: both tables created, two users seeded.

    alice (id=1, token ALICE_TOKEN), bob (id=2, token BOB_TOKEN), and a
    tokenless user carol (id=3).
    """
    db = Database.from_settings(test_settings)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with db.session_factory() as session:
        session.add_all([
            User(id=1, username="alice", token=ALICE_TOKEN),
            User(id=2, username="bob", token=BOB_TOKEN),
            User(id=3, username="carol", token=None),
        ])
        await session.commit()

    yield db
    await db.dispose()


@pytest.fixture
def app(test_settings, database):
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        response = await test_client.get("/notes", headers=auth(ALICE_TOKEN))
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
