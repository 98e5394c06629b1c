"""
NoteKeeper Backend — Route Helper, Health and Config Tests
============================================================

What:  Note-name extraction from raw paths, the health endpoint, and
       settings parsing.
"""

import pytest
from starlette.requests import Request

from notekeeper.config import Settings
from notekeeper.exceptions import ValidationError
from notekeeper.routes.notes import extract_note_name


def _request(raw_path: bytes, name: str = "") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": raw_path.decode("latin-1"),
        "raw_path": raw_path,
        "headers": [],
        "query_string": b"",
        "path_params": {"name": name},
    })


class TestExtractNoteName:

    @pytest.mark.parametrize(
        "raw_path, expected",
        [
            (b"/notes/todo", "todo"),
            (b"/notes/two%20words", "two words"),
            (b"/notes/a%2Fb", "a/b"),
            (b"/notes/caf%C3%A9", "café"),
            (b"/notes/todo?x=1", "todo"),
            (b"/notes/%2520", "%20"),
        ],
    )
    def test_decodes_once(self, raw_path, expected):
        assert extract_note_name(_request(raw_path)) == expected

    @pytest.mark.parametrize(
        "raw_path",
        [b"/notes/", b"/notes/?x=1", b"/notes/%zz", b"/notes/abc%2", b"/notes/%ff"],
    )
    def test_rejects_empty_or_unparseable(self, raw_path):
        with pytest.raises(ValidationError):
            extract_note_name(_request(raw_path))

    def test_falls_back_to_path_param(self):
        request = Request({
            "type": "http",
            "method": "GET",
            "path": "/notes/todo",
            "headers": [],
            "query_string": b"",
            "path_params": {"name": "todo"},
        })

        assert extract_note_name(request) == "todo"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy_when_pool_is_gone(self, app, test_client):
        class DeadEngine:
            def connect(self):
                raise ConnectionRefusedError("db down")

        class DeadDatabase:
            engine = DeadEngine()

        app.state.db = DeadDatabase()

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.backend_port == 8080
        assert settings.store_timeout_seconds == 3.0

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")

        assert Settings(_env_file=None).backend_port == 9090

    def test_log_level_is_normalised(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, log_level="chatty")


class TestLifespan:

    @pytest.mark.asyncio
    async def test_opens_ensures_schema_and_disposes(self, tmp_path):
        from sqlalchemy import inspect

        from notekeeper.main import create_app, lifespan

        settings = Settings(
            _env_file=None,
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'lifespan.db'}",
            auto_create_schema=True,
            log_level="WARNING",
        )
        app = create_app(settings=settings)

        async with lifespan(app):
            db = app.state.db
            assert db is not None
            async with db.engine.connect() as conn:
                tables = await conn.run_sync(lambda c: inspect(c).get_table_names())
            assert "named_notes" in tables
            assert "users" not in tables

        assert app.state.db is None
