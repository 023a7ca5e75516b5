"""
Pytest configuration and shared fixtures for the songs API tests.

Provides:
- Required environment defaults so settings load without a real .env
- An in-memory fake asyncpg connection backing a ``songs`` table
- FastAPI TestClient with the database dependency overridden
- Sample data factories
"""

import logging
import os
from collections.abc import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; these must be set before the app loads.
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_USER", "songs")
os.environ.setdefault("DB_PASSWORD", "songs")
os.environ.setdefault("DB_NAME", "songs_test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from backend.app import main as app_main  # noqa: E402
from backend.app.db.postgres_async import get_pg  # noqa: E402
from backend.app.main import app  # noqa: E402

# ============================================================================
# Logging Configuration for Tests
# ============================================================================


def setup_test_logging():
    """Configure console logging for test runs."""
    logger = logging.getLogger("tests")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-20s | %(funcName)-25s | %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


test_logger = setup_test_logging()


def pytest_configure(config):
    """Pytest configuration hook."""
    config.addinivalue_line("markers", "unit: Fast unit tests with mocked dependencies")


# ============================================================================
# Mock Database Fixtures
# ============================================================================


def create_mock_record(data: dict):
    """
    Create an asyncpg.Record-like object from a dictionary.

    Supports both dict-style access (record['key']) and attribute access
    (record.key), and converts with ``dict(record)`` like a real Record.
    """

    class MockRecord(dict):
        """Mock asyncpg.Record that supports both dict and attribute access."""

        def __init__(self, data):
            super().__init__(data)
            self.__dict__.update(data)

    return MockRecord(data)


@pytest.fixture
def songs_table() -> dict[int, dict]:
    """Backing rows for the fake connection, keyed by id."""
    return {}


@pytest.fixture
def mock_pg_conn(songs_table):
    """
    Fake PostgreSQL connection serving the ``songs`` statements in memory.

    Each asyncpg method is an AsyncMock whose side effect dispatches on the
    SQL text, so tests can also swap ``side_effect`` to inject failures.
    """
    mock_conn = AsyncMock()
    id_counter = {"next": 1}

    async def fetch_side_effect(query, *args, **kwargs):
        sql = " ".join(str(query).upper().split())
        if "FROM SONGS" in sql and "ORDER BY ID" in sql:
            limit, offset = args
            rows = [songs_table[key] for key in sorted(songs_table)]
            return [create_mock_record(row) for row in rows[offset : offset + limit]]
        return []

    async def fetchrow_side_effect(query, *args, **kwargs):
        sql = " ".join(str(query).upper().split())
        if sql.startswith("SELECT TEXT FROM SONGS WHERE ID = $1"):
            row = songs_table.get(args[0])
            return create_mock_record({"text": row["text"]}) if row else None
        return None

    async def fetchval_side_effect(query, *args, **kwargs):
        sql = " ".join(str(query).upper().split())
        if sql.startswith("INSERT INTO SONGS"):
            # SERIAL semantics: ids are never reused, even after deletes.
            song_id = max(id_counter["next"], max(songs_table, default=0) + 1)
            id_counter["next"] = song_id + 1
            title, artist, release_date, text, link, group_name = args
            songs_table[song_id] = {
                "id": song_id,
                "title": title,
                "artist": artist,
                "release_date": release_date,
                "text": text,
                "link": link,
                "group_name": group_name,
            }
            return song_id
        return None

    async def execute_side_effect(query, *args, **kwargs):
        sql = " ".join(str(query).upper().split())
        if sql.startswith("UPDATE SONGS"):
            *values, song_id = args
            row = songs_table.get(song_id)
            if row is None:
                return "UPDATE 0"
            columns = ("title", "artist", "release_date", "text", "link", "group_name")
            row.update(dict(zip(columns, values, strict=True)))
            return "UPDATE 1"
        if sql.startswith("DELETE FROM SONGS"):
            removed = songs_table.pop(args[0], None)
            return f"DELETE {1 if removed else 0}"
        return "SELECT 1"

    mock_conn.fetch = AsyncMock(side_effect=fetch_side_effect)
    mock_conn.fetchrow = AsyncMock(side_effect=fetchrow_side_effect)
    mock_conn.fetchval = AsyncMock(side_effect=fetchval_side_effect)
    mock_conn.execute = AsyncMock(side_effect=execute_side_effect)

    return mock_conn


@pytest.fixture
def override_db_dependencies(mock_pg_conn, monkeypatch):
    """
    Override database dependencies with the fake connection.

    Pool creation in the lifespan is patched out so no PostgreSQL server is
    needed, and ``get_pg`` yields the fake connection.
    """
    monkeypatch.setattr(app_main, "init_pool", AsyncMock(return_value=MagicMock()))
    monkeypatch.setattr(app_main, "close_pool", AsyncMock())

    async def mock_get_pg():
        yield mock_pg_conn

    app.dependency_overrides[get_pg] = mock_get_pg

    yield mock_pg_conn

    app.dependency_overrides.clear()
    test_logger.debug("Cleared database dependency overrides")


# ============================================================================
# Test Client Fixtures
# ============================================================================


@pytest.fixture
def client(override_db_dependencies) -> Generator[TestClient, None, None]:
    """
    Provide a TestClient with the database replaced by the fake connection.

    ``raise_server_exceptions=False`` lets tests assert on 500 responses.
    """
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


# ============================================================================
# Sample Test Data Fixtures
# ============================================================================


@pytest.fixture
def sample_song_payload() -> dict:
    """Valid create/update body in the wire (camelCase) format."""
    return {
        "title": "Test Song",
        "artist": "Test Artist",
        "releaseDate": "2022-01-01",
        "text": "Verse one\n\nVerse two\n\nVerse three",
        "link": "test.com",
    }


@pytest.fixture
def seed_song(songs_table) -> Callable[..., dict]:
    """Insert a row straight into the fake table and return it."""

    def _seed(**overrides) -> dict:
        song_id = overrides.pop("id", max(songs_table, default=0) + 1)
        row = {
            "id": song_id,
            "title": f"Song {song_id}",
            "artist": "Artist",
            "release_date": "2020-01-01",
            "text": "A\n\nB\n\nC",
            "link": f"https://example.com/{song_id}",
            "group_name": None,
        }
        row.update(overrides)
        songs_table[song_id] = row
        return row

    return _seed


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Hook to log failed tests with the first lines of their report."""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        test_logger.error(f"[FAIL] {item.nodeid}")
        if report.longrepr:
            for line in str(report.longreprtext).split("\n")[:5]:
                if line.strip():
                    test_logger.error(f"  {line}")
