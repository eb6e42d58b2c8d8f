"""
Name Registry - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set BEFORE any name_registry import so the
       module-level Settings singleton never points at a developer's database.

Fixture Hierarchy:
    Unit tests (no database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── mock_store:      NameStore with AsyncMock methods

    Integration tests (real SQLite file per test):
    ├── test_settings:   Settings pointing at tmp_path/names.db
    ├── test_app:        create_app(test_settings)
    └── test_client:     HTTPX AsyncClient with the app lifespan running
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SQLITE_FILENAME"] = "test_names.db"

from types import SimpleNamespace
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from name_registry.config import Settings
from name_registry.main import create_app
from name_registry.storage.base import NameStore


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.commit.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_store():
    """A NameStore whose data-access methods are AsyncMocks."""
    store = MagicMock(spec=NameStore)
    store.upsert = AsyncMock(return_value=None)
    store.get = AsyncMock(return_value=None)
    store.list_all = AsyncMock(return_value=[])
    return store


@pytest.fixture
def make_record():
    """Factory for row-like objects with the NameRecord attributes."""
    def _make(record_id: int, name: str, created_at: datetime = datetime(2024, 1, 15, 12, 0, 0)):
        return SimpleNamespace(id=record_id, name=name, created_at=created_at)
    return _make


# ══════════════════════════════════════════════════════════════════════════
# Integration Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings bound to a fresh SQLite file in the test's tmp_path."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{(tmp_path / 'names.db').as_posix()}",
        log_level="WARNING",
    )


@pytest.fixture
def test_app(test_settings):
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here: the database is connected before the first request and
    disposed after the test.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
