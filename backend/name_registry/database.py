"""
Name Registry - Database Engine & Session Management
=====================================================

What:  The process-scoped `Database` handle (async engine + session factory)
       and the declarative `Base` for ORM models.
Why:   One place owns the connection lifecycle: opened once before traffic,
       disposed once on shutdown.
How:   main.py's lifespan builds a Database, awaits connect(), and stores it
       on `app.state.database`. Request handlers get sessions through the
       `get_db_session` dependency in dependencies.py.

Lifecycle:
    connect()  → create engine, create table if missing, verify connectivity
    session()  → per-request AsyncSession (rollback on error, always closed)
    dispose()  → close every pooled connection
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from name_registry.exceptions import StartupError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


class Database:
    """
    Owns the async engine for the lifetime of the process.

    Attributes:
        url:            SQLAlchemy async URL (sqlite+aiosqlite or postgresql+asyncpg)
        engine_options: Extra keyword arguments for create_async_engine
    """

    def __init__(self, url: str, engine_options: Optional[Dict[str, Any]] = None):
        self.url = url
        self.engine_options = engine_options or {}
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def backend_name(self) -> str:
        return make_url(self.url).get_backend_name()

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected. Call connect() during startup.")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """
        Create the engine and make sure the schema exists.

        Runs CREATE TABLE IF NOT EXISTS for every model registered on Base,
        which doubles as the connectivity check: a bad path, refused
        connection or wrong credentials all fail here.

        Raises:
            StartupError: The datastore could not be opened or initialized.
        """
        if self._engine is not None:
            return

        # Importing the model registers its table on Base.metadata
        from name_registry.models import name_record  # noqa: F401

        engine: Optional[AsyncEngine] = None
        try:
            engine = create_async_engine(self.url, **self.engine_options)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            if engine is not None:
                await engine.dispose()
            raise StartupError(
                message=f"Could not connect to the {make_url(self.url).get_backend_name()} datastore",
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        self._engine = engine
        # expire_on_commit=False: rows stay readable after the service commits
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Connected to %s datastore", self.backend_name)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a fresh AsyncSession.

        Writes are committed explicitly by the service so that commit
        failures surface as StorageError. Anything left pending when an
        exception escapes is rolled back.
        """
        if self._session_factory is None:
            raise RuntimeError("Database is not connected. Call connect() during startup.")
        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self) -> None:
        """Close all connections in the pool. Safe to call when never connected."""
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        self._session_factory = None
        await engine.dispose()
