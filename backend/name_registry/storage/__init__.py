"""
Name Registry - Storage Backends
=================================

`create_name_store(url)` picks the NameStore implementation from the backend
name of a SQLAlchemy URL:

    sqlite+aiosqlite:///./names.db            → SQLiteNameStore
    postgresql+asyncpg://user:pw@host/names   → PostgresNameStore
"""

from typing import Dict, Type

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from name_registry.exceptions import StartupError
from name_registry.storage.base import NameStore
from name_registry.storage.postgres import PostgresNameStore
from name_registry.storage.sqlite import SQLiteNameStore

BACKENDS: Dict[str, Type[NameStore]] = {
    SQLiteNameStore.backend: SQLiteNameStore,
    PostgresNameStore.backend: PostgresNameStore,
}


def resolve_backend(url: str) -> Type[NameStore]:
    """
    Map a database URL to its NameStore class.

    Raises:
        StartupError: The URL is malformed or names an unsupported engine.
    """
    try:
        backend = make_url(url).get_backend_name()
    except ArgumentError as e:
        raise StartupError(
            message="DATABASE_URL is not a valid database URL",
            context={"error": str(e)},
        ) from e

    store_cls = BACKENDS.get(backend)
    if store_cls is None:
        raise StartupError(
            message=f"Unsupported database backend '{backend}'",
            context={"supported": sorted(BACKENDS)},
        )
    return store_cls


def create_name_store(url: str) -> NameStore:
    return resolve_backend(url)()


__all__ = [
    "BACKENDS",
    "NameStore",
    "PostgresNameStore",
    "SQLiteNameStore",
    "create_name_store",
    "resolve_backend",
]
