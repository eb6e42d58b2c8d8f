"""
Name Registry - Application Package Initializer
================================================

What: Marks the `name_registry` directory as a Python package.
Who:  Used by uvicorn (`name_registry.main:app`), pytest, and `python -m name_registry`.

Architecture Note:
    The service is a thin layered wrapper over a SQL datastore:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      NameService (Validation)       │  ← Input rules, error translation
    ├─────────────────────────────────────┤
    │   NameStore backends (Data Access)  │  ← SQLite / PostgreSQL upsert + reads
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy engine + sessions
    └─────────────────────────────────────┘

    Routes never touch SQL, and the service never knows which engine is behind
    the store. Swapping SQLite for PostgreSQL is a configuration change.
"""

__version__ = "1.0.0"
