"""
Name Registry - Networked Backend (PostgreSQL)
===============================================

What:  NameStore over asyncpg with a sized connection pool.
How:   INSERT ... ON CONFLICT (id) DO UPDATE SET name = EXCLUDED.name.
       Concurrent writes to the same id are serialized by PostgreSQL's row
       lock on the conflicting tuple; the service adds no locking of its own.

Connection Pooling:
    pool_size:      persistent connections for normal load
    max_overflow:   temporary connections for spikes
    pool_pre_ping:  validates connections before use (survives DB restarts)
    pool_recycle:   recycles connections hourly to avoid stale sockets
"""

from typing import Any, Dict

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.sql import Executable

from name_registry.config import Settings
from name_registry.models.name_record import NameRecord
from name_registry.storage.base import NameStore


class PostgresNameStore(NameStore):
    backend = "postgresql"

    def build_upsert(self, record_id: int, name: str) -> Executable:
        stmt = pg_insert(NameRecord).values(id=record_id, name=name)
        return stmt.on_conflict_do_update(
            index_elements=[NameRecord.id],
            set_={"name": stmt.excluded.name},
        )

    @classmethod
    def engine_options(cls, settings: Settings) -> Dict[str, Any]:
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "pool_recycle": 3600,
            "echo": settings.log_level == "DEBUG",
        }
