"""
Name Registry - Embedded-File Backend (SQLite)
===============================================

The upsert uses SQLite's ON CONFLICT clause rather than INSERT OR REPLACE.
OR REPLACE deletes the old row and inserts a new one, which would reset
`created_at`; ON CONFLICT DO UPDATE keeps the row and its timestamp.
"""

from typing import Any, Dict

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.sql import Executable

from name_registry.config import Settings
from name_registry.models.name_record import NameRecord
from name_registry.storage.base import NameStore


class SQLiteNameStore(NameStore):
    backend = "sqlite"

    def build_upsert(self, record_id: int, name: str) -> Executable:
        stmt = sqlite_insert(NameRecord).values(id=record_id, name=name)
        return stmt.on_conflict_do_update(
            index_elements=[NameRecord.id],
            set_={"name": stmt.excluded.name},
        )

    @classmethod
    def engine_options(cls, settings: Settings) -> Dict[str, Any]:
        # Single file, single writer: the default pool is fine, no sizing knobs
        return {"echo": settings.log_level == "DEBUG"}
