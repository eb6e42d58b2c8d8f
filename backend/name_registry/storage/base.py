"""
Name Registry - Abstract Storage Interface
===========================================

What:  The data-access contract shared by every datastore backend.
Why:   The embedded-file engine and the networked engine differ only in how
       an upsert is spelled and how the engine is pooled. Everything above
       this layer (service, routes) is written once against NameStore.
How:   Concrete backends implement build_upsert() and engine_options();
       reads are plain SELECTs and are shared here.

Implementations:
    - SQLiteNameStore:   sqlite+aiosqlite (default, single file)
    - PostgresNameStore: postgresql+asyncpg
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from name_registry.config import Settings
from name_registry.models.name_record import NameRecord


class NameStore(ABC):
    """
    Contract:
        - upsert() inserts a new id or rewrites `name` of an existing id.
          `created_at` is never touched by an overwrite.
        - get() returns None on a miss (never raises for "not found").
        - list_all() runs a fresh query each call, ordered by ascending id.
        - Driver errors propagate as SQLAlchemyError; NameService translates them.
    """

    backend: str = ""

    @abstractmethod
    def build_upsert(self, record_id: int, name: str) -> Executable:
        """Dialect-specific INSERT ... ON CONFLICT (id) DO UPDATE SET name."""
        ...

    @classmethod
    @abstractmethod
    def engine_options(cls, settings: Settings) -> Dict[str, Any]:
        """Keyword arguments for create_async_engine on this backend."""
        ...

    async def upsert(self, session: AsyncSession, record_id: int, name: str) -> None:
        await session.execute(self.build_upsert(record_id, name))

    async def get(self, session: AsyncSession, record_id: int) -> Optional[NameRecord]:
        result = await session.execute(
            select(NameRecord).where(NameRecord.id == record_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self, session: AsyncSession) -> List[NameRecord]:
        result = await session.execute(select(NameRecord).order_by(NameRecord.id))
        return list(result.scalars().all())
