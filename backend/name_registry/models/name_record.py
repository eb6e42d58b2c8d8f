"""
Name Registry - NameRecord SQLAlchemy Model
============================================

What:  ORM model for the single registry table (default name: `names`).
Who:   Queried by the NameStore backends; created at startup by Database.connect().

Table Design:
    - id: client-supplied integer primary key, never auto-generated.
      INTEGER on SQLite so the column aliases the rowid; BIGINT elsewhere so
      the full signed 64-bit range the API accepts fits.
    - name: trimmed display name, at most 100 characters.
    - created_at: set by the datastore on first insert. The upsert only
      rewrites `name`, so an overwrite keeps the original timestamp.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from name_registry.config import settings
from name_registry.database import Base

NAME_MAX_LENGTH = 100


class NameRecord(Base):
    """One id → name mapping."""

    __tablename__ = settings.table_name

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        autoincrement=False,
    )

    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )

    def __repr__(self) -> str:
        return f"<NameRecord(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"
