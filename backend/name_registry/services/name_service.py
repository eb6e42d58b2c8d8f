"""
Name Registry - Name Service (Validation & Data-Access Orchestration)
======================================================================

What:  The four registry operations: store, get, list (health lives in its route).
Why:   Keeps input rules and datastore error translation out of the HTTP layer.
How:   Validates inputs, delegates SQL to the configured NameStore backend,
       and converts SQLAlchemy failures into StorageError.
Who:   Called by routes/registry.py with a per-request AsyncSession.

Error Handling Strategy:
    - Bad input              → ValidationError (400), nothing is written
    - Missing record         → NotFoundError (404), not logged as a failure
    - Any SQLAlchemyError    → StorageError (500), driver detail kept in context
    No retries: a datastore failure surfaces on the request that hit it.
"""

import logging
import re
from typing import Any, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from name_registry.exceptions import NotFoundError, StorageError, ValidationError
from name_registry.models.name_record import NAME_MAX_LENGTH
from name_registry.schemas.name_record import (
    NameListResponse,
    NameRecordItem,
    NameRecordResponse,
    StoreNameResponse,
)
from name_registry.storage.base import NameStore

logger = logging.getLogger(__name__)

# Signed 64-bit: the widest integer both SQLite and BIGINT columns can hold
ID_MIN = -(2 ** 63)
ID_MAX = 2 ** 63 - 1

_ID_PATTERN = re.compile(r"-?\d+")


def validate_store_input(record_id: Optional[int], name: Optional[Any]) -> Tuple[int, str]:
    """
    Apply the Store input rules and return the normalized (id, name) pair.

    Rules:
        - id and name must both be present; an id of 0 counts as missing
        - name must be at most NAME_MAX_LENGTH characters as sent, before trimming
        - name is trimmed; a blank name counts as missing
        - id must fit in a signed 64-bit integer

    Raises:
        ValidationError: on the first rule that fails
    """
    if not record_id or name is None:
        raise ValidationError(message="ID and name are required")
    if not isinstance(name, str):
        raise ValidationError(message="Name must be a string", field="name")

    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            message=f"Name too long (max {NAME_MAX_LENGTH} characters)",
            field="name",
            context={"length": len(name)},
        )

    trimmed = name.strip()
    if not trimmed:
        raise ValidationError(message="ID and name are required", field="name")
    if not ID_MIN <= record_id <= ID_MAX:
        raise ValidationError(message="ID out of range", field="id")

    return record_id, trimmed


def parse_record_id(raw: str) -> int:
    """
    Parse an id taken from a URL path segment.

    Only an optional minus sign followed by ASCII digits is accepted, so
    "12abc", "1.5", " 7" and "1e3" are all rejected.

    Raises:
        ValidationError: "Invalid ID format" for anything else or out-of-range values
    """
    if not _ID_PATTERN.fullmatch(raw):
        raise ValidationError(message="Invalid ID format", field="id", context={"raw": raw})
    record_id = int(raw)
    if not ID_MIN <= record_id <= ID_MAX:
        raise ValidationError(message="Invalid ID format", field="id", context={"raw": raw})
    return record_id


class NameService:
    """
    Business logic for the registry, bound to one NameStore backend.

    The service holds no per-request state; the session is passed to each
    call, so one instance is shared by all requests for the process lifetime.
    """

    def __init__(self, store: NameStore):
        self.store = store

    async def store_name(
        self,
        db: AsyncSession,
        record_id: Optional[int],
        name: Optional[Any],
    ) -> StoreNameResponse:
        """
        Validate and upsert one (id, name) pair.

        Returns:
            StoreNameResponse echoing the stored id and trimmed name

        Raises:
            ValidationError: input rejected, nothing written
            StorageError:    upsert or commit failed
        """
        record_id, trimmed = validate_store_input(record_id, name)

        try:
            await self.store.upsert(db, record_id, trimmed)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error storing id %s: %s", record_id, str(e))
            raise StorageError(
                message="Failed to store data",
                context={"id": record_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Stored: ID=%s, Name=%s", record_id, trimmed)
        return StoreNameResponse(id=record_id, name=trimmed)

    async def get_name(self, db: AsyncSession, record_id: int) -> NameRecordResponse:
        """
        Look up the record for one id.

        Raises:
            NotFoundError: no record for this id
            StorageError:  query failed
        """
        try:
            record = await self.store.get(db, record_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching id %s: %s", record_id, str(e))
            raise StorageError(
                message="Failed to retrieve data",
                context={"id": record_id, "error_type": type(e).__name__},
            ) from e

        if record is None:
            raise NotFoundError(resource_id=record_id)

        return NameRecordResponse(
            id=record.id,
            name=record.name,
            created_at=record.created_at,
        )

    async def list_names(self, db: AsyncSession) -> NameListResponse:
        """Return every record ordered by ascending id."""
        try:
            records = await self.store.list_all(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing names: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to retrieve data",
                context={"error_type": type(e).__name__},
            ) from e

        items = [NameRecordItem.model_validate(record) for record in records]
        return NameListResponse(count=len(items), data=items)
