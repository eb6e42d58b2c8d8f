"""
Name Registry - Pydantic Request/Response Schemas
==================================================

What:  The JSON contract of the HTTP API.
Why:   FastAPI validates request bodies and serializes responses from these
       models, and generates the OpenAPI docs from them.

Request fields are deliberately loose (both optional). Presence, truthiness
and length rules live in NameService so that every rejection is a 400 with a
readable message rather than a schema error listing.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StoreNameRequest(BaseModel):
    """Body of POST /api/store."""
    id: Optional[int] = Field(default=None, description="Record identifier (non-zero integer)")
    name: Optional[str] = Field(default=None, description="Name to store (1-100 chars after trimming)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StoreNameResponse(BaseModel):
    """Echo of what was persisted."""
    success: bool = True
    message: str = Field(default="Name stored successfully")
    id: int
    name: str


class NameRecordResponse(BaseModel):
    """Returned by GET /api/get/{id}."""
    success: bool = True
    id: int
    name: str
    created_at: datetime


class NameRecordItem(BaseModel):
    """One row of GET /api/all."""
    id: int
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class NameListResponse(BaseModel):
    """All records, ordered by ascending id."""
    success: bool = True
    count: int = Field(description="Number of records in `data`")
    data: List[NameRecordItem]


class ErrorResponse(BaseModel):
    """
    Consistent error body for every failure.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Name too long (max 100 characters)",
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness only; the datastore is not consulted."""
    status: str = Field(default="OK")
    timestamp: datetime
    version: str
    uptime_seconds: float
