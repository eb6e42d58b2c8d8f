"""
Name Registry - Registry Route Handlers
========================================

What:  POST /api/store, GET /api/get/{id}, GET /api/all.
How:   Extract input, delegate to NameService, return the response model.
       Errors are raised as RegistryError subclasses and formatted by the
       global handlers registered in main.py.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from name_registry.dependencies import get_db_session, get_name_service
from name_registry.schemas.name_record import (
    ErrorResponse,
    NameListResponse,
    NameRecordResponse,
    StoreNameRequest,
    StoreNameResponse,
)
from name_registry.services.name_service import NameService, parse_record_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Registry"])


@router.post(
    "/store",
    response_model=StoreNameResponse,
    responses={
        400: {"description": "Missing id/name or name too long", "model": ErrorResponse},
        500: {"description": "Datastore failure", "model": ErrorResponse},
    },
    summary="Store or overwrite a name for an id",
)
async def store_name(
    payload: StoreNameRequest,
    db: AsyncSession = Depends(get_db_session),
    service: NameService = Depends(get_name_service),
) -> StoreNameResponse:
    """
    Upsert `(id, name)`. The name is trimmed before it is stored and echoed
    back; storing an existing id replaces its name.
    """
    return await service.store_name(db=db, record_id=payload.id, name=payload.name)


@router.get(
    "/get/{record_id}",
    response_model=NameRecordResponse,
    responses={
        400: {"description": "Id is not an integer", "model": ErrorResponse},
        404: {"description": "No name stored for this id", "model": ErrorResponse},
        500: {"description": "Datastore failure", "model": ErrorResponse},
    },
    summary="Get the name stored for an id",
)
async def get_name(
    record_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: NameService = Depends(get_name_service),
) -> NameRecordResponse:
    # Typed as str so a bad segment becomes our 400, not FastAPI's 422
    return await service.get_name(db=db, record_id=parse_record_id(record_id))


@router.get(
    "/all",
    response_model=NameListResponse,
    responses={500: {"description": "Datastore failure", "model": ErrorResponse}},
    summary="List every stored name, ordered by id",
)
async def list_names(
    db: AsyncSession = Depends(get_db_session),
    service: NameService = Depends(get_name_service),
) -> NameListResponse:
    return await service.list_names(db=db)
