"""
Name Registry - FastAPI Dependencies
=====================================

What:  Per-request access to the process-scoped Database and NameService.
How:   Both are created by the lifespan in main.py and attached to app.state;
       these functions read them back through the incoming Request.

Example usage in a route:
    @router.get("/api/all")
    async def list_all(
        db: AsyncSession = Depends(get_db_session),
        service: NameService = Depends(get_name_service),
    ):
        return await service.list_names(db)
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from name_registry.database import Database
from name_registry.services.name_service import NameService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_name_service(request: Request) -> NameService:
    return request.app.state.name_service


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One AsyncSession per request, rolled back on error and always closed."""
    async with get_database(request).session() as session:
        yield session
