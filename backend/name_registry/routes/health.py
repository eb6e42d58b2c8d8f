"""
Name Registry - Health Check Route
===================================

What:  Liveness probe for load balancers and container health checks.
How:   Reports process status and the current time. The datastore is never
       consulted, so /health stays OK even while the database is down; a
       failing datastore shows up as 500s on the /api routes instead.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from name_registry import __version__
from name_registry.schemas.name_record import HealthResponse

router = APIRouter(tags=["Health"])

# Module-level: set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
