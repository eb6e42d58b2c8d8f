"""
Name Registry - Request Logging Middleware
===========================================

What:  One access-log line per request: method, path, status, duration,
       request id and client address. Lookups by id (/api/get/{record_id})
       also carry the raw path id as ` id=<value>`.
Who:   Logger "name_registry.access", configured by setup_logging() in main.py.

Log level follows the status class so alerting can key off severity:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from name_registry.middleware.request_id import request_id_var

logger = logging.getLogger("name_registry.access")

# Polled by load balancers every few seconds; logging them drowns real traffic
SKIP_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        # The router fills path_params into the shared scope during call_next
        record_id = request.path_params.get("record_id")
        message = "%s %s %d %.1fms [%s] from %s"
        args = [request.method, request.url.path, status, duration_ms, rid, client_ip]
        if record_id is not None:
            message += " id=%s"
            args.append(record_id)

        logger.log(
            log_level,
            message,
            *args,
            extra={
                "request_id": rid,
                "record_id": record_id,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
