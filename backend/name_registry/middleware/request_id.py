"""
Name Registry - Request ID Middleware
======================================

What:  Tags every request with a short correlation id.
How:   Reuses the client's X-Request-ID header when it is a plain token
       (letters, digits, `.`, `_`, `-`; at most 64 chars), otherwise
       generates 8 hex chars. The id is stored in a ContextVar (read by the
       access logger and the exception handlers), on request.state, and
       echoed back in the X-Request-ID response header.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(header_value: Optional[str]) -> str:
    """Return the client's id if it is safe to log and echo, else a fresh one."""
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns and propagates a request id for log correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        request_id_var.set(rid)
        # request.state as well: the catch-all error handler runs outside this
        # middleware's context but shares the request scope
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
