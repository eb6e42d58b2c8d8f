"""
Name Registry - Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the registry's failure modes.
Why:   Each exception maps to exactly one HTTP status, so the service layer
       can raise and let the global handlers in main.py format the response.
How:   Every exception carries a human-readable message and an optional
       context dict. The context is logged server-side, never returned.

Exception Hierarchy:
    RegistryError (base)
    ├── ValidationError  → 400 Bad Request (client can fix)
    ├── NotFoundError    → 404 Not Found
    ├── StorageError     → 500 Internal Server Error (generic message)
    └── StartupError     → fatal at boot, process exits non-zero
"""

from typing import Any, Dict, Optional


class RegistryError(Exception):
    """
    Base exception for all Name Registry errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RegistryError):
    """
    Raised when client input fails validation.

    When:    Missing id or name, id of 0, blank name, name over 100 characters,
             non-integer id in the path, malformed JSON body.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(RegistryError):
    """
    Raised when no record exists for the requested id.

    SQLAlchemy returns None for a missing row; the service converts that into
    this exception so the route stays free of status-code logic.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "No name found for this ID",
        resource_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StorageError(RegistryError):
    """
    Raised when a datastore operation fails.

    When:    Connection lost, constraint violation, locked or corrupt database file.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The driver error
    is kept in `context` and logged by the handler.
    """

    def __init__(
        self,
        message: str = "Failed to access the datastore",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupError(RegistryError):
    """
    Raised when the datastore cannot be reached (or configured) at boot.

    There is no retry or backoff. The lifespan re-raises it, uvicorn aborts
    startup, and the process exits with a non-zero status.
    """

    def __init__(
        self,
        message: str = "Could not connect to the datastore",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
