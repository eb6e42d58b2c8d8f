"""
Name Registry - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routes and the
       static front end; lifespan() owns the datastore connection.
Who:   uvicorn (`uvicorn name_registry.main:app`), `python -m name_registry`, tests.

Lifecycle:
    Startup:
    1. Configure logging
    2. Resolve the datastore URL and pick the NameStore backend
    3. Connect and create the table if missing (failure → StartupError, exit non-zero)
    4. Attach Database and NameService to app.state

    Shutdown:
    1. Dispose the engine, best-effort (errors are logged, not raised)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import make_url

from name_registry import __version__
from name_registry.config import Settings, settings as default_settings
from name_registry.database import Database
from name_registry.exceptions import (
    NotFoundError,
    RegistryError,
    StartupError,
    StorageError,
    ValidationError,
)
from name_registry.middleware.logging import RequestLoggingMiddleware
from name_registry.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from name_registry.models.name_record import NameRecord
from name_registry.routes import health, registry
from name_registry.routes.pages import mount_static
from name_registry.services.name_service import NameService
from name_registry.storage import resolve_backend

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure root logging once per process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout
    (container runtimes capture stdout).
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the datastore before traffic and close it after.

    Raises:
        StartupError: the datastore is unsupported or unreachable. uvicorn
            reports "Application startup failed" and exits non-zero.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("Name Registry %s starting (%s mode)", __version__, config.environment)

    url = config.resolved_database_url
    safe_url = "<invalid url>"
    try:
        store_cls = resolve_backend(url)
        safe_url = make_url(url).render_as_string(hide_password=True)
        # The table is bound when the model module is imported
        if config.table_name != NameRecord.__tablename__:
            raise StartupError(
                message="TABLE_NAME must be set in the environment before name_registry is imported",
                context={"requested": config.table_name, "bound": NameRecord.__tablename__},
            )
        if config.database_url is None and config.is_production:
            try:
                config.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StartupError(
                    message="Could not create the data directory",
                    context={"path": str(config.sqlite_path.parent), "error": str(e)},
                ) from e
        database = Database(url, store_cls.engine_options(config))
        await database.connect()
    except StartupError as e:
        logger.critical("Startup failed: %s | datastore=%s | Context: %s", e.message, safe_url, e.context)
        raise

    app.state.database = database
    app.state.name_service = NameService(store_cls())

    logger.info("Datastore: %s (%s backend)", safe_url, store_cls.backend)
    logger.info("Server running on port %d", config.port)
    logger.info("Access the app at http://localhost:%d", config.port)

    try:
        yield
    finally:
        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Shutting down server...")
        try:
            await database.dispose()
            logger.info("Database connection closed")
        except Exception as e:
            logger.error("Error closing database: %s", str(e))


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(code: str, message: str, rid: str) -> dict:
    return {"success": False, "error": code, "message": message, "request_id": rid}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the ErrorResponse body.

        ValidationError          → 400
        RequestValidationError   → 400 (FastAPI's 422 is never exposed)
        NotFoundError            → 404
        StorageError             → 500, generic message
        RegistryError (base)     → 500
        Exception (fallback)     → 500, stack trace logged
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, rid),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            detail = "malformed request"
        message = f"Invalid request: {detail}"
        logger.warning("[%s] Validation error: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, rid),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = _request_id(request)
        logger.debug("[%s] Not found: %s", rid, exc.context)
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message, rid),
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = _request_id(request)
        # Driver detail stays in the log, never in the response
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message, rid),
        )

    @app.exception_handler(RegistryError)
    async def handle_registry_error(request: Request, exc: RegistryError):
        rid = _request_id(request)
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later.", rid),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        # Runs in ServerErrorMiddleware, outside RequestIDMiddleware
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
                rid,
            ),
            headers={REQUEST_ID_HEADER: rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Build a configured FastAPI instance.

    Args:
        config: Settings to use; defaults to the environment-derived singleton.
                Tests pass their own to point at a temporary database.
    """
    config = config or default_settings

    app = FastAPI(
        title="Name Registry API",
        description="Stores, retrieves and lists id → name mappings.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    wildcard = "*" in config.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else config.cors_origins_list,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(registry.router)
    app.include_router(health.router)
    # Last: the static mount at "/" only catches paths no route claimed
    mount_static(app, Path(config.static_dir))

    return app


# uvicorn expects `name_registry.main:app` to be importable
app = create_app()
