"""
NoteKeeper Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       mapping and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`notekeeper.main:app` or `python -m notekeeper`) and tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ Logging  │→│  CORS (OPTIONS) │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌────────────────────┐ ┌───────────┐  │
    │  │ GET /me  │ │ /notes, /notes/{n} │ │GET /health│  │
    │  └──────────┘ └────────────────────┘ └───────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ 400 │ 401 │ 404 │ 405+Allow │ 500 (generic)  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → open the pool handle (unless injected)
              → optionally ensure the named_notes table
    Shutdown: dispose the pool handle this app opened

Unexpected exceptions are converted to the generic 500 by the innermost
UnhandledErrorMiddleware, so they still pass through the three layers above.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notekeeper import __version__
from notekeeper.config import Settings, get_settings
from notekeeper.database import Database, ensure_schema
from notekeeper.exceptions import (
    AuthenticationError,
    AuthResolverError,
    DatabaseError,
    MethodNotAllowedError,
    NoteKeeperError,
    NotFoundError,
    ValidationError,
)
from notekeeper.middleware.cors import PermissiveCORSMiddleware
from notekeeper.middleware.errors import UnhandledErrorMiddleware
from notekeeper.middleware.logging import RequestLoggingMiddleware
from notekeeper.middleware.request_id import RequestIDMiddleware, request_id_var
from notekeeper.routes import health, me, notes
from notekeeper.services.auth_service import CredentialResolver
from notekeeper.services.note_service import NoteService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # We emit our own access log line
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Acquire the store handle on startup and release it on shutdown.

    A handle injected through create_app(database=...) belongs to the caller
    and is left open.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("NoteKeeper %s starting up...", __version__)

    owns_db = app.state.db is None
    if owns_db:
        app.state.db = Database.from_settings(settings)

    if settings.auto_create_schema:
        await ensure_schema(app.state.db)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NoteKeeper shutting down...")
    if owns_db:
        await app.state.db.dispose()
        app.state.db = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message, "request_id": request_id_var.get("")}


def allowed_methods_for(path: str) -> Tuple[str, ...]:
    """Supported methods for a path shape; empty for paths outside the route table."""
    if path == "/me":
        return me.ME_METHODS
    if path == "/notes":
        return notes.NOTES_METHODS
    if path.startswith("/notes/"):
        return notes.NOTE_METHODS
    return ()


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse body.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        NotFoundError                            → 404
        MethodNotAllowedError                    → 405 + Allow
        AuthResolverError / DatabaseError        → 500 (generic message)
        NoteKeeperError (base)                   → 500
        StarletteHTTPException                   → 404 / 405 + Allow by path shape
        Exception (fallback)                     → 500

    Security: internal details (driver errors, SQL, tokens) are logged
    server-side only and never appear in a response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_error_body("validation_error", "invalid request"))

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        return JSONResponse(
            status_code=405,
            content=_error_body("method_not_allowed", exc.message),
            headers={"Allow": exc.allow_header},
        )

    @app.exception_handler(AuthResolverError)
    async def handle_auth_resolver_error(request: Request, exc: AuthResolverError):
        logger.error("[%s] Credential lookup failed | Context: %s", request_id_var.get(""), exc.context)
        return JSONResponse(status_code=500, content=_error_body("server_error", "internal error"))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return JSONResponse(status_code=500, content=_error_body("server_error", "internal error"))

    @app.exception_handler(NoteKeeperError)
    async def handle_app_error(request: Request, exc: NoteKeeperError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=_error_body("server_error", "internal error"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown paths, and verbs no explicit 405 route lists (PROPFIND, TRACE, ...)
        headers = getattr(exc, "headers", None)
        if exc.status_code == 405:
            allowed = allowed_methods_for(request.url.path)
            if allowed:
                headers = {**(headers or {}), "Allow": ", ".join(allowed)}
            return JSONResponse(
                status_code=405,
                content=_error_body("method_not_allowed", "method not allowed"),
                headers=headers,
            )

        code = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(code, str(exc.detail)),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "internal error"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the process-wide settings
        database: Pre-built store handle (tests); when omitted the lifespan
                  opens one from `settings` and closes it on shutdown

    Returns: Fully configured FastAPI instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="NoteKeeper API",
        description="Bearer-token authenticated storage for per-user named text notes.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = database
    app.state.credential_resolver = CredentialResolver(settings.store_timeout_seconds)
    app.state.note_service = NoteService(settings.store_timeout_seconds)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → CORS → Errors → routes
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(PermissiveCORSMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(me.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# uvicorn expects `notekeeper.main:app` to be importable
app = create_app()
