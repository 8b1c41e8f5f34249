"""
Blogdesk Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the collaborators (database
       handle, image host, auth gate), stores them on app.state, and wires
       middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn blogdesk.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routers:                                                │
    │   /api/admin      login, me                              │
    │   /api/blogs      admin CRUD        ┐ router-level       │
    │   /api/categories admin CRUD        ┘ require_admin      │
    │   /api/public     reads + search                         │
    │   /api/files      local image files                      │
    │   /_health        probe                                  │
    │                                                          │
    │  app.state: database, image_host, auth_gate, started_at  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check (logged, not fatal) → database connect
    Shutdown: dispose database engine → close image host client
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from blogdesk import __version__
from blogdesk.config import Settings, settings
from blogdesk.database import Database
from blogdesk.exceptions import (
    BlogdeskError,
    ConflictError,
    DatabaseError,
    ImageHostError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from blogdesk.middleware.logging import RequestLoggingMiddleware
from blogdesk.middleware.request_id import RequestIDMiddleware, current_request_id
from blogdesk.routes import admin, blogs, categories, files, health, public
from blogdesk.schemas.common import field_errors
from blogdesk.services.auth_gate import AuthGate, JWTAuthGate
from blogdesk.services.cloudinary_host import CloudinaryImageHost
from blogdesk.services.image_host_base import ImageHost
from blogdesk.services.local_image_host import LocalImageHost

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] blogdesk.services.blog_service: Blog created: ...
    Called once at startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Collaborators
# ══════════════════════════════════════════════════════════════════════════

def build_image_host(config: Settings) -> ImageHost:
    """IMAGE_HOST=cloudinary (default) or local."""
    if config.image_host == "local":
        return LocalImageHost(
            storage_root=config.storage_root,
            folder=config.image_folder,
            max_file_size=config.max_file_size,
        )
    return CloudinaryImageHost(
        cloud_name=config.cloudinary_cloud_name,
        api_key=config.cloudinary_api_key,
        api_secret=config.cloudinary_api_secret,
        folder=config.image_folder,
        max_file_size=config.max_file_size,
        timeout=config.image_host_timeout,
    )


def build_auth_gate(config: Settings) -> JWTAuthGate:
    return JWTAuthGate(
        secret=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        expires_minutes=config.jwt_expires_minutes,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Blogdesk Backend %s starting up...", __version__)

    # Logged, not fatal: the health endpoint still reports the state
    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await app.state.database.connect()
    logger.info("Image host: %s", type(app.state.image_host).__name__)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blogdesk Backend shutting down...")
    await app.state.database.dispose()
    await app.state.image_host.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(request: Request, status_code: int, code: str, message: str, errors=None) -> JSONResponse:
    content = {"error": code, "message": message, "request_id": current_request_id(request)}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses.

    Handler table:
        ValidationError          → 400 + errors list
        RequestValidationError   → 400 + errors list
        ConflictError            → 400
        UnauthorizedError        → 401
        NotFoundError            → 404
        ImageHostError           → 500 "Server error"
        DatabaseError            → 500 "Server error"
        BlogdeskError (base)     → 500 "Server error"
        Exception (fallback)     → 500 "Something went wrong!"

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s %s", current_request_id(request), exc.message, exc.errors)
        return _error(request, 400, "validation_error", exc.message, errors=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = field_errors(exc.errors())
        logger.warning("[%s] Request validation failed: %s", current_request_id(request), errors)
        return _error(request, 400, "validation_error", "Validation failed", errors=errors)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s %s", current_request_id(request), exc.message, exc.context)
        return _error(request, 400, "conflict", exc.message)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        logger.info("[%s] Unauthorized: %s", current_request_id(request), exc.context.get("reason", exc.message))
        return _error(request, 401, "unauthorized", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(request, 404, "not_found", exc.message)

    @app.exception_handler(ImageHostError)
    async def handle_image_host_error(request: Request, exc: ImageHostError):
        logger.error("[%s] Image host error: %s | Context: %s", current_request_id(request), exc.message, exc.context)
        return _error(request, 500, "image_host_error", "Server error")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", current_request_id(request), exc.message, exc.context)
        return _error(request, 500, "server_error", "Server error")

    @app.exception_handler(BlogdeskError)
    async def handle_blogdesk_error(request: Request, exc: BlogdeskError):
        logger.error("[%s] %s: %s | Context: %s", current_request_id(request), type(exc).__name__, exc.message, exc.context)
        return _error(request, 500, "server_error", "Server error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", current_request_id(request), str(exc), exc_info=exc)
        return _error(request, 500, "internal_server_error", "Something went wrong!")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    image_host: Optional[ImageHost] = None,
    auth_gate: Optional[AuthGate] = None,
) -> FastAPI:
    """
    Assemble the application.

    Every collaborator can be passed in (tests use fakes); anything omitted is
    built from `config`, which defaults to the module settings.
    """
    config = config or settings

    app = FastAPI(
        title="Blogdesk API",
        description=(
            "Blog content management backend: admin CRUD for posts and categories, "
            "image uploads, public reads and full-text search."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database or Database.from_settings(config)
    app.state.image_host = image_host or build_image_host(config)
    app.state.auth_gate = auth_gate or build_auth_gate(config)
    app.state.started_at = time.time()

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routers ───────────────────────────────────────────────────────────
    app.include_router(admin.router)
    app.include_router(blogs.router)
    app.include_router(categories.router)
    app.include_router(public.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
