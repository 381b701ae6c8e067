"""
Family Cookbook Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) wires the database handle, services, middleware,
       exception handlers, routers and the static UI onto one app.
Who:   uvicorn (`uvicorn cookbook.main:app`) and the test suite, which calls
       create_app() with its own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌─────────┐ ┌─────────┐ ┌──────────────┐ ┌───────────┐  │
    │  │ Req ID  │→│ Logging │→│ Upload limit │→│ GZip/CORS │  │
    │  └─────────┘ └─────────┘ └──────────────┘ └───────────┘  │
    │                                                          │
    │  app.state:  settings · database · auth_service ·        │
    │              file_service                                │
    │                                                          │
    │  Routes:  /api/login …  /api/pending-recipes …           │
    │           /api/recipes …  /api/categories  /health       │
    │           /  (static UI, when STATIC_DIR exists)         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (reported, not fatal)
    3. Create the upload directory
    4. Create missing tables
    5. Seed the bootstrap admin when the users table is empty

    Shutdown:
    1. Dispose the database engine
"""

import logging
import secrets
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from cookbook import __version__
from cookbook.config import Settings, settings as default_settings
from cookbook.database import Database
from cookbook.exceptions import CookbookError
from cookbook.middleware.logging import RequestLoggingMiddleware
from cookbook.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from cookbook.middleware.upload_limit import UploadSizeLimitMiddleware
from cookbook.routes import auth, health, pending, recipes
from cookbook.services.auth_service import AuthService
from cookbook.services.file_service import FileService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the whole process.

    Format: 2025-01-01T12:00:00 [INFO] cookbook.services.pending_service: ...

    Everything goes to stdout; the container runtime collects it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates cookbook.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("pypdf").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database
    auth_service: AuthService = app.state.auth_service

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Family Cookbook %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: public browsing still works without either secret
        logger.error("Configuration error: %s", e)

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", storage.resolve())

    await database.create_all()

    async with database.session() as db:
        await auth_service.seed_admin(
            db,
            username=settings.admin_username,
            password=settings.admin_password,
            display_name=settings.admin_display_name,
        )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Family Cookbook shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


_HTTP_ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    413: "file_too_large",
}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to JSON error responses.

    Every error body has the same shape:
        {"error": <code>, "message": <text>, "details": {...}?, "request_id": <id>}

    Handler hierarchy:
        CookbookError subclasses → their own status_code / error_code
        RequestValidationError   → 422 (malformed JSON, missing or out-of-range fields)
        HTTPException            → its status (unknown route, wrong method, body
                                   over the upload cap)
        Exception (fallback)     → 500

    Server errors never expose context in the response; it is logged instead.
    """

    @app.exception_handler(CookbookError)
    async def handle_cookbook_error(request: Request, exc: CookbookError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=_error_body(exc.error_code, exc.message),
            )

        logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "validation_error",
                "The request body or parameters are invalid",
                {"errors": errors},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        logger.warning("[%s] HTTP %d: %s", request_id_var.get(""), exc.status_code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the environment-derived
                  module settings. Tests pass their own instance.

    Returns:
        A FastAPI app whose startup (lifespan) creates tables and seeds the
        bootstrap admin.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Family Cookbook API",
        description=(
            "Share family recipes: browse, search, rate and comment publicly; "
            "upload recipe documents for moderation and publish them once reviewed."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    session_secret = settings.session_secret
    if not session_secret:
        session_secret = secrets.token_urlsafe(32)
        logger.warning(
            "SESSION_SECRET is not set; using a temporary key. "
            "All sessions end when the process restarts."
        )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.auth_service = AuthService(
        secret_key=session_secret,
        max_age=settings.session_max_age,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.file_service = FileService(
        storage_root=settings.storage_root,
        max_file_size=settings.max_file_size,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(UploadSizeLimitMiddleware, max_file_size=settings.max_file_size)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(pending.router)
    app.include_router(recipes.router)
    app.include_router(health.router)

    # Mounted last so it only catches paths no API route claims
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("Serving static UI from %s", static_dir.resolve())

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
