"""
Pokédex API: FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Run by uvicorn (`uvicorn pokedex.main:app`, or the `pokedex-api`
       console script which calls run()).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware: RequestID → Logging → GZip → CORS            │
    │                                                           │
    │  Routes:                                                  │
    │  /pokemon  /moves  /types  /species  /natures  /health    │
    │                                                           │
    │  Exception Handlers:                                      │
    │  Validation→400 │ NotFound→404 │ Storage/DB→500 │ →504    │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (problems are logged, not fatal)
    3. Open the S3 client and publish it on app.state.object_storage
    Shutdown:
    1. Close the S3 client
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from botocore.exceptions import BotoCoreError
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pokedex import __version__
from pokedex.config import settings
from pokedex.database import dispose_engine
from pokedex.exceptions import (
    DatabaseError,
    NotFoundError,
    PokedexError,
    RequestTimeoutError,
    StorageError,
    ValidationError,
)
from pokedex.middleware.logging import RequestLoggingMiddleware
from pokedex.middleware.request_id import RequestIDMiddleware, request_id_var
from pokedex.routes import health, moves, natures, pokemon, species, types
from pokedex.services.s3_storage import S3ObjectStorage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during app startup.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    for name in ("uvicorn.access", "sqlalchemy.engine", "botocore", "aiobotocore", "s3transfer"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Pokédex API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Reads keep working without S3; uploads fail with a clear error.
        logger.error("Configuration error: %s", str(e))

    storage = S3ObjectStorage.from_settings(settings)
    try:
        await storage.start()
    except BotoCoreError as e:
        logger.error("Could not open S3 client, image uploads disabled: %s", str(e))
    app.state.object_storage = storage

    logger.info("Server ready at http://%s:%d", settings.server_host, settings.server_port)
    logger.info("API docs: http://%s:%d/docs", settings.server_host, settings.server_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Pokédex API shutting down...")
    await storage.close()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str, details=None) -> JSONResponse:
    content = {"error": message, "request_id": request_id_var.get("")}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope ``{"error", "details"?, "request_id"}``.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        RequestValidationError   → 400 Bad Request (with pydantic details)
        NotFoundError            → 404 Not Found
        StorageError             → 500 Internal Server Error
        DatabaseError            → 500 Internal Server Error
        RequestTimeoutError      → 504 Gateway Timeout
        HTTPException            → its own status (unknown route → 404)
        PokedexError (base)      → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    `context` and driver errors are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(
            "[%s] Request validation failed on %s: %d error(s)",
            request_id_var.get(""),
            request.url.path,
            len(exc.errors()),
        )
        return _error_response(400, "Invalid request", jsonable_encoder(exc.errors()))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "Internal server error")

    @app.exception_handler(RequestTimeoutError)
    async def handle_timeout(request: Request, exc: RequestTimeoutError):
        logger.error("[%s] Request timed out | Context: %s", request_id_var.get(""), exc.context)
        return _error_response(504, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(PokedexError)
    async def handle_pokedex_error(request: Request, exc: PokedexError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace to the log, generic message to the client."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(500, "Internal server error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Pokédex API",
        description=(
            "CRUD over Pokémon, species, moves, types, type effectiveness and natures. "
            "Pokémon artwork is uploaded to S3."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(pokemon.router)
    app.include_router(moves.router)
    app.include_router(types.router)
    app.include_router(species.router)
    app.include_router(natures.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Entry point of the `pokedex-api` console script."""
    uvicorn.run(
        "pokedex.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
