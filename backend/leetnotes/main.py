"""
LeetNotes Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers and
       returns the app; uvicorn serves the module-level `app`
       (uvicorn leetnotes.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware (outermost first):                               │
    │  CORS → Request ID → Access Log → GZip → Rate Limit          │
    │                                                              │
    │  Routes:                                                     │
    │  GET /  GET /health                                          │
    │  POST /api/fetch-data   POST /api/generate-notes/{id}        │
    │  GET /api/profile-stats  /api/problems[/{id}]  /api/notes[/{id}] │
    │                                                              │
    │  Exception Handlers:                                         │
    │  LeetNotesError → exc.status_code │ RequestValidationError → 400 │
    │  Exception → 500                                             │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing Supabase/Gemini settings
              (the server still starts; affected endpoints answer 500)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from leetnotes import __version__
from leetnotes.config import settings
from leetnotes.database import dispose_engine
from leetnotes.exceptions import (
    CircuitBreakerOpenError,
    LeetNotesError,
    ValidationError,
)
from leetnotes.middleware.logging import RequestLoggingMiddleware
from leetnotes.middleware.rate_limit import RateLimitMiddleware
from leetnotes.middleware.request_id import RequestIDMiddleware, request_id_var
from leetnotes.routes import fetch, health, notes, problems

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] leetnotes.services.note_service: message
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every request/statement at INFO/DEBUG
    for name in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "google"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("LeetNotes Backend v%s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the gap and affected routes answer 500
        logger.error("Configuration error: %s", str(e))

    logger.info("Fetcher: %s %s", settings.fetcher_python, settings.fetcher_script_path)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("LeetNotes Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the standard error body:
        {"error": ..., "details": ..., "code": ..., "request_id": ...}

    Handler hierarchy:
        CircuitBreakerOpenError → 503 + Retry-After
        LeetNotesError (base)   → exc.status_code (400/401/404/500/502)
        RequestValidationError  → 400 (FastAPI body/query validation)
        Exception (fallback)    → 500, generic message, stack trace logged

    `context` is logged, never returned. 429 responses are written by
    RateLimitMiddleware before routing, so they never reach these handlers.
    """

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        rid = request_id_var.get("")
        logger.warning("[%s] Circuit breaker open: %s", rid, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_body(rid),
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(LeetNotesError)
    async def handle_app_error(request: Request, exc: LeetNotesError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | details=%s | context=%s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.details,
                exc.context,
            )
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(rid))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
        details = f"{field}: {first.get('msg')}" if field else first.get("msg")
        logger.warning("[%s] Request validation failed: %s", rid, details)

        error = ValidationError(message="Invalid request", field=field, details=details)
        return JSONResponse(status_code=error.status_code, content=error.to_body(rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "details": "An unexpected error occurred.",
                "code": "internal_server_error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="LeetNotes API",
        description=(
            "Fetches a user's LeetCode submission history and generates "
            "personalized study notes for each problem with Google Gemini."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → Logging → GZip → RateLimit
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(fetch.router)
    app.include_router(problems.router)
    app.include_router(notes.router)

    return app


app = create_app()
