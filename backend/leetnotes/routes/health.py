"""
LeetNotes Backend — Welcome & Health Routes
=============================================

What:  `GET /` welcome message and `GET /health` dependency status.
How:   /health runs `SELECT 1` against the database and reports whether the
       Gemini key and Supabase Auth are configured, plus the Gemini circuit
       breaker state. It never calls Gemini or Supabase.

Status levels:
    healthy:   database reachable, Gemini and auth configured        (200)
    degraded:  database reachable, Gemini/auth missing or breaker open (200)
    unhealthy: database unreachable                                   (503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from leetnotes import __version__
from leetnotes.database import engine
from leetnotes.schemas.common import HealthResponse, MessageResponse
from leetnotes.services.auth_service import auth_service
from leetnotes.services.gemini_service import CircuitBreaker, gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

WELCOME_MESSAGE = "Welcome to the LeetCode Notes API - v2"

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Welcome message")
async def root() -> MessageResponse:
    return MessageResponse(message=WELCOME_MESSAGE)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    overall = "healthy"

    # ── Database ──────────────────────────────────────────────────────────
    db_status = "connected"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Gemini ────────────────────────────────────────────────────────────
    if not gemini_service.is_configured():
        gemini_status = "not_configured"
    elif gemini_service.circuit_breaker.state == CircuitBreaker.OPEN:
        gemini_status = "circuit_open"
    else:
        gemini_status = "configured"

    # ── Supabase Auth ─────────────────────────────────────────────────────
    auth_status = "configured" if auth_service.is_configured() else "not_configured"

    if overall == "healthy" and (gemini_status != "configured" or auth_status != "configured"):
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        auth=auth_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
