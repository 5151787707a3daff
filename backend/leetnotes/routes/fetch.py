"""
LeetNotes Backend — Fetch Data Route
======================================

What:  POST /api/fetch-data: scrape the caller's LeetCode account and store it.
How:   FetcherService runs the external fetcher and validates its output;
       IngestionService writes it under the authenticated user's id.
Who:   Called by the frontend fetch form with the user's LeetCode username,
       LEETCODE_SESSION cookie and csrftoken.

The session cookie and CSRF token are forwarded to the fetcher only. They are
never stored and never logged.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.database import get_db_session
from leetnotes.dependencies import get_current_user
from leetnotes.schemas.common import ErrorResponse
from leetnotes.schemas.fetcher import FetchDataRequest, FetchDataResponse
from leetnotes.services.auth_service import AuthenticatedUser
from leetnotes.services.fetcher_service import fetcher_service
from leetnotes.services.ingestion_service import ingestion_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Fetch"])


@router.post(
    "/fetch-data",
    response_model=FetchDataResponse,
    responses={
        200: {"description": "Data fetched and stored", "model": FetchDataResponse},
        400: {"description": "Missing username, session cookie or CSRF token", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Fetcher or database failure", "model": ErrorResponse},
    },
    summary="Fetch LeetCode data for the current user",
)
async def fetch_data(
    body: FetchDataRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FetchDataResponse:
    logger.info("Fetch requested by user %s for LeetCode user %s", user.id, body.username)
    payload = await fetcher_service.fetch(body)
    return await ingestion_service.ingest(db, user.id, payload)
