"""
LeetNotes Backend — Notes Route Handlers
==========================================

What:  Generate a study note for a problem, and read stored notes.
Who:   Called by the frontend problem list ("Generate notes") and notes pages.

Endpoints:
    POST /api/generate-notes/{problem_id}   → 200 Note (created or regenerated)
    GET  /api/notes                         → the caller's notes, newest update first
    GET  /api/notes/{problem_id}            → the caller's note for one problem

`problem_id` is taken as a raw string and parsed here so a non-numeric value
is reported as a 400 in the standard error body.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.database import get_db_session
from leetnotes.dependencies import get_current_user
from leetnotes.exceptions import ValidationError
from leetnotes.schemas.common import ErrorResponse
from leetnotes.schemas.note import NoteResponse
from leetnotes.services.auth_service import AuthenticatedUser
from leetnotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


def parse_problem_id(raw: str) -> int:
    """Path value → problem id; only plain ASCII digits are accepted."""
    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        logger.warning("Invalid non-numeric problem ID received: %r", raw)
        raise ValidationError(message="Invalid Problem ID format", field="problem_id")
    return int(value)


@router.post(
    "/generate-notes/{problem_id}",
    response_model=NoteResponse,
    responses={
        200: {"description": "Generated note", "model": NoteResponse},
        400: {"description": "Non-numeric problem id", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "Problem not found for this user", "model": ErrorResponse},
        500: {"description": "Configuration, parse or database error", "model": ErrorResponse},
        502: {"description": "Gemini failure or safety block", "model": ErrorResponse},
        503: {"description": "Gemini circuit breaker open", "model": ErrorResponse},
    },
    summary="Generate study notes for one problem",
)
async def generate_notes(
    problem_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    pid = parse_problem_id(problem_id)
    logger.info("Generate notes requested for problem %d by user %s", pid, user.id)
    return await note_service.generate_note(db, user.id, pid)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the caller's notes",
)
async def list_notes(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    return await note_service.list_notes(db, user.id)


@router.get(
    "/notes/{problem_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Non-numeric problem id", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "No note for this problem", "model": ErrorResponse},
    },
    summary="Get the caller's note for one problem",
)
async def get_note(
    problem_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.get_note(db, user.id, parse_problem_id(problem_id))
