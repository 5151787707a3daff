"""
LeetNotes Backend — Problems & Profile Stats Routes
=====================================================

Read-only views over what POST /api/fetch-data stored for the caller.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.database import get_db_session
from leetnotes.dependencies import get_current_user
from leetnotes.exceptions import NotFoundError
from leetnotes.routes.notes import parse_problem_id
from leetnotes.schemas.common import ErrorResponse
from leetnotes.schemas.problem import ProblemResponse, ProfileStatsResponse
from leetnotes.services.auth_service import AuthenticatedUser
from leetnotes.services.problem_service import problem_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Problems"])


@router.get(
    "/profile-stats",
    response_model=ProfileStatsResponse,
    responses={404: {"description": "No data fetched yet", "model": ErrorResponse}},
    summary="Solved-problem counts for the caller",
)
async def get_profile_stats(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileStatsResponse:
    stats = await problem_service.get_profile_stats(db, user.id)
    if stats is None:
        raise NotFoundError(resource="profile stats")
    return ProfileStatsResponse.model_validate(stats)


@router.get(
    "/problems",
    response_model=List[ProblemResponse],
    summary="The caller's problems with submissions",
)
async def list_problems(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProblemResponse]:
    problems = await problem_service.list_problems(db, user.id)
    return [ProblemResponse.model_validate(problem) for problem in problems]


@router.get(
    "/problems/{problem_id}",
    response_model=ProblemResponse,
    responses={
        400: {"description": "Non-numeric problem id", "model": ErrorResponse},
        404: {"description": "Problem not found for this user", "model": ErrorResponse},
    },
    summary="One problem with its submissions",
)
async def get_problem(
    problem_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProblemResponse:
    problem = await problem_service.get_problem(db, user.id, parse_problem_id(problem_id))
    return ProblemResponse.model_validate(problem)
