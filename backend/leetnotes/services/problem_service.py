"""
LeetNotes Backend — Problem & Profile Queries
===============================================

What:  Read access to a user's scraped problems, their submissions, and the
       profile statistics row.
Who:   Called by the problems routes and by NoteService.generate_note().

Every query is filtered by the authenticated user's id; a problem owned by
someone else is indistinguishable from a missing one (NotFoundError).
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.exceptions import DatabaseError, NotFoundError
from leetnotes.models.problem import Problem
from leetnotes.models.profile_stats import ProfileStats

logger = logging.getLogger(__name__)


class ProblemService:
    async def get_problem(self, db: AsyncSession, user_id: uuid.UUID, problem_id: int) -> Problem:
        """
        Load one problem with its submissions (newest first).

        Raises:
            NotFoundError: No problem with this id for this user.
            DatabaseError: Query failed.
        """
        try:
            result = await db.execute(
                select(Problem).where(Problem.id == problem_id, Problem.user_id == user_id)
            )
            problem = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching problem %s: %s", problem_id, str(e))
            raise DatabaseError(message="Could not retrieve the problem.", details=str(e))

        if problem is None:
            logger.info("Problem %s not found for user %s", problem_id, user_id)
            raise NotFoundError(resource="problem", resource_id=str(problem_id))
        return problem

    async def list_problems(self, db: AsyncSession, user_id: uuid.UUID) -> List[Problem]:
        """All of the user's problems, most recently added first."""
        try:
            result = await db.execute(
                select(Problem)
                .where(Problem.user_id == user_id)
                .order_by(Problem.created_at.desc(), Problem.id.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing problems for user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve problems.", details=str(e))

    async def get_profile_stats(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[ProfileStats]:
        """The user's stats row, or None before the first fetch."""
        try:
            result = await db.execute(select(ProfileStats).where(ProfileStats.user_id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching profile stats for user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve profile stats.", details=str(e))


problem_service = ProblemService()
