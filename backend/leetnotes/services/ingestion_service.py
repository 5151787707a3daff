"""
LeetNotes Backend — Scrape Ingestion
======================================

What:  Writes a validated fetcher payload into profile_stats, problems and
       submissions for one user.
How:   PostgreSQL INSERT ... ON CONFLICT statements so re-running a scrape is
       idempotent:
           profile_stats  ON CONFLICT (user_id) DO UPDATE    (full overwrite)
           problems       ON CONFLICT (user_id, slug) DO NOTHING, then look
                          up the existing id
           submissions    ON CONFLICT (user_id, submission_id) DO NOTHING
Who:   Called by the POST /api/fetch-data route after FetcherService.fetch().

Failure policy:
    - profile_stats failure aborts the request (DatabaseError, 500)
    - a failure on one problem or one submission is logged and skipped;
      each runs inside its own SAVEPOINT so the outer transaction survives
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.exceptions import DatabaseError
from leetnotes.models.problem import Problem, Submission
from leetnotes.models.profile_stats import ProfileStats
from leetnotes.schemas.fetcher import (
    FetchDataResponse,
    FetcherPayload,
    ScrapedProblem,
    ScrapedProfileStats,
    ScrapedSubmission,
)

logger = logging.getLogger(__name__)


def _store_message(exc: SQLAlchemyError) -> str:
    """The driver's own error text, without SQLAlchemy's statement dump."""
    return str(getattr(exc, "orig", None) or exc)


class IngestionService:
    """Stateless; receives the session and the verified user id on each call."""

    async def ingest(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        payload: FetcherPayload,
    ) -> FetchDataResponse:
        await self.upsert_profile_stats(db, user_id, payload.profile_stats)

        problems_processed = problems_skipped = 0
        submissions_inserted = submissions_skipped = 0

        for problem in payload.problems:
            try:
                async with db.begin_nested():
                    problem_id = await self.insert_or_get_problem(db, user_id, problem)
            except SQLAlchemyError as e:
                logger.error("Problem insert error for %s: %s", problem.slug, _store_message(e))
                problems_skipped += 1
                continue

            if problem_id is None:
                logger.warning("Could not get problem ID for %s. Skipping submissions.", problem.slug)
                problems_skipped += 1
                continue

            problems_processed += 1
            inserted, skipped = await self.insert_submissions(db, user_id, problem_id, problem)
            submissions_inserted += inserted
            submissions_skipped += skipped

        await db.flush()
        logger.info(
            "Ingested scrape for user %s: problems=%d (skipped %d), submissions=%d (skipped %d)",
            user_id,
            problems_processed,
            problems_skipped,
            submissions_inserted,
            submissions_skipped,
        )
        return FetchDataResponse(
            problems_processed=problems_processed,
            problems_skipped=problems_skipped,
            submissions_inserted=submissions_inserted,
            submissions_skipped=submissions_skipped,
        )

    async def upsert_profile_stats(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        stats: ScrapedProfileStats,
    ) -> None:
        """Overwrite the user's stats row. Raises DatabaseError on failure."""
        stmt = pg_insert(ProfileStats).values(
            user_id=user_id,
            total_solved=stats.total_solved,
            easy=stats.easy,
            medium=stats.medium,
            hard=stats.hard,
            updated_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ProfileStats.user_id],
            set_={
                "total_solved": stmt.excluded.total_solved,
                "easy": stmt.excluded.easy,
                "medium": stmt.excluded.medium,
                "hard": stmt.excluded.hard,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        try:
            await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Profile stats upsert error for user %s: %s", user_id, _store_message(e))
            raise DatabaseError(message="Failed to store profile stats", details=_store_message(e))

    async def insert_or_get_problem(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        problem: ScrapedProblem,
    ) -> Optional[int]:
        """Insert the problem, or return the id of the row already stored for its slug."""
        stmt = (
            pg_insert(Problem)
            .values(
                user_id=user_id,
                title=problem.title,
                difficulty=problem.difficulty,
                description=problem.description,
                tags=problem.tags,
                slug=problem.slug,
            )
            .on_conflict_do_nothing(constraint="uq_problems_user_slug")
            .returning(Problem.id)
        )
        result = await db.execute(stmt)
        problem_id = result.scalar_one_or_none()
        if problem_id is not None:
            return problem_id

        logger.debug("Problem %s already stored for user %s; looking up id", problem.slug, user_id)
        result = await db.execute(
            select(Problem.id).where(Problem.user_id == user_id, Problem.slug == problem.slug)
        )
        return result.scalar_one_or_none()

    async def insert_submissions(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        problem_id: int,
        problem: ScrapedProblem,
    ) -> Tuple[int, int]:
        """Insert the problem's submissions; return (inserted, skipped)."""
        inserted = skipped = 0
        for submission in problem.submissions:
            if not submission.submission_id:
                logger.warning("Submission without an id for problem %s; skipped", problem.slug)
                skipped += 1
                continue
            try:
                async with db.begin_nested():
                    created = await self._insert_submission(db, user_id, problem_id, submission)
            except SQLAlchemyError as e:
                logger.error(
                    "Submission insert error for %s: %s",
                    submission.submission_id,
                    _store_message(e),
                )
                skipped += 1
                continue
            if created:
                inserted += 1
            else:
                logger.debug("Submission %s already stored; skipped", submission.submission_id)
                skipped += 1
        return inserted, skipped

    async def _insert_submission(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        problem_id: int,
        submission: ScrapedSubmission,
    ) -> bool:
        stmt = (
            pg_insert(Submission)
            .values(
                problem_id=problem_id,
                user_id=user_id,
                status=submission.status,
                language=submission.language,
                runtime=submission.runtime,
                memory=submission.memory,
                code=submission.code,
                submission_id=submission.submission_id,
                timestamp=submission.submitted_at(),
            )
            .on_conflict_do_nothing(constraint="uq_submissions_user_submission")
            .returning(Submission.id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None


ingestion_service = IngestionService()
