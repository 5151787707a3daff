"""
LeetNotes Backend — Note Service (Business Logic Orchestrator)
================================================================

What:  Orchestrates the generate-notes workflow and the note read queries.
How:   Composes ProblemService, the prompt builder, GeminiService, the section
       parser, and a single upsert statement.
Who:   Called by the notes route handlers.

Orchestration Flow (POST /api/generate-notes/{problem_id}):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐    ┌──────────┐
    │ Problem  │───▶│   Prompt    │───▶│  Gemini API  │───▶│ Sections │───▶│  Upsert  │
    │ + subs   │    │  (builder)  │    │ (GeminiServ) │    │ (parser) │    │  (DB)    │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘    └──────────┘

    Nothing is written unless the whole chain succeeds; a failed Gemini call
    leaves any earlier note for the problem untouched.

Design Decision:
    NoteService is stateless. The session and the verified user id are passed
    to every call, and the LLM provider can be swapped in the constructor for
    tests.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leetnotes.exceptions import ConfigurationError, DatabaseError, NotFoundError
from leetnotes.models.note import NOTE_SECTION_FIELDS, Note
from leetnotes.schemas.note import NoteResponse, NoteSections
from leetnotes.services.gemini_service import gemini_service
from leetnotes.services.llm_base import LLMService
from leetnotes.services.problem_service import ProblemService, problem_service
from leetnotes.services.prompt_builder import build_note_prompt
from leetnotes.services.section_parser import parse_note_sections

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - generate_note(): problem → prompt → Gemini → sections → stored note
        - get_note(): the caller's note for one problem
        - list_notes(): the caller's notes, most recently updated first

    Error Handling Strategy:
        Application exceptions from sub-operations propagate unchanged
        (NotFoundError, ConfigurationError, LLMServiceError, LLMResponseError,
        CircuitBreakerOpenError). SQLAlchemy errors are wrapped in
        DatabaseError with the store's message as details.
    """

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        problems: Optional[ProblemService] = None,
    ):
        self.llm = llm or gemini_service
        self.problems = problems or problem_service

    async def generate_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        problem_id: int,
    ) -> NoteResponse:
        """
        Generate (or regenerate) the study note for one of the user's problems.

        Workflow Steps:
            1. Load the problem and its submissions for this user (404 if absent)
            2. Require a configured Gemini API key
            3. Build the prompt from the problem and the submission history
            4. Call Gemini
            5. Split the answer into the eight sections
            6. Upsert the note on (problem_id, user_id) and return the stored row

        Raises:
            NotFoundError: Problem missing or owned by someone else
            ConfigurationError: GEMINI_API_KEY not set
            LLMServiceError: Gemini transport failure or safety block (502)
            LLMResponseError: Gemini answer had no usable text (500)
            CircuitBreakerOpenError: Too many recent Gemini failures (503)
            DatabaseError: The upsert failed
        """
        # ── Step 1: Problem + submissions ─────────────────────────────────
        problem = await self.problems.get_problem(db, user_id, problem_id)
        submissions = list(problem.submissions or [])
        logger.info(
            "Generating notes for problem %s (%s) with %d submissions",
            problem.id,
            problem.title,
            len(submissions),
        )

        # ── Step 2: Credentials ───────────────────────────────────────────
        if not self.llm.is_configured():
            logger.error("GEMINI_API_KEY is not set on the server")
            raise ConfigurationError(details="Missing API key.")

        # ── Step 3-4: Prompt → Gemini ─────────────────────────────────────
        prompt = build_note_prompt(problem, submissions)
        generated = await self.llm.generate_text(prompt)

        # ── Step 5: Sections ──────────────────────────────────────────────
        sections = parse_note_sections(
            generated,
            default_topic=problem.title or "",
            default_question=problem.description or "",
        )

        # ── Step 6: Store ─────────────────────────────────────────────────
        note = await self.upsert_note(
            db,
            user_id=user_id,
            problem_id=problem.id,
            title=sections.topic or problem.title,
            sections=sections,
        )
        logger.info("Note %s stored for problem %s", note.id, problem.id)
        return NoteResponse.from_row(note)

    async def upsert_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        problem_id: int,
        title: str,
        sections: NoteSections,
    ) -> Note:
        """
        Insert the note, or replace title and sections of the existing one.

        Query:
            INSERT INTO notes (...) VALUES (...)
            ON CONFLICT ON CONSTRAINT uq_notes_problem_user
            DO UPDATE SET title = EXCLUDED.title, <sections>, updated_at = EXCLUDED.updated_at
            RETURNING *
        """
        now = datetime.now(timezone.utc)
        values = {name: getattr(sections, name) for name in NOTE_SECTION_FIELDS}
        stmt = pg_insert(Note).values(
            problem_id=problem_id,
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
            **values,
        )
        update_columns = {name: getattr(stmt.excluded, name) for name in NOTE_SECTION_FIELDS}
        update_columns["title"] = stmt.excluded.title
        update_columns["updated_at"] = stmt.excluded.updated_at
        stmt = (
            stmt.on_conflict_do_update(constraint="uq_notes_problem_user", set_=update_columns)
            .returning(Note)
            .execution_options(populate_existing=True)
        )

        try:
            result = await db.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Database error saving note for problem %s: %s", problem_id, str(e))
            raise DatabaseError(
                message="Failed to store note in database.",
                details=str(getattr(e, "orig", None) or e),
                context={"problem_id": problem_id},
            )

    async def get_note(self, db: AsyncSession, user_id: uuid.UUID, problem_id: int) -> NoteResponse:
        """
        The caller's note for one problem.

        Raises:
            NotFoundError: No note for this problem and user (→ 404)
            DatabaseError: Query failed (→ 500)
        """
        try:
            result = await db.execute(
                select(Note).where(Note.problem_id == problem_id, Note.user_id == user_id)
            )
            note = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note for problem %s: %s", problem_id, str(e))
            raise DatabaseError(message="Could not retrieve the note.", details=str(e))

        if note is None:
            raise NotFoundError(resource="note", resource_id=str(problem_id))
        return NoteResponse.from_row(note)

    async def list_notes(self, db: AsyncSession, user_id: uuid.UUID) -> List[NoteResponse]:
        """All of the caller's notes, most recently updated first (idx_notes_user_updated_at)."""
        try:
            result = await db.execute(
                select(Note).where(Note.user_id == user_id).order_by(Note.updated_at.desc())
            )
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve notes.", details=str(e))
        return [NoteResponse.from_row(note) for note in notes]


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
