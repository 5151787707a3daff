"""
LeetNotes Backend — Note SQLAlchemy Model
===========================================

What:  ORM model for the `notes` table: one AI-generated study note per
       (problem, user).
Who:   Written by NoteService.generate_note(); read by the notes routes.

Lifecycle:
    1. Created the first time a user generates notes for a problem
    2. Regeneration replaces the title and all eight sections in place
       (same row id, updated_at moves forward)

Table Design:
    - UNIQUE (problem_id, user_id): the store guarantees at most one note per
      problem and user, so the write is a single INSERT ... ON CONFLICT DO
      UPDATE instead of a select-then-write.
    - One TEXT column per section so each can be queried and migrated alone.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Index, Integer, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from leetnotes.database import Base

# Column names of the eight generated sections, in display order
NOTE_SECTION_FIELDS = (
    "topic",
    "question",
    "intuition",
    "example",
    "counterexample",
    "pseudocode",
    "mistake",
    "code",
)


class Note(Base):
    """A generated study note for one problem of one user."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    problem_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("problems.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Generated Sections ────────────────────────────────────────────────
    topic: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    question: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    intuition: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    example: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    counterexample: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    pseudocode: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    mistake: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    code: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("problem_id", "user_id", name="uq_notes_problem_user"),
        Index("idx_notes_user_updated_at", user_id, updated_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, problem_id={self.problem_id}, user_id={self.user_id})>"
