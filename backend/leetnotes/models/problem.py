"""
LeetNotes Backend — Problem & Submission SQLAlchemy Models
============================================================

What:  ORM models for the `problems` and `submissions` tables.
Who:   Written by IngestionService; read by ProblemService and NoteService.
When:  Rows are created during scrape ingestion and never edited afterwards.

Table Design:
    problems
        - integer primary key (exposed in URLs: /api/generate-notes/{id})
        - UNIQUE (user_id, slug): re-ingesting the same problem is a no-op
    submissions
        - FK to problems with ON DELETE CASCADE
        - UNIQUE (user_id, submission_id): the LeetCode submission id
          identifies a submission across scrapes
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leetnotes.database import Base

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
TagList = JSON().with_variant(JSONB(), "postgresql")


class Problem(Base):
    """A solved LeetCode problem owned by one user."""

    __tablename__ = "problems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        comment="Supabase Auth user id of the owner",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Easy / Medium / Hard as scraped; free text is accepted
    difficulty: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    tags: Mapped[List[str]] = mapped_column(TagList, nullable=False, default=list)

    slug: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    submissions: Mapped[List["Submission"]] = relationship(
        back_populates="problem",
        cascade="all, delete-orphan",
        order_by="Submission.timestamp.desc()",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_problems_user_slug"),
        Index("idx_problems_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Problem(id={self.id}, slug='{self.slug}', user_id={self.user_id})>"


class Submission(Base):
    """One submission attempt for a Problem, as reported by the fetcher."""

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    problem_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("problems.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    # "Accepted", "Wrong Answer", "Time Limit Exceeded", ...
    status: Mapped[str] = mapped_column(String(100), nullable=False)

    language: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Kept as the display strings LeetCode returns ("52 ms", "17.9 MB")
    runtime: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    memory: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    submission_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="LeetCode's own submission identifier",
    )

    timestamp: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    problem: Mapped[Problem] = relationship(back_populates="submissions")

    __table_args__ = (
        UniqueConstraint("user_id", "submission_id", name="uq_submissions_user_submission"),
        Index("idx_submissions_problem_id", "problem_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Submission(id={self.id}, problem_id={self.problem_id}, "
            f"status='{self.status}')>"
        )
