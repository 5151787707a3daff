"""Create profile_stats, problems, submissions and notes tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

user_id columns hold Supabase Auth user ids; there is no local users table,
so they carry no foreign key.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "profile_stats",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_solved", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("easy", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("medium", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("hard", sa.Integer(), server_default=sa.text("0"), nullable=False),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("user_id", name="pk_profile_stats"),
    )

    op.create_table(
        "problems",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Supabase Auth user id of the owner",
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("difficulty", sa.String(50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "tags",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("slug", sa.String(255), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name="pk_problems"),
        sa.UniqueConstraint("user_id", "slug", name="uq_problems_user_slug"),
    )
    op.create_index("idx_problems_user_id", "problems", ["user_id"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("problem_id", sa.Integer(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(100), nullable=False),
        sa.Column("language", sa.String(50), nullable=True),
        sa.Column("runtime", sa.String(50), nullable=True),
        sa.Column("memory", sa.String(50), nullable=True),
        sa.Column("code", sa.Text(), nullable=True),
        sa.Column(
            "submission_id",
            sa.String(64),
            nullable=False,
            comment="LeetCode's own submission identifier",
        ),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_submissions"),
        sa.ForeignKeyConstraint(
            ["problem_id"], ["problems.id"],
            name="fk_submissions_problem_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "submission_id", name="uq_submissions_user_submission"),
    )
    op.create_index("idx_submissions_problem_id", "submissions", ["problem_id"])

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("problem_id", sa.Integer(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        *[
            sa.Column(name, sa.Text(), server_default=sa.text("''"), nullable=False)
            for name in (
                "topic",
                "question",
                "intuition",
                "example",
                "counterexample",
                "pseudocode",
                "mistake",
                "code",
            )
        ],
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_notes"),
        sa.ForeignKeyConstraint(
            ["problem_id"], ["problems.id"],
            name="fk_notes_problem_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("problem_id", "user_id", name="uq_notes_problem_user"),
    )
    op.create_index(
        "idx_notes_user_updated_at",
        "notes",
        ["user_id", sa.text("updated_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_user_updated_at", table_name="notes")
    op.drop_table("notes")
    op.drop_index("idx_submissions_problem_id", table_name="submissions")
    op.drop_table("submissions")
    op.drop_index("idx_problems_user_id", table_name="problems")
    op.drop_table("problems")
    op.drop_table("profile_stats")
