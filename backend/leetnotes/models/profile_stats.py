"""
LeetNotes Backend — ProfileStats SQLAlchemy Model
===================================================

One row per user holding the solved-problem counts from the latest scrape.
The whole row is overwritten by an upsert on every successful fetch.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from leetnotes.database import Base


class ProfileStats(Base):
    __tablename__ = "profile_stats"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)

    total_solved: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    easy: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    medium: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    hard: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<ProfileStats(user_id={self.user_id}, total_solved={self.total_solved})>"
