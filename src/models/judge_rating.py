"""judge_ratings table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class JudgeRating(Base):
    """A single judge's tier for a single message."""

    __tablename__ = "judge_ratings"
    __table_args__ = (
        UniqueConstraint("message_id", "judge_id", name="uq_judge_ratings_message_judge"),
        Index("idx_judge_ratings_message_rated", "message_id", "rated_at", "id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(ForeignKey("messages.id", ondelete="CASCADE"), nullable=False)
    judge_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    rating: Mapped[str] = mapped_column(
        Enum(
            "brilliant",
            "great",
            "excellent",
            "good",
            "miss",
            "mistake",
            "blunder",
            name="move_rating",
            native_enum=False,
        ),
        nullable=False,
    )
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    rated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
