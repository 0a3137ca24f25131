"""queue table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class QueueEntry(Base):
    """One pending match request per user."""

    __tablename__ = "queue"
    __table_args__ = (
        Index("idx_queue_type_joined", "match_type", "joined_at"),
        Index("idx_queue_type_elo", "match_type", "elo"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id"),
        nullable=False,
        unique=True,
    )
    elo: Mapped[int] = mapped_column(Integer, nullable=False)
    match_type: Mapped[str] = mapped_column(
        Enum("player", "judge", name="queue_match_type", native_enum=False),
        nullable=False,
        default="player",
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
