"""users table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class User(Base):
    """A player/judge identity with both rating pools and their counters."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("peak_elo >= elo", name="ck_users_peak_elo"),
        CheckConstraint("peak_judge_elo >= judge_elo", name="ck_users_peak_judge_elo"),
        Index("idx_users_elo", "elo"),
        Index("idx_users_judge_elo", "judge_elo"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    elo: Mapped[int] = mapped_column(Integer, nullable=False, default=1200)
    peak_elo: Mapped[int] = mapped_column(Integer, nullable=False, default=1200)
    judge_elo: Mapped[int] = mapped_column(Integer, nullable=False, default=1200)
    peak_judge_elo: Mapped[int] = mapped_column(Integer, nullable=False, default=1200)
    total_matches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_judge_matches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    judge_agreements: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    judge_disagreements: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )

    @property
    def display_name(self) -> str:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) if parts else self.id
