"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.user import User


class Match(Base):
    """One duel: two players, two judges, a turn pointer and a tagged outcome."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint(
            "status <> 'active' OR (player2_id IS NOT NULL AND judge1_id IS NOT NULL "
            "AND judge2_id IS NOT NULL AND started_at IS NOT NULL)",
            name="ck_matches_active_is_full",
        ),
        CheckConstraint(
            "(outcome = 'win') = (winner_id IS NOT NULL)",
            name="ck_matches_winner_matches_outcome",
        ),
        CheckConstraint(
            "player1_score >= 0 AND player1_score <= 10 AND player2_score >= 0 AND player2_score <= 10",
            name="ck_matches_score_range",
        ),
        Index("idx_matches_status", "status"),
        Index("idx_matches_player1_status", "player1_id", "status"),
        Index("idx_matches_player2_status", "player2_id", "status"),
        Index("idx_matches_ended_at", "ended_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player1_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    player2_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    judge1_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    judge2_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum("waiting", "active", "completed", "forfeit", name="match_status", native_enum=False),
        nullable=False,
        default="waiting",
    )
    current_turn: Mapped[str | None] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    outcome: Mapped[str] = mapped_column(
        Enum("pending", "win", "draw", name="match_outcome", native_enum=False),
        nullable=False,
        default="pending",
    )
    winner_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("users.id"), nullable=True)
    player1_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    player2_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=300)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )

    player1: Mapped[User] = relationship(foreign_keys=[player1_id])
    player2: Mapped[User | None] = relationship(foreign_keys=[player2_id])
    judge1: Mapped[User | None] = relationship(foreign_keys=[judge1_id])
    judge2: Mapped[User | None] = relationship(foreign_keys=[judge2_id])

    @property
    def player_ids(self) -> tuple[str, ...]:
        return tuple(user_id for user_id in (self.player1_id, self.player2_id) if user_id)

    @property
    def judge_ids(self) -> tuple[str, ...]:
        return tuple(user_id for user_id in (self.judge1_id, self.judge2_id) if user_id)

    def involves(self, user_id: str) -> bool:
        return user_id in self.player_ids or user_id in self.judge_ids
