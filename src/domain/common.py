"""Shared types for the match engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from domain.errors import GameValidationError


class MatchStatus(str, Enum):
    """Lifecycle state of one match."""

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FORFEIT = "forfeit"

    @property
    def is_terminal(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.FORFEIT)


class QueueRole(str, Enum):
    """Which seat a queued user is waiting for."""

    PLAYER = "player"
    JUDGE = "judge"

    @classmethod
    def parse(cls, value: str) -> QueueRole:
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise GameValidationError(
                f"Unknown match type '{value}'. Expected 'player' or 'judge'."
            ) from exc


_TIER_RANKS = {
    "brilliant": 7,
    "great": 6,
    "excellent": 5,
    "good": 4,
    "miss": 3,
    "mistake": 2,
    "blunder": 1,
}


class RatingTier(str, Enum):
    """Seven message-quality tiers, ordered brilliant > ... > blunder."""

    BRILLIANT = "brilliant"
    GREAT = "great"
    EXCELLENT = "excellent"
    GOOD = "good"
    MISS = "miss"
    MISTAKE = "mistake"
    BLUNDER = "blunder"

    @property
    def rank(self) -> int:
        return _TIER_RANKS[self.value]

    @classmethod
    def parse(cls, value: str) -> RatingTier:
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            available = ", ".join(tier.value for tier in cls)
            raise GameValidationError(
                f"Unknown rating tier '{value}'. Choose one of: {available}."
            ) from exc

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RatingTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RatingTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RatingTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RatingTier):
            return NotImplemented
        return self.rank >= other.rank


class OutcomeKind(str, Enum):
    """Tag of a match outcome."""

    PENDING = "pending"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class MatchOutcome:
    """Tagged match result: a win for one player, a draw, or not yet decided."""

    kind: OutcomeKind
    winner_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind == OutcomeKind.WIN and not self.winner_id:
            raise ValueError("A win outcome requires winner_id")
        if self.kind != OutcomeKind.WIN and self.winner_id is not None:
            raise ValueError(f"A {self.kind.value} outcome cannot carry winner_id")

    @classmethod
    def win(cls, winner_id: str) -> MatchOutcome:
        return cls(OutcomeKind.WIN, winner_id)

    @classmethod
    def draw(cls) -> MatchOutcome:
        return cls(OutcomeKind.DRAW)

    @classmethod
    def pending(cls) -> MatchOutcome:
        return cls(OutcomeKind.PENDING)

    @property
    def is_decided(self) -> bool:
        return self.kind != OutcomeKind.PENDING


@dataclass(frozen=True)
class RatingSnapshot:
    """Current rating and peak for one rated user."""

    user_id: str
    rating: int
    peak: int


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the `DateTime(timezone=False)` columns."""
    return datetime.now(UTC).replace(tzinfo=None)


__all__ = [
    "MatchOutcome",
    "MatchStatus",
    "OutcomeKind",
    "QueueRole",
    "RatingSnapshot",
    "RatingTier",
    "utcnow",
]
