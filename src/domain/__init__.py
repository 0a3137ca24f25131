"""Game domain: match states, queue roles, ratings and configuration."""

from domain.common import MatchOutcome, MatchStatus, OutcomeKind, QueueRole, RatingTier
from domain.errors import GameError

__all__ = ["GameError", "MatchOutcome", "MatchStatus", "OutcomeKind", "QueueRole", "RatingTier"]
