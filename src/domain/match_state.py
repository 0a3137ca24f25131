"""Pure rules of the match state machine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from domain.common import MatchOutcome
from domain.errors import ConflictError, GameValidationError


@dataclass(frozen=True)
class MatchParameters:
    time_limit_seconds: int = 300
    max_message_length: int = 500
    forfeit_winner_score: int = 10
    forfeit_loser_score: int = 0
    draw_score: int = 5


@dataclass(frozen=True)
class MatchResult:
    """Terminal outcome and scores written when a match ends."""

    outcome: MatchOutcome
    player1_score: int
    player2_score: int
    forfeit: bool


def is_expired(started_at: datetime | None, time_limit_seconds: int, now: datetime) -> bool:
    if started_at is None:
        return False
    return now - started_at > timedelta(seconds=time_limit_seconds)


def seconds_remaining(started_at: datetime | None, time_limit_seconds: int, now: datetime) -> int | None:
    if started_at is None:
        return None
    deadline = started_at + timedelta(seconds=time_limit_seconds)
    return max(0, int((deadline - now).total_seconds()))


def other_player(player1_id: str, player2_id: str | None, user_id: str) -> str | None:
    if user_id == player1_id:
        return player2_id
    if user_id == player2_id:
        return player1_id
    return None


def clean_content(content: str | None, max_length: int) -> str:
    text = (content or "").strip()
    if not text:
        raise GameValidationError("Message content cannot be empty")
    if len(text) > max_length:
        raise GameValidationError(f"Message content exceeds {max_length} characters")
    return text


def forfeit_result(
    player1_id: str,
    player2_id: str | None,
    forfeit_user_id: str,
    params: MatchParameters,
) -> MatchResult:
    if forfeit_user_id not in (player1_id, player2_id):
        raise ConflictError("Only a player of this match can forfeit it")

    winner_id = other_player(player1_id, player2_id, forfeit_user_id)
    if winner_id is None:
        return MatchResult(
            outcome=MatchOutcome.pending(),
            player1_score=params.forfeit_loser_score,
            player2_score=params.forfeit_loser_score,
            forfeit=True,
        )

    winner_is_player1 = winner_id == player1_id
    return MatchResult(
        outcome=MatchOutcome.win(winner_id),
        player1_score=params.forfeit_winner_score if winner_is_player1 else params.forfeit_loser_score,
        player2_score=params.forfeit_loser_score if winner_is_player1 else params.forfeit_winner_score,
        forfeit=True,
    )


def natural_end_result(params: MatchParameters) -> MatchResult:
    """Provisional draw: judges rate messages separately and do not override it."""
    return MatchResult(
        outcome=MatchOutcome.draw(),
        player1_score=params.draw_score,
        player2_score=params.draw_score,
        forfeit=False,
    )
