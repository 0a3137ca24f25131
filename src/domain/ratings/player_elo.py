"""Player Elo from match outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from math import floor

from domain.common import MatchOutcome, OutcomeKind, RatingSnapshot


@dataclass(frozen=True)
class PlayerEloParameters:
    initial_elo: int = 1200
    k_factor: float = 32.0
    scale_factor: float = 400.0


@dataclass(frozen=True)
class PlayerEloUpdate:
    user_id: str
    opponent_id: str
    won: bool
    drawn: bool
    actual_score: float
    expected_score: float
    pre_elo: int
    elo_delta: int
    post_elo: int
    peak_elo: int


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (1370.5 -> 1371, -0.5 -> 0)."""
    return int(floor(value + 0.5))


def actual_scores(outcome: MatchOutcome, player1_id: str, player2_id: str) -> tuple[float, float]:
    if outcome.kind == OutcomeKind.PENDING:
        raise ValueError("Cannot rate a match whose outcome is still pending")
    if outcome.kind == OutcomeKind.DRAW:
        return 0.5, 0.5
    if outcome.winner_id == player1_id:
        return 1.0, 0.0
    if outcome.winner_id == player2_id:
        return 0.0, 1.0
    raise ValueError(
        f"winner_id={outcome.winner_id} does not belong to players {player1_id}/{player2_id}"
    )


def calculate_player_updates(
    player1: RatingSnapshot,
    player2: RatingSnapshot,
    outcome: MatchOutcome,
    params: PlayerEloParameters | None = None,
) -> tuple[PlayerEloUpdate, PlayerEloUpdate]:
    """Apply one finished match to both players' Elo."""
    params = params or PlayerEloParameters()
    if player1.user_id == player2.user_id:
        raise ValueError(f"player {player1.user_id} cannot be rated against themselves")

    player1_actual, player2_actual = actual_scores(outcome, player1.user_id, player2.user_id)
    player1_expected = calculate_expected_score(
        rating=player1.rating,
        opponent_rating=player2.rating,
        scale_factor=params.scale_factor,
    )
    player2_expected = 1.0 - player1_expected

    player1_post = round_half_up(player1.rating + params.k_factor * (player1_actual - player1_expected))
    player2_post = round_half_up(player2.rating + params.k_factor * (player2_actual - player2_expected))

    drawn = outcome.kind == OutcomeKind.DRAW
    return (
        PlayerEloUpdate(
            user_id=player1.user_id,
            opponent_id=player2.user_id,
            won=player1_actual == 1.0,
            drawn=drawn,
            actual_score=player1_actual,
            expected_score=player1_expected,
            pre_elo=player1.rating,
            elo_delta=player1_post - player1.rating,
            post_elo=player1_post,
            peak_elo=max(player1.peak, player1_post),
        ),
        PlayerEloUpdate(
            user_id=player2.user_id,
            opponent_id=player1.user_id,
            won=player2_actual == 1.0,
            drawn=drawn,
            actual_score=player2_actual,
            expected_score=player2_expected,
            pre_elo=player2.rating,
            elo_delta=player2_post - player2.rating,
            post_elo=player2_post,
            peak_elo=max(player2.peak, player2_post),
        ),
    )
