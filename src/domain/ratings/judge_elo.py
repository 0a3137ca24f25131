"""Judge Elo from inter-judge agreement.

Judges are not rated against each other with the logistic model. When both judges
of a match have rated the same message, each of them moves by a flat amount: up when
they picked the same tier, down otherwise. Rewards are larger than penalties, and the
rating never drops below a floor.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.common import RatingSnapshot, RatingTier


@dataclass(frozen=True)
class JudgeEloParameters:
    initial_elo: int = 1200
    agreement_bonus: int = 10
    disagreement_penalty: int = 5
    floor: int = 800


@dataclass(frozen=True)
class JudgeEloUpdate:
    user_id: str
    agreed: bool
    pre_elo: int
    elo_delta: int
    post_elo: int
    peak_elo: int


def judges_agree(first: RatingTier, second: RatingTier) -> bool:
    return first == second


def adjust_judge_elo(rating: int, *, agreed: bool, params: JudgeEloParameters) -> int:
    delta = params.agreement_bonus if agreed else -params.disagreement_penalty
    return max(params.floor, rating + delta)


def calculate_judge_updates(
    judges: Sequence[RatingSnapshot],
    *,
    agreed: bool,
    params: JudgeEloParameters | None = None,
) -> list[JudgeEloUpdate]:
    """Compute the judge Elo change for the two judges of one rated message."""
    params = params or JudgeEloParameters()
    if len(judges) != 2:
        raise ValueError(f"Judge consensus needs exactly two judges, got {len(judges)}")
    if judges[0].user_id == judges[1].user_id:
        raise ValueError(f"judge {judges[0].user_id} cannot agree with themselves")

    updates: list[JudgeEloUpdate] = []
    for judge in judges:
        post_elo = adjust_judge_elo(judge.rating, agreed=agreed, params=params)
        updates.append(
            JudgeEloUpdate(
                user_id=judge.user_id,
                agreed=agreed,
                pre_elo=judge.rating,
                elo_delta=post_elo - judge.rating,
                post_elo=post_elo,
                peak_elo=max(judge.peak, post_elo),
            )
        )
    return updates
