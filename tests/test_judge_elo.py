"""Unit tests for judge Elo agreement adjustments."""

from __future__ import annotations

import pytest

from domain.common import RatingSnapshot, RatingTier
from domain.ratings.judge_elo import (
    JudgeEloParameters,
    adjust_judge_elo,
    calculate_judge_updates,
    judges_agree,
)


def _judges(rating1: int, rating2: int, *, peak1: int | None = None) -> list[RatingSnapshot]:
    return [
        RatingSnapshot(user_id="j1", rating=rating1, peak=peak1 if peak1 is not None else rating1),
        RatingSnapshot(user_id="j2", rating=rating2, peak=rating2),
    ]


def test_agreement_rewards_both_judges() -> None:
    updates = calculate_judge_updates(_judges(1200, 1000), agreed=True)

    assert [update.post_elo for update in updates] == [1210, 1010]
    assert all(update.elo_delta == 10 for update in updates)
    assert all(update.agreed for update in updates)


def test_disagreement_penalises_both_judges() -> None:
    updates = calculate_judge_updates(_judges(1200, 1000), agreed=False)

    assert [update.post_elo for update in updates] == [1195, 995]
    assert all(update.elo_delta == -5 for update in updates)


def test_penalty_stops_at_floor() -> None:
    updates = calculate_judge_updates(_judges(803, 800), agreed=False)

    assert [update.post_elo for update in updates] == [800, 800]
    assert [update.elo_delta for update in updates] == [-3, 0]


def test_custom_floor_and_amounts() -> None:
    params = JudgeEloParameters(agreement_bonus=4, disagreement_penalty=20, floor=1000)

    assert adjust_judge_elo(1010, agreed=False, params=params) == 1000
    assert adjust_judge_elo(1010, agreed=True, params=params) == 1014


def test_peak_is_kept_after_a_penalty() -> None:
    updates = calculate_judge_updates(_judges(1200, 1200, peak1=1250), agreed=False)

    assert updates[0].peak_elo == 1250
    assert updates[1].peak_elo == 1200


def test_agreement_is_exact_tier_equality() -> None:
    assert judges_agree(RatingTier.GOOD, RatingTier.GOOD)
    assert not judges_agree(RatingTier.GREAT, RatingTier.EXCELLENT)


def test_exactly_two_distinct_judges_are_required() -> None:
    with pytest.raises(ValueError, match="exactly two"):
        calculate_judge_updates(_judges(1200, 1200)[:1], agreed=True)
    with pytest.raises(ValueError, match="themselves"):
        calculate_judge_updates(
            [RatingSnapshot("j1", 1200, 1200), RatingSnapshot("j1", 1200, 1200)],
            agreed=True,
        )
