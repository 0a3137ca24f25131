"""Per-message judge ratings and the judge Elo update they trigger."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from domain.common import RatingSnapshot, RatingTier, utcnow
from domain.errors import ConflictError, DuplicateRatingError, NotFoundError
from domain.ratings.judge_elo import (
    JudgeEloParameters,
    JudgeEloUpdate,
    calculate_judge_updates,
    judges_agree,
)
from models import JudgeRating
from repositories import judge_ratings as ratings_repo
from repositories import matches as matches_repo
from repositories import messages as messages_repo
from repositories import users as users_repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingReceipt:
    rating: JudgeRating
    consensus_reached: bool
    agreed: bool | None = None
    judge_updates: tuple[JudgeEloUpdate, ...] = field(default_factory=tuple)


class JudgeConsensusTracker:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        params: JudgeEloParameters | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.params = params or JudgeEloParameters()
        self._clock = clock

    def rate(
        self,
        message_id: int,
        judge_id: str,
        rating: RatingTier | str,
        explanation: str | None = None,
    ) -> RatingReceipt:
        tier = rating if isinstance(rating, RatingTier) else RatingTier.parse(rating)
        explanation = (explanation or "").strip() or None
        now = self._clock()
        try:
            with self._session_factory.begin() as session:
                return self._rate(session, message_id, judge_id, tier, explanation, now)
        except IntegrityError as exc:
            # Unique (message_id, judge_id) caught a concurrent duplicate.
            raise DuplicateRatingError() from exc

    def _rate(
        self,
        session: Session,
        message_id: int,
        judge_id: str,
        tier: RatingTier,
        explanation: str | None,
        now: datetime,
    ) -> RatingReceipt:
        # Row lock serialises raters of the same message so the second one sees both ratings.
        message = messages_repo.get_message(session, message_id, for_update=True)
        if message is None:
            raise NotFoundError(f"Message {message_id} not found")
        match = matches_repo.get_match(session, message.match_id)
        if match is None or judge_id not in match.judge_ids:
            raise ConflictError("Only a judge of this match can rate its messages")
        if ratings_repo.get_rating(session, message_id, judge_id) is not None:
            raise DuplicateRatingError()

        judge_rating = ratings_repo.create_rating(session, message_id, judge_id, tier, explanation, now=now)
        ratings = ratings_repo.list_for_message(session, message_id)
        if len(ratings) != 2:
            return RatingReceipt(rating=judge_rating, consensus_reached=False)

        if not messages_repo.mark_consensus(session, message_id, now=now):
            return RatingReceipt(rating=judge_rating, consensus_reached=False)

        first, second = ratings
        agreed = judges_agree(RatingTier(first.rating), RatingTier(second.rating))
        judges = users_repo.get_users(session, [first.judge_id, second.judge_id])
        updates = calculate_judge_updates(
            [
                RatingSnapshot(
                    user_id=judges[judge].id,
                    rating=judges[judge].judge_elo,
                    peak=judges[judge].peak_judge_elo,
                )
                for judge in (first.judge_id, second.judge_id)
            ],
            agreed=agreed,
            params=self.params,
        )
        for update in updates:
            users_repo.update_judge_elo(session, update.user_id, update.post_elo, now=now)
            users_repo.update_judge_stats(session, update.user_id, agreed=update.agreed, now=now)

        logger.info(
            "message=%s consensus %s (%s vs %s) judges=%s,%s",
            message_id,
            "agreed" if agreed else "disagreed",
            first.rating,
            second.rating,
            first.judge_id,
            second.judge_id,
        )
        return RatingReceipt(
            rating=judge_rating,
            consensus_reached=True,
            agreed=agreed,
            judge_updates=tuple(updates),
        )
