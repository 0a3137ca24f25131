"""Match state machine: turns, time limit, and match end.

Timeouts are data, not timers. An active match whose time limit has passed is closed
through the natural-end path the next time anything touches it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from domain.common import MatchOutcome, MatchStatus, RatingSnapshot, utcnow
from domain.errors import (
    MatchNotActiveError,
    NotFoundError,
    NotYourTurnError,
    TimeExpiredError,
)
from domain.match_state import (
    MatchParameters,
    MatchResult,
    clean_content,
    forfeit_result,
    is_expired,
    natural_end_result,
    other_player,
)
from domain.ratings.player_elo import PlayerEloParameters, PlayerEloUpdate, calculate_player_updates
from models import Match, Message
from repositories import matches as matches_repo
from repositories import messages as messages_repo
from repositories import users as users_repo

logger = logging.getLogger(__name__)

NATURAL_END_EXPLANATION = "Match ended. Judges rate each message; the result stands as a draw."
FORFEIT_EXPLANATION = "Match forfeited."


@dataclass(frozen=True)
class MatchEnd:
    """What `end_match` reports back; `success` is False when nothing changed."""

    success: bool
    match_id: int
    status: MatchStatus | None = None
    outcome: MatchOutcome | None = None
    player1_score: int | None = None
    player2_score: int | None = None
    explanation: str | None = None
    player_updates: tuple[PlayerEloUpdate, ...] = field(default_factory=tuple)
    expired: bool = False


class MatchLifecycle:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        params: MatchParameters | None = None,
        elo_params: PlayerEloParameters | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.params = params or MatchParameters()
        self.elo_params = elo_params or PlayerEloParameters()
        self._clock = clock

    def send_message(self, match_id: int, user_id: str, content: str) -> Message:
        text = clean_content(content, self.params.max_message_length)
        now = self._clock()
        expired = False

        with self._session_factory.begin() as session:
            match = matches_repo.get_match(session, match_id)
            if match is None:
                raise NotFoundError(f"Match {match_id} not found")
            if match.status != MatchStatus.ACTIVE.value:
                raise MatchNotActiveError()

            # An overdue match closes on any send, whoever's turn it is.
            if is_expired(match.started_at, match.time_limit, now):
                self._close(session, match, natural_end_result(self.params), now)
                expired = True
            else:
                if match.current_turn != user_id:
                    raise NotYourTurnError()
                next_user_id = other_player(match.player1_id, match.player2_id, user_id)
                if next_user_id is None:
                    raise MatchNotActiveError()
                # Compare-and-swap on the turn: a concurrent send from the same player loses here.
                if not matches_repo.switch_turn(
                    session,
                    match_id,
                    from_user_id=user_id,
                    to_user_id=next_user_id,
                ):
                    raise NotYourTurnError()
                message = messages_repo.create_message(session, match_id, user_id, text, now=now)

        if expired:
            raise TimeExpiredError()
        return message

    def end_match(self, match_id: int, forfeit_user_id: str | None = None) -> MatchEnd:
        """End an active match; an overdue one always ends as the natural draw.

        A forfeit requested after the time limit closes the match through the natural
        path and reports `success=False, expired=True`.
        """
        now = self._clock()
        with self._session_factory.begin() as session:
            match = matches_repo.get_match(session, match_id)
            if match is None or match.status != MatchStatus.ACTIVE.value:
                return MatchEnd(success=False, match_id=match_id)

            if is_expired(match.started_at, match.time_limit, now):
                ended = self._close(session, match, natural_end_result(self.params), now)
                if forfeit_user_id is None:
                    return ended
                return MatchEnd(success=False, match_id=match_id, expired=True)

            if forfeit_user_id is not None:
                result = forfeit_result(match.player1_id, match.player2_id, forfeit_user_id, self.params)
            else:
                result = natural_end_result(self.params)
            return self._close(session, match, result, now)

    def expire_if_due(self, match_id: int) -> bool:
        """Close an overdue active match; True when this call closed it."""
        now = self._clock()
        with self._session_factory.begin() as session:
            match = matches_repo.get_match(session, match_id)
            if match is None or match.status != MatchStatus.ACTIVE.value:
                return False
            if not is_expired(match.started_at, match.time_limit, now):
                return False
            return self._close(session, match, natural_end_result(self.params), now).success

    def _close(self, session: Session, match: Match, result: MatchResult, now: datetime) -> MatchEnd:
        status = MatchStatus.FORFEIT if result.forfeit else MatchStatus.COMPLETED
        if not matches_repo.set_winner(
            session,
            match.id,
            outcome=result.outcome,
            player1_score=result.player1_score,
            player2_score=result.player2_score,
            status=status,
            now=now,
        ):
            # Another request ended it first.
            return MatchEnd(success=False, match_id=match.id)

        player_updates: tuple[PlayerEloUpdate, ...] = ()
        if result.outcome.is_decided:
            player_updates = self._apply_player_elo(session, match, result.outcome, now)

        logger.info(
            "match=%s ended status=%s outcome=%s winner=%s scores=%s-%s",
            match.id,
            status.value,
            result.outcome.kind.value,
            result.outcome.winner_id,
            result.player1_score,
            result.player2_score,
        )
        return MatchEnd(
            success=True,
            match_id=match.id,
            status=status,
            outcome=result.outcome,
            player1_score=result.player1_score,
            player2_score=result.player2_score,
            explanation=FORFEIT_EXPLANATION if result.forfeit else NATURAL_END_EXPLANATION,
            player_updates=player_updates,
        )

    def _apply_player_elo(
        self,
        session: Session,
        match: Match,
        outcome: MatchOutcome,
        now: datetime,
    ) -> tuple[PlayerEloUpdate, ...]:
        if match.player2_id is None:
            return ()
        users = users_repo.get_users(session, [match.player1_id, match.player2_id])
        player1 = users.get(match.player1_id)
        player2 = users.get(match.player2_id)
        if player1 is None or player2 is None:
            logger.warning("match=%s ended with a missing player row; Elo left unchanged", match.id)
            return ()

        updates = calculate_player_updates(
            RatingSnapshot(user_id=player1.id, rating=player1.elo, peak=player1.peak_elo),
            RatingSnapshot(user_id=player2.id, rating=player2.elo, peak=player2.peak_elo),
            outcome,
            self.elo_params,
        )
        for update in updates:
            users_repo.update_elo(session, update.user_id, update.post_elo, now=now)
            users_repo.update_stats(session, update.user_id, won=update.won, drawn=update.drawn, now=now)
        return updates
