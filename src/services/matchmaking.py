"""Turn a queued player into a full match.

Each attempt runs in one transaction: pick the opponent and two judges, claim all
four queue entries with a conditional delete, then create the active match. If any
entry was claimed by a concurrent attempt first, the transaction is rolled back and
the caller simply polls again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from domain.common import QueueRole, utcnow
from domain.match_state import MatchParameters
from domain.matchmaking import (
    MatchmakingParameters,
    join_grace_cutoff,
    search_range,
    waited_milliseconds,
)
from models import Match
from repositories import matches as matches_repo
from repositories import queue as queue_repo

logger = logging.getLogger(__name__)

JUDGES_PER_MATCH = 2


class _ClaimLost(Exception):
    """A participant was taken by another transaction between search and claim."""


class MatchMatcher:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        params: MatchmakingParameters | None = None,
        match_params: MatchParameters | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.params = params or MatchmakingParameters()
        self.match_params = match_params or MatchParameters()
        self._clock = clock

    def try_match(self, user_id: str) -> Match | None:
        """Form a match for a queued player, or return None and leave the queue untouched."""
        now = self._clock()
        try:
            with self._session_factory.begin() as session:
                return self._try_match(session, user_id, now)
        except _ClaimLost as exc:
            logger.info("match attempt for user=%s lost a claim race: %s", user_id, exc)
            return None

    def _try_match(self, session: Session, user_id: str, now: datetime) -> Match | None:
        entry = queue_repo.get_queue_entry(session, user_id)
        if entry is None or entry.match_type != QueueRole.PLAYER.value:
            return None

        elo_range = search_range(waited_milliseconds(entry.joined_at, now), self.params)
        opponent = queue_repo.find_opponent(
            session,
            elo=entry.elo,
            elo_range=elo_range,
            exclude_user_id=user_id,
            joined_before=join_grace_cutoff(now, self.params),
        )
        if opponent is None:
            logger.debug("user=%s no opponent within +/-%s of %s", user_id, elo_range, entry.elo)
            return None

        judges = queue_repo.find_judges(
            session,
            exclude_user_ids=(user_id, opponent.user_id),
            limit=JUDGES_PER_MATCH,
        )
        if len(judges) < JUDGES_PER_MATCH:
            logger.debug("user=%s found opponent=%s but only %d judge(s)", user_id, opponent.user_id, len(judges))
            return None

        participants = [user_id, opponent.user_id, judges[0].user_id, judges[1].user_id]
        claimed = queue_repo.claim_entries(session, participants)
        missing = set(participants) - claimed
        if missing:
            raise _ClaimLost(f"already claimed: {sorted(missing)}")

        match = matches_repo.create_match(
            session,
            user_id,
            opponent.user_id,
            judges[0].user_id,
            judges[1].user_id,
            time_limit=self.match_params.time_limit_seconds,
            now=now,
        )
        logger.info(
            "match=%s formed: players=%s,%s judges=%s,%s range=%s",
            match.id,
            user_id,
            opponent.user_id,
            judges[0].user_id,
            judges[1].user_id,
            elo_range,
        )
        return match
