"""Queue membership for players and judges."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from domain.common import QueueRole, utcnow
from domain.errors import AlreadyInMatchError, NotFoundError
from domain.matchmaking import (
    MatchmakingParameters,
    join_grace_cutoff,
    milliseconds_until_next_step,
    search_range,
    waited_milliseconds,
)
from models import QueueEntry
from repositories import matches as matches_repo
from repositories import queue as queue_repo
from repositories import users as users_repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueStatus:
    in_queue: bool
    match_type: str | None = None
    position: int | None = None
    waited_ms: int | None = None
    elo_range: int | None = None
    next_expansion_ms: int | None = None


class QueueManager:
    """Join/leave/inspect the queue; each call is its own transaction."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        params: MatchmakingParameters | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.params = params or MatchmakingParameters()
        self._clock = clock

    def join(self, user_id: str, elo: int, match_type: QueueRole | str) -> QueueEntry:
        role = match_type if isinstance(match_type, QueueRole) else QueueRole.parse(match_type)
        with self._session_factory.begin() as session:
            if users_repo.get_user(session, user_id) is None:
                raise NotFoundError(f"User {user_id} not found")
            if matches_repo.get_active_for_user(session, user_id) is not None:
                raise AlreadyInMatchError()
            entry = queue_repo.join_queue(session, user_id, elo, role.value, now=self._clock())
        logger.info("user=%s joined queue as %s (elo=%s)", user_id, role.value, elo)
        return entry

    def leave(self, user_id: str) -> None:
        with self._session_factory.begin() as session:
            queue_repo.leave_queue(session, user_id)

    def get(self, user_id: str) -> QueueEntry | None:
        with self._session_factory() as session:
            return queue_repo.get_queue_entry(session, user_id)

    def peek_oldest_judge(self, exclude_user_id: str | None = None) -> QueueEntry | None:
        excluded = (exclude_user_id,) if exclude_user_id else ()
        with self._session_factory() as session:
            return queue_repo.find_judge(session, excluded)

    def find_opponent(self, elo: int, elo_range: int, exclude_user_id: str) -> QueueEntry | None:
        now = self._clock()
        with self._session_factory() as session:
            return queue_repo.find_opponent(
                session,
                elo=elo,
                elo_range=elo_range,
                exclude_user_id=exclude_user_id,
                joined_before=join_grace_cutoff(now, self.params),
            )

    def status(self, user_id: str) -> QueueStatus:
        now = self._clock()
        with self._session_factory() as session:
            entry = queue_repo.get_queue_entry(session, user_id)
            if entry is None:
                return QueueStatus(in_queue=False)
            waited_ms = waited_milliseconds(entry.joined_at, now)
            return QueueStatus(
                in_queue=True,
                match_type=entry.match_type,
                position=queue_repo.queue_position(session, entry),
                waited_ms=waited_ms,
                elo_range=search_range(waited_ms, self.params),
                next_expansion_ms=milliseconds_until_next_step(waited_ms, self.params),
            )
