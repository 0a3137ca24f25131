"""Upward API: every operation returns a `ServiceResult` instead of raising.

Engine errors become failed results carrying a user-facing message and a category;
storage failures are logged with their traceback and reported generically.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from domain.common import QueueRole, utcnow
from domain.config import GameConfig
from domain.errors import (
    AccessDeniedError,
    GameError,
    MatchNotActiveError,
    NotFoundError,
    TimeExpiredError,
)
from models import Match
from repositories import judge_ratings as ratings_repo
from repositories import matches as matches_repo
from repositories import messages as messages_repo
from repositories import users as users_repo
from services.consensus import JudgeConsensusTracker
from services.lifecycle import MatchEnd, MatchLifecycle
from services.matchmaking import MatchMatcher
from services.presenters import (
    match_payload,
    message_payload,
    rating_payload,
    recent_match_payload,
    user_profile,
)
from services.queue_manager import QueueManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    success: bool
    data: Any = None
    error: str | None = None
    error_kind: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> ServiceResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, error_kind: str = "error") -> ServiceResult:
        return cls(success=False, error=error, error_kind=error_kind)

    def as_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error, "error_kind": self.error_kind}


class GameAPI:
    """Facade wiring queue, matcher, lifecycle and consensus over one session factory."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: GameConfig | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or GameConfig()
        self._session_factory = session_factory
        self._clock = clock
        self.queue = QueueManager(session_factory, self.config.matchmaking, clock=clock)
        self.matcher = MatchMatcher(
            session_factory,
            self.config.matchmaking,
            self.config.match,
            clock=clock,
        )
        self.lifecycle = MatchLifecycle(
            session_factory,
            self.config.match,
            self.config.player_elo,
            clock=clock,
        )
        self.consensus = JudgeConsensusTracker(session_factory, self.config.judge_elo, clock=clock)

    def _run(self, operation: str, func: Callable[[], Any]) -> ServiceResult:
        try:
            return ServiceResult.ok(func())
        except GameError as exc:
            logger.debug("%s rejected: %s", operation, exc.message)
            return ServiceResult.fail(exc.message, exc.category)
        except SQLAlchemyError:
            logger.exception("%s failed", operation)
            return ServiceResult.fail(f"Failed to {operation}")

    # Users

    def register_user(
        self,
        user_id: str,
        *,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> ServiceResult:
        def run() -> dict[str, Any]:
            with self._session_factory.begin() as session:
                user = users_repo.upsert_user(
                    session,
                    user_id=user_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    profile_image_url=profile_image_url,
                    initial_elo=self.config.player_elo.initial_elo,
                    initial_judge_elo=self.config.judge_elo.initial_elo,
                    now=self._clock(),
                )
                return user_profile(user)

        return self._run("register user", run)

    def get_user(self, user_id: str) -> ServiceResult:
        def run() -> dict[str, Any]:
            with self._session_factory() as session:
                user = users_repo.get_user(session, user_id)
                if user is None:
                    raise NotFoundError(f"User {user_id} not found")
                return user_profile(user)

        return self._run("fetch user", run)

    # Queue

    def join_queue(self, user_id: str, match_type: str = "player") -> ServiceResult:
        def run() -> dict[str, Any]:
            role = QueueRole.parse(match_type)
            with self._session_factory() as session:
                user = users_repo.get_user(session, user_id)
                if user is None:
                    raise NotFoundError(f"User {user_id} not found")
                elo = user.elo if role == QueueRole.PLAYER else user.judge_elo

            self.queue.join(user_id, elo, role)
            if role == QueueRole.PLAYER:
                match = self.matcher.try_match(user_id)
                if match is not None:
                    return self._matched_payload(match, user_id)
            return {"matched": False, "queue": asdict(self.queue.status(user_id))}

        return self._run("join queue", run)

    def leave_queue(self, user_id: str) -> ServiceResult:
        return self._run("leave queue", lambda: self.queue.leave(user_id))

    def queue_status(self, user_id: str) -> ServiceResult:
        return self._run("get queue status", lambda: asdict(self.queue.status(user_id)))

    def poll(self, user_id: str) -> ServiceResult:
        """Client heartbeat: report the active match, or retry matching while queued."""

        def run() -> dict[str, Any]:
            active = self._active_match_after_expiry(user_id)
            if active is not None:
                return self._matched_payload(active, user_id)

            entry = self.queue.get(user_id)
            if entry is None:
                return {"matched": False, "queue": asdict(self.queue.status(user_id))}
            if entry.match_type == QueueRole.PLAYER.value:
                match = self.matcher.try_match(user_id)
                if match is not None:
                    return self._matched_payload(match, user_id)
            return {"matched": False, "queue": asdict(self.queue.status(user_id))}

        return self._run("poll for match", run)

    # Matches

    def active_match(self, user_id: str) -> ServiceResult:
        def run() -> dict[str, Any] | None:
            active = self._active_match_after_expiry(user_id)
            if active is None:
                return None
            with self._session_factory() as session:
                match = matches_repo.get_with_participants(session, active.id)
                if match is None:
                    return None
                return match_payload(match, now=self._clock(), with_participants=True)

        return self._run("get active match", run)

    def match_detail(self, match_id: int, user_id: str) -> ServiceResult:
        def run() -> dict[str, Any]:
            self.lifecycle.expire_if_due(match_id)
            with self._session_factory() as session:
                match = matches_repo.get_with_participants(session, match_id)
                if match is None:
                    raise NotFoundError(f"Match {match_id} not found")
                if not match.involves(user_id):
                    raise AccessDeniedError()
                return match_payload(match, now=self._clock(), with_participants=True)

        return self._run("get match", run)

    def match_messages(self, match_id: int, user_id: str) -> ServiceResult:
        def run() -> list[dict[str, Any]]:
            with self._session_factory() as session:
                match = matches_repo.get_match(session, match_id)
                if match is None:
                    raise NotFoundError(f"Match {match_id} not found")
                if not match.involves(user_id):
                    raise AccessDeniedError()
                ratings_by_message: dict[int, list[Any]] = {}
                for rating in ratings_repo.list_for_match(session, match_id):
                    ratings_by_message.setdefault(rating.message_id, []).append(rating)
                return [
                    message_payload(message, ratings_by_message.get(message.id, ()))
                    for message in messages_repo.list_for_match(session, match_id)
                ]

        return self._run("get messages", run)

    def send_message(self, match_id: int, user_id: str, content: str) -> ServiceResult:
        return self._run(
            "send message",
            lambda: message_payload(self.lifecycle.send_message(match_id, user_id, content)),
        )

    def forfeit(self, match_id: int, user_id: str) -> ServiceResult:
        return self._run("forfeit match", lambda: self._end(match_id, user_id, forfeit=True))

    def end_match(self, match_id: int, user_id: str) -> ServiceResult:
        return self._run("end match", lambda: self._end(match_id, user_id, forfeit=False))

    def _end(self, match_id: int, user_id: str, *, forfeit: bool) -> dict[str, Any]:
        with self._session_factory() as session:
            match = matches_repo.get_match(session, match_id)
            if match is None:
                raise NotFoundError(f"Match {match_id} not found")
            if not match.involves(user_id):
                raise AccessDeniedError()

        ended = self.lifecycle.end_match(match_id, user_id if forfeit else None)
        if ended.expired:
            raise TimeExpiredError()
        if not ended.success or ended.status is None or ended.outcome is None:
            raise MatchNotActiveError()
        return _match_end_payload(ended)

    # Judging

    def rate_message(
        self,
        message_id: int,
        judge_id: str,
        rating: str,
        explanation: str | None = None,
    ) -> ServiceResult:
        def run() -> dict[str, Any]:
            receipt = self.consensus.rate(message_id, judge_id, rating, explanation)
            return {
                "rating": rating_payload(receipt.rating),
                "consensus_reached": receipt.consensus_reached,
                "elo_updated": bool(receipt.judge_updates),
                "agreed": receipt.agreed,
                "message": (
                    "Rating submitted. Judge Elo updated based on agreement."
                    if receipt.consensus_reached
                    else "Rating submitted. Waiting for the other judge."
                ),
                "judge_updates": [asdict(update) for update in receipt.judge_updates],
            }

        return self._run("rate message", run)

    # Stats

    def leaderboard(self, limit: int | None = None) -> ServiceResult:
        def run() -> list[dict[str, Any]]:
            with self._session_factory() as session:
                users = users_repo.top_by_elo(session, limit or self.config.service.leaderboard_limit)
                return [{"rank": rank, **user_profile(user)} for rank, user in enumerate(users, start=1)]

        return self._run("get leaderboard", run)

    def judge_leaderboard(self, limit: int | None = None) -> ServiceResult:
        def run() -> list[dict[str, Any]]:
            with self._session_factory() as session:
                users = users_repo.top_by_judge_elo(session, limit or self.config.service.leaderboard_limit)
                return [{"rank": rank, **user_profile(user)} for rank, user in enumerate(users, start=1)]

        return self._run("get judge leaderboard", run)

    def recent_matches(self, user_id: str, limit: int | None = None) -> ServiceResult:
        def run() -> list[dict[str, Any]]:
            with self._session_factory() as session:
                matches = matches_repo.get_recent_for_user(
                    session,
                    user_id,
                    limit or self.config.service.recent_matches_limit,
                )
                return [recent_match_payload(match, user_id) for match in matches]

        return self._run("get recent matches", run)

    def _active_match_after_expiry(self, user_id: str) -> Match | None:
        with self._session_factory() as session:
            match = matches_repo.get_active_for_user(session, user_id)
        if match is None:
            return None
        if self.lifecycle.expire_if_due(match.id):
            return None
        return match

    def _matched_payload(self, match: Match, user_id: str) -> dict[str, Any]:
        if user_id in match.player_ids:
            role = QueueRole.PLAYER.value
            opponent_id = match.player2_id if match.player1_id == user_id else match.player1_id
        else:
            role = QueueRole.JUDGE.value
            opponent_id = None
        return {
            "matched": True,
            "match_id": match.id,
            "role": role,
            "opponent_id": opponent_id,
        }


def _match_end_payload(ended: MatchEnd) -> dict[str, Any]:
    if ended.status is None or ended.outcome is None:
        raise ValueError(f"match={ended.match_id} has no end state to report")
    return {
        "match_id": ended.match_id,
        "status": ended.status.value,
        "outcome": ended.outcome.kind.value,
        "winner_id": ended.outcome.winner_id,
        "player1_score": ended.player1_score,
        "player2_score": ended.player2_score,
        "explanation": ended.explanation,
        "player_updates": [asdict(update) for update in ended.player_updates],
    }
