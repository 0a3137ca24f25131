"""Shared fixtures: a throwaway SQLite database, a controllable clock and match helpers."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory, ensure_schema
from models import User
from services.game_api import GameAPI


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass(frozen=True)
class Duel:
    match_id: int
    player1_id: str
    player2_id: str
    judge1_id: str
    judge2_id: str


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'game.db'}")
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def game(session_factory: sessionmaker[Session], clock: FakeClock) -> GameAPI:
    return GameAPI(session_factory, clock=clock)


@pytest.fixture
def make_user(game: GameAPI, session_factory: sessionmaker[Session]) -> Callable[..., str]:
    def _make(user_id: str, *, elo: int | None = None, judge_elo: int | None = None) -> str:
        result = game.register_user(user_id, first_name=user_id.title())
        assert result.success, result.error
        if elo is not None or judge_elo is not None:
            with session_factory.begin() as session:
                user = session.get(User, user_id)
                assert user is not None
                if elo is not None:
                    user.elo = elo
                    user.peak_elo = max(user.peak_elo, elo)
                if judge_elo is not None:
                    user.judge_elo = judge_elo
                    user.peak_judge_elo = max(user.peak_judge_elo, judge_elo)
        return user_id

    return _make


@pytest.fixture
def start_duel(game: GameAPI, clock: FakeClock, make_user: Callable[..., str]) -> Callable[..., Duel]:
    """Queue two judges and two players and return the match they form.

    The player who joins second triggers the match and therefore moves first.
    """

    def _start(*, waiting_elo: int | None = None, joining_elo: int | None = None) -> Duel:
        waiting = make_user("alice", elo=waiting_elo)
        joining = make_user("bob", elo=joining_elo)
        judge1 = make_user("judy")
        judge2 = make_user("jack")

        assert game.join_queue(judge1, "judge").success
        clock.advance(1)
        assert game.join_queue(judge2, "judge").success
        clock.advance(1)
        joined = game.join_queue(waiting, "player")
        assert joined.success and joined.data["matched"] is False
        clock.advance(2)
        matched = game.join_queue(joining, "player")
        assert matched.success, matched.error
        assert matched.data["matched"] is True
        return Duel(
            match_id=matched.data["match_id"],
            player1_id=joining,
            player2_id=waiting,
            judge1_id=judge1,
            judge2_id=judge2,
        )

    return _start


@pytest.fixture
def user_row(session_factory: sessionmaker[Session]) -> Callable[[str], User]:
    def _get(user_id: str) -> User:
        with session_factory() as session:
            user = session.get(User, user_id)
            assert user is not None
            return user

    return _get
