"""Tests for the match storage transitions."""

from __future__ import annotations

from datetime import timedelta

from domain.common import MatchStatus
from repositories import matches as matches_repo


def test_partial_match_waits_until_started(session_factory, clock, make_user) -> None:
    for user_id in ("alice", "bob", "judy", "jack"):
        make_user(user_id)

    with session_factory.begin() as session:
        match = matches_repo.create_match(session, "alice", time_limit=300, now=clock())
        match_id = match.id
    assert match.status == "waiting"
    assert match.started_at is None
    assert match.player2_id is None

    clock.advance(5)
    with session_factory.begin() as session:
        started = matches_repo.start_match(
            session,
            match_id,
            player2_id="bob",
            judge1_id="judy",
            judge2_id="jack",
            now=clock(),
        )
        started_again = matches_repo.start_match(
            session,
            match_id,
            player2_id="bob",
            judge1_id="judy",
            judge2_id="jack",
            now=clock(),
        )

    assert started is True
    assert started_again is False
    with session_factory() as session:
        match = matches_repo.get_match(session, match_id)
        assert match.status == "active"
        assert match.current_turn == "alice"
        assert match.judge_ids == ("judy", "jack")
        assert match.started_at == clock()
        assert matches_repo.get_active_for_user(session, "jack").id == match_id


def test_update_status_stamps_end_only_for_terminal_states(session_factory, clock, make_user) -> None:
    make_user("alice")
    with session_factory.begin() as session:
        match_id = matches_repo.create_match(session, "alice", time_limit=300, now=clock()).id

    with session_factory.begin() as session:
        matches_repo.update_status(session, match_id, MatchStatus.WAITING, now=clock())
    with session_factory() as session:
        assert matches_repo.get_match(session, match_id).ended_at is None

    clock.advance(timedelta(minutes=1).total_seconds())
    with session_factory.begin() as session:
        matches_repo.update_status(session, match_id, MatchStatus.COMPLETED, now=clock())
    with session_factory() as session:
        match = matches_repo.get_match(session, match_id)
        assert match.status == "completed"
        assert match.ended_at == clock()
