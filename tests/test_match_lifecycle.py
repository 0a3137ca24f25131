"""Tests for turns, time expiry and match end."""

from __future__ import annotations

from datetime import datetime

import pytest

from domain.common import MatchOutcome, OutcomeKind
from domain.errors import ConflictError, GameValidationError
from domain.match_state import (
    MatchParameters,
    clean_content,
    forfeit_result,
    is_expired,
    natural_end_result,
    seconds_remaining,
)
from repositories import matches as matches_repo
from repositories import messages as messages_repo


def test_turns_alternate_between_players(game, start_duel) -> None:
    duel = start_duel()

    first = game.send_message(duel.match_id, duel.player1_id, "  Knight to f3  ")
    assert first.success
    assert first.data["content"] == "Knight to f3"

    repeated = game.send_message(duel.match_id, duel.player1_id, "and again")
    assert not repeated.success
    assert repeated.error_kind == "conflict"
    assert repeated.error == "Not your turn"

    assert game.send_message(duel.match_id, duel.player2_id, "Pawn takes").success
    assert game.send_message(duel.match_id, duel.player1_id, "Check").success

    messages = game.match_messages(duel.match_id, duel.judge1_id)
    assert messages.success
    assert [message["user_id"] for message in messages.data] == ["bob", "alice", "bob"]
    assert messages.data[0]["user"]["display_name"] == "Bob"
    assert game.match_detail(duel.match_id, duel.player1_id).data["current_turn"] == duel.player2_id


def test_judge_cannot_send_messages(game, start_duel) -> None:
    duel = start_duel()

    result = game.send_message(duel.match_id, duel.judge1_id, "I have opinions")

    assert result.error_kind == "conflict"


@pytest.mark.parametrize("content", ["", "    ", "x" * 501])
def test_invalid_content_is_rejected(game, start_duel, content: str) -> None:
    duel = start_duel()

    result = game.send_message(duel.match_id, duel.player1_id, content)

    assert result.error_kind == "validation"
    assert game.match_detail(duel.match_id, duel.player1_id).data["current_turn"] == duel.player1_id


def test_message_to_unknown_match(game, make_user) -> None:
    make_user("alice")

    assert game.send_message(404, "alice", "hello").error_kind == "not_found"


def test_time_limit_is_inclusive(game, clock, start_duel) -> None:
    duel = start_duel()
    clock.advance(300)

    assert game.send_message(duel.match_id, duel.player1_id, "just in time").success


def test_expired_send_closes_match_as_draw(game, clock, start_duel, user_row) -> None:
    duel = start_duel()
    clock.advance(301)

    result = game.send_message(duel.match_id, duel.player1_id, "too late")

    assert not result.success
    assert result.error_kind == "expired"
    assert result.error == "Match time expired"

    match = game.match_detail(duel.match_id, duel.player1_id).data
    assert match["status"] == "completed"
    assert match["outcome"] == "draw"
    assert match["winner_id"] is None
    assert (match["player1_score"], match["player2_score"]) == (5, 5)
    assert match["ended_at"] == "2026-01-01T12:05:05Z"
    assert game.match_messages(duel.match_id, duel.player1_id).data == []

    for user_id in (duel.player1_id, duel.player2_id):
        user = user_row(user_id)
        assert user.elo == 1200
        assert user.total_matches == 1
        assert user.draws == 1
        assert (user.wins, user.losses) == (0, 1)


def test_expired_match_is_closed_when_polled(game, clock, start_duel) -> None:
    duel = start_duel()
    clock.advance(400)

    assert game.active_match(duel.player2_id).data is None
    assert game.poll(duel.judge2_id).data["matched"] is False
    assert game.match_detail(duel.match_id, duel.judge2_id).data["status"] == "completed"


def test_forfeit_awards_the_opponent(game, start_duel, user_row) -> None:
    duel = start_duel()

    result = game.forfeit(duel.match_id, duel.player2_id)

    assert result.success
    assert result.data["status"] == "forfeit"
    assert result.data["outcome"] == "win"
    assert result.data["winner_id"] == duel.player1_id
    assert (result.data["player1_score"], result.data["player2_score"]) == (10, 0)
    assert {update["user_id"]: update["post_elo"] for update in result.data["player_updates"]} == {
        "bob": 1216,
        "alice": 1184,
    }

    winner = user_row(duel.player1_id)
    loser = user_row(duel.player2_id)
    assert (winner.elo, winner.peak_elo, winner.wins, winner.total_matches) == (1216, 1216, 1, 1)
    assert (loser.elo, loser.peak_elo, loser.losses, loser.total_matches) == (1184, 1200, 1, 1)


def test_ending_twice_is_a_no_op(game, start_duel, user_row) -> None:
    duel = start_duel()
    assert game.forfeit(duel.match_id, duel.player2_id).success

    again = game.forfeit(duel.match_id, duel.player1_id)

    assert again.error_kind == "conflict"
    assert again.error == "Match not active"
    assert user_row(duel.player1_id).elo == 1216
    assert user_row(duel.player1_id).total_matches == 1
    assert game.end_match(duel.match_id, duel.player1_id).error_kind == "conflict"


def test_judge_cannot_forfeit(game, start_duel) -> None:
    duel = start_duel()

    result = game.forfeit(duel.match_id, duel.judge1_id)

    assert result.error_kind == "conflict"
    assert game.match_detail(duel.match_id, duel.judge1_id).data["status"] == "active"


def test_outsider_cannot_touch_a_match(game, make_user, start_duel) -> None:
    duel = start_duel()
    make_user("mallory")

    assert game.match_detail(duel.match_id, "mallory").error_kind == "forbidden"
    assert game.match_messages(duel.match_id, "mallory").error_kind == "forbidden"
    assert game.forfeit(duel.match_id, "mallory").error_kind == "forbidden"


def test_natural_end_and_recent_matches(game, start_duel) -> None:
    duel = start_duel()

    ended = game.end_match(duel.match_id, duel.player1_id)
    assert ended.success
    assert ended.data["status"] == "completed"
    assert ended.data["outcome"] == "draw"

    recent = game.recent_matches(duel.player2_id)
    assert recent.success
    assert len(recent.data) == 1
    assert recent.data[0]["opponent"]["id"] == duel.player1_id
    assert recent.data[0]["user_was_player1"] is False
    assert recent.data[0]["is_winner"] is False
    assert game.recent_matches(duel.judge1_id).data == []


def test_active_match_includes_participants(game, start_duel) -> None:
    duel = start_duel()

    active = game.active_match(duel.judge2_id)

    assert active.data["id"] == duel.match_id
    assert active.data["player1"]["id"] == duel.player1_id
    assert active.data["judge2"]["id"] == duel.judge2_id


def test_is_expired_boundary() -> None:
    started = datetime(2026, 1, 1, 12, 0, 0)

    assert not is_expired(started, 300, datetime(2026, 1, 1, 12, 5, 0))
    assert is_expired(started, 300, datetime(2026, 1, 1, 12, 5, 0, 1))
    assert not is_expired(None, 300, datetime(2026, 1, 1, 13, 0, 0))
    assert seconds_remaining(started, 300, datetime(2026, 1, 1, 12, 6, 0)) == 0


def test_forfeit_result_scores() -> None:
    result = forfeit_result("p1", "p2", "p1", MatchParameters())

    assert result.outcome == MatchOutcome.win("p2")
    assert (result.player1_score, result.player2_score) == (0, 10)
    assert result.forfeit

    with pytest.raises(ConflictError):
        forfeit_result("p1", "p2", "j1", MatchParameters())


def test_natural_end_is_a_provisional_draw() -> None:
    result = natural_end_result(MatchParameters())

    assert result.outcome.kind == OutcomeKind.DRAW
    assert (result.player1_score, result.player2_score) == (5, 5)
    assert not result.forfeit


def test_clean_content_limits() -> None:
    assert clean_content("\n hi \t", 10) == "hi"
    assert clean_content("x" * 10, 10) == "x" * 10
    with pytest.raises(GameValidationError):
        clean_content("x" * 11, 10)
    with pytest.raises(GameValidationError):
        clean_content(None, 10)


def test_forfeit_after_time_limit_closes_as_draw(game, clock, start_duel, user_row) -> None:
    duel = start_duel()
    clock.advance(400)

    result = game.forfeit(duel.match_id, duel.player2_id)

    assert not result.success
    assert result.error_kind == "expired"
    match = game.match_detail(duel.match_id, duel.player1_id).data
    assert match["status"] == "completed"
    assert match["outcome"] == "draw"
    assert match["winner_id"] is None
    for user_id in (duel.player1_id, duel.player2_id):
        user = user_row(user_id)
        assert user.elo == 1200
        assert (user.wins, user.losses, user.draws) == (0, 1, 1)


def test_end_after_time_limit_is_the_natural_draw(game, clock, start_duel) -> None:
    duel = start_duel()
    clock.advance(400)

    result = game.end_match(duel.match_id, duel.player1_id)

    assert result.success
    assert result.data["status"] == "completed"
    assert result.data["outcome"] == "draw"


def test_out_of_turn_send_after_time_limit_closes_match(game, clock, start_duel) -> None:
    duel = start_duel()
    clock.advance(400)

    result = game.send_message(duel.match_id, duel.player2_id, "late")

    assert result.error_kind == "expired"
    assert game.match_detail(duel.match_id, duel.player2_id).data["status"] == "completed"


def test_draw_counts_as_one_loss_for_each_player(game, start_duel, user_row) -> None:
    duel = start_duel()

    assert game.end_match(duel.match_id, duel.player1_id).success

    for user_id in (duel.player1_id, duel.player2_id):
        user = user_row(user_id)
        assert user.total_matches == 1
        assert user.wins + user.losses == 1
        assert user.draws == 1


def test_switch_turn_only_succeeds_once(session_factory, start_duel) -> None:
    duel = start_duel()

    with session_factory.begin() as session:
        first = matches_repo.switch_turn(
            session,
            duel.match_id,
            from_user_id=duel.player1_id,
            to_user_id=duel.player2_id,
        )
        second = matches_repo.switch_turn(
            session,
            duel.match_id,
            from_user_id=duel.player1_id,
            to_user_id=duel.player2_id,
        )

    assert first is True
    assert second is False


def test_lost_turn_race_persists_nothing(game, session_factory, start_duel, monkeypatch) -> None:
    duel = start_duel()
    # A concurrent send took the turn between the read and the swap.
    monkeypatch.setattr(matches_repo, "switch_turn", lambda *args, **kwargs: False)

    result = game.send_message(duel.match_id, duel.player1_id, "Rook lift")

    assert result.error_kind == "conflict"
    assert result.error == "Not your turn"
    with session_factory() as session:
        assert messages_repo.list_for_match(session, duel.match_id) == []
