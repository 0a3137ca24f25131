"""Plain-dict views of ORM rows for the upward API."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import inspect

from domain.match_state import seconds_remaining
from models import JudgeRating, Match, Message, User


def format_timestamp(timestamp: datetime | None) -> str | None:
    if timestamp is None:
        return None
    return timestamp.isoformat() + "Z"


def user_summary(user: User | None) -> dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "display_name": user.display_name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "profile_image_url": user.profile_image_url,
        "elo": user.elo,
        "judge_elo": user.judge_elo,
    }


def user_profile(user: User) -> dict[str, Any]:
    payload = user_summary(user) or {}
    payload.update(
        {
            "email": user.email,
            "peak_elo": user.peak_elo,
            "peak_judge_elo": user.peak_judge_elo,
            "total_matches": user.total_matches,
            "wins": user.wins,
            "losses": user.losses,
            "draws": user.draws,
            "total_judge_matches": user.total_judge_matches,
            "judge_agreements": user.judge_agreements,
            "judge_disagreements": user.judge_disagreements,
        }
    )
    return payload


def match_payload(match: Match, *, now: datetime, with_participants: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": match.id,
        "status": match.status,
        "player1_id": match.player1_id,
        "player2_id": match.player2_id,
        "judge1_id": match.judge1_id,
        "judge2_id": match.judge2_id,
        "current_turn": match.current_turn,
        "outcome": match.outcome,
        "winner_id": match.winner_id,
        "player1_score": match.player1_score,
        "player2_score": match.player2_score,
        "started_at": format_timestamp(match.started_at),
        "ended_at": format_timestamp(match.ended_at),
        "time_limit": match.time_limit,
        "seconds_remaining": (
            seconds_remaining(match.started_at, match.time_limit, now)
            if match.status == "active"
            else None
        ),
    }
    if with_participants:
        payload["player1"] = user_summary(match.player1)
        payload["player2"] = user_summary(match.player2)
        payload["judge1"] = user_summary(match.judge1)
        payload["judge2"] = user_summary(match.judge2)
    return payload


def rating_payload(rating: JudgeRating) -> dict[str, Any]:
    return {
        "id": rating.id,
        "message_id": rating.message_id,
        "judge_id": rating.judge_id,
        "rating": rating.rating,
        "explanation": rating.explanation,
        "rated_at": format_timestamp(rating.rated_at),
    }


def message_payload(message: Message, ratings: Iterable[JudgeRating] = ()) -> dict[str, Any]:
    return {
        "id": message.id,
        "match_id": message.match_id,
        "user_id": message.user_id,
        "user": None if "user" in inspect(message).unloaded else user_summary(message.user),
        "content": message.content,
        "sent_at": format_timestamp(message.sent_at),
        "consensus_reached": message.consensus_at is not None,
        "ratings": [rating_payload(rating) for rating in ratings],
    }


def recent_match_payload(match: Match, user_id: str) -> dict[str, Any]:
    user_was_player1 = match.player1_id == user_id
    opponent = match.player2 if user_was_player1 else match.player1
    return {
        "id": match.id,
        "status": match.status,
        "outcome": match.outcome,
        "winner_id": match.winner_id,
        "player1_score": match.player1_score,
        "player2_score": match.player2_score,
        "ended_at": format_timestamp(match.ended_at),
        "opponent": user_summary(opponent),
        "is_winner": match.winner_id == user_id,
        "user_was_player1": user_was_player1,
    }
