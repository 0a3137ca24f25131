"""Persistence helpers for per-message judge ratings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.common import RatingTier
from models import JudgeRating, Message


def create_rating(
    session: Session,
    message_id: int,
    judge_id: str,
    rating: RatingTier,
    explanation: str | None = None,
    *,
    now: datetime,
) -> JudgeRating:
    judge_rating = JudgeRating(
        message_id=message_id,
        judge_id=judge_id,
        rating=rating.value,
        explanation=explanation,
        rated_at=now,
    )
    session.add(judge_rating)
    session.flush()
    return judge_rating


def get_rating(session: Session, message_id: int, judge_id: str) -> JudgeRating | None:
    return session.execute(
        select(JudgeRating).where(
            JudgeRating.message_id == message_id,
            JudgeRating.judge_id == judge_id,
        )
    ).scalar_one_or_none()


def list_for_message(session: Session, message_id: int) -> list[JudgeRating]:
    statement = (
        select(JudgeRating)
        .where(JudgeRating.message_id == message_id)
        .order_by(JudgeRating.rated_at.asc(), JudgeRating.id.asc())
    )
    return list(session.scalars(statement))


def list_for_match(session: Session, match_id: int) -> list[JudgeRating]:
    statement = (
        select(JudgeRating)
        .join(Message, Message.id == JudgeRating.message_id)
        .where(Message.match_id == match_id)
        .order_by(JudgeRating.message_id.asc(), JudgeRating.rated_at.asc(), JudgeRating.id.asc())
    )
    return list(session.scalars(statement))
