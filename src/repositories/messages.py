"""Persistence helpers for match messages."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from models import Message


def create_message(
    session: Session,
    match_id: int,
    user_id: str,
    content: str,
    *,
    now: datetime,
) -> Message:
    message = Message(
        match_id=match_id,
        user_id=user_id,
        content=content,
        sent_at=now,
        consensus_at=None,
    )
    session.add(message)
    session.flush()
    return message


def get_message(session: Session, message_id: int, *, for_update: bool = False) -> Message | None:
    statement = select(Message).where(Message.id == message_id)
    if for_update:
        statement = statement.with_for_update()
    return session.execute(statement).scalar_one_or_none()


def list_for_match(session: Session, match_id: int) -> list[Message]:
    statement = (
        select(Message)
        .options(joinedload(Message.user))
        .where(Message.match_id == match_id)
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )
    return list(session.execute(statement).unique().scalars())


def mark_consensus(session: Session, message_id: int, *, now: datetime) -> bool:
    """Stamp the consensus time once; False if another transaction already did."""
    result = session.execute(
        update(Message)
        .where(Message.id == message_id, Message.consensus_at.is_(None))
        .values(consensus_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
