"""Persistence helpers for the matchmaking queue.

Entries are rows, not process state. Matching consumes them through `claim_entries`,
a conditional delete that reports which rows this transaction actually removed, so two
concurrent searches can never both walk away with the same participant.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.orm import Session

from models import QueueEntry


def join_queue(
    session: Session,
    user_id: str,
    elo: int,
    match_type: str,
    *,
    now: datetime,
) -> QueueEntry:
    """Insert or replace the caller's entry; re-joining resets the wait."""
    entry = session.execute(
        select(QueueEntry).where(QueueEntry.user_id == user_id).with_for_update()
    ).scalar_one_or_none()
    if entry is None:
        entry = QueueEntry(user_id=user_id, elo=elo, match_type=match_type, joined_at=now)
        session.add(entry)
    else:
        entry.elo = elo
        entry.match_type = match_type
        entry.joined_at = now
    session.flush()
    return entry


def leave_queue(session: Session, user_id: str) -> None:
    session.execute(
        delete(QueueEntry)
        .where(QueueEntry.user_id == user_id)
        .execution_options(synchronize_session=False)
    )


def get_queue_entry(session: Session, user_id: str) -> QueueEntry | None:
    return session.execute(
        select(QueueEntry).where(QueueEntry.user_id == user_id)
    ).scalar_one_or_none()


def find_opponent(
    session: Session,
    *,
    elo: int,
    elo_range: int,
    exclude_user_id: str,
    joined_before: datetime,
) -> QueueEntry | None:
    """Longest-waiting player entry inside [elo - range, elo + range]."""
    statement = (
        select(QueueEntry)
        .where(
            QueueEntry.match_type == "player",
            QueueEntry.user_id != exclude_user_id,
            QueueEntry.elo.between(elo - elo_range, elo + elo_range),
            QueueEntry.joined_at < joined_before,
        )
        .order_by(QueueEntry.joined_at.asc(), QueueEntry.id.asc())
        .limit(1)
    )
    return session.execute(statement).scalar_one_or_none()


def find_judges(
    session: Session,
    *,
    exclude_user_ids: Iterable[str] = (),
    limit: int = 2,
) -> list[QueueEntry]:
    """Longest-waiting judge entries, FIFO."""
    excluded = list(exclude_user_ids)
    statement = select(QueueEntry).where(QueueEntry.match_type == "judge")
    if excluded:
        statement = statement.where(QueueEntry.user_id.not_in(excluded))
    statement = statement.order_by(QueueEntry.joined_at.asc(), QueueEntry.id.asc()).limit(limit)
    return list(session.scalars(statement))


def find_judge(session: Session, exclude_user_ids: Iterable[str] = ()) -> QueueEntry | None:
    judges = find_judges(session, exclude_user_ids=exclude_user_ids, limit=1)
    return judges[0] if judges else None


def claim_entries(session: Session, user_ids: Iterable[str]) -> set[str]:
    """Delete the given entries and return the user ids this call removed."""
    requested = list(user_ids)
    if not requested:
        return set()
    result = session.execute(
        delete(QueueEntry)
        .where(QueueEntry.user_id.in_(requested))
        .returning(QueueEntry.user_id)
        .execution_options(synchronize_session=False)
    )
    return set(result.scalars().all())


def queue_position(session: Session, entry: QueueEntry) -> int:
    """1-based FIFO position of an entry among entries of the same type."""
    ahead = session.scalar(
        select(func.count())
        .select_from(QueueEntry)
        .where(
            QueueEntry.match_type == entry.match_type,
            or_(
                QueueEntry.joined_at < entry.joined_at,
                and_(QueueEntry.joined_at == entry.joined_at, QueueEntry.id < entry.id),
            ),
        )
    )
    return int(ahead or 0) + 1
