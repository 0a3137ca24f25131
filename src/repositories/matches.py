"""Persistence helpers for matches.

State transitions are conditional updates keyed on the state the caller observed;
each returns whether this call performed the transition.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session, joinedload

from domain.common import MatchOutcome, MatchStatus
from models import Match

_TERMINAL_STATUSES = (MatchStatus.COMPLETED.value, MatchStatus.FORFEIT.value)


def create_match(
    session: Session,
    player1_id: str,
    player2_id: str | None = None,
    judge1_id: str | None = None,
    judge2_id: str | None = None,
    *,
    time_limit: int,
    now: datetime,
) -> Match:
    """Create a match; it starts active only when the full quartet is known."""
    is_full = all((player2_id, judge1_id, judge2_id))
    match = Match(
        player1_id=player1_id,
        player2_id=player2_id,
        judge1_id=judge1_id,
        judge2_id=judge2_id,
        status=MatchStatus.ACTIVE.value if is_full else MatchStatus.WAITING.value,
        current_turn=player1_id,
        outcome=MatchOutcome.pending().kind.value,
        player1_score=0,
        player2_score=0,
        started_at=now if is_full else None,
        time_limit=time_limit,
        created_at=now,
    )
    session.add(match)
    session.flush()
    return match


def get_match(session: Session, match_id: int, *, for_update: bool = False) -> Match | None:
    statement = select(Match).where(Match.id == match_id)
    if for_update:
        statement = statement.with_for_update()
    return session.execute(statement).scalar_one_or_none()


def get_with_participants(session: Session, match_id: int) -> Match | None:
    statement = (
        select(Match)
        .options(
            joinedload(Match.player1),
            joinedload(Match.player2),
            joinedload(Match.judge1),
            joinedload(Match.judge2),
        )
        .where(Match.id == match_id)
    )
    return session.execute(statement).unique().scalar_one_or_none()


def update_status(session: Session, match_id: int, status: MatchStatus, *, now: datetime) -> None:
    values: dict[str, object] = {"status": status.value}
    if status.is_terminal:
        values["ended_at"] = now
    session.execute(
        update(Match)
        .where(Match.id == match_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def start_match(
    session: Session,
    match_id: int,
    *,
    player2_id: str,
    judge1_id: str,
    judge2_id: str,
    now: datetime,
) -> bool:
    """Fill a waiting match and activate it."""
    result = session.execute(
        update(Match)
        .where(Match.id == match_id, Match.status == MatchStatus.WAITING.value)
        .values(
            player2_id=player2_id,
            judge1_id=judge1_id,
            judge2_id=judge2_id,
            status=MatchStatus.ACTIVE.value,
            current_turn=Match.player1_id,
            started_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def set_winner(
    session: Session,
    match_id: int,
    *,
    outcome: MatchOutcome,
    player1_score: int,
    player2_score: int,
    status: MatchStatus,
    now: datetime,
) -> bool:
    """Close an active match with its outcome; False when it was no longer active."""
    if not status.is_terminal:
        raise ValueError(f"set_winner needs a terminal status, got {status.value}")
    result = session.execute(
        update(Match)
        .where(Match.id == match_id, Match.status == MatchStatus.ACTIVE.value)
        .values(
            status=status.value,
            outcome=outcome.kind.value,
            winner_id=outcome.winner_id,
            player1_score=player1_score,
            player2_score=player2_score,
            current_turn=None,
            ended_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def switch_turn(session: Session, match_id: int, *, from_user_id: str, to_user_id: str) -> bool:
    """Hand the turn over, only if it is still `from_user_id`'s turn in an active match."""
    result = session.execute(
        update(Match)
        .where(
            Match.id == match_id,
            Match.status == MatchStatus.ACTIVE.value,
            Match.current_turn == from_user_id,
        )
        .values(current_turn=to_user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def get_active_for_user(session: Session, user_id: str) -> Match | None:
    """The active match in which the user holds any seat."""
    statement = (
        select(Match)
        .where(
            Match.status == MatchStatus.ACTIVE.value,
            or_(
                Match.player1_id == user_id,
                Match.player2_id == user_id,
                Match.judge1_id == user_id,
                Match.judge2_id == user_id,
            ),
        )
        .order_by(Match.started_at.desc(), Match.id.desc())
        .limit(1)
    )
    return session.execute(statement).scalar_one_or_none()


def get_recent_for_user(session: Session, user_id: str, limit: int) -> list[Match]:
    """Finished matches the user played, newest first."""
    statement = (
        select(Match)
        .options(joinedload(Match.player1), joinedload(Match.player2))
        .where(
            Match.status.in_(_TERMINAL_STATUSES),
            or_(Match.player1_id == user_id, Match.player2_id == user_id),
        )
        .order_by(Match.ended_at.desc(), Match.id.desc())
        .limit(limit)
    )
    return list(session.execute(statement).unique().scalars())
