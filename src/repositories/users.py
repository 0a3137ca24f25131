"""Persistence helpers for users and their rating counters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from models import User


def get_user(session: Session, user_id: str) -> User | None:
    return session.get(User, user_id)


def get_users(session: Session, user_ids: list[str]) -> dict[str, User]:
    """Fetch several users keyed by id, locking the rows for the rest of the transaction."""
    if not user_ids:
        return {}
    statement = select(User).where(User.id.in_(user_ids)).order_by(User.id).with_for_update()
    return {user.id: user for user in session.scalars(statement)}


def upsert_user(
    session: Session,
    *,
    user_id: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    profile_image_url: str | None = None,
    initial_elo: int = 1200,
    initial_judge_elo: int = 1200,
    now: datetime,
) -> User:
    """Create a user from identity-provider fields, or refresh the profile of an existing one."""
    user = session.get(User, user_id)
    if user is None:
        user = User(
            id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
            elo=initial_elo,
            peak_elo=initial_elo,
            judge_elo=initial_judge_elo,
            peak_judge_elo=initial_judge_elo,
            created_at=now,
            updated_at=now,
        )
        session.add(user)
    else:
        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        user.profile_image_url = profile_image_url
        user.updated_at = now
    session.flush()
    return user


def update_elo(session: Session, user_id: str, new_elo: int, *, now: datetime) -> None:
    """Set player Elo; the peak only ever moves up."""
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(
            elo=new_elo,
            peak_elo=case((User.peak_elo < new_elo, new_elo), else_=User.peak_elo),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )


def update_stats(session: Session, user_id: str, *, won: bool, drawn: bool = False, now: datetime) -> None:
    """Count one win or one loss; a draw is a loss that also bumps `draws`."""
    values = {
        "total_matches": User.total_matches + 1,
        "updated_at": now,
    }
    if won:
        values["wins"] = User.wins + 1
    else:
        values["losses"] = User.losses + 1
    if drawn:
        values["draws"] = User.draws + 1
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def update_judge_elo(session: Session, user_id: str, new_judge_elo: int, *, now: datetime) -> None:
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(
            judge_elo=new_judge_elo,
            peak_judge_elo=case(
                (User.peak_judge_elo < new_judge_elo, new_judge_elo),
                else_=User.peak_judge_elo,
            ),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )


def update_judge_stats(session: Session, user_id: str, *, agreed: bool, now: datetime) -> None:
    values = {
        "total_judge_matches": User.total_judge_matches + 1,
        "updated_at": now,
    }
    if agreed:
        values["judge_agreements"] = User.judge_agreements + 1
    else:
        values["judge_disagreements"] = User.judge_disagreements + 1
    session.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def top_by_elo(session: Session, limit: int) -> list[User]:
    statement = select(User).order_by(User.elo.desc(), User.id.asc()).limit(limit)
    return list(session.scalars(statement))


def top_by_judge_elo(session: Session, limit: int) -> list[User]:
    statement = select(User).order_by(User.judge_elo.desc(), User.id.asc()).limit(limit)
    return list(session.scalars(statement))
