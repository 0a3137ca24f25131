"""Database repository helpers."""

from repositories import judge_ratings, matches, messages, queue, users

__all__ = [
    "judge_ratings",
    "matches",
    "messages",
    "queue",
    "users",
]
