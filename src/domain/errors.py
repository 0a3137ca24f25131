"""Recoverable errors raised by the match engine.

Every error carries a user-facing message. The service facade turns them into
failed results; none of them is fatal to the process.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for engine errors surfaced to the caller."""

    category = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(GameError):
    category = "not_found"


class ConflictError(GameError):
    category = "conflict"


class NotYourTurnError(ConflictError):
    def __init__(self, message: str = "Not your turn") -> None:
        super().__init__(message)


class MatchNotActiveError(ConflictError):
    def __init__(self, message: str = "Match not active") -> None:
        super().__init__(message)


class DuplicateRatingError(ConflictError):
    def __init__(self, message: str = "You have already rated this message") -> None:
        super().__init__(message)


class AlreadyInMatchError(ConflictError):
    def __init__(self, message: str = "You are already in an active match") -> None:
        super().__init__(message)


class AccessDeniedError(ConflictError):
    category = "forbidden"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class ExpiredError(GameError):
    category = "expired"


class TimeExpiredError(ExpiredError):
    def __init__(self, message: str = "Match time expired") -> None:
        super().__init__(message)


class GameValidationError(GameError):
    category = "validation"


__all__ = [
    "AccessDeniedError",
    "AlreadyInMatchError",
    "ConflictError",
    "DuplicateRatingError",
    "ExpiredError",
    "GameError",
    "GameValidationError",
    "MatchNotActiveError",
    "NotFoundError",
    "NotYourTurnError",
    "TimeExpiredError",
]
