"""Search-window arithmetic for the matchmaking queue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class MatchmakingParameters:
    base_range: int = 100
    range_step: int = 50
    step_seconds: float = 30.0
    join_grace_seconds: float = 1.0


def waited_milliseconds(joined_at: datetime | None, now: datetime) -> int:
    """Whole milliseconds spent in the queue; a missing or future join time counts as zero."""
    if joined_at is None:
        return 0
    return max(0, (now - joined_at) // timedelta(milliseconds=1))


def search_range(waited_ms: int, params: MatchmakingParameters) -> int:
    """Elo tolerance after waiting `waited_ms`: base + one step per full interval."""
    step_ms = int(params.step_seconds * 1000)
    expansions = max(0, waited_ms) // step_ms
    return params.base_range + expansions * params.range_step


def milliseconds_until_next_step(waited_ms: int, params: MatchmakingParameters) -> int:
    step_ms = int(params.step_seconds * 1000)
    return step_ms - (max(0, waited_ms) % step_ms)


def join_grace_cutoff(now: datetime, params: MatchmakingParameters) -> datetime:
    """Entries must have joined strictly before this instant to be picked as opponents."""
    return now - timedelta(seconds=params.join_grace_seconds)


def elo_window(elo: int, elo_range: int) -> tuple[int, int]:
    return elo - elo_range, elo + elo_range
