"""Leaderboard request and response records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

MAX_LEADERBOARD_LIMIT = 100
DEFAULT_LEADERBOARD_LIMIT = 10
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

PERIOD_ALL_TIME = ""
PERIOD_CURRENT = "current"
PERIOD_PREVIOUS = "previous"

_FRACTION_RE = re.compile(r"(\.\d+)")


@dataclass(frozen=True, slots=True)
class ScoreSubmission:
    """One score write. Metadata is opaque and forwarded unchanged."""

    leaderboard_id: str
    player_id: str
    score: int
    metadata: bytes | None = None
    idempotency_key: str | None = None


@dataclass(frozen=True, slots=True)
class ScoreResult:
    score_id: str
    rank: int
    is_new_best: bool


@dataclass(frozen=True, slots=True)
class LeaderboardQuery:
    """One leaderboard page read.

    Only one pagination mode reaches the service: `cursor`, then `around_rank`,
    then `offset`. The facade normalizes queries before dispatch.
    """

    leaderboard_id: str
    limit: int = DEFAULT_LEADERBOARD_LIMIT
    cursor: str = ""
    offset: int = 0
    around_rank: int = 0
    period: str = PERIOD_ALL_TIME
    view_slug: str = ""


@dataclass(frozen=True, slots=True)
class Bracket:
    """Named tier an entry belongs to, with its display color."""

    id: str
    name: str
    color: str = ""


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    rank: int
    player_id: str
    score: int
    submitted_at: datetime | None = None
    bracket: Bracket | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardPage:
    """Immutable snapshot of one leaderboard page, ascending by rank."""

    entries: tuple[LeaderboardEntry, ...] = field(default_factory=tuple)
    total_entries: int = 0
    has_more: bool = False
    next_cursor: str = ""
    period_start: datetime | None = None
    period_end: datetime | None = None

    def __post_init__(self) -> None:
        previous_rank: int | None = None
        for entry in self.entries:
            if previous_rank is not None and entry.rank <= previous_rank:
                raise ValueError("leaderboard entries must be strictly ascending by rank")
            previous_rank = entry.rank
        if self.has_more and not self.next_cursor:
            raise ValueError("has_more requires a next_cursor")

    @property
    def max_rank(self) -> int:
        return self.entries[-1].rank if self.entries else 0


@dataclass(frozen=True, slots=True)
class RankQuery:
    leaderboard_id: str
    player_id: str
    period: str = PERIOD_ALL_TIME
    view_slug: str = ""


@dataclass(frozen=True, slots=True)
class RankResult:
    """Single-player standing. `rank == 0` means the player is unranked."""

    rank: int
    score: int
    percentile: float
    total_entries: int = 0

    @property
    def ranked(self) -> bool:
        return self.rank > 0


def is_valid_period(period: str) -> bool:
    """Return whether `period` is all-time, current, previous or an ISO-8601 timestamp."""
    if period in {PERIOD_ALL_TIME, PERIOD_CURRENT, PERIOD_PREVIOUS}:
        return True
    return parse_timestamp(period) is not None


def parse_timestamp(raw: str) -> datetime | None:
    value = raw.strip()
    if not value:
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # RFC 3339 allows nanoseconds; datetime keeps microseconds.
    value = _FRACTION_RE.sub(lambda match: match.group(1)[:7], value)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


__all__ = [
    "Bracket",
    "DEFAULT_LEADERBOARD_LIMIT",
    "INT64_MAX",
    "INT64_MIN",
    "LeaderboardEntry",
    "LeaderboardPage",
    "LeaderboardQuery",
    "MAX_LEADERBOARD_LIMIT",
    "PERIOD_ALL_TIME",
    "PERIOD_CURRENT",
    "PERIOD_PREVIOUS",
    "RankQuery",
    "RankResult",
    "ScoreResult",
    "ScoreSubmission",
    "is_valid_period",
    "parse_timestamp",
]
