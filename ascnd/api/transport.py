"""Leaderboard service transport boundary."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ascnd.api.config import ClientConfig
from ascnd.api.models import (
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)


@runtime_checkable
class LeaderboardTransport(Protocol):
    """Blocking client for the remote leaderboard service.

    Implementations raise `AscndError` subclasses on failure and are only
    invoked from facade worker threads.
    """

    def submit_score(self, submission: ScoreSubmission) -> ScoreResult:
        """Write one score."""

    def get_leaderboard(self, query: LeaderboardQuery) -> LeaderboardPage:
        """Read one leaderboard page."""

    def get_player_rank(self, query: RankQuery) -> RankResult:
        """Read one player's standing."""

    def close(self) -> None:
        """Release connection resources."""


TransportFactory = Callable[[ClientConfig], LeaderboardTransport]


def create_http_transport(config: ClientConfig) -> LeaderboardTransport:
    """Create default HTTP transport implementation."""
    from ascnd.runtime.http_transport import HttpLeaderboardTransport

    return HttpLeaderboardTransport(config)


__all__ = ["LeaderboardTransport", "TransportFactory", "create_http_transport"]
