"""Public leaderboard facade API contracts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ascnd.api.config import ClientConfig
from ascnd.api.outcomes import Subscription
from ascnd.api.transport import TransportFactory


@runtime_checkable
class LeaderboardFacade(Protocol):
    """Non-blocking leaderboard client delivering outcomes on the host loop."""

    @property
    def config(self) -> ClientConfig:
        """Active configuration."""

    @property
    def enabled(self) -> bool:
        """Whether requests can reach the network."""

    @property
    def closed(self) -> bool:
        """Whether teardown has run."""

    def connect(self, observer: object) -> Subscription:
        """Register an observer."""

    def disconnect(self, subscription: Subscription) -> None:
        """Unregister an observer."""

    def submit_score(
        self,
        leaderboard_id: str,
        player_id: str,
        score: int,
        metadata: str | bytes | None = None,
        idempotency_key: str | None = None,
    ) -> int:
        """Queue a score write and return its request id."""

    def get_leaderboard(
        self,
        leaderboard_id: str,
        limit: int = 10,
        cursor: str = "",
        around_rank: int = 0,
        period: str = "",
        view_slug: str = "",
        offset: int = 0,
    ) -> int:
        """Queue a page read and return its request id."""

    def get_player_rank(
        self,
        leaderboard_id: str,
        player_id: str,
        period: str = "",
        view_slug: str = "",
    ) -> int:
        """Queue a rank read and return its request id."""

    def reconfigure(self, config: ClientConfig) -> None:
        """Replace configuration and connection."""

    def close(self) -> None:
        """Release connection resources."""

    def pump(self, max_items: int | None = None) -> int:
        """Deliver completed outcomes on the owner thread."""


def create_leaderboard_facade(
    config: ClientConfig,
    *,
    transport_factory: TransportFactory | None = None,
    time_source: Callable[[], float] | None = None,
) -> LeaderboardFacade:
    """Create default facade owned by the calling thread."""
    from ascnd.runtime.facade import RuntimeLeaderboardFacade

    return RuntimeLeaderboardFacade(
        config,
        transport_factory=transport_factory,
        time_source=time_source,
    )


__all__ = ["LeaderboardFacade", "create_leaderboard_facade"]
