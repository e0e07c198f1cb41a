"""Leaderboard service bridge for single-threaded game hosts."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ascnd.api.config import ClientConfig
    from ascnd.api.facade import LeaderboardFacade


def connect(config: "ClientConfig | None" = None) -> "LeaderboardFacade":
    """Create a facade from explicit config or `ASCND_*` environment variables."""
    from ascnd.api.config import load_client_config
    from ascnd.api.facade import create_leaderboard_facade

    return create_leaderboard_facade(config if config is not None else load_client_config())


__all__ = ["connect"]
