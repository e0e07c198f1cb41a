"""Leaderboard bridge runtime implementations."""

from ascnd.runtime.delivery import CompletionQueue
from ascnd.runtime.facade import RuntimeLeaderboardFacade
from ascnd.runtime.host_payloads import PayloadObserver
from ascnd.runtime.http_transport import HttpLeaderboardTransport
from ascnd.runtime.logging import configure_logging, setup_logging
from ascnd.runtime.module import LeaderboardModule

__all__ = [
    "CompletionQueue",
    "HttpLeaderboardTransport",
    "LeaderboardModule",
    "PayloadObserver",
    "RuntimeLeaderboardFacade",
    "configure_logging",
    "setup_logging",
]
