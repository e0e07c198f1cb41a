"""Runtime-module adapter binding the leaderboard facade to a host lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ascnd.api.config import ClientConfig, load_client_config
from ascnd.api.facade import LeaderboardFacade, create_leaderboard_facade
from ascnd.api.transport import TransportFactory

_LOG = logging.getLogger("ascnd.module")

SERVICE_NAME = "leaderboard"


class LeaderboardModule:
    """Create the facade on start, pump it every update, tear it down on shutdown."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        observers: Iterable[object] = (),
        transport_factory: TransportFactory | None = None,
        max_deliveries_per_update: int | None = None,
    ) -> None:
        self._config = config
        self._observers = tuple(observers)
        self._transport_factory = transport_factory
        self._max_deliveries_per_update = max_deliveries_per_update
        self._facade: LeaderboardFacade | None = None

    @property
    def started(self) -> bool:
        return self._facade is not None

    @property
    def facade(self) -> LeaderboardFacade:
        if self._facade is None:
            raise RuntimeError("leaderboard module has not been started")
        return self._facade

    def start(self, context: object) -> None:
        if self._facade is not None:
            return
        config = self._config if self._config is not None else load_client_config()
        facade = create_leaderboard_facade(config, transport_factory=self._transport_factory)
        for observer in self._observers:
            facade.connect(observer)
        self._facade = facade
        provide = getattr(context, "provide", None)
        if callable(provide):
            provide(SERVICE_NAME, facade)
        _LOG.info("leaderboard_module_started enabled=%s", facade.enabled)

    def update(self, context: object) -> None:
        _ = context
        if self._facade is None:
            return
        self._facade.pump(self._max_deliveries_per_update)

    def shutdown(self, context: object) -> None:
        _ = context
        facade = self._facade
        if facade is None:
            return
        facade.close()
        self._facade = None
        _LOG.info("leaderboard_module_stopped")

    def reinitialize(self, config: ClientConfig | None = None) -> None:
        """Apply new settings at runtime, re-reading the environment when none are given."""
        if config is not None:
            self._config = config
        resolved = self._config if self._config is not None else load_client_config()
        self.facade.reconfigure(resolved)


__all__ = ["LeaderboardModule", "SERVICE_NAME"]
