"""Leaderboard client configuration ownership."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

DEFAULT_BASE_URL = "https://api.ascnd.gg"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Connection parameters for one leaderboard facade generation."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be > 0")

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.strip())

    def with_api_key(self, api_key: str) -> ClientConfig:
        """Return a copy with a different credential."""
        return replace(self, api_key=api_key)

    def redacted(self) -> dict[str, object]:
        """Return a log-safe view of this config."""
        return {
            "base_url": self.base_url,
            "timeout_seconds": self.timeout_seconds,
            "max_workers": self.max_workers,
            "api_key_set": self.has_credential,
        }


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    raw = _raw(name, env=env)
    if raw is None:
        value = int(default)
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = int(default)
    if minimum is None:
        return value
    return max(int(minimum), value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


def load_client_config(*, env: Mapping[str, str] | None = None) -> ClientConfig:
    """Build client config from `ASCND_*` environment variables."""
    return ClientConfig(
        api_key=_text("ASCND_API_KEY", "", env=env),
        base_url=_text("ASCND_BASE_URL", DEFAULT_BASE_URL, env=env).rstrip("/"),
        timeout_seconds=_int("ASCND_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, minimum=1, env=env),
        max_workers=_int("ASCND_MAX_WORKERS", DEFAULT_MAX_WORKERS, minimum=1, env=env),
    )


__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_TIMEOUT_SECONDS",
    "load_client_config",
]
