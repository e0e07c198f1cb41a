"""Public logging configuration API."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging pipeline configuration."""

    level_name: str = "INFO"
    console_format: str = "text"  # text|json
    file_path: str | None = None
    file_format: str = "json"  # text|json
    # Applied to the httpx/httpcore loggers, which log every request at INFO.
    http_level_name: str = "WARNING"


__all__ = ["LoggingConfig"]
