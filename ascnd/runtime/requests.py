"""Local request validation and normalization before dispatch."""

from __future__ import annotations

import logging

from ascnd.api.errors import RequestValidationError
from ascnd.api.models import (
    INT64_MAX,
    INT64_MIN,
    MAX_LEADERBOARD_LIMIT,
    LeaderboardQuery,
    RankQuery,
    ScoreSubmission,
    is_valid_period,
)

_LOG = logging.getLogger("ascnd.facade")


def build_submission(
    leaderboard_id: str,
    player_id: str,
    score: int,
    metadata: str | bytes | None = None,
    idempotency_key: str | None = None,
) -> ScoreSubmission:
    _require_id("leaderboard_id", leaderboard_id)
    _require_id("player_id", player_id)
    if isinstance(score, bool) or not isinstance(score, int):
        raise RequestValidationError(f"score must be an integer, got {type(score).__name__}")
    if not INT64_MIN <= score <= INT64_MAX:
        raise RequestValidationError("score is outside the signed 64-bit range")
    if idempotency_key is not None and not isinstance(idempotency_key, str):
        raise RequestValidationError("idempotency_key must be a string")
    return ScoreSubmission(
        leaderboard_id=leaderboard_id,
        player_id=player_id,
        score=score,
        metadata=_metadata_bytes(metadata),
        idempotency_key=idempotency_key or None,
    )


def build_leaderboard_query(
    leaderboard_id: str,
    *,
    limit: int,
    cursor: str,
    around_rank: int,
    period: str,
    view_slug: str,
    offset: int,
) -> LeaderboardQuery:
    """Validate a page read and keep exactly one pagination mode.

    Precedence is cursor, then around_rank, then offset.
    """
    _require_id("leaderboard_id", leaderboard_id)
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise RequestValidationError("limit must be an integer")
    if limit < 1:
        raise RequestValidationError("limit must be >= 1")
    if limit > MAX_LEADERBOARD_LIMIT:
        _LOG.debug("leaderboard_limit_clamped requested=%d max=%d", limit, MAX_LEADERBOARD_LIMIT)
        limit = MAX_LEADERBOARD_LIMIT
    around_rank = _non_negative_int("around_rank", around_rank)
    offset = _non_negative_int("offset", offset)
    cursor = _optional_text("cursor", cursor)
    if cursor:
        if around_rank or offset:
            _LOG.debug(
                "leaderboard_pagination_dropped kept=cursor around_rank=%d offset=%d",
                around_rank,
                offset,
            )
        around_rank = 0
        offset = 0
    elif around_rank:
        if offset:
            _LOG.debug("leaderboard_pagination_dropped kept=around_rank offset=%d", offset)
        offset = 0
    return LeaderboardQuery(
        leaderboard_id=leaderboard_id,
        limit=limit,
        cursor=cursor,
        offset=offset,
        around_rank=around_rank,
        period=_period(period),
        view_slug=_optional_text("view_slug", view_slug),
    )


def build_rank_query(
    leaderboard_id: str,
    player_id: str,
    *,
    period: str,
    view_slug: str,
) -> RankQuery:
    _require_id("leaderboard_id", leaderboard_id)
    _require_id("player_id", player_id)
    return RankQuery(
        leaderboard_id=leaderboard_id,
        player_id=player_id,
        period=_period(period),
        view_slug=_optional_text("view_slug", view_slug),
    )


def _require_id(name: str, value: object) -> None:
    if not isinstance(value, str) or not value.strip():
        raise RequestValidationError(f"{name} must be a non-empty string")


def _non_negative_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RequestValidationError(f"{name} must be an integer")
    if value < 0:
        raise RequestValidationError(f"{name} must be >= 0")
    return value


def _optional_text(name: str, value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RequestValidationError(f"{name} must be a string")
    return value.strip()


def _period(value: object) -> str:
    period = _optional_text("period", value)
    if not is_valid_period(period):
        raise RequestValidationError(
            f"period must be empty, 'current', 'previous' or an ISO-8601 timestamp, got {period!r}"
        )
    return period


def _metadata_bytes(metadata: object) -> bytes | None:
    if metadata is None:
        return None
    if isinstance(metadata, str):
        return metadata.encode("utf-8") or None
    if isinstance(metadata, (bytes, bytearray, memoryview)):
        return bytes(metadata) or None
    raise RequestValidationError("metadata must be str or bytes")


__all__ = ["build_leaderboard_query", "build_rank_query", "build_submission"]
