"""JSON wire codec for the leaderboard RPC service.

Field names follow the proto3 JSON mapping: camelCase keys, int64 values as
decimal strings (numbers are accepted on decode), bytes as base64 and
timestamps as RFC 3339 strings. Default-valued fields may be omitted by the
service and decode to their zero value.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import orjson

from ascnd.api.errors import RECOVERABLE_REQUEST_ERRORS, ProtocolError
from ascnd.api.models import (
    Bracket,
    LeaderboardEntry,
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
    parse_timestamp,
)

OFFSET_CURSOR_PREFIX = "offset:"

JsonObject = dict[str, Any]


def dumps_bytes(payload: Any, *, sort_keys: bool = False) -> bytes:
    """Serialize payload to compact UTF-8 JSON bytes."""
    options = orjson.OPT_SORT_KEYS if sort_keys else 0
    return bytes(orjson.dumps(payload, option=options))


def dumps_text(payload: Any, *, sort_keys: bool = False) -> str:
    return dumps_bytes(payload, sort_keys=sort_keys).decode("utf-8")


def loads(raw: bytes | str) -> JsonObject:
    """Parse one JSON object, raising `ProtocolError` for anything else."""
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ProtocolError(f"malformed response body: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProtocolError("response body is not a JSON object")
    return payload


def offset_cursor(offset: int) -> str:
    return f"{OFFSET_CURSOR_PREFIX}{int(offset)}"


def cursor_offset(cursor: str) -> int | None:
    """Return the offset encoded in a synthesized cursor, if `cursor` is one."""
    if not cursor.startswith(OFFSET_CURSOR_PREFIX):
        return None
    try:
        return max(0, int(cursor[len(OFFSET_CURSOR_PREFIX) :]))
    except ValueError:
        return None


def encode_submit_score(submission: ScoreSubmission) -> JsonObject:
    payload: JsonObject = {
        "leaderboardId": submission.leaderboard_id,
        "playerId": submission.player_id,
        "score": str(submission.score),
    }
    if submission.metadata:
        payload["metadata"] = base64.b64encode(submission.metadata).decode("ascii")
    if submission.idempotency_key:
        payload["idempotencyKey"] = submission.idempotency_key
    return payload


def encode_get_leaderboard(query: LeaderboardQuery) -> JsonObject:
    payload: JsonObject = {
        "leaderboardId": query.leaderboard_id,
        "limit": int(query.limit),
    }
    synthesized_offset = cursor_offset(query.cursor)
    if synthesized_offset is not None:
        payload["offset"] = synthesized_offset
    elif query.cursor:
        payload["cursor"] = query.cursor
    elif query.around_rank > 0:
        payload["aroundRank"] = str(query.around_rank)
    elif query.offset > 0:
        payload["offset"] = int(query.offset)
    if query.period:
        payload["period"] = query.period
    if query.view_slug:
        payload["viewSlug"] = query.view_slug
    return payload


def encode_get_player_rank(query: RankQuery) -> JsonObject:
    payload: JsonObject = {
        "leaderboardId": query.leaderboard_id,
        "playerId": query.player_id,
    }
    if query.period:
        payload["period"] = query.period
    if query.view_slug:
        payload["viewSlug"] = query.view_slug
    return payload


def decode_score_result(payload: Mapping[str, Any]) -> ScoreResult:
    try:
        score_id = str(payload.get("scoreId", ""))
        rank = _int64(payload.get("rank"))
        is_new_best = bool(payload.get("isNewBest", False))
    except RECOVERABLE_REQUEST_ERRORS as exc:
        raise ProtocolError(f"malformed SubmitScore response: {exc}") from exc
    if not score_id:
        raise ProtocolError("SubmitScore response is missing scoreId")
    return ScoreResult(score_id=score_id, rank=rank, is_new_best=is_new_best)


def decode_leaderboard_page(payload: Mapping[str, Any], query: LeaderboardQuery) -> LeaderboardPage:
    """Decode one page, sorting entries by rank and filling a missing cursor."""
    try:
        raw_entries = payload.get("entries") or []
        entries = sorted((_entry(raw) for raw in raw_entries), key=lambda entry: entry.rank)
        total_entries = _int64(payload.get("totalEntries"))
        has_more = bool(payload.get("hasMore", False))
        next_cursor = str(payload.get("nextCursor") or "")
        period_start = _timestamp(payload.get("periodStart"))
        period_end = _timestamp(payload.get("periodEnd"))
    except RECOVERABLE_REQUEST_ERRORS as exc:
        raise ProtocolError(f"malformed GetLeaderboard response: {exc}") from exc
    ranks = [entry.rank for entry in entries]
    if len(set(ranks)) != len(ranks):
        raise ProtocolError("GetLeaderboard response contains duplicate ranks")
    if has_more and not next_cursor:
        if entries:
            next_cursor = offset_cursor(entries[-1].rank)
        else:
            next_cursor = offset_cursor(_effective_offset(query) + query.limit)
    return LeaderboardPage(
        entries=tuple(entries),
        total_entries=total_entries,
        has_more=has_more,
        next_cursor=next_cursor,
        period_start=period_start,
        period_end=period_end,
    )


def decode_rank_result(payload: Mapping[str, Any]) -> RankResult:
    try:
        return RankResult(
            rank=_int64(payload.get("rank")),
            score=_int64(payload.get("score")),
            percentile=_percentile(payload.get("percentile")),
            total_entries=_int64(payload.get("totalEntries")),
        )
    except RECOVERABLE_REQUEST_ERRORS as exc:
        raise ProtocolError(f"malformed GetPlayerRank response: {exc}") from exc


def _entry(raw: Mapping[str, Any]) -> LeaderboardEntry:
    bracket_raw = raw.get("bracket")
    bracket = None
    if isinstance(bracket_raw, Mapping):
        bracket = Bracket(
            id=str(bracket_raw.get("id", "")),
            name=str(bracket_raw.get("name", "")),
            color=str(bracket_raw.get("color", "")),
        )
    return LeaderboardEntry(
        rank=_int64(raw.get("rank")),
        player_id=str(raw.get("playerId", "")),
        score=_int64(raw.get("score")),
        submitted_at=_timestamp(raw.get("submittedAt")),
        bracket=bracket,
    )


def _effective_offset(query: LeaderboardQuery) -> int:
    synthesized_offset = cursor_offset(query.cursor)
    if synthesized_offset is not None:
        return synthesized_offset
    return max(0, int(query.offset))


def _int64(raw: Any) -> int:
    if raw is None or raw == "":
        return 0
    if isinstance(raw, bool):
        raise TypeError("boolean is not an int64 value")
    return int(raw)


def _percentile(raw: Any) -> float:
    if raw is None or raw == "":
        return 0.0
    if isinstance(raw, str):
        return float(raw.strip().rstrip("%"))
    return float(raw)


def _timestamp(raw: Any) -> datetime | None:
    if not raw:
        return None
    parsed = parse_timestamp(str(raw))
    if parsed is None:
        raise ValueError(f"invalid timestamp {raw!r}")
    return parsed


__all__ = [
    "OFFSET_CURSOR_PREFIX",
    "cursor_offset",
    "decode_leaderboard_page",
    "decode_rank_result",
    "decode_score_result",
    "dumps_bytes",
    "dumps_text",
    "encode_get_leaderboard",
    "encode_get_player_rank",
    "encode_submit_score",
    "loads",
    "offset_cursor",
]
