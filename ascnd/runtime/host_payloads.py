"""Plain dict/list payloads for embedding hosts.

Keys match the notification arguments game scripts already consume:
`rank`, `playerId`, `score`, `submittedAt`, and an optional `bracket`.
"""

from __future__ import annotations

from collections.abc import Callable

from ascnd.api.models import (
    LeaderboardEntry,
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)
from ascnd.api.outcomes import OperationFailure

HostPayload = dict[str, object]


def score_result_payload(result: ScoreResult) -> HostPayload:
    return {
        "scoreId": result.score_id,
        "rank": result.rank,
        "isNewBest": result.is_new_best,
    }


def entry_payload(entry: LeaderboardEntry) -> HostPayload:
    payload: HostPayload = {
        "rank": entry.rank,
        "playerId": entry.player_id,
        "score": entry.score,
        "submittedAt": entry.submitted_at.isoformat() if entry.submitted_at is not None else "",
    }
    if entry.bracket is not None:
        payload["bracket"] = {
            "id": entry.bracket.id,
            "name": entry.bracket.name,
            "color": entry.bracket.color,
        }
    return payload


def leaderboard_payload(page: LeaderboardPage) -> HostPayload:
    return {
        "entries": [entry_payload(entry) for entry in page.entries],
        "totalEntries": page.total_entries,
        "hasMore": page.has_more,
        "nextCursor": page.next_cursor,
    }


def rank_result_payload(result: RankResult) -> HostPayload:
    return {
        "rank": result.rank,
        "score": result.score,
        "percentile": float(result.percentile),
    }


def failure_payload(failure: OperationFailure) -> HostPayload:
    return {
        "operation": failure.operation,
        "error": failure.message,
        "kind": failure.kind.value,
        "requestId": failure.request_id,
    }


class PayloadObserver:
    """Observer that re-emits notifications as `(signal_name, payload)` pairs."""

    def __init__(self, emit: Callable[[str, HostPayload], None]) -> None:
        self._emit = emit

    def on_score_submitted(self, result: ScoreResult, submission: ScoreSubmission) -> None:
        payload = score_result_payload(result)
        payload["leaderboardId"] = submission.leaderboard_id
        payload["playerId"] = submission.player_id
        self._emit("score_submitted", payload)

    def on_leaderboard_received(self, page: LeaderboardPage, query: LeaderboardQuery) -> None:
        payload = leaderboard_payload(page)
        payload["leaderboardId"] = query.leaderboard_id
        self._emit("leaderboard_received", payload)

    def on_player_rank_received(self, result: RankResult, query: RankQuery) -> None:
        payload = rank_result_payload(result)
        payload["leaderboardId"] = query.leaderboard_id
        payload["playerId"] = query.player_id
        self._emit("player_rank_received", payload)

    def on_request_failed(self, failure: OperationFailure) -> None:
        self._emit("request_failed", failure_payload(failure))


__all__ = [
    "HostPayload",
    "PayloadObserver",
    "entry_payload",
    "failure_payload",
    "leaderboard_payload",
    "rank_result_payload",
    "score_result_payload",
]
