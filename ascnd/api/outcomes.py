"""Terminal request outcomes and observer contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, TypeAlias, TypeVar, runtime_checkable

from ascnd.api.errors import FailureKind
from ascnd.api.models import (
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)

OP_SUBMIT_SCORE = "SubmitScore"
OP_GET_LEADERBOARD = "GetLeaderboard"
OP_GET_PLAYER_RANK = "GetPlayerRank"

TPayload = TypeVar("TPayload")
Request: TypeAlias = ScoreSubmission | LeaderboardQuery | RankQuery


@dataclass(frozen=True, slots=True)
class OperationFailure:
    """Failed outcome data. Never raised across the facade boundary."""

    operation: str
    message: str
    kind: FailureKind = FailureKind.INTERNAL
    request_id: int = 0


@dataclass(frozen=True, slots=True)
class Success(Generic[TPayload]):
    operation: str
    request_id: int
    request: Request
    payload: TPayload


@dataclass(frozen=True, slots=True)
class Failure:
    request_id: int
    request: Request | None
    failure: OperationFailure

    @property
    def operation(self) -> str:
        return self.failure.operation


Outcome: TypeAlias = Success[ScoreResult] | Success[LeaderboardPage] | Success[RankResult] | Failure


@dataclass(frozen=True, slots=True)
class Subscription:
    """Opaque observer registration token."""

    id: int


@runtime_checkable
class LeaderboardObserver(Protocol):
    """Host-side receiver of leaderboard notifications.

    Observers may implement any subset of these hooks; missing hooks are skipped.
    Hooks always run on the thread that pumps the facade.
    """

    def on_score_submitted(self, result: ScoreResult, submission: ScoreSubmission) -> None: ...

    def on_leaderboard_received(self, page: LeaderboardPage, query: LeaderboardQuery) -> None: ...

    def on_player_rank_received(self, result: RankResult, query: RankQuery) -> None: ...

    def on_request_failed(self, failure: OperationFailure) -> None: ...


__all__ = [
    "Failure",
    "LeaderboardObserver",
    "OP_GET_LEADERBOARD",
    "OP_GET_PLAYER_RANK",
    "OP_SUBMIT_SCORE",
    "OperationFailure",
    "Outcome",
    "Request",
    "Subscription",
    "Success",
]
