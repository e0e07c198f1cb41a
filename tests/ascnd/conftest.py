from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import pytest

from ascnd.api.config import ClientConfig
from ascnd.api.errors import ServiceError
from ascnd.api.models import (
    LeaderboardEntry,
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)
from ascnd.api.outcomes import Subscription
from ascnd.runtime.facade import RuntimeLeaderboardFacade


class InMemoryLeaderboardService:
    """Thread-safe stand-in for the remote service, ranking scores descending."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._boards: dict[str, dict[str, int]] = {}
        self._next_score_id = 1
        self.calls: list[tuple[str, object]] = []
        self.close_calls = 0
        self.known_boards: set[str] | None = None

    def seed(self, leaderboard_id: str, scores: dict[str, int]) -> None:
        with self._lock:
            self._boards.setdefault(leaderboard_id, {}).update(scores)

    def submit_score(self, submission: ScoreSubmission) -> ScoreResult:
        with self._lock:
            self.calls.append(("SubmitScore", submission))
            self._check_board(submission.leaderboard_id)
            board = self._boards.setdefault(submission.leaderboard_id, {})
            previous = board.get(submission.player_id)
            is_new_best = previous is None or submission.score > previous
            if is_new_best:
                board[submission.player_id] = submission.score
            score_id = f"score-{self._next_score_id}"
            self._next_score_id += 1
            rank = self._ranking(submission.leaderboard_id).index(submission.player_id) + 1
            return ScoreResult(score_id=score_id, rank=rank, is_new_best=is_new_best)

    def get_leaderboard(self, query: LeaderboardQuery) -> LeaderboardPage:
        with self._lock:
            self.calls.append(("GetLeaderboard", query))
            self._check_board(query.leaderboard_id)
            board = self._boards.get(query.leaderboard_id, {})
            ranking = self._ranking(query.leaderboard_id)
            if query.cursor:
                start = int(query.cursor.removeprefix("c:"))
            elif query.around_rank:
                start = max(0, query.around_rank - 1 - query.limit // 2)
            else:
                start = query.offset
            players = ranking[start : start + query.limit]
            has_more = start + len(players) < len(ranking)
            return LeaderboardPage(
                entries=tuple(
                    LeaderboardEntry(rank=start + index + 1, player_id=player, score=board[player])
                    for index, player in enumerate(players)
                ),
                total_entries=len(ranking),
                has_more=has_more,
                next_cursor=f"c:{start + len(players)}" if has_more else "",
            )

    def get_player_rank(self, query: RankQuery) -> RankResult:
        with self._lock:
            self.calls.append(("GetPlayerRank", query))
            self._check_board(query.leaderboard_id)
            board = self._boards.get(query.leaderboard_id, {})
            ranking = self._ranking(query.leaderboard_id)
            if query.player_id not in board:
                return RankResult(rank=0, score=0, percentile=0.0, total_entries=len(ranking))
            rank = ranking.index(query.player_id) + 1
            percentile = 100.0 * (len(ranking) - rank) / len(ranking)
            return RankResult(
                rank=rank,
                score=board[query.player_id],
                percentile=percentile,
                total_entries=len(ranking),
            )

    def close(self) -> None:
        with self._lock:
            self.close_calls += 1

    def calls_for(self, operation: str) -> list[object]:
        with self._lock:
            return [request for name, request in self.calls if name == operation]

    def _ranking(self, leaderboard_id: str) -> list[str]:
        board = self._boards.get(leaderboard_id, {})
        return sorted(board, key=lambda player: (-board[player], player))

    def _check_board(self, leaderboard_id: str) -> None:
        if self.known_boards is not None and leaderboard_id not in self.known_boards:
            raise ServiceError(f"leaderboard {leaderboard_id} not found", code="not_found")


class GatedService(InMemoryLeaderboardService):
    """Service whose calls block until `release()` so tests control in-flight timing."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self._gate = threading.Event()

    def release(self) -> None:
        self._gate.set()

    def submit_score(self, submission: ScoreSubmission) -> ScoreResult:
        self._wait()
        return super().submit_score(submission)

    def get_leaderboard(self, query: LeaderboardQuery) -> LeaderboardPage:
        self._wait()
        return super().get_leaderboard(query)

    def get_player_rank(self, query: RankQuery) -> RankResult:
        self._wait()
        return super().get_player_rank(query)

    def _wait(self) -> None:
        self.entered.set()
        if not self._gate.wait(timeout=5.0):
            raise RuntimeError("gated service was never released")


@dataclass
class RecordingObserver:
    events: list[tuple[str, object, object | None]] = field(default_factory=list)
    thread_ids: list[int] = field(default_factory=list)
    subscription: Subscription | None = None

    def on_score_submitted(self, result: ScoreResult, submission: ScoreSubmission) -> None:
        self._record("score_submitted", result, submission)

    def on_leaderboard_received(self, page: LeaderboardPage, query: LeaderboardQuery) -> None:
        self._record("leaderboard_received", page, query)

    def on_player_rank_received(self, result: RankResult, query: RankQuery) -> None:
        self._record("player_rank_received", result, query)

    def on_request_failed(self, failure: object) -> None:
        self._record("request_failed", failure, None)

    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]

    def payloads(self, name: str) -> list[object]:
        return [payload for event_name, payload, _ in self.events if event_name == name]

    def _record(self, name: str, payload: object, request: object | None) -> None:
        self.events.append((name, payload, request))
        self.thread_ids.append(threading.get_ident())


class ManualClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


PumpUntil = Callable[..., None]


def _pump_until(
    facade: RuntimeLeaderboardFacade,
    predicate: Callable[[], bool],
    *,
    timeout: float = 3.0,
) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        facade.pump()
        if predicate():
            return
        time.sleep(0.005)
    raise AssertionError("condition not met before timeout")


@pytest.fixture
def pump_until() -> PumpUntil:
    return _pump_until


@pytest.fixture
def service() -> InMemoryLeaderboardService:
    return InMemoryLeaderboardService()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_key="test-key",
        base_url="https://leaderboards.test",
        timeout_seconds=5,
    )


@pytest.fixture
def make_facade() -> Iterator[Callable[..., RuntimeLeaderboardFacade]]:
    created: list[RuntimeLeaderboardFacade] = []

    def _make(
        config: ClientConfig,
        transport: object | None = None,
        **kwargs: object,
    ) -> RuntimeLeaderboardFacade:
        if transport is not None:
            kwargs.setdefault("transport_factory", lambda _config: transport)
        facade = RuntimeLeaderboardFacade(config, **kwargs)  # type: ignore[arg-type]
        created.append(facade)
        return facade

    yield _make
    for facade in created:
        facade.close()


@pytest.fixture
def observe() -> Callable[[RuntimeLeaderboardFacade], RecordingObserver]:
    def _observe(facade: RuntimeLeaderboardFacade) -> RecordingObserver:
        observer = RecordingObserver()
        observer.subscription = facade.connect(observer)
        return observer

    return _observe


@pytest.fixture
def gated_service() -> Iterator[GatedService]:
    gated = GatedService()
    yield gated
    gated.release()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
