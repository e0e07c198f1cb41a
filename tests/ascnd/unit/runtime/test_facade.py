from __future__ import annotations

import threading

import pytest

from ascnd.api.config import ClientConfig
from ascnd.api.errors import FailureKind
from ascnd.api.models import LeaderboardPage, RankResult, ScoreResult, ScoreSubmission
from ascnd.api.outcomes import OperationFailure


def test_submit_score_delivers_single_success_on_pumping_thread(
    config, service, make_facade, pump_until, observe
) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)

    request_id = facade.submit_score("weekly-highscores", "player-123", 42500)

    assert observer.events == []
    pump_until(facade, lambda: observer.events)
    facade.pump()
    assert observer.names() == ["score_submitted"]
    result, submission = observer.events[0][1], observer.events[0][2]
    assert isinstance(result, ScoreResult)
    assert result.score_id
    assert result.rank >= 1
    assert isinstance(submission, ScoreSubmission)
    assert submission.score == 42500
    assert request_id >= 1
    assert observer.thread_ids == [threading.get_ident()]
    assert len(service.calls_for("SubmitScore")) == 1


def test_operations_without_credential_fail_without_network(service, make_facade, observe) -> None:
    factory_calls: list[ClientConfig] = []

    def _factory(config: ClientConfig):
        factory_calls.append(config)
        return service

    facade = make_facade(ClientConfig(api_key=""), transport_factory=_factory)
    observer = observe(facade)

    facade.submit_score("weekly-highscores", "player-123", 1)
    facade.get_leaderboard("weekly-highscores")
    facade.get_player_rank("weekly-highscores", "player-123")

    assert facade.enabled is False
    assert facade.pending_delivery_count == 3
    assert facade.pump() == 3
    failures = observer.payloads("request_failed")
    assert [failure.operation for failure in failures] == [
        "SubmitScore",
        "GetLeaderboard",
        "GetPlayerRank",
    ]
    assert all(failure.message == "credential not configured" for failure in failures)
    assert all(failure.kind is FailureKind.CONFIGURATION for failure in failures)
    assert factory_calls == []
    assert service.calls == []


def test_get_leaderboard_clamps_limit_before_dispatch(
    config, service, make_facade, pump_until, observe
) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_leaderboard("weekly-highscores", limit=150)
    pump_until(facade, lambda: observer.events)

    (query,) = service.calls_for("GetLeaderboard")
    assert query.limit == 100


def test_cursor_pagination_yields_non_overlapping_ascending_ranks(
    config, service, make_facade, pump_until, observe
) -> None:
    service.seed("weekly-highscores", {f"player-{index}": 1000 - index * 7 for index in range(23)})
    facade = make_facade(config, service)
    observer = observe(facade)

    pages: list[LeaderboardPage] = []
    cursor = ""
    while True:
        facade.get_leaderboard("weekly-highscores", limit=10, cursor=cursor)
        pump_until(facade, lambda: len(observer.events) == len(pages) + 1)
        page = observer.events[-1][1]
        assert isinstance(page, LeaderboardPage)
        pages.append(page)
        if not page.has_more:
            break
        assert page.next_cursor
        cursor = page.next_cursor

    assert [len(page.entries) for page in pages] == [10, 10, 3]
    for previous, current in zip(pages, pages[1:]):
        assert current.entries[0].rank > previous.max_rank
    for page in pages:
        ranks = [entry.rank for entry in page.entries]
        assert ranks == sorted(ranks)
    all_ranks = [entry.rank for page in pages for entry in page.entries]
    assert all_ranks == list(range(1, 24))


def test_cursor_takes_precedence_over_around_rank(
    config, service, make_facade, pump_until, observe
) -> None:
    service.seed("weekly-highscores", {f"player-{index}": 500 - index for index in range(30)})
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_leaderboard("weekly-highscores", limit=5, cursor="c:5", around_rank=20, offset=3)
    pump_until(facade, lambda: observer.events)

    (query,) = service.calls_for("GetLeaderboard")
    assert query.cursor == "c:5"
    assert query.around_rank == 0
    assert query.offset == 0
    page = observer.payloads("leaderboard_received")[0]
    assert [entry.rank for entry in page.entries] == [6, 7, 8, 9, 10]


def test_around_rank_jumps_to_neighbourhood(
    config, service, make_facade, pump_until, observe
) -> None:
    service.seed("weekly-highscores", {f"player-{index}": 500 - index for index in range(30)})
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_leaderboard("weekly-highscores", limit=5, around_rank=20)
    pump_until(facade, lambda: observer.events)

    page = observer.payloads("leaderboard_received")[0]
    assert 20 in [entry.rank for entry in page.entries]


def test_empty_leaderboard_for_current_period(
    config, service, make_facade, pump_until, observe
) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_leaderboard("weekly-highscores", limit=5, period="current")
    pump_until(facade, lambda: observer.events)

    page = observer.payloads("leaderboard_received")[0]
    assert page.total_entries == 0
    assert page.has_more is False
    assert page.entries == ()
    (query,) = service.calls_for("GetLeaderboard")
    assert query.period == "current"


def test_unranked_player_reports_zero_rank(
    config, service, make_facade, pump_until, observe
) -> None:
    service.seed("weekly-highscores", {"someone-else": 10})
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_player_rank("weekly-highscores", "never-submitted")
    pump_until(facade, lambda: observer.events)

    result = observer.payloads("player_rank_received")[0]
    assert isinstance(result, RankResult)
    assert result.rank == 0
    assert result.percentile == 0.0
    assert result.ranked is False


def test_player_rank_passes_service_percentile_through(
    config, service, make_facade, pump_until, observe
) -> None:
    service.seed("weekly-highscores", {"a": 30, "b": 20, "c": 10, "d": 5})
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.get_player_rank("weekly-highscores", "b", period="previous", view_slug="eu")
    pump_until(facade, lambda: observer.events)

    result, query = observer.events[0][1], observer.events[0][2]
    assert result == RankResult(rank=2, score=20, percentile=50.0, total_entries=4)
    assert query.period == "previous"
    assert query.view_slug == "eu"


def test_validation_failures_skip_network(config, service, make_facade, observe) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.submit_score("", "player-123", 1)
    facade.submit_score("weekly-highscores", "player-123", 2**63)
    facade.get_leaderboard("weekly-highscores", limit=0)
    facade.get_player_rank("weekly-highscores", "player-123", period="last-week")

    assert facade.pump() == 4
    failures = observer.payloads("request_failed")
    assert [failure.kind for failure in failures] == [FailureKind.VALIDATION] * 4
    assert service.calls == []


def test_service_error_message_is_passed_through(
    config, service, make_facade, pump_until, observe
) -> None:
    service.known_boards = {"weekly-highscores"}
    facade = make_facade(config, service)
    observer = observe(facade)

    request_id = facade.get_leaderboard("no-such-board")
    pump_until(facade, lambda: observer.events)

    (failure,) = observer.payloads("request_failed")
    assert isinstance(failure, OperationFailure)
    assert failure.operation == "GetLeaderboard"
    assert failure.message == "leaderboard no-such-board not found"
    assert failure.kind is FailureKind.SERVICE
    assert failure.request_id == request_id


def test_unexpected_transport_exception_becomes_internal_failure(
    config, make_facade, pump_until, observe
) -> None:
    class _Broken:
        def submit_score(self, submission):
            raise LookupError("boom")

        def close(self) -> None:
            return

    facade = make_facade(config, _Broken())
    observer = observe(facade)

    facade.submit_score("weekly-highscores", "player-123", 5)
    pump_until(facade, lambda: observer.events)

    (failure,) = observer.payloads("request_failed")
    assert failure.kind is FailureKind.INTERNAL
    assert failure.message == "boom"


def test_metadata_and_idempotency_key_are_forwarded_unchanged(
    config, service, make_facade, pump_until, observe
) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)

    facade.submit_score(
        "weekly-highscores", "p", 7, metadata='{"level": 3}', idempotency_key="retry-1"
    )
    facade.submit_score("weekly-highscores", "p", 8, metadata=b"\x00\xff")
    pump_until(facade, lambda: len(observer.events) == 2)

    first, second = service.calls_for("SubmitScore")
    assert first.metadata == b'{"level": 3}'
    assert first.idempotency_key == "retry-1"
    assert second.metadata == b"\x00\xff"
    assert second.idempotency_key is None


def test_each_request_gets_a_distinct_id_echoed_in_outcome(config, service, make_facade) -> None:
    facade = make_facade(config, service)
    seen: dict[int, str] = {}

    class _ById:
        def on_request_failed(self, failure: OperationFailure) -> None:
            seen[failure.request_id] = failure.operation

    facade.connect(_ById())
    first = facade.get_leaderboard("")
    second = facade.get_player_rank("", "")

    assert first != second
    facade.pump()
    assert seen == {first: "GetLeaderboard", second: "GetPlayerRank"}


def test_observer_without_hooks_is_rejected(config, service, make_facade) -> None:
    facade = make_facade(config, service)
    with pytest.raises(TypeError):
        facade.connect(object())


def test_disconnected_observer_stops_receiving(config, service, make_facade, observe) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)
    other = observe(facade)
    facade.disconnect(other.subscription)

    facade.submit_score("", "p", 1)
    facade.pump()

    assert observer.names() == ["request_failed"]
    assert other.names() == []


def test_pump_rejects_foreign_thread(config, service, make_facade) -> None:
    facade = make_facade(config, service)
    errors: list[BaseException] = []

    def _pump() -> None:
        try:
            facade.pump()
        except RuntimeError as exc:
            errors.append(exc)

    worker = threading.Thread(target=_pump)
    worker.start()
    worker.join()

    assert len(errors) == 1


def test_pump_respects_max_items(config, service, make_facade, observe) -> None:
    facade = make_facade(config, service)
    observer = observe(facade)
    for _ in range(3):
        facade.submit_score("", "p", 1)

    assert facade.pump(max_items=2) == 2
    assert facade.pending_delivery_count == 1
    assert facade.pump() == 1
    assert len(observer.events) == 3
