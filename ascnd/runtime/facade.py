"""Asynchronous leaderboard facade with host-loop delivery.

Requests run on a worker pool. Every terminal outcome, success or failure, is
posted to a completion queue and only reaches observers from `pump()`, which
the host calls once per tick on its own thread.

Each request holds a lease on the transport generation it was dispatched
with. `reconfigure()` swaps in a new generation; the old transport is closed
once its last in-flight request returns, and those requests still deliver.
`close()` closes every generation immediately and drops anything that has not
been delivered yet.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from time import monotonic
from typing import Any

from ascnd.api.config import ClientConfig
from ascnd.api.errors import (
    CREDENTIAL_NOT_CONFIGURED,
    FACADE_CLOSED,
    RECOVERABLE_REQUEST_ERRORS,
    AscndError,
    ConfigurationError,
    FacadeClosedError,
    FailureKind,
    RequestTimeoutError,
    log_recoverable,
)
from ascnd.api.outcomes import (
    OP_GET_LEADERBOARD,
    OP_GET_PLAYER_RANK,
    OP_SUBMIT_SCORE,
    Failure,
    OperationFailure,
    Outcome,
    Request,
    Subscription,
    Success,
)
from ascnd.api.transport import LeaderboardTransport, TransportFactory, create_http_transport
from ascnd.runtime.delivery import CompletionQueue
from ascnd.runtime.requests import build_leaderboard_query, build_rank_query, build_submission

_LOG = logging.getLogger("ascnd.facade")

TransportCall = Callable[[LeaderboardTransport, Any], Any]

_OBSERVER_HOOKS: dict[str, str] = {
    OP_SUBMIT_SCORE: "on_score_submitted",
    OP_GET_LEADERBOARD: "on_leaderboard_received",
    OP_GET_PLAYER_RANK: "on_player_rank_received",
}
_FAILURE_HOOK = "on_request_failed"


@dataclass(slots=True)
class _TransportLease:
    generation: int
    config: ClientConfig
    transport: LeaderboardTransport | None
    unavailable_reason: str = ""
    active_requests: int = 0
    retired: bool = False
    closed: bool = False


@dataclass(slots=True)
class _PendingRequest:
    request_id: int
    operation: str
    request: Request
    lease: _TransportLease
    deadline_seconds: float


class RuntimeLeaderboardFacade:
    """Non-blocking leaderboard client for single-threaded hosts."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport_factory: TransportFactory | None = None,
        time_source: Callable[[], float] | None = None,
        owner_thread_id: int | None = None,
    ) -> None:
        self._transport_factory = transport_factory or create_http_transport
        self._time_source = time_source or monotonic
        self._lock = threading.Lock()
        self._max_workers = config.max_workers
        self._completions: CompletionQueue[Outcome] = CompletionQueue(
            owner_thread_id=owner_thread_id
        )
        self._executor = ThreadPoolExecutor(
            max_workers=config.max_workers,
            thread_name_prefix="ascnd-io",
        )
        self._pending: dict[int, _PendingRequest] = {}
        self._retired_leases: list[_TransportLease] = []
        self._observers: dict[int, object] = {}
        self._next_request_id = 1
        self._next_subscription_id = 1
        self._generation = 0
        self._closed = False
        self._lease = self._open_lease(config)

    @property
    def config(self) -> ClientConfig:
        with self._lock:
            return self._lease.config

    @property
    def enabled(self) -> bool:
        with self._lock:
            return not self._closed and self._lease.transport is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def pending_delivery_count(self) -> int:
        return self._completions.pending_count

    def connect(self, observer: object) -> Subscription:
        """Register an observer implementing one or more notification hooks."""
        hooks = (*_OBSERVER_HOOKS.values(), _FAILURE_HOOK)
        if not any(callable(getattr(observer, hook, None)) for hook in hooks):
            raise TypeError("observer implements no leaderboard notification hook")
        sub_id = self._next_subscription_id
        self._next_subscription_id += 1
        self._observers[sub_id] = observer
        return Subscription(sub_id)

    def disconnect(self, subscription: Subscription) -> None:
        self._observers.pop(subscription.id, None)

    def submit_score(
        self,
        leaderboard_id: str,
        player_id: str,
        score: int,
        metadata: str | bytes | None = None,
        idempotency_key: str | None = None,
    ) -> int:
        """Queue one score write and return its request id."""
        return self._dispatch(
            OP_SUBMIT_SCORE,
            lambda: build_submission(leaderboard_id, player_id, score, metadata, idempotency_key),
            lambda transport, request: transport.submit_score(request),
        )

    def get_leaderboard(
        self,
        leaderboard_id: str,
        limit: int = 10,
        cursor: str = "",
        around_rank: int = 0,
        period: str = "",
        view_slug: str = "",
        offset: int = 0,
    ) -> int:
        """Queue one leaderboard page read and return its request id."""
        return self._dispatch(
            OP_GET_LEADERBOARD,
            lambda: build_leaderboard_query(
                leaderboard_id,
                limit=limit,
                cursor=cursor,
                around_rank=around_rank,
                period=period,
                view_slug=view_slug,
                offset=offset,
            ),
            lambda transport, request: transport.get_leaderboard(request),
        )

    def get_player_rank(
        self,
        leaderboard_id: str,
        player_id: str,
        period: str = "",
        view_slug: str = "",
    ) -> int:
        """Queue one player rank read and return its request id."""
        return self._dispatch(
            OP_GET_PLAYER_RANK,
            lambda: build_rank_query(leaderboard_id, player_id, period=period, view_slug=view_slug),
            lambda transport, request: transport.get_player_rank(request),
        )

    def reconfigure(self, config: ClientConfig) -> None:
        """Replace configuration and transport; in-flight requests keep their lease."""
        if config.max_workers != self._max_workers:
            _LOG.warning(
                "facade_pool_size_unchanged configured=%d active=%d",
                config.max_workers,
                self._max_workers,
            )
        lease = self._open_lease(config)
        to_close: list[_TransportLease] = []
        with self._lock:
            if self._closed:
                lease.closed = True
                to_close.append(lease)
            else:
                previous = self._lease
                self._lease = lease
                previous.retired = True
                if previous.active_requests == 0:
                    previous.closed = True
                    to_close.append(previous)
                else:
                    self._retired_leases.append(previous)
        for stale in to_close:
            self._close_lease(stale)
        if self._closed:
            _LOG.warning("facade_reconfigure_ignored reason=closed")
            return
        _LOG.info(
            "facade_reconfigured generation=%d config=%s", lease.generation, config.redacted()
        )

    def close(self) -> None:
        """Tear down: release every transport once and drop undelivered outcomes."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            dropped = len(self._pending)
            self._pending.clear()
            leases = [self._lease, *self._retired_leases]
            self._retired_leases.clear()
            to_close = [lease for lease in leases if not lease.closed]
            for lease in to_close:
                lease.closed = True
            dropped += self._completions.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
        for lease in to_close:
            self._close_lease(lease)
        _LOG.info("facade_closed dropped=%d", dropped)

    def pump(self, max_items: int | None = None) -> int:
        """Deliver completed outcomes on the calling (owner) thread."""
        if threading.get_ident() != self._completions.owner_thread_id:
            raise RuntimeError("leaderboard facade must be pumped on its owner thread")
        self._expire_overdue()
        return self._completions.drain(self._deliver, max_items=max_items)

    def _open_lease(self, config: ClientConfig) -> _TransportLease:
        with self._lock:
            self._generation += 1
            generation = self._generation
        if not config.has_credential:
            _LOG.warning("leaderboard_credential_missing generation=%d", generation)
            return _TransportLease(generation, config, None, CREDENTIAL_NOT_CONFIGURED)
        try:
            transport = self._transport_factory(config)
        except (AscndError, *RECOVERABLE_REQUEST_ERRORS) as exc:
            _LOG.exception("transport_init_failed generation=%d", generation)
            return _TransportLease(generation, config, None, f"failed to initialize client: {exc}")
        _LOG.debug("transport_opened generation=%d config=%s", generation, config.redacted())
        return _TransportLease(generation, config, transport)

    def _admission_error_locked(self) -> AscndError | None:
        if self._closed:
            return FacadeClosedError(FACADE_CLOSED)
        if self._lease.transport is None:
            return ConfigurationError(self._lease.unavailable_reason or CREDENTIAL_NOT_CONFIGURED)
        return None

    def _dispatch(
        self,
        operation: str,
        build_request: Callable[[], Request],
        call: TransportCall,
    ) -> int:
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            error = self._admission_error_locked()
        if error is not None:
            self._post_failure(request_id, operation, None, error)
            return request_id
        try:
            request = build_request()
        except AscndError as exc:
            self._post_failure(request_id, operation, None, exc)
            return request_id
        with self._lock:
            error = self._admission_error_locked()
            if error is None:
                lease = self._lease
                lease.active_requests += 1
                pending = _PendingRequest(
                    request_id=request_id,
                    operation=operation,
                    request=request,
                    lease=lease,
                    deadline_seconds=self._time_source() + lease.config.timeout_seconds,
                )
                self._pending[request_id] = pending
        if error is not None:
            self._post_failure(request_id, operation, request, error)
            return request_id
        try:
            self._executor.submit(self._run, pending, call)
        except RuntimeError:
            # Executor was shut down by a concurrent close().
            with self._lock:
                self._pending.pop(request_id, None)
            self._release(lease)
            self._post_failure(request_id, operation, request, FacadeClosedError(FACADE_CLOSED))
            return request_id
        _LOG.debug(
            "request_dispatched op=%s request_id=%d generation=%d",
            operation,
            request_id,
            lease.generation,
        )
        return request_id

    def _run(self, pending: _PendingRequest, call: TransportCall) -> None:
        transport = pending.lease.transport
        outcome: Outcome
        try:
            if transport is None:
                raise ConfigurationError(CREDENTIAL_NOT_CONFIGURED)
            payload = call(transport, pending.request)
        except AscndError as exc:
            outcome = self._failure(pending.request_id, pending.operation, pending.request, exc)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            _LOG.exception(
                "request_failed_unexpectedly op=%s request_id=%d",
                pending.operation,
                pending.request_id,
            )
            outcome = Failure(
                request_id=pending.request_id,
                request=pending.request,
                failure=OperationFailure(
                    operation=pending.operation,
                    message=str(exc) or type(exc).__name__,
                    kind=FailureKind.INTERNAL,
                    request_id=pending.request_id,
                ),
            )
        else:
            outcome = Success(
                operation=pending.operation,
                request_id=pending.request_id,
                request=pending.request,
                payload=payload,
            )
        finally:
            self._release(pending.lease)
        self._resolve(pending.request_id, outcome)

    def _resolve(self, request_id: int, outcome: Outcome) -> None:
        with self._lock:
            # Posting under the lock keeps close() from clearing the queue in between.
            pending = self._pending.pop(request_id, None)
            if pending is not None:
                self._completions.post(outcome)
        if pending is None:
            _LOG.debug("completion_discarded request_id=%d", request_id)

    def _release(self, lease: _TransportLease) -> None:
        with self._lock:
            lease.active_requests -= 1
            if not lease.retired or lease.closed or lease.active_requests > 0:
                return
            lease.closed = True
            if lease in self._retired_leases:
                self._retired_leases.remove(lease)
        self._close_lease(lease)

    def _close_lease(self, lease: _TransportLease) -> None:
        if lease.transport is None:
            return
        try:
            lease.transport.close()
        except RECOVERABLE_REQUEST_ERRORS:
            log_recoverable(
                _LOG,
                "transport_close_failed generation=%d",
                lease.generation,
                level=logging.WARNING,
            )
            return
        _LOG.debug("transport_released generation=%d", lease.generation)

    def _expire_overdue(self) -> None:
        now = self._time_source()
        with self._lock:
            overdue = [
                pending for pending in self._pending.values() if pending.deadline_seconds <= now
            ]
            for pending in overdue:
                del self._pending[pending.request_id]
                timeout = pending.lease.config.timeout_seconds
                self._completions.post(
                    self._failure(
                        pending.request_id,
                        pending.operation,
                        pending.request,
                        RequestTimeoutError(f"request timed out after {timeout}s"),
                    )
                )
        for pending in overdue:
            _LOG.warning(
                "request_timed_out op=%s request_id=%d", pending.operation, pending.request_id
            )

    def _post_failure(
        self,
        request_id: int,
        operation: str,
        request: Request | None,
        error: AscndError,
    ) -> None:
        _LOG.debug(
            "request_rejected op=%s request_id=%d kind=%s", operation, request_id, error.kind.value
        )
        self._completions.post(self._failure(request_id, operation, request, error))

    @staticmethod
    def _failure(
        request_id: int,
        operation: str,
        request: Request | None,
        error: AscndError,
    ) -> Failure:
        return Failure(
            request_id=request_id,
            request=request,
            failure=OperationFailure(
                operation=operation,
                message=str(error),
                kind=error.kind,
                request_id=request_id,
            ),
        )

    def _deliver(self, outcome: Outcome) -> None:
        if isinstance(outcome, Failure):
            hook_name = _FAILURE_HOOK
            args: tuple[object, ...] = (outcome.failure,)
        else:
            hook_name = _OBSERVER_HOOKS[outcome.operation]
            args = (outcome.payload, outcome.request)
        for observer in tuple(self._observers.values()):
            hook = getattr(observer, hook_name, None)
            if callable(hook):
                hook(*args)


__all__ = ["RuntimeLeaderboardFacade"]
