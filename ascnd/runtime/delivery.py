"""Cross-thread completion hand-off onto the host loop."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class CompletionQueue(Generic[T]):
    """Multi-producer queue drained by a single owning thread.

    Producers may `post` from any thread. `drain` must run on the owner thread
    and hands items to `deliver` one at a time, so an exception raised by
    `deliver` leaves later items queued for the next drain.
    """

    def __init__(self, *, owner_thread_id: int | None = None) -> None:
        self._items: queue.SimpleQueue[T] = queue.SimpleQueue()
        self._owner_thread_id = (
            threading.get_ident() if owner_thread_id is None else int(owner_thread_id)
        )
        self._draining = False

    @property
    def owner_thread_id(self) -> int:
        return self._owner_thread_id

    @property
    def pending_count(self) -> int:
        return self._items.qsize()

    def post(self, item: T) -> None:
        self._items.put(item)

    def drain(self, deliver: Callable[[T], None], *, max_items: int | None = None) -> int:
        """Deliver queued items on the owner thread and return how many ran."""
        if threading.get_ident() != self._owner_thread_id:
            raise RuntimeError("completion queue must be drained on its owner thread")
        if max_items is not None and max_items < 0:
            raise ValueError("max_items must be >= 0")
        if self._draining:
            return 0
        self._draining = True
        delivered = 0
        try:
            while max_items is None or delivered < max_items:
                try:
                    item = self._items.get_nowait()
                except queue.Empty:
                    break
                delivered += 1
                deliver(item)
        finally:
            self._draining = False
        return delivered

    def clear(self) -> int:
        """Drop every queued item and return how many were discarded."""
        dropped = 0
        while True:
            try:
                self._items.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1


__all__ = ["CompletionQueue"]
