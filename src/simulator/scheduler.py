"""Timer sources for the trading simulator.

Two implementations of :class:`BaseScheduler`:

- :class:`AsyncioScheduler` wraps ``loop.call_later`` for live use inside an
  asyncio application (the API server).
- :class:`VirtualScheduler` keeps its own clock and a heap of pending timers.
  Nothing fires until :meth:`VirtualScheduler.advance` or
  :meth:`VirtualScheduler.run_until` is called, which makes tests and the
  CLI runner deterministic and instantaneous.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from src.core.interfaces import BaseScheduler, TimerHandle
from src.core.logging import get_logger

log = get_logger(__name__)


# ── Asyncio ─────────────────────────────────────────────────────


class _AsyncioHandle(TimerHandle):
    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(BaseScheduler):
    """Schedules callbacks on an asyncio event loop.

    Args:
        loop: Loop to schedule on. When omitted, the running loop is
            looked up at call time, so the scheduler can be built before
            the loop starts (e.g. in ``create_app``).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _AsyncioHandle()

        def _fire() -> None:
            handle._handle = None
            if not handle.cancelled:
                handle._cancelled = True
                callback()

        handle._handle = self._get_loop().call_later(delay_ms / 1000.0, _fire)
        return handle

    def call_repeating(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _AsyncioHandle()
        loop = self._get_loop()

        def _fire() -> None:
            if handle.cancelled:
                return
            # Re-arm first so the callback may cancel its own handle.
            handle._handle = loop.call_later(period_ms / 1000.0, _fire)
            callback()

        handle._handle = loop.call_later(period_ms / 1000.0, _fire)
        return handle

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


# ── Virtual clock ───────────────────────────────────────────────


class _VirtualHandle(TimerHandle):
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler(BaseScheduler):
    """Deterministic scheduler with a manually advanced clock.

    Timers due at the same instant fire in scheduling order.

    Args:
        start: Virtual wall-clock origin. Defaults to 2026-01-01 UTC.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._origin = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._elapsed_ms = 0.0
        self._seq = itertools.count()
        # (due_ms, seq, handle, callback, period_ms | None)
        self._queue: list[tuple[float, int, _VirtualHandle, Callable[[], None], float | None]] = []

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    @property
    def pending(self) -> int:
        """Number of timers still armed."""
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def now(self) -> datetime:
        return self._origin + timedelta(milliseconds=self._elapsed_ms)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _VirtualHandle()
        self._push(self._elapsed_ms + max(delay_ms, 0.0), handle, callback, None)
        return handle

    def call_repeating(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            msg = f"period_ms must be positive, got {period_ms}"
            raise ValueError(msg)
        handle = _VirtualHandle()
        self._push(self._elapsed_ms + period_ms, handle, callback, period_ms)
        return handle

    def advance(self, ms: float) -> int:
        """Move the clock forward by *ms*, firing every timer that falls due.

        Returns:
            Number of callbacks fired.
        """
        return self._run_to(self._elapsed_ms + ms)

    def run_until(self, predicate: Callable[[], bool], max_ms: float) -> bool:
        """Fire timers one at a time until *predicate* holds or *max_ms* elapses.

        Returns:
            True if the predicate became true within the budget.
        """
        deadline = self._elapsed_ms + max_ms
        while not predicate():
            next_due = self._next_due()
            if next_due is None or next_due > deadline:
                self._elapsed_ms = deadline
                return predicate()
            self._fire_next()
        return True

    # ── Internals ───────────────────────────────────────────────

    def _push(
        self,
        due_ms: float,
        handle: _VirtualHandle,
        callback: Callable[[], None],
        period_ms: float | None,
    ) -> None:
        heapq.heappush(self._queue, (due_ms, next(self._seq), handle, callback, period_ms))

    def _next_due(self) -> float | None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def _fire_next(self) -> None:
        due_ms, _, handle, callback, period_ms = heapq.heappop(self._queue)
        self._elapsed_ms = max(self._elapsed_ms, due_ms)
        if period_ms is not None:
            self._push(due_ms + period_ms, handle, callback, period_ms)
        else:
            handle._cancelled = True
        callback()

    def _run_to(self, target_ms: float) -> int:
        fired = 0
        while True:
            next_due = self._next_due()
            if next_due is None or next_due > target_ms:
                break
            self._fire_next()
            fired += 1
        self._elapsed_ms = max(self._elapsed_ms, target_ms)
        log.debug("virtual_clock_advanced", elapsed_ms=self._elapsed_ms, fired=fired)
        return fired
