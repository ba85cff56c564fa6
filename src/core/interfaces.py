"""Abstract base classes — all modules must implement these interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime


class TimerHandle(ABC):
    """Handle returned by a scheduler; cancelling is idempotent."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from firing again."""
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class BaseScheduler(ABC):
    """Interface for the timer source driving the simulation engine.

    Delays and periods are in milliseconds. Callbacks run on the
    scheduler's single thread and never interleave.
    """

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay_ms*."""
        ...

    @abstractmethod
    def call_repeating(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* every *period_ms* until the handle is cancelled."""
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Current time as seen by this scheduler (timezone-aware UTC)."""
        ...
