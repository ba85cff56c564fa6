"""Observable store holding the single source of truth for simulation state.

Every mutation replaces the frozen :class:`SimulationState` snapshot and fans
the new snapshot out to subscribers synchronously, in registration order.
A listener that raises is logged and skipped; the remaining listeners are
still notified and the mutation stands.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from datetime import datetime, timezone

from src.core.logging import get_logger
from src.core.types import GameMode, SimulationState

log = get_logger(__name__)

StateListener = Callable[[SimulationState], None]


class TradingStateStore:
    """Holds the current :class:`SimulationState` and its subscribers.

    Args:
        initial: Starting snapshot. Defaults to a fresh standard-mode state
            with the default capital.
        clock: Source of ``last_updated`` timestamps.
    """

    def __init__(
        self,
        initial: SimulationState | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state = initial or SimulationState(last_updated=self._clock())
        self._listeners: list[StateListener] = []

    # ── Subscription ────────────────────────────────────────────

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* and replay the current state to it immediately.

        Returns:
            A callable that removes the listener. Calling it more than
            once is harmless.
        """
        self._listeners.append(listener)
        self._call(listener, self._state)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ── Reads / writes ──────────────────────────────────────────

    def get_state(self) -> SimulationState:
        """Return a copy of the current snapshot."""
        return dataclasses.replace(self._state)

    def update(self, **changes: object) -> SimulationState:
        """Shallow-merge *changes*, stamp ``last_updated``, notify subscribers.

        Raises:
            TypeError: If a key is not a ``SimulationState`` field.
        """
        changes["last_updated"] = self._clock()
        self._state = dataclasses.replace(self._state, **changes)  # type: ignore[arg-type]
        self._notify()
        return self._state

    def reset(self, starting_capital: float, game_mode: GameMode | str) -> SimulationState:
        """Replace the whole state with a fresh one and notify."""
        mode = GameMode.parse(game_mode)
        self._state = SimulationState.fresh(starting_capital, mode, now=self._clock())
        log.info(
            "trading_state_reset",
            starting_capital=starting_capital,
            game_mode=mode.value,
        )
        self._notify()
        return self._state

    # ── Internals ───────────────────────────────────────────────

    def _notify(self) -> None:
        state = self._state
        # Copy so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            self._call(listener, state)

    @staticmethod
    def _call(listener: StateListener, state: SimulationState) -> None:
        try:
            listener(state)
        except Exception:
            log.exception("listener_failed", listener=getattr(listener, "__qualname__", repr(listener)))
