"""Persists simulator activity into a :class:`SessionStore`.

The recorder is an ordinary state-store subscriber:

- ``is_active`` turning on opens a session for the user;
- every trade appended while the session is open is stored;
- ``is_active`` turning off ends the session with the final value and P/L.

A reset replaces the whole state. A session still open at that point is
ended with the figures of the last snapshot seen before the reset.
"""

from __future__ import annotations

from collections.abc import Callable

from src.analytics.session_store import SessionStore
from src.core.logging import get_logger
from src.core.types import SimulationState
from src.simulator.trading_engine import TradingSimulator

log = get_logger(__name__)


def is_reset(previous: SimulationState, current: SimulationState) -> bool:
    """True when *current* replaced *previous* instead of evolving from it."""
    if len(current.trades) < len(previous.trades):
        return True
    if current.starting_capital != previous.starting_capital:
        return True
    # A close always records a trade, so a position vanishing without one
    # means the state was rebuilt.
    return (
        previous.current_position is not None
        and current.current_position is None
        and len(current.trades) == len(previous.trades)
    )


class SessionRecorder:
    """Mirror one simulator's sessions and trades into a store."""

    def __init__(self, store: SessionStore, user_id: int) -> None:
        self._store = store
        self._user_id = user_id
        self._session_id: int | None = None
        self._recorded = 0
        self._last: SimulationState | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def session_id(self) -> int | None:
        return self._session_id

    def attach(self, simulator: TradingSimulator) -> None:
        self.detach()
        self._last = None
        self._unsubscribe = simulator.subscribe(self)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __call__(self, state: SimulationState) -> None:
        previous, self._last = self._last, state

        if previous is not None and is_reset(previous, state):
            if self._session_id is not None:
                log.info("session_recorder_reset", session_id=self._session_id)
                self._end(previous)
            self._recorded = len(state.trades)

        if state.is_active and self._session_id is None:
            session = self._store.create_session(
                self._user_id, state.game_mode, state.current_value
            )
            self._session_id = session.id
            self._recorded = len(state.trades)

        if self._session_id is not None and len(state.trades) > self._recorded:
            new_trades = state.trades[self._recorded:]
            for trade in new_trades:
                self._store.create_trade(self._session_id, trade)
            self._recorded = len(state.trades)
            session = self._store.get_session(self._session_id)
            if session is not None:
                wins = sum(1 for t in new_trades if t.is_win)
                self._store.update_session(
                    self._session_id,
                    current_value=state.current_value,
                    profit_loss=state.current_value - session.starting_capital,
                    trade_count=session.trade_count + len(new_trades),
                    win_count=session.win_count + wins,
                    loss_count=session.loss_count + len(new_trades) - wins,
                )

        if not state.is_active and self._session_id is not None:
            self._end(state)

    def _end(self, state: SimulationState) -> None:
        assert self._session_id is not None
        session = self._store.get_session(self._session_id)
        start_value = session.starting_capital if session else state.starting_capital
        self._store.end_session(
            self._session_id,
            current_value=state.current_value,
            profit_loss=state.current_value - start_value,
        )
        log.debug("session_recorder_closed", session_id=self._session_id)
        self._session_id = None
