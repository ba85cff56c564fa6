"""Position lifecycle driver — the simulated auto-trading bot.

State machine::

    Flat --open_position--> Open --close_position--> Flat
     ^                                                 |
     +------ reopen delay / repeating tick ------------+

Outcome model for a close::

    is_win      ~ Bernoulli(win_probability)          (0.6 by default)
    volatility  ~ Uniform[vol_min, vol_max)           (5..25 %)
    exit_price  = entry_price * (1 ± volatility / 100)

Every timer callback re-checks ``is_active`` when it fires, and a scheduled
close only acts on the position it was scheduled for, so timers left over
from an earlier run can never touch a newer position.
"""

from __future__ import annotations

import random
from collections.abc import Callable

from config.settings import Settings, get_settings
from src.core.constants import ENTRY_PRICE
from src.core.interfaces import BaseScheduler, TimerHandle
from src.core.logging import get_logger
from src.core.types import GameMode, Position, SimulationState, Trade, TradeType
from src.simulator.state_store import StateListener, TradingStateStore
from src.simulator.statistics import profit_loss, running_average, win_rate
from src.simulator.synthetic import generate_token, generate_tx_hash, new_id

log = get_logger(__name__)


class TradingSimulator:
    """Drives the open/close cycle of synthetic positions on a scheduler.

    Args:
        scheduler: Timer source (asyncio-backed or virtual).
        rng: Random source. Seeded from ``settings.random_seed`` when
            omitted.
        settings: Timing and outcome parameters. Defaults to
            :func:`get_settings`.
        store: State store to drive. A fresh one using the scheduler's
            clock is created when omitted.
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        rng: random.Random | None = None,
        settings: Settings | None = None,
        store: TradingStateStore | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._scheduler = scheduler
        self._rng = rng or random.Random(self._settings.random_seed)
        if store is None:
            initial = SimulationState.fresh(
                self._settings.default_starting_capital,
                GameMode.parse(self._settings.default_game_mode),
                now=scheduler.now(),
            )
            store = TradingStateStore(initial=initial, clock=scheduler.now)
        self._store = store
        self._tick_handle: TimerHandle | None = None
        self._pending: list[TimerHandle] = []

    # ── Read API ────────────────────────────────────────────────

    @property
    def store(self) -> TradingStateStore:
        return self._store

    @property
    def is_active(self) -> bool:
        return self._store.get_state().is_active

    def get_state(self) -> SimulationState:
        return self._store.get_state()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    # ── Lifecycle ───────────────────────────────────────────────

    def reset(self, starting_capital: float, game_mode: GameMode | str) -> None:
        """Stop scheduling and rebuild the state from scratch.

        Pending timers are cancelled; an open position is discarded, not
        closed, since the state it belongs to is being replaced.
        """
        self._cancel_timers()
        self._store.reset(starting_capital, game_mode)

    def start(self, game_mode: GameMode | str, starting_capital: float) -> None:
        """Activate the bot and open the first position immediately.

        No-op when already active. Resumes with the existing capital unless
        the account is exhausted (``current_value <= 0``), in which case the
        state is reset with *starting_capital*.
        """
        mode = GameMode.parse(game_mode)
        state = self._store.get_state()
        if state.is_active:
            log.debug("simulation_start_ignored", reason="already_active")
            return

        if state.current_value <= 0:
            self._store.reset(starting_capital, mode)
        self._store.update(is_active=True, game_mode=mode)

        log.info(
            "simulation_started",
            game_mode=mode.value,
            capital=round(self._store.get_state().current_value, 4),
        )

        self.open_position()
        self._tick_handle = self._scheduler.call_repeating(
            self._settings.tick_interval_ms, self._on_tick
        )

    def stop(self) -> None:
        """Deactivate the bot and force-close any open position."""
        state = self._store.get_state()
        self._cancel_timers()
        if not state.is_active:
            return

        if state.current_position is not None:
            # Force-close runs before deactivation so the trade is recorded.
            self._close(state)
        self._store.update(is_active=False)

        final = self._store.get_state()
        log.info(
            "simulation_stopped",
            trade_count=final.trade_count,
            current_value=round(final.current_value, 4),
            profit_loss=round(final.profit_loss, 4),
        )

    # ── Position transitions ────────────────────────────────────

    def open_position(self) -> Position | None:
        """Open a synthetic position sized by ``risk_per_trade``.

        Returns:
            The new position, or None when the state does not permit
            opening (inactive, already open, or no balance).
        """
        state = self._store.get_state()
        if not state.is_active or state.current_position is not None:
            return None
        if state.available_balance <= 0:
            log.debug("position_open_skipped", reason="no_balance")
            return None

        trade_amount = state.available_balance * (state.risk_per_trade / 100.0)
        token = generate_token(self._rng)
        position = Position(
            position_id=new_id(),
            token=token,
            entry_price=ENTRY_PRICE,
            amount=trade_amount / ENTRY_PRICE,
            value=trade_amount,
            timestamp=self._scheduler.now(),
        )

        self._store.update(
            available_balance=state.available_balance - trade_amount,
            current_position=position,
            last_traded_token=token,
        )

        hold_ms = self._rng.uniform(self._settings.hold_min_ms, self._settings.hold_max_ms)
        self._track(
            self._scheduler.call_later(hold_ms, lambda: self._on_close_due(position.position_id))
        )

        log.info(
            "position_opened",
            token=token.token_symbol,
            value=round(trade_amount, 4),
            hold_ms=round(hold_ms),
        )
        return position

    def close_position(self) -> Trade | None:
        """Close the open position with a randomly drawn outcome.

        Returns:
            The recorded trade, or None when inactive or flat.
        """
        state = self._store.get_state()
        if not state.is_active or state.current_position is None:
            return None

        trade = self._close(state)

        if self._store.get_state().is_active:
            delay_ms = self._rng.uniform(self._settings.reopen_min_ms, self._settings.reopen_max_ms)
            self._track(self._scheduler.call_later(delay_ms, self._on_reopen_due))
        return trade

    # ── Timer callbacks ─────────────────────────────────────────

    def _on_tick(self) -> None:
        state = self._store.get_state()
        if not state.is_active:
            if self._tick_handle is not None:
                self._tick_handle.cancel()
                self._tick_handle = None
            return
        if state.current_position is None and state.available_balance > 0:
            self.open_position()

    def _on_close_due(self, position_id: str) -> None:
        position = self._store.get_state().current_position
        if position is None or position.position_id != position_id:
            log.debug("stale_close_ignored", position_id=position_id)
            return
        self.close_position()

    def _on_reopen_due(self) -> None:
        self.open_position()

    # ── Internals ───────────────────────────────────────────────

    def _close(self, state: SimulationState) -> Trade:
        position = state.current_position
        assert position is not None

        is_win = self._rng.random() < self._settings.win_probability
        volatility = self._rng.uniform(
            self._settings.volatility_min_pct, self._settings.volatility_max_pct
        )
        price_change = volatility if is_win else -volatility

        exit_price = position.entry_price * (1 + price_change / 100.0)
        new_position_value = position.amount * exit_price
        trade_pnl = new_position_value - position.value
        trade_pnl_pct = trade_pnl / position.value * 100.0

        trade = Trade(
            trade_id=new_id(),
            timestamp=self._scheduler.now(),
            type=TradeType.SELL,
            token=position.token,
            price=exit_price,
            amount=position.amount,
            value=new_position_value,
            profit_loss=trade_pnl,
            profit_loss_percentage=trade_pnl_pct,
            is_win=is_win,
            tx_hash=generate_tx_hash(self._rng),
        )

        trade_count = state.trade_count + 1
        win_count = state.win_count + (1 if is_win else 0)
        loss_count = state.loss_count + (0 if is_win else 1)
        avg_win = state.avg_win_amount
        avg_loss = state.avg_loss_amount
        if is_win:
            avg_win = running_average(avg_win, win_count, trade_pnl_pct)
        else:
            avg_loss = running_average(avg_loss, loss_count, abs(trade_pnl_pct))

        available = state.available_balance + new_position_value
        pnl, pnl_pct = profit_loss(available, state.starting_capital)

        self._store.update(
            trades=(*state.trades, trade),
            trade_count=trade_count,
            win_count=win_count,
            loss_count=loss_count,
            win_rate=win_rate(win_count, trade_count),
            avg_win_amount=avg_win,
            avg_loss_amount=avg_loss,
            best_trade=max(state.best_trade, trade_pnl_pct),
            worst_trade=min(state.worst_trade, trade_pnl_pct),
            available_balance=available,
            current_value=available,
            profit_loss=pnl,
            profit_loss_percentage=pnl_pct,
            current_position=None,
        )

        log.info(
            "position_closed",
            token=position.token.token_symbol,
            is_win=is_win,
            pnl=round(trade_pnl, 4),
            pnl_pct=round(trade_pnl_pct, 2),
            balance=round(available, 4),
        )
        return trade

    def _track(self, handle: TimerHandle) -> None:
        self._pending = [h for h in self._pending if not h.cancelled]
        self._pending.append(handle)

    def _cancel_timers(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
