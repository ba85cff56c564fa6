"""Fast-forward a simulated trading session on a virtual clock."""

from __future__ import annotations

import random
from dataclasses import dataclass

from config.settings import Settings, get_settings
from src.analytics.metrics import MetricsEngine, PerformanceMetrics
from src.core.logging import get_logger
from src.core.types import GameMode, SimulationState
from src.simulator.scheduler import VirtualScheduler
from src.simulator.statistics import TradeStatistics, compute_statistics
from src.simulator.trading_engine import TradingSimulator

log = get_logger(__name__)

# One hour of virtual time per requested trade is far above the worst case
# (tick period + max hold).
_VIRTUAL_MS_PER_TRADE = 3_600_000


@dataclass
class RunSummary:
    """Outcome of a fast-forwarded session."""

    state: SimulationState
    statistics: TradeStatistics
    metrics: PerformanceMetrics
    elapsed_ms: float
    reached_target: bool


def run_virtual_session(
    game_mode: GameMode | str,
    starting_capital: float,
    trade_target: int,
    seed: int | None = None,
    settings: Settings | None = None,
    max_virtual_ms: float | None = None,
) -> RunSummary:
    """Run the simulator until *trade_target* trades closed, then stop it.

    Args:
        game_mode: Risk profile to trade with.
        starting_capital: Capital the session starts from.
        trade_target: Number of closed trades to wait for.
        seed: Seed for the random source (reproducible runs).
        settings: Timing/outcome parameters; defaults to ``get_settings()``.
        max_virtual_ms: Virtual time budget. Defaults to one hour per trade.

    Returns:
        Final state, recomputed statistics and performance metrics. The
        forced close on stop may add one trade beyond the target.
    """
    if trade_target < 0:
        msg = f"trade_target must be non-negative, got {trade_target}"
        raise ValueError(msg)

    settings = settings or get_settings()
    scheduler = VirtualScheduler()
    simulator = TradingSimulator(
        scheduler,
        rng=random.Random(seed if seed is not None else settings.random_seed),
        settings=settings,
    )
    simulator.reset(starting_capital, game_mode)
    simulator.start(game_mode, starting_capital)

    budget = max_virtual_ms if max_virtual_ms is not None else _VIRTUAL_MS_PER_TRADE * max(trade_target, 1)
    reached = scheduler.run_until(
        lambda: simulator.get_state().trade_count >= trade_target, max_ms=budget
    )
    simulator.stop()

    state = simulator.get_state()
    statistics = compute_statistics(state.trades, state.starting_capital, state.available_balance)
    metrics = MetricsEngine().calculate(state.starting_capital, state.trades)

    log.info(
        "virtual_session_finished",
        trades=state.trade_count,
        win_rate=round(state.win_rate, 2),
        profit_loss=round(state.profit_loss, 4),
        elapsed_ms=scheduler.elapsed_ms,
        reached_target=reached,
    )
    return RunSummary(
        state=state,
        statistics=statistics,
        metrics=metrics,
        elapsed_ms=scheduler.elapsed_ms,
        reached_target=reached,
    )
