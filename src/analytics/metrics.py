"""Session performance metrics over the simulated equity curve."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from src.core.logging import get_logger
from src.core.types import Trade
from src.simulator.statistics import equity_curve

log = get_logger(__name__)


@dataclass
class PerformanceMetrics:
    """Calculated performance metrics for one simulated session."""

    cumulative_return: float
    max_drawdown: float
    max_drawdown_pct: float
    volatility: float
    profit_factor: float | None   # None when there are no losing trades
    gross_profit: float
    gross_loss: float
    avg_trade_pnl: float
    trade_count: int
    final_value: float


class MetricsEngine:
    """Calculate performance metrics from the closed-trade history.

    Returns are per trade, not per day: the simulator has no calendar.
    """

    def calculate(
        self,
        starting_capital: float,
        trades: Sequence[Trade],
    ) -> PerformanceMetrics:
        """Calculate all performance metrics.

        Args:
            starting_capital: Capital the equity curve starts from.
            trades: Closed trades in execution order.
        """
        if starting_capital <= 0 or not trades:
            return self._empty_metrics(starting_capital)

        values = np.array(
            [p.value for p in equity_curve(starting_capital, trades)], dtype=np.float64
        )
        final = float(values[-1])

        # ── Return Metrics ───────────────────────────────────────
        cumulative_return = final / starting_capital - 1.0
        returns = np.diff(values) / values[:-1]
        returns = returns[np.isfinite(returns)]
        volatility = float(np.std(returns, ddof=1)) if len(returns) > 1 else 0.0

        # Maximum Drawdown
        peak = np.maximum.accumulate(values)
        drawdown = (values - peak) / peak
        max_drawdown_pct = float(np.min(drawdown))
        max_drawdown = float(np.min(values - peak))

        # ── Trading Metrics ──────────────────────────────────────
        pnls = np.array([t.profit_loss for t in trades], dtype=np.float64)
        gross_profit = float(pnls[pnls > 0].sum())
        gross_loss = float(abs(pnls[pnls < 0].sum()))
        profit_factor = gross_profit / gross_loss if gross_loss > 0 else None

        metrics = PerformanceMetrics(
            cumulative_return=round(cumulative_return, 6),
            max_drawdown=round(max_drawdown, 6),
            max_drawdown_pct=round(max_drawdown_pct, 6),
            volatility=round(volatility, 6),
            profit_factor=round(profit_factor, 4) if profit_factor is not None else None,
            gross_profit=round(gross_profit, 6),
            gross_loss=round(gross_loss, 6),
            avg_trade_pnl=round(float(pnls.mean()), 6),
            trade_count=len(trades),
            final_value=round(final, 6),
        )
        log.debug(
            "session_metrics_calculated",
            trade_count=metrics.trade_count,
            cumulative_return=metrics.cumulative_return,
            max_drawdown_pct=metrics.max_drawdown_pct,
        )
        return metrics

    def _empty_metrics(self, starting_capital: float) -> PerformanceMetrics:
        return PerformanceMetrics(
            cumulative_return=0.0, max_drawdown=0.0, max_drawdown_pct=0.0,
            volatility=0.0, profit_factor=None, gross_profit=0.0, gross_loss=0.0,
            avg_trade_pnl=0.0, trade_count=0, final_value=starting_capital,
        )
