"""Trade statistics — pure functions over the closed-trade history.

The engine maintains the same figures incrementally on every close; these
functions recompute them from scratch and must always agree with the
incremental values.

Conventions: percentages are plain numbers (``12.5`` means 12.5 %), average
win/loss amounts are magnitudes of the per-trade percentage P/L, and best /
worst trade start from 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from src.core.types import Trade


@dataclass(frozen=True)
class TradeStatistics:
    """Aggregates derivable purely from trade history and balances."""

    trade_count: int
    win_count: int
    loss_count: int
    win_rate: float
    avg_win_amount: float
    avg_loss_amount: float
    best_trade: float
    worst_trade: float
    profit_loss: float
    profit_loss_percentage: float


@dataclass(frozen=True)
class EquityPoint:
    timestamp: datetime | None
    value: float


# ── Small helpers shared with the engine ────────────────────────


def win_rate(win_count: int, trade_count: int) -> float:
    """``win_count / trade_count * 100``, or 0 with no trades."""
    if trade_count <= 0:
        return 0.0
    return win_count / trade_count * 100.0


def running_average(previous: float, count: int, value: float) -> float:
    """Fold the *count*-th sample into an average of ``count - 1`` samples."""
    if count <= 0:
        return 0.0
    return (previous * (count - 1) + value) / count


def profit_loss(current_value: float, starting_capital: float) -> tuple[float, float]:
    """Absolute and percentage P/L relative to the starting capital."""
    pnl = current_value - starting_capital
    pct = pnl / starting_capital * 100.0 if starting_capital else 0.0
    return pnl, pct


# ── Full recomputation ──────────────────────────────────────────


def compute_statistics(
    trades: Sequence[Trade],
    starting_capital: float,
    available_balance: float,
) -> TradeStatistics:
    """Recompute every derived figure from history.

    ``available_balance`` equals total equity whenever no position is open,
    which is the only time these figures are final.
    """
    wins = [t.profit_loss_percentage for t in trades if t.is_win]
    losses = [abs(t.profit_loss_percentage) for t in trades if not t.is_win]
    pct_values = [t.profit_loss_percentage for t in trades]

    pnl, pnl_pct = profit_loss(available_balance, starting_capital)
    return TradeStatistics(
        trade_count=len(trades),
        win_count=len(wins),
        loss_count=len(losses),
        win_rate=win_rate(len(wins), len(trades)),
        avg_win_amount=sum(wins) / len(wins) if wins else 0.0,
        avg_loss_amount=sum(losses) / len(losses) if losses else 0.0,
        best_trade=max([0.0, *pct_values]),
        worst_trade=min([0.0, *pct_values]),
        profit_loss=pnl,
        profit_loss_percentage=pnl_pct,
    )


def equity_curve(starting_capital: float, trades: Iterable[Trade]) -> list[EquityPoint]:
    """Equity after each closed trade, led by the starting capital."""
    points = [EquityPoint(timestamp=None, value=starting_capital)]
    value = starting_capital
    for trade in trades:
        value += trade.profit_loss
        points.append(EquityPoint(timestamp=trade.timestamp, value=value))
    return points
