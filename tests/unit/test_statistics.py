"""Tests for pure trade statistics."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.core.types import TokenIdentity, Trade, TradeType
from src.simulator.statistics import (
    compute_statistics,
    equity_curve,
    profit_loss,
    running_average,
    win_rate,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
TOKEN = TokenIdentity("SOLX", "Sol X", "0x" + "1" * 40)


def _trade(i: int, pnl_pct: float, value: float = 100.0) -> Trade:
    pnl = value * pnl_pct / 100
    return Trade(
        trade_id=f"t{i}",
        timestamp=T0 + timedelta(seconds=i),
        type=TradeType.SELL,
        token=TOKEN,
        price=1 + pnl_pct / 100,
        amount=value,
        value=value + pnl,
        profit_loss=pnl,
        profit_loss_percentage=pnl_pct,
        is_win=pnl_pct > 0,
        tx_hash="0x" + "f" * 64,
    )


class TestHelpers:
    def test_win_rate_without_trades_is_zero(self) -> None:
        assert win_rate(0, 0) == 0.0

    def test_win_rate(self) -> None:
        assert win_rate(3, 4) == 75.0

    def test_running_average(self) -> None:
        avg = running_average(0.0, 1, 10.0)
        avg = running_average(avg, 2, 8.0)
        assert abs(avg - 9.0) < 1e-9
        assert running_average(5.0, 0, 1.0) == 0.0

    def test_profit_loss(self) -> None:
        pnl, pct = profit_loss(1100.0, 1000.0)
        assert abs(pnl - 100.0) < 1e-9
        assert abs(pct - 10.0) < 1e-9
        assert profit_loss(10.0, 0.0) == (10.0, 0.0)


class TestComputeStatistics:
    def test_empty_history(self) -> None:
        stats = compute_statistics([], 1000.0, 1000.0)
        assert stats.trade_count == 0
        assert stats.win_rate == 0.0
        assert stats.avg_win_amount == 0.0
        assert stats.avg_loss_amount == 0.0
        assert stats.best_trade == 0.0
        assert stats.worst_trade == 0.0
        assert stats.profit_loss == 0.0

    def test_average_tracking_scenario(self) -> None:
        trades = [_trade(0, 10.0), _trade(1, -5.0), _trade(2, 8.0)]
        stats = compute_statistics(trades, 1000.0, 1013.0)

        assert stats.win_count == 2
        assert stats.loss_count == 1
        assert abs(stats.avg_win_amount - 9.0) < 1e-9
        assert abs(stats.avg_loss_amount - 5.0) < 1e-9
        assert stats.best_trade == 10.0
        assert stats.worst_trade == -5.0
        assert abs(stats.profit_loss - 13.0) < 1e-9
        assert abs(stats.profit_loss_percentage - 1.3) < 1e-9

    def test_all_losses_keep_best_at_zero(self) -> None:
        stats = compute_statistics([_trade(0, -7.0), _trade(1, -12.0)], 1000.0, 981.0)
        assert stats.best_trade == 0.0
        assert stats.worst_trade == -12.0
        assert stats.win_rate == 0.0


class TestEquityCurve:
    def test_curve_starts_at_capital(self) -> None:
        curve = equity_curve(1000.0, [])
        assert len(curve) == 1
        assert curve[0].value == 1000.0
        assert curve[0].timestamp is None

    def test_curve_accumulates_pnl(self) -> None:
        curve = equity_curve(1000.0, [_trade(0, 10.0), _trade(1, -5.0)])
        values = [round(p.value, 6) for p in curve]
        assert values == [1000.0, 1010.0, 1005.0]
        assert curve[2].timestamp == T0 + timedelta(seconds=1)
