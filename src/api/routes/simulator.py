"""Simulator control endpoints — the surface the dashboard drives."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.analytics.metrics import MetricsEngine
from src.api.deps import get_simulator
from src.api.models.schemas import (
    EquityPointOut,
    ResetRequest,
    StartRequest,
    StateOut,
    StatisticsOut,
    TradeOut,
)
from src.core.exceptions import InvalidParameterError
from src.core.logging import get_logger
from src.simulator.statistics import compute_statistics, equity_curve
from src.simulator.trading_engine import TradingSimulator

log = get_logger(__name__)

router = APIRouter(prefix="/simulator", tags=["simulator"])


def _state_out(simulator: TradingSimulator) -> StateOut:
    return StateOut.model_validate(simulator.get_state().to_dict())


@router.get("/state", response_model=StateOut)
async def get_state(simulator: TradingSimulator = Depends(get_simulator)) -> StateOut:
    return _state_out(simulator)


@router.post("/start", response_model=StateOut)
async def start(
    body: StartRequest,
    simulator: TradingSimulator = Depends(get_simulator),
) -> StateOut:
    """Start the bot. Starting an already running bot changes nothing."""
    try:
        simulator.start(body.game_mode, body.starting_capital)
    except InvalidParameterError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _state_out(simulator)


@router.post("/stop", response_model=StateOut)
async def stop(simulator: TradingSimulator = Depends(get_simulator)) -> StateOut:
    """Stop the bot, force-closing any open position."""
    simulator.stop()
    return _state_out(simulator)


@router.post("/reset", response_model=StateOut)
async def reset(
    body: ResetRequest,
    simulator: TradingSimulator = Depends(get_simulator),
) -> StateOut:
    try:
        simulator.reset(body.starting_capital, body.game_mode)
    except InvalidParameterError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _state_out(simulator)


@router.get("/statistics", response_model=StatisticsOut)
async def get_statistics(simulator: TradingSimulator = Depends(get_simulator)) -> StatisticsOut:
    """Statistics recomputed from the trade history, plus equity-curve metrics."""
    state = simulator.get_state()
    # An open position is still equity, so measure P/L from current_value.
    stats = compute_statistics(state.trades, state.starting_capital, state.current_value)
    metrics = MetricsEngine().calculate(state.starting_capital, state.trades)
    curve = [
        EquityPointOut(
            timestamp=p.timestamp.isoformat() if p.timestamp else None,
            value=p.value,
        )
        for p in equity_curve(state.starting_capital, state.trades)
    ]
    return StatisticsOut(
        trade_count=stats.trade_count,
        win_count=stats.win_count,
        loss_count=stats.loss_count,
        win_rate=stats.win_rate,
        avg_win_amount=stats.avg_win_amount,
        avg_loss_amount=stats.avg_loss_amount,
        best_trade=stats.best_trade,
        worst_trade=stats.worst_trade,
        profit_loss=stats.profit_loss,
        profit_loss_percentage=stats.profit_loss_percentage,
        cumulative_return=metrics.cumulative_return,
        max_drawdown=metrics.max_drawdown,
        max_drawdown_pct=metrics.max_drawdown_pct,
        profit_factor=metrics.profit_factor,
        avg_trade_pnl=metrics.avg_trade_pnl,
        equity_curve=curve,
    )


@router.get("/trades", response_model=list[TradeOut])
async def list_trades(
    limit: int = Query(default=50, ge=1, le=1000),
    simulator: TradingSimulator = Depends(get_simulator),
) -> list[TradeOut]:
    """Most recent trades first."""
    trades = simulator.get_state().trades
    recent = list(reversed(trades))[:limit]
    return [TradeOut.model_validate(t.to_dict()) for t in recent]
