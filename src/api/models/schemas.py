"""Pydantic V2 request/response schemas for the SOLSIM API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ── Health ────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


# ── Simulator control ─────────────────────────────────────────────

class StartRequest(BaseModel):
    """Request body for starting the trading bot."""

    game_mode: str = "standard"
    starting_capital: float = Field(default=1000.0, gt=0)


class ResetRequest(BaseModel):
    """Request body for resetting the simulation."""

    starting_capital: float = Field(default=1000.0, gt=0)
    game_mode: str = "standard"


# ── Simulator views ───────────────────────────────────────────────

class TokenOut(BaseModel):
    token_symbol: str
    token_name: str
    contract_address: str


class PositionOut(TokenOut):
    position_id: str
    entry_price: float
    amount: float
    value: float
    timestamp: str


class TradeOut(TokenOut):
    trade_id: str
    timestamp: str
    type: Literal["buy", "sell"]
    price: float
    amount: float
    value: float
    profit_loss: float
    profit_loss_percentage: float
    is_win: bool
    tx_hash: str


class StateOut(BaseModel):
    is_active: bool
    game_mode: str
    starting_capital: float
    current_value: float
    available_balance: float
    profit_loss: float
    profit_loss_percentage: float
    trade_count: int
    win_count: int
    loss_count: int
    win_rate: float
    avg_win_amount: float
    avg_loss_amount: float
    best_trade: float
    worst_trade: float
    current_position: PositionOut | None = None
    stop_loss_percentage: float
    take_profit_percentage: float
    risk_per_trade: float
    last_traded_token: TokenOut | None = None
    last_updated: str


class EquityPointOut(BaseModel):
    timestamp: str | None
    value: float


class StatisticsOut(BaseModel):
    """Statistics recomputed from history plus equity-curve metrics."""

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
    cumulative_return: float
    max_drawdown: float
    max_drawdown_pct: float
    profit_factor: float | None = None
    avg_trade_pnl: float
    equity_curve: list[EquityPointOut] = Field(default_factory=list)
