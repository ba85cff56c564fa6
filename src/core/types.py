"""System-wide shared types — the single source of truth for all data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from src.core.constants import (
    DEFAULT_STARTING_CAPITAL,
    MODE_AGGRESSIVE,
    MODE_CONSERVATIVE,
    MODE_STANDARD,
    RISK_PARAMETERS,
)
from src.core.exceptions import InvalidParameterError


# ── Enums ────────────────────────────────────────────────────────

class GameMode(str, Enum):
    STANDARD = MODE_STANDARD
    AGGRESSIVE = MODE_AGGRESSIVE
    CONSERVATIVE = MODE_CONSERVATIVE

    @classmethod
    def parse(cls, value: GameMode | str) -> GameMode:
        """Coerce a mode name (case-insensitive) into a ``GameMode``."""
        if isinstance(value, GameMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            msg = f"Unknown game mode: {value!r}"
            raise InvalidParameterError(
                msg, context={"allowed": [m.value for m in cls]}
            ) from None


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


# ── Risk Profile ─────────────────────────────────────────────────

@dataclass(frozen=True)
class RiskProfile:
    """Risk parameters (percent) selected by a game mode at reset time."""

    stop_loss_percentage: float
    take_profit_percentage: float
    risk_per_trade: float

    @classmethod
    def for_mode(cls, mode: GameMode) -> RiskProfile:
        stop_loss, take_profit, risk = RISK_PARAMETERS[mode.value]
        return cls(
            stop_loss_percentage=stop_loss,
            take_profit_percentage=take_profit,
            risk_per_trade=risk,
        )


# ── Trading Types ────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenIdentity:
    """Synthetic token the simulator pretends to trade."""

    token_symbol: str
    token_name: str
    contract_address: str


@dataclass(frozen=True)
class Position:
    """The single open position, if any."""

    position_id: str
    token: TokenIdentity
    entry_price: float
    amount: float
    value: float
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.entry_price <= 0:
            msg = f"Position entry_price must be positive, got {self.entry_price}"
            raise ValueError(msg)
        if self.value <= 0:
            msg = f"Position value must be positive, got {self.value}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Trade:
    """Immutable record of a single simulated trade."""

    trade_id: str
    timestamp: datetime
    type: TradeType
    token: TokenIdentity
    price: float
    amount: float
    value: float
    profit_loss: float
    profit_loss_percentage: float
    is_win: bool
    tx_hash: str

    def __post_init__(self) -> None:
        if not self.trade_id:
            msg = "Trade trade_id must not be empty"
            raise ValueError(msg)
        if self.amount <= 0:
            msg = f"Trade amount must be positive, got {self.amount}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, object]:
        return {
            "trade_id": self.trade_id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "token_symbol": self.token.token_symbol,
            "token_name": self.token.token_name,
            "contract_address": self.token.contract_address,
            "price": self.price,
            "amount": self.amount,
            "value": self.value,
            "profit_loss": self.profit_loss,
            "profit_loss_percentage": self.profit_loss_percentage,
            "is_win": self.is_win,
            "tx_hash": self.tx_hash,
        }


# ── Simulation State ─────────────────────────────────────────────

@dataclass(frozen=True)
class SimulationState:
    """Snapshot of the whole simulation. Replaced, never mutated."""

    is_active: bool = False
    game_mode: GameMode = GameMode.STANDARD
    starting_capital: float = DEFAULT_STARTING_CAPITAL
    current_value: float = DEFAULT_STARTING_CAPITAL
    available_balance: float = DEFAULT_STARTING_CAPITAL
    profit_loss: float = 0.0
    profit_loss_percentage: float = 0.0
    trade_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    win_rate: float = 0.0
    avg_win_amount: float = 0.0
    avg_loss_amount: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0
    current_position: Position | None = None
    trades: tuple[Trade, ...] = ()
    stop_loss_percentage: float = 15.0
    take_profit_percentage: float = 25.0
    risk_per_trade: float = 10.0
    last_traded_token: TokenIdentity | None = None
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def fresh(
        cls,
        starting_capital: float,
        game_mode: GameMode,
        now: datetime,
    ) -> SimulationState:
        """Build a clean state: no trades, no counters, no position."""
        if starting_capital <= 0:
            msg = f"starting_capital must be positive, got {starting_capital}"
            raise InvalidParameterError(msg, context={"starting_capital": starting_capital})
        profile = RiskProfile.for_mode(game_mode)
        return cls(
            is_active=False,
            game_mode=game_mode,
            starting_capital=starting_capital,
            current_value=starting_capital,
            available_balance=starting_capital,
            stop_loss_percentage=profile.stop_loss_percentage,
            take_profit_percentage=profile.take_profit_percentage,
            risk_per_trade=profile.risk_per_trade,
            last_updated=now,
        )

    @property
    def position_value(self) -> float:
        return self.current_position.value if self.current_position else 0.0

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly view used by the API and the CLI summary."""
        position = self.current_position
        last_token = self.last_traded_token
        return {
            "is_active": self.is_active,
            "game_mode": self.game_mode.value,
            "starting_capital": self.starting_capital,
            "current_value": self.current_value,
            "available_balance": self.available_balance,
            "profit_loss": self.profit_loss,
            "profit_loss_percentage": self.profit_loss_percentage,
            "trade_count": self.trade_count,
            "win_count": self.win_count,
            "loss_count": self.loss_count,
            "win_rate": self.win_rate,
            "avg_win_amount": self.avg_win_amount,
            "avg_loss_amount": self.avg_loss_amount,
            "best_trade": self.best_trade,
            "worst_trade": self.worst_trade,
            "current_position": None if position is None else {
                "position_id": position.position_id,
                "token_symbol": position.token.token_symbol,
                "token_name": position.token.token_name,
                "contract_address": position.token.contract_address,
                "entry_price": position.entry_price,
                "amount": position.amount,
                "value": position.value,
                "timestamp": position.timestamp.isoformat(),
            },
            "stop_loss_percentage": self.stop_loss_percentage,
            "take_profit_percentage": self.take_profit_percentage,
            "risk_per_trade": self.risk_per_trade,
            "last_traded_token": None if last_token is None else {
                "token_symbol": last_token.token_symbol,
                "token_name": last_token.token_name,
                "contract_address": last_token.contract_address,
            },
            "last_updated": self.last_updated.isoformat(),
        }
