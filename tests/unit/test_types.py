"""Tests for shared data types."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.core.exceptions import InvalidParameterError
from src.core.types import (
    GameMode,
    Position,
    RiskProfile,
    SimulationState,
    TokenIdentity,
    Trade,
    TradeType,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
TOKEN = TokenIdentity("BONKAI", "Bonk Ai", "0x" + "ab" * 20)


class TestGameMode:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("standard", GameMode.STANDARD),
            ("AGGRESSIVE", GameMode.AGGRESSIVE),
            (" conservative ", GameMode.CONSERVATIVE),
            (GameMode.STANDARD, GameMode.STANDARD),
        ],
    )
    def test_parse(self, raw: str, expected: GameMode) -> None:
        assert GameMode.parse(raw) == expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            GameMode.parse("degen")
        assert "standard" in exc_info.value.context["allowed"]


class TestRiskProfile:
    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            (GameMode.CONSERVATIVE, (10.0, 15.0, 5.0)),
            (GameMode.STANDARD, (15.0, 25.0, 10.0)),
            (GameMode.AGGRESSIVE, (20.0, 35.0, 15.0)),
        ],
    )
    def test_profiles(self, mode: GameMode, expected: tuple[float, float, float]) -> None:
        profile = RiskProfile.for_mode(mode)
        assert (
            profile.stop_loss_percentage,
            profile.take_profit_percentage,
            profile.risk_per_trade,
        ) == expected


class TestSimulationState:
    def test_fresh_state(self) -> None:
        state = SimulationState.fresh(2500, GameMode.CONSERVATIVE, now=NOW)
        assert state.is_active is False
        assert state.current_value == 2500
        assert state.available_balance == 2500
        assert state.win_rate == 0.0
        assert state.trades == ()
        assert state.risk_per_trade == 5.0
        assert state.last_updated == NOW

    def test_fresh_rejects_non_positive_capital(self) -> None:
        with pytest.raises(InvalidParameterError):
            SimulationState.fresh(-1, GameMode.STANDARD, now=NOW)

    def test_position_value(self) -> None:
        position = Position("p1", TOKEN, 1.0, 50.0, 50.0, NOW)
        state = SimulationState(current_position=position)
        assert state.position_value == 50.0
        assert SimulationState().position_value == 0.0

    def test_to_dict(self) -> None:
        position = Position("p1", TOKEN, 1.0, 50.0, 50.0, NOW)
        data = SimulationState(current_position=position, last_traded_token=TOKEN).to_dict()
        assert data["game_mode"] == "standard"
        assert data["current_position"]["token_symbol"] == "BONKAI"  # type: ignore[index]
        assert data["last_traded_token"]["contract_address"] == TOKEN.contract_address  # type: ignore[index]
        assert "trades" not in data


class TestTrade:
    def _trade(self, **overrides: object) -> Trade:
        fields: dict[str, object] = dict(
            trade_id="t1",
            timestamp=NOW,
            type=TradeType.SELL,
            token=TOKEN,
            price=1.1,
            amount=100.0,
            value=110.0,
            profit_loss=10.0,
            profit_loss_percentage=10.0,
            is_win=True,
            tx_hash="0x" + "0" * 64,
        )
        fields.update(overrides)
        return Trade(**fields)  # type: ignore[arg-type]

    def test_valid_trade(self) -> None:
        trade = self._trade()
        data = trade.to_dict()
        assert data["type"] == "sell"
        assert data["token_symbol"] == "BONKAI"
        assert data["timestamp"] == NOW.isoformat()

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            self._trade(trade_id="")

    def test_non_positive_amount_rejected(self) -> None:
        with pytest.raises(ValueError):
            self._trade(amount=0.0)

    def test_position_requires_positive_value(self) -> None:
        with pytest.raises(ValueError):
            Position("p1", TOKEN, 1.0, 0.0, 0.0, NOW)
