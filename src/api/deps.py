"""FastAPI dependency injection — shared instances for routes."""

from __future__ import annotations

from fastapi import Request

from src.simulator.trading_engine import TradingSimulator


def get_simulator(request: Request) -> TradingSimulator:
    """Provide the simulator owned by the application."""
    return request.app.state.simulator
