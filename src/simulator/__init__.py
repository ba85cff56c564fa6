"""Simulated auto-trading engine — state store, position driver and statistics."""

from src.simulator.scheduler import AsyncioScheduler, VirtualScheduler
from src.simulator.session_recorder import SessionRecorder
from src.simulator.state_store import TradingStateStore
from src.simulator.statistics import TradeStatistics, compute_statistics, equity_curve
from src.simulator.trading_engine import TradingSimulator

__all__ = [
    "AsyncioScheduler",
    "SessionRecorder",
    "TradeStatistics",
    "TradingSimulator",
    "TradingStateStore",
    "VirtualScheduler",
    "compute_statistics",
    "equity_curve",
]
