"""SOLSIM session runner — fast-forwards the trading bot on a virtual clock.

Usage:
    python scripts/run_simulation.py
    python scripts/run_simulation.py --mode aggressive --capital 5000 --trades 200
    python scripts/run_simulation.py --seed 42 --console-logs
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import get_settings
from src.core.exceptions import InvalidParameterError
from src.core.logging import get_logger, setup_logging
from src.core.types import GameMode
from src.simulator.runner import run_virtual_session


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run a simulated auto-trading session")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GameMode],
        default=settings.default_game_mode,
        help="Risk profile (default: %(default)s)",
    )
    parser.add_argument(
        "--capital",
        type=float,
        default=settings.default_starting_capital,
        help="Starting capital (default: %(default)s)",
    )
    parser.add_argument(
        "--trades",
        type=int,
        default=50,
        help="Number of closed trades to simulate (default: %(default)s)",
    )
    parser.add_argument("--seed", type=int, default=settings.random_seed, help="Random seed")
    parser.add_argument(
        "--console-logs",
        action="store_true",
        help="Human-readable logs instead of JSON lines",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, json_output=not args.console_logs and settings.log_json)
    log = get_logger("run_simulation")

    try:
        summary = run_virtual_session(
            game_mode=args.mode,
            starting_capital=args.capital,
            trade_target=args.trades,
            seed=args.seed,
            settings=settings,
        )
    except (InvalidParameterError, ValueError) as exc:
        log.error("run_failed", error=str(exc))
        return 2

    stats = summary.statistics
    metrics = summary.metrics
    report = {
        "game_mode": summary.state.game_mode.value,
        "starting_capital": summary.state.starting_capital,
        "final_value": round(summary.state.current_value, 4),
        "profit_loss": round(stats.profit_loss, 4),
        "profit_loss_percentage": round(stats.profit_loss_percentage, 4),
        "trades": stats.trade_count,
        "wins": stats.win_count,
        "losses": stats.loss_count,
        "win_rate": round(stats.win_rate, 2),
        "avg_win_pct": round(stats.avg_win_amount, 4),
        "avg_loss_pct": round(stats.avg_loss_amount, 4),
        "best_trade_pct": round(stats.best_trade, 4),
        "worst_trade_pct": round(stats.worst_trade, 4),
        "max_drawdown_pct": metrics.max_drawdown_pct,
        "profit_factor": metrics.profit_factor,
        "virtual_minutes": round(summary.elapsed_ms / 60_000, 2),
    }
    print(json.dumps(report, indent=2))
    return 0 if summary.reached_target else 1


if __name__ == "__main__":
    sys.exit(main())
