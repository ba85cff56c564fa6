"""SOLSIM global settings — loaded from environment variables via .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.constants import (
    DEFAULT_STARTING_CAPITAL,
    HOLD_MAX_MS,
    HOLD_MIN_MS,
    MODE_STANDARD,
    REOPEN_MAX_MS,
    REOPEN_MIN_MS,
    TICK_INTERVAL_MS,
    VOLATILITY_MAX_PCT,
    VOLATILITY_MIN_PCT,
    WIN_PROBABILITY,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """All configuration flows through this class. Never read env vars directly."""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        env_prefix="SOLSIM_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    env: Literal["dev", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = True

    # ── Session Defaults ─────────────────────────────────────────
    default_starting_capital: float = DEFAULT_STARTING_CAPITAL
    default_game_mode: Literal["standard", "aggressive", "conservative"] = MODE_STANDARD

    # ── Scheduling (milliseconds) ────────────────────────────────
    tick_interval_ms: int = TICK_INTERVAL_MS
    hold_min_ms: int = HOLD_MIN_MS
    hold_max_ms: int = HOLD_MAX_MS
    reopen_min_ms: int = REOPEN_MIN_MS
    reopen_max_ms: int = REOPEN_MAX_MS

    # ── Outcome Model ────────────────────────────────────────────
    win_probability: float = WIN_PROBABILITY
    volatility_min_pct: float = VOLATILITY_MIN_PCT
    volatility_max_pct: float = VOLATILITY_MAX_PCT
    random_seed: int | None = None

    # ── Persistence ──────────────────────────────────────────────
    journal_dir: Path | None = None

    # ── Frontend ─────────────────────────────────────────────────
    frontend_url: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        """Reject inverted timing/volatility ranges and impossible probabilities."""
        if not 0.0 <= self.win_probability <= 1.0:
            msg = f"win_probability must be within [0, 1], got {self.win_probability}"
            raise ValueError(msg)
        if self.tick_interval_ms <= 0:
            msg = f"tick_interval_ms must be positive, got {self.tick_interval_ms}"
            raise ValueError(msg)
        for low_name, high_name in (
            ("hold_min_ms", "hold_max_ms"),
            ("reopen_min_ms", "reopen_max_ms"),
            ("volatility_min_pct", "volatility_max_pct"),
        ):
            low, high = getattr(self, low_name), getattr(self, high_name)
            if low < 0 or high < low:
                msg = f"{low_name}/{high_name} must satisfy 0 <= min <= max, got {low}/{high}"
                raise ValueError(msg)
        if self.default_starting_capital <= 0:
            msg = "default_starting_capital must be positive"
            raise ValueError(msg)
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Singleton settings loader — reads .env once, reuses thereafter."""
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
