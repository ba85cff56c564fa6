"""System-wide constants. All magic numbers and strings live here."""

from __future__ import annotations

# ── Game Mode IDs ────────────────────────────────────────────────
MODE_STANDARD = "standard"
MODE_AGGRESSIVE = "aggressive"
MODE_CONSERVATIVE = "conservative"

# ── Risk Parameters (percent) ────────────────────────────────────
# mode -> (stop_loss, take_profit, risk_per_trade)
RISK_PARAMETERS: dict[str, tuple[float, float, float]] = {
    MODE_CONSERVATIVE: (10.0, 15.0, 5.0),
    MODE_STANDARD: (15.0, 25.0, 10.0),
    MODE_AGGRESSIVE: (20.0, 35.0, 15.0),
}

# ── Session Defaults ─────────────────────────────────────────────
DEFAULT_STARTING_CAPITAL = 1000.0
ENTRY_PRICE = 1.0                   # Normalized baseline, moves are percentages

# ── Scheduling (milliseconds) ────────────────────────────────────
TICK_INTERVAL_MS = 8000
HOLD_MIN_MS = 3000
HOLD_MAX_MS = 8000
REOPEN_MIN_MS = 1000
REOPEN_MAX_MS = 3000

# ── Outcome Model ────────────────────────────────────────────────
WIN_PROBABILITY = 0.6
VOLATILITY_MIN_PCT = 5.0
VOLATILITY_MAX_PCT = 25.0

# ── Synthetic Token Names ────────────────────────────────────────
TOKEN_PREFIXES: tuple[str, ...] = (
    "SOL", "MOON", "PEPE", "DOGE", "BONK", "SAMO", "WIF", "FROG",
    "CAT", "APE", "SHIB", "ROCKET", "PUMP", "GIGA", "CHAD", "MEME",
)
TOKEN_SUFFIXES: tuple[str, ...] = (
    "INU", "AI", "X", "FI", "SWAP", "COIN", "GOLD", "MAX",
    "PAD", "DAO", "BOT", "CHAIN", "VERSE", "PRO", "KING", "LORD",
)
CONTRACT_ADDRESS_HEX_DIGITS = 40
TX_HASH_HEX_DIGITS = 64

# ── Session Store ────────────────────────────────────────────────
WITHDRAWAL_STATUS_PENDING = "pending"
WITHDRAWAL_STATUS_COMPLETED = "completed"
DEFAULT_WITHDRAWAL_FEE_SOL = 0.5
