"""In-memory store for historical trading sessions, trades and withdrawals.

Records get serial integer ids. When a journal directory is configured,
every write is also appended as one JSON line, and a new store replays the
existing journal on startup so history and id sequences survive the process::

    <journal_dir>/
    ├── sessions.jsonl      # one line per create / update / end
    ├── trades.jsonl        # one line per recorded trade
    └── withdrawals.jsonl   # one line per create / update

Getters and updaters return ``None`` for unknown ids.
"""

from __future__ import annotations

import dataclasses
import itertools
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.core.constants import DEFAULT_WITHDRAWAL_FEE_SOL, WITHDRAWAL_STATUS_PENDING
from src.core.exceptions import ActiveSessionExistsError
from src.core.logging import get_logger
from src.core.types import GameMode, Trade, TradeType

log = get_logger(__name__)


def _serialize(obj: Any) -> Any:
    """JSON serializer for datetimes and enums."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (GameMode, TradeType)):
        return obj.value
    raise TypeError(f"Type {type(obj)} not serializable")


_DATETIME_FIELDS = ("started_at", "ended_at", "executed_at", "requested_at", "completed_at")


def _deserialize(raw: dict[str, Any]) -> dict[str, Any]:
    """Inverse of :func:`_serialize` for one journaled record."""
    data = dict(raw)
    for key in _DATETIME_FIELDS:
        if data.get(key) is not None:
            data[key] = datetime.fromisoformat(data[key])
    if "game_mode" in data:
        data["game_mode"] = GameMode(data["game_mode"])
    if "type" in data:
        data["type"] = TradeType(data["type"])
    return data


# ── Records ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SessionRecord:
    id: int
    user_id: int
    game_mode: GameMode
    starting_capital: float
    current_value: float
    profit_loss: float = 0.0
    trade_count: int = 0
    win_count: int = 0
    loss_count: int = 0
    is_active: bool = True
    started_at: datetime | None = None
    ended_at: datetime | None = None


@dataclass(frozen=True)
class TradeRecord:
    id: int
    session_id: int
    trade_id: str
    type: TradeType
    token_symbol: str
    token_name: str
    contract_address: str
    price: float
    amount: float
    value: float
    profit_loss: float
    profit_loss_percentage: float
    is_win: bool
    tx_hash: str
    executed_at: datetime

    @classmethod
    def from_trade(cls, record_id: int, session_id: int, trade: Trade) -> TradeRecord:
        return cls(
            id=record_id,
            session_id=session_id,
            trade_id=trade.trade_id,
            type=trade.type,
            token_symbol=trade.token.token_symbol,
            token_name=trade.token.token_name,
            contract_address=trade.token.contract_address,
            price=trade.price,
            amount=trade.amount,
            value=trade.value,
            profit_loss=trade.profit_loss,
            profit_loss_percentage=trade.profit_loss_percentage,
            is_win=trade.is_win,
            tx_hash=trade.tx_hash,
            executed_at=trade.timestamp,
        )


@dataclass(frozen=True)
class WithdrawalRecord:
    id: int
    user_id: int
    session_id: int
    wallet_address: str
    amount: float
    fee: float = DEFAULT_WITHDRAWAL_FEE_SOL
    status: str = WITHDRAWAL_STATUS_PENDING
    tx_signature: str | None = None
    requested_at: datetime | None = None
    completed_at: datetime | None = None


# ── Store ────────────────────────────────────────────────────────


class SessionStore:
    """Session / trade / withdrawal repository.

    Args:
        journal_dir: Directory for JSONL journals. None keeps everything
            in memory only.
        clock: Source of ``started_at`` / ``ended_at`` / ``requested_at``.
    """

    def __init__(
        self,
        journal_dir: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._dir = journal_dir
        if self._dir is not None:
            self._dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sessions: dict[int, SessionRecord] = {}
        self._trades: dict[int, TradeRecord] = {}
        self._withdrawals: dict[int, WithdrawalRecord] = {}
        self._load()
        self._session_ids = itertools.count(max(self._sessions, default=0) + 1)
        self._trade_ids = itertools.count(max(self._trades, default=0) + 1)
        self._withdrawal_ids = itertools.count(max(self._withdrawals, default=0) + 1)

    # ── Sessions ──────────────────────────────────────────────────

    def create_session(
        self,
        user_id: int,
        game_mode: GameMode | str,
        starting_capital: float,
    ) -> SessionRecord:
        """Open a new active session.

        Raises:
            ActiveSessionExistsError: If *user_id* already has an active
                session.
        """
        existing = self.get_active_session(user_id)
        if existing is not None:
            raise ActiveSessionExistsError(
                "User already has an active trading session",
                context={"user_id": user_id, "session_id": existing.id},
            )
        session = SessionRecord(
            id=next(self._session_ids),
            user_id=user_id,
            game_mode=GameMode.parse(game_mode),
            starting_capital=starting_capital,
            current_value=starting_capital,
            started_at=self._clock(),
        )
        self._sessions[session.id] = session
        self._journal("sessions.jsonl", "create", session)
        log.info("session_created", session_id=session.id, user_id=user_id)
        return session

    def get_session(self, session_id: int) -> SessionRecord | None:
        return self._sessions.get(session_id)

    def get_active_session(self, user_id: int) -> SessionRecord | None:
        for session in self._sessions.values():
            if session.user_id == user_id and session.is_active:
                return session
        return None

    def list_sessions(self, user_id: int) -> list[SessionRecord]:
        """All sessions of *user_id*, newest first."""
        sessions = [s for s in self._sessions.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: (s.started_at, s.id), reverse=True)

    def update_session(self, session_id: int, **changes: Any) -> SessionRecord | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        changes.pop("id", None)
        updated = dataclasses.replace(session, **changes)
        self._sessions[session_id] = updated
        self._journal("sessions.jsonl", "update", updated)
        return updated

    def end_session(
        self,
        session_id: int,
        current_value: float,
        profit_loss: float,
    ) -> SessionRecord | None:
        """Mark a session inactive with its final figures."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        ended = dataclasses.replace(
            session,
            current_value=current_value,
            profit_loss=profit_loss,
            is_active=False,
            ended_at=self._clock(),
        )
        self._sessions[session_id] = ended
        self._journal("sessions.jsonl", "end", ended)
        log.info(
            "session_ended",
            session_id=session_id,
            current_value=round(current_value, 4),
            profit_loss=round(profit_loss, 4),
        )
        return ended

    # ── Trades ────────────────────────────────────────────────────

    def create_trade(self, session_id: int, trade: Trade) -> TradeRecord:
        record = TradeRecord.from_trade(next(self._trade_ids), session_id, trade)
        self._trades[record.id] = record
        self._journal("trades.jsonl", "create", record)
        return record

    def list_trades(self, session_id: int) -> list[TradeRecord]:
        """Trades of a session, most recently executed first."""
        trades = [t for t in self._trades.values() if t.session_id == session_id]
        return sorted(trades, key=lambda t: (t.executed_at, t.id), reverse=True)

    # ── Withdrawals ───────────────────────────────────────────────

    def create_withdrawal(
        self,
        user_id: int,
        session_id: int,
        wallet_address: str,
        amount: float,
        fee: float = DEFAULT_WITHDRAWAL_FEE_SOL,
    ) -> WithdrawalRecord:
        if amount <= 0:
            msg = f"Withdrawal amount must be positive, got {amount}"
            raise ValueError(msg)
        if not wallet_address:
            msg = "Withdrawal wallet_address must not be empty"
            raise ValueError(msg)
        withdrawal = WithdrawalRecord(
            id=next(self._withdrawal_ids),
            user_id=user_id,
            session_id=session_id,
            wallet_address=wallet_address,
            amount=amount,
            fee=fee,
            requested_at=self._clock(),
        )
        self._withdrawals[withdrawal.id] = withdrawal
        self._journal("withdrawals.jsonl", "create", withdrawal)
        log.info("withdrawal_requested", withdrawal_id=withdrawal.id, user_id=user_id, amount=amount)
        return withdrawal

    def list_withdrawals(self, user_id: int) -> list[WithdrawalRecord]:
        """Withdrawals of *user_id*, most recently requested first."""
        withdrawals = [w for w in self._withdrawals.values() if w.user_id == user_id]
        return sorted(withdrawals, key=lambda w: (w.requested_at, w.id), reverse=True)

    def update_withdrawal(self, withdrawal_id: int, **changes: Any) -> WithdrawalRecord | None:
        withdrawal = self._withdrawals.get(withdrawal_id)
        if withdrawal is None:
            return None
        changes.pop("id", None)
        updated = dataclasses.replace(withdrawal, **changes)
        self._withdrawals[withdrawal_id] = updated
        self._journal("withdrawals.jsonl", "update", updated)
        return updated

    # ── Journal ───────────────────────────────────────────────────

    def read_journal(self, filename: str) -> list[dict[str, Any]]:
        """Read all JSON lines from a journal file."""
        if self._dir is None:
            return []
        path = self._dir / filename
        if not path.exists():
            return []
        records: list[dict[str, Any]] = []
        with path.open(encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        log.warning("journal_line_skipped", file=filename)
        return records

    def _load(self) -> None:
        """Rebuild the in-memory records from the journal, latest entry wins."""
        sources: tuple[tuple[str, type, dict[int, Any]], ...] = (
            ("sessions.jsonl", SessionRecord, self._sessions),
            ("trades.jsonl", TradeRecord, self._trades),
            ("withdrawals.jsonl", WithdrawalRecord, self._withdrawals),
        )
        for filename, record_cls, target in sources:
            for entry in self.read_journal(filename):
                record = record_cls(**_deserialize(entry["record"]))
                target[record.id] = record
        if self._sessions or self._trades or self._withdrawals:
            log.info(
                "journal_replayed",
                sessions=len(self._sessions),
                trades=len(self._trades),
                withdrawals=len(self._withdrawals),
            )

    def _journal(self, filename: str, op: str, record: object) -> None:
        if self._dir is None:
            return
        entry = {"op": op, "record": dataclasses.asdict(record)}  # type: ignore[call-overload]
        path = self._dir / filename
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry, default=_serialize) + "\n")
