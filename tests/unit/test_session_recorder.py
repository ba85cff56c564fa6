"""Tests for the session recorder subscriber."""

from __future__ import annotations

import random

import pytest

from config.settings import Settings
from src.analytics.session_store import SessionStore
from src.simulator.scheduler import VirtualScheduler
from src.simulator.session_recorder import SessionRecorder
from src.simulator.trading_engine import TradingSimulator


@pytest.fixture
def session_store(scheduler: VirtualScheduler) -> SessionStore:
    return SessionStore(clock=scheduler.now)


@pytest.fixture
def recorder(session_store: SessionStore, simulator: TradingSimulator) -> SessionRecorder:
    rec = SessionRecorder(session_store, user_id=1)
    rec.attach(simulator)
    return rec


class TestSessionRecorder:
    def test_idle_simulator_opens_no_session(
        self, recorder: SessionRecorder, session_store: SessionStore,
    ) -> None:
        assert recorder.session_id is None
        assert session_store.list_sessions(1) == []

    def test_start_opens_session(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
    ) -> None:
        simulator.start("aggressive", 1000)

        session = session_store.get_active_session(1)
        assert session is not None
        assert session.id == recorder.session_id
        assert session.starting_capital == 1000
        assert session.game_mode.value == "aggressive"

    def test_full_cycle_is_persisted(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
        scheduler: VirtualScheduler,
    ) -> None:
        simulator.start("standard", 1000)
        scheduler.advance(5 * 60_000)
        simulator.stop()

        state = simulator.get_state()
        sessions = session_store.list_sessions(1)
        assert len(sessions) == 1
        session = sessions[0]
        assert session.is_active is False
        assert session.trade_count == state.trade_count
        assert session.win_count == state.win_count
        assert session.loss_count == state.loss_count
        assert abs(session.current_value - state.current_value) < 1e-9
        assert abs(session.profit_loss - state.profit_loss) < 1e-9
        assert len(session_store.list_trades(session.id)) == state.trade_count
        assert recorder.session_id is None

    def test_resumed_run_records_only_new_trades(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
    ) -> None:
        simulator.start("standard", 1000)
        simulator.stop()
        simulator.start("standard", 1000)
        simulator.stop()

        sessions = session_store.list_sessions(1)
        assert len(sessions) == 2
        assert [len(session_store.list_trades(s.id)) for s in sessions] == [1, 1]
        assert sessions[0].starting_capital == sessions[1].current_value

    def test_detach_stops_recording(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
    ) -> None:
        recorder.detach()
        simulator.start("standard", 1000)
        assert session_store.list_sessions(1) == []

    def test_conflicting_session_does_not_break_engine(
        self, scheduler: VirtualScheduler, settings: Settings,
    ) -> None:
        store = SessionStore(clock=scheduler.now)
        store.create_session(1, "standard", 1000)
        sim = TradingSimulator(scheduler, rng=random.Random(3), settings=settings)
        SessionRecorder(store, user_id=1).attach(sim)

        sim.start("standard", 1000)

        assert sim.get_state().current_position is not None
        assert len(store.list_sessions(1)) == 1


class TestResetDuringRun:
    def test_reset_ends_session_with_pre_reset_figures(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
    ) -> None:
        simulator.reset(1000, "standard")
        simulator.start("standard", 1000)
        simulator.reset(5000, "aggressive")

        sessions = session_store.list_sessions(1)
        assert len(sessions) == 1
        session = sessions[0]
        assert session.is_active is False
        assert session.trade_count == 0
        assert session.current_value == 1000
        assert session.profit_loss == 0.0
        assert recorder.session_id is None

    def test_reset_after_trades_keeps_last_seen_value(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
        scheduler: VirtualScheduler,
    ) -> None:
        simulator.start("standard", 1000)
        scheduler.advance(2 * 60_000)
        before = simulator.get_state()
        assert before.trade_count > 0

        simulator.reset(1000, "standard")

        session = session_store.list_sessions(1)[0]
        assert session.is_active is False
        assert session.trade_count == before.trade_count
        assert abs(session.current_value - before.current_value) < 1e-9
        assert abs(session.profit_loss - (before.current_value - 1000)) < 1e-9

    def test_next_run_after_reset_gets_fresh_session(
        self,
        recorder: SessionRecorder,
        session_store: SessionStore,
        simulator: TradingSimulator,
    ) -> None:
        simulator.start("standard", 1000)
        simulator.reset(1000, "standard")
        simulator.start("conservative", 1000)
        simulator.stop()

        newest, oldest = session_store.list_sessions(1)
        assert oldest.trade_count == 0
        assert oldest.current_value == 1000
        assert newest.trade_count == 1
        assert len(session_store.list_trades(newest.id)) == 1
        assert len(session_store.list_trades(oldest.id)) == 0
