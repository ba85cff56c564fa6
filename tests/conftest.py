"""Pytest configuration and shared fixtures.

Async tests marked with ``@pytest.mark.asyncio`` run through a local
fallback hook when ``pytest-asyncio`` is not installed.
"""

from __future__ import annotations

import asyncio
import inspect
import random
from collections.abc import Iterable
from typing import Any

import pytest

from config.settings import Settings
from src.simulator.scheduler import VirtualScheduler
from src.simulator.trading_engine import TradingSimulator


def pytest_configure(config: pytest.Config) -> None:
    """Register local markers used in the suite."""
    config.addinivalue_line("markers", "asyncio: mark test as asyncio-compatible")


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run ``@pytest.mark.asyncio`` tests without external plugins."""
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    kwargs: dict[str, Any] = {
        arg: pyfuncitem.funcargs[arg]
        for arg in pyfuncitem._fixtureinfo.argnames
    }
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_func(**kwargs))
    finally:
        loop.close()
        asyncio.set_event_loop(asyncio.new_event_loop())
    return True


# ── Helpers ──────────────────────────────────────────────────────


class ScriptedRandom(random.Random):
    """Random source with scripted trade outcomes.

    Each entry of *outcomes* is a signed percentage: ``+10`` forces a win
    with 10 % volatility, ``-5`` a loss with 5 %. Hold and reopen delays
    return the lower bound of their range. Once the script is exhausted
    the seeded generator takes over.
    """

    def __init__(self, outcomes: Iterable[float] = (), seed: int = 7) -> None:
        super().__init__(seed)
        self._outcomes = list(outcomes)
        self._pending_volatility: float | None = None

    def random(self) -> float:
        if self._outcomes:
            move = self._outcomes.pop(0)
            self._pending_volatility = abs(move)
            return 0.0 if move > 0 else 0.999
        return super().random()

    def getrandbits(self, k: int) -> int:
        # Defined so choice() keeps drawing from bits, not from random().
        return super().getrandbits(k)

    def uniform(self, a: float, b: float) -> float:
        if self._pending_volatility is not None:
            value, self._pending_volatility = self._pending_volatility, None
            return value
        if a >= 1000:
            return a
        return super().uniform(a, b)


# ── Fixtures ─────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, random_seed=1234, log_json=False)


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def simulator(scheduler: VirtualScheduler, settings: Settings) -> TradingSimulator:
    return TradingSimulator(scheduler, rng=random.Random(1234), settings=settings)


@pytest.fixture
def scripted_random() -> type[ScriptedRandom]:
    return ScriptedRandom
