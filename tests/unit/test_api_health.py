"""Tests for health check route."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.simulator.scheduler import VirtualScheduler
from src.simulator.trading_engine import TradingSimulator


@pytest.fixture()
def client() -> TestClient:
    """Create a test client backed by a virtual-clock simulator."""
    app = create_app(simulator=TradingSimulator(VirtualScheduler()))
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "0.1.0"

    def test_health_env(self, client: TestClient) -> None:
        response = client.get("/api/health")
        data = response.json()
        assert data["environment"] in ("dev", "prod")
