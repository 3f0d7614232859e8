"""Tests for the /api/mining endpoints."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from minerdeck.api import app as app_module
from minerdeck.api.app import create_app
from minerdeck.api.routes import mining
from minerdeck.config import Settings
from minerdeck.engine.simulated import SimulatedEngine
from minerdeck.models.engine import EventChannel


@pytest.fixture(autouse=True)
def _reset_engine():
    yield
    app_module.set_engine(None)


def _client(engine) -> TestClient:
    return TestClient(create_app(enable_ui=False, settings=Settings(), engine=engine))


class TestCommands:
    def test_start_then_stop(self):
        engine = SimulatedEngine(interval=0.01, warmup=10.0)
        with _client(engine) as client:
            resp = client.post("/api/mining/start")
            assert resp.status_code == 200
            assert resp.json() == {"status": "started"}
            assert client.get("/api/mining/running").json() == {"running": True}

            resp = client.post("/api/mining/stop")
            assert resp.status_code == 200
            assert resp.json() == {"status": "stopped"}
            assert client.get("/api/mining/running").json() == {"running": False}

    def test_double_start_conflicts(self):
        engine = SimulatedEngine(warmup=10.0)
        with _client(engine) as client:
            client.post("/api/mining/start")
            resp = client.post("/api/mining/start")
            assert resp.status_code == 409
            assert "already running" in resp.json()["detail"]

    def test_stop_rejected_conflicts(self, make_engine, rejected):
        engine = make_engine(running=True)
        engine.fail["stop"] = rejected
        with _client(engine) as client:
            assert client.post("/api/mining/stop").status_code == 409

    def test_shutdown_stops_engine(self):
        engine = SimulatedEngine(warmup=10.0)
        with _client(engine) as client:
            client.post("/api/mining/start")
            assert engine.status().running is True
        assert engine.status().running is False


class TestQueries:
    def test_metrics_absent_while_idle(self):
        with _client(SimulatedEngine()) as client:
            assert client.get("/api/mining/algorithm").json() == {"algorithm": None}
            assert client.get("/api/mining/hashrate").json() == {"hashrate": None}

    def test_metrics_from_engine(self, make_engine):
        engine = make_engine(running=True, algorithm="rx/0", hashrate=523.4)
        with _client(engine) as client:
            assert client.get("/api/mining/algorithm").json() == {"algorithm": "rx/0"}
            assert client.get("/api/mining/hashrate").json() == {"hashrate": 523.4}

    def test_unreachable_engine_is_503(self, make_engine, unreachable):
        engine = make_engine()
        engine.fail["is_running"] = unreachable
        with _client(engine) as client:
            resp = client.get("/api/mining/running")
            assert resp.status_code == 503

    def test_status_snapshot(self):
        with _client(SimulatedEngine()) as client:
            data = client.get("/api/mining/status").json()
            assert data["backend"] == "simulated"
            assert data["running"] is False
            assert data["pid"] is None


class TestStream:
    def test_stream_delivers_engine_events(self):
        engine = SimulatedEngine(interval=0.01, warmup=0.3, seed=7)
        with _client(engine) as client:
            with client.websocket_connect("/api/mining/stream") as ws:
                client.post("/api/mining/start")
                first = ws.receive_json()
                second = ws.receive_json()

        assert first == {"channel": "algorithm", "payload": "rx/0"}
        assert second["channel"] == "rate"
        assert second["payload"] > 0

    def test_closed_stream_releases_subscriptions(self):
        engine = SimulatedEngine()
        with _client(engine) as client:
            for _ in range(3):
                with client.websocket_connect("/api/mining/stream"):
                    pass
            assert engine.events.listener_count(EventChannel.RATE) == 0
            assert engine.events.listener_count(EventChannel.ALGORITHM) == 0

    def test_idle_stream_ends_on_client_disconnect(self):
        # The server reports the disconnect through receive() and never
        # cancels the handler, so the handler must return on its own.
        engine = SimulatedEngine()
        app_module.set_engine(engine)
        socket = _DisconnectingSocket()

        asyncio.run(asyncio.wait_for(mining.mining_stream(socket), timeout=2.0))

        assert socket.accepted is True
        assert socket.sent == []
        assert engine.events.listener_count(EventChannel.RATE) == 0
        assert engine.events.listener_count(EventChannel.ALGORITHM) == 0


class _DisconnectingSocket:
    """Minimal WebSocket stand-in whose client leaves without sending."""

    def __init__(self) -> None:
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def receive(self) -> dict:
        await asyncio.sleep(0.01)
        return {"type": "websocket.disconnect", "code": 1001}

    async def send_json(self, data: dict) -> None:
        self.sent.append(data)
