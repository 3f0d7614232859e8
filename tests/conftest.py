"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio

import pytest

from minerdeck.engine.base import EngineBackend
from minerdeck.exceptions import (
    ENGINE_CODE_BINARY_MISSING,
    CommandRejectedError,
    EngineUnreachableError,
)
from minerdeck.models.engine import EngineStatus
from minerdeck.session.hint import MemoryHintStore


class FakeEngine(EngineBackend):
    """Scriptable engine: canned query answers, optional failures and gates.

    ``gates[name]`` (an ``asyncio.Event``) holds the named call until set,
    which lets tests control the order in which concurrent calls settle.
    """

    def __init__(
        self,
        running: bool = False,
        algorithm: str | None = None,
        hashrate: float | None = None,
    ) -> None:
        super().__init__()
        self.running = running
        self.algorithm = algorithm
        self.hashrate = hashrate
        self.calls: list[str] = []
        self.fail: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def backend_name(self) -> str:
        return "fake"

    def status(self) -> EngineStatus:
        return EngineStatus(
            backend=self.backend_name,
            running=self.running,
            algorithm=self.algorithm,
            hashrate=self.hashrate,
        )

    async def _call(self, name: str):
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        error = self.fail.get(name)
        if error is not None:
            raise error

    async def _command(self, name: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._call(name)
        finally:
            self.in_flight -= 1

    async def start(self) -> None:
        await self._command("start")
        self.running = True

    async def stop(self) -> None:
        await self._command("stop")
        self.running = False
        self.algorithm = None
        self.hashrate = None

    async def is_running(self) -> bool:
        await self._call("is_running")
        return self.running

    async def get_algorithm(self) -> str | None:
        await self._call("get_algorithm")
        return self.algorithm

    async def get_hashrate(self) -> float | None:
        await self._call("get_hashrate")
        return self.hashrate


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def hints() -> MemoryHintStore:
    return MemoryHintStore()


@pytest.fixture
def rejected() -> CommandRejectedError:
    return CommandRejectedError("Miner binary not found: xmrig", code=ENGINE_CODE_BINARY_MISSING)


@pytest.fixture
def unreachable() -> EngineUnreachableError:
    return EngineUnreachableError("engine unreachable")


@pytest.fixture
def make_engine():
    """Factory for engines with preset query answers."""
    return FakeEngine
