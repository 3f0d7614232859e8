"""Simulated engine backend for demos and machines without a miner binary."""

from __future__ import annotations

import asyncio
import random
import time

from minerdeck.engine.base import EngineBackend
from minerdeck.engine.events import EventBus
from minerdeck.exceptions import ENGINE_CODE_ALREADY_RUNNING, CommandRejectedError
from minerdeck.models.engine import EngineStatus, EventChannel
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)


class SimulatedEngine(EngineBackend):
    """Publishes synthetic hashrate events on a fixed interval.

    The first rate event is delayed by ``warmup`` seconds so the dashboard's
    warm-up state is observable.
    """

    def __init__(
        self,
        events: EventBus | None = None,
        interval: float = 1.0,
        warmup: float = 2.0,
        algorithm: str = "rx/0",
        base_hashrate: float = 520.0,
        seed: int | None = None,
    ) -> None:
        super().__init__(events)
        self._interval = interval
        self._warmup = warmup
        self._algorithm_label = algorithm
        self._base_hashrate = base_hashrate
        self._rng = random.Random(seed)
        self._task: asyncio.Task | None = None
        self._algorithm: str | None = None
        self._hashrate: float | None = None
        self._start_time = 0.0

    @property
    def backend_name(self) -> str:
        return "simulated"

    def _alive(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._alive():
            raise CommandRejectedError("Miner is already running", code=ENGINE_CODE_ALREADY_RUNNING)
        logger.info("simulated_start", interval=self._interval, warmup=self._warmup)
        self._start_time = time.monotonic()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task = self._task
        self._task = None
        self._algorithm = None
        self._hashrate = None
        if task is None or task.done():
            return
        logger.info("simulated_stop")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def is_running(self) -> bool:
        return self._alive()

    async def get_algorithm(self) -> str | None:
        return self._algorithm

    async def get_hashrate(self) -> float | None:
        return self._hashrate

    def status(self) -> EngineStatus:
        alive = self._alive()
        return EngineStatus(
            backend=self.backend_name,
            running=alive,
            algorithm=self._algorithm,
            hashrate=self._hashrate,
            uptime_seconds=time.monotonic() - self._start_time if alive else 0.0,
        )

    async def shutdown(self) -> None:
        await self.stop()

    def _sample(self) -> float:
        jitter = self._rng.uniform(-0.05, 0.05) * self._base_hashrate
        return round(max(0.0, self._base_hashrate + jitter), 1)

    async def _run(self) -> None:
        await asyncio.sleep(self._warmup)
        self._algorithm = self._algorithm_label
        self.events.publish(EventChannel.ALGORITHM, self._algorithm_label)
        while True:
            self._hashrate = self._sample()
            self.events.publish(EventChannel.RATE, self._hashrate)
            await asyncio.sleep(self._interval)
