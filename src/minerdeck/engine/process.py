"""Miner subprocess backend."""

from __future__ import annotations

import asyncio
import shutil
import time

from minerdeck.engine.base import EngineBackend
from minerdeck.engine.events import EventBus
from minerdeck.engine.output_parser import parse_line
from minerdeck.exceptions import (
    ENGINE_CODE_ALREADY_RUNNING,
    ENGINE_CODE_BINARY_MISSING,
    ENGINE_CODE_LAUNCH_FAILED,
    CommandRejectedError,
)
from minerdeck.models.engine import EngineStatus, EventChannel
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_STOP_TIMEOUT_SECONDS = 5.0


class MinerProcess(EngineBackend):
    """Runs an external miner binary and turns its console output into events.

    One miner process at a time. The stdout reader task publishes a ``rate``
    event for every speed line and an ``algorithm`` event whenever the
    reported algorithm changes.
    """

    def __init__(
        self,
        miner_path: str,
        miner_args: list[str] | None = None,
        events: EventBus | None = None,
        stop_timeout: float = _DEFAULT_STOP_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(events)
        self._miner_path = miner_path
        self._miner_args = list(miner_args or [])
        self._stop_timeout = stop_timeout
        self._process: asyncio.subprocess.Process | None = None
        self._reader: asyncio.Task | None = None
        self._algorithm: str | None = None
        self._hashrate: float | None = None
        self._start_time = 0.0
        self._last_error: str | None = None
        self._stopping = False

    @property
    def backend_name(self) -> str:
        return "process"

    @property
    def command(self) -> list[str]:
        return [self._miner_path, *self._miner_args]

    def _alive(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        if self._alive():
            raise CommandRejectedError("Miner is already running", code=ENGINE_CODE_ALREADY_RUNNING)

        executable = shutil.which(self._miner_path)
        if executable is None:
            self._last_error = f"Miner binary not found: {self._miner_path}"
            raise CommandRejectedError(self._last_error, code=ENGINE_CODE_BINARY_MISSING)

        logger.info("miner_start", cmd=" ".join(self.command))
        try:
            self._process = await asyncio.create_subprocess_exec(
                executable,
                *self._miner_args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            self._last_error = f"Failed to launch miner: {exc}"
            raise CommandRejectedError(self._last_error, code=ENGINE_CODE_LAUNCH_FAILED) from exc

        self._algorithm = None
        self._hashrate = None
        self._last_error = None
        self._start_time = time.monotonic()
        self._reader = asyncio.create_task(self._read_output(self._process))

    async def stop(self) -> None:
        proc = self._process
        if proc is None or proc.returncode is not None:
            logger.info("miner_stop_not_running")
            self._clear()
            return

        logger.info("miner_stop", pid=proc.pid)
        self._stopping = True
        try:
            proc.terminate()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._stop_timeout)
        except asyncio.TimeoutError:
            logger.warning("miner_kill", pid=proc.pid)
            proc.kill()
            await proc.wait()

        if self._reader is not None:
            await self._reader
        self._clear()

    async def is_running(self) -> bool:
        return self._alive()

    async def get_algorithm(self) -> str | None:
        return self._algorithm if self._alive() else None

    async def get_hashrate(self) -> float | None:
        return self._hashrate if self._alive() else None

    def status(self) -> EngineStatus:
        alive = self._alive()
        return EngineStatus(
            backend=self.backend_name,
            running=alive,
            pid=self._process.pid if alive else None,
            algorithm=self._algorithm if alive else None,
            hashrate=self._hashrate if alive else None,
            uptime_seconds=time.monotonic() - self._start_time if alive else 0.0,
            last_error=self._last_error,
        )

    async def shutdown(self) -> None:
        try:
            await self.stop()
        except Exception:
            logger.warning("miner_shutdown_error", exc_info=True)

    # --- internal ---

    def _clear(self) -> None:
        self._stopping = False
        self._process = None
        self._reader = None
        self._algorithm = None
        self._hashrate = None

    async def _read_output(self, proc: asyncio.subprocess.Process) -> None:
        """Background task: parse miner output until the pipe closes."""
        assert proc.stdout is not None
        while True:
            raw = await proc.stdout.readline()
            if not raw:
                break
            parsed = parse_line(raw.decode(errors="replace"))
            if parsed.algorithm is not None and parsed.algorithm != self._algorithm:
                self._algorithm = parsed.algorithm
                self.events.publish(EventChannel.ALGORITHM, parsed.algorithm)
            if parsed.hashrate is not None:
                self._hashrate = parsed.hashrate
                self.events.publish(EventChannel.RATE, parsed.hashrate)

        returncode = await proc.wait()
        if returncode != 0 and not self._stopping:
            self._last_error = f"Miner exited with code {returncode}"
            logger.warning("miner_exited", returncode=returncode)
