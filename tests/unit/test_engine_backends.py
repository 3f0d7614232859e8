"""Unit tests for the simulated and subprocess engine backends."""

from __future__ import annotations

import asyncio
import stat
import sys
from unittest.mock import AsyncMock, patch

import pytest

from minerdeck.config import BackendChoice, Settings
from minerdeck.engine import available_backends, create_engine
from minerdeck.engine.process import MinerProcess
from minerdeck.engine.simulated import SimulatedEngine
from minerdeck.exceptions import (
    ENGINE_CODE_ALREADY_RUNNING,
    ENGINE_CODE_BINARY_MISSING,
    ENGINE_CODE_LAUNCH_FAILED,
    CommandRejectedError,
)
from minerdeck.models.engine import EventChannel

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")


def _fake_miner(tmp_path, body: str):
    script = tmp_path / "fake-miner"
    script.write_text("#!/bin/sh\n" + body)
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return str(script)


async def _wait_for(predicate, timeout: float = 5.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(poll(), timeout)


class TestSimulatedEngine:
    def test_publishes_algorithm_then_rates(self):
        engine = SimulatedEngine(interval=0.01, warmup=0.0, seed=1)
        seen = []
        engine.events.subscribe(EventChannel.ALGORITHM, lambda p: seen.append(("algo", p)))
        engine.events.subscribe(EventChannel.RATE, lambda p: seen.append(("rate", p)))

        async def scenario():
            await engine.start()
            await _wait_for(lambda: len(seen) >= 3)
            running = await engine.is_running()
            hashrate = await engine.get_hashrate()
            await engine.stop()
            return running, hashrate

        running, hashrate = asyncio.run(scenario())

        assert running is True
        assert seen[0] == ("algo", "rx/0")
        assert all(kind == "rate" for kind, _ in seen[1:])
        assert hashrate is not None and hashrate > 0

    def test_no_metrics_during_warmup(self):
        engine = SimulatedEngine(interval=0.01, warmup=10.0)

        async def scenario():
            await engine.start()
            values = (await engine.get_algorithm(), await engine.get_hashrate())
            await engine.stop()
            return values

        assert asyncio.run(scenario()) == (None, None)

    def test_double_start_rejected(self):
        engine = SimulatedEngine(warmup=10.0)

        async def scenario():
            await engine.start()
            try:
                with pytest.raises(CommandRejectedError) as excinfo:
                    await engine.start()
            finally:
                await engine.stop()
            return excinfo.value

        assert asyncio.run(scenario()).code == ENGINE_CODE_ALREADY_RUNNING

    def test_stop_clears_state(self):
        engine = SimulatedEngine(interval=0.01, warmup=0.0)

        async def scenario():
            await engine.start()
            await asyncio.sleep(0.05)
            await engine.stop()
            await engine.stop()
            return await engine.is_running(), await engine.get_hashrate(), engine.status()

        running, hashrate, status = asyncio.run(scenario())

        assert running is False
        assert hashrate is None
        assert status.running is False
        assert status.uptime_seconds == 0.0


class TestMinerProcess:
    def test_missing_binary_rejected(self):
        engine = MinerProcess("definitely-not-a-miner-binary")

        with pytest.raises(CommandRejectedError) as excinfo:
            asyncio.run(engine.start())

        assert excinfo.value.code == ENGINE_CODE_BINARY_MISSING
        assert engine.status().last_error is not None

    @patch("minerdeck.engine.process.shutil.which", return_value="/usr/bin/xmrig")
    @patch(
        "minerdeck.engine.process.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        side_effect=PermissionError("not executable"),
    )
    def test_launch_failure_rejected(self, mock_exec, _mock_which):
        engine = MinerProcess("xmrig", ["--donate-level", "1"])

        with pytest.raises(CommandRejectedError) as excinfo:
            asyncio.run(engine.start())

        assert excinfo.value.code == ENGINE_CODE_LAUNCH_FAILED
        assert mock_exec.call_args.args == ("/usr/bin/xmrig", "--donate-level", "1")
        assert asyncio.run(engine.is_running()) is False

    def test_stop_when_not_running_is_noop(self):
        engine = MinerProcess("xmrig")
        asyncio.run(engine.stop())
        assert engine.status().running is False

    @posix_only
    def test_output_becomes_events(self, tmp_path):
        miner = _fake_miner(
            tmp_path,
            'echo "net new job from pool:3333 diff 1 algo rx/0 height 1"\n'
            'echo "miner speed 10s/60s/15m 523.4 n/a n/a H/s max 523.4 H/s"\n'
            "exec sleep 30\n",
        )
        engine = MinerProcess(miner, stop_timeout=2.0)
        seen = []
        engine.events.subscribe(EventChannel.ALGORITHM, lambda p: seen.append(("algo", p)))
        engine.events.subscribe(EventChannel.RATE, lambda p: seen.append(("rate", p)))

        async def scenario():
            await engine.start()
            try:
                await _wait_for(lambda: len(seen) >= 2)
                snapshot = (
                    await engine.is_running(),
                    await engine.get_algorithm(),
                    await engine.get_hashrate(),
                )
            finally:
                await engine.stop()
            return snapshot, await engine.is_running()

        (running, algorithm, hashrate), after = asyncio.run(scenario())

        assert seen == [("algo", "rx/0"), ("rate", 523.4)]
        assert running is True
        assert algorithm == "rx/0"
        assert hashrate == 523.4
        assert after is False
        assert engine.status().last_error is None

    @posix_only
    def test_double_start_rejected(self, tmp_path):
        engine = MinerProcess(_fake_miner(tmp_path, "exec sleep 30\n"), stop_timeout=2.0)

        async def scenario():
            await engine.start()
            try:
                with pytest.raises(CommandRejectedError) as excinfo:
                    await engine.start()
            finally:
                await engine.shutdown()
            return excinfo.value

        assert asyncio.run(scenario()).code == ENGINE_CODE_ALREADY_RUNNING

    @posix_only
    def test_unexpected_exit_recorded(self, tmp_path):
        engine = MinerProcess(_fake_miner(tmp_path, "exit 3\n"))

        async def scenario():
            await engine.start()
            await _wait_for(lambda: engine._reader.done())
            return await engine.is_running()

        assert asyncio.run(scenario()) is False
        assert engine.status().last_error == "Miner exited with code 3"


class TestBackendSelection:
    def test_auto_falls_back_to_simulated(self):
        settings = Settings(miner_path="definitely-not-a-miner-binary")
        assert create_engine(settings).backend_name == "simulated"
        assert available_backends(settings) == ["simulated"]

    def test_explicit_process(self):
        settings = Settings(backend=BackendChoice.PROCESS, miner_path="definitely-not-a-miner-binary")
        assert create_engine(settings).backend_name == "process"

    @posix_only
    def test_auto_prefers_installed_binary(self, tmp_path):
        settings = Settings(miner_path=_fake_miner(tmp_path, "exit 0\n"))
        assert create_engine(settings).backend_name == "process"
        assert available_backends(settings) == ["process", "simulated"]
