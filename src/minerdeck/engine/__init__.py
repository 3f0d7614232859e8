"""Mining engine backends.

Probes for the miner binary at runtime and falls back to the simulated
backend when ``auto`` is requested and no binary is installed.
"""

from __future__ import annotations

import shutil

from minerdeck.config import BackendChoice, Settings
from minerdeck.engine.base import CommandGateway, EngineBackend
from minerdeck.engine.events import EventBus, Subscription
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "CommandGateway",
    "EngineBackend",
    "EventBus",
    "Subscription",
    "available_backends",
    "create_engine",
    "is_miner_available",
]


def is_miner_available(miner_path: str) -> bool:
    """Check whether the miner executable resolves on PATH (or as a path)."""
    return shutil.which(miner_path) is not None


def available_backends(settings: Settings) -> list[str]:
    """Return names of all usable backends."""
    backends: list[str] = []
    if is_miner_available(settings.miner_path):
        backends.append(BackendChoice.PROCESS.value)
    backends.append(BackendChoice.SIMULATED.value)
    return backends


def create_engine(settings: Settings, events: EventBus | None = None) -> EngineBackend:
    """Build the engine backend selected by *settings*."""
    choice = settings.backend
    if choice == BackendChoice.AUTO:
        choice = (
            BackendChoice.PROCESS
            if is_miner_available(settings.miner_path)
            else BackendChoice.SIMULATED
        )

    if choice == BackendChoice.PROCESS:
        from minerdeck.engine.process import MinerProcess
        engine: EngineBackend = MinerProcess(
            settings.miner_path,
            settings.miner_args,
            events=events,
            stop_timeout=settings.stop_timeout,
        )
    else:
        from minerdeck.engine.simulated import SimulatedEngine
        engine = SimulatedEngine(events=events, interval=settings.sim_interval)

    logger.info("engine_backend_selected", backend=engine.backend_name)
    return engine
