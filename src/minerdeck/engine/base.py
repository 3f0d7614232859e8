"""Abstract interface for mining engine backends."""

from __future__ import annotations

import abc

from minerdeck.engine.events import EventBus
from minerdeck.models.engine import EngineStatus


class CommandGateway(abc.ABC):
    """Request/response control of a mining engine.

    Command failures raise :class:`~minerdeck.exceptions.CommandRejectedError`;
    query failures raise :class:`~minerdeck.exceptions.EngineUnreachableError`.
    """

    @abc.abstractmethod
    async def start(self) -> None:
        """Start mining."""

    @abc.abstractmethod
    async def stop(self) -> None:
        """Stop mining."""

    @abc.abstractmethod
    async def is_running(self) -> bool:
        """Return True if the engine is mining."""

    @abc.abstractmethod
    async def get_algorithm(self) -> str | None:
        """Return the current algorithm label, or None if not known yet."""

    @abc.abstractmethod
    async def get_hashrate(self) -> float | None:
        """Return the latest hashrate in H/s, or None if not known yet."""


class EngineBackend(CommandGateway):
    """A gateway that also owns the engine and publishes its events."""

    def __init__(self, events: EventBus | None = None) -> None:
        self.events = events or EventBus()

    @property
    @abc.abstractmethod
    def backend_name(self) -> str:
        """Human-readable name of this backend."""

    @abc.abstractmethod
    def status(self) -> EngineStatus:
        """Synchronous status snapshot for API and CLI reporting."""

    async def shutdown(self) -> None:
        """Stop the engine if it is running. Never raises."""
