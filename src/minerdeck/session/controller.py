"""Toggle Controller: serialized start/stop state machine."""

from __future__ import annotations

from enum import Enum

from minerdeck.engine.base import CommandGateway
from minerdeck.exceptions import ENGINE_CODE_ALREADY_RUNNING, CommandRejectedError
from minerdeck.models.session import ConfirmationSource, SessionStatus
from minerdeck.session.store import SessionStore
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)


class ToggleOutcome(str, Enum):
    """What a toggle request did."""
    STARTED = "started"
    STOPPED = "stopped"
    IGNORED = "ignored"


class ToggleController:
    """Issues start/stop commands, at most one in flight per session.

    The in-flight flag is set before the first suspension point, so on a
    single event loop a second request can never slip in between the check
    and the command. Requests that arrive while a command is in flight, or
    before the session is ready, are ignored rather than queued.
    """

    def __init__(self, gateway: CommandGateway, store: SessionStore) -> None:
        self._gateway = gateway
        self._store = store
        self._in_flight = False
        self._ready = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def enabled(self) -> bool:
        return self._ready and not self._in_flight

    def set_ready(self, ready: bool = True) -> None:
        self._ready = ready

    async def toggle(self) -> ToggleOutcome:
        """Start when idle, stop when running or warming up.

        Raises:
            CommandRejectedError: If the engine refused the command. The
                session has already been reverted when this propagates.
        """
        if not self.enabled:
            logger.debug("toggle_ignored", busy=self._in_flight, ready=self._ready)
            return ToggleOutcome.IGNORED

        status = self._store.status
        if status == SessionStatus.IDLE:
            return await self.request_start()
        if status in (SessionStatus.RUNNING, SessionStatus.STARTING):
            return await self.request_stop()
        logger.debug("toggle_ignored", status=status.value)
        return ToggleOutcome.IGNORED

    async def request_start(self) -> ToggleOutcome:
        if not self.enabled or self._store.status != SessionStatus.IDLE:
            return ToggleOutcome.IGNORED

        self._in_flight = True
        try:
            self._store.begin_start()
            logger.info("mining_start_requested")
            try:
                await self._gateway.start()
            except Exception as exc:
                logger.warning("mining_start_rejected", error=str(exc))
                already = (
                    isinstance(exc, CommandRejectedError)
                    and exc.code == ENGINE_CODE_ALREADY_RUNNING
                )
                running = await self._query_running() if already else False
                if running:
                    # Started elsewhere (another tab, the CLI); adopt it
                    self._store.confirm_running(ConfirmationSource.QUERY)
                    logger.info("mining_start_adopted_running")
                    return ToggleOutcome.STARTED
                if running is None:
                    self._store.reset_idle(ConfirmationSource.UNVERIFIED, persist=False)
                else:
                    self._store.reset_idle(ConfirmationSource.QUERY)
                if isinstance(exc, CommandRejectedError):
                    raise
                raise CommandRejectedError(f"Start failed: {exc}") from exc
        finally:
            self._in_flight = False

        logger.info("mining_start_accepted", status=self._store.status.value)
        return ToggleOutcome.STARTED

    async def request_stop(self) -> ToggleOutcome:
        if not self.enabled or self._store.status not in (
            SessionStatus.RUNNING,
            SessionStatus.STARTING,
        ):
            return ToggleOutcome.IGNORED

        self._in_flight = True
        try:
            previous = self._store.snapshot()
            self._store.begin_stop()
            logger.info("mining_stop_requested", from_status=previous.status.value)
            try:
                await self._gateway.stop()
            except Exception as exc:
                self._store.restore(previous)
                logger.warning("mining_stop_rejected", error=str(exc))
                if isinstance(exc, CommandRejectedError):
                    raise
                raise CommandRejectedError(f"Stop failed: {exc}") from exc
            self._store.reset_idle(ConfirmationSource.QUERY)
        finally:
            self._in_flight = False

        logger.info("mining_stopped")
        return ToggleOutcome.STOPPED

    async def _query_running(self) -> bool | None:
        """Ask the engine whether it is mining; None if it cannot answer."""
        try:
            return bool(await self._gateway.is_running())
        except Exception as exc:
            logger.warning("mining_running_query_failed", error=str(exc))
            return None
