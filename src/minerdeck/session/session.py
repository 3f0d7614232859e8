"""MinerSession: one UI instance's mining-control lifetime."""

from __future__ import annotations

from minerdeck.engine.base import EngineBackend
from minerdeck.models.session import MiningSession, SessionView
from minerdeck.session.controller import ToggleController, ToggleOutcome
from minerdeck.session.hint import HintStore
from minerdeck.session.reconcile import ReconcileResult, reconcile
from minerdeck.session.store import ChangeListener, SessionStore
from minerdeck.session.subscriber import EventSubscriber
from minerdeck.session.view import project
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)


class MinerSession:
    """Ties store, subscriber, reconciliation and toggle control together.

    ``mount()`` reads the hint once, attaches the event listeners, then
    reconciles against the engine. ``unmount()`` releases the listeners.
    A session is single-use: once unmounted it cannot be mounted again;
    build a new one instead.
    """

    def __init__(
        self,
        engine: EngineBackend,
        hint_store: HintStore,
        query_timeout: float | None = None,
    ) -> None:
        self._engine = engine
        self._hints = hint_store
        self._query_timeout = query_timeout
        self.store = SessionStore(hint_store)
        self.subscriber = EventSubscriber(self.store)
        self.controller = ToggleController(engine, self.store)
        self._mounted = False
        self._unmounted = False
        self.reconcile_result: ReconcileResult | None = None

    @property
    def mounted(self) -> bool:
        return self._mounted and not self._unmounted

    @property
    def closed(self) -> bool:
        """True once unmounted; a closed session is never usable again."""
        return self._unmounted

    @property
    def session(self) -> MiningSession:
        return self.store.session

    def view(self) -> SessionView:
        return project(self.store.session, toggle_enabled=self.controller.enabled)

    def on_change(self, listener: ChangeListener):
        """Register a store change listener; returns its remover."""
        return self.store.add_listener(listener)

    async def mount(self) -> ReconcileResult | None:
        if self._mounted:
            logger.debug("session_already_mounted")
            return self.reconcile_result
        if self._unmounted:
            raise RuntimeError("Session was unmounted; create a new session")
        self._mounted = True

        hint = self._hints.read()
        logger.info("session_mounting", hint=hint, backend=self._engine.backend_name)
        self.subscriber.attach(self._engine.events)
        self.reconcile_result = await reconcile(
            self._engine, self.store, hint, timeout=self._query_timeout,
        )
        if not self._unmounted:
            self.controller.set_ready(True)
        return self.reconcile_result

    def unmount(self) -> None:
        if self._unmounted:
            return
        self._unmounted = True
        self.controller.set_ready(False)
        self.subscriber.release()
        logger.info("session_unmounted")

    async def toggle(self) -> ToggleOutcome:
        return await self.controller.toggle()

    async def start(self) -> ToggleOutcome:
        return await self.controller.request_start()

    async def stop(self) -> ToggleOutcome:
        return await self.controller.request_stop()
