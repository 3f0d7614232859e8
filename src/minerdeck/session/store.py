"""Session State Store: the single owner of a session's MiningSession record."""

from __future__ import annotations

from typing import Callable

from minerdeck.exceptions import HintStoreError
from minerdeck.models.session import ConfirmationSource, MiningSession, SessionStatus
from minerdeck.session.hint import HintStore
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

ChangeListener = Callable[[MiningSession], None]


class SessionStore:
    """Holds the session record and the only code paths that mutate it.

    Every transition into ``idle`` goes through :meth:`reset_idle`, which
    clears the metric fields together with the status, so ``idle`` always
    implies ``hashrate == 0`` and ``algorithm == ""``. Confirmed transitions
    mirror themselves into the hint store; transient ones never do.
    """

    def __init__(self, hint_store: HintStore) -> None:
        self._hints = hint_store
        self._session = MiningSession()
        self._listeners: list[ChangeListener] = []

    @property
    def session(self) -> MiningSession:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    def snapshot(self) -> MiningSession:
        return self._session.model_copy()

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change callback; returns a function that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # --- provisional state ---

    def apply_hint(self, hint: bool | None) -> None:
        """Provisional first-paint state from the persisted hint."""
        if hint:
            self._session.status = SessionStatus.RUNNING
        else:
            self._clear_metrics()
            self._session.status = SessionStatus.IDLE
        self._session.last_confirmed_by = ConfirmationSource.OPTIMISTIC
        self._notify()

    def mark_unverified(self) -> None:
        """Flag the provisional status as unconfirmed.

        A status already confirmed by a query or an event in the meantime
        is left alone.
        """
        if self._session.last_confirmed_by != ConfirmationSource.OPTIMISTIC:
            return
        self._session.last_confirmed_by = ConfirmationSource.UNVERIFIED
        self._notify()

    # --- confirmed transitions ---

    def confirm_running(self, source: ConfirmationSource) -> None:
        self._session.status = SessionStatus.RUNNING
        self._session.last_confirmed_by = source
        self._persist(True)
        self._notify()

    def reset_idle(self, source: ConfirmationSource, persist: bool = True) -> None:
        self._clear_metrics()
        self._session.status = SessionStatus.IDLE
        self._session.last_confirmed_by = source
        if persist:
            self._persist(False)
        self._notify()

    # --- optimistic transitions ---

    def begin_start(self) -> None:
        self._clear_metrics()
        self._session.status = SessionStatus.STARTING
        self._session.last_confirmed_by = ConfirmationSource.OPTIMISTIC
        self._notify()

    def begin_stop(self) -> None:
        self._session.status = SessionStatus.STOPPING
        self._session.last_confirmed_by = ConfirmationSource.OPTIMISTIC
        self._notify()

    def restore(self, previous: MiningSession) -> None:
        """Put back a record captured before a rejected command."""
        self._session = previous.model_copy()
        self._notify()

    # --- field writers ---

    def set_hashrate(self, value: float) -> None:
        self._session.hashrate = value
        self._session.metrics_received = True
        self._notify()

    def set_algorithm(self, value: str) -> None:
        self._session.algorithm = value
        self._notify()

    # --- internal ---

    def _clear_metrics(self) -> None:
        self._session.hashrate = 0.0
        self._session.algorithm = ""
        self._session.metrics_received = False

    def _persist(self, running: bool) -> None:
        try:
            self._hints.write(running)
        except HintStoreError as exc:
            logger.warning("hint_write_failed", running=running, error=str(exc))

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._session)
            except Exception:
                logger.exception("session_listener_failed")
