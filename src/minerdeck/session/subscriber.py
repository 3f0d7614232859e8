"""Event Subscriber: applies pushed engine metrics to the session store."""

from __future__ import annotations

import math
from typing import Any

from minerdeck.engine.events import EventBus, Subscription
from minerdeck.models.engine import EventChannel
from minerdeck.models.session import ConfirmationSource, SessionStatus
from minerdeck.session.store import SessionStore
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

# Statuses in which pushed metrics are meaningful
_ACCEPTING = (SessionStatus.STARTING, SessionStatus.RUNNING)


class EventSubscriber:
    """Owns the rate and algorithm subscriptions for one session.

    Each handler writes only its own field. A rate event while ``starting``
    is the evidence that the start succeeded and moves the session to
    ``running``.
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._subscriptions: list[Subscription] = []
        self._attached = False
        self._released = False

    @property
    def attached(self) -> bool:
        return self._attached and not self._released

    def attach(self, events: EventBus) -> None:
        """Subscribe to both channels. A second call is a no-op."""
        if self._attached:
            return
        self._attached = True
        self._subscriptions = [
            events.subscribe(EventChannel.RATE, self.on_rate),
            events.subscribe(EventChannel.ALGORITHM, self.on_algorithm),
        ]

    def release(self) -> None:
        """Drop both subscriptions. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        logger.debug("event_subscriptions_released")

    def on_rate(self, payload: Any) -> None:
        if (
            isinstance(payload, bool)
            or not isinstance(payload, (int, float))
            or not math.isfinite(payload)
            or payload < 0
        ):
            logger.debug("rate_event_discarded", payload=repr(payload))
            return

        status = self._store.status
        if status not in _ACCEPTING:
            logger.debug("rate_event_ignored", status=status.value)
            return

        self._store.set_hashrate(float(payload))
        if status == SessionStatus.STARTING or not self._store.session.is_confirmed:
            self._store.confirm_running(ConfirmationSource.EVENT)

    def on_algorithm(self, payload: Any) -> None:
        if not isinstance(payload, str):
            logger.debug("algorithm_event_discarded", payload=repr(payload))
            return

        status = self._store.status
        if status not in _ACCEPTING:
            logger.debug("algorithm_event_ignored", status=status.value)
            return

        self._store.set_algorithm(payload)
