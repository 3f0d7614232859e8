"""In-process publish/subscribe for engine push events."""

from __future__ import annotations

from typing import Any, Callable

from minerdeck.models.engine import EventChannel
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], None]


class Subscription:
    """Handle for one registered listener. ``unsubscribe()`` is idempotent."""

    def __init__(self, bus: EventBus, channel: EventChannel, handler: EventHandler) -> None:
        self._bus = bus
        self._channel = channel
        self._handler = handler
        self._active = True

    @property
    def channel(self) -> EventChannel:
        return self._channel

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._remove(self._channel, self._handler)


class EventBus:
    """Fan-out of engine events to listeners, one list per channel.

    Payloads are delivered as-is; validating them is the listener's job.
    A failing listener is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventChannel, list[EventHandler]] = {
            channel: [] for channel in EventChannel
        }

    def subscribe(self, channel: EventChannel | str, handler: EventHandler) -> Subscription:
        channel = EventChannel(channel)
        self._listeners[channel].append(handler)
        return Subscription(self, channel, handler)

    def publish(self, channel: EventChannel | str, payload: Any) -> None:
        channel = EventChannel(channel)
        for handler in list(self._listeners[channel]):
            try:
                handler(payload)
            except Exception:
                logger.exception("event_handler_failed", channel=channel.value)

    def listener_count(self, channel: EventChannel | str) -> int:
        return len(self._listeners[EventChannel(channel)])

    def _remove(self, channel: EventChannel, handler: EventHandler) -> None:
        try:
            self._listeners[channel].remove(handler)
        except ValueError:
            pass
