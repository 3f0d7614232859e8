"""UI session state management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from minerdeck.session import MinerSession


@dataclass
class UIState:
    """Per-page UI state that is not part of the mining session itself."""

    last_error: str | None = None
    session: MinerSession | None = None

    def live_session(self, factory: Callable[[], MinerSession]) -> MinerSession:
        """Return the page's session, building a new one if it was unmounted.

        A dropped websocket unmounts the session; when NiceGUI reconnects
        the same page, it gets a fresh session that reconciles again.
        """
        if self.session is None or self.session.closed:
            self.session = factory()
        return self.session

    def release(self) -> None:
        if self.session is not None:
            self.session.unmount()
