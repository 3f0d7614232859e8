"""Mining session state and its display projection."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Lifecycle state of a mining session."""
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ConfirmationSource(str, Enum):
    """Where the current status came from."""
    QUERY = "query"
    EVENT = "event"
    OPTIMISTIC = "optimistic"
    UNVERIFIED = "unverified"


class MiningSession(BaseModel):
    """In-memory record of one session's status and live metrics."""
    model_config = {"frozen": False, "validate_assignment": True}

    status: SessionStatus = SessionStatus.IDLE
    algorithm: str = ""
    hashrate: float = Field(default=0.0, ge=0.0)
    last_confirmed_by: ConfirmationSource = ConfirmationSource.OPTIMISTIC
    metrics_received: bool = False

    @property
    def is_confirmed(self) -> bool:
        return self.last_confirmed_by in (ConfirmationSource.QUERY, ConfirmationSource.EVENT)


WARMUP_MESSAGE = "starting, metrics pending"


class SessionView(BaseModel):
    """Display-ready snapshot of a session.

    ``hashrate`` is None whenever no meaningful number exists yet, so the
    dashboard never renders a misleading ``0.0`` during warm-up.
    """
    status: SessionStatus
    confirmed: bool = False
    warming_up: bool = False
    message: str | None = None
    hashrate: float | None = None
    algorithm: str | None = None
    toggle_enabled: bool = True
    toggle_label: str = "Start CPU mining"
