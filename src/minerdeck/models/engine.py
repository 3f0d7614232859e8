"""Engine-side status and event payload models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class EventChannel(str, Enum):
    """Push channels exposed by the mining engine."""
    RATE = "rate"
    ALGORITHM = "algorithm"


class EngineEvent(BaseModel):
    """A single pushed engine event, as streamed to remote clients."""
    channel: EventChannel
    payload: float | str


class EngineStatus(BaseModel):
    """Point-in-time view of the engine process."""
    backend: str
    running: bool = False
    pid: int | None = None
    algorithm: str | None = None
    hashrate: float | None = Field(default=None, ge=0.0)
    uptime_seconds: float = 0.0
    last_error: str | None = None
