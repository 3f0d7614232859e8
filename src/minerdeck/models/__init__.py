"""Pydantic data models for MinerDeck."""

from minerdeck.models.engine import EngineEvent, EngineStatus, EventChannel
from minerdeck.models.session import (
    WARMUP_MESSAGE,
    ConfirmationSource,
    MiningSession,
    SessionStatus,
    SessionView,
)

__all__ = [
    "WARMUP_MESSAGE",
    "ConfirmationSource",
    "EngineEvent",
    "EngineStatus",
    "EventChannel",
    "MiningSession",
    "SessionStatus",
    "SessionView",
]
