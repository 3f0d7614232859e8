"""Mining session synchronization: store, hint, reconciliation, events, toggle."""

from minerdeck.session.controller import ToggleController, ToggleOutcome
from minerdeck.session.hint import (
    HINT_KEY,
    HintStore,
    JsonFileHintStore,
    MappingHintStore,
    MemoryHintStore,
)
from minerdeck.session.reconcile import ReconcileResult, reconcile
from minerdeck.session.session import MinerSession
from minerdeck.session.store import SessionStore
from minerdeck.session.subscriber import EventSubscriber
from minerdeck.session.view import format_hashrate, project

__all__ = [
    "HINT_KEY",
    "EventSubscriber",
    "HintStore",
    "JsonFileHintStore",
    "MappingHintStore",
    "MemoryHintStore",
    "MinerSession",
    "ReconcileResult",
    "SessionStore",
    "ToggleController",
    "ToggleOutcome",
    "format_hashrate",
    "project",
    "reconcile",
]
