"""Status indicator components."""

from __future__ import annotations

from nicegui import ui

from minerdeck.models.session import SessionStatus
from minerdeck.ui.theme import COLORS

_STATUS_COLORS = {
    SessionStatus.IDLE: COLORS.text_secondary,
    SessionStatus.STARTING: COLORS.yellow,
    SessionStatus.RUNNING: COLORS.green,
    SessionStatus.STOPPING: COLORS.yellow,
}


def status_badge_style(status: SessionStatus) -> str:
    color = _STATUS_COLORS.get(status, COLORS.text_muted)
    return f"background: {color}20; color: {color}; border: 1px solid {color}40"


def confirmation_badge(confirmed: bool) -> ui.label:
    """Create a badge telling whether the status came from the engine."""
    color = COLORS.cyan if confirmed else COLORS.text_muted
    text = "LIVE" if confirmed else "UNVERIFIED"
    label = ui.label(text).classes("px-2 py-1 rounded text-xs")
    label.style(f"background: {color}20; color: {color}; border: 1px solid {color}40")
    return label
