"""UI-facing projection of a mining session."""

from __future__ import annotations

from minerdeck.models.session import (
    WARMUP_MESSAGE,
    MiningSession,
    SessionStatus,
    SessionView,
)

_TOGGLE_LABELS = {
    SessionStatus.IDLE: "Start CPU mining",
    SessionStatus.STARTING: "Stop CPU mining",
    SessionStatus.RUNNING: "Stop CPU mining",
    SessionStatus.STOPPING: "Stopping...",
}


def project(session: MiningSession, toggle_enabled: bool = True) -> SessionView:
    """Build the display view for *session*.

    While starting and before the first metric event, the view reports the
    warm-up message and no hashrate. There is no timeout on that state: it
    lasts until a metric arrives or a stop is requested.
    """
    status = session.status
    warming_up = status == SessionStatus.STARTING and not session.metrics_received

    hashrate: float | None = None
    if status == SessionStatus.IDLE:
        hashrate = 0.0
    elif status != SessionStatus.STOPPING and session.metrics_received:
        hashrate = session.hashrate

    message = None
    if warming_up:
        message = WARMUP_MESSAGE
    elif status == SessionStatus.RUNNING and not session.is_confirmed:
        message = "last known running, not yet confirmed"

    return SessionView(
        status=status,
        confirmed=session.is_confirmed,
        warming_up=warming_up,
        message=message,
        hashrate=hashrate,
        algorithm=session.algorithm or None,
        toggle_enabled=toggle_enabled and status != SessionStatus.STOPPING,
        toggle_label=_TOGGLE_LABELS[status],
    )


def format_hashrate(value: float | None) -> str:
    """Human-readable hashrate, e.g. ``523.4 H/s`` or ``1.20 kH/s``."""
    if value is None:
        return "--"
    for scale, unit in ((1e9, "GH/s"), (1e6, "MH/s"), (1e3, "kH/s")):
        if value >= scale:
            return f"{value / scale:.2f} {unit}"
    return f"{value:.1f} H/s"
