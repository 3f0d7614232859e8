"""Startup reconciliation of the persisted hint against the live engine."""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from minerdeck.engine.base import CommandGateway
from minerdeck.models.session import ConfirmationSource, SessionStatus
from minerdeck.session.store import SessionStore
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ReconcileResult:
    """What each query returned; a query that failed is listed in ``errors``."""
    hint: bool | None = None
    running: bool | None = None
    algorithm: str | None = None
    hashrate: float | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def verified(self) -> bool:
        return "running" not in self.errors


def _valid_hashrate(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


async def _attempt(
    name: str,
    query: Callable[[], Awaitable[Any]],
    timeout: float | None,
    result: ReconcileResult,
) -> tuple[bool, Any]:
    """Run one query exactly once. Returns ``(ok, value)``; never raises."""
    try:
        if timeout is None:
            value = await query()
        else:
            value = await asyncio.wait_for(query(), timeout=timeout)
    except Exception as exc:
        result.errors[name] = str(exc) or type(exc).__name__
        logger.warning("reconcile_query_failed", query=name, error=result.errors[name])
        return False, None
    return True, value


async def reconcile(
    gateway: CommandGateway,
    store: SessionStore,
    hint: bool | None,
    timeout: float | None = None,
) -> ReconcileResult:
    """Establish ground-truth session state from the engine.

    Applies *hint* first as a provisional value, then issues the running,
    algorithm and hashrate queries concurrently. Each result is applied as
    soon as it arrives. The running query always overrides the hint; if it
    fails the provisional status stays but is marked unverified.

    Args:
        gateway: Engine command gateway to query.
        store: Session store to populate.
        hint: Value read from the persisted hint store (None if absent).
        timeout: Per-query timeout in seconds; a timeout counts as failure.
    """
    result = ReconcileResult(hint=hint)
    store.apply_hint(hint)

    # Metric results that arrive while the running answer is still unknown
    # and the provisional status is idle wait here.
    held: dict[str, Any] = {}

    def _apply_metric(name: str, value: Any) -> None:
        if name == "algorithm":
            store.set_algorithm(value)
        else:
            store.set_hashrate(float(value))

    def _offer_metric(name: str, value: Any) -> None:
        if result.running is False:
            return
        if store.status == SessionStatus.RUNNING:
            _apply_metric(name, value)
        elif result.running is None:
            held[name] = value

    async def _running() -> None:
        ok, value = await _attempt("running", gateway.is_running, timeout, result)
        if not ok:
            store.mark_unverified()
            return
        result.running = bool(value)
        if result.running:
            store.confirm_running(ConfirmationSource.QUERY)
            for name, held_value in held.items():
                _apply_metric(name, held_value)
        else:
            store.reset_idle(ConfirmationSource.QUERY)
        held.clear()

    async def _algorithm() -> None:
        ok, value = await _attempt("algorithm", gateway.get_algorithm, timeout, result)
        if not ok or value is None:
            return
        if not isinstance(value, str):
            logger.debug("reconcile_algorithm_discarded", value=repr(value))
            return
        result.algorithm = value
        _offer_metric("algorithm", value)

    async def _hashrate() -> None:
        ok, value = await _attempt("hashrate", gateway.get_hashrate, timeout, result)
        if not ok or value is None:
            return
        if not _valid_hashrate(value):
            logger.debug("reconcile_hashrate_discarded", value=repr(value))
            return
        result.hashrate = float(value)
        _offer_metric("hashrate", value)

    await asyncio.gather(_running(), _algorithm(), _hashrate())

    session = store.session
    logger.info(
        "reconcile_complete",
        hint=hint,
        running=result.running,
        status=session.status.value,
        confirmed_by=session.last_confirmed_by.value,
        failed=sorted(result.errors),
    )
    return result
