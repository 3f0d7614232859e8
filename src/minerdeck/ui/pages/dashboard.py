"""Mining dashboard page: start/stop toggle with live hashrate."""

from __future__ import annotations

from nicegui import ui

from minerdeck.exceptions import CommandRejectedError
from minerdeck.models.session import MiningSession, SessionView
from minerdeck.session import MinerSession, ToggleOutcome, format_hashrate
from minerdeck.session.hint import UserStorageHintStore
from minerdeck.ui.components.status_indicator import confirmation_badge, status_badge_style
from minerdeck.ui.layout import page_layout
from minerdeck.ui.state import UIState
from minerdeck.ui.theme import COLORS, TOGGLE_COLORS
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)


def dashboard_page() -> None:
    """Render the mining dashboard for one browser tab."""
    from minerdeck.api.app import get_engine, get_settings

    engine = get_engine()
    settings = get_settings()
    # Bound while the page request is in scope; reused by later sessions
    hints = UserStorageHintStore()
    state = UIState()

    def content():
        with ui.row().classes("w-full items-center justify-between"):
            with ui.column().classes("gap-1"):
                ui.label("Welcome back").classes("text-h5 text-bold").style(
                    f"color: {COLORS.text_primary};"
                )
                ui.label("Your mining control panel.").style(
                    f"color: {COLORS.text_secondary};"
                )
            toggle_button = ui.button(on_click=lambda: on_toggle()).classes(
                "px-4 py-2 text-sm font-semibold"
            )

        with ui.row().classes("w-full gap-4"):
            with ui.card().classes("q-pa-md").style("min-width: 260px;"):
                ui.label("Hashrate").style(f"color: {COLORS.text_secondary};")
                hashrate_label = ui.label().classes("stat-value").style(
                    f"color: {COLORS.cyan};"
                )
                warmup_label = ui.label().classes("text-caption").style(
                    f"color: {COLORS.yellow};"
                )

            with ui.card().classes("q-pa-md").style("min-width: 260px;"):
                ui.label("Algorithm").style(f"color: {COLORS.text_secondary};")
                algorithm_label = ui.label().classes("stat-value").style(
                    f"color: {COLORS.purple};"
                )

            with ui.card().classes("q-pa-md").style("min-width: 260px;"):
                ui.label("Status").style(f"color: {COLORS.text_secondary};")
                with ui.row().classes("items-center gap-2"):
                    status_label = ui.label().classes("px-2 py-1 rounded text-xs font-bold")
                    badge_slot = ui.row()

        error_label = ui.label().classes("text-caption").style(f"color: {COLORS.red};")

        def render(view: SessionView) -> None:
            error_label.text = state.last_error or ""
            error_label.set_visibility(state.last_error is not None)
            toggle_button.text = view.toggle_label
            toggle_button.style(
                f"background-color: {TOGGLE_COLORS[view.status.value]} !important; color: white;"
            )
            toggle_button.set_enabled(view.toggle_enabled)

            hashrate_label.text = (
                "--" if view.warming_up else format_hashrate(view.hashrate)
            )
            warmup_label.text = view.message or ""
            algorithm_label.text = view.algorithm or "--"

            status_label.text = view.status.value.upper()
            status_label.style(status_badge_style(view.status))
            badge_slot.clear()
            with badge_slot:
                confirmation_badge(view.confirmed)

        def on_change(_record: MiningSession) -> None:
            render(state.session.view())

        def build_session() -> MinerSession:
            session = MinerSession(
                engine,
                hints,
                query_timeout=settings.query_timeout,
            )
            session.on_change(on_change)
            return session

        async def on_toggle() -> None:
            session = state.live_session(build_session)
            try:
                outcome = await session.toggle()
            except CommandRejectedError as exc:
                state.last_error = str(exc)
                ui.notify(f"Mining command failed: {exc}", type="negative")
                render(session.view())
                return
            if outcome == ToggleOutcome.IGNORED:
                logger.debug("dashboard_toggle_ignored")
            else:
                state.last_error = None
            render(session.view())

        async def mount() -> None:
            session = state.live_session(build_session)
            await session.mount()
            render(session.view())

        async def on_connect() -> None:
            # Transient drops unmount the session; remount on reconnect
            if state.session is not None and state.session.closed:
                await mount()

        client = ui.context.client
        client.on_disconnect(state.release)
        client.on_connect(on_connect)
        render(state.live_session(build_session).view())
        ui.timer(0.1, mount, once=True)

    page_layout("Dashboard", content, backend=engine.backend_name)
