"""Shared page layout with header and content area."""

from __future__ import annotations

from typing import Callable

from nicegui import ui

from minerdeck.ui.theme import COLORS, GLOBAL_CSS


def page_layout(title: str, content_fn: Callable, backend: str | None = None) -> None:
    """Create the standard page layout with a header.

    Args:
        title: Page title displayed in the header.
        content_fn: Callable that builds the page content.
        backend: Name of the active engine backend, shown as a badge.
    """
    ui.add_css(GLOBAL_CSS)
    ui.dark_mode(True)
    ui.colors(primary=COLORS.cyan, secondary=COLORS.blue, accent=COLORS.purple)

    with ui.header(elevated=True).classes("q-pa-sm"):
        with ui.row().classes("w-full items-center no-wrap q-gutter-md"):
            ui.label("MINERDECK").classes("text-h6 text-bold").style(
                f"color: {COLORS.cyan}; letter-spacing: 0.15em;"
            )
            ui.label("|").style(f"color: {COLORS.text_muted};")
            ui.label(title).classes("text-subtitle1").style(
                f"color: {COLORS.text_primary};"
            )

            ui.space()

            if backend:
                with ui.row().classes("items-center q-gutter-xs"):
                    ui.icon("memory").style(
                        f"color: {COLORS.green}; font-size: 1rem;"
                    )
                    ui.label(backend).classes("text-caption").style(
                        f"color: {COLORS.green};"
                    )

    with ui.column().classes("q-pa-md w-full").style(
        f"background-color: {COLORS.bg_primary};"
    ):
        content_fn()
