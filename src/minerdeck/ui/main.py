"""NiceGUI web dashboard setup and page registration."""

from __future__ import annotations

import secrets

from fastapi import FastAPI
from nicegui import ui


def setup_ui(fastapi_app: FastAPI) -> None:
    """Register NiceGUI pages with the FastAPI application."""
    from minerdeck.api.app import get_settings

    @ui.page("/")
    def index():
        from minerdeck.ui.pages.dashboard import dashboard_page
        dashboard_page()

    storage_secret = get_settings().storage_secret or secrets.token_hex(32)

    ui.run_with(
        fastapi_app,
        title="MinerDeck",
        storage_secret=storage_secret,
    )
