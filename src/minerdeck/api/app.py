"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from minerdeck.config import Settings, load_settings
from minerdeck.engine.base import EngineBackend
from minerdeck.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

# Process-wide engine and settings; one miner per host process
_engine: EngineBackend | None = None
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_engine() -> EngineBackend:
    """Get the process-wide engine backend, creating it on first use."""
    global _engine
    if _engine is None:
        from minerdeck.engine import create_engine
        _engine = create_engine(get_settings())
    return _engine


def set_engine(engine: EngineBackend | None) -> None:
    global _engine
    _engine = engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    setup_logging()
    logger.info("minerdeck_api_starting")
    yield
    # The miner must not outlive the app
    if _engine is not None:
        await _engine.shutdown()
    logger.info("minerdeck_api_stopped")


def create_app(
    enable_ui: bool = True,
    settings: Settings | None = None,
    engine: EngineBackend | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        enable_ui: Whether to mount the NiceGUI web dashboard.
        settings: Settings to use instead of reading the environment.
        engine: Engine backend to use instead of building one from settings.

    Returns:
        Configured FastAPI application instance.
    """
    global _settings
    if settings is not None:
        _settings = settings
    if engine is not None:
        set_engine(engine)

    app = FastAPI(
        title="MinerDeck API",
        description="Local CPU mining engine control and live metrics",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from minerdeck.api.routes import mining
    app.include_router(mining.router, prefix="/api")

    if enable_ui:
        try:
            from minerdeck.ui.main import setup_ui
            setup_ui(app)
        except ImportError:
            logger.warning("nicegui_not_available", msg="Web dashboard disabled")

    return app
