"""Runtime settings resolved from ``MINERDECK_*`` environment variables."""

from __future__ import annotations

import os
import shlex
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from minerdeck.exceptions import ConfigError

ENV_PREFIX = "MINERDECK_"

DEFAULT_HINT_PATH = Path.home() / ".minerdeck" / "hint.json"


class BackendChoice(str, Enum):
    """Which engine backend the surfaces should drive."""
    AUTO = "auto"
    PROCESS = "process"
    SIMULATED = "simulated"


class Settings(BaseModel):
    """Resolved application settings."""
    model_config = {"frozen": True}

    backend: BackendChoice = BackendChoice.AUTO
    miner_path: str = Field(default="xmrig", min_length=1)
    miner_args: list[str] = Field(default_factory=list)
    hint_path: Path = DEFAULT_HINT_PATH
    query_timeout: float = Field(default=5.0, gt=0)
    stop_timeout: float = Field(default=5.0, gt=0)
    sim_interval: float = Field(default=1.0, gt=0)
    storage_secret: str | None = None


_ENV_FIELDS: dict[str, str] = {
    "BACKEND": "backend",
    "MINER_PATH": "miner_path",
    "MINER_ARGS": "miner_args",
    "HINT_PATH": "hint_path",
    "QUERY_TIMEOUT": "query_timeout",
    "STOP_TIMEOUT": "stop_timeout",
    "SIM_INTERVAL": "sim_interval",
    "STORAGE_SECRET": "storage_secret",
}


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Raises:
        ConfigError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is None or raw == "":
            continue
        if field_name == "miner_args":
            try:
                values[field_name] = shlex.split(raw)
            except ValueError as exc:
                raise ConfigError(f"{ENV_PREFIX}{suffix}: {exc}") from exc
        elif field_name == "hint_path":
            values[field_name] = Path(raw).expanduser()
        else:
            values[field_name] = raw

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
