"""Unit tests for minerdeck.config and minerdeck.exceptions."""

from __future__ import annotations

from pathlib import Path

import pytest

from minerdeck.config import BackendChoice, Settings, load_settings
from minerdeck.exceptions import (
    ENGINE_CODE_BINARY_MISSING,
    CommandRejectedError,
    ConfigError,
    EngineError,
    EngineUnreachableError,
    HintStoreError,
    MinerDeckError,
)


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings({})
        assert settings.backend == BackendChoice.AUTO
        assert settings.miner_path == "xmrig"
        assert settings.miner_args == []
        assert settings.query_timeout == 5.0
        assert settings.storage_secret is None

    def test_env_overrides(self, tmp_path):
        settings = load_settings({
            "MINERDECK_BACKEND": "simulated",
            "MINERDECK_MINER_PATH": "/opt/xmrig/xmrig",
            "MINERDECK_MINER_ARGS": "-o pool.example.org:3333 --donate-level '1'",
            "MINERDECK_HINT_PATH": str(tmp_path / "hint.json"),
            "MINERDECK_QUERY_TIMEOUT": "2.5",
            "MINERDECK_SIM_INTERVAL": "0.5",
        })
        assert settings.backend == BackendChoice.SIMULATED
        assert settings.miner_path == "/opt/xmrig/xmrig"
        assert settings.miner_args == ["-o", "pool.example.org:3333", "--donate-level", "1"]
        assert settings.hint_path == tmp_path / "hint.json"
        assert settings.query_timeout == 2.5
        assert settings.sim_interval == 0.5

    def test_empty_values_ignored(self):
        assert load_settings({"MINERDECK_BACKEND": ""}).backend == BackendChoice.AUTO

    def test_hint_path_expands_user(self):
        settings = load_settings({"MINERDECK_HINT_PATH": "~/hint.json"})
        assert settings.hint_path == Path.home() / "hint.json"

    @pytest.mark.parametrize(
        "key, value",
        [
            ("MINERDECK_BACKEND", "gpu"),
            ("MINERDECK_QUERY_TIMEOUT", "0"),
            ("MINERDECK_STOP_TIMEOUT", "soon"),
            ("MINERDECK_MINER_ARGS", "--pool 'unterminated"),
        ],
    )
    def test_invalid_values_raise(self, key, value):
        with pytest.raises(ConfigError):
            load_settings({key: value})

    def test_settings_frozen(self):
        with pytest.raises(Exception):
            Settings().miner_path = "other"


class TestExceptions:
    def test_code_carried_on_rejection(self):
        exc = CommandRejectedError("Miner binary not found: xmrig", code=ENGINE_CODE_BINARY_MISSING)
        assert exc.code == ENGINE_CODE_BINARY_MISSING
        assert str(exc) == "Miner binary not found: xmrig"

    def test_code_defaults_to_none(self):
        assert EngineUnreachableError("engine unreachable").code is None

    def test_hierarchy(self):
        assert issubclass(CommandRejectedError, EngineError)
        assert issubclass(EngineUnreachableError, EngineError)
        assert issubclass(HintStoreError, MinerDeckError)
        assert issubclass(ConfigError, MinerDeckError)
