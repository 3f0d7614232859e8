"""Exception hierarchy for engine commands, queries, and session persistence."""

from __future__ import annotations


class MinerDeckError(Exception):
    """Base exception for all MinerDeck errors."""

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class EngineError(MinerDeckError):
    """Error reported by or about the mining engine."""


class CommandRejectedError(EngineError):
    """A start or stop command was refused by the engine."""


class EngineUnreachableError(EngineError):
    """The engine could not be queried."""


class HintStoreError(MinerDeckError):
    """The persisted running hint could not be read or written."""


class ConfigError(MinerDeckError):
    """A configuration value is missing or invalid."""


# Codes carried on CommandRejectedError.code by the engine backends
ENGINE_CODE_ALREADY_RUNNING = 1001
ENGINE_CODE_BINARY_MISSING = 1003
ENGINE_CODE_LAUNCH_FAILED = 1004
