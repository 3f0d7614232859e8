"""Persisted "was last known to be running" hint.

The hint only exists to avoid a flash of the wrong state on first paint.
It is never authoritative: the session reads it once at mount and
afterwards only writes it to mirror confirmed transitions.
"""

from __future__ import annotations

import abc
import json
from pathlib import Path
from typing import MutableMapping

from minerdeck.exceptions import HintStoreError
from minerdeck.utils.logging import get_logger

logger = get_logger(__name__)

HINT_KEY = "cpu_mining_active"


class HintStore(abc.ABC):
    """Single-key boolean store that survives page reloads."""

    @abc.abstractmethod
    def read(self) -> bool | None:
        """Return the stored hint, or None if nothing was stored."""

    @abc.abstractmethod
    def write(self, running: bool) -> None:
        """Store the hint.

        Raises:
            HintStoreError: If the value could not be persisted.
        """

    @abc.abstractmethod
    def clear(self) -> None:
        """Forget the hint (logout-equivalent)."""


class MappingHintStore(HintStore):
    """Hint kept under :data:`HINT_KEY` in any mutable mapping."""

    def __init__(self, storage: MutableMapping | None = None, key: str = HINT_KEY) -> None:
        self._storage = storage if storage is not None else {}
        self._key = key

    def read(self) -> bool | None:
        value = self._storage.get(self._key)
        return value if isinstance(value, bool) else None

    def write(self, running: bool) -> None:
        self._storage[self._key] = bool(running)

    def clear(self) -> None:
        self._storage.pop(self._key, None)


class MemoryHintStore(MappingHintStore):
    """In-process hint, lost on exit."""

    def __init__(self, initial: bool | None = None) -> None:
        super().__init__({})
        if initial is not None:
            self.write(initial)


class UserStorageHintStore(MappingHintStore):
    """Hint kept in NiceGUI's per-browser ``app.storage.user``."""

    def __init__(self, key: str = HINT_KEY) -> None:
        from nicegui import app

        super().__init__(app.storage.user, key)


class JsonFileHintStore(HintStore):
    """Hint kept in a small JSON file, for the CLI.

    A missing or corrupt file reads as "no hint".
    """

    def __init__(self, path: Path, key: str = HINT_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("hint_file_unreadable", path=str(self._path))
            return {}
        return data if isinstance(data, dict) else {}

    def read(self) -> bool | None:
        value = self._load().get(self._key)
        return value if isinstance(value, bool) else None

    def write(self, running: bool) -> None:
        data = self._load()
        data[self._key] = bool(running)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as exc:
            raise HintStoreError(f"Failed to write hint to {self._path}: {exc}") from exc

    def clear(self) -> None:
        data = self._load()
        if data.pop(self._key, None) is None:
            return
        try:
            self._path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as exc:
            raise HintStoreError(f"Failed to clear hint in {self._path}: {exc}") from exc
