from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Protocol

from serverdeck.core.errors import ConfigCorruption

log = logging.getLogger(__name__)

_MISSING = object()


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value or *default*."""

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""

    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""

    def clear(self) -> None:
        """Delete every key."""


class MemoryStore:
    """In-memory store. Used in tests and as a throwaway fallback."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return json.loads(json.dumps(self._data[key]))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.loads(json.dumps(value))

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def snapshot(self) -> dict[str, Any]:
        return json.loads(json.dumps(self._data))


class JsonFileStore:
    """Whole-file JSON object store with atomic writes.

    - writes go to a temp file and are moved over the target with ``os.replace``
    - the previous good file is kept as ``<name>.bak`` and used when the main
      file is unreadable
    - a corrupt file never raises: the store starts empty and logs a warning
    - write failures are logged and not retried
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._bak_path = self._path.with_name(self._path.name + ".bak")
        self._data: dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self, p: Path) -> dict[str, Any]:
        with p.open("r", encoding="utf-8") as f:
            obj = json.load(f)
        if not isinstance(obj, dict):
            raise ConfigCorruption(f"{p.name}: expected a JSON object, got {type(obj).__name__}")
        return obj

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            return self._read(self._path)
        except (OSError, ValueError, ConfigCorruption) as exc:
            log.warning("State file %s is unreadable, trying backup: %s", self._path, exc)
        try:
            return self._read(self._bak_path)
        except (OSError, ValueError, ConfigCorruption):
            log.warning("No usable backup for %s, starting empty", self._path)
            return {}

    def _flush(self) -> None:
        tmp = self._path.with_name(f".{self._path.name}.{os.getpid()}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            if self._path.exists():
                shutil.copy2(self._path, self._bak_path)
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError):
            log.exception("Failed to persist %s", self._path)
            tmp.unlink(missing_ok=True)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            return default
        # Hand out copies so callers cannot mutate persisted state in place.
        return json.loads(json.dumps(value))

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.loads(json.dumps(value))
        except (TypeError, ValueError):
            log.exception("Refusing to store non-JSON value under %r", key)
            return
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, _MISSING) is not _MISSING:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()
