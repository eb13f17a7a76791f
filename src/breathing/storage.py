"""Flat key-value stores used to persist settings and custom exercises."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol


class StorageError(Exception):
    """Raised when the key-value store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local store; contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value


class JsonFileKeyValueStore:
    """Stores string values under string keys in a single JSON object file.

    Writes go to a sibling temp file first and are moved into place, so a
    crash mid-write never leaves a truncated store behind.
    """

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None):
        self._path = Path(path).expanduser()
        self._logger = logger or logging.getLogger("breathing.storage")
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        if value is None or isinstance(value, str):
            return value
        # Foreign writers may store raw JSON values; hand them back as text.
        return json.dumps(value)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Value for {key!r} must be a string")
        with self._lock:
            values = self._read_all()
            values[key] = value
            self._write_all(values)

    def _read_all(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as error:
            raise StorageError(f"Failed to read store {self._path}: {error}") from error
        if not raw.strip():
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as error:
            raise StorageError(f"Store {self._path} is not valid JSON: {error}") from error
        if not isinstance(decoded, dict):
            raise StorageError(f"Store {self._path} must contain a JSON object")
        return decoded

    def _write_all(self, values: dict[str, object]) -> None:
        temp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(values, indent=2, sort_keys=True),
                encoding="utf-8",
            )
            temp_path.replace(self._path)
        except OSError as error:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise StorageError(f"Failed to write store {self._path}: {error}") from error
        self._logger.debug("Wrote %d keys to %s", len(values), self._path)
