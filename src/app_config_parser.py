"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional, TypeVar

from app_config_schema import (
    DEFAULT_STORE_FILE,
    AppConfig,
    AppConfigurationError,
    SessionSettings,
    StorageSettings,
    TTSSettings,
    UIServerSettings,
)

_T = TypeVar("_T")

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    tables = {
        name: _Table.lookup(raw, name, base_dir)
        for name in ("storage", "session", "tts", "ui_server")
    }
    return AppConfig(
        storage=_storage(tables["storage"]),
        session=_session(tables["session"]),
        tts=_tts(tables["tts"]),
        ui_server=_ui_server(tables["ui_server"]),
        source_file=source_file,
    )


def _storage(table: "_Table") -> StorageSettings:
    return StorageSettings(
        enabled=table.flag("enabled", True),
        path=table.path("path") or table.resolve(DEFAULT_STORE_FILE),
    )


def _session(table: "_Table") -> SessionSettings:
    poll_interval = table.number("poll_interval_seconds", 0.1)
    if not 0 < poll_interval <= 1.0:
        raise AppConfigurationError(
            f"{table.key('poll_interval_seconds')} must be in (0, 1], got {poll_interval}."
        )
    return SessionSettings(
        poll_interval_seconds=poll_interval,
        default_exercise=table.text("default_exercise") or "default",
    )


def _tts(table: "_Table") -> TTSSettings:
    table.reject_secrets("hf_token")
    return TTSSettings(
        enabled=table.flag("enabled", False),
        model_path=table.path("model_path"),
        hf_filename=table.text("hf_filename"),
        hf_repo_id=table.text("hf_repo_id"),
        hf_revision=table.text("hf_revision") or "main",
        output_device=table.optional("output_device", table.integer),
    )


def _ui_server(table: "_Table") -> UIServerSettings:
    return UIServerSettings(
        enabled=table.flag("enabled", True),
        host=table.text("host") or "127.0.0.1",
        port=table.integer("port", 8765),
        index_file=table.path("index_file"),
    )


class _Table:
    """One `[name]` section with typed, field-qualified accessors."""

    def __init__(self, name: str, values: Mapping[str, Any], base_dir: Path):
        self.name = name
        self._values = values
        self._base_dir = base_dir

    @classmethod
    def lookup(cls, root: Mapping[str, Any], name: str, base_dir: Path) -> "_Table":
        values = root.get(name)
        if values is None:
            values = {}
        elif not isinstance(values, Mapping):
            raise AppConfigurationError(f"[{name}] must be a table.")
        return cls(name, values, base_dir)

    def key(self, field: str) -> str:
        return f"{self.name}.{field}"

    def _invalid(self, field: str, kind: str) -> AppConfigurationError:
        return AppConfigurationError(f"{self.key(field)} must be {kind}.")

    def optional(self, field: str, read: Callable[[str], _T]) -> Optional[_T]:
        if field not in self._values:
            return None
        return read(field)

    def text(self, field: str, default: str = "") -> str:
        value = self._values.get(field, default)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise self._invalid(field, "a string")
        return value.strip()

    def flag(self, field: str, default: bool) -> bool:
        value = self._values.get(field, default)
        if isinstance(value, bool):
            return value
        word = value.strip().lower() if isinstance(value, str) else None
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise self._invalid(field, "a boolean")

    def integer(self, field: str, default: Optional[int] = None) -> int:
        return self._coerce(field, default, int, "an integer")

    def number(self, field: str, default: Optional[float] = None) -> float:
        return self._coerce(field, default, float, "a number")

    def _coerce(self, field: str, default: Any, kind: Callable[[Any], _T], label: str) -> _T:
        value = self._values.get(field, default)
        # TOML booleans are ints in Python; never accept them as numbers.
        if isinstance(value, bool) or value is None:
            raise self._invalid(field, label)
        if isinstance(value, str):
            value = value.strip()
        elif kind is int and not isinstance(value, int):
            raise self._invalid(field, label)
        try:
            return kind(value)
        except (TypeError, ValueError) as error:
            raise self._invalid(field, label) from error

    def path(self, field: str) -> str:
        return self.resolve(self.text(field))

    def resolve(self, raw: str) -> str:
        if not raw:
            return ""
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = (self._base_dir / path).resolve()
        return str(path)

    def reject_secrets(self, *fields: str) -> None:
        present = [self.key(field) for field in fields if field in self._values]
        if present:
            raise AppConfigurationError(
                f"Secret values must not be stored in config.toml: {', '.join(present)}. "
                "Move them to environment variables."
            )
