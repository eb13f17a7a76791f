from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    SecretConfig,
    SessionSettings,
    StorageSettings,
    TTSSettings,
    UIServerSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "SecretConfig",
    "SessionSettings",
    "StorageSettings",
    "TTSSettings",
    "UIServerSettings",
    "load_app_config",
    "load_secret_config",
    "resolve_config_path",
]


def _absolute(raw: str | Path) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else (Path.cwd() / path).resolve()


def _bundled_config() -> Path | None:
    bundle_root = getattr(sys, "_MEIPASS", None)
    if not bundle_root:
        return None
    candidate = Path(bundle_root) / DEFAULT_CONFIG_FILE
    return candidate if candidate.exists() else None


def resolve_config_path(config_path: str | None = None) -> Path:
    """Explicit argument, then $APP_CONFIG_FILE, then ./config.toml.

    A frozen bundle's own config.toml is used only when nothing was named
    explicitly and ./config.toml is absent.
    """
    named = config_path or os.getenv("APP_CONFIG_FILE")
    path = _absolute(named or DEFAULT_CONFIG_FILE)
    if named or path.exists():
        return path
    return _bundled_config() or path


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.is_file():
        reason = "is not a file" if path.exists() else "not found"
        raise AppConfigurationError(f"Config file {reason}: {path}")

    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to read config {path}: {error}") from error

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))


def load_secret_config(
    *,
    environ: Mapping[str, str] | None = None,
) -> SecretConfig:
    """Secrets come from the environment only; blank values count as unset."""
    env = os.environ if environ is None else environ
    return SecretConfig(hf_token=(env.get("HF_TOKEN") or "").strip() or None)
