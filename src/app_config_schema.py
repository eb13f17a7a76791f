"""Frozen settings objects, one per config.toml table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_STORE_FILE = "data/breathing_store.json"


class AppConfigurationError(Exception):
    """config.toml cannot be read or holds an invalid value."""


@dataclass(frozen=True)
class StorageSettings:
    """Key-value store location from `[storage]`."""
    enabled: bool = True
    path: str = DEFAULT_STORE_FILE


@dataclass(frozen=True)
class SessionSettings:
    """Runtime loop and startup selection from `[session]`."""
    poll_interval_seconds: float = 0.1
    default_exercise: str = "default"


@dataclass(frozen=True)
class TTSSettings:
    """Piper voice and playback device from `[tts]`; off unless enabled."""
    enabled: bool = False
    model_path: str = ""
    hf_filename: str = ""
    hf_repo_id: str = ""
    hf_revision: str = "main"
    output_device: Optional[int] = None


@dataclass(frozen=True)
class UIServerSettings:
    """Breathing page server from `[ui_server]`; empty index_file means the bundled page."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Everything parsed from one config.toml, plus where it came from."""
    storage: StorageSettings
    session: SessionSettings
    tts: TTSSettings
    ui_server: UIServerSettings
    source_file: str


@dataclass(frozen=True)
class SecretConfig:
    """Values read from the environment only, never from config.toml."""
    hf_token: Optional[str]
