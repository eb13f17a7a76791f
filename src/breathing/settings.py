"""Volume preferences with per-field fallback and best-effort persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from .constants import (
    CHANNEL_MUSIC,
    CHANNEL_SPEECH,
    DEFAULT_MUSIC_VOLUME,
    DEFAULT_SPEECH_VOLUME,
    SETTINGS_STORAGE_KEY,
    VOLUME_CHANNELS,
    VOLUME_MAX,
    VOLUME_MIN,
)
from .storage import KeyValueStore, StorageError


@dataclass(frozen=True)
class Settings:
    speech_volume: int = DEFAULT_SPEECH_VOLUME
    music_volume: int = DEFAULT_MUSIC_VOLUME

    @property
    def speech_volume_fraction(self) -> float:
        return self.speech_volume / 100

    def to_record(self) -> dict[str, int]:
        return {"speechVolume": self.speech_volume, "musicVolume": self.music_volume}


def parse_settings_record(raw: Any) -> Settings:
    """Build settings from a decoded record, falling back field by field."""
    if not isinstance(raw, Mapping):
        return Settings()
    return Settings(
        speech_volume=_volume_or_default(raw.get("speechVolume"), DEFAULT_SPEECH_VOLUME),
        music_volume=_volume_or_default(raw.get("musicVolume"), DEFAULT_MUSIC_VOLUME),
    )


class SettingsStore:
    """In-memory settings mirrored into a key-value store on every change."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = SETTINGS_STORAGE_KEY,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._key = key
        self._logger = logger or logging.getLogger("breathing.settings")
        self._settings = Settings()

    @property
    def current(self) -> Settings:
        return self._settings

    def load(self) -> Settings:
        try:
            blob = self._store.get(self._key)
        except StorageError as error:
            self._logger.warning("Failed to read settings, using defaults: %s", error)
            blob = None

        decoded: Any = None
        if blob:
            try:
                decoded = json.loads(blob)
            except ValueError as error:
                self._logger.warning("Ignoring unparsable settings record: %s", error)

        self._settings = parse_settings_record(decoded)
        self._logger.info(
            "Settings loaded: speech=%d%% music=%d%%",
            self._settings.speech_volume,
            self._settings.music_volume,
        )
        return self._settings

    def set_volume(self, channel: str, value: Any) -> Settings:
        if channel not in VOLUME_CHANNELS:
            raise ValueError(f"Unknown volume channel: {channel!r}")
        volume = int(value)
        if channel == CHANNEL_SPEECH:
            self._settings = replace(self._settings, speech_volume=volume)
        elif channel == CHANNEL_MUSIC:
            self._settings = replace(self._settings, music_volume=volume)
        self._save()
        return self._settings

    def _save(self) -> None:
        try:
            self._store.set(self._key, json.dumps(self._settings.to_record()))
        except StorageError as error:
            self._logger.warning("Failed to persist settings: %s", error)


def _volume_or_default(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not VOLUME_MIN <= value <= VOLUME_MAX:
        return default
    return int(value)
