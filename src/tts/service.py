"""High-level speech service that renders prompts at a given volume and rate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from .engine import PiperTTSEngine
    from .output import SoundDeviceAudioOutput


def apply_volume(wav: np.ndarray, volume: float) -> np.ndarray:
    """Scale float PCM by `volume`, clamped to [0, 1]."""
    gain = min(1.0, max(0.0, float(volume)))
    return (wav * gain).astype(np.float32, copy=False)


class SpeechService:
    """Combines synthesis and playback into a single speak operation."""
    def __init__(
        self,
        engine: "PiperTTSEngine",
        output: "SoundDeviceAudioOutput",
        logger: Optional[logging.Logger] = None,
    ):
        self._engine = engine
        self._output = output
        self._logger = logger or logging.getLogger(__name__)

    def speak(self, text: str, *, volume: float = 1.0, rate: float = 1.0) -> None:
        if volume <= 0:
            self._logger.debug("Speech muted, skipping prompt: %r", text)
            return
        wav, sample_rate_hz = self._engine.synthesize(text, rate=rate)
        wav = apply_volume(wav, volume)
        self._logger.debug(
            "Playing %d samples at %d Hz (volume=%.2f rate=%.2f)",
            len(wav),
            sample_rate_hz,
            volume,
            rate,
        )
        self._output.play(wav, sample_rate_hz)
