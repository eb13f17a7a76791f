"""Sounddevice-backed playback for synthesized prompts."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import TTSError


class SoundDeviceAudioOutput:
    """Plays one mono prompt at a time on the chosen output device."""

    def __init__(
        self,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._device = output_device_index
        self._logger = logger or logging.getLogger(__name__)

    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = True) -> None:
        samples = np.asarray(wav, dtype=np.float32)
        if samples.ndim != 1 or samples.size == 0:
            raise TTSError(f"Playback needs non-empty mono audio, got shape {samples.shape}")
        if sample_rate_hz <= 0:
            raise TTSError(f"Invalid sample rate: {sample_rate_hz}")

        try:
            sd.play(samples, samplerate=sample_rate_hz, device=self._device, blocking=blocking)
        except sd.PortAudioError as error:
            raise TTSError(f"Audio device rejected playback: {error}") from error
        except Exception as error:
            raise TTSError(f"Audio playback failed: {error}") from error

    def stop(self) -> None:
        """Cut off whatever is playing; failures only get logged."""
        try:
            sd.stop()
        except Exception as error:
            self._logger.warning("Failed to stop audio playback: %s", error)
