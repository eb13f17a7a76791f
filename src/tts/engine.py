"""Piper synthesis with a speaking-rate control for the spoken prompts."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import numpy as np
from piper import SynthesisConfig
from piper.voice import PiperVoice

from .config import TTSConfig
from .errors import TTSError
from .voice_files import ensure_voice_files


class PiperTTSEngine:
    """Loads one Piper voice (downloading it on first use) and renders text."""

    def __init__(
        self,
        config: TTSConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger(__name__)
        voice_files = ensure_voice_files(config, self._logger)

        try:
            self._voice = PiperVoice.load(str(voice_files.model))
        except Exception as error:
            raise TTSError(f"Cannot load Piper voice {voice_files.model}: {error}") from error

        voice_config = self._voice.config
        self._sample_rate_hz = int(voice_config.sample_rate)
        self._base_length_scale = float(getattr(voice_config, "length_scale", None) or 1.0)
        self._logger.info(
            "Piper voice ready: %s (%d Hz)",
            voice_files.model.name,
            self._sample_rate_hz,
        )

    @property
    def sample_rate_hz(self) -> int:
        return self._sample_rate_hz

    def synthesize(self, text: str, *, rate: float = 1.0) -> tuple[np.ndarray, int]:
        """Render `text` as mono float32 PCM; `rate` below 1.0 speaks slower."""
        if not text.strip():
            raise TTSError("Cannot synthesize an empty prompt")
        if rate <= 0:
            raise TTSError(f"Speech rate must be positive, got {rate}")

        # Piper stretches phoneme durations by length_scale.
        syn_config = SynthesisConfig(length_scale=self._base_length_scale / rate)
        try:
            pcm = _join_pcm(self._voice.synthesize(text, syn_config=syn_config))
        except TTSError:
            raise
        except Exception as error:
            raise TTSError(f"Piper synthesis failed for {text!r}: {error}") from error

        return pcm.astype(np.float32) / 32768.0, self._sample_rate_hz


def _join_pcm(chunks: Iterable[Any]) -> np.ndarray:
    parts = [_chunk_samples(chunk) for chunk in chunks]
    if not parts:
        raise TTSError("Piper produced no audio")
    pcm = np.concatenate(parts)
    if pcm.size == 0:
        raise TTSError("Piper produced an empty audio buffer")
    return pcm


def _chunk_samples(chunk: Any) -> np.ndarray:
    raw = getattr(chunk, "audio_int16_bytes", None)
    if raw is None:
        raw = getattr(chunk, "audio_int16_array", chunk)
    if isinstance(raw, np.ndarray):
        return raw.astype(np.int16, copy=False).ravel()
    try:
        return np.frombuffer(bytes(raw), dtype=np.int16)
    except (TypeError, ValueError) as error:
        raise TTSError(f"Unsupported Piper audio chunk: {type(chunk).__name__}") from error
