"""Where the Piper voice lives and which device plays it."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class TTSConfigurationError(Exception):
    """Raised when TTS configuration is invalid."""


@dataclass(frozen=True)
class TTSConfig:
    """`model_path` is a directory; `hf_filename` is the voice's repo-relative path."""
    model_path: str = ""
    hf_filename: str = ""
    hf_repo_id: str = ""
    hf_revision: str = "main"
    hf_token: Optional[str] = None
    output_device_index: Optional[int] = None

    @classmethod
    def from_settings(cls, settings, *, hf_token: Optional[str] = None) -> "TTSConfig":
        voice_dir, filename = _split_voice_location(
            (settings.model_path or "").strip(),
            (settings.hf_filename or "").strip(),
        )
        return cls(
            model_path=voice_dir,
            hf_filename=filename,
            hf_repo_id=(settings.hf_repo_id or "").strip(),
            hf_revision=(settings.hf_revision or "").strip() or "main",
            hf_token=hf_token,
            output_device_index=settings.output_device,
        )


def _split_voice_location(model_path: str, hf_filename: str) -> tuple[str, str]:
    if not model_path:
        raise TTSConfigurationError("tts.model_path cannot be empty")
    if hf_filename:
        return model_path, hf_filename

    # Without hf_filename, model_path must name the .onnx voice itself.
    voice = Path(model_path)
    if voice.suffix.lower() != ".onnx":
        raise TTSConfigurationError(
            "tts.hf_filename cannot be empty unless tts.model_path points at an .onnx voice"
        )
    return str(voice.parent), voice.name
