"""Public exports for spoken-prompt components."""

from .config import TTSConfig, TTSConfigurationError
from .engine import PiperTTSEngine
from .errors import TTSError
from .output import SoundDeviceAudioOutput
from .service import SpeechService, apply_volume

__all__ = [
    "TTSConfig",
    "TTSConfigurationError",
    "TTSError",
    "PiperTTSEngine",
    "SoundDeviceAudioOutput",
    "SpeechService",
    "apply_volume",
]
