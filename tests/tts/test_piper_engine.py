import sys
import tempfile
import types
import unittest
from pathlib import Path
from unittest.mock import patch

import numpy as np

# Import tts modules without executing src/tts/__init__.py.
_TTS_DIR = Path(__file__).resolve().parents[2] / "src" / "tts"
if "tts" not in sys.modules:
    _pkg = types.ModuleType("tts")
    _pkg.__path__ = [str(_TTS_DIR)]  # type: ignore[attr-defined]
    sys.modules["tts"] = _pkg

from tts.config import TTSConfig
from tts.engine import PiperTTSEngine
from tts.errors import TTSError


class _VoiceStub:
    loaded: list[str] = []

    def __init__(self):
        self.config = types.SimpleNamespace(sample_rate=22050, length_scale=1.0)
        self.syn_configs: list[object] = []

    @classmethod
    def load(cls, model_path: str):
        cls.loaded.append(model_path)
        return cls()

    def synthesize(self, text: str, syn_config=None):
        self.syn_configs.append(syn_config)
        yield types.SimpleNamespace(audio_int16_bytes=np.array([16384, -16384], dtype=np.int16).tobytes())


class PiperTTSEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        _VoiceStub.loaded.clear()
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.root = Path(temp_dir.name)

    def _config(self, **overrides) -> TTSConfig:
        values = dict(
            model_path=str(self.root / "voices"),
            hf_filename="en_US-lessac-medium.onnx",
            hf_repo_id="rhasspy/piper-voices",
            hf_token="hf_abc",
        )
        values.update(overrides)
        return TTSConfig(**values)

    def test_downloads_missing_voice_files_with_token(self) -> None:
        calls: list[dict[str, object]] = []

        def fake_download(**kwargs):
            calls.append(kwargs)
            path = Path(kwargs["local_dir"]) / kwargs["filename"]
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"voice")
            return str(path)

        with patch("tts.voice_files.hf_hub_download", side_effect=fake_download):
            with patch("tts.engine.PiperVoice", _VoiceStub):
                PiperTTSEngine(self._config())

        self.assertEqual(
            ["en_US-lessac-medium.onnx", "en_US-lessac-medium.onnx.json"],
            [call["filename"] for call in calls],
        )
        self.assertTrue(all(call["token"] == "hf_abc" for call in calls))
        installed = self.root / "voices" / "en_US-lessac-medium.onnx"
        self.assertTrue(installed.is_file())
        self.assertEqual([str(installed)], _VoiceStub.loaded)

    def test_missing_files_without_repo_raise(self) -> None:
        with patch("tts.engine.PiperVoice", _VoiceStub):
            with self.assertRaises(TTSError):
                PiperTTSEngine(self._config(hf_repo_id=""))

    def test_synthesize_slows_speech_for_lower_rate(self) -> None:
        voice_dir = self.root / "voices"
        voice_dir.mkdir()
        (voice_dir / "en_US-lessac-medium.onnx").write_bytes(b"voice")
        (voice_dir / "en_US-lessac-medium.onnx.json").write_text("{}", encoding="utf-8")

        with patch("tts.engine.PiperVoice", _VoiceStub):
            engine = PiperTTSEngine(self._config())
            wav, sample_rate_hz = engine.synthesize("Breathe in and hold", rate=0.8)

        self.assertEqual(22050, sample_rate_hz)
        np.testing.assert_allclose([0.5, -0.5], wav)
        syn_config = engine._voice.syn_configs[-1]
        self.assertAlmostEqual(1.25, syn_config.length_scale)

    def test_synthesize_rejects_blank_text(self) -> None:
        voice_dir = self.root / "voices"
        voice_dir.mkdir()
        (voice_dir / "en_US-lessac-medium.onnx").write_bytes(b"voice")
        (voice_dir / "en_US-lessac-medium.onnx.json").write_text("{}", encoding="utf-8")

        with patch("tts.engine.PiperVoice", _VoiceStub):
            engine = PiperTTSEngine(self._config())

        with self.assertRaises(TTSError):
            engine.synthesize("   ")


if __name__ == "__main__":
    unittest.main()
