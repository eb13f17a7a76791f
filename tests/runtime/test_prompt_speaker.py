import concurrent.futures
import logging
import sys
import types
import unittest
from pathlib import Path
from unittest.mock import patch

# Import runtime.prompts without executing src/runtime/__init__.py.
_RUNTIME_DIR = Path(__file__).resolve().parents[2] / "src" / "runtime"
if "runtime" not in sys.modules:
    _pkg = types.ModuleType("runtime")
    _pkg.__path__ = [str(_RUNTIME_DIR)]  # type: ignore[attr-defined]
    sys.modules["runtime"] = _pkg


class _StubTTSError(Exception):
    pass


def _build_tts_stub():
    module = types.ModuleType("tts")
    module.TTSError = _StubTTSError
    return module


with patch.dict(sys.modules, {"tts": _build_tts_stub()}):
    from runtime.prompts import PromptSpeaker


class _SpeechServiceStub:
    def __init__(self, *, fail_on: str = ""):
        self.calls: list[tuple[str, float, float]] = []
        self._fail_on = fail_on

    def speak(self, text: str, *, volume: float = 1.0, rate: float = 1.0) -> None:
        if text == self._fail_on:
            raise _StubTTSError("voice unavailable")
        self.calls.append((text, volume, rate))


class PromptSpeakerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        self.addCleanup(self.executor.shutdown, wait=True)

    def test_prompts_are_spoken_in_order(self) -> None:
        service = _SpeechServiceStub()
        speaker = PromptSpeaker(service, executor=self.executor)

        speaker.speak("Breathe in and hold", volume=0.7, rate=0.8)
        speaker.speak("Next cycle - three, two, one...", volume=0.7, rate=0.8)
        self.executor.shutdown(wait=True)

        self.assertEqual(
            [
                ("Breathe in and hold", 0.7, 0.8),
                ("Next cycle - three, two, one...", 0.7, 0.8),
            ],
            service.calls,
        )

    def test_playback_error_is_logged_and_next_prompt_still_plays(self) -> None:
        service = _SpeechServiceStub(fail_on="broken")
        speaker = PromptSpeaker(
            service,
            logger=logging.getLogger("test.prompts"),
            executor=self.executor,
        )

        with self.assertLogs("test.prompts", level="ERROR"):
            speaker.speak("broken", volume=1.0, rate=0.8)
            speaker.speak("Session finished - well done", volume=1.0, rate=0.8)
            self.executor.shutdown(wait=True)

        self.assertEqual([("Session finished - well done", 1.0, 0.8)], service.calls)

    def test_speak_after_shutdown_is_dropped(self) -> None:
        service = _SpeechServiceStub()
        speaker = PromptSpeaker(
            service,
            logger=logging.getLogger("test.prompts"),
            executor=self.executor,
        )
        speaker.shutdown()

        with self.assertLogs("test.prompts", level="WARNING"):
            speaker.speak("Breathe in and hold", volume=0.5, rate=0.8)

        self.assertEqual([], service.calls)


if __name__ == "__main__":
    unittest.main()
