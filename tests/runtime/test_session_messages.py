import logging
import sys
import types
import unittest
from dataclasses import replace
from pathlib import Path

from breathing import SessionEvent, SessionSnapshot, Settings

# Import runtime modules without executing src/runtime/__init__.py.
_RUNTIME_DIR = Path(__file__).resolve().parents[2] / "src" / "runtime"
if "runtime" not in sys.modules:
    _pkg = types.ModuleType("runtime")
    _pkg.__path__ = [str(_RUNTIME_DIR)]  # type: ignore[attr-defined]
    sys.modules["runtime"] = _pkg

from runtime.messages import format_time, rejection_text, session_status_message
from runtime.session_events import SessionEventDependencies, SessionEventProcessor
from runtime.ui import RuntimeUIPublisher


def _snapshot(**overrides) -> SessionSnapshot:
    values = dict(
        state="ready",
        exercise="default",
        exercise_name="Default",
        cycle_index=0,
        cycle_count=4,
        breath_count=0,
        breaths_target=30,
        hold_time=60,
        is_paused=False,
        time_remaining=0,
        display_text="",
        timer_visible=False,
        pressed=False,
    )
    values.update(overrides)
    return SessionSnapshot(**values)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))


class _PromptSinkStub:
    def __init__(self):
        self.spoken: list[tuple[str, float, float]] = []

    def speak(self, text: str, *, volume: float, rate: float) -> None:
        self.spoken.append((text, volume, rate))


class MessageTextTests(unittest.TestCase):
    def test_format_time(self) -> None:
        self.assertEqual("0:00", format_time(0))
        self.assertEqual("1:05", format_time(65))
        self.assertEqual("10:00", format_time(600))
        self.assertEqual("0:00", format_time(-3))

    def test_status_follows_state(self) -> None:
        breathing = _snapshot(state="breathing", breath_count=12)
        holding = _snapshot(state="holding", cycle_index=1, time_remaining=75, timer_visible=True)

        self.assertEqual("Ready: Default (4x)", session_status_message(_snapshot()))
        self.assertEqual("Breath 12/30, cycle 1/4", session_status_message(breathing))
        self.assertEqual("Holding (1:15 left, cycle 2/4)", session_status_message(holding))
        self.assertEqual(
            "Paused (1:15 left, cycle 2/4)",
            session_status_message(replace(holding, is_paused=True)),
        )
        self.assertEqual("Session finished", session_status_message(_snapshot(state="finished")))

    def test_recovery_status_distinguishes_countdown_from_last_breath(self) -> None:
        counting = _snapshot(state="recovery", time_remaining=10, timer_visible=True)
        last_breath = _snapshot(state="recovery", cycle_index=3)

        self.assertEqual("Recovery breath (0:10 left, cycle 1/4)", session_status_message(counting))
        self.assertEqual("Get ready for cycle 4/4", session_status_message(last_breath))

    def test_unknown_rejection_reason_names_the_action(self) -> None:
        self.assertEqual("'press' is not possible right now.", rejection_text("press", "mystery"))


class SessionEventProcessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ui_server = _UIServerStub()
        self.sink = _PromptSinkStub()
        self.settings = Settings(speech_volume=40, music_volume=10)
        self.processor = SessionEventProcessor(
            SessionEventDependencies(
                prompt_sink=self.sink,
                logger=logging.getLogger("test.session_events"),
                ui=RuntimeUIPublisher(self.ui_server),
                current_settings=lambda: self.settings,
            )
        )

    def test_prompt_is_spoken_slowly_at_current_speech_volume(self) -> None:
        self.processor.handle_event(SessionEvent("prompt", _snapshot(), text="Breathe in and hold"))

        self.assertEqual([("Breathe in and hold", 0.4, 0.8)], self.sink.spoken)
        self.assertEqual(
            [("prompt", {"text": "Breathe in and hold", "volume": 0.4, "rate": 0.8})],
            self.ui_server.events,
        )

    def test_volume_change_applies_to_next_prompt(self) -> None:
        self.settings = Settings(speech_volume=100, music_volume=10)

        self.processor.handle_event(SessionEvent("prompt", _snapshot(), text="Let go"))

        self.assertEqual(1.0, self.sink.spoken[0][1])

    def test_empty_prompt_is_dropped(self) -> None:
        self.processor.handle_event(SessionEvent("prompt", _snapshot(), text=""))

        self.assertEqual([], self.sink.spoken)
        self.assertEqual([], self.ui_server.events)

    def test_ticks_and_transitions_publish_session_updates(self) -> None:
        holding = _snapshot(state="holding", time_remaining=59, timer_visible=True)
        self.processor.handle_events(
            [
                SessionEvent("state", holding, previous_state="breathing"),
                SessionEvent("tick", holding),
            ]
        )

        actions = [payload["action"] for kind, payload in self.ui_server.events if kind == "session"]
        self.assertEqual(["transition", "tick"], actions)
        self.assertEqual("0:59", self.ui_server.events[-1][1]["timer_text"])
        self.assertEqual([], self.sink.spoken)

    def test_prompts_still_reach_page_without_speaker(self) -> None:
        processor = SessionEventProcessor(
            SessionEventDependencies(
                prompt_sink=None,
                logger=logging.getLogger("test.session_events"),
                ui=RuntimeUIPublisher(self.ui_server),
                current_settings=lambda: self.settings,
            )
        )

        processor.handle_event(SessionEvent("prompt", _snapshot(), text="Let go"))

        self.assertEqual("prompt", self.ui_server.events[0][0])


if __name__ == "__main__":
    unittest.main()
