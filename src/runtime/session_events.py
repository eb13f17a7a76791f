"""Routes session events to the prompt speaker and the UI publisher."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from breathing import SessionEvent, Settings
from breathing.constants import (
    ACTION_TICK,
    ACTION_TRANSITION,
    EVENT_KIND_PROMPT,
    EVENT_KIND_TICK,
    SPEECH_RATE,
)

from .contracts import PromptSinkLike
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class SessionEventDependencies:
    """Dependencies required for processing session events."""
    prompt_sink: Optional[PromptSinkLike]
    logger: logging.Logger
    ui: RuntimeUIPublisher
    current_settings: Callable[[], Settings]


class SessionEventProcessor:
    """Speaks prompts at the configured volume and mirrors state to the UI."""
    def __init__(self, dependencies: SessionEventDependencies):
        self._dependencies = dependencies

    def handle_events(self, events: Iterable[SessionEvent]) -> None:
        for event in events:
            self.handle_event(event)

    def handle_event(self, event: SessionEvent) -> None:
        deps = self._dependencies
        if event.kind == EVENT_KIND_PROMPT:
            self._speak(event.text or "")
            return

        action = ACTION_TICK if event.kind == EVENT_KIND_TICK else ACTION_TRANSITION
        deps.ui.publish_session_update(event.snapshot, action=action)

    def _speak(self, text: str) -> None:
        deps = self._dependencies
        if not text:
            return
        volume = deps.current_settings().speech_volume_fraction
        deps.logger.info("Prompt: %s", text)
        deps.ui.publish_prompt(text, volume=volume, rate=SPEECH_RATE)
        if deps.prompt_sink is not None:
            deps.prompt_sink.speak(text, volume=volume, rate=SPEECH_RATE)
