"""Protocols describing runtime-facing speech and configuration capabilities."""

from __future__ import annotations

from typing import Protocol


class SpeechServiceLike(Protocol):
    """Blocking synthesis-and-playback interface wrapped by the prompt speaker."""
    def speak(self, text: str, *, volume: float = 1.0, rate: float = 1.0) -> None:
        ...


class PromptSinkLike(Protocol):
    """Non-blocking sink for spoken prompts emitted at phase boundaries."""
    def speak(self, text: str, *, volume: float, rate: float) -> None:
        ...


class SessionSettingsLike(Protocol):
    """Subset of `[session]` settings required by the runtime loop."""
    poll_interval_seconds: float
