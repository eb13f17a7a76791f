from __future__ import annotations

from typing import Any, Optional, Protocol

from breathing import Exercise, SessionSnapshot, Settings
from contracts.ui_protocol import (
    EVENT_CONFIRM_REQUIRED,
    EVENT_ERROR,
    EVENT_EXERCISES,
    EVENT_PROMPT,
    EVENT_SESSION,
    EVENT_SETTINGS,
)

from .messages import format_time, session_status_message


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_session_update(
        self,
        snapshot: SessionSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        command: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "state": snapshot.state,
            "exercise": snapshot.exercise,
            "exercise_name": snapshot.exercise_name,
            "cycle_index": snapshot.cycle_index,
            "cycle_count": snapshot.cycle_count,
            "breath_count": snapshot.breath_count,
            "breaths_target": snapshot.breaths_target,
            "is_paused": snapshot.is_paused,
            "time_remaining": snapshot.time_remaining,
            "timer_text": format_time(snapshot.time_remaining),
            "timer_visible": snapshot.timer_visible,
            "display_text": snapshot.display_text,
            "pressed": snapshot.pressed,
            "message": session_status_message(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if command:
            payload["command"] = command
        self.publish(EVENT_SESSION, **payload)

    def publish_prompt(self, text: str, *, volume: float, rate: float) -> None:
        self.publish(EVENT_PROMPT, text=text, volume=volume, rate=rate)

    def publish_exercises(
        self,
        entries: list[tuple[str, Exercise]],
        *,
        selected: str,
    ) -> None:
        self.publish(
            EVENT_EXERCISES,
            selected=selected,
            exercises=[
                {"slug": slug, **exercise.to_record()} for slug, exercise in entries
            ],
        )

    def publish_settings(self, settings: Settings) -> None:
        self.publish(EVENT_SETTINGS, **settings.to_record())

    def publish_confirm_required(self, command: str, *, message: str, **payload: Any) -> None:
        self.publish(EVENT_CONFIRM_REQUIRED, command=command, message=message, **payload)

    def publish_error(self, message: str, *, command: Optional[str] = None) -> None:
        payload: dict[str, Any] = {"message": message}
        if command:
            payload["command"] = command
        self.publish(EVENT_ERROR, **payload)
