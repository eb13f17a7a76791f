"""Dispatcher that applies UI commands to the session, catalog, and settings."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from breathing import (
    BreathingSession,
    ExerciseCatalog,
    ExerciseValidationError,
    KeyValueStore,
    SessionActionResult,
    SettingsStore,
    save_custom_exercises,
)
from breathing.constants import (
    ACTION_SYNC,
    REASON_UNKNOWN_EXERCISE,
    STATE_READY,
    VOLUME_MAX,
    VOLUME_MIN,
)
from contracts.ui_protocol import (
    COMMAND_CANCEL,
    COMMAND_CREATE_EXERCISE,
    COMMAND_SELECT_EXERCISE,
    COMMAND_SYNC,
    COMMAND_UPDATE_SETTING,
    SESSION_COMMANDS,
)

from .messages import CANCEL_CONFIRM_TEXT, SWITCH_CONFIRM_TEXT, rejection_text
from .session_events import SessionEventProcessor
from .ui import RuntimeUIPublisher


class RuntimeCommandDispatcher:
    """Routes decoded command messages to their handlers and publishes results."""
    def __init__(
        self,
        *,
        logger: logging.Logger,
        session: BreathingSession,
        catalog: ExerciseCatalog,
        settings: SettingsStore,
        exercise_store: KeyValueStore,
        ui: RuntimeUIPublisher,
        event_processor: SessionEventProcessor,
    ):
        self._logger = logger
        self._session = session
        self._catalog = catalog
        self._settings = settings
        self._exercise_store = exercise_store
        self._ui = ui
        self._event_processor = event_processor

    def handle_command(self, command: dict[str, Any]) -> bool:
        """Apply one command; returns whether it took effect."""
        name = command.get("command")
        if not isinstance(name, str):
            self._logger.warning("Ignoring command without a name: %r", command)
            return False

        if name in SESSION_COMMANDS:
            return self._apply_session_action(name)
        if name == COMMAND_CANCEL:
            return self._handle_cancel(_is_confirmed(command))
        if name == COMMAND_SELECT_EXERCISE:
            return self._handle_select_exercise(command.get("slug"), _is_confirmed(command))
        if name == COMMAND_CREATE_EXERCISE:
            return self._handle_create_exercise(command.get("name"), command.get("cycles"))
        if name == COMMAND_UPDATE_SETTING:
            return self._handle_update_setting(command.get("channel"), command.get("value"))
        if name == COMMAND_SYNC:
            self.publish_sync()
            return True

        self._logger.warning("Unsupported command: %s", name)
        self._ui.publish_error(f"Unsupported command: {name}", command=name)
        return False

    def publish_sync(self) -> None:
        self._ui.publish_exercises(
            self._catalog.list(),
            selected=self._session.current_exercise,
        )
        self._ui.publish_settings(self._settings.current)
        self._ui.publish_session_update(self._session.snapshot(), action=ACTION_SYNC)

    def _apply_session_action(self, name: str) -> bool:
        result = self._session.apply(name)
        self._publish_result(result, command=name)
        return result.accepted

    def _handle_cancel(self, confirmed: bool) -> bool:
        if self._session.snapshot().is_active and not confirmed:
            self._ui.publish_confirm_required(COMMAND_CANCEL, message=CANCEL_CONFIRM_TEXT)
            return False
        result = self._session.cancel()
        self._publish_result(result, command=COMMAND_CANCEL)
        return result.accepted

    def _handle_select_exercise(self, slug: Any, confirmed: bool) -> bool:
        if not isinstance(slug, str) or slug not in self._catalog:
            self._ui.publish_error(
                rejection_text(COMMAND_SELECT_EXERCISE, REASON_UNKNOWN_EXERCISE),
                command=COMMAND_SELECT_EXERCISE,
            )
            return False

        if self._session.snapshot().is_active:
            if not confirmed:
                self._ui.publish_confirm_required(
                    COMMAND_SELECT_EXERCISE,
                    message=SWITCH_CONFIRM_TEXT,
                    slug=slug,
                )
                return False
            self._publish_result(self._session.cancel(), command=COMMAND_CANCEL)

        result = self._session.select_exercise(slug)
        self._publish_result(result, command=COMMAND_SELECT_EXERCISE)
        if result.accepted:
            self._ui.publish_exercises(self._catalog.list(), selected=slug)
        return result.accepted

    def _handle_create_exercise(self, name: Any, cycles: Any) -> bool:
        try:
            slug = self._catalog.register(name, cycles)
        except ExerciseValidationError as error:
            self._logger.info("Rejected exercise: %s", error)
            self._ui.publish_error(str(error), command=COMMAND_CREATE_EXERCISE)
            return False

        save_custom_exercises(self._catalog, self._exercise_store, self._logger)
        if self._session.state == STATE_READY:
            self._publish_result(
                self._session.select_exercise(slug),
                command=COMMAND_SELECT_EXERCISE,
            )
        self._ui.publish_exercises(
            self._catalog.list(),
            selected=self._session.current_exercise,
        )
        return True

    def _handle_update_setting(self, channel: Any, value: Any) -> bool:
        volume = _volume_value(value)
        if volume is None:
            self._logger.info("Rejected volume %r for %r", value, channel)
            self._ui.publish_error(
                f"Volume must be a number from {VOLUME_MIN} to {VOLUME_MAX}.",
                command=COMMAND_UPDATE_SETTING,
            )
            return False
        try:
            settings = self._settings.set_volume(str(channel), volume)
        except (TypeError, ValueError) as error:
            self._logger.info("Rejected setting update: %s", error)
            self._ui.publish_error(str(error), command=COMMAND_UPDATE_SETTING)
            return False
        self._ui.publish_settings(settings)
        return True

    def _publish_result(self, result: SessionActionResult, *, command: str) -> None:
        self._event_processor.handle_events(result.events)
        if not result.accepted:
            self._logger.debug("Command %s rejected: %s", command, result.reason)
        self._ui.publish_session_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            command=command,
        )


def _is_confirmed(command: dict[str, Any]) -> bool:
    return command.get("confirm") is True


def _volume_value(value: Any) -> Optional[int]:
    # JSON booleans decode to bool, a subclass of int.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or not VOLUME_MIN <= value <= VOLUME_MAX:
        return None
    return int(value)
