"""Runtime orchestration loop for queued UI commands and session timers."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from breathing import BreathingSession, ExerciseCatalog, KeyValueStore, SettingsStore

from .commands import RuntimeCommandDispatcher
from .contracts import PromptSinkLike, SessionSettingsLike
from .session_events import SessionEventDependencies, SessionEventProcessor
from .ui import RuntimeUIPublisher, UIServerLike


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    session_settings: SessionSettingsLike
    session: BreathingSession
    catalog: ExerciseCatalog
    settings: SettingsStore
    exercise_store: KeyValueStore
    prompt_sink: Optional[PromptSinkLike]
    ui_server: Optional[UIServerLike]
    hooks: RuntimeHooks


class RuntimeEngine:
    """Single-threaded loop: drain commands in arrival order, then poll timers."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._session = bootstrap.session
        self._commands: Queue[dict[str, Any]] = Queue()
        self._stop_requested = threading.Event()

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._event_processor = SessionEventProcessor(
            SessionEventDependencies(
                prompt_sink=bootstrap.prompt_sink,
                logger=self._logger,
                ui=self._ui,
                current_settings=lambda: bootstrap.settings.current,
            )
        )
        self._dispatcher = RuntimeCommandDispatcher(
            logger=self._logger,
            session=bootstrap.session,
            catalog=bootstrap.catalog,
            settings=bootstrap.settings,
            exercise_store=bootstrap.exercise_store,
            ui=self._ui,
            event_processor=self._event_processor,
        )

    def submit(self, command: dict[str, Any]) -> None:
        """Thread-safe entry point for commands from any front end."""
        self._commands.put(command)

    def request_stop(self) -> None:
        self._stop_requested.set()

    def run(self) -> int:
        self._bootstrap.hooks.setup_signal_handlers(self.request_stop)
        self._dispatcher.publish_sync()
        self._logger.info("Ready! Waiting for commands ...")

        try:
            while not self._stop_requested.is_set():
                self.run_once(timeout=self._bootstrap.session_settings.poll_interval_seconds)
            self._logger.info("Shutdown requested.")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def run_once(self, timeout: float = 0.0) -> None:
        """Process at most one queued command, then fire due session timers."""
        command = self._poll_command(timeout)
        if command is not None:
            self._handle_command(command)
        self._emit_session_events()

    def _poll_command(self, timeout: float) -> Optional[dict[str, Any]]:
        try:
            if timeout <= 0:
                return self._commands.get_nowait()
            return self._commands.get(timeout=timeout)
        except Empty:
            return None

    def _handle_command(self, command: dict[str, Any]) -> None:
        # Fire timers that came due before this command arrived.
        self._emit_session_events()
        try:
            self._dispatcher.handle_command(command)
        except Exception as error:
            self._logger.error("Command %r failed: %s", command.get("command"), error, exc_info=True)
            self._ui.publish_error(f"Command failed: {error}")

    def _emit_session_events(self) -> None:
        events = self._session.poll()
        if events:
            self._event_processor.handle_events(events)

    def _shutdown(self) -> None:
        self._session.scheduler.cancel_all()

        prompt_sink = self._bootstrap.prompt_sink
        shutdown = getattr(prompt_sink, "shutdown", None)
        if callable(shutdown):
            self._logger.info("Stopping speech worker...")
            shutdown()

        ui_server = self._bootstrap.ui_server
        stop = getattr(ui_server, "stop", None)
        if callable(stop):
            self._logger.info("Stopping UI server...")
            try:
                stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
