"""Single-threaded breathing session state machine driven by polled timers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from .constants import (
    ACTION_CANCEL,
    ACTION_PAUSE,
    ACTION_PRESS,
    ACTION_RELEASE,
    ACTION_RESUME,
    ACTION_SELECT_EXERCISE,
    ACTION_START,
    ACTION_TOGGLE_PAUSE,
    ACTIVE_STATES,
    COUNTDOWN_INTERVAL_SECONDS,
    COUNTDOWN_STATES,
    DEFAULT_EXERCISE_SLUG,
    DISPLAY_EXHALE,
    DISPLAY_HOLD,
    DISPLAY_INHALE,
    DISPLAY_READY,
    DISPLAY_RECOVERY,
    DISPLAY_START,
    EVENT_KIND_DISPLAY,
    EVENT_KIND_PROMPT,
    EVENT_KIND_STATE,
    EVENT_KIND_TICK,
    FINISH_RESET_DELAY_SECONDS,
    LAST_BREATH_DELAY_SECONDS,
    NEXT_CYCLE_DELAY_SECONDS,
    PROMPT_FINISHED,
    PROMPT_LAST_EXHALE,
    PROMPT_NEXT_CYCLE,
    PROMPT_RECOVERY,
    REASON_ALREADY_ACTIVE,
    REASON_ALREADY_PRESSED,
    REASON_BREATHS_COMPLETE,
    REASON_CANCELLED,
    REASON_IS_PAUSED,
    REASON_NO_COUNTDOWN,
    REASON_NOT_ACTIVE,
    REASON_NOT_BREATHING,
    REASON_NOT_PAUSED,
    REASON_PAUSED,
    REASON_PRESSED,
    REASON_RELEASED,
    REASON_RESUMED,
    REASON_SELECTED,
    REASON_SESSION_ACTIVE,
    REASON_STARTED,
    REASON_UNKNOWN_EXERCISE,
    REASON_UNSUPPORTED_ACTION,
    RECOVERY_SECONDS,
    START_PROMPT_SECONDS,
    STATE_BREATHING,
    STATE_FINISHED,
    STATE_HOLDING,
    STATE_READY,
    STATE_RECOVERY,
)
from .exercises import Cycle, Exercise, ExerciseCatalog
from .scheduler import SessionScheduler

SessionState = Literal["ready", "breathing", "holding", "recovery", "finished"]
SessionAction = Literal[
    "start",
    "press",
    "release",
    "pause",
    "resume",
    "toggle_pause",
    "cancel",
    "select_exercise",
]


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session exposed to runtime and UI publishers."""
    state: SessionState
    exercise: str
    exercise_name: str
    cycle_index: int
    cycle_count: int
    breath_count: int
    breaths_target: int
    hold_time: int
    is_paused: bool
    time_remaining: int
    display_text: str
    timer_visible: bool
    pressed: bool

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES


@dataclass(frozen=True)
class SessionEvent:
    """Observable side effect produced by an action or a timer firing."""
    kind: str
    snapshot: SessionSnapshot
    text: Optional[str] = None
    previous_state: Optional[str] = None


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a session action."""
    action: SessionAction
    accepted: bool
    reason: str
    snapshot: SessionSnapshot
    events: tuple[SessionEvent, ...] = ()


class BreathingSession:
    """Phase machine for breath cycles, holds, and recovery breaths.

    Transitions happen either synchronously inside an action method or when
    `poll()` fires a due timer. Every side effect the outside world needs to
    see (spoken prompts, display text, countdown ticks) is returned as a
    `SessionEvent`; the session never talks to speech or UI directly.
    """

    def __init__(
        self,
        catalog: ExerciseCatalog,
        *,
        exercise: str = DEFAULT_EXERCISE_SLUG,
        scheduler: Optional[SessionScheduler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._catalog = catalog
        self._scheduler = scheduler or SessionScheduler()
        self._logger = logger or logging.getLogger("breathing.session")
        catalog.get(exercise)

        self._current_exercise = exercise
        self._active_exercise: Optional[Exercise] = None
        self._state: SessionState = STATE_READY
        self._current_cycle = 0
        self._current_breath = 0
        self._is_paused = False
        self._pressed = False
        self._time_remaining = 0
        self._display_text = DISPLAY_READY
        self._timer_visible = False
        self._pending_events: list[SessionEvent] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_exercise(self) -> str:
        return self._current_exercise

    @property
    def scheduler(self) -> SessionScheduler:
        return self._scheduler

    def snapshot(self) -> SessionSnapshot:
        exercise = self._exercise()
        cycle = self._cycle()
        return SessionSnapshot(
            state=self._state,
            exercise=self._current_exercise,
            exercise_name=exercise.name,
            cycle_index=self._current_cycle,
            cycle_count=exercise.cycle_count,
            breath_count=self._current_breath,
            breaths_target=cycle.breaths if cycle else 0,
            hold_time=cycle.hold_time if cycle else 0,
            is_paused=self._is_paused,
            time_remaining=self._time_remaining,
            display_text=self._display_text,
            timer_visible=self._timer_visible,
            pressed=self._pressed,
        )

    def apply(self, action: str, **arguments: Any) -> SessionActionResult:
        handlers: dict[str, Callable[..., SessionActionResult]] = {
            ACTION_START: self.start,
            ACTION_PRESS: self.press,
            ACTION_RELEASE: self.release,
            ACTION_PAUSE: self.pause,
            ACTION_RESUME: self.resume,
            ACTION_TOGGLE_PAUSE: self.toggle_pause,
            ACTION_CANCEL: self.cancel,
            ACTION_SELECT_EXERCISE: self.select_exercise,
        }
        handler = handlers.get(action)
        if handler is None:
            return self._result(action, False, REASON_UNSUPPORTED_ACTION)  # type: ignore[arg-type]
        return handler(**arguments)

    def poll(self, now: Optional[float] = None) -> list[SessionEvent]:
        """Fire due timers and return the events they produced."""
        self._scheduler.run_due(now)
        return self._drain_events()

    def start(self) -> SessionActionResult:
        if self._state != STATE_READY:
            return self._result(ACTION_START, False, REASON_ALREADY_ACTIVE)

        self._scheduler.cancel_all()
        self._active_exercise = self._catalog.get(self._current_exercise)
        self._current_cycle = 0
        self._current_breath = 0
        self._is_paused = False
        self._pressed = False
        self._time_remaining = 0
        self._timer_visible = False
        self._display_text = DISPLAY_START
        self._set_state(STATE_BREATHING)
        self._scheduler.schedule_delay(START_PROMPT_SECONDS, self._on_start_prompt_elapsed)
        self._logger.info(
            "Session started: exercise=%s cycles=%d",
            self._current_exercise,
            self._exercise().cycle_count,
        )
        return self._result(ACTION_START, True, REASON_STARTED)

    def press(self) -> SessionActionResult:
        rejection = self._gesture_rejection()
        if rejection is None and self._pressed:
            rejection = REASON_ALREADY_PRESSED
        if rejection is not None:
            self._logger.debug("Ignoring press: %s", rejection)
            return self._result(ACTION_PRESS, False, rejection)

        self._pressed = True
        self._set_display(DISPLAY_INHALE)
        return self._result(ACTION_PRESS, True, REASON_PRESSED)

    def release(self) -> SessionActionResult:
        rejection = self._gesture_rejection()
        if rejection is not None:
            self._logger.debug("Ignoring release: %s", rejection)
            return self._result(ACTION_RELEASE, False, rejection)

        self._pressed = False
        self._current_breath += 1
        self._set_display(DISPLAY_EXHALE)

        cycle = self._cycle()
        if cycle is not None and self._current_breath >= cycle.breaths:
            self._logger.info(
                "Last breath of cycle %d recorded (%d breaths)",
                self._current_cycle + 1,
                self._current_breath,
            )
            # Pause does not touch this delay; it only stops countdowns.
            self._scheduler.schedule_delay(
                LAST_BREATH_DELAY_SECONDS,
                self._on_last_breath_elapsed,
            )
        return self._result(ACTION_RELEASE, True, REASON_RELEASED)

    def pause(self) -> SessionActionResult:
        if self._state not in COUNTDOWN_STATES or not self._scheduler.countdown_active:
            return self._result(ACTION_PAUSE, False, REASON_NO_COUNTDOWN)

        self._scheduler.cancel_countdown()
        self._is_paused = True
        self._emit(EVENT_KIND_STATE, previous_state=self._state)
        self._logger.info(
            "Session paused: state=%s remaining=%ss",
            self._state,
            self._time_remaining,
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def resume(self) -> SessionActionResult:
        if not self._is_paused:
            return self._result(ACTION_RESUME, False, REASON_NOT_PAUSED)

        self._is_paused = False
        if self._state in COUNTDOWN_STATES:
            self._scheduler.start_countdown(
                COUNTDOWN_INTERVAL_SECONDS,
                self._on_countdown_tick,
            )
        self._emit(EVENT_KIND_STATE, previous_state=self._state)
        self._logger.info(
            "Session resumed: state=%s remaining=%ss",
            self._state,
            self._time_remaining,
        )
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def toggle_pause(self) -> SessionActionResult:
        if self._is_paused:
            return self.resume()
        return self.pause()

    def cancel(self) -> SessionActionResult:
        if self._state == STATE_READY:
            return self._result(ACTION_CANCEL, False, REASON_NOT_ACTIVE)

        previous = self._state
        self._scheduler.cancel_all()
        self._timer_visible = False
        self._reset()
        self._logger.info("Session cancelled from %s", previous)
        return self._result(ACTION_CANCEL, True, REASON_CANCELLED)

    def select_exercise(self, slug: str = "") -> SessionActionResult:
        if slug not in self._catalog:
            return self._result(ACTION_SELECT_EXERCISE, False, REASON_UNKNOWN_EXERCISE)
        if self._state != STATE_READY:
            return self._result(ACTION_SELECT_EXERCISE, False, REASON_SESSION_ACTIVE)

        self._current_exercise = slug
        self._emit(EVENT_KIND_DISPLAY, text=self._display_text)
        self._logger.info("Selected exercise %s", slug)
        return self._result(ACTION_SELECT_EXERCISE, True, REASON_SELECTED)

    def _on_start_prompt_elapsed(self, fired_at: float) -> None:
        del fired_at
        if self._state == STATE_BREATHING and self._display_text == DISPLAY_START:
            self._set_display(DISPLAY_READY)

    def _on_last_breath_elapsed(self, fired_at: float) -> None:
        if self._state != STATE_BREATHING:
            return
        self._emit(EVENT_KIND_PROMPT, text=PROMPT_LAST_EXHALE)
        self._enter_holding(fired_at)

    def _enter_holding(self, started_at: float) -> None:
        cycle = self._cycle()
        if cycle is None:
            self._finish(started_at)
            return
        self._time_remaining = cycle.hold_time
        self._display_text = DISPLAY_HOLD
        self._timer_visible = True
        self._set_state(STATE_HOLDING)
        self._scheduler.start_countdown(
            COUNTDOWN_INTERVAL_SECONDS,
            self._on_countdown_tick,
            start_at=started_at,
        )

    def _enter_recovery(self, started_at: float) -> None:
        self._time_remaining = RECOVERY_SECONDS
        self._display_text = DISPLAY_RECOVERY
        self._timer_visible = True
        self._set_state(STATE_RECOVERY)
        self._emit(EVENT_KIND_PROMPT, text=PROMPT_RECOVERY)
        self._scheduler.start_countdown(
            COUNTDOWN_INTERVAL_SECONDS,
            self._on_countdown_tick,
            start_at=started_at,
        )

    def _on_countdown_tick(self, fired_at: float) -> None:
        if self._is_paused:
            return
        if self._state not in COUNTDOWN_STATES:
            self._scheduler.cancel_countdown()
            return

        self._time_remaining = max(0, self._time_remaining - 1)
        self._emit(EVENT_KIND_TICK)
        if self._time_remaining > 0:
            return

        self._scheduler.cancel_countdown()
        if self._state == STATE_HOLDING:
            self._enter_recovery(fired_at)
        else:
            self._next_cycle(fired_at)

    def _next_cycle(self, fired_at: float) -> None:
        self._current_cycle += 1
        self._current_breath = 0
        if self._current_cycle >= self._exercise().cycle_count:
            self._finish(fired_at)
            return

        self._timer_visible = False
        self._emit(EVENT_KIND_DISPLAY, text=self._display_text)
        self._emit(EVENT_KIND_PROMPT, text=PROMPT_NEXT_CYCLE)
        self._logger.info(
            "Cycle %d of %d up next",
            self._current_cycle + 1,
            self._exercise().cycle_count,
        )
        self._scheduler.schedule_delay(
            NEXT_CYCLE_DELAY_SECONDS,
            self._on_next_cycle_elapsed,
            start_at=fired_at,
        )

    def _on_next_cycle_elapsed(self, fired_at: float) -> None:
        del fired_at
        if self._state != STATE_RECOVERY:
            return
        self._pressed = False
        self._display_text = DISPLAY_READY
        self._set_state(STATE_BREATHING)

    def _finish(self, fired_at: float) -> None:
        self._scheduler.cancel_countdown()
        self._time_remaining = 0
        self._timer_visible = False
        self._set_state(STATE_FINISHED)
        self._emit(EVENT_KIND_PROMPT, text=PROMPT_FINISHED)
        self._logger.info("Session finished: exercise=%s", self._current_exercise)
        self._scheduler.schedule_delay(
            FINISH_RESET_DELAY_SECONDS,
            self._on_finish_elapsed,
            start_at=fired_at,
        )

    def _on_finish_elapsed(self, fired_at: float) -> None:
        del fired_at
        if self._state == STATE_FINISHED:
            self._reset()

    def _reset(self) -> None:
        self._scheduler.cancel_all()
        self._active_exercise = None
        self._current_cycle = 0
        self._current_breath = 0
        self._is_paused = False
        self._pressed = False
        self._time_remaining = 0
        self._timer_visible = False
        self._display_text = DISPLAY_READY
        self._set_state(STATE_READY)

    def _gesture_rejection(self) -> Optional[str]:
        if self._state != STATE_BREATHING:
            return REASON_NOT_BREATHING
        if self._is_paused:
            return REASON_IS_PAUSED
        cycle = self._cycle()
        if cycle is None or self._current_breath >= cycle.breaths:
            return REASON_BREATHS_COMPLETE
        return None

    def _exercise(self) -> Exercise:
        if self._active_exercise is not None:
            return self._active_exercise
        return self._catalog.get(self._current_exercise)

    def _cycle(self) -> Optional[Cycle]:
        cycles = self._exercise().cycles
        if 0 <= self._current_cycle < len(cycles):
            return cycles[self._current_cycle]
        return None

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        self._emit(EVENT_KIND_STATE, previous_state=previous)
        if previous != state:
            self._logger.info("Session state: %s -> %s", previous, state)

    def _set_display(self, text: str) -> None:
        self._display_text = text
        self._emit(EVENT_KIND_DISPLAY, text=text)

    def _emit(
        self,
        kind: str,
        *,
        text: Optional[str] = None,
        previous_state: Optional[str] = None,
    ) -> None:
        self._pending_events.append(
            SessionEvent(
                kind=kind,
                snapshot=self.snapshot(),
                text=text,
                previous_state=previous_state,
            )
        )

    def _drain_events(self) -> list[SessionEvent]:
        events = self._pending_events
        self._pending_events = []
        return events

    def _result(
        self,
        action: SessionAction,
        accepted: bool,
        reason: str,
    ) -> SessionActionResult:
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
            events=tuple(self._drain_events()),
        )
