"""Status and confirmation text builders for breathing session flows."""

from __future__ import annotations

from breathing import SessionSnapshot
from breathing.constants import (
    REASON_ALREADY_ACTIVE,
    REASON_NO_COUNTDOWN,
    REASON_NOT_ACTIVE,
    REASON_NOT_PAUSED,
    REASON_SESSION_ACTIVE,
    REASON_UNKNOWN_EXERCISE,
    STATE_BREATHING,
    STATE_FINISHED,
    STATE_HOLDING,
    STATE_RECOVERY,
)

CANCEL_CONFIRM_TEXT = "Cancel the current session? Your progress will be lost."
SWITCH_CONFIRM_TEXT = "Switching exercises will cancel your current session. Continue?"


def format_time(seconds: int) -> str:
    """Format a duration in seconds as `M:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{remainder:02d}"


def session_status_message(snapshot: SessionSnapshot) -> str:
    """Build a one-line status for the current session snapshot."""
    cycle = f"cycle {min(snapshot.cycle_index + 1, snapshot.cycle_count)}/{snapshot.cycle_count}"
    if snapshot.is_paused:
        return f"Paused ({format_time(snapshot.time_remaining)} left, {cycle})"
    if snapshot.state == STATE_BREATHING:
        return f"Breath {snapshot.breath_count}/{snapshot.breaths_target}, {cycle}"
    if snapshot.state == STATE_HOLDING:
        return f"Holding ({format_time(snapshot.time_remaining)} left, {cycle})"
    if snapshot.state == STATE_RECOVERY:
        if snapshot.timer_visible:
            return f"Recovery breath ({format_time(snapshot.time_remaining)} left, {cycle})"
        return f"Get ready for {cycle}"
    if snapshot.state == STATE_FINISHED:
        return "Session finished"
    return f"Ready: {snapshot.exercise_name} ({snapshot.cycle_count}x)"


def rejection_text(action: str, reason: str) -> str:
    if reason == REASON_ALREADY_ACTIVE:
        return "A session is already running."
    if reason == REASON_NO_COUNTDOWN:
        return "Pause is only available during a hold or recovery countdown."
    if reason == REASON_NOT_PAUSED:
        return "The session is not paused."
    if reason == REASON_NOT_ACTIVE:
        return "There is no active session."
    if reason == REASON_SESSION_ACTIVE:
        return SWITCH_CONFIRM_TEXT
    if reason == REASON_UNKNOWN_EXERCISE:
        return "That exercise does not exist."
    return f"'{action}' is not possible right now."
