"""State, action, reason, and prompt constants used by the breathing session."""

from __future__ import annotations

DEFAULT_EXERCISE_SLUG = "default"
DEFAULT_EXERCISE_NAME = "Default Exercise"
# (breaths, hold seconds)
DEFAULT_EXERCISE_CYCLES: tuple[tuple[int, int], ...] = (
    (30, 60),
    (30, 90),
    (30, 120),
)

STATE_READY = "ready"
STATE_BREATHING = "breathing"
STATE_HOLDING = "holding"
STATE_RECOVERY = "recovery"
STATE_FINISHED = "finished"

COUNTDOWN_STATES: frozenset[str] = frozenset({STATE_HOLDING, STATE_RECOVERY})
ACTIVE_STATES: frozenset[str] = frozenset(
    {STATE_BREATHING, STATE_HOLDING, STATE_RECOVERY, STATE_FINISHED}
)

RECOVERY_SECONDS = 10
COUNTDOWN_INTERVAL_SECONDS = 1.0
LAST_BREATH_DELAY_SECONDS = 0.5
NEXT_CYCLE_DELAY_SECONDS = 4.0
FINISH_RESET_DELAY_SECONDS = 3.0
START_PROMPT_SECONDS = 3.0

SPEECH_RATE = 0.8

ACTION_START = "start"
ACTION_PRESS = "press"
ACTION_RELEASE = "release"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_TOGGLE_PAUSE = "toggle_pause"
ACTION_CANCEL = "cancel"
ACTION_SELECT_EXERCISE = "select_exercise"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_TRANSITION = "transition"

REASON_STARTED = "started"
REASON_PRESSED = "pressed"
REASON_RELEASED = "released"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_CANCELLED = "cancelled"
REASON_SELECTED = "selected"
REASON_ALREADY_ACTIVE = "already_active"
REASON_NOT_BREATHING = "not_breathing"
REASON_IS_PAUSED = "is_paused"
REASON_ALREADY_PRESSED = "already_pressed"
REASON_BREATHS_COMPLETE = "breaths_complete"
REASON_NO_COUNTDOWN = "no_countdown"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ACTIVE = "not_active"
REASON_SESSION_ACTIVE = "session_active"
REASON_UNKNOWN_EXERCISE = "unknown_exercise"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

EVENT_KIND_STATE = "state"
EVENT_KIND_TICK = "tick"
EVENT_KIND_DISPLAY = "display"
EVENT_KIND_PROMPT = "prompt"

DISPLAY_READY = "Ready"
DISPLAY_START = "Ready - press and hold to inhale"
DISPLAY_INHALE = "Inhale"
DISPLAY_EXHALE = "Exhale"
DISPLAY_HOLD = "Hold"
DISPLAY_RECOVERY = "Recovery Breath"

PROMPT_LAST_EXHALE = "That's the last exhale... and hold"
PROMPT_RECOVERY = "Breathe in and hold"
PROMPT_NEXT_CYCLE = "Next cycle - three, two, one..."
PROMPT_FINISHED = "Session finished - well done"

SETTINGS_STORAGE_KEY = "breathingAppSettings"
EXERCISES_STORAGE_KEY = "breathingAppExercises"

DEFAULT_SPEECH_VOLUME = 70
DEFAULT_MUSIC_VOLUME = 50
VOLUME_MIN = 0
VOLUME_MAX = 100
CHANNEL_SPEECH = "speech"
CHANNEL_MUSIC = "music"
VOLUME_CHANNELS: frozenset[str] = frozenset({CHANNEL_SPEECH, CHANNEL_MUSIC})
