"""Web UI websocket event, command, and state constants."""

from __future__ import annotations

# Websocket event types (server -> page)
EVENT_HELLO = "hello"
EVENT_SESSION = "session"
EVENT_PROMPT = "prompt"
EVENT_EXERCISES = "exercises"
EVENT_SETTINGS = "settings"
EVENT_CONFIRM_REQUIRED = "confirm_required"
EVENT_ERROR = "error"

# Websocket message types (page -> server)
MESSAGE_COMMAND = "command"

COMMAND_START = "start"
COMMAND_PRESS = "press"
COMMAND_RELEASE = "release"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_TOGGLE_PAUSE = "toggle_pause"
COMMAND_CANCEL = "cancel"
COMMAND_SELECT_EXERCISE = "select_exercise"
COMMAND_CREATE_EXERCISE = "create_exercise"
COMMAND_UPDATE_SETTING = "update_setting"
COMMAND_SYNC = "sync"

SESSION_COMMANDS: frozenset[str] = frozenset(
    {
        COMMAND_START,
        COMMAND_PRESS,
        COMMAND_RELEASE,
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_TOGGLE_PAUSE,
    }
)

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_SESSION,
        EVENT_EXERCISES,
        EVENT_SETTINGS,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_EXERCISES,
    EVENT_SETTINGS,
    EVENT_ERROR,
    EVENT_SESSION,
)
