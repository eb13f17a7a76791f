from .constants import DEFAULT_EXERCISE_SLUG
from .exercises import (
    Cycle,
    Exercise,
    ExerciseCatalog,
    ExerciseNotFoundError,
    ExerciseValidationError,
    load_custom_exercises,
    save_custom_exercises,
    slugify,
)
from .scheduler import SessionScheduler
from .session import (
    BreathingSession,
    SessionAction,
    SessionActionResult,
    SessionEvent,
    SessionSnapshot,
    SessionState,
)
from .settings import Settings, SettingsStore
from .storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
)

__all__ = [
    "DEFAULT_EXERCISE_SLUG",
    "BreathingSession",
    "Cycle",
    "Exercise",
    "ExerciseCatalog",
    "ExerciseNotFoundError",
    "ExerciseValidationError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "SessionAction",
    "SessionActionResult",
    "SessionEvent",
    "SessionScheduler",
    "SessionSnapshot",
    "SessionState",
    "Settings",
    "SettingsStore",
    "StorageError",
    "load_custom_exercises",
    "save_custom_exercises",
    "slugify",
]
