"""Exercise definitions and the catalog of built-in and user-created exercises."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .constants import (
    DEFAULT_EXERCISE_CYCLES,
    DEFAULT_EXERCISE_NAME,
    DEFAULT_EXERCISE_SLUG,
    EXERCISES_STORAGE_KEY,
)
from .storage import KeyValueStore, StorageError

_WHITESPACE_RUN = re.compile(r"\s+")


class ExerciseValidationError(ValueError):
    """Raised when an exercise definition is rejected at creation time."""


class ExerciseNotFoundError(LookupError):
    """Raised when a slug is not present in the catalog."""


@dataclass(frozen=True)
class Cycle:
    """One breath count followed by a hold of `hold_time` seconds."""
    breaths: int
    hold_time: int

    def to_record(self) -> dict[str, int]:
        return {"breaths": self.breaths, "holdTime": self.hold_time}


@dataclass(frozen=True)
class Exercise:
    name: str
    cycles: tuple[Cycle, ...]

    @property
    def cycle_count(self) -> int:
        return len(self.cycles)

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cycles": [cycle.to_record() for cycle in self.cycles],
        }


def slugify(name: str) -> str:
    """Lowercase the trimmed name and collapse whitespace runs into hyphens."""
    return _WHITESPACE_RUN.sub("-", name.strip().lower())


def build_exercise(name: Any, cycles: Any) -> Exercise:
    """Validate raw input and build an immutable exercise."""
    if not isinstance(name, str) or not name.strip():
        raise ExerciseValidationError("Exercise name cannot be empty")
    if isinstance(cycles, (str, bytes)) or not isinstance(cycles, Iterable):
        raise ExerciseValidationError("Exercise cycles must be a list")

    parsed: list[Cycle] = []
    for index, raw in enumerate(cycles):
        parsed.append(_parse_cycle(raw, index))
    if not parsed:
        raise ExerciseValidationError("Exercise needs at least one cycle")
    return Exercise(name=name.strip(), cycles=tuple(parsed))


def default_exercise() -> Exercise:
    return Exercise(
        name=DEFAULT_EXERCISE_NAME,
        cycles=tuple(
            Cycle(breaths=breaths, hold_time=hold)
            for breaths, hold in DEFAULT_EXERCISE_CYCLES
        ),
    )


class ExerciseCatalog:
    """Mapping from slug to exercise; the built-in entry is always present."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("breathing.catalog")
        self._exercises: dict[str, Exercise] = {
            DEFAULT_EXERCISE_SLUG: default_exercise(),
        }

    def __contains__(self, slug: object) -> bool:
        return slug in self._exercises

    def __len__(self) -> int:
        return len(self._exercises)

    def register(self, name: Any, cycles: Any) -> str:
        exercise = build_exercise(name, cycles)
        slug = slugify(exercise.name)
        if slug == DEFAULT_EXERCISE_SLUG:
            raise ExerciseValidationError(
                f"Exercise name {exercise.name!r} is reserved for the built-in exercise"
            )
        replaced = slug in self._exercises
        self._exercises[slug] = exercise
        self._logger.info(
            "%s exercise %s (%d cycles)",
            "Replaced" if replaced else "Registered",
            slug,
            exercise.cycle_count,
        )
        return slug

    def get(self, slug: str) -> Exercise:
        try:
            return self._exercises[slug]
        except KeyError:
            raise ExerciseNotFoundError(f"Unknown exercise: {slug}") from None

    def list(self) -> list[tuple[str, Exercise]]:
        entries = [(DEFAULT_EXERCISE_SLUG, self._exercises[DEFAULT_EXERCISE_SLUG])]
        entries.extend(
            (slug, exercise)
            for slug, exercise in self._exercises.items()
            if slug != DEFAULT_EXERCISE_SLUG
        )
        return entries

    def serialize(self) -> str:
        records = {
            slug: exercise.to_record()
            for slug, exercise in self._exercises.items()
            if slug != DEFAULT_EXERCISE_SLUG
        }
        return json.dumps(records)

    def deserialize(self, blob: Optional[str]) -> int:
        """Merge stored entries; returns how many were loaded."""
        if not blob:
            return 0
        try:
            decoded = json.loads(blob)
        except (TypeError, ValueError) as error:
            self._logger.warning("Ignoring unparsable exercise record: %s", error)
            return 0
        if not isinstance(decoded, Mapping):
            self._logger.warning("Ignoring exercise record that is not an object")
            return 0

        loaded = 0
        for slug, record in decoded.items():
            if slug == DEFAULT_EXERCISE_SLUG:
                self._logger.warning("Skipping stored entry for reserved slug %r", slug)
                continue
            if not isinstance(slug, str) or not slug:
                continue
            if not isinstance(record, Mapping):
                self._logger.warning("Skipping malformed exercise %r", slug)
                continue
            try:
                exercise = build_exercise(record.get("name"), record.get("cycles"))
            except ExerciseValidationError as error:
                self._logger.warning("Skipping invalid exercise %r: %s", slug, error)
                continue
            self._exercises[slug] = exercise
            loaded += 1
        return loaded


def load_custom_exercises(
    catalog: ExerciseCatalog,
    store: KeyValueStore,
    logger: Optional[logging.Logger] = None,
) -> int:
    log = logger or logging.getLogger("breathing.catalog")
    try:
        blob = store.get(EXERCISES_STORAGE_KEY)
    except StorageError as error:
        log.warning("Failed to read custom exercises: %s", error)
        return 0
    loaded = catalog.deserialize(blob)
    if loaded:
        log.info("Loaded %d custom exercises", loaded)
    return loaded


def save_custom_exercises(
    catalog: ExerciseCatalog,
    store: KeyValueStore,
    logger: Optional[logging.Logger] = None,
) -> bool:
    log = logger or logging.getLogger("breathing.catalog")
    try:
        store.set(EXERCISES_STORAGE_KEY, catalog.serialize())
    except StorageError as error:
        log.warning("Failed to persist custom exercises: %s", error)
        return False
    return True


def _parse_cycle(raw: Any, index: int) -> Cycle:
    if isinstance(raw, Cycle):
        breaths, hold_time = raw.breaths, raw.hold_time
    elif isinstance(raw, Mapping):
        breaths = raw.get("breaths")
        hold_time = raw.get("holdTime", raw.get("hold_time"))
    else:
        raise ExerciseValidationError(f"Cycle {index + 1} must be an object")

    return Cycle(
        breaths=_positive_int(breaths, f"Cycle {index + 1} breaths"),
        hold_time=_positive_int(hold_time, f"Cycle {index + 1} hold time"),
    )


def _positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ExerciseValidationError(f"{field} must be an integer")
    if value <= 0:
        raise ExerciseValidationError(f"{field} must be greater than zero")
    return value
