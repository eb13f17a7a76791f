"""Poll-driven countdown and one-shot delay slots with epoch-guarded firing."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

SLOT_COUNTDOWN = "countdown"
SLOT_DELAY = "delay"

# Receives the scheduled due time of the firing, not the poll time.
FiringCallback = Callable[[float], None]


@dataclass
class _Timer:
    slot: str
    epoch: int
    due_at: float
    interval: Optional[float]
    callback: FiringCallback


@dataclass(frozen=True)
class TimerToken:
    """Identifies one scheduled timer; stale once its slot epoch moves on."""
    slot: str
    epoch: int


class SessionScheduler:
    """Single-threaded scheduler with one recurring and one one-shot slot.

    Nothing runs on its own: `run_due()` fires every timer whose due time has
    passed, in due-time order. Scheduling or cancelling a slot bumps its
    epoch, so a firing captured before the change is dropped.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._epochs: dict[str, int] = {SLOT_COUNTDOWN: 0, SLOT_DELAY: 0}
        self._timers: dict[str, Optional[_Timer]] = {
            SLOT_COUNTDOWN: None,
            SLOT_DELAY: None,
        }

    def now(self) -> float:
        return self._clock()

    @property
    def countdown_active(self) -> bool:
        return self._timers[SLOT_COUNTDOWN] is not None

    @property
    def delay_pending(self) -> bool:
        return self._timers[SLOT_DELAY] is not None

    def start_countdown(
        self,
        interval_seconds: float,
        callback: FiringCallback,
        *,
        start_at: Optional[float] = None,
    ) -> TimerToken:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        return self._arm(
            SLOT_COUNTDOWN,
            interval_seconds,
            callback,
            start_at=start_at,
            interval=interval_seconds,
        )

    def schedule_delay(
        self,
        delay_seconds: float,
        callback: FiringCallback,
        *,
        start_at: Optional[float] = None,
    ) -> TimerToken:
        return self._arm(
            SLOT_DELAY,
            max(0.0, delay_seconds),
            callback,
            start_at=start_at,
            interval=None,
        )

    def cancel_countdown(self) -> None:
        self._cancel(SLOT_COUNTDOWN)

    def cancel_delay(self) -> None:
        self._cancel(SLOT_DELAY)

    def cancel_all(self) -> None:
        self._cancel(SLOT_COUNTDOWN)
        self._cancel(SLOT_DELAY)

    def is_current(self, token: TimerToken) -> bool:
        return self._epochs[token.slot] == token.epoch

    def run_due(self, now: Optional[float] = None) -> int:
        """Fire everything due at or before `now`; returns the firing count."""
        current = self._clock() if now is None else now
        fired = 0
        while True:
            timer = self._next_due(current)
            if timer is None:
                return fired
            due_at = timer.due_at
            if timer.interval is None:
                self._timers[timer.slot] = None
            else:
                timer.due_at = due_at + timer.interval
            fired += 1
            timer.callback(due_at)

    def _next_due(self, now: float) -> Optional[_Timer]:
        candidates = [
            timer
            for timer in self._timers.values()
            if timer is not None
            and timer.epoch == self._epochs[timer.slot]
            and timer.due_at <= now
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda timer: timer.due_at)

    def _arm(
        self,
        slot: str,
        delay: float,
        callback: FiringCallback,
        *,
        start_at: Optional[float],
        interval: Optional[float],
    ) -> TimerToken:
        self._cancel(slot)
        base = self._clock() if start_at is None else start_at
        epoch = self._epochs[slot]
        self._timers[slot] = _Timer(
            slot=slot,
            epoch=epoch,
            due_at=base + delay,
            interval=interval,
            callback=callback,
        )
        return TimerToken(slot=slot, epoch=epoch)

    def _cancel(self, slot: str) -> None:
        self._epochs[slot] += 1
        self._timers[slot] = None
