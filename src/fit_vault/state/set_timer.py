"""
Set timer with an optional countdown before the first set of an exercise.
"""

import math
import time
from collections.abc import Callable

from ..core.config import TIMER_TICK_SECONDS
from .events import Emitter
from .scheduling import Ticker


class SetTimer:
    """
    Records when the current set started.

    ``start_with_countdown`` delays the start by a short countdown, emitting
    ``countdown.tick`` each second and ``countdown.complete`` before
    ``set.started``.
    """

    def __init__(self, emit: Emitter, clock: Callable[[], float] = time.time, interval: float = TIMER_TICK_SECONDS):
        self._emit = emit
        self._clock = clock
        self._ticker = Ticker(self.tick, interval)
        self.start_time: float | None = None
        self.countdown_remaining: int | None = None
        self._countdown_exercise: int | None = None

    def mark_start(self, exercise_index: int) -> None:
        self.start_time = self._clock()
        self._emit("set.started", {"exercise_index": exercise_index})

    def is_active(self) -> bool:
        return self.start_time is not None

    def duration(self) -> int | None:
        """Whole seconds since the set started, or None when not started."""
        if self.start_time is None:
            return None
        return math.floor(self._clock() - self.start_time)

    def clear(self) -> None:
        self.start_time = None

    def start_with_countdown(self, exercise_index: int, countdown_seconds: int) -> None:
        self.cancel_countdown()
        self.start_time = None
        if countdown_seconds <= 0:
            self.mark_start(exercise_index)
            return
        self.countdown_remaining = countdown_seconds
        self._countdown_exercise = exercise_index
        self._emit("countdown.tick", {"remaining": countdown_seconds, "exercise_index": exercise_index})
        self._ticker.start()

    def tick(self) -> None:
        if self.countdown_remaining is None or self._countdown_exercise is None:
            self.cancel_countdown()
            return
        self.countdown_remaining -= 1
        exercise_index = self._countdown_exercise
        if self.countdown_remaining <= 0:
            self.cancel_countdown()
            self._emit("countdown.complete", {"exercise_index": exercise_index})
            self.mark_start(exercise_index)
        else:
            self._emit("countdown.tick", {"remaining": self.countdown_remaining, "exercise_index": exercise_index})

    def is_countdown_active(self) -> bool:
        return self.countdown_remaining is not None and self.countdown_remaining > 0

    def cancel_countdown(self) -> None:
        self._ticker.cancel()
        self.countdown_remaining = None
        self._countdown_exercise = None

    def remap_exercise(self, new_index: Callable[[int], int | None]) -> None:
        """Point a running countdown at its exercise's new position; drop it if removed."""
        if self._countdown_exercise is None:
            return
        index = new_index(self._countdown_exercise)
        if index is None:
            self.cancel_countdown()
        else:
            self._countdown_exercise = index

    def destroy(self) -> None:
        self.cancel_countdown()
        self.start_time = None
