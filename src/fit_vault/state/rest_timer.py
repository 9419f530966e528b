"""
Rest timer between sets.
"""

import math
import time
from collections.abc import Callable

from ..core.config import TIMER_TICK_SECONDS
from ..core.models import RestPeriod, RestTimerState
from .events import Emitter
from .scheduling import Ticker


class RestTimer:
    """
    Counts down a rest period and reports every second.

    Events: ``timer.started``, ``timer.tick``, ``timer.extended`` and
    ``timer.cancelled`` (payload ``completed`` tells a natural finish from
    a cancel). On a natural finish ``on_complete`` receives the exercise
    index the rest belonged to.

    The last rest period stays readable after the timer stops, until
    ``clear_period`` is called.
    """

    def __init__(
        self,
        emit: Emitter,
        on_complete: Callable[[int], None],
        clock: Callable[[], float] = time.time,
        interval: float = TIMER_TICK_SECONDS,
    ):
        self._emit = emit
        self._on_complete = on_complete
        self._clock = clock
        self._ticker = Ticker(self.tick, interval)
        self.state: RestTimerState | None = None
        self.period: RestPeriod | None = None

    def start(self, seconds: float, exercise_index: int) -> None:
        self.cancel()
        now = self._clock()
        self.state = RestTimerState(end_time=now + seconds, duration=seconds, exercise_index=exercise_index)
        self.period = RestPeriod(started_at=now, exercise_index=exercise_index)
        self._ticker.start()
        self._emit("timer.started", {"exercise_index": exercise_index, "duration": seconds})

    def tick(self) -> None:
        if self.state is None:
            return
        self._emit("timer.tick", {"remaining": self.remaining()})
        if self._clock() >= self.state.end_time:
            self._complete()

    def _complete(self) -> None:
        exercise_index = self.state.exercise_index if self.state else 0
        self._ticker.cancel()
        self.state = None
        self._on_complete(exercise_index)
        self._emit("timer.cancelled", {"completed": True})

    def add_time(self, seconds: float) -> None:
        """Extend a running rest without resetting elapsed time."""
        if self.state is None:
            return
        self.state.end_time += seconds
        self.state.duration += seconds
        if self.period is not None:
            self.period.extra_seconds += seconds
        self._emit("timer.extended", {"additional_seconds": seconds})

    def cancel(self) -> None:
        was_running = self.state is not None
        self._ticker.cancel()
        self.state = None
        if was_running:
            self._emit("timer.cancelled", {"completed": False})

    def remaining(self) -> int:
        """Whole seconds left, rounded up; 0 when idle."""
        if self.state is None:
            return 0
        return max(0, math.ceil(self.state.end_time - self._clock()))

    def is_active(self) -> bool:
        return self.state is not None and self._clock() < self.state.end_time

    def clear_period(self) -> None:
        self.period = None

    def remap_exercise(self, new_index: Callable[[int], int | None]) -> None:
        """
        Follow exercises that moved. ``new_index`` returns None for a removed one.

        A running rest for a removed exercise is cancelled.
        """
        if self.state is not None:
            index = new_index(self.state.exercise_index)
            if index is None:
                self.cancel()
            else:
                self.state.exercise_index = index
        if self.period is not None:
            index = new_index(self.period.exercise_index)
            if index is None:
                self.period = None
            else:
                self.period.exercise_index = index

    def destroy(self) -> None:
        self._ticker.cancel()
        self.state = None
        self.period = None
