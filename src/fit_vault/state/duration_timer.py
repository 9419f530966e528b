"""
Session duration ticker.
"""

import math
import time
from collections.abc import Callable
from datetime import datetime

from ..core.config import TIMER_TICK_SECONDS
from .events import Emitter
from .scheduling import Ticker


class DurationTimer:
    """
    Emits ``duration.tick`` with the session's elapsed seconds.

    Elapsed time stays 0 until the session has a persisted set.
    """

    def __init__(
        self,
        emit: Emitter,
        get_start_time: Callable[[], str | None],
        is_persisted: Callable[[], bool],
        clock: Callable[[], float] = time.time,
        interval: float = TIMER_TICK_SECONDS,
    ):
        self._emit = emit
        self._get_start_time = get_start_time
        self._is_persisted = is_persisted
        self._clock = clock
        self._ticker = Ticker(self.tick, interval)

    @property
    def running(self) -> bool:
        return self._ticker.active

    def start(self) -> None:
        self.stop()
        self.tick()
        self._ticker.start()

    def tick(self) -> None:
        self._emit("duration.tick", {"elapsed": self.elapsed()})

    def elapsed(self) -> int:
        start = self._get_start_time()
        if not start or not self._is_persisted():
            return 0
        try:
            started = datetime.fromisoformat(start).timestamp()
        except ValueError:
            return 0
        return max(0, math.floor(self._clock() - started))

    def stop(self) -> None:
        self._ticker.cancel()

    def destroy(self) -> None:
        self.stop()
