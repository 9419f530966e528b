"""
Periodic callbacks on the running asyncio loop.
"""

import asyncio
from collections.abc import Callable

from ..core.config import TIMER_TICK_SECONDS


class Ticker:
    """
    Calls ``callback`` every ``interval`` seconds until cancelled.

    The next call is scheduled before the callback runs, so a callback may
    cancel its own ticker. ``cancel`` takes effect immediately.
    """

    def __init__(self, callback: Callable[[], None], interval: float = TIMER_TICK_SECONDS):
        self.callback = callback
        self.interval = interval
        self._handle: asyncio.TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """(Re)start ticking; must be called with an event loop running."""
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.interval, self._fire)

    def _fire(self) -> None:
        self._handle = asyncio.get_running_loop().call_later(self.interval, self._fire)
        self.callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
