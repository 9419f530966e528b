"""
Save queue for the open session document.

At most one write runs at a time, finalizing and trashing included.
Fire-and-forget saves arriving while a write is in flight collapse into a
single trailing save; awaited saves wait their turn and report failures to
the caller.

Saves take a snapshot callable rather than a session. The callable runs
when the write starts, so a write that waited behind another one still
stores the latest in-memory state.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from ..core.models import Session
from ..io.session_repository import SessionRepository

Snapshot = Callable[[], Session]


class PersistenceManager:
    def __init__(self, repository: SessionRepository):
        self.repository = repository
        self._in_flight: asyncio.Task | None = None
        self._pending: Snapshot | None = None

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def save_queued(self, snapshot: Snapshot) -> None:
        """
        Queue a save without waiting for it.

        Failures are logged; the next save retries with newer state.
        """
        if self._in_flight is not None:
            self._pending = snapshot
            return
        self._start(self._saver(snapshot))

    async def save_and_wait(self, snapshot: Snapshot) -> None:
        """
        Save and return once the write has completed.

        Raises:
            Exception: Whatever the store raised after all fallbacks
        """
        # This save supersedes anything still queued
        self._pending = None
        await self._exclusive(self._saver(snapshot))

    def _saver(self, snapshot: Snapshot) -> Callable[[], Awaitable[None]]:
        async def save() -> None:
            session = snapshot()
            await self.repository.save_active(session)
            logger.debug("Saved session {}", session.id)

        return save

    async def _exclusive(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        while self._in_flight is not None:
            await asyncio.wait({self._in_flight})
        return await self._start(operation, propagate=True)

    def _start(self, operation: Callable[[], Awaitable[Any]], propagate: bool = False) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(operation, propagate))
        self._in_flight = task
        return task

    async def _run(self, operation: Callable[[], Awaitable[Any]], propagate: bool) -> Any:
        try:
            return await operation()
        except Exception:
            logger.exception("Session write failed")
            if propagate:
                raise
        finally:
            self._in_flight = None
            if self._pending is not None:
                pending, self._pending = self._pending, None
                self._start(self._saver(pending))

    async def flush(self) -> None:
        """Wait until no write is in flight and nothing is queued."""
        while self._in_flight is not None:
            await asyncio.wait({self._in_flight})

    def clear_pending(self) -> None:
        self._pending = None

    async def delete_active(self, session: Session) -> None:
        """
        Drop queued saves and trash the session document.

        A write already in flight is allowed to finish first.
        """
        self._pending = None
        await self._exclusive(lambda: self.repository.delete_active(session))

    async def finalize_active(self, snapshot: Snapshot) -> Session:
        """Drop queued saves and write the session as completed, after any write in flight."""
        self._pending = None
        return await self._exclusive(lambda: self.repository.finalize_active(snapshot()))
