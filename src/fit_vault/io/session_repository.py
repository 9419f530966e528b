"""
Training sessions, one document per session under ``<base>/Sessions``.

The open (active or paused) session lives in the same folder under its
final id; finishing it only rewrites the status and end time.
"""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime

from loguru import logger

from ..core.config import LEGACY_ACTIVE_SESSION_FILENAME, SESSIONS_FOLDER, STALE_CACHE_RETRY_SECONDS
from ..core.errors import RecordNotFoundError
from ..core.lifecycle import is_open
from ..core.models import Session, SessionReview
from .base_repository import DocumentRepository
from .file_store import FileStore
from .serializers import document_to_session, session_to_document


def now_iso() -> str:
    """Current local time as an aware ISO 8601 timestamp."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


class SessionRepository(DocumentRepository[Session]):
    folder_name = SESSIONS_FOLDER

    def __init__(self, store: FileStore, base_path: str, retry_delay: float = STALE_CACHE_RETRY_SECONDS):
        """
        Initialize the repository.

        Args:
            store: Document store
            base_path: Root folder of the fitness documents
            retry_delay: Seconds to wait before re-resolving a stale handle
        """
        super().__init__(store, base_path)
        self.retry_delay = retry_delay

    @property
    def legacy_active_path(self) -> str:
        return f"{self.folder}/{LEGACY_ACTIVE_SESSION_FILENAME}"

    async def list(self) -> list[Session]:
        """All sessions, newest first; unparseable documents are skipped."""
        await self.ensure_folder()
        sessions = await self._read_all(document_to_session)
        return sorted(sessions, key=lambda s: s.start_time, reverse=True)

    async def get(self, session_id: str) -> Session | None:
        return await self._read_one(session_id, document_to_session)

    async def get_active(self) -> Session | None:
        """The most recent session whose status is active or paused."""
        for session in await self.list():
            if is_open(session.status):
                return session
        return None

    async def save_active(self, session: Session) -> None:
        """
        Write a session document, recovering from store races.

        The store only offers exists/create/modify and its handle lookup may
        lag behind, so the write walks a fallback ladder:

        1. exists -> resolve handle -> modify (re-resolve once after a short
           wait, then write by path)
        2. missing -> create; if that fails because the document appeared
           meanwhile, wait, resolve and modify, else write by path

        Any other store error propagates.
        """
        await self.ensure_folder()
        path = self.path_for(session.id)
        content = session_to_document(session)

        if await self.store.exists(path):
            await self._modify_with_retry(path, content)
            return

        try:
            await self.store.create(path, content)
        except FileExistsError:
            logger.debug("Create raced for {}; falling back to modify", path)
            await self._modify_with_retry(path, content, first_try=False)

    async def _modify_with_retry(self, path: str, content: str, first_try: bool = True) -> None:
        handle = self.store.get_file(path) if first_try else None
        if handle is None:
            await asyncio.sleep(self.retry_delay)
            handle = self.store.get_file(path)
        if handle is not None:
            await self.store.modify(handle, content)
            return
        logger.warning("No handle for {} after retry; writing by path", path)
        await self.store.write(path, content)

    async def finalize_active(self, session: Session) -> Session:
        """
        Mark a session completed under its existing id.

        A leftover legacy active-session document is removed.
        """
        final = dataclasses.replace(session, status="completed", end_time=session.end_time or now_iso())
        await self.save_active(final)
        await self._delete_legacy_active()
        return final

    async def delete_active(self, session: Session | None = None) -> None:
        """Trash the open session document (or ``session``'s document)."""
        target = session or await self.get_active()
        if target is not None:
            await self._trash(target.id)
        await self._delete_legacy_active()

    async def _delete_legacy_active(self) -> None:
        handle = self.store.get_file(self.legacy_active_path)
        if handle is not None:
            await self.store.trash(handle)

    async def delete(self, session_id: str) -> None:
        await self._trash(session_id)

    async def get_recent(self, limit: int = 5) -> list[Session]:
        return (await self.list())[:limit]

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Session]:
        """Sessions whose date falls within [start_date, end_date] (YYYY-MM-DD)."""
        return [s for s in await self.list() if start_date <= s.date <= end_date]

    async def get_by_workout(self, workout_name: str) -> list[Session]:
        lowered = workout_name.lower()
        return [s for s in await self.list() if (s.workout or "").lower() == lowered]

    async def get_previous(self, workout_name: str, before: Session | None = None) -> Session | None:
        """
        Latest completed session of a workout.

        Args:
            workout_name: Workout to match (case-insensitive)
            before: Only consider sessions that started before this one

        Returns:
            The session, or None
        """
        for session in await self.get_by_workout(workout_name):
            if session.status != "completed":
                continue
            if before is not None and (session.id == before.id or session.start_time >= before.start_time):
                continue
            return session
        return None

    async def _update(self, session_id: str, **changes) -> Session:
        handle = self.store.get_file(self.path_for(session_id))
        existing = await self.get(session_id) if handle else None
        if handle is None or existing is None:
            raise RecordNotFoundError(f"Session not found: {session_id}")
        updated = dataclasses.replace(existing, **changes)
        await self.store.modify(handle, session_to_document(updated))
        return updated

    async def set_review(self, session_id: str, review: SessionReview) -> Session:
        """Attach a review; the id and status are unchanged."""
        return await self._update(session_id, review=review)

    async def set_coach_feedback(self, session_id: str, feedback: str | None) -> Session:
        return await self._update(session_id, coach_feedback=feedback or None)
