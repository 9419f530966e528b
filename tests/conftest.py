"""
Shared fixtures: an in-memory document store and a controllable clock.

MemoryFileStore can simulate the races the session repository recovers
from:

- ``exists_lies``: exists() reports False even for present documents
- ``stale_lookups``: the next N get_file() calls miss
- ``unresolvable``: get_file() never finds anything
- ``gate``: when set, writes block until the event is set
- ``fail_writes``: the next N writes raise OSError
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from fit_vault.io.file_store import FileHandle, normalize_path


class MemoryFileStore:
    def __init__(self):
        self.files: dict[str, str] = {}
        self.folders: set[str] = set()
        self.trashed: list[str] = []
        self.writes: list[tuple[str, str, str]] = []  # (operation, path, text)

        self.exists_lies = False
        self.stale_lookups = 0
        self.unresolvable = False
        self.gate: asyncio.Event | None = None
        self.fail_writes = 0

    async def _before_write(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_writes:
            self.fail_writes -= 1
            raise OSError("simulated write failure")

    async def exists(self, path: str) -> bool:
        if self.exists_lies:
            return False
        return normalize_path(path) in self.files

    async def create(self, path: str, text: str) -> FileHandle:
        path = normalize_path(path)
        await self._before_write()
        if path in self.files:
            raise FileExistsError(path)
        self.files[path] = text
        self.writes.append(("create", path, text))
        return FileHandle(path)

    async def modify(self, handle: FileHandle, text: str) -> None:
        await self._before_write()
        if handle.path not in self.files:
            raise FileNotFoundError(handle.path)
        self.files[handle.path] = text
        self.writes.append(("modify", handle.path, text))

    async def write(self, path: str, text: str) -> None:
        path = normalize_path(path)
        await self._before_write()
        self.files[path] = text
        self.writes.append(("write", path, text))

    async def read(self, handle: FileHandle) -> str:
        if handle.path not in self.files:
            raise FileNotFoundError(handle.path)
        return self.files[handle.path]

    async def cached_read(self, handle: FileHandle) -> str:
        return await self.read(handle)

    def get_file(self, path: str) -> FileHandle | None:
        path = normalize_path(path)
        if self.unresolvable:
            return None
        if self.stale_lookups:
            self.stale_lookups -= 1
            return None
        return FileHandle(path) if path in self.files else None

    async def list_children(self, folder: str) -> list[FileHandle]:
        prefix = normalize_path(folder) + "/"
        return [
            FileHandle(path)
            for path in sorted(self.files)
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]

    async def trash(self, handle: FileHandle) -> None:
        if self.files.pop(handle.path, None) is not None:
            self.trashed.append(handle.path)

    async def ensure_folder(self, path: str) -> None:
        parts = normalize_path(path).split("/")
        for i in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:i]))


class FakeClock:
    """Aware datetime clock advanced by hand."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 10, 19, 10, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def store() -> MemoryFileStore:
    return MemoryFileStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
