"""
Document store interface and its local-filesystem implementation.

Paths are forward-slash strings relative to the store root, e.g.
"Fitness/Sessions/2026-10-19-10-00-00-push-day.md".
"""

from __future__ import annotations

import asyncio
import shutil
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

from loguru import logger

TRASH_FOLDER = ".trash"


@dataclass(frozen=True)
class FileHandle:
    """Resolved reference to an existing document."""

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def stem(self) -> str:
        return PurePosixPath(self.path).stem


def normalize_path(path: str) -> str:
    """Collapse duplicate and surrounding slashes."""
    return "/".join(part for part in path.split("/") if part and part != ".")


def id_from_path(path: str) -> str:
    """Record id of a document: its file name without extension."""
    return PurePosixPath(path).stem


class FileStore(Protocol):
    """
    Minimal document store used by the repositories.

    ``get_file`` is a synchronous lookup that may lag behind writes made a
    moment ago; ``exists`` always reflects the store itself.
    """

    async def exists(self, path: str) -> bool: ...

    async def create(self, path: str, text: str) -> FileHandle:
        """Create a document; raises FileExistsError if the path is taken."""
        ...

    async def modify(self, handle: FileHandle, text: str) -> None: ...

    async def read(self, handle: FileHandle) -> str: ...

    async def cached_read(self, handle: FileHandle) -> str: ...

    def get_file(self, path: str) -> FileHandle | None: ...

    async def list_children(self, folder: str) -> list[FileHandle]: ...

    async def trash(self, handle: FileHandle) -> None: ...

    async def ensure_folder(self, path: str) -> None: ...

    async def write(self, path: str, text: str) -> None:
        """Raw path-based write that creates or replaces the document."""
        ...


class LocalFileStore:
    """
    FileStore backed by a directory on disk.

    Blocking filesystem calls run in worker threads. Trashed documents are
    moved into ``<root>/.trash/`` rather than deleted.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _abs(self, path: str) -> Path:
        return self.root / normalize_path(path)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._abs(path).exists)

    async def create(self, path: str, text: str) -> FileHandle:
        target = self._abs(path)

        def _create() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            # "x" fails atomically when the file already exists
            with open(target, "x", encoding="utf-8") as f:
                f.write(text)

        await asyncio.to_thread(_create)
        return FileHandle(normalize_path(path))

    async def modify(self, handle: FileHandle, text: str) -> None:
        target = self._abs(handle.path)
        if not target.exists():
            raise FileNotFoundError(f"No such document: {handle.path}")
        await asyncio.to_thread(target.write_text, text, encoding="utf-8")

    async def write(self, path: str, text: str) -> None:
        target = self._abs(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

        await asyncio.to_thread(_write)

    async def read(self, handle: FileHandle) -> str:
        return await asyncio.to_thread(self._abs(handle.path).read_text, encoding="utf-8")

    async def cached_read(self, handle: FileHandle) -> str:
        return await self.read(handle)

    def get_file(self, path: str) -> FileHandle | None:
        return FileHandle(normalize_path(path)) if self._abs(path).is_file() else None

    async def list_children(self, folder: str) -> list[FileHandle]:
        directory = self._abs(folder)

        def _list() -> list[FileHandle]:
            if not directory.is_dir():
                return []
            prefix = normalize_path(folder)
            return [
                FileHandle(f"{prefix}/{entry.name}" if prefix else entry.name)
                for entry in sorted(directory.iterdir())
                if entry.is_file()
            ]

        return await asyncio.to_thread(_list)

    async def trash(self, handle: FileHandle) -> None:
        source = self._abs(handle.path)
        destination = self.root / TRASH_FOLDER / normalize_path(handle.path)

        def _trash() -> None:
            if not source.exists():
                return
            destination.parent.mkdir(parents=True, exist_ok=True)
            target = destination
            if target.exists():
                target = target.with_name(f"{target.stem}-{int(time.time() * 1000)}{target.suffix}")
            shutil.move(str(source), str(target))

        await asyncio.to_thread(_trash)
        logger.debug("Moved {} to trash", handle.path)

    async def ensure_folder(self, path: str) -> None:
        await asyncio.to_thread(self._abs(path).mkdir, parents=True, exist_ok=True)
