"""
Shared plumbing for document-backed repositories.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

from ..core.config import DOCUMENT_EXTENSION
from .file_store import FileHandle, FileStore, id_from_path, normalize_path

T = TypeVar("T")


class DocumentRepository(Generic[T]):
    """
    One folder of documents, one record per document.

    Subclasses set ``folder_name`` and supply a parser turning
    (id, text) into a record or None.
    """

    folder_name: str = ""

    def __init__(self, store: FileStore, base_path: str):
        self.store = store
        self.set_base_path(base_path)

    def set_base_path(self, base_path: str) -> None:
        self.folder = normalize_path(f"{base_path}/{self.folder_name}")

    def path_for(self, record_id: str) -> str:
        return f"{self.folder}/{record_id}{DOCUMENT_EXTENSION}"

    async def ensure_folder(self) -> None:
        await self.store.ensure_folder(self.folder)

    async def _read(self, handle: FileHandle, parse: Callable[[str, str], T | None], fresh: bool = False) -> T | None:
        try:
            text = await (self.store.read(handle) if fresh else self.store.cached_read(handle))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read {}: {}", handle.path, exc)
            return None
        record = parse(id_from_path(handle.path), text)
        if record is None:
            logger.debug("Skipping unparseable document {}", handle.path)
        return record

    async def _read_all(self, parse: Callable[[str, str], T | None], fresh: bool = False) -> list[T]:
        records = []
        for handle in await self.store.list_children(self.folder):
            if not handle.name.endswith(DOCUMENT_EXTENSION) or handle.name.startswith("."):
                continue
            record = await self._read(handle, parse, fresh)
            if record is not None:
                records.append(record)
        return records

    async def _read_one(self, record_id: str, parse: Callable[[str, str], T | None], fresh: bool = False) -> T | None:
        handle = self.store.get_file(self.path_for(record_id))
        if handle is None:
            return None
        return await self._read(handle, parse, fresh)

    async def _trash(self, record_id: str) -> bool:
        """Trash a document; returns False when there was nothing to trash."""
        handle = self.store.get_file(self.path_for(record_id))
        if handle is None:
            return False
        await self.store.trash(handle)
        return True
