"""
Training programs, one document per program under ``<base>/Programs``.
"""

from __future__ import annotations

import dataclasses

from ..core.config import PROGRAMS_FOLDER
from ..core.errors import RecordExistsError, RecordNotFoundError
from ..core.identifiers import to_slug
from ..core.models import Program, Workout
from .base_repository import DocumentRepository
from .file_store import FileStore
from .serializers import document_to_program, program_to_document


class ProgramRepository(DocumentRepository[Program]):
    """
    Programs with their inline workouts.

    Inline workouts seen while reading are cached per program so they can be
    looked up without re-reading the document.
    """

    folder_name = PROGRAMS_FOLDER

    def __init__(self, store: FileStore, base_path: str):
        super().__init__(store, base_path)
        self._inline_workouts: dict[str, dict[str, Workout]] = {}

    def _parse(self, program_id: str, text: str) -> Program | None:
        program = document_to_program(program_id, text)
        if program is not None:
            self._inline_workouts[program_id] = {w.id: w for w in program.inline_workouts}
        return program

    async def list(self) -> list[Program]:
        programs = await self._read_all(self._parse)
        return sorted(programs, key=lambda p: p.name.lower())

    async def get(self, program_id: str) -> Program | None:
        return await self._read_one(program_id, self._parse)

    async def get_by_name(self, name: str) -> Program | None:
        lowered = name.lower()
        return next((p for p in await self.list() if p.name.lower() == lowered), None)

    async def create(self, program: Program) -> Program:
        """
        Raises:
            RecordExistsError: If a program with the same slug exists
        """
        await self.ensure_folder()
        program_id = to_slug(program.name)
        path = self.path_for(program_id)
        if self.store.get_file(path) is not None or await self.store.exists(path):
            raise RecordExistsError(f"Program already exists: {program.name}")
        created = dataclasses.replace(program, id=program_id)
        await self.store.create(path, program_to_document(created))
        self._inline_workouts[program_id] = {w.id: w for w in created.inline_workouts}
        return created

    async def update(self, program_id: str, **changes) -> Program:
        """
        Apply field changes; inline workouts are kept unless replaced.

        Raises:
            RecordNotFoundError: If the program does not exist
        """
        handle = self.store.get_file(self.path_for(program_id))
        existing = await self.get(program_id) if handle else None
        if handle is None or existing is None:
            raise RecordNotFoundError(f"Program not found: {program_id}")
        updated = dataclasses.replace(existing, **changes)
        updated.id = program_id
        await self.store.modify(handle, program_to_document(updated))
        self._inline_workouts[program_id] = {w.id: w for w in updated.inline_workouts}
        return updated

    async def delete(self, program_id: str) -> None:
        self._inline_workouts.pop(program_id, None)
        await self._trash(program_id)

    def get_inline_workout(self, program_id: str, workout_id: str) -> Workout | None:
        return self._inline_workouts.get(program_id, {}).get(workout_id)

    def has_inline_workouts(self, program_id: str) -> bool:
        return bool(self._inline_workouts.get(program_id))
