"""
Custom exercises, one document per exercise under ``<base>/Exercises``.
"""

from __future__ import annotations

import dataclasses

from ..core.config import EXERCISES_FOLDER
from ..core.errors import RecordExistsError, RecordNotFoundError
from ..core.identifiers import to_slug
from ..core.models import Exercise
from .base_repository import DocumentRepository
from .serializers import document_to_exercise, exercise_to_document


def matches_query(exercise: Exercise, query: str) -> bool:
    """Case-insensitive match on name, category, equipment or a muscle group."""
    q = query.lower()
    fields = [exercise.name, exercise.category or "", exercise.equipment or ""] + exercise.muscle_groups
    return any(q in value.lower() for value in fields)


class ExerciseRepository(DocumentRepository[Exercise]):
    folder_name = EXERCISES_FOLDER

    async def list(self) -> list[Exercise]:
        """All custom exercises sorted by name."""
        await self.ensure_folder()
        exercises = await self._read_all(document_to_exercise)
        return sorted(exercises, key=lambda e: e.name.lower())

    async def get(self, exercise_id: str) -> Exercise | None:
        return await self._read_one(exercise_id, document_to_exercise)

    async def get_by_name(self, name: str) -> Exercise | None:
        """
        Find an exercise by display name, falling back to its slug.

        "Bench Press", "bench press" and "bench-press" all resolve the same
        record.
        """
        exercises = await self.list()
        lowered = name.lower()
        slug = to_slug(name)
        return next((e for e in exercises if e.name.lower() == lowered), None) or next(
            (e for e in exercises if e.id.lower() == slug), None
        )

    async def create(self, exercise: Exercise) -> Exercise:
        """
        Create an exercise document; the id is derived from the name.

        Raises:
            RecordExistsError: If an exercise with the same slug exists
        """
        await self.ensure_folder()
        exercise_id = to_slug(exercise.name)
        path = self.path_for(exercise_id)
        if self.store.get_file(path) is not None or await self.store.exists(path):
            raise RecordExistsError(f"Exercise already exists: {exercise.name}")
        created = dataclasses.replace(exercise, id=exercise_id, source="custom")
        await self.store.create(path, exercise_to_document(created))
        return created

    async def update(self, exercise_id: str, **changes) -> Exercise:
        """
        Apply field changes to an exercise.

        Raises:
            RecordNotFoundError: If the exercise does not exist
        """
        handle = self.store.get_file(self.path_for(exercise_id))
        existing = await self.get(exercise_id) if handle else None
        if handle is None or existing is None:
            raise RecordNotFoundError(f"Exercise not found: {exercise_id}")
        updated = dataclasses.replace(existing, **changes)
        updated.id = exercise_id
        await self.store.modify(handle, exercise_to_document(updated))
        return updated

    async def delete(self, exercise_id: str) -> None:
        """Trash an exercise; missing ids are ignored."""
        await self._trash(exercise_id)

    async def search(self, query: str) -> list[Exercise]:
        return [e for e in await self.list() if matches_query(e, query)]
