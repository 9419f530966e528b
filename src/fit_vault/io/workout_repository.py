"""
Workout templates, one document per workout under ``<base>/Workouts``.
"""

from __future__ import annotations

import dataclasses

from loguru import logger

from ..core.config import WORKOUTS_FOLDER
from ..core.errors import RecordExistsError, RecordNotFoundError
from ..core.identifiers import to_slug
from ..core.models import Workout, WorkoutExercise
from ..core.references import determine_exercise_source
from .base_repository import DocumentRepository
from .database_exercise_repository import DatabaseExerciseRepository
from .file_store import FileStore
from .serializers import document_to_workout, workout_to_document


class WorkoutRepository(DocumentRepository[Workout]):
    folder_name = WORKOUTS_FOLDER

    def __init__(self, store: FileStore, base_path: str, database: DatabaseExerciseRepository | None = None):
        super().__init__(store, base_path)
        self.database = database

    def _parse(self, workout_id: str, text: str) -> Workout | None:
        workout = document_to_workout(workout_id, text)
        if workout is None or self.database is None:
            return workout
        # Prefer the database's display name over a title-cased slug
        for exercise in workout.exercises:
            entry = self.database.get(exercise.exercise_id or to_slug(exercise.exercise))
            if entry is not None:
                exercise.exercise = entry.name
        return workout

    async def list(self) -> list[Workout]:
        await self.ensure_folder()
        workouts = await self._read_all(self._parse, fresh=True)
        return sorted(workouts, key=lambda w: w.name.lower())

    async def get(self, workout_id: str) -> Workout | None:
        return await self._read_one(workout_id, self._parse, fresh=True)

    async def get_by_name(self, name: str) -> Workout | None:
        lowered = name.lower()
        return next((w for w in await self.list() if w.name.lower() == lowered), None)

    async def create(self, workout: Workout) -> Workout:
        """
        Create a workout document named after the slug of its name.

        Raises:
            RecordExistsError: If the slug is taken
        """
        await self.ensure_folder()
        workout_id = to_slug(workout.name)
        path = self.path_for(workout_id)
        if self.store.get_file(path) is not None or await self.store.exists(path):
            raise RecordExistsError(f"Workout already exists: {workout.name}")
        created = dataclasses.replace(workout, id=workout_id)
        await self.store.create(path, workout_to_document(created))
        return created

    async def update(self, workout_id: str, **changes) -> str:
        """
        Apply field changes and rewrite the workout document.

        When the name changes to one with a different slug, the document is
        moved to the new id unless that id is already taken.

        Returns:
            The workout's id after the update

        Raises:
            RecordNotFoundError: If the workout does not exist
        """
        handle = self.store.get_file(self.path_for(workout_id))
        existing = await self.get(workout_id) if handle else None
        if handle is None or existing is None:
            raise RecordNotFoundError(f"Workout not found: {workout_id}")

        updated = dataclasses.replace(existing, **changes)
        updated.id = workout_id
        content = workout_to_document(updated)
        await self.store.modify(handle, content)

        new_id = to_slug(updated.name)
        if "name" not in changes or new_id == workout_id:
            return workout_id
        new_path = self.path_for(new_id)
        if self.store.get_file(new_path) is not None or await self.store.exists(new_path):
            logger.warning("Not renaming workout {} to {}: target exists", workout_id, new_id)
            return workout_id
        await self.store.create(new_path, content)
        await self.store.trash(handle)
        return new_id

    async def delete(self, workout_id: str) -> None:
        await self._trash(workout_id)

    async def duplicate(self, workout_id: str, new_name: str) -> Workout:
        existing = await self.get(workout_id)
        if existing is None:
            raise RecordNotFoundError(f"Workout not found: {workout_id}")
        return await self.create(
            Workout(
                id="",
                name=new_name,
                description=existing.description,
                estimated_duration=existing.estimated_duration,
                exercises=[dataclasses.replace(e) for e in existing.exercises],
            )
        )

    async def search(self, query: str) -> list[Workout]:
        q = query.lower()
        return [w for w in await self.list() if q in w.name.lower() or q in (w.description or "").lower()]

    async def migrate_exercise_references(self, database: DatabaseExerciseRepository) -> tuple[int, int]:
        """
        Re-tag every exercise reference as database or custom.

        Workouts whose tags already match are left untouched.

        Returns:
            (updated, skipped) workout counts
        """
        updated = skipped = 0
        for workout in await self.list():
            exercises: list[WorkoutExercise] = []
            changed = False
            for exercise in workout.exercises:
                exercise_id = exercise.exercise_id or to_slug(exercise.exercise)
                source = determine_exercise_source(database.get(exercise_id) is not None)
                changed = changed or source != exercise.source
                exercises.append(dataclasses.replace(exercise, exercise_id=exercise_id, source=source))
            if changed:
                await self.update(workout.id, exercises=exercises)
                updated += 1
            else:
                skipped += 1
        logger.info("Migrated exercise references: {} updated, {} skipped", updated, skipped)
        return updated, skipped
