"""
Read-only exercise database, stored as one JSON file.

Records come from a bulk import of an external exercise list; fetching
that list is left to the caller.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from ..core.identifiers import to_slug
from ..core.models import Exercise
from .exercise_repository import matches_query
from .serializers import database_record_to_exercise


def _title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def external_to_entry(record: dict[str, Any], image_base_url: str | None = None) -> dict[str, Any] | None:
    """
    Normalize one external record into a stored database entry.

    The id becomes the slug of the name; category, equipment and muscles are
    title cased. When ``image_base_url`` is given, image paths are rewritten
    as ``<base>/<external id>/<n>.jpg``.
    """
    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    images = [i for i in record.get("images") or [] if isinstance(i, str)]
    if image_base_url:
        images = [f"{image_base_url.rstrip('/')}/{record.get('id')}/{n}.jpg" for n in range(len(images))]
    category, equipment = record.get("category"), record.get("equipment")
    return {
        "id": to_slug(name),
        "name": name,
        "category": _title_case(category) if isinstance(category, str) and category else None,
        "equipment": _title_case(equipment) if isinstance(equipment, str) and equipment else None,
        "primaryMuscles": [_title_case(m) for m in record.get("primaryMuscles") or [] if isinstance(m, str)],
        "secondaryMuscles": [_title_case(m) for m in record.get("secondaryMuscles") or [] if isinstance(m, str)],
        "instructions": [i for i in record.get("instructions") or [] if isinstance(i, str)],
        "images": images,
    }


class DatabaseExerciseRepository:
    """
    Imported exercise database.

    The JSON file holds ``{"version", "importedAt", "exercises": [...]}``.
    Records are loaded once into memory; lookups are synchronous.
    """

    def __init__(self, database_path: str | Path):
        """
        Initialize the repository.

        Args:
            database_path: Path to the JSON database file
        """
        self.database_path = Path(database_path)
        self._exercises: dict[str, Exercise] = {}
        self._database: dict[str, Any] | None = None
        self._loaded = False

    def load(self) -> None:
        """Load the database file once; an unreadable file leaves it empty."""
        if self._loaded:
            return
        self._loaded = True
        if not self.database_path.exists():
            return
        try:
            with open(self.database_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to load exercise database {}: {}", self.database_path, exc)
            return
        if isinstance(data, dict):
            self._set_database(data)

    def _set_database(self, data: dict[str, Any]) -> None:
        self._database = data
        self._exercises.clear()
        for entry in data.get("exercises") or []:
            if isinstance(entry, dict):
                exercise = database_record_to_exercise(entry)
                if exercise is not None:
                    self._exercises[exercise.id] = exercise

    def _save(self, data: dict[str, Any]) -> None:
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.database_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def import_records(self, records: list[dict[str, Any]], image_base_url: str | None = None) -> int:
        """
        Replace the database with already-fetched external records.

        Returns:
            Number of imported exercises
        """
        entries = [e for e in (external_to_entry(r, image_base_url) for r in records) if e is not None]
        now = datetime.now(timezone.utc)
        data = {
            "version": now.date().isoformat(),
            "importedAt": now.isoformat(),
            "exercises": entries,
        }
        self._save(data)
        self._set_database(data)
        self._loaded = True
        logger.info("Imported {} exercises into {}", len(entries), self.database_path)
        return len(entries)

    def is_imported(self) -> bool:
        self.load()
        return bool(self._database and self._database.get("exercises"))

    def info(self) -> dict[str, Any] | None:
        self.load()
        if not self._database:
            return None
        return {
            "version": self._database.get("version", ""),
            "count": len(self._database.get("exercises") or []),
            "importedAt": self._database.get("importedAt", ""),
        }

    def list(self) -> list[Exercise]:
        self.load()
        return sorted(self._exercises.values(), key=lambda e: e.name.lower())

    def get(self, exercise_id: str) -> Exercise | None:
        self.load()
        return self._exercises.get(exercise_id)

    def get_by_name(self, name: str) -> Exercise | None:
        self.load()
        lowered, slug = name.lower(), to_slug(name)
        return next((e for e in self._exercises.values() if e.name.lower() == lowered or e.id == slug), None)

    def search(self, query: str) -> list[Exercise]:
        return [e for e in self.list() if matches_query(e, query)]

    def clear(self) -> None:
        self._database = None
        self._exercises.clear()
        self._save({"version": "", "importedAt": "", "exercises": []})
