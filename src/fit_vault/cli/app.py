"""Shared Typer app object, shared option types, and repository wiring."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import EXERCISE_DATABASE_FILENAME, Settings
from ..core.config_loader import load_settings
from ..io.database_exercise_repository import DatabaseExerciseRepository
from ..io.exercise_repository import ExerciseRepository
from ..io.file_store import LocalFileStore, normalize_path
from ..io.program_repository import ProgramRepository
from ..io.session_repository import SessionRepository
from ..io.workout_repository import WorkoutRepository

# Shared options used across all commands
RootOption = Annotated[
    Path,
    typer.Option("--root", "-r", help="Folder holding the documents (default: current directory)"),
]
BasePathOption = Annotated[
    Optional[str],
    typer.Option("--base-path", "-b", help="Fitness folder inside the root (default from config)"),
]

app = typer.Typer(
    name="fit-vault",
    help="Inspect workouts, programs and training sessions stored as markdown documents.",
    no_args_is_help=True,
)


@dataclass
class Vault:
    """Repositories over one document store."""

    store: LocalFileStore
    settings: Settings
    exercises: ExerciseRepository
    database: DatabaseExerciseRepository
    workouts: WorkoutRepository
    programs: ProgramRepository
    sessions: SessionRepository


def get_vault(root: Path, base_path: str | None = None) -> Vault:
    """Build repositories for ``root``; ``base_path`` overrides the configured one."""
    settings = load_settings()
    base = normalize_path(base_path or settings.base_path)
    store = LocalFileStore(root)
    database = DatabaseExerciseRepository(root / base / EXERCISE_DATABASE_FILENAME)
    return Vault(
        store=store,
        settings=settings,
        exercises=ExerciseRepository(store, base),
        database=database,
        workouts=WorkoutRepository(store, base, database=database),
        programs=ProgramRepository(store, base),
        sessions=SessionRepository(store, base),
    )
