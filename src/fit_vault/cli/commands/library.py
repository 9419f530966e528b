"""Library commands: init, exercises, workouts, programs."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.models import Exercise
from .. import views
from ..app import BasePathOption, RootOption, Vault, app, get_vault


async def _init_folders(vault: Vault) -> list[str]:
    folders = []
    for repository in (vault.exercises, vault.workouts, vault.programs, vault.sessions):
        await repository.ensure_folder()
        folders.append(repository.folder)
    return folders


@app.command()
def init(
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    Create the Exercises, Workouts, Programs and Sessions folders.
    """
    vault = get_vault(root, base_path)
    try:
        folders = asyncio.run(_init_folders(vault))
    except OSError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    for folder in folders:
        views.console.print(f"  [dim]{folder}[/dim]")
    views.print_success(f"Initialized document folders in {root}")


async def _load_exercises(vault: Vault, search: str | None) -> list[Exercise]:
    if search:
        custom = await vault.exercises.search(search)
        imported = vault.database.search(search)
    else:
        custom = await vault.exercises.list()
        imported = vault.database.list()
    # Custom exercises shadow database entries with the same id
    seen = {e.id for e in custom}
    return custom + [e for e in imported if e.id not in seen]


@app.command()
def exercises(
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Filter by name, category, equipment or muscle"),
    ] = None,
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    List custom and imported exercises.
    """
    vault = get_vault(root, base_path)
    found = asyncio.run(_load_exercises(vault, search))
    if not found:
        views.print_info("No exercises found.")
        return
    views.console.print(views.format_exercise_table(found))


@app.command()
def workouts(
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    List workout templates.
    """
    vault = get_vault(root, base_path)
    found = asyncio.run(vault.workouts.list())
    if not found:
        views.print_info("No workouts found.")
        return
    views.console.print(views.format_workout_table(found))


@app.command()
def programs(
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    List training programs.
    """
    vault = get_vault(root, base_path)
    found = asyncio.run(vault.programs.list())
    if not found:
        views.print_info("No programs found.")
        return
    views.console.print(views.format_program_table(found))
