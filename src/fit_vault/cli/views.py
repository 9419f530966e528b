"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of library records and sessions.
"""

from rich.console import Console
from rich.table import Table

from ..core.metrics import (
    count_total_completed_sets,
    count_total_target_sets,
    format_set_display,
    max_weight,
    total_reps,
    total_volume,
)
from ..core.models import Exercise, Program, Session, Workout
from ..io.workout_body import format_rep_range

console = Console()

STATUS_STYLES = {
    "active": "bold green",
    "paused": "yellow",
    "completed": "cyan",
    "discarded": "dim",
}


def _clock(timestamp: str | None) -> str:
    # ISO timestamps carry the clock time after the "T"
    if not timestamp or "T" not in timestamp:
        return "-"
    return timestamp.split("T", 1)[1][:5]


def format_exercise_table(exercises: list[Exercise]) -> Table:
    table = Table(title="Exercises")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Source", style="magenta")
    table.add_column("Category")
    table.add_column("Equipment")
    table.add_column("Muscles", style="green")

    for exercise in exercises:
        table.add_row(
            exercise.id,
            exercise.name,
            exercise.source,
            exercise.category or "-",
            exercise.equipment or "-",
            ", ".join(exercise.muscle_groups) or "-",
        )
    return table


def format_workout_table(workouts: list[Workout]) -> Table:
    table = Table(title="Workouts")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Exercises", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column("Est. min", justify="right")

    for workout in workouts:
        table.add_row(
            workout.id,
            workout.name,
            str(len(workout.exercises)),
            str(sum(e.target_sets for e in workout.exercises)),
            str(workout.estimated_duration) if workout.estimated_duration else "-",
        )
    return table


def format_program_table(programs: list[Program]) -> Table:
    table = Table(title="Programs")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Workouts")
    table.add_column("Questions", justify="right")

    for program in programs:
        table.add_row(
            program.id,
            program.name,
            ", ".join(program.workouts) or "-",
            str(len(program.questions)),
        )
    return table


def format_session_table(sessions: list[Session], weight_unit: str = "kg") -> Table:
    """
    Create a Rich table listing sessions.

    Args:
        sessions: Sessions to display, in display order
        weight_unit: Unit label for the volume column

    Returns:
        Rich Table object
    """
    table = Table(title="Training Sessions")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Start")
    table.add_column("Workout", style="bold")
    table.add_column("Status")
    table.add_column("Sets", justify="right")
    table.add_column(f"Volume({weight_unit})", justify="right")

    for i, session in enumerate(sessions, 1):
        style = STATUS_STYLES.get(session.status, "")
        volume = total_volume(session)
        table.add_row(
            str(i),
            session.id,
            session.date,
            _clock(session.start_time),
            session.workout or "-",
            f"[{style}]{session.status}[/{style}]" if style else session.status,
            f"{count_total_completed_sets(session)}/{count_total_target_sets(session)}",
            f"{volume:g}" if volume > 0 else "-",
        )

    return table


def print_session_detail(session: Session, weight_unit: str = "kg") -> None:
    """Print one session with its exercises and logged sets."""
    console.print()
    console.print(f"[bold]{session.workout or 'Session'}[/bold]  [dim]{session.id}[/dim]")
    console.print(
        f"Date: {session.date}  Start: {_clock(session.start_time)}  "
        f"End: {_clock(session.end_time)}  Status: {session.status}"
    )
    if session.notes:
        console.print(f"[dim]{session.notes}[/dim]")

    for exercise in session.exercises:
        console.print()
        console.print(
            f"[bold cyan]{exercise.exercise}[/bold cyan]  "
            f"{exercise.target_sets} × {format_rep_range(exercise.target_reps_min, exercise.target_reps_max)}"
            f"  rest {exercise.rest_seconds}s"
        )
        if not exercise.sets:
            console.print("  [dim]no sets logged[/dim]")
            continue

        table = Table(show_header=True, header_style="dim")
        table.add_column("#", justify="right")
        table.add_column("Set")
        table.add_column("RPE", justify="right")
        table.add_column("Done")
        for n, logged in enumerate(exercise.sets, 1):
            table.add_row(
                str(n),
                format_set_display(logged, weight_unit),
                f"{logged.rpe:g}" if logged.rpe is not None else "-",
                "yes" if logged.completed else "no",
            )
        console.print(table)
        heaviest = max_weight(exercise)
        console.print(
            f"  [dim]Total reps: {total_reps(exercise)}  "
            f"Top weight: {f'{heaviest:g}{weight_unit}' if heaviest > 0 else 'body weight'}[/dim]"
        )

    if session.review is not None:
        console.print()
        console.print("[bold]Review[/bold]" + (" (skipped)" if session.review.skipped else ""))
        for answer in session.review.answers:
            comment = f" ({answer.free_text})" if answer.free_text else ""
            console.print(f"  {answer.question_text} [green]{answer.selected_option_label}[/green]{comment}")

    if session.coach_feedback:
        console.print()
        console.print("[bold]Coach Feedback[/bold]")
        console.print(session.coach_feedback)
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ").strip().lower()
    return response in ("y", "yes")
