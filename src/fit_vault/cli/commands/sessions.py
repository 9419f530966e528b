"""Session commands: sessions, show-session, active, delete-session."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.metrics import count_total_completed_sets, session_progress, total_volume
from .. import views
from ..app import BasePathOption, RootOption, app, get_vault


@app.command("sessions")
def list_sessions(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Show only the N most recent sessions"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    Display training sessions, newest first.
    """
    vault = get_vault(root, base_path)
    sessions = asyncio.run(vault.sessions.list())
    if limit is not None:
        sessions = sessions[:limit]

    if json_out:
        output = [
            {
                "id": s.id,
                "date": s.date,
                "start_time": s.start_time,
                "end_time": s.end_time,
                "workout": s.workout,
                "status": s.status,
                "completed_sets": count_total_completed_sets(s),
                "progress": round(session_progress(s), 3),
                "volume": total_volume(s),
            }
            for s in sessions
        ]
        print(json.dumps(output, indent=2))
        return

    if not sessions:
        views.print_info("No sessions recorded yet.")
        return
    views.console.print(views.format_session_table(sessions, vault.settings.weight_unit))


@app.command("show-session")
def show_session(
    session_id: Annotated[str, typer.Argument(help="Session ID (see the sessions command)")],
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    Show one session with all logged sets.
    """
    vault = get_vault(root, base_path)
    session = asyncio.run(vault.sessions.get(session_id))
    if session is None:
        views.print_error(f"Session not found: {session_id}")
        raise typer.Exit(1)
    views.print_session_detail(session, vault.settings.weight_unit)


@app.command()
def active(
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    Show the open (active or paused) session, if any.
    """
    vault = get_vault(root, base_path)
    session = asyncio.run(vault.sessions.get_active())
    if session is None:
        views.print_info("No active session.")
        return
    views.print_session_detail(session, vault.settings.weight_unit)


@app.command("delete-session")
def delete_session(
    session_id: Annotated[str, typer.Argument(help="Session ID to delete")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    root: RootOption = Path("."),
    base_path: BasePathOption = None,
) -> None:
    """
    Move a session document to the trash.
    """
    vault = get_vault(root, base_path)
    session = asyncio.run(vault.sessions.get(session_id))
    if session is None:
        views.print_error(f"Session not found: {session_id}")
        raise typer.Exit(1)

    views.console.print(f"Session to delete: [bold]{session.date}[/bold] ({session.workout or 'no workout'})")
    if not force and not views.confirm_action("Delete this session?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        asyncio.run(vault.sessions.delete(session_id))
    except OSError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted session {session_id}")
