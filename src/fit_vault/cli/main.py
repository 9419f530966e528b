"""
CLI entry point using Typer.

Provides commands for browsing a fitness document store:
- init: Create the folder layout
- exercises / workouts / programs: List library records
- sessions / show-session / active: Inspect training sessions
- delete-session: Move a session document to the trash
"""

from .app import app
from .commands import library, sessions  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
