"""
Smoke tests for the fit-vault CLI.

Tests basic functionality:
- App runs and shows help
- init creates the folder layout
- Sessions can be listed, shown and deleted
"""

import asyncio
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fit_vault.cli.main import app
from fit_vault.core.models import LoggedSet, Session, SessionExercise
from fit_vault.io.file_store import LocalFileStore
from fit_vault.io.session_repository import SessionRepository

runner = CliRunner()


@pytest.fixture
def vault_root(tmp_path, monkeypatch) -> Path:
    """Empty document root; HOME points at an empty folder so defaults apply."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    root = tmp_path / "vault"
    root.mkdir()
    return root


def _seed_sessions(root: Path) -> None:
    repo = SessionRepository(LocalFileStore(root), "Fitness")

    async def seed():
        await repo.save_active(
            Session(
                id="2026-10-12-10-00-00-push-day",
                date="2026-10-12",
                start_time="2026-10-12T10:00:00",
                end_time="2026-10-12T11:00:00",
                status="completed",
                workout="Push Day",
                exercises=[
                    SessionExercise(
                        "Bench Press", 3, 6, 8, 180, sets=[LoggedSet(80, 8), LoggedSet(80, 7)]
                    )
                ],
            )
        )
        await repo.save_active(
            Session(
                id="2026-10-19-09-30-00",
                date="2026-10-19",
                start_time="2026-10-19T09:30:00",
                status="paused",
                exercises=[SessionExercise("Squat", 5, 5, 5, 180)],
            )
        )

    asyncio.run(seed())


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "sessions" in result.output
        assert "show-session" in result.output

    def test_init_creates_folders(self, vault_root):
        result = runner.invoke(app, ["init", "--root", str(vault_root)])
        assert result.exit_code == 0
        for folder in ("Exercises", "Workouts", "Programs", "Sessions"):
            assert (vault_root / "Fitness" / folder).is_dir()

    def test_init_custom_base_path(self, vault_root):
        result = runner.invoke(app, ["init", "-r", str(vault_root), "-b", "Training/Log"])
        assert result.exit_code == 0
        assert (vault_root / "Training" / "Log" / "Sessions").is_dir()

    def test_library_commands_on_empty_root(self, vault_root):
        for command, message in (
            ("exercises", "No exercises found."),
            ("workouts", "No workouts found."),
            ("programs", "No programs found."),
        ):
            result = runner.invoke(app, [command, "--root", str(vault_root)])
            assert result.exit_code == 0
            assert message in result.output


class TestSessionCommands:
    def test_no_sessions(self, vault_root):
        result = runner.invoke(app, ["sessions", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "No sessions recorded yet." in result.output

        result = runner.invoke(app, ["active", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "No active session." in result.output

    def test_sessions_json(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(app, ["sessions", "--json", "--root", str(vault_root)])
        assert result.exit_code == 0

        data = json.loads(result.output)
        assert [s["id"] for s in data] == ["2026-10-19-09-30-00", "2026-10-12-10-00-00-push-day"]
        push = data[1]
        assert push["workout"] == "Push Day"
        assert push["status"] == "completed"
        assert push["completed_sets"] == 2
        assert push["volume"] == 1200

    def test_sessions_limit(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(app, ["sessions", "-j", "-l", "1", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert len(json.loads(result.output)) == 1

    def test_sessions_table(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(app, ["sessions", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "Sessions" in result.output

    def test_show_session(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(app, ["show-session", "2026-10-12-10-00-00-push-day", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "Bench Press" in result.output
        assert "Total reps: 15" in result.output

    def test_show_missing_session(self, vault_root):
        result = runner.invoke(app, ["show-session", "nope", "--root", str(vault_root)])
        assert result.exit_code == 1
        assert "Session not found" in result.output

    def test_active_session(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(app, ["active", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "Squat" in result.output
        assert "paused" in result.output

    def test_delete_session(self, vault_root):
        _seed_sessions(vault_root)
        session_file = vault_root / "Fitness" / "Sessions" / "2026-10-19-09-30-00.md"
        assert session_file.exists()

        result = runner.invoke(app, ["delete-session", "2026-10-19-09-30-00", "--force", "--root", str(vault_root)])
        assert result.exit_code == 0
        assert "Deleted session" in result.output
        assert not session_file.exists()
        assert (vault_root / ".trash" / "Fitness" / "Sessions" / "2026-10-19-09-30-00.md").exists()

    def test_delete_cancelled(self, vault_root):
        _seed_sessions(vault_root)
        result = runner.invoke(
            app, ["delete-session", "2026-10-19-09-30-00", "--root", str(vault_root)], input="n\n"
        )
        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert (vault_root / "Fitness" / "Sessions" / "2026-10-19-09-30-00.md").exists()

    def test_delete_missing_session(self, vault_root):
        result = runner.invoke(app, ["delete-session", "nope", "-f", "--root", str(vault_root)])
        assert result.exit_code == 1
