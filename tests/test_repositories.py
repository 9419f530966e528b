"""Tests for the document repositories over an in-memory store."""

import json

import pytest

from fit_vault.core.errors import RecordExistsError, RecordNotFoundError
from fit_vault.core.models import (
    Exercise,
    LoggedSet,
    Program,
    Session,
    SessionExercise,
    SessionReview,
    Workout,
    WorkoutExercise,
)
from fit_vault.io.database_exercise_repository import DatabaseExerciseRepository, external_to_entry
from fit_vault.io.exercise_repository import ExerciseRepository
from fit_vault.io.program_repository import ProgramRepository
from fit_vault.io.session_repository import SessionRepository
from fit_vault.io.workout_repository import WorkoutRepository

BASE = "Fitness"


def _session(session_id: str, start_time: str, status: str = "completed", workout: str | None = "Push Day") -> Session:
    return Session(
        id=session_id,
        date=start_time[:10],
        start_time=start_time,
        status=status,
        workout=workout,
        exercises=[SessionExercise("Bench Press", 3, 6, 8, 180, sets=[LoggedSet(80, 8)])],
    )


def _workout(name: str = "Push Day") -> Workout:
    return Workout(
        id="",
        name=name,
        exercises=[
            WorkoutExercise("Bench Press", 4, 6, 8, 180, exercise_id="bench-press", source="custom"),
            WorkoutExercise("Barbell Curl", 3, 8, 12, 90, exercise_id="barbell-curl", source="custom"),
        ],
    )


@pytest.fixture
def database(tmp_path) -> DatabaseExerciseRepository:
    repo = DatabaseExerciseRepository(tmp_path / "db.json")
    repo.import_records(
        [
            {
                "id": "Barbell_Curl",
                "name": "Barbell Curl",
                "category": "strength",
                "equipment": "barbell",
                "primaryMuscles": ["biceps"],
                "instructions": ["Curl."],
                "images": ["Barbell_Curl/0.jpg", "Barbell_Curl/1.jpg"],
            },
            {"id": "x", "name": ""},
        ]
    )
    return repo


class TestExerciseRepository:
    @pytest.mark.asyncio
    async def test_create_get_and_duplicate(self, store):
        repo = ExerciseRepository(store, BASE)
        created = await repo.create(Exercise(id="", name="Bench Press", muscle_groups=["Chest"]))
        assert created.id == "bench-press"
        assert "Fitness/Exercises/bench-press.md" in store.files

        assert (await repo.get("bench-press")).name == "Bench Press"
        assert (await repo.get_by_name("bench press")).id == "bench-press"
        assert (await repo.get_by_name("bench-press")).id == "bench-press"

        with pytest.raises(RecordExistsError):
            await repo.create(Exercise(id="", name="Bench Press"))

    @pytest.mark.asyncio
    async def test_update_and_delete(self, store):
        repo = ExerciseRepository(store, BASE)
        await repo.create(Exercise(id="", name="Squat"))
        updated = await repo.update("squat", equipment="Barbell")
        assert updated.equipment == "Barbell"
        assert (await repo.get("squat")).equipment == "Barbell"

        with pytest.raises(RecordNotFoundError):
            await repo.update("missing", equipment="None")

        await repo.delete("squat")
        await repo.delete("missing")
        assert await repo.get("squat") is None

    @pytest.mark.asyncio
    async def test_list_sorted_and_search(self, store):
        repo = ExerciseRepository(store, BASE)
        await repo.create(Exercise(id="", name="squat", muscle_groups=["Quads"]))
        await repo.create(Exercise(id="", name="Bench Press", muscle_groups=["Chest"]))
        store.files["Fitness/Exercises/broken.md"] = "no metadata"

        assert [e.name for e in await repo.list()] == ["Bench Press", "squat"]
        assert [e.id for e in await repo.search("quad")] == ["squat"]


class TestDatabaseExerciseRepository:
    def test_import_and_lookup(self, database, tmp_path):
        assert database.is_imported()
        assert database.info()["count"] == 1

        curl = database.get("barbell-curl")
        assert curl.name == "Barbell Curl"
        assert curl.category == "Strength"
        assert curl.muscle_groups == ["Biceps"]
        assert database.get_by_name("barbell curl") is curl
        assert [e.id for e in database.search("biceps")] == ["barbell-curl"]

        reloaded = DatabaseExerciseRepository(tmp_path / "db.json")
        assert [e.id for e in reloaded.list()] == ["barbell-curl"]

    def test_clear(self, database, tmp_path):
        database.clear()
        assert not database.is_imported()
        data = json.loads((tmp_path / "db.json").read_text())
        assert data["exercises"] == []

    def test_missing_file(self, tmp_path):
        repo = DatabaseExerciseRepository(tmp_path / "none.json")
        assert repo.list() == []
        assert repo.info() is None

    def test_image_urls(self):
        entry = external_to_entry({"id": "Dip", "name": "Dip", "images": ["a", "b"]}, "https://img.example/")
        assert entry["images"] == ["https://img.example/Dip/0.jpg", "https://img.example/Dip/1.jpg"]


class TestWorkoutRepository:
    @pytest.mark.asyncio
    async def test_create_and_database_names(self, store, database):
        repo = WorkoutRepository(store, BASE, database=database)
        created = await repo.create(_workout())
        assert created.id == "push-day"

        workout = await repo.get("push-day")
        assert [e.exercise for e in workout.exercises] == ["Bench Press", "Barbell Curl"]
        with pytest.raises(RecordExistsError):
            await repo.create(_workout())

    @pytest.mark.asyncio
    async def test_rename_moves_document(self, store):
        repo = WorkoutRepository(store, BASE)
        await repo.create(_workout())
        new_id = await repo.update("push-day", name="Chest Day")
        assert new_id == "chest-day"
        assert "Fitness/Workouts/chest-day.md" in store.files
        assert "Fitness/Workouts/push-day.md" in store.trashed
        assert (await repo.get("chest-day")).name == "Chest Day"

    @pytest.mark.asyncio
    async def test_rename_to_taken_slug_keeps_id(self, store):
        repo = WorkoutRepository(store, BASE)
        await repo.create(_workout())
        await repo.create(_workout("Leg Day"))
        assert await repo.update("push-day", name="Leg Day") == "push-day"
        assert (await repo.get("push-day")).name == "Leg Day"

    @pytest.mark.asyncio
    async def test_update_missing(self, store):
        with pytest.raises(RecordNotFoundError):
            await WorkoutRepository(store, BASE).update("nope", name="X")

    @pytest.mark.asyncio
    async def test_duplicate_and_search(self, store):
        repo = WorkoutRepository(store, BASE)
        await repo.create(_workout())
        copy = await repo.duplicate("push-day", "Push Day 2")
        assert copy.id == "push-day-2"
        assert len(copy.exercises) == 2
        assert [w.id for w in await repo.search("push")] == ["push-day", "push-day-2"]

    @pytest.mark.asyncio
    async def test_migrate_exercise_references(self, store, database):
        repo = WorkoutRepository(store, BASE)
        await repo.create(_workout())
        await repo.create(
            Workout(id="", name="Bench Only", exercises=[WorkoutExercise("Bench Press", 3, 5, 5, 120, exercise_id="bench-press", source="custom")])
        )

        assert await repo.migrate_exercise_references(database) == (1, 1)
        sources = {e.exercise_id: e.source for e in (await repo.get("push-day")).exercises}
        assert sources == {"bench-press": "custom", "barbell-curl": "database"}
        assert "| barbell-curl | 3 | 8-12 | 90s |" in store.files["Fitness/Workouts/push-day.md"]


class TestProgramRepository:
    @pytest.mark.asyncio
    async def test_inline_workouts(self, store):
        repo = ProgramRepository(store, BASE)
        inline = Workout(id="upper-a", name="Upper A", exercises=_workout().exercises)
        created = await repo.create(Program(id="", name="Upper Lower", workouts=["upper-a"], inline_workouts=[inline]))
        assert created.id == "upper-lower"
        assert repo.has_inline_workouts("upper-lower")

        fresh = ProgramRepository(store, BASE)
        assert not fresh.has_inline_workouts("upper-lower")
        program = await fresh.get("upper-lower")
        assert program.workouts == ["upper-a"]
        assert fresh.get_inline_workout("upper-lower", "upper-a").name == "Upper A"

    @pytest.mark.asyncio
    async def test_update_preserves_inline_workouts(self, store):
        repo = ProgramRepository(store, BASE)
        inline = Workout(id="upper-a", name="Upper A", exercises=_workout().exercises)
        await repo.create(Program(id="", name="Upper Lower", inline_workouts=[inline]))

        await repo.update("upper-lower", description="Now with a description")
        program = await repo.get("upper-lower")
        assert program.description == "Now with a description"
        assert [w.id for w in program.inline_workouts] == ["upper-a"]

    @pytest.mark.asyncio
    async def test_errors_and_delete(self, store):
        repo = ProgramRepository(store, BASE)
        await repo.create(Program(id="", name="Base"))
        with pytest.raises(RecordExistsError):
            await repo.create(Program(id="", name="Base"))
        with pytest.raises(RecordNotFoundError):
            await repo.update("missing", name="X")
        await repo.delete("base")
        assert await repo.list() == []
        assert await repo.get_by_name("Base") is None


class TestSessionRepository:
    @pytest.mark.asyncio
    async def test_save_creates_then_modifies(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        session = _session("2026-10-19-10-00-00-push-day", "2026-10-19T10:00:00", status="active")
        await repo.save_active(session)
        session.notes = "second"
        await repo.save_active(session)
        assert [op for op, _, _ in store.writes] == ["create", "modify"]
        assert (await repo.get(session.id)).notes == "second"

    @pytest.mark.asyncio
    async def test_list_newest_first_and_active(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        await repo.save_active(_session("a", "2026-10-10T10:00:00"))
        await repo.save_active(_session("b", "2026-10-19T10:00:00", status="paused"))
        await repo.save_active(_session("c", "2026-10-15T10:00:00"))
        store.files["Fitness/Sessions/junk.md"] = "---\nnotes: no start time\n---\n"

        assert [s.id for s in await repo.list()] == ["b", "c", "a"]
        assert (await repo.get_active()).id == "b"
        assert [s.id for s in await repo.get_recent(2)] == ["b", "c"]
        assert [s.id for s in await repo.get_by_date_range("2026-10-10", "2026-10-15")] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_get_previous(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        await repo.save_active(_session("old", "2026-10-05T10:00:00"))
        await repo.save_active(_session("newer", "2026-10-12T10:00:00"))
        await repo.save_active(_session("open", "2026-10-19T10:00:00", status="active"))
        await repo.save_active(_session("legs", "2026-10-18T10:00:00", workout="Leg Day"))

        current = await repo.get("open")
        assert (await repo.get_previous("push day")).id == "newer"
        assert (await repo.get_previous("Push Day", before=current)).id == "newer"
        newer = await repo.get("newer")
        assert (await repo.get_previous("Push Day", before=newer)).id == "old"
        assert await repo.get_previous("Pull Day") is None

    @pytest.mark.asyncio
    async def test_finalize_keeps_id_and_removes_legacy(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        session = _session("s1", "2026-10-19T10:00:00", status="active")
        await repo.save_active(session)
        store.files["Fitness/Sessions/.active-session.md"] = "legacy"

        final = await repo.finalize_active(session)
        assert final.id == "s1"
        assert final.status == "completed"
        assert final.end_time
        assert (await repo.get("s1")).status == "completed"
        assert "Fitness/Sessions/.active-session.md" in store.trashed
        assert await repo.get_active() is None

    @pytest.mark.asyncio
    async def test_delete_active(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        await repo.save_active(_session("s1", "2026-10-19T10:00:00", status="active"))
        await repo.delete_active()
        assert await repo.get("s1") is None
        await repo.delete_active()

    @pytest.mark.asyncio
    async def test_review_and_feedback(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        await repo.save_active(_session("s1", "2026-10-19T10:00:00"))
        await repo.set_review("s1", SessionReview("upper-lower", "2026-10-19T11:00:00", skipped=True))
        await repo.set_coach_feedback("s1", "Good pace")

        session = await repo.get("s1")
        assert session.review.skipped
        assert session.coach_feedback == "Good pace"
        assert session.status == "completed"
        with pytest.raises(RecordNotFoundError):
            await repo.set_coach_feedback("missing", "x")


class TestSaveFallbacks:
    PATH = "Fitness/Sessions/s1.md"

    @pytest.mark.asyncio
    async def test_create_race_falls_back_to_modify(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        store.files[self.PATH] = "written a moment ago"
        store.exists_lies = True

        await repo.save_active(_session("s1", "2026-10-19T10:00:00", status="active"))
        assert store.writes[-1][0] == "modify"
        assert (await repo.get("s1")).status == "active"

    @pytest.mark.asyncio
    async def test_stale_handle_is_retried(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        store.files[self.PATH] = "old"
        store.stale_lookups = 1

        await repo.save_active(_session("s1", "2026-10-19T10:00:00", status="active"))
        assert [op for op, _, _ in store.writes] == ["modify"]

    @pytest.mark.asyncio
    async def test_unresolvable_handle_writes_by_path(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        store.files[self.PATH] = "old"
        store.exists_lies = True
        store.unresolvable = True

        await repo.save_active(_session("s1", "2026-10-19T10:00:00", status="active"))
        assert store.writes[-1][0] == "write"
        assert "status: active" in store.files[self.PATH]

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, store):
        repo = SessionRepository(store, BASE, retry_delay=0)
        store.fail_writes = 1
        with pytest.raises(OSError):
            await repo.save_active(_session("s1", "2026-10-19T10:00:00", status="active"))
