"""Tests for record <-> document conversion."""

import pytest

from fit_vault.core.errors import ValidationError
from fit_vault.core.models import (
    Exercise,
    LoggedSet,
    PreviousSession,
    Program,
    QuestionAnswer,
    Session,
    SessionExercise,
    SessionReview,
    Workout,
    WorkoutExercise,
)
from fit_vault.io.serializers import (
    database_record_to_exercise,
    document_to_exercise,
    document_to_program,
    document_to_session,
    document_to_workout,
    exercise_to_document,
    program_to_document,
    session_to_document,
    validate_non_negative,
    validate_positive,
    validate_rpe,
    workout_to_document,
)


def _session(**overrides) -> Session:
    fields = dict(
        id="2026-10-19-10-00-00-push-day",
        date="2026-10-19",
        start_time="2026-10-19T10:00:00",
        workout="Push Day",
        exercises=[
            SessionExercise(
                exercise="Bench Press",
                target_sets=4,
                target_reps_min=6,
                target_reps_max=8,
                rest_seconds=180,
                sets=[LoggedSet(80, 8, timestamp="2026-10-19T10:05:00"), LoggedSet(0, 12, timestamp="2026-10-19T10:09:00")],
            )
        ],
    )
    fields.update(overrides)
    return Session(**fields)


class TestValidators:
    def test_non_negative(self):
        assert validate_non_negative(0, "weight") == 0
        with pytest.raises(ValidationError):
            validate_non_negative(-1, "weight")
        with pytest.raises(ValidationError):
            validate_non_negative(float("nan"), "weight")
        with pytest.raises(ValidationError):
            validate_non_negative(True, "weight")

    def test_positive(self):
        with pytest.raises(ValidationError):
            validate_positive(0, "reps")

    def test_rpe(self):
        assert validate_rpe(None) is None
        assert validate_rpe(8.5) == 8.5
        for bad in (0, 0.5, 10.5):
            with pytest.raises(ValidationError):
                validate_rpe(bad)


class TestExerciseDocument:
    def test_round_trip(self):
        exercise = Exercise(
            id="bench-press",
            name="Bench Press",
            category="Strength",
            equipment="Barbell",
            muscle_groups=["Chest", "Triceps"],
            default_weight=60,
            weight_increment=2.5,
            notes="Keep shoulder blades retracted.",
        )
        parsed = document_to_exercise("bench-press", exercise_to_document(exercise))
        assert parsed == exercise

    def test_missing_name_is_not_a_record(self):
        assert document_to_exercise("x", "---\ncategory: Strength\n---\n") is None
        assert document_to_exercise("x", "no metadata at all") is None

    def test_database_record(self):
        exercise = database_record_to_exercise(
            {
                "id": "barbell-curl",
                "name": "Barbell Curl",
                "category": "Strength",
                "primaryMuscles": ["Biceps"],
                "secondaryMuscles": ["Forearms", "Biceps"],
                "instructions": ["Stand tall.", "Curl the bar."],
                "images": ["a.jpg", "b.jpg"],
            }
        )
        assert exercise.source == "database"
        assert exercise.muscle_groups == ["Biceps", "Forearms"]
        assert exercise.notes == "1. Stand tall.\n2. Curl the bar."
        assert (exercise.image0, exercise.image1) == ("a.jpg", "b.jpg")
        assert database_record_to_exercise({"name": "No id"}) is None


class TestWorkoutDocument:
    def test_round_trip(self):
        workout = Workout(
            id="push-day",
            name="Push Day",
            description="Chest and shoulders",
            estimated_duration=60,
            exercises=[
                WorkoutExercise("Bench Press", 4, 6, 8, 180, exercise_id="bench-press", source="custom"),
                WorkoutExercise("Overhead Press", 3, 8, 10, 120, exercise_id="overhead-press", source="database"),
            ],
        )
        text = workout_to_document(workout)
        assert "estimatedDuration: 60" in text
        assert document_to_workout("push-day", text) == workout


class TestProgramDocument:
    def test_round_trip_with_inline_workouts(self):
        inline = Workout(
            id="upper-a",
            name="Upper A",
            exercises=[WorkoutExercise("Bench Press", 4, 6, 8, 180, exercise_id="bench-press", source="database")],
        )
        program = Program(
            id="upper-lower",
            name="Upper Lower",
            description="Four weeks.",
            workouts=["lower-b", "upper-a"],
            inline_workouts=[inline],
        )
        text = program_to_document(program)
        assert "workouts: [lower-b]" in text

        parsed = document_to_program("upper-lower", text)
        assert parsed.description == "Four weeks."
        assert parsed.workouts == ["lower-b", "upper-a"]
        assert [w.id for w in parsed.inline_workouts] == ["upper-a"]

    def test_linked_workout_ids(self):
        parsed = document_to_program("p", '---\nname: P\nworkouts: ["[[Workouts/push-day]]", legs]\n---\n')
        assert parsed.workouts == ["push-day", "legs"]


class TestSessionDocument:
    def test_round_trip(self):
        session = _session(
            status="completed",
            end_time="2026-10-19T11:00:00",
            notes="Felt strong",
            previous=PreviousSession(
                date="2026-10-12",
                exercises=[SessionExercise("Bench Press", 4, 6, 8, 180, sets=[LoggedSet(77.5, 8, timestamp="2026-10-12T10:01:00")])],
                coach_feedback="Add weight next time",
            ),
            review=SessionReview(
                program_id="upper-lower",
                completed_at="2026-10-19T11:05:00",
                answers=[QuestionAnswer("How did it feel?", "How did it feel?", "Good", "Good")],
            ),
            coach_feedback="Solid session",
        )
        text = session_to_document(session)

        headings = [line for line in text.split("\n") if line.startswith("# ")]
        assert headings == ["# Exercises", "# Previous", "# Previous Coach Feedback", "# Review", "# Coach Feedback"]

        parsed = document_to_session(session.id, text)
        assert parsed == session

    def test_active_session_minimal(self):
        session = _session(exercises=[])
        parsed = document_to_session(session.id, session_to_document(session))
        assert parsed.status == "active"
        assert parsed.exercises == []
        assert parsed.previous is None

    def test_wiki_link_workout_and_unknown_status(self):
        text = "---\nstartTime: 2026-10-19T10:00:00\nworkout: [[Workouts/push-day]]\nstatus: weird\n---\n"
        parsed = document_to_session("s", text)
        assert parsed.workout == "Push Day"
        assert parsed.status == "completed"
        assert parsed.date == "2026-10-19"

    def test_requires_start_time(self):
        assert document_to_session("s", "---\ndate: 2026-10-19\n---\n") is None
