"""Tests for identifiers, references, lifecycle rules and session metrics."""

from datetime import datetime

import pytest

from fit_vault.core.errors import InvalidTransitionError
from fit_vault.core.identifiers import (
    extract_date_from_session_id,
    generate_session_id,
    slug_to_title_case,
    to_slug,
)
from fit_vault.core.lifecycle import (
    VALID_TRANSITIONS,
    can_discard_session,
    can_finish_session,
    find_first_unfinished_exercise_index,
    is_session_fully_complete,
    is_valid_transition,
    should_auto_start_rest_timer,
)
from fit_vault.core.metrics import (
    count_completed_exercises,
    count_total_completed_sets,
    count_total_target_sets,
    exercise_progress,
    exercise_volume,
    format_set_display,
    has_completed_work,
    is_exercise_complete,
    last_completed_set,
    max_weight,
    session_progress,
    total_reps,
    total_volume,
)
from fit_vault.core.models import SESSION_STATUSES, LoggedSet, Session, SessionExercise
from fit_vault.core.references import (
    create_wiki_link,
    determine_exercise_source,
    extract_exercise_id,
    extract_wiki_link_name,
    is_wiki_link,
    should_use_wiki_link,
)


def _exercise(name: str, target_sets: int, sets: list[tuple[float, int]]) -> SessionExercise:
    return SessionExercise(
        exercise=name,
        target_sets=target_sets,
        target_reps_min=6,
        target_reps_max=8,
        rest_seconds=120,
        sets=[LoggedSet(weight=w, reps=r) for w, r in sets],
    )


def _session(*exercises: SessionExercise) -> Session:
    return Session(id="s", date="2026-10-19", start_time="2026-10-19T10:00:00", exercises=list(exercises))


class TestIdentifiers:
    def test_slug(self):
        assert to_slug("Bench Press (Barbell)") == "bench-press-barbell"
        assert to_slug("  Push  Day!! ") == "push-day"

    def test_title_case(self):
        assert slug_to_title_case("bench-press") == "Bench Press"

    def test_session_id(self):
        started = datetime(2026, 10, 19, 7, 5, 9)
        assert generate_session_id(started) == "2026-10-19-07-05-09"
        assert generate_session_id(started, "Push Day") == "2026-10-19-07-05-09-push-day"

    def test_date_from_session_id(self):
        assert extract_date_from_session_id("2026-10-19-07-05-09-push-day") == "2026-10-19"
        assert extract_date_from_session_id("active-session") is None


class TestReferences:
    def test_is_wiki_link(self):
        assert is_wiki_link("[[bench-press]]")
        assert is_wiki_link(" [[Exercises/bench-press|Bench]] ")
        assert not is_wiki_link("bench-press")

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("[[bench-press]]", "bench-press"),
            ("[[Exercises/bench-press]]", "bench-press"),
            ("[[Exercises/bench-press|Bench]]", "bench-press"),
            ("overhead-press", "overhead-press"),
        ],
    )
    def test_extract_id(self, value, expected):
        assert extract_exercise_id(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("[[bench-press]]", "Bench Press"),
            ("[[Exercises/bench-press|Flat Bench]]", "Flat Bench"),
            ("[[Exercises/Bench Press]]", "Bench Press"),
            ("[[Workouts/push-day#warm-up]]", "Warm Up"),
            ("overhead-press", "Overhead Press"),
            ("Squat", "Squat"),
        ],
    )
    def test_extract_name(self, value, expected):
        assert extract_wiki_link_name(value) == expected

    def test_create_and_sources(self):
        assert create_wiki_link("bench-press") == "[[bench-press]]"
        assert create_wiki_link("bench-press", "Bench") == "[[bench-press|Bench]]"
        assert determine_exercise_source(True) == "database"
        assert determine_exercise_source(False) == "custom"
        assert should_use_wiki_link("custom")
        assert not should_use_wiki_link("database")
        assert not should_use_wiki_link(None)


class TestLifecycle:
    ALLOWED = {
        ("active", "paused"),
        ("active", "completed"),
        ("active", "discarded"),
        ("paused", "active"),
        ("paused", "completed"),
        ("paused", "discarded"),
    }

    def test_every_status_pair(self):
        for source in SESSION_STATUSES:
            for target in SESSION_STATUSES:
                assert is_valid_transition(source, target) == ((source, target) in self.ALLOWED)
        assert VALID_TRANSITIONS == self.ALLOWED

    def test_terminal_states(self):
        assert not is_valid_transition("completed", "active")
        assert not can_discard_session("completed")
        assert not can_discard_session("discarded")
        assert can_discard_session("paused")

    def test_finish_needs_work(self):
        assert not can_finish_session(has_completed_work(_session(_exercise("Bench", 3, []))))
        assert can_finish_session(has_completed_work(_session(_exercise("Bench", 3, [(80, 8)]))))

    def test_rest_timer_rule(self):
        assert should_auto_start_rest_timer(True, 2, 3)
        assert not should_auto_start_rest_timer(True, 3, 3)
        assert not should_auto_start_rest_timer(False, 1, 3)

    def test_first_unfinished(self):
        session = _session(
            _exercise("Bench", 2, [(80, 8), (80, 8)]),
            _exercise("Row", 2, [(60, 10)]),
        )
        assert find_first_unfinished_exercise_index(session) == 1
        session.exercises[1].sets.append(LoggedSet(60, 10))
        assert find_first_unfinished_exercise_index(session) == -1
        assert is_session_fully_complete(session)
        assert not is_session_fully_complete(_session())

    def test_error_message(self):
        assert str(InvalidTransitionError("completed", "active")) == "Invalid session transition: completed -> active"


class TestMetrics:
    def test_session_metrics(self):
        bench = _exercise("Bench", 4, [(80, 8), (80, 7), (82.5, 6), (82.5, 6)])
        pullups = _exercise("Pull Up", 3, [(0, 10)])
        pullups.sets.append(LoggedSet(weight=0, reps=9, completed=False))
        session = _session(bench, pullups)

        assert total_volume(session) == 80 * 8 + 80 * 7 + 82.5 * 6 * 2
        assert count_total_completed_sets(session) == 5
        assert count_total_target_sets(session) == 7
        assert session_progress(session) == pytest.approx(5 / 7)
        assert count_completed_exercises(session) == 1
        assert is_exercise_complete(session, 0)
        assert not is_exercise_complete(session, 1)
        assert not is_exercise_complete(session, 5)

    def test_exercise_metrics(self):
        bench = _exercise("Bench", 4, [(80, 8), (82.5, 6)])
        assert total_reps(bench) == 14
        assert max_weight(bench) == 82.5
        assert exercise_volume(bench) == 80 * 8 + 82.5 * 6
        assert last_completed_set(bench).weight == 82.5
        assert max_weight(_exercise("Dip", 3, [])) == 0
        assert exercise_progress(bench) == 0.5
        assert exercise_progress(_exercise("Dip", 1, [(0, 10), (0, 8)])) == 1.0
        assert exercise_progress(_exercise("Plank", 0, [])) == 0.0

    def test_set_display(self):
        assert format_set_display(LoggedSet(82.5, 6)) == "82.5kg × 6"
        assert format_set_display(LoggedSet(100, 5), "lbs") == "100lbs × 5"
        assert format_set_display(LoggedSet(0, 12)) == "BW × 12"
