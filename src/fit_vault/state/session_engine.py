"""
Session engine: owns the open training session.

All mutations go through the engine. Structural edits (adding, removing or
reordering exercises, RPE and muscle feedback) are queued for saving
without waiting; set logging, editing and deleting wait until the document
has been written. Timers and events are per-engine, so independent engines
never share state.
"""

import copy
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from ..core.config import (
    DEFAULT_REPS_MAX,
    DEFAULT_REPS_MIN,
    DEFAULT_TARGET_SETS,
    TIMER_TICK_SECONDS,
    Settings,
)
from ..core.errors import InvalidTransitionError, SessionStateError, ValidationError
from ..core.identifiers import generate_session_id
from ..core.lifecycle import (
    can_discard_session,
    can_finish_session,
    find_first_unfinished_exercise_index,
    is_valid_transition,
    should_auto_start_rest_timer,
)
from ..core.metrics import count_completed_sets, has_completed_work, last_completed_set
from ..core.models import (
    LoggedSet,
    MUSCLE_ENGAGEMENTS,
    MuscleEngagement,
    PreviousSession,
    Session,
    SessionExercise,
    SessionStatus,
    Workout,
)
from ..io.serializers import validate_non_negative, validate_positive, validate_rpe
from ..io.session_repository import SessionRepository
from .duration_timer import DurationTimer
from .events import EventBus, EventName, Listener
from .persistence import PersistenceManager
from .rest_timer import RestTimer
from .set_timer import SetTimer


def _local_now() -> datetime:
    return datetime.now().astimezone()


class SessionEngine:
    """
    Single owner of the active session document.

    Args:
        repository: Session repository the document is saved through
        settings: User settings (rest defaults, countdown, auto rest)
        now: Clock returning an aware datetime; timers derive from it
        tick_interval: Seconds between timer ticks
    """

    def __init__(
        self,
        repository: SessionRepository,
        settings: Settings | None = None,
        now: Callable[[], datetime] = _local_now,
        tick_interval: float = TIMER_TICK_SECONDS,
    ):
        self.repository = repository
        self.settings = settings or Settings()
        self._now = now
        self.events = EventBus()
        self.persistence = PersistenceManager(repository)

        self.session: Session | None = None
        self.current_exercise_index = 0
        self._has_persisted_set = False

        self.rest_timer = RestTimer(self._emit, self._on_rest_complete, clock=self._clock, interval=tick_interval)
        self.set_timer = SetTimer(self._emit, clock=self._clock, interval=tick_interval)
        self.duration_timer = DurationTimer(
            self._emit,
            get_start_time=lambda: self.session.start_time if self.session else None,
            is_persisted=lambda: self._has_persisted_set,
            clock=self._clock,
            interval=tick_interval,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, event: EventName | str, listener: Listener) -> Callable[[], None]:
        return self.events.subscribe(event, listener)

    def _clock(self) -> float:
        return self._now().timestamp()

    def _emit(self, name: EventName, payload: dict[str, Any] | None = None) -> None:
        self.events.emit(name, payload)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def has_active_session(self) -> bool:
        return self.session is not None

    def _require_session(self) -> Session:
        if self.session is None:
            raise SessionStateError("No active session")
        return self.session

    def _require_exercise(self, index: int) -> SessionExercise:
        session = self._require_session()
        if not 0 <= index < len(session.exercises):
            raise ValidationError(f"Exercise index out of range: {index}")
        return session.exercises[index]

    def _snapshot(self) -> Callable[[], Session]:
        """Deferred copy of the open session, taken when the save runs."""
        session = self._require_session()
        return lambda: copy.deepcopy(session)

    def _queue_save(self) -> None:
        self.persistence.save_queued(self._snapshot())

    async def _save_now(self) -> None:
        await self.persistence.save_and_wait(self._snapshot())

    def _timestamp(self) -> str:
        return self._now().isoformat(timespec="seconds")

    def _stop_timers(self) -> None:
        self.rest_timer.destroy()
        self.set_timer.destroy()
        self.duration_timer.destroy()

    # ------------------------------------------------------------------
    # Starting and loading
    # ------------------------------------------------------------------

    async def start_from_workout(self, workout: Workout) -> Session:
        """
        Start a new session from a workout template.

        The previous completed session of the same workout is attached for
        reference. The document is written before this returns.

        Raises:
            SessionStateError: If a session is already open in this engine
        """
        if self.session is not None:
            raise SessionStateError("A session is already active")

        started = self._now()
        exercises = [
            SessionExercise(
                exercise=we.exercise,
                target_sets=we.target_sets,
                target_reps_min=we.target_reps_min,
                target_reps_max=we.target_reps_max,
                rest_seconds=we.rest_seconds,
            )
            for we in workout.exercises
        ]
        previous = await self.repository.get_previous(workout.name)
        session = Session(
            id=generate_session_id(started, workout.name),
            date=started.strftime("%Y-%m-%d"),
            start_time=started.isoformat(timespec="seconds"),
            workout=workout.name,
            exercises=exercises,
            previous=self._previous_from(previous),
        )
        return await self._begin(session)

    async def start_empty(self) -> Session:
        """Start a session with no workout and no exercises."""
        if self.session is not None:
            raise SessionStateError("A session is already active")
        started = self._now()
        session = Session(
            id=generate_session_id(started),
            date=started.strftime("%Y-%m-%d"),
            start_time=started.isoformat(timespec="seconds"),
        )
        return await self._begin(session)

    @staticmethod
    def _previous_from(previous: Session | None) -> PreviousSession | None:
        if previous is None:
            return None
        return PreviousSession(
            date=previous.date,
            exercises=copy.deepcopy(previous.exercises),
            coach_feedback=previous.coach_feedback,
        )

    async def _begin(self, session: Session) -> Session:
        self.session = session
        self.current_exercise_index = 0
        self._has_persisted_set = False
        await self._save_now()
        self.duration_timer.start()
        logger.info("Started session {}", session.id)
        self._emit("session.started", {"session_id": session.id})
        return session

    async def load_from_disk(self) -> Session | None:
        """
        Adopt the open session document from storage, if there is one.

        The current exercise becomes the first unfinished one.
        """
        session = await self.repository.get_active()
        if session is None:
            return None
        self.session = session
        index = find_first_unfinished_exercise_index(session)
        self.current_exercise_index = index if index >= 0 else max(0, len(session.exercises) - 1)
        self._has_persisted_set = has_completed_work(session)
        if session.status == "active":
            self.duration_timer.start()
        self._emit("session.loaded", {"session_id": session.id})
        return session

    # ------------------------------------------------------------------
    # Exercise structure
    # ------------------------------------------------------------------

    def add_exercise(
        self,
        name: str,
        target_sets: int = DEFAULT_TARGET_SETS,
        target_reps_min: int = DEFAULT_REPS_MIN,
        target_reps_max: int = DEFAULT_REPS_MAX,
        rest_seconds: int | None = None,
    ) -> int:
        """
        Append an exercise to the session.

        Returns:
            Index of the new exercise
        """
        session = self._require_session()
        if not name.strip():
            raise ValidationError("Exercise name must not be empty")
        validate_positive(target_sets, "target_sets")
        validate_positive(target_reps_min, "target_reps_min")
        if target_reps_max < target_reps_min:
            raise ValidationError("target_reps_max must not be below target_reps_min")
        rest = self.settings.default_rest_seconds if rest_seconds is None else rest_seconds
        validate_non_negative(rest, "rest_seconds")

        session.exercises.append(
            SessionExercise(
                exercise=name.strip(),
                target_sets=target_sets,
                target_reps_min=target_reps_min,
                target_reps_max=target_reps_max,
                rest_seconds=rest,
            )
        )
        index = len(session.exercises) - 1
        self._queue_save()
        self._emit("exercise.added", {"exercise_index": index, "name": name.strip()})
        return index

    def remove_exercise(self, index: int) -> None:
        self._require_exercise(index)
        session = self._require_session()
        before = list(session.exercises)
        removed = session.exercises.pop(index)

        self._follow_moved_exercises(before)
        if self.current_exercise_index > index or self.current_exercise_index >= len(session.exercises):
            self.current_exercise_index = max(0, self.current_exercise_index - 1)

        self._queue_save()
        self._emit("exercise.removed", {"exercise_index": index, "name": removed.exercise})

    def reorder_exercises(self, from_index: int, to_index: int) -> None:
        """Move an exercise; the selection and timers follow the exercise they pointed at."""
        session = self._require_session()
        self._require_exercise(from_index)
        self._require_exercise(to_index)
        if from_index == to_index:
            return

        before = list(session.exercises)
        moved = session.exercises.pop(from_index)
        session.exercises.insert(to_index, moved)
        self.current_exercise_index = self._position_of(before[self.current_exercise_index])
        self._follow_moved_exercises(before)

        self._queue_save()
        self._emit("exercise.reordered", {"from_index": from_index, "to_index": to_index})

    def _position_of(self, exercise: SessionExercise) -> int | None:
        for i, candidate in enumerate(self._require_session().exercises):
            if candidate is exercise:
                return i
        return None

    def _follow_moved_exercises(self, before: list[SessionExercise]) -> None:
        """Remap timer exercise indexes from the ``before`` order to the current one."""

        def new_index(old: int) -> int | None:
            if not 0 <= old < len(before):
                return None
            return self._position_of(before[old])

        self.rest_timer.remap_exercise(new_index)
        self.set_timer.remap_exercise(new_index)

    def select_exercise(self, index: int) -> None:
        self._require_exercise(index)
        self.current_exercise_index = index
        self._emit("exercise.selected", {"exercise_index": index})

    def current_exercise(self) -> SessionExercise | None:
        if self.session is None or not self.session.exercises:
            return None
        return self.session.exercises[self.current_exercise_index]

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    async def log_set(
        self,
        exercise_index: int,
        weight: float,
        reps: int,
        rpe: float | None = None,
        actual_rest_seconds: int | None = None,
        extra_rest_seconds: int | None = None,
        avg_rep_duration: float | None = None,
    ) -> LoggedSet:
        """
        Log a completed set and wait until it is saved.

        Weight 0 logs a bodyweight set. Input is validated before anything
        changes. When the save fails the set stays in memory and the error
        propagates; the next save writes it again.

        Returns:
            The logged set

        Raises:
            ValidationError: On negative weight, non-positive reps or RPE out of range
        """
        session = self._require_session()
        exercise = self._require_exercise(exercise_index)
        validate_non_negative(weight, "weight")
        validate_positive(reps, "reps")
        validate_rpe(rpe)

        logged = LoggedSet(
            weight=weight,
            reps=reps,
            completed=True,
            timestamp=self._timestamp(),
            rpe=rpe,
            actual_rest_seconds=actual_rest_seconds,
            extra_rest_seconds=extra_rest_seconds,
            avg_rep_duration=avg_rep_duration,
        )
        exercise.sets.append(logged)
        set_index = len(exercise.sets) - 1
        self.set_timer.clear()
        self.rest_timer.clear_period()

        await self._save_now()
        # Finished or discarded while the save was waiting
        if self.session is not session:
            return logged
        self._has_persisted_set = True
        if not self.duration_timer.running:
            self.duration_timer.start()

        self._emit("set.logged", {"exercise_index": exercise_index, "set_index": set_index, "set": logged})

        completed = count_completed_sets(session, exercise_index)
        if should_auto_start_rest_timer(self.settings.auto_start_rest_timer, completed, exercise.target_sets):
            self.start_rest_timer(exercise.rest_seconds, exercise_index)
        return logged

    async def edit_set(self, exercise_index: int, set_index: int, **changes: Any) -> LoggedSet:
        """
        Change fields of a logged set and wait until it is saved.

        Args:
            exercise_index: Exercise the set belongs to
            set_index: Position of the set
            **changes: LoggedSet fields (weight, reps, rpe, ...)
        """
        exercise = self._require_exercise(exercise_index)
        if not 0 <= set_index < len(exercise.sets):
            raise ValidationError(f"Set index out of range: {set_index}")
        unknown = set(changes) - set(LoggedSet.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown set fields: {', '.join(sorted(unknown))}")
        if "weight" in changes:
            validate_non_negative(changes["weight"], "weight")
        if "reps" in changes:
            validate_positive(changes["reps"], "reps")
        if "rpe" in changes:
            validate_rpe(changes["rpe"])

        logged = exercise.sets[set_index]
        for key, value in changes.items():
            setattr(logged, key, value)

        await self._save_now()
        self._emit("set.edited", {"exercise_index": exercise_index, "set_index": set_index, "set": logged})
        return logged

    async def delete_set(self, exercise_index: int, set_index: int) -> None:
        exercise = self._require_exercise(exercise_index)
        if not 0 <= set_index < len(exercise.sets):
            raise ValidationError(f"Set index out of range: {set_index}")
        exercise.sets.pop(set_index)
        await self._save_now()
        self._emit("set.deleted", {"exercise_index": exercise_index, "set_index": set_index})

    def get_last_set(self, exercise_index: int) -> LoggedSet | None:
        return last_completed_set(self._require_exercise(exercise_index))

    def set_exercise_rpe(self, exercise_index: int, rpe: float | None) -> None:
        exercise = self._require_exercise(exercise_index)
        exercise.rpe = validate_rpe(rpe)
        self._queue_save()
        self._emit("rpe.changed", {"exercise_index": exercise_index, "rpe": rpe})

    def set_muscle_engagement(self, exercise_index: int, engagement: MuscleEngagement | None) -> None:
        exercise = self._require_exercise(exercise_index)
        if engagement is not None and engagement not in MUSCLE_ENGAGEMENTS:
            raise ValidationError(f"Invalid muscle engagement: {engagement!r}")
        exercise.muscle_engagement = engagement
        self._queue_save()
        self._emit("muscle.changed", {"exercise_index": exercise_index, "engagement": engagement})

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _check_transition(self, to_status: SessionStatus) -> Session:
        session = self._require_session()
        if not is_valid_transition(session.status, to_status):
            raise InvalidTransitionError(session.status, to_status)
        return session

    async def pause_session(self) -> Session:
        session = self._check_transition("paused")
        session.status = "paused"
        self.rest_timer.cancel()
        self.set_timer.destroy()
        self.duration_timer.stop()
        await self._save_now()
        self._emit("session.paused", {"session_id": session.id})
        return session

    async def resume_session(self) -> Session:
        session = self._check_transition("active")
        session.status = "active"
        await self._save_now()
        self.duration_timer.start()
        self._emit("session.resumed", {"session_id": session.id})
        return session

    async def finish_session(self) -> Session:
        """
        Mark the session completed and release it.

        Raises:
            SessionStateError: If no set has been completed
            InvalidTransitionError: If the session cannot be completed from its status
        """
        session = self._require_session()
        if not can_finish_session(has_completed_work(session)):
            raise SessionStateError("Cannot finish a session without completed sets; discard it instead")
        self._check_transition("completed")

        snapshot = self._snapshot()
        previous_end = session.end_time
        self._stop_timers()
        session.end_time = self._timestamp()
        # Released before the write so no edit can queue an open-session save behind it
        self.session = None
        self.current_exercise_index = 0
        try:
            final = await self.persistence.finalize_active(snapshot)
        except Exception:
            session.end_time = previous_end
            self.session = session
            if session.status == "active":
                self.duration_timer.start()
            raise
        self._has_persisted_set = False
        logger.info("Finished session {}", final.id)
        self._emit("session.finished", {"session_id": final.id})
        return final

    async def discard_session(self) -> None:
        """
        Drop the session and trash its document.

        Queued saves are cleared first so nothing resurrects the document.
        """
        session = self._require_session()
        if not can_discard_session(session.status):
            raise InvalidTransitionError(session.status, "discarded")

        self.persistence.clear_pending()
        self._stop_timers()
        self.session = None
        self.current_exercise_index = 0
        self._has_persisted_set = False
        await self.persistence.delete_active(session)
        logger.info("Discarded session {}", session.id)
        self._emit("session.discarded", {"session_id": session.id})

    async def cleanup(self) -> None:
        """Cancel all timers and wait for queued saves; the session stays on disk."""
        self._stop_timers()
        await self.persistence.flush()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def mark_set_start(self, exercise_index: int | None = None) -> None:
        """
        Start timing the next set.

        The countdown only runs before the first set of an exercise.
        """
        index = self.current_exercise_index if exercise_index is None else exercise_index
        self._require_exercise(index)
        if count_completed_sets(self._require_session(), index) == 0 and self.settings.countdown_seconds > 0:
            self.set_timer.start_with_countdown(index, self.settings.countdown_seconds)
        else:
            self.set_timer.mark_start(index)

    def start_rest_timer(self, seconds: float | None = None, exercise_index: int | None = None) -> None:
        index = self.current_exercise_index if exercise_index is None else exercise_index
        exercise = self._require_exercise(index)
        duration = exercise.rest_seconds if seconds is None else seconds
        validate_positive(duration, "rest seconds")
        self.rest_timer.start(duration, index)

    def add_rest_time(self, seconds: float) -> None:
        validate_positive(seconds, "seconds")
        self.rest_timer.add_time(seconds)

    def cancel_rest_timer(self) -> None:
        self.rest_timer.cancel()

    def rest_time_remaining(self) -> int:
        return self.rest_timer.remaining()

    def session_elapsed(self) -> int:
        """Seconds since the session started; 0 until a set has been saved."""
        return self.duration_timer.elapsed()

    def _on_rest_complete(self, exercise_index: int) -> None:
        if self.session is None or not 0 <= exercise_index < len(self.session.exercises):
            return
        exercise = self.session.exercises[exercise_index]
        if count_completed_sets(self.session, exercise_index) < exercise.target_sets:
            self.set_timer.mark_start(exercise_index)
