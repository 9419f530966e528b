"""
Data models for fit-vault.

All core dataclasses representing exercises, workouts, programs and
training sessions. Field names are snake_case here; the io layer maps
them to the camelCase keys written into document metadata blocks.
"""

from dataclasses import dataclass, field
from typing import Literal

SessionStatus = Literal["active", "paused", "completed", "discarded"]
MuscleEngagement = Literal["yes-clearly", "moderately", "not-really"]
ExerciseSource = Literal["custom", "database"]

SESSION_STATUSES: tuple[str, ...] = ("active", "paused", "completed", "discarded")
MUSCLE_ENGAGEMENTS: tuple[str, ...] = ("yes-clearly", "moderately", "not-really")


@dataclass
class Exercise:
    """
    A single exercise definition.

    Custom exercises are file-backed and editable; database exercises are
    imported in bulk and never mutated.
    """

    id: str
    name: str
    source: ExerciseSource = "custom"
    category: str | None = None
    equipment: str | None = None
    muscle_groups: list[str] = field(default_factory=list)
    default_weight: float | None = None
    weight_increment: float | None = None
    image0: str | None = None  # start position
    image1: str | None = None  # end position
    notes: str | None = None


@dataclass
class WorkoutExercise:
    """One exercise reference inside a workout template."""

    exercise: str  # display name
    target_sets: int
    target_reps_min: int
    target_reps_max: int
    rest_seconds: int
    exercise_id: str | None = None  # slug used for lookups
    source: ExerciseSource | None = None  # None = unknown, rendered as plain text
    notes: str | None = None


@dataclass
class Workout:
    id: str
    name: str
    description: str | None = None
    estimated_duration: int | None = None  # minutes
    exercises: list[WorkoutExercise] = field(default_factory=list)


@dataclass
class QuestionOption:
    id: str
    label: str


@dataclass
class Question:
    """
    A post-session review question embedded in a program.

    When ``free_text_trigger`` names one of the options, picking it asks the
    user for a comment of at most ``free_text_max_length`` characters.
    """

    id: str
    text: str
    options: list[QuestionOption] = field(default_factory=list)
    allow_free_text: bool = False
    free_text_trigger: str | None = None
    free_text_max_length: int | None = None


@dataclass
class Program:
    """
    An ordered program of workouts.

    ``workouts`` lists workout ids in order; workouts defined directly inside
    the program document are kept in ``inline_workouts``.
    """

    id: str
    name: str
    description: str | None = None
    workouts: list[str] = field(default_factory=list)
    questions: list[Question] = field(default_factory=list)
    inline_workouts: list[Workout] = field(default_factory=list)


@dataclass
class LoggedSet:
    """
    A single performed set.

    weight == 0 is the bodyweight sentinel. The rest and rep-duration fields
    are supplied by whoever times the set; they are stored as given.
    """

    weight: float
    reps: int
    completed: bool = True
    timestamp: str = ""  # ISO 8601
    rpe: float | None = None
    actual_rest_seconds: int | None = None
    extra_rest_seconds: int | None = None
    avg_rep_duration: float | None = None  # seconds per rep


@dataclass
class SessionExercise:
    exercise: str
    target_sets: int
    target_reps_min: int
    target_reps_max: int
    rest_seconds: int
    sets: list[LoggedSet] = field(default_factory=list)
    rpe: float | None = None
    muscle_engagement: MuscleEngagement | None = None


@dataclass
class QuestionAnswer:
    question_id: str
    question_text: str
    selected_option_id: str
    selected_option_label: str
    free_text: str | None = None


@dataclass
class SessionReview:
    program_id: str
    completed_at: str  # ISO 8601
    answers: list[QuestionAnswer] = field(default_factory=list)
    skipped: bool = False


@dataclass
class PreviousSession:
    """
    Summary of the last completed session of the same workout.

    Copied into a new session document for reference while training.
    """

    date: str
    exercises: list[SessionExercise] = field(default_factory=list)
    coach_feedback: str | None = None


@dataclass
class Session:
    """
    A training session, active or historical.

    The id is fixed at start from the start time and workout name and never
    changes afterwards.
    """

    id: str
    date: str  # YYYY-MM-DD
    start_time: str  # ISO 8601
    status: SessionStatus = "active"
    end_time: str | None = None
    workout: str | None = None
    exercises: list[SessionExercise] = field(default_factory=list)
    notes: str | None = None
    review: SessionReview | None = None
    coach_feedback: str | None = None
    previous: PreviousSession | None = None


@dataclass
class RestTimerState:
    """Running rest timer; end_time is an absolute epoch timestamp in seconds."""

    end_time: float
    duration: float
    exercise_index: int


@dataclass
class RestPeriod:
    """
    The most recent rest period, kept after the timer stops.

    Lets the timing layer work out actual and extra rest for the next set.
    """

    started_at: float
    exercise_index: int
    extra_seconds: float = 0.0
