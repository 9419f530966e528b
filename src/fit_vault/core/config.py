"""
Configuration constants for fit-vault.

All adjustable defaults are centralized here. User-level overrides are
loaded by config_loader.py into a Settings object.
"""

from dataclasses import dataclass, field
from typing import Final, Literal

WeightUnit = Literal["kg", "lbs"]

# =============================================================================
# DOCUMENT STORE LAYOUT
# =============================================================================

DEFAULT_BASE_PATH: Final[str] = "Fitness"
EXERCISES_FOLDER: Final[str] = "Exercises"
WORKOUTS_FOLDER: Final[str] = "Workouts"
PROGRAMS_FOLDER: Final[str] = "Programs"
SESSIONS_FOLDER: Final[str] = "Sessions"
DOCUMENT_EXTENSION: Final[str] = ".md"
LEGACY_ACTIVE_SESSION_FILENAME: Final[str] = ".active-session.md"
EXERCISE_DATABASE_FILENAME: Final[str] = "exercise-database.json"

# =============================================================================
# WORKOUT / SESSION DEFAULTS
# =============================================================================

DEFAULT_TARGET_SETS: Final[int] = 3
DEFAULT_REPS_MIN: Final[int] = 8
DEFAULT_REPS_MAX: Final[int] = 12
DEFAULT_REST_SECONDS: Final[int] = 120
DEFAULT_FREE_TEXT_MAX_LENGTH: Final[int] = 200

# =============================================================================
# TIMERS
# =============================================================================

TIMER_TICK_SECONDS: Final[float] = 1.0
FIRST_SET_COUNTDOWN_SECONDS: Final[int] = 5

# =============================================================================
# PERSISTENCE
# =============================================================================

# Wait before re-resolving a file handle after an "already exists" race
STALE_CACHE_RETRY_SECONDS: Final[float] = 0.05

# =============================================================================
# RPE
# =============================================================================

RPE_MIN: Final[int] = 1
RPE_MAX: Final[int] = 10


@dataclass
class Settings:
    """
    User-adjustable settings.

    ``countdown_seconds`` gates the set timer before the first set of each
    exercise; 0 disables the countdown.
    """

    base_path: str = DEFAULT_BASE_PATH
    weight_unit: WeightUnit = "kg"
    default_rest_seconds: int = DEFAULT_REST_SECONDS
    auto_start_rest_timer: bool = True
    countdown_seconds: int = FIRST_SET_COUNTDOWN_SECONDS
    weight_increments_kg: list[float] = field(default_factory=lambda: [10, 2.5, 0.5, 0.25])
    weight_increments_lbs: list[float] = field(default_factory=lambda: [45, 10, 5, 2.5])

    def __post_init__(self) -> None:
        """Validate settings."""
        if not self.base_path or not self.base_path.strip("/"):
            raise ValueError("base_path must be a non-empty folder path")
        if self.weight_unit not in ("kg", "lbs"):
            raise ValueError(f"Invalid weight_unit: {self.weight_unit!r}. Must be 'kg' or 'lbs'.")
        if self.default_rest_seconds <= 0:
            raise ValueError("default_rest_seconds must be positive")
        if self.countdown_seconds < 0:
            raise ValueError("countdown_seconds must be non-negative")

    @property
    def weight_increments(self) -> list[float]:
        """Increments for the configured weight unit."""
        if self.weight_unit == "lbs":
            return self.weight_increments_lbs
        return self.weight_increments_kg
