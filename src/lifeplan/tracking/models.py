"""Data models for profiles, daily logs and weight tracking."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


VALID_SEXES = ("male", "female")
VALID_ACTIVITY_LEVELS = ("sedentary", "light", "moderate", "active", "very_active")
VALID_GOAL_TYPES = ("fat_loss", "muscle_gain", "recomp", "health")
VALID_QUALITY = ("poor", "average", "good")
VALID_CONDITIONS = (
    "lactose_intolerance",
    "gluten_intolerance",
    "diabetes_type2",
    "pcos",
    "thyroid_hypothyroid",
    "ibs",
)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass
class Profile:
    """User profile snapshot read by the planner."""

    user_id: Optional[int]
    sex: str  # 'male' or 'female'
    age: int
    height_cm: float
    weight_kg: float
    activity_level: str = "moderate"
    goal_type: str = "health"
    diet_preference: Optional[str] = None  # e.g. 'vegetarian', 'jain'
    job_type: Optional[str] = None  # key into NEAT_ESTIMATES
    conditions: tuple[str, ...] = ()
    fasting_mode: bool = False
    tracks_cycle: bool = False
    last_period_date: Optional[date] = None
    cycle_length: int = 28
    body_fat_percent: Optional[float] = None
    target_weight_kg: Optional[float] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.sex not in VALID_SEXES:
            raise ValueError(f"sex must be 'male' or 'female', got '{self.sex}'")
        if self.activity_level not in VALID_ACTIVITY_LEVELS:
            raise ValueError(
                f"activity_level must be one of {VALID_ACTIVITY_LEVELS}, got '{self.activity_level}'"
            )
        if self.goal_type not in VALID_GOAL_TYPES:
            raise ValueError(
                f"goal_type must be one of {VALID_GOAL_TYPES}, got '{self.goal_type}'"
            )
        unknown = [c for c in self.conditions if c not in VALID_CONDITIONS]
        if unknown:
            raise ValueError(f"unknown conditions: {unknown}")
        self.conditions = tuple(self.conditions)


@dataclass
class HealthLog:
    """Daily health metrics: sleep, energy, stress, water, mood."""

    log_date: date
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[str] = None  # 'poor' | 'average' | 'good'
    energy_level: Optional[int] = None  # 1-10
    stress_level: Optional[int] = None  # 1-10
    mood: Optional[int] = None  # 1-10
    water_glasses: int = 0
    screen_time_hours: Optional[float] = None
    digestion_quality: Optional[str] = None
    breathing_exercise_done: bool = False
    notes: str = ""

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty if valid)."""
        errors = []
        if self.sleep_hours is not None and not 0 <= self.sleep_hours <= 24:
            errors.append("Sleep hours must be between 0 and 24")
        if self.sleep_quality is not None and self.sleep_quality not in VALID_QUALITY:
            errors.append("Sleep quality must be poor, average, or good")
        for name in ("energy_level", "stress_level", "mood"):
            value = getattr(self, name)
            if value is not None and not 1 <= value <= 10:
                errors.append(f"{name} must be between 1 and 10")
        if self.water_glasses < 0:
            errors.append("Water glasses cannot be negative")
        if self.screen_time_hours is not None and not 0 <= self.screen_time_hours <= 24:
            errors.append("Screen time must be between 0 and 24 hours")
        return errors


@dataclass
class GroomingTask:
    task: str
    done: bool = False


def _default_grooming() -> list[GroomingTask]:
    return [GroomingTask("Face wash"), GroomingTask("Moisturizer"), GroomingTask("Sunscreen")]


@dataclass
class LooksLog:
    """Daily skincare, grooming and facial exercise completion."""

    log_date: date
    morning_routine_done: bool = False
    evening_routine_done: bool = False
    grooming_tasks: list[GroomingTask] = field(default_factory=_default_grooming)
    facial_exercises_done: bool = False
    mewing_minutes: int = 0
    hair_routine_done: bool = False
    skin_condition_notes: str = ""

    def validate(self) -> list[str]:
        errors = []
        if not isinstance(self.grooming_tasks, list):
            errors.append("Grooming tasks must be a list")
        if self.mewing_minutes < 0:
            errors.append("Mewing minutes cannot be negative")
        return errors


@dataclass
class Habit:
    id: str
    name: str
    done: bool = False


def _default_habits() -> list[Habit]:
    return [
        Habit("morning_routine", "Morning Routine"),
        Habit("workout", "Workout"),
        Habit("healthy_meals", "Healthy Meals"),
        Habit("no_junk", "No Junk Food"),
        Habit("water_goal", "Water Goal"),
        Habit("sleep_goal", "Sleep on Time"),
    ]


@dataclass
class RoutineLog:
    """Daily habits, wake/sleep times and focus."""

    log_date: date
    wake_time: Optional[str] = None  # 'HH:MM'
    sleep_time: Optional[str] = None
    habits: list[Habit] = field(default_factory=_default_habits)
    focus_hours: float = 0.0
    distractions_avoided: bool = False
    notes: str = ""

    def validate(self) -> list[str]:
        errors = []
        if self.wake_time and not _TIME_RE.match(self.wake_time):
            errors.append("Wake time must be in HH:MM format")
        if self.sleep_time and not _TIME_RE.match(self.sleep_time):
            errors.append("Sleep time must be in HH:MM format")
        if not isinstance(self.habits, list):
            errors.append("Habits must be a list")
        return errors


@dataclass
class DailyLog:
    """Daily training and compliance feedback used for adaptation."""

    log_date: date
    food_compliance_percent: Optional[float] = None  # 0-100
    protein_completion_percent: Optional[float] = None  # 0-100
    workout_done: bool = False
    workout_skipped_reason: Optional[str] = None  # key into SKIP_REASONS
    energy_level: Optional[int] = None  # 1-10
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[int] = None  # 1-5
    soreness_level: Optional[int] = None  # 0-5
    mood: Optional[int] = None  # 1-10
    stress_level: Optional[int] = None  # 1-10
    weight_kg: Optional[float] = None

    def validate(self) -> list[str]:
        errors = []
        for name in ("food_compliance_percent", "protein_completion_percent"):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= 100:
                errors.append(f"{name} must be between 0 and 100")
        for name in ("energy_level", "mood", "stress_level"):
            value = getattr(self, name)
            if value is not None and not 1 <= value <= 10:
                errors.append(f"{name} must be between 1 and 10")
        if self.sleep_quality is not None and not 1 <= self.sleep_quality <= 5:
            errors.append("sleep_quality must be between 1 and 5")
        if self.soreness_level is not None and not 0 <= self.soreness_level <= 5:
            errors.append("soreness_level must be between 0 and 5")
        if self.sleep_hours is not None and not 0 <= self.sleep_hours <= 24:
            errors.append("Sleep hours must be between 0 and 24")
        return errors


@dataclass
class WeightSample:
    """A single weight measurement with its EMA trend."""

    measured_at: date
    weight_kg: float
    body_fat_percent: Optional[float] = None
    trend_kg: Optional[float] = None
    sample_id: Optional[int] = None
