"""Data models for the daily plan."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, time
from typing import Optional

from lifeplan.adaptation.engine import AdaptationReport
from lifeplan.profiles.body_calc import NutritionTargets
from lifeplan.tracking.models import DailyLog, HealthLog, LooksLog, Profile, RoutineLog


@dataclass(frozen=True)
class Adjustments:
    """Merged plan deltas and flags for one day.

    Frozen: every rule step builds a new value with ``dataclasses.replace``.
    """

    workout_intensity: float = 1.0  # multiplier in [0, 1]
    meal_complexity: str = "full"  # 'full', 'simple', 'quick', 'flexible'
    routine_level: str = "full"  # 'full', 'minimal', 'rest'
    notifications_enabled: bool = True

    # Mode flags
    rest_day: bool = False
    skip_workout: bool = False
    skip_skincare: bool = False
    skip_logging: bool = False
    hydration_priority: bool = False
    maintenance_calories: bool = False
    sleep_priority: bool = False
    focus_priority: bool = False

    # Rule flags
    add_recovery_focus: bool = False
    skip_heavy_facial_exercises: bool = False
    add_breathing_exercise: bool = False
    light_routine: bool = False
    add_mood_boost_activities: bool = False
    shift_protein_timing: bool = False
    concentrate_meals: bool = False
    add_sleep_hygiene_tasks: bool = False
    blue_blocking_reminder: bool = False
    rest_suggestion: bool = False
    low_gi_meals: bool = False
    reduce_carbs: bool = False
    add_protein_snacks: bool = False
    reduce_workout_difficulty: bool = False

    hydration_reminders: str = "normal"  # 'normal' or 'high'
    evening_skincare_reminder: str = "normal"
    calorie_delta: int = 0  # kcal/day on top of the baseline target

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Explanation:
    """Why one rule changed the plan."""

    reason: str
    rule_id: str
    condition: str
    action: str
    human_explanation: str
    priority: int
    domain: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TimelineEntry:
    time: str  # 'HH:MM'
    activity: str
    domain: str
    icon: str
    why: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"time": self.time, "activity": self.activity, "domain": self.domain, "icon": self.icon}
        if self.why:
            data["why"] = self.why
        return data


@dataclass
class UserMode:
    """Coarse life context the user declared."""

    mode: str = "normal"  # 'normal', 'travel', 'sick', 'exam', 'festival'
    active_since: Optional[date] = None
    auto_expiry: Optional[date] = None
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "active_since": self.active_since.isoformat() if self.active_since else None,
            "auto_expiry": self.auto_expiry.isoformat() if self.auto_expiry else None,
            "reason": self.reason,
        }


@dataclass
class PlanContext:
    """Everything the resolver reads for one user and day.

    Trailing slices (``recent_health``, ``recent_daily``) are most recent
    first. ``current_time`` is only needed by time-of-day rules; leave it
    None for a time-independent plan.
    """

    profile: Profile
    day: date
    mode: UserMode = field(default_factory=UserMode)
    health: Optional[HealthLog] = None
    looks: Optional[LooksLog] = None
    routine: Optional[RoutineLog] = None
    daily: Optional[DailyLog] = None
    recent_health: list[HealthLog] = field(default_factory=list)
    recent_daily: list[DailyLog] = field(default_factory=list)
    targets: Optional[NutritionTargets] = None
    adaptation: Optional[AdaptationReport] = None
    current_time: Optional[time] = None


@dataclass
class DailyPlan:
    """Output of the resolver for one day."""

    day: date
    mode: str
    adjustments: Adjustments
    explanations: list[Explanation]
    timeline: list[TimelineEntry]
    life_score: int
    warnings: list[str] = field(default_factory=list)
    targets: Optional[NutritionTargets] = None

    @property
    def calorie_target(self) -> Optional[int]:
        """Baseline target (TDEE in maintenance modes) plus the plan's calorie delta."""
        if self.targets is None:
            return None
        if self.adjustments.maintenance_calories:
            return self.targets.tdee + self.adjustments.calorie_delta
        return self.targets.target_calories + self.adjustments.calorie_delta

    def to_dict(self) -> dict:
        """Convert to dict for JSON output."""
        return {
            "date": self.day.isoformat(),
            "mode": self.mode,
            "adjustments": self.adjustments.to_dict(),
            "explanations": [e.to_dict() for e in self.explanations],
            "timeline": [t.to_dict() for t in self.timeline],
            "life_score": self.life_score,
            "calorie_target": self.calorie_target,
            "targets": self.targets.to_dict() if self.targets else None,
            "warnings": list(self.warnings),
        }
