"""Recovery guidance after a missed or hard day.

Two small lookups driven by the pattern window: what to say when a
training streak breaks, and how to scale back the next session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Sequence

from lifeplan.adaptation.patterns import PatternSummary, count_consecutive
from lifeplan.tracking.models import DailyLog

LONG_STREAK_DAYS = 14
WEEK_STREAK_DAYS = 7


@dataclass(frozen=True)
class RecoveryStep:
    day: str
    action: str
    priority: str  # 'optional', 'recommended', 'normal'


@dataclass
class StreakBreak:
    """Response to the first missed workout after a streak."""

    streak_days: int
    acknowledgement: str
    mindset: str
    recovery_plan: list[RecoveryStep] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "streak_days": self.streak_days,
            "acknowledgement": self.acknowledgement,
            "mindset": self.mindset,
            "recovery_plan": [vars(step).copy() for step in self.recovery_plan],
        }


@dataclass(frozen=True)
class WorkoutAdjustment:
    """How to scale the next session."""

    reason: str
    note: str
    set_reduction: int = 0
    min_sets: int = 2
    max_exercises: Optional[int] = None
    workout_type: Optional[str] = None  # replaces the planned type, e.g. 'recovery'

    def adjust_sets(self, sets: int) -> int:
        """Sets for one exercise after the reduction, never below ``min_sets``."""
        if self.set_reduction == 0:
            return sets
        return max(self.min_sets, sets - self.set_reduction)

    def to_dict(self) -> dict:
        return {
            "reason": self.reason,
            "note": self.note,
            "set_reduction": self.set_reduction,
            "min_sets": self.min_sets,
            "max_exercises": self.max_exercises,
            "workout_type": self.workout_type,
        }


RECOVERY_PLAN = (
    RecoveryStep("Today", "Rest or light activity (20 min walk)", "optional"),
    RecoveryStep("Tomorrow", "Resume regular workout (slightly reduced volume)", "recommended"),
    RecoveryStep("Day 3", "Back to normal intensity", "normal"),
)

NEXT_WORKOUT_ADJUSTMENTS = MappingProxyType({
    "missed_previous": WorkoutAdjustment(
        reason="missed_previous",
        note="Volume reduced since you missed yesterday. Focus on form.",
        set_reduction=1,
    ),
    "low_energy": WorkoutAdjustment(
        reason="low_energy",
        note="Light session today. Listen to your body.",
        set_reduction=1,
        max_exercises=4,
    ),
    "poor_recovery": WorkoutAdjustment(
        reason="poor_recovery",
        note="Switched to recovery session based on your feedback.",
        workout_type="recovery",
    ),
})


def handle_streak_break(streak_days: int) -> StreakBreak:
    """Acknowledge the streak that just ended and lay out the next three days."""
    if streak_days >= LONG_STREAK_DAYS:
        acknowledgement = f"You had an amazing {streak_days}-day streak! One break doesn't erase that progress."
        mindset = "Long streaks show commitment. A single break is just a pause, not a stop."
    elif streak_days >= WEEK_STREAK_DAYS:
        acknowledgement = f"Great {streak_days}-day streak! Everyone needs a break sometimes."
        mindset = "A week of consistency is great. Let's get back on track."
    else:
        acknowledgement = "Building habits takes time. Let's keep going."
        mindset = "Focus on the next workout, not the missed one."

    return StreakBreak(
        streak_days=streak_days,
        acknowledgement=acknowledgement,
        mindset=mindset,
        recovery_plan=list(RECOVERY_PLAN),
    )


def streak_before_break(logs: Sequence[DailyLog]) -> int:
    """
    Length of the workout streak ended by the most recent log.

    Returns 0 unless the most recent log is the first skip after at least one
    completed workout.
    """
    recent = sorted(logs, key=lambda log: log.log_date, reverse=True)
    if not recent or recent[0].workout_done:
        return 0
    if len(recent) > 1 and not recent[1].workout_done:
        return 0
    return count_consecutive(recent[1:], lambda log: log.workout_done)


def next_workout_reason(summary: Optional[PatternSummary]) -> Optional[str]:
    """
    Pick the adjustment for the next session from the most recent day.

    Poor recovery beats low energy, which beats a missed workout.
    """
    if summary is None or not summary.recovery_statuses:
        return None

    latest = summary.recovery_statuses[0]
    if latest.status == "poor":
        return "poor_recovery"
    if "low_energy" in latest.issues:
        return "low_energy"
    if summary.consecutive_skips > 0:
        return "missed_previous"
    return None


def adjust_next_day_workout(reason: Optional[str]) -> Optional[WorkoutAdjustment]:
    """Adjustment for ``reason``, or None when the session stays as planned."""
    if reason is None:
        return None
    return NEXT_WORKOUT_ADJUSTMENTS.get(reason)
