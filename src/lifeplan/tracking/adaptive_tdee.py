"""Day-to-day TDEE variation and the static vs component comparison.

The activity-multiplier TDEE is a single number per profile. The component
method (BMR + NEAT + exercise + TEF) reacts to job type, steps and workouts,
and daily feedback (fatigue, sleep, soreness) nudges it further.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from lifeplan.profiles.body_calc import calculate_adaptive_tdee, calculate_bmr, calculate_tdee
from lifeplan.tracking.models import DailyLog, Profile

MIN_DAILY_MULTIPLIER = 0.85
MAX_DAILY_MULTIPLIER = 1.10

# Estimated kcal per logged workout when the session type is unknown
WORKOUT_KCAL_ESTIMATE = 250

AGREEMENT_KCAL = 200


@dataclass
class TDEEComparison:
    static: int
    adaptive: int
    difference: int
    difference_percent: int
    recommendation: str
    components: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "static": self.static,
            "adaptive": self.adaptive,
            "difference": self.difference,
            "difference_percent": self.difference_percent,
            "recommendation": self.recommendation,
            "components": dict(self.components),
        }


@dataclass
class WeeklyTDEESummary:
    average_tdee: int
    workout_days: int = 0
    multiplier: float = 1.0
    base: Optional[int] = None
    exercise: Optional[int] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return vars(self).copy()


def daily_tdee_multiplier(log: DailyLog) -> float:
    """
    Scale factor for one day's expenditure from the day's feedback.

    Low energy, short sleep and high soreness cut NEAT; high stress adds a
    little. Clamped to [0.85, 1.10].
    """
    multiplier = 1.0
    if log.energy_level is not None and log.energy_level <= 4:
        multiplier -= 0.05
    if log.stress_level is not None and log.stress_level >= 8:
        multiplier += 0.02
    if log.sleep_hours is not None and log.sleep_hours < 6:
        multiplier -= 0.05
    if log.soreness_level is not None and log.soreness_level >= 4:
        multiplier -= 0.08
    return round(max(MIN_DAILY_MULTIPLIER, min(MAX_DAILY_MULTIPLIER, multiplier)), 2)


def weekly_tdee_summary(logs: Sequence[DailyLog], components: dict) -> WeeklyTDEESummary:
    """
    Average daily expenditure over a week of logs.

    Args:
        logs: Daily logs for the week
        components: Output of calculate_adaptive_tdee()["components"]

    Returns:
        WeeklyTDEESummary. Without logs the average is 1.5x BMR.
    """
    if not logs:
        return WeeklyTDEESummary(average_tdee=round(components["bmr"] * 1.5), note="No logs available")

    workout_days = sum(1 for log in logs if log.workout_done)
    multiplier = float(np.mean([daily_tdee_multiplier(log) for log in logs]))

    base = (components["bmr"] + components["neat"] + components["tef"]) * multiplier
    exercise = workout_days * WORKOUT_KCAL_ESTIMATE / 7

    return WeeklyTDEESummary(
        average_tdee=round(base + exercise),
        workout_days=workout_days,
        multiplier=round(multiplier, 2),
        base=round(base),
        exercise=round(exercise),
    )


def compare_to_static_tdee(
    profile: Profile,
    steps: int = 0,
    workouts: Optional[list[tuple[str, float]]] = None,
) -> TDEEComparison:
    """Activity-multiplier TDEE against the component method for one profile."""
    bmr = calculate_bmr(profile.sex, profile.weight_kg, profile.height_cm, profile.age)
    static = calculate_tdee(bmr, profile.activity_level)

    adaptive = calculate_adaptive_tdee(
        profile.sex,
        profile.weight_kg,
        profile.height_cm,
        profile.age,
        job_type=profile.job_type,
        steps=steps,
        workouts=workouts,
    )
    difference = adaptive["total"] - static

    if difference > AGREEMENT_KCAL:
        recommendation = "Adaptive TDEE suggests higher energy needs"
    elif difference < -AGREEMENT_KCAL:
        recommendation = "Static method may be overestimating"
    else:
        recommendation = "Both methods agree within reasonable range"

    return TDEEComparison(
        static=static,
        adaptive=adaptive["total"],
        difference=difference,
        difference_percent=round(difference / static * 100),
        recommendation=recommendation,
        components=adaptive["components"],
    )
