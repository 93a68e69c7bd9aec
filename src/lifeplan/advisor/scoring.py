"""Default domain scorers for the life score.

Each scorer maps one log to 0-100. The resolver receives them as a mapping
so callers can swap in their own.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping

from lifeplan.tracking.models import DailyLog, HealthLog, LooksLog, RoutineLog

Scorer = Callable[[Any], float]

FOOD_LOGGED_SCORE = 80


def score_health(log: HealthLog) -> int:
    """Sleep (30), water (20), energy (20), low stress (15), mood (15)."""
    score = 0.0
    if log.sleep_hours is not None:
        score += min(30.0, log.sleep_hours / 8 * 30)
    if log.water_glasses > 0:
        score += min(20.0, log.water_glasses / 8 * 20)
    if log.energy_level is not None:
        score += log.energy_level / 10 * 20
    if log.stress_level is not None:
        score += (10 - log.stress_level) / 10 * 15
    if log.mood is not None:
        score += log.mood / 10 * 15
    return round(score)


def score_looks(log: LooksLog) -> int:
    """Share of routines done; grooming counts as one partial item."""
    completed = sum([
        log.morning_routine_done,
        log.evening_routine_done,
        log.facial_exercises_done,
        log.hair_routine_done,
    ])
    total = 4
    if log.grooming_tasks:
        completed += sum(1 for t in log.grooming_tasks if t.done) / len(log.grooming_tasks)
        total += 1
    return round(completed / total * 100)


def score_routine(log: RoutineLog) -> int:
    """Habits give 80 points; wake time, sleep time, focus and no distractions 5 each."""
    if not log.habits:
        return 0

    score = sum(1 for h in log.habits if h.done) / len(log.habits) * 80
    if log.wake_time:
        score += 5
    if log.sleep_time:
        score += 5
    if log.focus_hours >= 4:
        score += 5
    if log.distractions_avoided:
        score += 5
    return min(100, round(score))


def score_food(log: DailyLog) -> float:
    if log.food_compliance_percent is not None:
        return log.food_compliance_percent
    return FOOD_LOGGED_SCORE


def score_workout(log: DailyLog) -> int:
    return 100 if log.workout_done else 0


DEFAULT_SCORERS: Mapping[str, Scorer] = MappingProxyType({
    "health": score_health,
    "looks": score_looks,
    "routine": score_routine,
    "food": score_food,
    "workout": score_workout,
})
