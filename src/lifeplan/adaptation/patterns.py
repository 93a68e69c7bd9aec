"""Pattern analysis over a trailing window of daily logs.

Turns a handful of daily check-ins into rolling averages and a few
classifications (weight stall, fatigue, compliance) that the adjustment
generator maps to plan changes. Thresholds are fixed; this is means and
cut-offs, not a model.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Optional, Sequence

import numpy as np

from lifeplan.tracking.models import DailyLog

DEFAULT_WINDOW = 7

# Trigger thresholds
WEIGHT_STALL_THRESHOLD_KG = 0.3
MIN_WEIGHTS_FOR_STALL = 3
LOW_ENERGY_THRESHOLD = 4.0  # avg energy (1-10)
SLEEP_DEBT_HOURS = 6.0
POOR_RECOVERY_DAYS = 3
LOW_PROTEIN_COMPLIANCE = 80.0
LOW_FOOD_COMPLIANCE = 70.0
CONSECUTIVE_SKIP_LIMIT = 2
LOSING_ON_BULK_KG = -0.3

# Why a workout was skipped, and what that suggests
SKIP_REASONS = MappingProxyType({
    "no_time": MappingProxyType({"adaptable": False, "suggests": "shorter_sessions", "priority": "schedule"}),
    "fatigue": MappingProxyType({"adaptable": True, "suggests": "reduce_intensity", "priority": "recovery"}),
    "sick": MappingProxyType({"adaptable": True, "suggests": "rest_day", "priority": "health"}),
    "injury": MappingProxyType({"adaptable": True, "suggests": "modify_exercises", "priority": "health"}),
    "motivation": MappingProxyType({"adaptable": True, "suggests": "reduce_volume", "priority": "psychology"}),
    "forgot": MappingProxyType({"adaptable": False, "suggests": "reminder", "priority": "habit"}),
    "weather": MappingProxyType({"adaptable": False, "suggests": None, "priority": "environment"}),
    "travel": MappingProxyType({"adaptable": False, "suggests": None, "priority": "schedule"}),
    "other": MappingProxyType({"adaptable": False, "suggests": None, "priority": "unknown"}),
})


@dataclass
class RecoveryStatus:
    score: int
    status: str  # 'excellent', 'good', 'moderate', 'poor'
    issues: list[str] = field(default_factory=list)

    @property
    def can_train_intense(self) -> bool:
        return self.score >= 70 and "high_soreness" not in self.issues


@dataclass
class PatternSummary:
    """Rolling statistics over the analyzed window (most recent first)."""

    days_logged: int
    avg_food_compliance: Optional[float]
    avg_protein_compliance: Optional[float]
    avg_energy: Optional[float]
    avg_sleep: Optional[float]
    avg_mood: Optional[float]
    avg_stress: Optional[float]
    workout_completion_rate: float
    consecutive_skips: int
    weights: list[float]
    recovery_statuses: list[RecoveryStatus]
    skip_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def weight_trend(self) -> Optional[float]:
        """Most recent minus oldest weight in the window."""
        if len(self.weights) < 2:
            return None
        return round(self.weights[0] - self.weights[-1], 2)

    def to_dict(self) -> dict:
        def _r(value: Optional[float], digits: int = 1) -> Optional[float]:
            return None if value is None else round(value, digits)

        return {
            "days_logged": self.days_logged,
            "avg_energy": _r(self.avg_energy),
            "avg_sleep": _r(self.avg_sleep),
            "avg_mood": _r(self.avg_mood),
            "avg_stress": _r(self.avg_stress),
            "avg_food_compliance": _r(self.avg_food_compliance, 0),
            "avg_protein_compliance": _r(self.avg_protein_compliance, 0),
            "workout_completion_rate": round(self.workout_completion_rate * 100),
            "consecutive_skips": self.consecutive_skips,
            "weight_trend": self.weight_trend,
            "poor_recovery_days": sum(1 for r in self.recovery_statuses if r.status == "poor"),
            "skip_reasons": dict(self.skip_reasons),
        }


@dataclass
class WeightStallResult:
    stalled: bool
    change: Optional[float] = None
    direction: Optional[str] = None  # 'need_more_deficit', 'need_more_surplus', 'stable'
    issue: Optional[str] = None  # 'gaining_on_cut', 'losing_on_bulk'


@dataclass
class FatigueResult:
    fatigued: bool
    issues: list[str] = field(default_factory=list)
    severity: Optional[str] = None  # 'moderate' or 'high'


@dataclass
class ComplianceIssue:
    type: str
    value: float
    action: str
    suggested: Optional[str] = None


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(np.mean(present))


def count_consecutive(items: Sequence, condition: Callable) -> int:
    """Count leading items that satisfy ``condition``."""
    count = 0
    for item in items:
        if not condition(item):
            break
        count += 1
    return count


def analyze_recovery_status(log: DailyLog) -> RecoveryStatus:
    """Score one day's recovery from sleep, soreness, energy and stress."""
    score = 100
    issues = []

    if log.sleep_hours is not None:
        if log.sleep_hours < 6:
            score -= 30
            issues.append("critical_sleep_deficit")
        elif log.sleep_hours < 7:
            score -= 15
            issues.append("mild_sleep_deficit")

    if log.sleep_quality is not None and log.sleep_quality <= 2:
        score -= 15
        issues.append("poor_sleep_quality")

    if log.soreness_level is not None:
        if log.soreness_level >= 4:
            score -= 25
            issues.append("high_soreness")
        elif log.soreness_level >= 3:
            score -= 10
            issues.append("moderate_soreness")

    if log.energy_level is not None and log.energy_level <= 3:
        score -= 20
        issues.append("low_energy")

    if log.stress_level is not None and log.stress_level >= 8:
        score -= 15
        issues.append("high_stress")

    if score >= 85:
        status = "excellent"
    elif score >= 70:
        status = "good"
    elif score >= 50:
        status = "moderate"
    else:
        status = "poor"

    return RecoveryStatus(score=max(0, score), status=status, issues=issues)


def analyze_window(logs: Sequence[DailyLog], window_size: int = DEFAULT_WINDOW) -> Optional[PatternSummary]:
    """
    Summarize the most recent ``window_size`` logs.

    Args:
        logs: Daily logs in any order
        window_size: Number of most recent logs to consider

    Returns:
        PatternSummary, or None when there are no logs
    """
    if not logs:
        return None

    recent = sorted(logs, key=lambda log: log.log_date, reverse=True)[:window_size]

    skips = Counter(
        log.workout_skipped_reason
        for log in recent
        if not log.workout_done and log.workout_skipped_reason
    )

    return PatternSummary(
        days_logged=len(recent),
        avg_food_compliance=_mean(log.food_compliance_percent for log in recent),
        avg_protein_compliance=_mean(log.protein_completion_percent for log in recent),
        avg_energy=_mean(log.energy_level for log in recent),
        avg_sleep=_mean(log.sleep_hours for log in recent),
        avg_mood=_mean(log.mood for log in recent),
        avg_stress=_mean(log.stress_level for log in recent),
        workout_completion_rate=sum(1 for log in recent if log.workout_done) / len(recent),
        consecutive_skips=count_consecutive(recent, lambda log: not log.workout_done),
        weights=[log.weight_kg for log in recent if log.weight_kg is not None],
        recovery_statuses=[analyze_recovery_status(log) for log in recent],
        skip_reasons=dict(skips),
    )


def detect_weight_stall(
    weights: Sequence[float],
    goal_type: str,
    threshold: float = WEIGHT_STALL_THRESHOLD_KG,
) -> WeightStallResult:
    """
    Detect a weight stall or a move in the wrong direction.

    Args:
        weights: Weights in kg, most recent first
        goal_type: Profile goal type
        threshold: Absolute change (kg) below which the window counts as stalled

    Returns:
        WeightStallResult
    """
    if len(weights) < MIN_WEIGHTS_FOR_STALL:
        return WeightStallResult(stalled=False)

    change = round(weights[0] - weights[-1], 3)

    if abs(change) < threshold:
        if goal_type == "fat_loss":
            direction = "need_more_deficit"
        elif goal_type == "muscle_gain":
            direction = "need_more_surplus"
        else:
            direction = "stable"
        return WeightStallResult(stalled=True, change=change, direction=direction)

    if goal_type == "fat_loss" and change > 0:
        return WeightStallResult(stalled=False, change=change, issue="gaining_on_cut")
    if goal_type == "muscle_gain" and change < LOSING_ON_BULK_KG:
        return WeightStallResult(stalled=False, change=change, issue="losing_on_bulk")

    return WeightStallResult(stalled=False, change=change)


def detect_fatigue_pattern(summary: Optional[PatternSummary]) -> FatigueResult:
    """Flag low energy, sleep debt and repeated poor recovery."""
    if summary is None:
        return FatigueResult(fatigued=False)

    issues = []
    if summary.avg_energy is not None and summary.avg_energy < LOW_ENERGY_THRESHOLD:
        issues.append("low_energy")
    if summary.avg_sleep is not None and summary.avg_sleep < SLEEP_DEBT_HOURS:
        issues.append("sleep_debt")
    poor_days = sum(1 for r in summary.recovery_statuses if r.status == "poor")
    if poor_days >= POOR_RECOVERY_DAYS:
        issues.append("poor_recovery")

    if not issues:
        return FatigueResult(fatigued=False)
    return FatigueResult(
        fatigued=True,
        issues=issues,
        severity="high" if len(issues) >= 2 else "moderate",
    )


def detect_compliance_issues(summary: PatternSummary) -> list[ComplianceIssue]:
    """Flag low protein, low food compliance and consecutive workout skips."""
    issues = []

    if summary.avg_protein_compliance is not None and summary.avg_protein_compliance < LOW_PROTEIN_COMPLIANCE:
        issues.append(ComplianceIssue("low_protein", summary.avg_protein_compliance, "redistribute_protein"))

    if summary.avg_food_compliance is not None and summary.avg_food_compliance < LOW_FOOD_COMPLIANCE:
        issues.append(ComplianceIssue("low_food_compliance", summary.avg_food_compliance, "simplify_meals"))

    if summary.consecutive_skips >= CONSECUTIVE_SKIP_LIMIT:
        suggested = None
        if summary.skip_reasons:
            # Most common reason; ties go to the first seen
            top_reason = max(summary.skip_reasons, key=summary.skip_reasons.__getitem__)
            suggested = SKIP_REASONS.get(top_reason, SKIP_REASONS["other"])["suggests"]
        issues.append(
            ComplianceIssue("workout_skips", summary.consecutive_skips, "reduce_workout_difficulty", suggested)
        )

    return issues
