"""Adjustment generator.

Maps pattern classifications to a prioritized list of plan changes. Every
calorie and protein change is routed through a SafetyValidator before it
is returned; the validated value replaces the proposal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Optional, Sequence

from lifeplan.adaptation.patterns import (
    DEFAULT_WINDOW,
    WEIGHT_STALL_THRESHOLD_KG,
    ComplianceIssue,
    FatigueResult,
    PatternSummary,
    WeightStallResult,
    analyze_window,
    detect_compliance_issues,
    detect_fatigue_pattern,
    detect_weight_stall,
)
from lifeplan.adaptation.recovery import (
    StreakBreak,
    WorkoutAdjustment,
    adjust_next_day_workout,
    handle_streak_break,
    next_workout_reason,
    streak_before_break,
)
from lifeplan.profiles.body_calc import NutritionTargets, calculate_targets
from lifeplan.safety.validators import (
    CalorieCheck,
    DefaultSafetyValidator,
    SafetyValidator,
    validate_adaptation_change,
)
from lifeplan.tracking.models import DailyLog, Profile

logger = logging.getLogger(__name__)

ADAPTATION_PRIORITIES = MappingProxyType({
    "recovery": 5,
    "health": 4,
    "performance": 3,
    "aesthetics": 2,
    "looksmaxing": 1,
})

CALORIE_STEP = 50  # kcal/day per cycle
PROTEIN_STEP = 10  # g/day per cycle
VOLUME_STEP = -0.2


@dataclass
class PlanAdjustment:
    """One proposed change to the plan."""

    type: str  # 'calories', 'protein', 'workout_volume', 'rest_day', 'lifestyle', 'meal_plan', 'workout_difficulty'
    category: str  # key into ADAPTATION_PRIORITIES
    reason: str
    value: Optional[float] = None
    action: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def priority(self) -> int:
        return ADAPTATION_PRIORITIES[self.category]

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "category": self.category,
            "priority": self.priority,
            "reason": self.reason,
            "value": self.value,
            "action": self.action,
            "warnings": list(self.warnings),
        }


@dataclass
class AdaptationReport:
    """Result of one adaptation run over the trailing window."""

    has_data: bool
    analysis_date: Optional[date] = None
    patterns: Optional[PatternSummary] = None
    weight_status: Optional[WeightStallResult] = None
    fatigue: Optional[FatigueResult] = None
    compliance_issues: list[ComplianceIssue] = field(default_factory=list)
    adjustments: list[PlanAdjustment] = field(default_factory=list)
    summary: str = ""
    warnings: list[str] = field(default_factory=list)
    next_workout: Optional[WorkoutAdjustment] = None
    streak_break: Optional[StreakBreak] = None

    def find(self, adjustment_type: str) -> Optional[PlanAdjustment]:
        """First adjustment of the given type, or None."""
        for adjustment in self.adjustments:
            if adjustment.type == adjustment_type:
                return adjustment
        return None

    def to_dict(self) -> dict:
        return {
            "has_data": self.has_data,
            "analysis_date": self.analysis_date.isoformat() if self.analysis_date else None,
            "patterns": self.patterns.to_dict() if self.patterns else None,
            "weight_status": vars(self.weight_status).copy() if self.weight_status else None,
            "fatigue": vars(self.fatigue).copy() if self.fatigue else None,
            "compliance_issues": [vars(issue).copy() for issue in self.compliance_issues],
            "adjustments": [a.to_dict() for a in self.adjustments],
            "summary": self.summary,
            "warnings": list(self.warnings),
            "next_workout": self.next_workout.to_dict() if self.next_workout else None,
            "streak_break": self.streak_break.to_dict() if self.streak_break else None,
        }


def apply_calorie_adjustment(
    current_calories: float,
    delta: float,
    sex: str,
    tdee: float,
    validator: Optional[SafetyValidator] = None,
) -> CalorieCheck:
    """Validate a calorie delta; the returned check holds the safe value."""
    validator = validator or DefaultSafetyValidator()
    return validator.validate_calorie_delta(current_calories, delta, sex, tdee)


def _calorie_adjustment(
    profile: Profile,
    targets: NutritionTargets,
    validator: SafetyValidator,
    delta: int,
    reason: str,
) -> PlanAdjustment:
    check = apply_calorie_adjustment(targets.target_calories, delta, profile.sex, targets.tdee, validator)
    if check.warnings:
        logger.info("Calorie delta %+d clamped to %+d", delta, check.adjusted_delta)
    return PlanAdjustment(
        type="calories",
        category="aesthetics",
        reason=reason,
        value=check.adjusted_delta,
        warnings=check.warnings,
    )


def generate_adjustments(
    profile: Profile,
    summary: Optional[PatternSummary],
    goal_type: Optional[str] = None,
    validator: Optional[SafetyValidator] = None,
    targets: Optional[NutritionTargets] = None,
    stall_threshold: float = WEIGHT_STALL_THRESHOLD_KG,
) -> list[PlanAdjustment]:
    """
    Turn a pattern summary into plan adjustments.

    Args:
        profile: Profile the summary belongs to
        summary: Output of analyze_window (None yields no adjustments)
        goal_type: Overrides profile.goal_type
        validator: Safety validator; DefaultSafetyValidator when omitted
        targets: Current baseline targets; computed from the profile when omitted
        stall_threshold: Weight stall threshold in kg

    Returns:
        Adjustments sorted by priority, highest first. Equal priorities keep
        generation order.
    """
    if summary is None:
        return []

    goal_type = goal_type or profile.goal_type
    validator = validator or DefaultSafetyValidator()
    targets = targets or calculate_targets(profile)
    adjustments = []

    stall = detect_weight_stall(summary.weights, goal_type, stall_threshold)
    if stall.stalled and stall.direction == "need_more_deficit":
        adjustments.append(_calorie_adjustment(
            profile, targets, validator, -CALORIE_STEP,
            f"Weight stalled ({stall.change:+.1f} kg over {len(summary.weights)} weigh-ins). Small deficit increase.",
        ))
    elif stall.stalled and stall.direction == "need_more_surplus":
        adjustments.append(_calorie_adjustment(
            profile, targets, validator, CALORIE_STEP,
            f"Weight stalled ({stall.change:+.1f} kg over {len(summary.weights)} weigh-ins). Small surplus increase.",
        ))
    elif stall.issue == "gaining_on_cut":
        adjustments.append(_calorie_adjustment(
            profile, targets, validator, -CALORIE_STEP,
            f"Weight went up {stall.change:+.1f} kg during a cut.",
        ))
    elif stall.issue == "losing_on_bulk":
        adjustments.append(_calorie_adjustment(
            profile, targets, validator, CALORIE_STEP,
            f"Weight went down {stall.change:+.1f} kg during a bulk.",
        ))

    fatigue = detect_fatigue_pattern(summary)
    if fatigue.severity == "high":
        volume = validate_adaptation_change(1.0 + VOLUME_STEP, 1.0, "volume")
        adjustments.append(PlanAdjustment(
            type="workout_volume",
            category="recovery",
            reason=f"High fatigue ({', '.join(fatigue.issues)}). Reducing training volume.",
            value=round(volume.adjusted_value - 1.0, 2),
            warnings=volume.warnings,
        ))
        adjustments.append(PlanAdjustment(
            type="rest_day",
            category="recovery",
            reason="Extra rest day to recover from accumulated fatigue.",
            value=1,
        ))
    if "sleep_debt" in fatigue.issues:
        adjustments.append(PlanAdjustment(
            type="lifestyle",
            category="health",
            reason=f"Averaging {summary.avg_sleep:.1f}h of sleep. Sleep is the priority.",
            action="sleep_priority",
        ))

    for issue in detect_compliance_issues(summary):
        if issue.type == "low_protein":
            check = validator.validate_protein_target(targets.protein_g + PROTEIN_STEP, profile.weight_kg)
            step = validate_adaptation_change(check.adjusted_protein, targets.protein_g, "protein")
            adjustments.append(PlanAdjustment(
                type="protein",
                category="performance",
                reason=f"Protein compliance at {issue.value:.0f}%. Adding an easy protein source.",
                value=round(step.adjusted_value - targets.protein_g),
                action=issue.action,
                warnings=check.warnings + step.warnings,
            ))
        elif issue.type == "low_food_compliance":
            adjustments.append(PlanAdjustment(
                type="meal_plan",
                category="performance",
                reason=f"Food compliance at {issue.value:.0f}%. Simplifying meals.",
                action=issue.action,
            ))
        elif issue.type == "workout_skips":
            adjustments.append(PlanAdjustment(
                type="workout_difficulty",
                category="performance",
                reason=f"{issue.value:.0f} workouts skipped in a row.",
                action=issue.suggested or "reduce",
            ))

    # sorted() is stable, so equal priorities keep generation order
    return sorted(adjustments, key=lambda a: a.priority, reverse=True)


def _summarize(adjustments: Sequence[PlanAdjustment]) -> str:
    if not adjustments:
        return "No changes needed. Keep going."
    top = adjustments[0]
    more = len(adjustments) - 1
    suffix = f" (+{more} more)" if more else ""
    return f"{top.reason}{suffix}"


def generate_adaptation_report(
    profile: Profile,
    logs: Sequence[DailyLog],
    window_size: int = DEFAULT_WINDOW,
    today: Optional[date] = None,
    validator: Optional[SafetyValidator] = None,
    targets: Optional[NutritionTargets] = None,
    stall_threshold: float = WEIGHT_STALL_THRESHOLD_KG,
) -> AdaptationReport:
    """
    Analyze the trailing window and propose adjustments.

    Args:
        profile: Profile the logs belong to
        logs: Daily logs, any order. Only the most recent window_size are
            analyzed; older logs still count towards the streak length.
        window_size: Days to analyze
        today: Analysis date recorded on the report
        validator: Safety validator for calorie and protein changes
        targets: Current baseline targets
        stall_threshold: Weight stall threshold in kg

    Returns:
        AdaptationReport; has_data is False when there are no logs
    """
    summary = analyze_window(logs, window_size)
    if summary is None:
        return AdaptationReport(
            has_data=False,
            analysis_date=today,
            summary="Not enough data yet. Log a few days to get adjustments.",
        )

    adjustments = generate_adjustments(
        profile, summary, validator=validator, targets=targets, stall_threshold=stall_threshold
    )
    warnings = [w for a in adjustments for w in a.warnings]
    streak = streak_before_break(logs)

    return AdaptationReport(
        has_data=True,
        analysis_date=today,
        patterns=summary,
        weight_status=detect_weight_stall(summary.weights, profile.goal_type, stall_threshold),
        fatigue=detect_fatigue_pattern(summary),
        compliance_issues=detect_compliance_issues(summary),
        adjustments=adjustments,
        summary=_summarize(adjustments),
        warnings=warnings,
        next_workout=adjust_next_day_workout(next_workout_reason(summary)),
        streak_break=handle_streak_break(streak) if streak > 0 else None,
    )

