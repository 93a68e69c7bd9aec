"""Weight plateau detection and interventions.

A plateau is a run of weigh-ins ending today that all stay within
PLATEAU_CHANGE_KG of the latest one for at least DAYS_TO_DETECT days. The
longer it lasts, the stronger the suggested intervention: small tweaks,
then a refeed day (or a calorie bump off a cut), then a full diet break.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np

from lifeplan.profiles.body_calc import NutritionTargets
from lifeplan.tracking.models import WeightSample

logger = logging.getLogger(__name__)

DAYS_TO_DETECT = 14
ACTION_REQUIRED_DAYS = 21
REFEED_TRIGGER_DAYS = 28
PLATEAU_CHANGE_KG = 0.3

DIET_BREAK_DAYS = 7
REFEED_FAT_PER_KG = 0.6


@dataclass
class PlateauAction:
    type: str  # 'wait', 'minor_adjustment', 'refeed', 'calorie_increase', 'diet_break'
    message: str
    options: list[str] = field(default_factory=list)
    alternative: Optional[str] = None


@dataclass
class PlateauResult:
    in_plateau: bool
    reason: Optional[str] = None  # 'insufficient_data' when the history is too short
    days: int = 0
    severity: Optional[str] = None  # 'mild', 'moderate', 'severe'
    avg_weight: Optional[float] = None
    action: Optional[PlateauAction] = None

    def to_dict(self) -> dict:
        return {
            "in_plateau": self.in_plateau,
            "reason": self.reason,
            "days": self.days,
            "severity": self.severity,
            "avg_weight": self.avg_weight,
            "action": vars(self.action).copy() if self.action else None,
        }


@dataclass
class RefeedPlan:
    """One day at maintenance, carbs up and fats down."""

    calories: int
    protein_g: int
    carbs_g: int
    fats_g: int
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"kind": "refeed", **vars(self)}


@dataclass
class DietBreakPlan:
    """A full week at maintenance."""

    duration_days: int
    calories: int
    protein_g: int
    carbs_g: int
    fats_g: int
    workout: str
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"kind": "diet_break", **vars(self)}


def plateau_severity(days: int) -> str:
    if days >= REFEED_TRIGGER_DAYS:
        return "severe"
    if days >= ACTION_REQUIRED_DAYS:
        return "moderate"
    return "mild"


def plateau_action(days: int, goal_type: str) -> PlateauAction:
    """Recommended intervention for a plateau of ``days`` days."""
    if days < DAYS_TO_DETECT:
        return PlateauAction("wait", "Too early to determine. Continue as planned.")

    if days < ACTION_REQUIRED_DAYS:
        return PlateauAction(
            "minor_adjustment",
            "Potential plateau detected. Consider these options:",
            options=[
                "Increase daily steps by 2000",
                "Reduce calories by 100 for 1 week",
                "Add one extra workout session",
            ],
        )

    if days < REFEED_TRIGGER_DAYS:
        if goal_type == "fat_loss":
            return PlateauAction(
                "refeed",
                "Plateau confirmed. Time for a refeed day.",
                alternative="Or reduce deficit by 200 calories",
            )
        return PlateauAction(
            "calorie_increase",
            "Weight not moving. Increase calories by 150-200.",
            alternative="Track for 2 more weeks before next adjustment",
        )

    return PlateauAction(
        "diet_break",
        "Extended plateau. Consider a diet break.",
        alternative="A week at maintenance calories can reset metabolic adaptations",
    )


def detect_plateau(
    samples: Sequence[WeightSample],
    goal_type: str,
    use_trend: bool = False,
) -> PlateauResult:
    """
    Detect a weight plateau ending at the latest weigh-in.

    Args:
        samples: Weight samples, any order
        goal_type: Profile goal type, selects the intervention
        use_trend: Compare EMA trend values instead of scale weights

    Returns:
        PlateauResult; reason is 'insufficient_data' when the history spans
        fewer than DAYS_TO_DETECT days
    """
    ordered = sorted(samples, key=lambda s: s.measured_at, reverse=True)
    if len(ordered) < 2 or (ordered[0].measured_at - ordered[-1].measured_at).days < DAYS_TO_DETECT:
        return PlateauResult(in_plateau=False, reason="insufficient_data")

    def _weight(sample: WeightSample) -> float:
        if use_trend and sample.trend_kg is not None:
            return sample.trend_kg
        return sample.weight_kg

    latest = _weight(ordered[0])
    run = []
    for sample in ordered:
        if abs(_weight(sample) - latest) >= PLATEAU_CHANGE_KG:
            break
        run.append(sample)

    days = (run[0].measured_at - run[-1].measured_at).days
    if days < DAYS_TO_DETECT:
        return PlateauResult(in_plateau=False, days=days)

    logger.info("Weight plateau of %d days detected", days)
    return PlateauResult(
        in_plateau=True,
        days=days,
        severity=plateau_severity(days),
        avg_weight=round(float(np.mean([_weight(s) for s in run])), 1),
        action=plateau_action(days, goal_type),
    )


def refeed_day_plan(targets: NutritionTargets, weight_kg: float) -> RefeedPlan:
    """Maintenance calories with protein kept and fats lowered to make room for carbs."""
    calories = targets.tdee
    fats = round(weight_kg * REFEED_FAT_PER_KG)
    carbs = round((calories - targets.protein_g * 4 - fats * 9) / 4)
    return RefeedPlan(
        calories=calories,
        protein_g=targets.protein_g,
        carbs_g=carbs,
        fats_g=fats,
        notes=[
            "Eat at maintenance calories today",
            "Focus on complex carbs: rice, oats, potatoes, fruit",
            "Keep protein the same",
            "Expect a temporary weight increase from water",
        ],
    )


def diet_break_plan(targets: NutritionTargets) -> DietBreakPlan:
    return DietBreakPlan(
        duration_days=DIET_BREAK_DAYS,
        calories=targets.tdee,
        protein_g=targets.protein_g,
        carbs_g=round(targets.tdee * 0.4 / 4),
        fats_g=round(targets.tdee * 0.3 / 9),
        workout="Maintain current intensity but can reduce volume by 20%",
        notes=[
            "Full week at maintenance calories",
            "Expect 1-2 kg water weight gain (temporary)",
            "After the break, return to the previous deficit",
        ],
    )


def intervention_plan(
    result: PlateauResult,
    targets: NutritionTargets,
    weight_kg: float,
) -> Optional[Union[RefeedPlan, DietBreakPlan]]:
    """Concrete plan for a refeed or diet-break action, else None."""
    if result.action is None:
        return None
    if result.action.type == "refeed":
        return refeed_day_plan(targets, weight_kg)
    if result.action.type == "diet_break":
        return diet_break_plan(targets)
    return None
