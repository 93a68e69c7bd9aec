"""Static rule table for the daily plan.

A rule is data: an id, a priority tier, a predicate over the PlanContext and
an effect that returns a new Adjustments value. The resolver walks the table
once per plan in ascending priority order; equal priorities keep the order
they are declared in below.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import time
from enum import IntEnum
from types import MappingProxyType
from typing import Callable, Optional

from lifeplan.advisor.models import Adjustments, PlanContext
from lifeplan.profiles.cycle import current_phase


class PriorityTier(IntEnum):
    """Lower value fires first and is listed first."""

    SAFETY = 1
    RECOVERY = 2
    NUTRITION = 3
    WORKOUT = 4
    LOOKS = 5
    DISCIPLINE = 6


@dataclass(frozen=True)
class Rule:
    id: str
    priority: PriorityTier
    predicate: Callable[[PlanContext], bool]
    effect: Callable[[Adjustments, PlanContext], Adjustments]
    explanation: str  # key into EXPLANATION_TEMPLATES
    domain: str


EXPLANATION_TEMPLATES = MappingProxyType({
    "very_low_sleep": MappingProxyType({
        "reason": "Critical sleep deprivation",
        "condition": "sleep_hours < 4",
        "action": "Rest day enforced",
        "human": "You slept under 4 hours. Training today raises injury risk, so today is a rest day.",
    }),
    "low_sleep": MappingProxyType({
        "reason": "Low sleep detected",
        "condition": "sleep_hours < 6",
        "action": "Workout intensity reduced to 70%",
        "human": "Less than 6 hours of sleep slows recovery. Go lighter and focus on recovery today.",
    }),
    "high_stress": MappingProxyType({
        "reason": "High stress level",
        "condition": "stress_level >= 8",
        "action": "Workout intensity reduced to 60%, breathing exercise added",
        "human": "High stress raises cortisol. A lighter session and a breathing break help more than pushing hard.",
    }),
    "low_mood": MappingProxyType({
        "reason": "Low mood pattern",
        "condition": "mood < 4 for the last 2 days",
        "action": "Light routine with mood-boosting activities",
        "human": "Your mood has been low for a couple of days. Today's plan is lighter, with a walk and some sunlight.",
    }),
    "low_energy": MappingProxyType({
        "reason": "Low energy detected",
        "condition": "energy_level < 4",
        "action": "Workout intensity reduced to 80%, rest suggested",
        "human": "Energy is low today. Train lighter and take a short rest if you can.",
    }),
    "adaptation_rest_day": MappingProxyType({
        "reason": "Accumulated fatigue",
        "condition": "high fatigue over the last week",
        "action": "Rest day inserted",
        "human": "Several signs of fatigue showed up this week. An extra rest day lets you come back stronger.",
    }),
    "adaptation_sleep": MappingProxyType({
        "reason": "Sleep debt",
        "condition": "average sleep < 6h over the last week",
        "action": "Sleep prioritized",
        "human": "You have been short on sleep all week. An earlier bedtime is the most useful change right now.",
    }),
    "low_water": MappingProxyType({
        "reason": "Low water intake",
        "condition": "water_glasses < 4 after 18:00",
        "action": "Hydration reminders increased",
        "human": "You're behind on water today. A couple of glasses before bed will help.",
    }),
    "fasting_mode": MappingProxyType({
        "reason": "Fasting mode active",
        "condition": "fasting_mode is on",
        "action": "Protein timing shifted, meals concentrated in the eating window",
        "human": "Meals are packed into your eating window with protein front-loaded.",
    }),
    "diabetes": MappingProxyType({
        "reason": "Blood sugar management",
        "condition": "diabetes_type2 in conditions",
        "action": "Low-GI meals preferred",
        "human": "Low-GI meals keep blood sugar steadier through the day.",
    }),
    "pcos": MappingProxyType({
        "reason": "PCOS support",
        "condition": "pcos in conditions",
        "action": "Carbohydrates reduced",
        "human": "Fewer refined carbs helps insulin sensitivity with PCOS.",
    }),
    "cycle_luteal": MappingProxyType({
        "reason": "Luteal phase",
        "condition": "cycle phase is luteal",
        "action": "Calorie target raised by 100 kcal",
        "human": "Metabolism runs slightly higher in the luteal phase. Higher hunger is normal.",
    }),
    "adaptation_calories": MappingProxyType({
        "reason": "Calorie target adapted",
        "condition": "weight trend off plan",
        "action": "Calorie target adjusted",
        "human": "Your weight trend is off plan, so the calorie target moved by a small, safe step.",
    }),
    "adaptation_protein": MappingProxyType({
        "reason": "Protein below target",
        "condition": "protein completion < 80%",
        "action": "Protein snacks added",
        "human": "You've been missing your protein target. An easy protein snack closes the gap.",
    }),
    "cycle_menstrual": MappingProxyType({
        "reason": "Menstrual phase",
        "condition": "cycle phase is menstrual",
        "action": "Workout intensity reduced to 85%",
        "human": "Lower energy is normal in this phase. Lighter workouts are fine.",
    }),
    "training_streak": MappingProxyType({
        "reason": "Long training streak",
        "condition": "5 or more training days in a row",
        "action": "Rest day scheduled",
        "human": "Five training days in a row. Muscles grow while resting, so take today off.",
    }),
    "adaptation_volume": MappingProxyType({
        "reason": "Training volume reduced",
        "condition": "high fatigue over the last week",
        "action": "Workout intensity reduced",
        "human": "Fatigue has been building, so today's session is shorter.",
    }),
    "adaptation_difficulty": MappingProxyType({
        "reason": "Workouts skipped",
        "condition": "2 or more workouts skipped in a row",
        "action": "Workout difficulty reduced",
        "human": "A few workouts were skipped. An easier session is easier to start.",
    }),
    "missed_skin_routine": MappingProxyType({
        "reason": "Morning skincare missed",
        "condition": "morning routine not done by 12:00",
        "action": "Evening skincare reminder raised",
        "human": "You missed the morning routine. Don't skip the evening one.",
    }),
    "high_screen_time": MappingProxyType({
        "reason": "High screen time",
        "condition": "screen_time_hours > 5",
        "action": "Sleep hygiene tasks added",
        "human": "Lots of screen time can delay sleep. Dim screens and use blue-light blocking tonight.",
    }),
})


NOON = time(12, 0)
EVENING = time(18, 0)
TRAINING_STREAK_DAYS = 5


def _health(ctx: PlanContext, name: str) -> Optional[float]:
    if ctx.health is None:
        return None
    return getattr(ctx.health, name)


def _below(ctx: PlanContext, name: str, threshold: float) -> bool:
    value = _health(ctx, name)
    return value is not None and value < threshold


def _adaptation(ctx: PlanContext, adjustment_type: str):
    if ctx.adaptation is None:
        return None
    return ctx.adaptation.find(adjustment_type)


def _scale_intensity(factor: float) -> Callable[[Adjustments, PlanContext], Adjustments]:
    def effect(adj: Adjustments, ctx: PlanContext) -> Adjustments:
        return replace(adj, workout_intensity=adj.workout_intensity * factor)
    return effect


def _low_mood_pattern(ctx: PlanContext) -> bool:
    last_two = ctx.recent_health[:2]
    if len(last_two) < 2:
        return False
    return all(log.mood is not None and log.mood < 4 for log in last_two)


def _training_streak(ctx: PlanContext) -> bool:
    streak = 0
    for log in ctx.recent_daily:
        if not log.workout_done:
            break
        streak += 1
    return streak >= TRAINING_STREAK_DAYS


def _phase_is(name: str) -> Callable[[PlanContext], bool]:
    def predicate(ctx: PlanContext) -> bool:
        phase = current_phase(ctx.profile, ctx.day)
        return phase is not None and phase.name == name
    return predicate


def _missed_morning_skincare(ctx: PlanContext) -> bool:
    if ctx.current_time is None or ctx.current_time <= NOON:
        return False
    return ctx.looks is None or not ctx.looks.morning_routine_done


def _low_water_evening(ctx: PlanContext) -> bool:
    if ctx.current_time is None or ctx.current_time < EVENING:
        return False
    return ctx.health is not None and ctx.health.water_glasses < 4


RULES: tuple[Rule, ...] = (
    Rule(
        id="very_low_sleep",
        priority=PriorityTier.SAFETY,
        predicate=lambda ctx: _below(ctx, "sleep_hours", 4),
        effect=lambda adj, ctx: replace(adj, workout_intensity=0.0, rest_day=True),
        explanation="very_low_sleep",
        domain="health",
    ),
    Rule(
        id="low_sleep",
        priority=PriorityTier.RECOVERY,
        predicate=lambda ctx: _below(ctx, "sleep_hours", 6),
        effect=lambda adj, ctx: replace(
            adj, workout_intensity=adj.workout_intensity * 0.7, add_recovery_focus=True
        ),
        explanation="low_sleep",
        domain="health",
    ),
    Rule(
        id="high_stress",
        priority=PriorityTier.RECOVERY,
        predicate=lambda ctx: (_health(ctx, "stress_level") or 0) >= 8,
        effect=lambda adj, ctx: replace(
            adj,
            workout_intensity=adj.workout_intensity * 0.6,
            skip_heavy_facial_exercises=True,
            add_breathing_exercise=True,
        ),
        explanation="high_stress",
        domain="health",
    ),
    Rule(
        id="low_mood_pattern",
        priority=PriorityTier.RECOVERY,
        predicate=_low_mood_pattern,
        effect=lambda adj, ctx: replace(
            adj,
            workout_intensity=adj.workout_intensity * 0.7,
            light_routine=True,
            add_mood_boost_activities=True,
        ),
        explanation="low_mood",
        domain="health",
    ),
    Rule(
        id="low_energy",
        priority=PriorityTier.RECOVERY,
        predicate=lambda ctx: _below(ctx, "energy_level", 4),
        effect=lambda adj, ctx: replace(
            adj, workout_intensity=adj.workout_intensity * 0.8, rest_suggestion=True
        ),
        explanation="low_energy",
        domain="health",
    ),
    Rule(
        id="adaptation_rest_day",
        priority=PriorityTier.RECOVERY,
        predicate=lambda ctx: _adaptation(ctx, "rest_day") is not None,
        effect=lambda adj, ctx: replace(adj, rest_day=True),
        explanation="adaptation_rest_day",
        domain="workout",
    ),
    Rule(
        id="adaptation_sleep_priority",
        priority=PriorityTier.RECOVERY,
        predicate=lambda ctx: (
            _adaptation(ctx, "lifestyle") is not None
            and _adaptation(ctx, "lifestyle").action == "sleep_priority"
        ),
        effect=lambda adj, ctx: replace(adj, sleep_priority=True),
        explanation="adaptation_sleep",
        domain="health",
    ),
    Rule(
        id="low_water_evening",
        priority=PriorityTier.NUTRITION,
        predicate=_low_water_evening,
        effect=lambda adj, ctx: replace(adj, hydration_reminders="high"),
        explanation="low_water",
        domain="health",
    ),
    Rule(
        id="fasting_active",
        priority=PriorityTier.NUTRITION,
        predicate=lambda ctx: ctx.profile.fasting_mode,
        effect=lambda adj, ctx: replace(adj, shift_protein_timing=True, concentrate_meals=True),
        explanation="fasting_mode",
        domain="food",
    ),
    Rule(
        id="condition_diabetes",
        priority=PriorityTier.NUTRITION,
        predicate=lambda ctx: "diabetes_type2" in ctx.profile.conditions,
        effect=lambda adj, ctx: replace(adj, low_gi_meals=True),
        explanation="diabetes",
        domain="food",
    ),
    Rule(
        id="condition_pcos",
        priority=PriorityTier.NUTRITION,
        predicate=lambda ctx: "pcos" in ctx.profile.conditions,
        effect=lambda adj, ctx: replace(adj, reduce_carbs=True),
        explanation="pcos",
        domain="food",
    ),
    Rule(
        id="cycle_luteal",
        priority=PriorityTier.NUTRITION,
        predicate=_phase_is("luteal"),
        effect=lambda adj, ctx: replace(
            adj, calorie_delta=adj.calorie_delta + current_phase(ctx.profile, ctx.day).tdee_adjust
        ),
        explanation="cycle_luteal",
        domain="food",
    ),
    Rule(
        id="adaptation_calories",
        priority=PriorityTier.NUTRITION,
        predicate=lambda ctx: bool(_adaptation(ctx, "calories") and _adaptation(ctx, "calories").value),
        effect=lambda adj, ctx: replace(
            adj, calorie_delta=adj.calorie_delta + int(_adaptation(ctx, "calories").value)
        ),
        explanation="adaptation_calories",
        domain="food",
    ),
    Rule(
        id="adaptation_protein",
        priority=PriorityTier.NUTRITION,
        predicate=lambda ctx: _adaptation(ctx, "protein") is not None,
        effect=lambda adj, ctx: replace(adj, add_protein_snacks=True),
        explanation="adaptation_protein",
        domain="food",
    ),
    Rule(
        id="cycle_menstrual",
        priority=PriorityTier.WORKOUT,
        predicate=_phase_is("menstrual"),
        effect=_scale_intensity(0.85),
        explanation="cycle_menstrual",
        domain="workout",
    ),
    Rule(
        id="training_streak",
        priority=PriorityTier.WORKOUT,
        predicate=_training_streak,
        effect=lambda adj, ctx: replace(adj, rest_day=True),
        explanation="training_streak",
        domain="workout",
    ),
    Rule(
        id="adaptation_volume",
        priority=PriorityTier.WORKOUT,
        predicate=lambda ctx: _adaptation(ctx, "workout_volume") is not None,
        effect=lambda adj, ctx: replace(
            adj,
            workout_intensity=adj.workout_intensity * (1 + _adaptation(ctx, "workout_volume").value),
        ),
        explanation="adaptation_volume",
        domain="workout",
    ),
    Rule(
        id="adaptation_difficulty",
        priority=PriorityTier.WORKOUT,
        predicate=lambda ctx: _adaptation(ctx, "workout_difficulty") is not None,
        effect=lambda adj, ctx: replace(adj, reduce_workout_difficulty=True),
        explanation="adaptation_difficulty",
        domain="workout",
    ),
    Rule(
        id="missed_morning_skincare",
        priority=PriorityTier.LOOKS,
        predicate=_missed_morning_skincare,
        effect=lambda adj, ctx: replace(adj, evening_skincare_reminder="high"),
        explanation="missed_skin_routine",
        domain="looks",
    ),
    Rule(
        id="high_screen_time",
        priority=PriorityTier.DISCIPLINE,
        predicate=lambda ctx: (_health(ctx, "screen_time_hours") or 0) > 5,
        effect=lambda adj, ctx: replace(adj, add_sleep_hygiene_tasks=True, blue_blocking_reminder=True),
        explanation="high_screen_time",
        domain="routine",
    ),
)
