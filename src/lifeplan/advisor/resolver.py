"""Cross-domain rule resolver.

Builds one DailyPlan from a PlanContext:

1. Seed Adjustments from the mode table.
2. Fold the rule table over it in ascending priority order. Each firing
   rule returns a new Adjustments value and adds one Explanation.
3. Resolve conflicts (rest day forces intensity to 0). Always last.
4. Sort explanations by priority, derive the timeline and the life score.

No clock is read here: the plan date and any time-of-day input come from the
context, so identical contexts give identical plans.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from lifeplan.advisor.models import Adjustments, DailyPlan, Explanation, PlanContext, TimelineEntry
from lifeplan.advisor.modes import DEFAULT_MODE, MODES, effective_mode
from lifeplan.advisor.rules import EXPLANATION_TEMPLATES, RULES, PriorityTier, Rule
from lifeplan.advisor.scoring import DEFAULT_SCORERS, Scorer

logger = logging.getLogger(__name__)

LIFE_SCORE_WEIGHTS = {
    "health": 0.30,
    "looks": 0.15,
    "routine": 0.25,
    "food": 0.15,
    "workout": 0.15,
}


def mode_adjustments(mode: str) -> Adjustments:
    """Fresh Adjustments with the mode's overrides applied."""
    return replace(Adjustments(), **MODES[mode])


def _mode_explanation(mode: str) -> Explanation:
    return Explanation(
        reason=f"{mode} mode active",
        rule_id=f"mode_{mode}",
        condition=f"mode = {mode}",
        action="All plans adjusted for current mode",
        human_explanation=f"You're in {mode} mode. Plans have been adjusted accordingly.",
        priority=int(PriorityTier.SAFETY),
        domain="mode",
    )


def _explain(rule: Rule, template: Mapping[str, str]) -> Explanation:
    return Explanation(
        reason=template["reason"],
        rule_id=rule.id,
        condition=template["condition"],
        action=template["action"],
        human_explanation=template["human"],
        priority=int(rule.priority),
        domain=rule.domain,
    )


def apply_rules(
    adjustments: Adjustments,
    context: PlanContext,
    rules: Sequence[Rule] = RULES,
) -> tuple[Adjustments, list[Explanation], list[str]]:
    """
    Fold the rule table over ``adjustments``.

    Rules run in ascending priority; sorted() is stable, so equal priorities
    keep table order. A rule whose predicate or effect raises is skipped
    and reported in the returned warnings. An unknown explanation template
    raises KeyError.

    Returns:
        Tuple of (adjustments, explanations in firing order, warnings)
    """
    explanations = []
    warnings = []

    for rule in sorted(rules, key=lambda r: r.priority):
        template = EXPLANATION_TEMPLATES[rule.explanation]
        try:
            if not rule.predicate(context):
                continue
            adjustments = rule.effect(adjustments, context)
        except Exception as e:
            logger.warning("Rule %s skipped: %s", rule.id, e)
            warnings.append(f"rule {rule.id} skipped: {e}")
            continue

        logger.debug("Rule %s fired", rule.id)
        explanations.append(_explain(rule, template))

    return adjustments, explanations, warnings


def resolve_conflicts(adjustments: Adjustments) -> Adjustments:
    """Rest day forces intensity to 0; intensity is clamped to [0, 1]."""
    intensity = 0.0 if adjustments.rest_day else adjustments.workout_intensity
    intensity = round(min(1.0, max(0.0, intensity)), 3)
    return replace(adjustments, workout_intensity=intensity)


def generate_timeline(adjustments: Adjustments) -> list[TimelineEntry]:
    """Derive the day's schedule from the final adjustments, ordered by time."""
    timeline = [TimelineEntry("06:00", "Wake up", "routine", "sunrise")]

    if not adjustments.skip_skincare:
        timeline.append(TimelineEntry("06:15", "Morning skincare routine", "looks", "droplet"))

    if adjustments.add_breathing_exercise:
        timeline.append(TimelineEntry(
            "06:30", "Breathing exercise (4-7-8)", "health", "wind", "High stress detected"
        ))

    if adjustments.workout_intensity > 0:
        intensity = round(adjustments.workout_intensity * 100)
        label = "Easy workout" if adjustments.reduce_workout_difficulty else "Workout"
        timeline.append(TimelineEntry(
            "07:00",
            f"{label} ({intensity}% intensity)",
            "body",
            "activity",
            "Intensity adjusted for recovery" if intensity < 100 else None,
        ))
        timeline.append(TimelineEntry("07:45", "Post-workout stretch", "body", "move"))
    else:
        timeline.append(TimelineEntry(
            "07:00", "Rest day - light stretching only", "body", "moon", "Rest enforced for recovery"
        ))

    if adjustments.concentrate_meals:
        timeline.append(TimelineEntry("12:00", "First meal (protein first)", "food", "sun", "Fasting window"))
        timeline.append(TimelineEntry("16:00", "Second meal", "food", "cookie"))
        timeline.append(TimelineEntry("19:30", "Last meal", "food", "moon"))
    else:
        timeline.append(TimelineEntry("08:30", "Breakfast", "food", "coffee"))
        timeline.append(TimelineEntry("13:00", "Lunch", "food", "sun"))
        if adjustments.add_protein_snacks:
            timeline.append(TimelineEntry("16:30", "Protein snack", "food", "cookie", "Behind on protein"))
        else:
            timeline.append(TimelineEntry("16:30", "Snack", "food", "cookie"))
        timeline.append(TimelineEntry("20:00", "Dinner", "food", "moon"))

    if adjustments.add_mood_boost_activities:
        timeline.append(TimelineEntry("12:30", "Walk outside in the sun", "health", "sun", "Low mood lately"))

    if adjustments.hydration_reminders == "high":
        timeline.append(TimelineEntry("18:00", "Hydration catch-up", "health", "droplet", "Behind on water goal"))

    if adjustments.add_sleep_hygiene_tasks:
        timeline.append(TimelineEntry(
            "21:00", "Screen time limit - blue light glasses", "health", "eye-off", "High screen time today"
        ))

    if not adjustments.skip_skincare:
        timeline.append(TimelineEntry(
            "21:30",
            "Evening skincare routine",
            "looks",
            "moon",
            "Morning routine was missed" if adjustments.evening_skincare_reminder == "high" else None,
        ))

    if adjustments.sleep_priority:
        timeline.append(TimelineEntry("22:00", "Target bedtime", "routine", "moon", "Catching up on sleep"))
    else:
        timeline.append(TimelineEntry("22:30", "Target bedtime", "routine", "moon"))

    # sorted() is stable, so entries at the same time keep insertion order
    return sorted(timeline, key=lambda entry: entry.time)


def calculate_life_score(
    context: PlanContext,
    scorers: Optional[Mapping[str, Scorer]] = None,
) -> tuple[int, list[str]]:
    """
    Weighted blend of domain scores, renormalized over present logs.

    A scorer that raises is treated like a missing log: its weight drops out
    and the failure is reported in the returned warnings.

    Returns:
        Tuple of (0-100 score or 0 when no log is present, warnings)
    """
    scorers = scorers or DEFAULT_SCORERS
    sources = {
        "health": context.health,
        "looks": context.looks,
        "routine": context.routine,
        "food": context.daily,
        "workout": context.daily,
    }

    total = 0.0
    weight_sum = 0.0
    warnings = []
    for domain, weight in LIFE_SCORE_WEIGHTS.items():
        log = sources[domain]
        if log is None or domain not in scorers:
            continue
        try:
            score = float(scorers[domain](log))
        except Exception as e:
            logger.warning("Score %s skipped: %s", domain, e)
            warnings.append(f"score {domain} skipped: {e}")
            continue
        total += score * weight
        weight_sum += weight

    if weight_sum == 0:
        return 0, warnings
    return round(total / weight_sum), warnings


def generate_plan(
    context: PlanContext,
    scorers: Optional[Mapping[str, Scorer]] = None,
    rules: Sequence[Rule] = RULES,
) -> DailyPlan:
    """
    Compute the unified plan for one day.

    Args:
        context: Profile, logs, mode and derived inputs for the day
        scorers: Domain scorers for the life score; DEFAULT_SCORERS when omitted
        rules: Rule table; RULES when omitted

    Returns:
        DailyPlan with explanations sorted by ascending priority
    """
    mode, mode_warning = effective_mode(context.mode, context.day)
    warnings = [mode_warning] if mode_warning else []

    adjustments = mode_adjustments(mode)
    explanations = [] if mode == DEFAULT_MODE else [_mode_explanation(mode)]

    adjustments, fired, rule_warnings = apply_rules(adjustments, context, rules)
    explanations.extend(fired)
    warnings.extend(rule_warnings)

    adjustments = resolve_conflicts(adjustments)

    # clamps applied by the safety validator reach the caller with the plan
    if context.adaptation is not None:
        for warning in context.adaptation.warnings:
            if warning not in warnings:
                warnings.append(warning)

    life_score, score_warnings = calculate_life_score(context, scorers)
    warnings.extend(score_warnings)

    return DailyPlan(
        day=context.day,
        mode=mode,
        adjustments=adjustments,
        explanations=sorted(explanations, key=lambda e: e.priority),
        timeline=generate_timeline(adjustments),
        life_score=life_score,
        warnings=warnings,
        targets=context.targets,
    )


def explain_recommendation(rule_id: str, rules: Sequence[Rule] = RULES) -> Optional[Explanation]:
    """Explanation a rule would produce, or None for an unknown id."""
    for rule in rules:
        if rule.id == rule_id:
            return _explain(rule, EXPLANATION_TEMPLATES[rule.explanation])
    return None
