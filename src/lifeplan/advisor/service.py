"""Storage-backed plan and calibration workflows.

Reads everything the resolver needs from the database, runs the pure
computations and writes the derived results (plans, calibration state) back.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import date, time, timedelta
from typing import Mapping, Optional, Union

from lifeplan.adaptation.engine import generate_adaptation_report
from lifeplan.adaptation.plateau import (
    DietBreakPlan,
    PlateauResult,
    RefeedPlan,
    detect_plateau,
    intervention_plan,
)
from lifeplan.advisor.models import DailyPlan, PlanContext
from lifeplan.advisor.resolver import generate_plan
from lifeplan.advisor.scoring import Scorer
from lifeplan.config import Settings, get_settings
from lifeplan.db.queries import (
    CalibrationQueries,
    DailyLogQueries,
    HealthLogQueries,
    LooksLogQueries,
    ModeQueries,
    PlanQueries,
    RoutineLogQueries,
    UserQueries,
    WeightQueries,
)
from lifeplan.profiles.body_calc import NutritionTargets, calculate_adaptive_tdee, calculate_targets
from lifeplan.tracking.adaptive_tdee import WeeklyTDEESummary, weekly_tdee_summary
from lifeplan.tracking.calibration import (
    CalibrationResult,
    CalibrationState,
    recalibrate,
    record_observation,
)
from lifeplan.tracking.models import Profile

logger = logging.getLogger(__name__)

# Daily logs read for the streak length; the pattern window itself is shorter
STREAK_LOOKBACK_DAYS = 30
PLATEAU_LOOKBACK_SAMPLES = 60


def _require_profile(conn: sqlite3.Connection, user_id: int) -> Profile:
    profile = UserQueries.get_user(conn, user_id)
    if profile is None:
        raise ValueError(f"No profile found for user {user_id}")
    return profile


def current_targets(conn: sqlite3.Connection, profile: Profile) -> NutritionTargets:
    """Baseline targets; a calibrated estimate replaces the formula TDEE."""
    state = CalibrationQueries.get_state(conn, profile.user_id)
    if state is not None and state.updated_at is not None:
        return calculate_targets(profile, tdee_override=state.estimate)
    return calculate_targets(profile)


def build_context(
    conn: sqlite3.Connection,
    user_id: int,
    day: date,
    current_time: Optional[time] = None,
    settings: Optional[Settings] = None,
) -> PlanContext:
    """
    Assemble the resolver input for one user and day.

    Raises:
        ValueError: If the user has no profile
    """
    settings = settings or get_settings()
    window = settings.analysis.window_size
    profile = _require_profile(conn, user_id)
    targets = current_targets(conn, profile)

    history = DailyLogQueries.get_recent(conn, user_id, max(window, STREAK_LOOKBACK_DAYS), on_or_before=day)
    recent_daily = history[:window]
    adaptation = generate_adaptation_report(
        profile,
        history,
        window_size=window,
        today=day,
        targets=targets,
        stall_threshold=settings.analysis.weight_stall_threshold_kg,
    )

    return PlanContext(
        profile=profile,
        day=day,
        mode=ModeQueries.get_mode(conn, user_id),
        health=HealthLogQueries.get_for_date(conn, user_id, day),
        looks=LooksLogQueries.get_for_date(conn, user_id, day),
        routine=RoutineLogQueries.get_for_date(conn, user_id, day),
        daily=DailyLogQueries.get_for_date(conn, user_id, day),
        recent_health=HealthLogQueries.get_recent(conn, user_id, window, on_or_before=day),
        recent_daily=recent_daily,
        targets=targets,
        adaptation=adaptation,
        current_time=current_time,
    )


def compute_daily_plan(
    conn: sqlite3.Connection,
    user_id: int,
    day: date,
    current_time: Optional[time] = None,
    settings: Optional[Settings] = None,
    scorers: Optional[Mapping[str, Scorer]] = None,
) -> DailyPlan:
    """Build the context, generate the plan and store it (last write wins)."""
    context = build_context(conn, user_id, day, current_time, settings)
    plan = generate_plan(context, scorers=scorers)
    PlanQueries.save_plan(conn, user_id, plan)
    logger.debug("Saved plan for user %s on %s (score %s)", user_id, day, plan.life_score)
    return plan


def run_calibration(
    conn: sqlite3.Connection,
    user_id: int,
    day: date,
    settings: Optional[Settings] = None,
) -> tuple[CalibrationState, CalibrationResult]:
    """
    Fold new weight samples into the calibration state and recalibrate.

    Samples not yet in the stored history are recorded against the current
    calorie target. The updated state is persisted even when calibration is
    not possible yet, so the history keeps growing.
    """
    settings = settings or get_settings()
    max_history = settings.calibration.max_history
    profile = _require_profile(conn, user_id)

    formula_tdee = calculate_targets(profile).tdee
    state = CalibrationQueries.get_state(conn, user_id)
    if state is None:
        state = CalibrationState.initial(user_id, formula_tdee)
    else:
        state = replace(state, formula_tdee=formula_tdee)

    target_intake = current_targets(conn, profile).target_calories
    known = {p.measured_at for p in state.history}
    for sample in WeightQueries.get_weight_history(conn, user_id, limit=max_history, on_or_before=day):
        if sample.measured_at in known:
            continue
        weight = sample.trend_kg if settings.calibration.use_trend and sample.trend_kg else sample.weight_kg
        state = record_observation(state, sample.measured_at, weight, target_intake, max_history)

    span = 0
    if len(state.history) >= 2:
        span = (state.history[-1].measured_at - state.history[0].measured_at).days

    if span < settings.calibration.min_period_days:
        result = CalibrationResult(
            can_calibrate=False,
            current_estimate=state.estimate,
            period_days=span,
            reason="insufficient_data",
            note="Not enough data to calibrate. Keep logging your weight.",
        )
    else:
        state, result = recalibrate(state, on=day)

    CalibrationQueries.save_state(conn, state)
    logger.debug("Saved calibration state for user %s: estimate %s", user_id, state.estimate)
    return state, result


def check_plateau(
    conn: sqlite3.Connection,
    user_id: int,
    day: date,
    settings: Optional[Settings] = None,
) -> tuple[PlateauResult, Optional[Union[RefeedPlan, DietBreakPlan]]]:
    """Look for a weight plateau up to ``day`` and build the matching intervention."""
    settings = settings or get_settings()
    profile = _require_profile(conn, user_id)

    samples = WeightQueries.get_weight_history(
        conn, user_id, limit=PLATEAU_LOOKBACK_SAMPLES, on_or_before=day
    )
    result = detect_plateau(samples, profile.goal_type, use_trend=settings.calibration.use_trend)
    weight = samples[-1].weight_kg if samples else profile.weight_kg
    return result, intervention_plan(result, current_targets(conn, profile), weight)


def weekly_tdee(conn: sqlite3.Connection, user_id: int, day: date) -> WeeklyTDEESummary:
    """Average expenditure over the 7 days ending on ``day``."""
    profile = _require_profile(conn, user_id)
    week_start = day - timedelta(days=6)
    logs = [
        log for log in DailyLogQueries.get_recent(conn, user_id, 7, on_or_before=day)
        if log.log_date >= week_start
    ]
    components = calculate_adaptive_tdee(
        profile.sex, profile.weight_kg, profile.height_cm, profile.age, job_type=profile.job_type
    )["components"]
    return weekly_tdee_summary(logs, components)
