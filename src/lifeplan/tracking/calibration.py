"""TDEE calibration from observed weight change.

The formula TDEE is only a starting point. This module compares the weight
change that was intended (target deficit or surplus) with the change that
actually happened and proposes a corrected daily estimate, using the
energy-balance identity of ~7700 kcal per kg of body mass.

This is the only place where observed outcomes correct the formula. A
persisted CalibrationState carries the rolling estimate and the last few
(weight, target intake) points between sessions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

import numpy as np

from lifeplan.profiles.body_calc import KCAL_PER_KG
from lifeplan.tracking.ema import calculate_trend_from_scratch, estimate_daily_energy_balance
from lifeplan.tracking.models import WeightSample
from lifeplan.tracking.tdee_filter import INITIAL_VARIANCE, TDEEFilter

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 8

# Below this the suggestion is reported as "accurate"
NOTE_THRESHOLD_KCAL = 100


@dataclass
class CalibrationResult:
    """Outcome of one calibration run."""

    can_calibrate: bool
    current_estimate: float
    suggested_estimate: Optional[float] = None
    adjustment: Optional[int] = None  # kcal/day
    expected_change_kg: Optional[float] = None
    actual_change_kg: Optional[float] = None
    difference_kg: Optional[float] = None
    period_days: int = 0
    confidence: Optional[str] = None  # 'high', 'moderate', 'low'
    reason: Optional[str] = None  # set when can_calibrate is False
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "can_calibrate": self.can_calibrate,
            "current_estimate": self.current_estimate,
            "suggested_estimate": self.suggested_estimate,
            "adjustment": self.adjustment,
            "expected_change_kg": self.expected_change_kg,
            "actual_change_kg": self.actual_change_kg,
            "difference_kg": self.difference_kg,
            "period_days": self.period_days,
            "confidence": self.confidence,
            "reason": self.reason,
            "note": self.note,
        }


@dataclass(frozen=True)
class CalibrationPoint:
    """One (weight, target intake) observation."""

    measured_at: date
    weight_kg: float
    target_intake: float


@dataclass
class CalibrationState:
    """Per-profile rolling TDEE estimate."""

    user_id: Optional[int]
    formula_tdee: float
    estimate: float
    variance: float = INITIAL_VARIANCE
    history: list[CalibrationPoint] = field(default_factory=list)
    updated_at: Optional[date] = None

    @classmethod
    def initial(cls, user_id: Optional[int], formula_tdee: float) -> "CalibrationState":
        """Fresh state that trusts the formula."""
        return cls(user_id=user_id, formula_tdee=formula_tdee, estimate=formula_tdee)


def _confidence(period_days: int) -> str:
    if period_days >= 14:
        return "high"
    if period_days >= 7:
        return "moderate"
    return "low"


def _cannot_calibrate(current_estimate: float, reason: str, period_days: int = 0) -> CalibrationResult:
    logger.info("Cannot calibrate TDEE: %s", reason)
    return CalibrationResult(
        can_calibrate=False,
        current_estimate=current_estimate,
        period_days=period_days,
        reason=reason,
        note="Not enough data to calibrate. Keep logging your weight.",
    )


def calibrate(
    current_estimate: float,
    target_daily_delta: float,
    observed_weight_change: float,
    period_days: int,
) -> CalibrationResult:
    """
    Reconcile the estimate with the observed weight change.

    Args:
        current_estimate: Current TDEE estimate (kcal/day)
        target_daily_delta: Intended daily balance (negative = deficit)
        observed_weight_change: Actual change in kg (negative = loss)
        period_days: Days the change was observed over

    Returns:
        CalibrationResult. The adjustment is the observed-minus-expected
        change converted back to kcal/day, so less loss than intended on a
        cut raises the suggestion and more loss lowers it.
    """
    if period_days <= 0:
        return _cannot_calibrate(current_estimate, "invalid_period", period_days)

    expected_change = target_daily_delta * period_days / KCAL_PER_KG
    difference = observed_weight_change - expected_change
    adjustment = round(estimate_daily_energy_balance(difference, period_days))

    if adjustment > NOTE_THRESHOLD_KCAL:
        note = "Weight is moving above plan; estimate raised"
    elif adjustment < -NOTE_THRESHOLD_KCAL:
        note = "Weight is moving below plan; estimate lowered"
    else:
        note = "Current TDEE estimate appears accurate"

    return CalibrationResult(
        can_calibrate=True,
        current_estimate=current_estimate,
        suggested_estimate=current_estimate + adjustment,
        adjustment=adjustment,
        expected_change_kg=round(expected_change, 2),
        actual_change_kg=observed_weight_change,
        difference_kg=round(difference, 2),
        period_days=period_days,
        confidence=_confidence(period_days),
        note=note,
    )


def calibrate_from_samples(
    current_estimate: float,
    target_daily_delta: float,
    samples: list[WeightSample],
    use_trend: bool = False,
) -> CalibrationResult:
    """
    Calibrate from a weight history.

    Requires at least 2 samples on different dates. With ``use_trend`` the
    EMA trend endpoints are compared instead of raw scale weights.
    """
    if len(samples) < 2:
        return _cannot_calibrate(current_estimate, "insufficient_data")

    ordered = sorted(samples, key=lambda s: s.measured_at)
    period_days = (ordered[-1].measured_at - ordered[0].measured_at).days
    if period_days <= 0:
        return _cannot_calibrate(current_estimate, "insufficient_data")

    if use_trend:
        trends = calculate_trend_from_scratch([(s.measured_at, s.weight_kg) for s in ordered])
        change = trends[-1] - trends[0]
    else:
        change = ordered[-1].weight_kg - ordered[0].weight_kg

    return calibrate(current_estimate, target_daily_delta, round(change, 3), period_days)


def record_observation(
    state: CalibrationState,
    measured_at: date,
    weight_kg: float,
    target_intake: float,
    max_history: int = DEFAULT_MAX_HISTORY,
) -> CalibrationState:
    """Return a new state with one more point, keeping the last ``max_history``."""
    points = [p for p in state.history if p.measured_at != measured_at]
    points.append(CalibrationPoint(measured_at, weight_kg, target_intake))
    points.sort(key=lambda p: p.measured_at)
    return replace(state, history=points[-max_history:])


def update_state(
    state: CalibrationState,
    result: CalibrationResult,
    on: Optional[date] = None,
) -> CalibrationState:
    """
    Fold a calibration result into the rolling estimate.

    Results that could not calibrate leave the state unchanged.
    """
    if not result.can_calibrate or result.suggested_estimate is None:
        return state

    if state.updated_at is not None and on is not None:
        days = max((on - state.updated_at).days, 1)
    else:
        days = result.period_days

    tdee_filter = TDEEFilter(bias=state.estimate - state.formula_tdee, variance=state.variance)
    tdee_filter.predict_and_update(
        observed_bias=result.suggested_estimate - state.formula_tdee,
        confidence=result.confidence or "low",
        days=days,
    )
    estimate, _ = tdee_filter.get_adjusted_tdee(state.formula_tdee)

    return replace(
        state,
        estimate=round(estimate),
        variance=tdee_filter.variance,
        updated_at=on or state.updated_at,
    )


def recalibrate(state: CalibrationState, on: Optional[date] = None) -> tuple[CalibrationState, CalibrationResult]:
    """
    Run the calibration loop over the stored history points.

    The intended balance is the mean target intake minus the formula TDEE,
    so repeated runs over the same history give the same observation.
    """
    if len(state.history) < 2:
        return state, _cannot_calibrate(state.estimate, "insufficient_data")

    first, last = state.history[0], state.history[-1]
    period_days = (last.measured_at - first.measured_at).days
    mean_intake = float(np.mean([p.target_intake for p in state.history]))

    result = calibrate(
        current_estimate=state.estimate,
        target_daily_delta=mean_intake - state.formula_tdee,
        observed_weight_change=round(last.weight_kg - first.weight_kg, 3),
        period_days=period_days,
    )
    return update_state(state, result, on or last.measured_at), result
