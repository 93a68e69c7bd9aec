"""Tests for TDEE calibration from observed weight change."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from lifeplan.tracking.calibration import (
    CalibrationState,
    calibrate,
    calibrate_from_samples,
    recalibrate,
    record_observation,
    update_state,
)
from lifeplan.tracking.models import WeightSample

START = date(2024, 1, 1)


class TestCalibrate:
    """Tests for the core energy-balance reconciliation."""

    def test_on_plan_is_accurate(self) -> None:
        # 500 kcal/day deficit for 14 days ~ 0.91 kg
        result = calibrate(2500, -500, -0.9, 14)
        assert result.can_calibrate
        assert abs(result.adjustment) <= 100
        assert result.note == "Current TDEE estimate appears accurate"

    def test_less_loss_than_planned_raises_estimate(self) -> None:
        result = calibrate(2500, -500, 0.0, 14)
        assert result.adjustment == pytest.approx(500, abs=1)
        assert result.suggested_estimate == 2500 + result.adjustment
        assert "raised" in result.note

    def test_more_loss_than_planned_lowers_estimate(self) -> None:
        result = calibrate(2500, -500, -2.0, 14)
        assert result.adjustment < -100
        assert "lowered" in result.note

    def test_expected_change_reported(self) -> None:
        result = calibrate(2500, -500, -0.5, 14)
        assert result.expected_change_kg == pytest.approx(-0.91, abs=0.01)
        assert result.actual_change_kg == -0.5

    @pytest.mark.parametrize("days,confidence", [(3, "low"), (7, "moderate"), (14, "high"), (30, "high")])
    def test_confidence_by_period(self, days: int, confidence: str) -> None:
        assert calibrate(2500, 0, 0.0, days).confidence == confidence

    def test_invalid_period(self) -> None:
        result = calibrate(2500, -500, -0.5, 0)
        assert not result.can_calibrate
        assert result.reason == "invalid_period"
        assert result.suggested_estimate is None


class TestCalibrateFromSamples:
    def test_needs_two_samples(self) -> None:
        result = calibrate_from_samples(2500, -500, [WeightSample(START, 80.0)])
        assert not result.can_calibrate
        assert result.reason == "insufficient_data"

    def test_same_day_samples_cannot_calibrate(self) -> None:
        samples = [WeightSample(START, 80.0), WeightSample(START, 79.8)]
        assert not calibrate_from_samples(2500, -500, samples).can_calibrate

    def test_uses_endpoints_in_date_order(self) -> None:
        samples = [
            WeightSample(START + timedelta(days=14), 79.0),
            WeightSample(START, 80.0),
        ]
        result = calibrate_from_samples(2500, -500, samples)
        assert result.period_days == 14
        assert result.actual_change_kg == pytest.approx(-1.0)

    def test_trend_smooths_endpoint_noise(self) -> None:
        samples = [WeightSample(START + timedelta(days=i), 80.0) for i in range(14)]
        samples.append(WeightSample(START + timedelta(days=14), 78.0))
        raw = calibrate_from_samples(2500, 0, samples)
        trend = calibrate_from_samples(2500, 0, samples, use_trend=True)
        assert abs(trend.actual_change_kg) < abs(raw.actual_change_kg)


class TestState:
    """Tests for the persisted rolling estimate."""

    def test_initial_trusts_formula(self) -> None:
        state = CalibrationState.initial(1, 2500)
        assert state.estimate == 2500
        assert state.history == []
        assert state.updated_at is None

    def test_record_observation_replaces_same_day(self) -> None:
        state = CalibrationState.initial(1, 2500)
        state = record_observation(state, START, 80.0, 2000)
        state = record_observation(state, START, 79.5, 2000)
        assert len(state.history) == 1
        assert state.history[0].weight_kg == 79.5

    def test_record_observation_keeps_last_n(self) -> None:
        state = CalibrationState.initial(1, 2500)
        for i in range(10):
            state = record_observation(state, START + timedelta(days=i), 80.0, 2000, max_history=8)
        assert len(state.history) == 8
        assert state.history[0].measured_at == START + timedelta(days=2)

    def test_update_state_ignores_failed_result(self) -> None:
        state = CalibrationState.initial(1, 2500)
        result = calibrate(2500, -500, -0.5, 0)
        assert update_state(state, result) is state


class TestRecalibrate:
    def test_not_enough_history(self) -> None:
        state = record_observation(CalibrationState.initial(1, 2500), START, 80.0, 2000)
        new_state, result = recalibrate(state)
        assert new_state is state
        assert not result.can_calibrate

    def test_no_loss_on_deficit_moves_estimate_up(self) -> None:
        state = CalibrationState.initial(1, 2500)
        state = record_observation(state, START, 80.0, 2000)
        state = record_observation(state, START + timedelta(days=14), 80.0, 2000)

        on = START + timedelta(days=14)
        new_state, result = recalibrate(state, on=on)

        assert result.suggested_estimate == pytest.approx(3000, abs=1)
        # Kalman blend lands between the old estimate and the suggestion
        assert 2500 < new_state.estimate < 3000
        assert new_state.variance < state.variance
        assert new_state.updated_at == on

    def test_repeat_runs_are_deterministic(self) -> None:
        state = CalibrationState.initial(1, 2500)
        state = record_observation(state, START, 80.0, 2000)
        state = record_observation(state, START + timedelta(days=7), 79.8, 2000)
        assert recalibrate(state)[0] == recalibrate(state)[0]
