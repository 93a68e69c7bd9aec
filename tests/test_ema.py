"""Tests for EMA weight trend with missing day handling."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from lifeplan.tracking.ema import (
    calculate_trend_from_scratch,
    estimate_daily_energy_balance,
    time_scaled_alpha,
    update_trend,
)


class TestTimeScaledAlpha:
    """Tests for time_scaled_alpha function."""

    def test_daily_unchanged(self) -> None:
        assert time_scaled_alpha(0.1, 1) == pytest.approx(0.1)

    def test_weekly_gap(self) -> None:
        """After 7 days, alpha should be 1 - 0.9^7 ≈ 0.522."""
        assert time_scaled_alpha(0.1, 7) == pytest.approx(1 - 0.9 ** 7)

    def test_zero_days_treated_as_one(self) -> None:
        assert time_scaled_alpha(0.1, 0) == pytest.approx(0.1)
        assert time_scaled_alpha(0.1, -3) == pytest.approx(0.1)


class TestUpdateTrend:
    def test_daily_update(self) -> None:
        assert update_trend(80.0, 79.0) == pytest.approx(79.9)

    def test_multi_day_gap_moves_further(self) -> None:
        daily = update_trend(80.0, 79.0, days_elapsed=1)
        three_day = update_trend(80.0, 79.0, days_elapsed=3)
        assert three_day < daily


class TestCalculateTrendFromScratch:
    """Tests for calculate_trend_from_scratch function."""

    def test_empty(self) -> None:
        assert calculate_trend_from_scratch([]) == []

    def test_first_weight_seeds_trend(self) -> None:
        start = date(2024, 1, 1)
        trends = calculate_trend_from_scratch([(start, 80.0), (start + timedelta(days=1), 81.0)])
        assert trends[0] == 80.0
        assert trends[1] == pytest.approx(80.1)

    def test_gap_is_time_scaled(self) -> None:
        start = date(2024, 1, 1)
        trends = calculate_trend_from_scratch([(start, 80.0), (start + timedelta(days=7), 79.0)])
        assert trends[1] == pytest.approx(80.0 - time_scaled_alpha(0.1, 7))


class TestEnergyBalance:
    def test_loss_is_deficit(self) -> None:
        # 1 kg over 14 days = 550 kcal/day deficit
        assert estimate_daily_energy_balance(-1.0, 14) == pytest.approx(-550)

    def test_invalid_period(self) -> None:
        assert estimate_daily_energy_balance(-1.0, 0) == 0.0
