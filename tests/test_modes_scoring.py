"""Tests for the mode table, cycle phases and domain scorers."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

import pytest

from lifeplan.advisor.models import UserMode
from lifeplan.advisor.modes import MODE_DESCRIPTIONS, MODES, effective_mode, should_expire
from lifeplan.advisor.scoring import score_food, score_health, score_looks, score_routine, score_workout
from lifeplan.profiles.cycle import cycle_day, current_phase
from lifeplan.tracking.models import DailyLog, HealthLog, LooksLog, RoutineLog

DAY = date(2024, 3, 10)


class TestModes:
    def test_every_mode_described(self) -> None:
        assert set(MODES) == set(MODE_DESCRIPTIONS)

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            MODES["travel"]["workout_intensity"] = 1.0

    def test_should_expire(self) -> None:
        mode = UserMode("sick", auto_expiry=DAY)
        assert not should_expire(mode, DAY)
        assert should_expire(mode, DAY + timedelta(days=1))
        assert not should_expire(UserMode("sick"), DAY)

    def test_effective_mode(self) -> None:
        assert effective_mode(None, DAY) == ("normal", None)
        assert effective_mode(UserMode("exam"), DAY) == ("exam", None)
        name, warning = effective_mode(UserMode("exam", auto_expiry=DAY - timedelta(days=1)), DAY)
        assert name == "normal"
        assert "expired" in warning


class TestCycle:
    def test_cycle_day_wraps(self) -> None:
        start = date(2024, 3, 1)
        assert cycle_day(start, start) == 1
        assert cycle_day(start, start + timedelta(days=28)) == 1

    @pytest.mark.parametrize("offset,phase", [(0, "menstrual"), (8, "follicular"), (14, "ovulation"), (20, "luteal")])
    def test_phases(self, female_profile, offset: int, phase: str) -> None:
        on = female_profile.last_period_date + timedelta(days=offset)
        assert current_phase(female_profile, on).name == phase

    @pytest.mark.parametrize("offset,phase", [(2, "menstrual"), (3, "follicular"), (6, "follicular"), (7, "ovulation")])
    def test_half_day_boundaries_round_up(self, female_profile, offset: int, phase: str) -> None:
        # 14-day cycle: menstrual ends at 2.5 and follicular at 6.5, both rounded up
        profile = replace(female_profile, cycle_length=14)
        on = profile.last_period_date + timedelta(days=offset)
        assert current_phase(profile, on).name == phase

    def test_not_tracked(self, male_profile) -> None:
        assert current_phase(male_profile, DAY) is None


class TestScorers:
    """Tests for the default domain scorers."""

    def test_health_full_marks(self) -> None:
        log = HealthLog(log_date=DAY, sleep_hours=9, water_glasses=10, energy_level=10, stress_level=0, mood=10)
        assert score_health(log) == 100

    def test_health_empty(self) -> None:
        assert score_health(HealthLog(log_date=DAY)) == 0

    def test_looks_partial(self) -> None:
        log = LooksLog(log_date=DAY, morning_routine_done=True, evening_routine_done=True)
        # 2 of 4 routines, 0 of 3 grooming tasks
        assert score_looks(log) == 40

    def test_routine(self) -> None:
        log = RoutineLog(log_date=DAY, wake_time="06:00", sleep_time="22:30", focus_hours=5, distractions_avoided=True)
        for habit in log.habits:
            habit.done = True
        assert score_routine(log) == 100

    def test_food_and_workout(self) -> None:
        assert score_food(DailyLog(log_date=DAY)) == 80
        assert score_food(DailyLog(log_date=DAY, food_compliance_percent=55)) == 55
        assert score_workout(DailyLog(log_date=DAY, workout_done=True)) == 100
        assert score_workout(DailyLog(log_date=DAY)) == 0
