"""Tests for streak-break handling and next-session adjustments."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from lifeplan.adaptation.engine import generate_adaptation_report
from lifeplan.adaptation.patterns import analyze_window
from lifeplan.adaptation.recovery import (
    adjust_next_day_workout,
    handle_streak_break,
    next_workout_reason,
    streak_before_break,
)
from lifeplan.tracking.models import DailyLog

END = date(2024, 3, 10)


def skip_after_streak(streak: int) -> list[DailyLog]:
    """Most recent day skipped, preceded by ``streak`` completed workouts."""
    logs = [DailyLog(log_date=END, workout_skipped_reason="no_time")]
    logs += [DailyLog(log_date=END - timedelta(days=i), workout_done=True) for i in range(1, streak + 1)]
    return logs


class TestStreakBreak:
    """Tests for handle_streak_break and streak_before_break."""

    @pytest.mark.parametrize("days,fragment", [
        (15, "amazing 15-day streak"),
        (8, "Great 8-day streak"),
        (3, "Building habits takes time"),
    ])
    def test_acknowledgement_scales_with_streak(self, days: int, fragment: str) -> None:
        response = handle_streak_break(days)
        assert fragment in response.acknowledgement
        assert response.streak_days == days

    def test_three_day_recovery_plan(self) -> None:
        plan = handle_streak_break(10).recovery_plan
        assert [step.day for step in plan] == ["Today", "Tomorrow", "Day 3"]
        assert [step.priority for step in plan] == ["optional", "recommended", "normal"]

    def test_streak_before_break(self) -> None:
        assert streak_before_break(skip_after_streak(5)) == 5

    def test_no_break_when_latest_done(self) -> None:
        logs = [DailyLog(log_date=END - timedelta(days=i), workout_done=True) for i in range(4)]
        assert streak_before_break(logs) == 0

    def test_second_skip_is_not_a_new_break(self) -> None:
        logs = skip_after_streak(5)
        logs[1] = DailyLog(log_date=END - timedelta(days=1))
        assert streak_before_break(logs) == 0

    def test_empty(self) -> None:
        assert streak_before_break([]) == 0


class TestNextWorkout:
    """Tests for the next-session adjustment table."""

    def test_low_energy_drops_a_set_and_exercises(self) -> None:
        adjustment = adjust_next_day_workout("low_energy")
        assert adjustment.adjust_sets(4) == 3
        assert adjustment.adjust_sets(2) == 2
        assert adjustment.max_exercises == 4

    def test_missed_previous_keeps_exercise_count(self) -> None:
        adjustment = adjust_next_day_workout("missed_previous")
        assert adjustment.adjust_sets(3) == 2
        assert adjustment.max_exercises is None

    def test_poor_recovery_switches_session(self) -> None:
        adjustment = adjust_next_day_workout("poor_recovery")
        assert adjustment.workout_type == "recovery"
        assert adjustment.adjust_sets(3) == 3

    def test_no_reason(self) -> None:
        assert adjust_next_day_workout(None) is None
        assert adjust_next_day_workout("unknown") is None

    def test_reason_priority(self) -> None:
        poor = analyze_window([DailyLog(log_date=END, sleep_hours=5, soreness_level=4, energy_level=2)])
        assert next_workout_reason(poor) == "poor_recovery"

        tired = analyze_window([DailyLog(log_date=END, energy_level=3, workout_done=True)])
        assert next_workout_reason(tired) == "low_energy"

        missed = analyze_window([DailyLog(log_date=END)])
        assert next_workout_reason(missed) == "missed_previous"

        fine = analyze_window([DailyLog(log_date=END, workout_done=True)])
        assert next_workout_reason(fine) is None
        assert next_workout_reason(None) is None


class TestReportGuidance:
    def test_report_carries_streak_and_next_workout(self, male_profile) -> None:
        report = generate_adaptation_report(male_profile, skip_after_streak(16), today=END)

        assert report.patterns.days_logged == 7
        assert report.streak_break.streak_days == 16
        assert "amazing" in report.streak_break.acknowledgement
        assert report.next_workout.reason == "missed_previous"

        data = report.to_dict()
        assert data["streak_break"]["recovery_plan"][0]["day"] == "Today"
        assert data["next_workout"]["set_reduction"] == 1

    def test_no_guidance_on_a_good_day(self, male_profile) -> None:
        logs = [DailyLog(log_date=END - timedelta(days=i), workout_done=True) for i in range(3)]
        report = generate_adaptation_report(male_profile, logs, today=END)
        assert report.streak_break is None
        assert report.next_workout is None
