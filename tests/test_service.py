"""Tests for the storage-backed plan and calibration workflows."""

from __future__ import annotations

from datetime import date, time, timedelta

import pytest

from lifeplan.advisor.models import UserMode
from lifeplan.advisor.service import (
    build_context,
    check_plateau,
    compute_daily_plan,
    run_calibration,
    weekly_tdee,
)
from lifeplan.config import Settings
from lifeplan.db.queries import (
    CalibrationQueries,
    DailyLogQueries,
    HealthLogQueries,
    ModeQueries,
    PlanQueries,
    UserQueries,
    WeightQueries,
)
from lifeplan.tracking.models import DailyLog, HealthLog

DAY = date(2024, 3, 10)


@pytest.fixture
def settings() -> Settings:
    return Settings()


class TestBuildContext:
    def test_unknown_user(self, temp_db, settings) -> None:
        with temp_db.get_connection() as conn:
            with pytest.raises(ValueError):
                build_context(conn, 99, DAY, settings=settings)

    def test_reads_day_and_window(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            HealthLogQueries.upsert(conn, user_id, HealthLog(log_date=DAY, sleep_hours=5))
            for i in range(10):
                DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY - timedelta(days=i), workout_done=True))
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY + timedelta(days=1)))
            context = build_context(conn, user_id, DAY, current_time=time(9, 0), settings=settings)

        assert context.health.sleep_hours == 5
        assert len(context.recent_daily) == settings.analysis.window_size
        assert context.recent_daily[0].log_date == DAY
        assert context.adaptation.has_data
        assert context.current_time == time(9, 0)
        assert context.mode.mode == "normal"

    def test_streak_reads_past_the_window(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY))
            for i in range(1, 13):
                DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY - timedelta(days=i), workout_done=True))
            context = build_context(conn, user_id, DAY, settings=settings)

        assert len(context.recent_daily) == settings.analysis.window_size
        assert context.adaptation.streak_break.streak_days == 12
        assert context.adaptation.next_workout.reason == "missed_previous"


class TestComputeDailyPlan:
    """Tests for compute_daily_plan."""

    def test_plan_is_stored(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            HealthLogQueries.upsert(conn, user_id, HealthLog(log_date=DAY, sleep_hours=3))
            plan = compute_daily_plan(conn, user_id, DAY, settings=settings)

        assert plan.adjustments.rest_day
        with db.get_connection() as conn:
            stored = PlanQueries.get_plan(conn, user_id, DAY)
        assert stored == plan.to_dict()

    def test_recompute_overwrites(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            compute_daily_plan(conn, user_id, DAY, settings=settings)
            ModeQueries.set_mode(conn, user_id, UserMode("exam", active_since=DAY))
            compute_daily_plan(conn, user_id, DAY, settings=settings)
            stored = PlanQueries.get_plan(conn, user_id, DAY)
        assert stored["mode"] == "exam"

    def test_calorie_target_present(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            plan = compute_daily_plan(conn, user_id, DAY, settings=settings)
        assert plan.calorie_target == plan.targets.target_calories


class TestCalibrationWorkflow:
    """Tests for run_calibration."""

    def test_not_enough_weights(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            state, result = run_calibration(conn, user_id, DAY, settings=settings)
            stored = CalibrationQueries.get_state(conn, user_id)

        assert not result.can_calibrate
        assert len(state.history) == 1
        assert stored == state

    def test_no_gain_on_bulk_lowers_estimate(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY - timedelta(days=14))
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            state, result = run_calibration(conn, user_id, DAY, settings=settings)

        # Planned surplus of 225 kcal/day with no gain: less change than intended
        assert result.can_calibrate
        assert result.adjustment == pytest.approx(-225, abs=1)
        assert result.confidence == "high"
        assert state.updated_at == DAY
        assert state.estimate < state.formula_tdee

    def test_calibrated_estimate_feeds_targets(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY - timedelta(days=14))
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            state, _ = run_calibration(conn, user_id, DAY, settings=settings)
            plan = compute_daily_plan(conn, user_id, DAY, settings=settings)
        assert plan.targets.tdee_source == "calibrated"
        assert plan.targets.tdee == round(state.estimate)

    def test_rerun_does_not_duplicate_history(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY - timedelta(days=7))
            WeightQueries.add_weight(conn, user_id, 79.6, DAY)
            run_calibration(conn, user_id, DAY, settings=settings)
            state, _ = run_calibration(conn, user_id, DAY, settings=settings)
        assert len(state.history) == 2


class TestCheckPlateau:
    """Tests for check_plateau."""

    def test_not_enough_history(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            result, plan = check_plateau(conn, user_id, DAY, settings=settings)
        assert result.reason == "insufficient_data"
        assert plan is None

    def test_bulk_plateau_asks_for_more_calories(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            for d in range(0, 25, 3):
                WeightQueries.add_weight(conn, user_id, 80.0, DAY - timedelta(days=d))
            result, plan = check_plateau(conn, user_id, DAY, settings=settings)
        assert result.days == 24
        assert result.action.type == "calorie_increase"
        assert plan is None

    def test_cut_plateau_gets_refeed_plan(self, temp_db, female_profile, settings) -> None:
        with temp_db.get_connection() as conn:
            user_id = UserQueries.create_user(conn, female_profile)
            for d in range(0, 23):
                WeightQueries.add_weight(conn, user_id, 62.0, DAY - timedelta(days=d))
            result, plan = check_plateau(conn, user_id, DAY, settings=settings)
        assert result.severity == "moderate"
        assert plan.calories == 1856
        assert plan.fats_g == round(62 * 0.6)


class TestWeeklyTDEE:
    def test_only_last_seven_days(self, db_with_user, settings) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY, workout_done=True))
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY - timedelta(days=10), workout_done=True))
            summary = weekly_tdee(conn, user_id, DAY)
        assert summary.workout_days == 1
        assert summary.exercise == round(250 / 7)
