"""Tests for the SQLite query layer."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from lifeplan.advisor.models import Adjustments, DailyPlan, UserMode
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
from lifeplan.tracking.calibration import CalibrationState, record_observation
from lifeplan.tracking.models import DailyLog, HealthLog, LooksLog, RoutineLog

DAY = date(2024, 3, 10)


class TestSchema:
    def test_tables_created(self, temp_db) -> None:
        for table in ("user_profiles", "health_logs", "daily_logs", "weight_samples",
                      "user_modes", "calibration_states", "daily_plans"):
            assert temp_db.table_exists(table)


class TestUserQueries:
    """Tests for profile storage."""

    def test_create_and_get(self, temp_db, female_profile) -> None:
        with temp_db.get_connection() as conn:
            user_id = UserQueries.create_user(conn, female_profile)
            profile = UserQueries.get_user(conn, user_id)

        assert profile.user_id == user_id
        assert profile.sex == "female"
        assert profile.tracks_cycle is True
        assert profile.last_period_date == date(2024, 3, 1)

    def test_conditions_round_trip(self, temp_db, male_profile) -> None:
        male_profile.conditions = ("diabetes_type2",)
        with temp_db.get_connection() as conn:
            user_id = UserQueries.create_user(conn, male_profile)
            assert UserQueries.get_user(conn, user_id).conditions == ("diabetes_type2",)

    def test_default_user_is_first(self, temp_db, male_profile, female_profile) -> None:
        with temp_db.get_connection() as conn:
            first = UserQueries.create_user(conn, male_profile)
            UserQueries.create_user(conn, female_profile)
            assert UserQueries.get_default_user(conn).user_id == first

    def test_no_users(self, temp_db) -> None:
        with temp_db.get_connection() as conn:
            assert UserQueries.get_default_user(conn) is None

    def test_update(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            profile = UserQueries.get_user(conn, user_id)
            profile.weight_kg = 78.5
            UserQueries.update_user(conn, profile)
            assert UserQueries.get_user(conn, user_id).weight_kg == 78.5

    def test_update_requires_id(self, temp_db, male_profile) -> None:
        male_profile.user_id = None
        with temp_db.get_connection() as conn:
            with pytest.raises(ValueError):
                UserQueries.update_user(conn, male_profile)


class TestLogQueries:
    """Tests for the per-day log tables."""

    def test_health_upsert_replaces(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            HealthLogQueries.upsert(conn, user_id, HealthLog(log_date=DAY, sleep_hours=5))
            HealthLogQueries.upsert(conn, user_id, HealthLog(log_date=DAY, sleep_hours=7.5))
            log = HealthLogQueries.get_for_date(conn, user_id, DAY)
        assert log.sleep_hours == 7.5

    def test_health_recent_most_recent_first(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            for i in range(5):
                HealthLogQueries.upsert(conn, user_id, HealthLog(log_date=DAY - timedelta(days=i), mood=i + 1))
            recent = HealthLogQueries.get_recent(conn, user_id, 3, on_or_before=DAY - timedelta(days=1))
        assert [log.log_date for log in recent] == [DAY - timedelta(days=i) for i in (1, 2, 3)]

    def test_looks_grooming_round_trip(self, db_with_user) -> None:
        db, user_id = db_with_user
        log = LooksLog(log_date=DAY, morning_routine_done=True)
        log.grooming_tasks[0].done = True
        with db.get_connection() as conn:
            LooksLogQueries.upsert(conn, user_id, log)
            stored = LooksLogQueries.get_for_date(conn, user_id, DAY)
        assert stored.morning_routine_done
        assert stored.grooming_tasks[0].done
        assert not stored.grooming_tasks[1].done

    def test_routine_habits_round_trip(self, db_with_user) -> None:
        db, user_id = db_with_user
        log = RoutineLog(log_date=DAY, wake_time="06:30")
        log.habits[1].done = True
        with db.get_connection() as conn:
            RoutineLogQueries.upsert(conn, user_id, log)
            stored = RoutineLogQueries.get_for_date(conn, user_id, DAY)
        assert stored.wake_time == "06:30"
        assert [h.id for h in stored.habits if h.done] == ["workout"]

    def test_daily_log(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY, workout_skipped_reason="fatigue"))
            DailyLogQueries.upsert(conn, user_id, DailyLog(log_date=DAY - timedelta(days=1), workout_done=True))
            recent = DailyLogQueries.get_recent(conn, user_id, 7)
        assert recent[0].workout_skipped_reason == "fatigue"
        assert recent[1].workout_done is True

    def test_missing_day(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            assert HealthLogQueries.get_for_date(conn, user_id, DAY) is None
            assert LooksLogQueries.get_for_date(conn, user_id, DAY) is None
            assert RoutineLogQueries.get_for_date(conn, user_id, DAY) is None
            assert DailyLogQueries.get_for_date(conn, user_id, DAY) is None


class TestWeightQueries:
    """Tests for weight samples with EMA trend."""

    def test_first_sample_seeds_trend(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            sample = WeightQueries.add_weight(conn, user_id, 80.0, DAY)
        assert sample.trend_kg == 80.0

    def test_trend_follows_previous(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            sample = WeightQueries.add_weight(conn, user_id, 79.0, DAY + timedelta(days=1))
        assert sample.trend_kg == pytest.approx(79.9)

    def test_history_chronological(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            for i in range(5):
                WeightQueries.add_weight(conn, user_id, 80.0 - i * 0.1, DAY + timedelta(days=i))
            history = WeightQueries.get_weight_history(conn, user_id, limit=3)
            latest = WeightQueries.get_latest_weight(conn, user_id)
        assert [s.measured_at for s in history] == [DAY + timedelta(days=i) for i in (2, 3, 4)]
        assert latest.measured_at == DAY + timedelta(days=4)

    def test_same_day_replaced(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            WeightQueries.add_weight(conn, user_id, 80.0, DAY)
            WeightQueries.add_weight(conn, user_id, 79.5, DAY)
            history = WeightQueries.get_weight_history(conn, user_id)
        assert len(history) == 1
        assert history[0].weight_kg == 79.5


class TestModeQueries:
    def test_default_is_normal(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            assert ModeQueries.get_mode(conn, user_id) == UserMode()

    def test_set_replaces(self, db_with_user) -> None:
        db, user_id = db_with_user
        with db.get_connection() as conn:
            ModeQueries.set_mode(conn, user_id, UserMode("travel", active_since=DAY))
            ModeQueries.set_mode(conn, user_id, UserMode("sick", active_since=DAY, auto_expiry=DAY + timedelta(days=3)))
            mode = ModeQueries.get_mode(conn, user_id)
        assert mode.mode == "sick"
        assert mode.auto_expiry == DAY + timedelta(days=3)


class TestCalibrationQueries:
    def test_state_round_trip(self, db_with_user) -> None:
        db, user_id = db_with_user
        state = CalibrationState.initial(user_id, 2759)
        state = record_observation(state, DAY, 80.0, 2984)
        with db.get_connection() as conn:
            assert CalibrationQueries.get_state(conn, user_id) is None
            CalibrationQueries.save_state(conn, state)
            assert CalibrationQueries.get_state(conn, user_id) == state


class TestPlanQueries:
    def test_last_write_wins(self, db_with_user) -> None:
        db, user_id = db_with_user
        first = DailyPlan(day=DAY, mode="normal", adjustments=Adjustments(), explanations=[], timeline=[],
                          life_score=40)
        second = DailyPlan(day=DAY, mode="exam", adjustments=Adjustments(), explanations=[], timeline=[],
                           life_score=60)
        with db.get_connection() as conn:
            PlanQueries.save_plan(conn, user_id, first)
            PlanQueries.save_plan(conn, user_id, second)
            stored = PlanQueries.get_plan(conn, user_id, DAY)
        assert stored["mode"] == "exam"
        assert stored["life_score"] == 60
        with db.get_connection() as conn:
            assert PlanQueries.get_plan(conn, user_id, DAY + timedelta(days=1)) is None


def test_rollback_on_error(temp_db, male_profile) -> None:
    with pytest.raises(RuntimeError):
        with temp_db.get_connection() as conn:
            UserQueries.create_user(conn, male_profile)
            raise RuntimeError("boom")

    with temp_db.get_connection() as conn:
        assert UserQueries.get_default_user(conn) is None
