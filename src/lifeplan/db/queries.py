"""Database queries for profiles, daily logs, weight, modes, calibration and plans.

Every method takes an open connection from DatabaseConnection.get_connection();
the context manager owns commit and rollback. Log tables are keyed on
(user_id, log_date) and written with INSERT OR REPLACE, so re-logging a day
overwrites it. Reads never go beyond "last N by date descending".
"""

from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime
from typing import Optional

from lifeplan.advisor.models import DailyPlan, UserMode
from lifeplan.tracking.calibration import CalibrationPoint, CalibrationState
from lifeplan.tracking.ema import update_trend
from lifeplan.tracking.models import (
    DailyLog,
    GroomingTask,
    Habit,
    HealthLog,
    LooksLog,
    Profile,
    RoutineLog,
    WeightSample,
)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


class UserQueries:
    """Database queries for user profiles."""

    @staticmethod
    def _params(profile: Profile) -> tuple:
        return (
            profile.sex,
            profile.age,
            profile.height_cm,
            profile.weight_kg,
            profile.activity_level,
            profile.goal_type,
            profile.diet_preference,
            profile.job_type,
            json.dumps(list(profile.conditions)),
            profile.fasting_mode,
            profile.tracks_cycle,
            _iso(profile.last_period_date),
            profile.cycle_length,
            profile.body_fat_percent,
            profile.target_weight_kg,
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Profile:
        return Profile(
            user_id=row["user_id"],
            sex=row["sex"],
            age=row["age"],
            height_cm=row["height_cm"],
            weight_kg=row["weight_kg"],
            activity_level=row["activity_level"],
            goal_type=row["goal_type"],
            diet_preference=row["diet_preference"],
            job_type=row["job_type"],
            conditions=tuple(json.loads(row["conditions_json"])),
            fasting_mode=bool(row["fasting_mode"]),
            tracks_cycle=bool(row["tracks_cycle"]),
            last_period_date=_date(row["last_period_date"]),
            cycle_length=row["cycle_length"] or 28,
            body_fat_percent=row["body_fat_percent"],
            target_weight_kg=row["target_weight_kg"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
        )

    @staticmethod
    def create_user(conn: sqlite3.Connection, profile: Profile) -> int:
        """Create a new user profile and return the user_id."""
        cursor = conn.execute(
            """
            INSERT INTO user_profiles (sex, age, height_cm, weight_kg, activity_level,
                                       goal_type, diet_preference, job_type, conditions_json,
                                       fasting_mode, tracks_cycle, last_period_date,
                                       cycle_length, body_fat_percent, target_weight_kg)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            UserQueries._params(profile),
        )
        return cursor.lastrowid or 0

    @staticmethod
    def get_user(conn: sqlite3.Connection, user_id: int) -> Optional[Profile]:
        """Get user profile by ID."""
        row = conn.execute(
            "SELECT * FROM user_profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        return UserQueries._from_row(row) if row else None

    @staticmethod
    def get_default_user(conn: sqlite3.Connection) -> Optional[Profile]:
        """Get the first (default) user profile."""
        row = conn.execute(
            "SELECT * FROM user_profiles ORDER BY user_id LIMIT 1"
        ).fetchone()
        return UserQueries._from_row(row) if row else None

    @staticmethod
    def update_user(conn: sqlite3.Connection, profile: Profile) -> None:
        """Update an existing user profile."""
        if profile.user_id is None:
            raise ValueError("Cannot update profile without user_id")

        conn.execute(
            """
            UPDATE user_profiles
            SET sex = ?, age = ?, height_cm = ?, weight_kg = ?, activity_level = ?,
                goal_type = ?, diet_preference = ?, job_type = ?, conditions_json = ?,
                fasting_mode = ?, tracks_cycle = ?, last_period_date = ?,
                cycle_length = ?, body_fat_percent = ?, target_weight_kg = ?
            WHERE user_id = ?
            """,
            UserQueries._params(profile) + (profile.user_id,),
        )


class HealthLogQueries:
    """Database queries for daily health logs."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> HealthLog:
        return HealthLog(
            log_date=date.fromisoformat(row["log_date"]),
            sleep_hours=row["sleep_hours"],
            sleep_quality=row["sleep_quality"],
            energy_level=row["energy_level"],
            stress_level=row["stress_level"],
            mood=row["mood"],
            water_glasses=row["water_glasses"] or 0,
            screen_time_hours=row["screen_time_hours"],
            digestion_quality=row["digestion_quality"],
            breathing_exercise_done=bool(row["breathing_exercise_done"]),
            notes=row["notes"] or "",
        )

    @staticmethod
    def upsert(conn: sqlite3.Connection, user_id: int, log: HealthLog) -> None:
        """Insert or replace the health log for ``log.log_date``."""
        conn.execute(
            """
            INSERT OR REPLACE INTO health_logs (user_id, log_date, sleep_hours, sleep_quality,
                                                energy_level, stress_level, mood, water_glasses,
                                                screen_time_hours, digestion_quality,
                                                breathing_exercise_done, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                log.log_date.isoformat(),
                log.sleep_hours,
                log.sleep_quality,
                log.energy_level,
                log.stress_level,
                log.mood,
                log.water_glasses,
                log.screen_time_hours,
                log.digestion_quality,
                log.breathing_exercise_done,
                log.notes,
            ),
        )

    @staticmethod
    def get_for_date(conn: sqlite3.Connection, user_id: int, log_date: date) -> Optional[HealthLog]:
        row = conn.execute(
            "SELECT * FROM health_logs WHERE user_id = ? AND log_date = ?",
            (user_id, log_date.isoformat()),
        ).fetchone()
        return HealthLogQueries._from_row(row) if row else None

    @staticmethod
    def get_recent(
        conn: sqlite3.Connection, user_id: int, limit: int, on_or_before: Optional[date] = None
    ) -> list[HealthLog]:
        """Last ``limit`` health logs, most recent first."""
        query = "SELECT * FROM health_logs WHERE user_id = ?"
        params: list = [user_id]
        if on_or_before:
            query += " AND log_date <= ?"
            params.append(on_or_before.isoformat())
        query += " ORDER BY log_date DESC LIMIT ?"
        params.append(limit)
        return [HealthLogQueries._from_row(row) for row in conn.execute(query, params).fetchall()]


class LooksLogQueries:
    """Database queries for daily looks logs."""

    @staticmethod
    def upsert(conn: sqlite3.Connection, user_id: int, log: LooksLog) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO looks_logs (user_id, log_date, morning_routine_done,
                                               evening_routine_done, grooming_json,
                                               facial_exercises_done, mewing_minutes,
                                               hair_routine_done, skin_condition_notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                log.log_date.isoformat(),
                log.morning_routine_done,
                log.evening_routine_done,
                json.dumps([{"task": t.task, "done": t.done} for t in log.grooming_tasks]),
                log.facial_exercises_done,
                log.mewing_minutes,
                log.hair_routine_done,
                log.skin_condition_notes,
            ),
        )

    @staticmethod
    def get_for_date(conn: sqlite3.Connection, user_id: int, log_date: date) -> Optional[LooksLog]:
        row = conn.execute(
            "SELECT * FROM looks_logs WHERE user_id = ? AND log_date = ?",
            (user_id, log_date.isoformat()),
        ).fetchone()
        if row is None:
            return None

        return LooksLog(
            log_date=date.fromisoformat(row["log_date"]),
            morning_routine_done=bool(row["morning_routine_done"]),
            evening_routine_done=bool(row["evening_routine_done"]),
            grooming_tasks=[GroomingTask(**t) for t in json.loads(row["grooming_json"])],
            facial_exercises_done=bool(row["facial_exercises_done"]),
            mewing_minutes=row["mewing_minutes"] or 0,
            hair_routine_done=bool(row["hair_routine_done"]),
            skin_condition_notes=row["skin_condition_notes"] or "",
        )


class RoutineLogQueries:
    """Database queries for daily routine logs."""

    @staticmethod
    def upsert(conn: sqlite3.Connection, user_id: int, log: RoutineLog) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO routine_logs (user_id, log_date, wake_time, sleep_time,
                                                 habits_json, focus_hours,
                                                 distractions_avoided, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                log.log_date.isoformat(),
                log.wake_time,
                log.sleep_time,
                json.dumps([{"id": h.id, "name": h.name, "done": h.done} for h in log.habits]),
                log.focus_hours,
                log.distractions_avoided,
                log.notes,
            ),
        )

    @staticmethod
    def get_for_date(conn: sqlite3.Connection, user_id: int, log_date: date) -> Optional[RoutineLog]:
        row = conn.execute(
            "SELECT * FROM routine_logs WHERE user_id = ? AND log_date = ?",
            (user_id, log_date.isoformat()),
        ).fetchone()
        if row is None:
            return None

        return RoutineLog(
            log_date=date.fromisoformat(row["log_date"]),
            wake_time=row["wake_time"],
            sleep_time=row["sleep_time"],
            habits=[Habit(**h) for h in json.loads(row["habits_json"])],
            focus_hours=row["focus_hours"] or 0.0,
            distractions_avoided=bool(row["distractions_avoided"]),
            notes=row["notes"] or "",
        )


class DailyLogQueries:
    """Database queries for daily training and compliance logs."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> DailyLog:
        return DailyLog(
            log_date=date.fromisoformat(row["log_date"]),
            food_compliance_percent=row["food_compliance_percent"],
            protein_completion_percent=row["protein_completion_percent"],
            workout_done=bool(row["workout_done"]),
            workout_skipped_reason=row["workout_skipped_reason"],
            energy_level=row["energy_level"],
            sleep_hours=row["sleep_hours"],
            sleep_quality=row["sleep_quality"],
            soreness_level=row["soreness_level"],
            mood=row["mood"],
            stress_level=row["stress_level"],
            weight_kg=row["weight_kg"],
        )

    @staticmethod
    def upsert(conn: sqlite3.Connection, user_id: int, log: DailyLog) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO daily_logs (user_id, log_date, food_compliance_percent,
                                               protein_completion_percent, workout_done,
                                               workout_skipped_reason, energy_level, sleep_hours,
                                               sleep_quality, soreness_level, mood,
                                               stress_level, weight_kg)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                log.log_date.isoformat(),
                log.food_compliance_percent,
                log.protein_completion_percent,
                log.workout_done,
                log.workout_skipped_reason,
                log.energy_level,
                log.sleep_hours,
                log.sleep_quality,
                log.soreness_level,
                log.mood,
                log.stress_level,
                log.weight_kg,
            ),
        )

    @staticmethod
    def get_for_date(conn: sqlite3.Connection, user_id: int, log_date: date) -> Optional[DailyLog]:
        row = conn.execute(
            "SELECT * FROM daily_logs WHERE user_id = ? AND log_date = ?",
            (user_id, log_date.isoformat()),
        ).fetchone()
        return DailyLogQueries._from_row(row) if row else None

    @staticmethod
    def get_recent(
        conn: sqlite3.Connection, user_id: int, limit: int, on_or_before: Optional[date] = None
    ) -> list[DailyLog]:
        """Last ``limit`` daily logs, most recent first."""
        query = "SELECT * FROM daily_logs WHERE user_id = ?"
        params: list = [user_id]
        if on_or_before:
            query += " AND log_date <= ?"
            params.append(on_or_before.isoformat())
        query += " ORDER BY log_date DESC LIMIT ?"
        params.append(limit)
        return [DailyLogQueries._from_row(row) for row in conn.execute(query, params).fetchall()]


class WeightQueries:
    """Database queries for weight samples."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> WeightSample:
        return WeightSample(
            measured_at=date.fromisoformat(row["measured_at"]),
            weight_kg=row["weight_kg"],
            body_fat_percent=row["body_fat_percent"],
            trend_kg=row["trend_kg"],
            sample_id=row["sample_id"],
        )

    @staticmethod
    def add_weight(
        conn: sqlite3.Connection,
        user_id: int,
        weight_kg: float,
        measured_at: date,
        body_fat_percent: Optional[float] = None,
    ) -> WeightSample:
        """
        Add a weight sample, computing the EMA trend automatically.

        If a sample already exists for this date, it will be replaced.
        """
        prev = conn.execute(
            """
            SELECT trend_kg, measured_at FROM weight_samples
            WHERE user_id = ? AND measured_at < ?
            ORDER BY measured_at DESC LIMIT 1
            """,
            (user_id, measured_at.isoformat()),
        ).fetchone()

        if prev is None:
            # First sample: trend = weight
            trend_kg = weight_kg
        else:
            days = (measured_at - date.fromisoformat(prev["measured_at"])).days
            trend_kg = update_trend(prev["trend_kg"], weight_kg, days_elapsed=days)

        cursor = conn.execute(
            """
            INSERT OR REPLACE INTO weight_samples (user_id, measured_at, weight_kg,
                                                   body_fat_percent, trend_kg)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, measured_at.isoformat(), weight_kg, body_fat_percent, trend_kg),
        )

        return WeightSample(
            measured_at=measured_at,
            weight_kg=weight_kg,
            body_fat_percent=body_fat_percent,
            trend_kg=trend_kg,
            sample_id=cursor.lastrowid,
        )

    @staticmethod
    def get_latest_weight(conn: sqlite3.Connection, user_id: int) -> Optional[WeightSample]:
        row = conn.execute(
            """
            SELECT * FROM weight_samples WHERE user_id = ?
            ORDER BY measured_at DESC LIMIT 1
            """,
            (user_id,),
        ).fetchone()
        return WeightQueries._from_row(row) if row else None

    @staticmethod
    def get_weight_history(
        conn: sqlite3.Connection,
        user_id: int,
        limit: Optional[int] = None,
        on_or_before: Optional[date] = None,
    ) -> list[WeightSample]:
        """
        Get weight history for a user.

        Args:
            user_id: User ID
            limit: If set, return only the last N samples
            on_or_before: If set, ignore samples after this date

        Returns:
            Samples in chronological order
        """
        query = "SELECT * FROM weight_samples WHERE user_id = ?"
        params: list = [user_id]
        if on_or_before:
            query += " AND measured_at <= ?"
            params.append(on_or_before.isoformat())
        query += " ORDER BY measured_at DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(query, params).fetchall()
        return [WeightQueries._from_row(row) for row in reversed(rows)]


class ModeQueries:
    """Database queries for the active user mode."""

    @staticmethod
    def set_mode(conn: sqlite3.Connection, user_id: int, mode: UserMode) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO user_modes (user_id, mode, active_since, auto_expiry, reason)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, mode.mode, _iso(mode.active_since), _iso(mode.auto_expiry), mode.reason),
        )

    @staticmethod
    def get_mode(conn: sqlite3.Connection, user_id: int) -> UserMode:
        """Stored mode, or normal when none is set."""
        row = conn.execute(
            "SELECT * FROM user_modes WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return UserMode()

        return UserMode(
            mode=row["mode"],
            active_since=_date(row["active_since"]),
            auto_expiry=_date(row["auto_expiry"]),
            reason=row["reason"] or "",
        )


class CalibrationQueries:
    """Database queries for the rolling TDEE estimate."""

    @staticmethod
    def save_state(conn: sqlite3.Connection, state: CalibrationState) -> None:
        history = [
            {
                "measured_at": p.measured_at.isoformat(),
                "weight_kg": p.weight_kg,
                "target_intake": p.target_intake,
            }
            for p in state.history
        ]
        conn.execute(
            """
            INSERT OR REPLACE INTO calibration_states (user_id, formula_tdee, estimate,
                                                       variance, history_json, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                state.user_id,
                state.formula_tdee,
                state.estimate,
                state.variance,
                json.dumps(history),
                _iso(state.updated_at),
            ),
        )

    @staticmethod
    def get_state(conn: sqlite3.Connection, user_id: int) -> Optional[CalibrationState]:
        row = conn.execute(
            "SELECT * FROM calibration_states WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None

        history = [
            CalibrationPoint(
                measured_at=date.fromisoformat(p["measured_at"]),
                weight_kg=p["weight_kg"],
                target_intake=p["target_intake"],
            )
            for p in json.loads(row["history_json"])
        ]
        return CalibrationState(
            user_id=row["user_id"],
            formula_tdee=row["formula_tdee"],
            estimate=row["estimate"],
            variance=row["variance"],
            history=history,
            updated_at=_date(row["updated_at"]),
        )


class PlanQueries:
    """Database queries for computed daily plans."""

    @staticmethod
    def save_plan(conn: sqlite3.Connection, user_id: int, plan: DailyPlan) -> None:
        """Store the plan for its date, replacing any earlier computation."""
        conn.execute(
            """
            INSERT OR REPLACE INTO daily_plans (user_id, plan_date, mode, life_score, plan_json)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                user_id,
                plan.day.isoformat(),
                plan.mode,
                plan.life_score,
                json.dumps(plan.to_dict(), sort_keys=True),
            ),
        )

    @staticmethod
    def get_plan(conn: sqlite3.Connection, user_id: int, plan_date: date) -> Optional[dict]:
        """Stored plan as a dict, or None."""
        row = conn.execute(
            "SELECT plan_json FROM daily_plans WHERE user_id = ? AND plan_date = ?",
            (user_id, plan_date.isoformat()),
        ).fetchone()
        return json.loads(row["plan_json"]) if row else None
