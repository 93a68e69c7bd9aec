"""Tests for the adjustment generator and adaptation report."""

from __future__ import annotations

from datetime import date, timedelta

from lifeplan.adaptation.engine import (
    AdaptationReport,
    generate_adaptation_report,
    generate_adjustments,
)
from lifeplan.adaptation.patterns import analyze_window
from lifeplan.profiles.body_calc import NutritionTargets
from lifeplan.safety.validators import CalorieCheck, ProteinCheck
from lifeplan.tracking.models import DailyLog

END = date(2024, 3, 10)


def make_logs(n: int, **fields) -> list[DailyLog]:
    return [DailyLog(log_date=END - timedelta(days=i), **fields) for i in range(n)]


def low_targets(target_calories: int, tdee: int) -> NutritionTargets:
    return NutritionTargets(
        bmr=1300, tdee=tdee, target_calories=target_calories, calorie_adjustment=target_calories - tdee,
        protein_g=100, carbs_g=150, fats_g=50, bmi=22.0, bmi_category="normal", explanation="",
    )


class FixedValidator:
    """Validator that always returns a fixed calorie delta."""

    def validate_calorie_delta(self, current_calories, delta, sex, tdee):
        return CalorieCheck(adjusted_delta=7, adjusted_calories=round(current_calories) + 7, warnings=["fixed"])

    def validate_protein_target(self, protein_g, weight_kg):
        return ProteinCheck(round(protein_g))


class TestGenerateAdjustments:
    """Tests for generate_adjustments."""

    def test_no_summary(self, male_profile) -> None:
        assert generate_adjustments(male_profile, None) == []

    def test_bulk_stall_adds_surplus(self, male_profile) -> None:
        summary = analyze_window(make_logs(5, weight_kg=80.0, workout_done=True))
        adjustments = generate_adjustments(male_profile, summary)
        assert [a.type for a in adjustments] == ["calories"]
        assert adjustments[0].value == 50
        assert adjustments[0].category == "aesthetics"

    def test_cut_stall_clamped_at_floor(self, female_profile) -> None:
        summary = analyze_window(make_logs(5, weight_kg=62.0, workout_done=True))
        adjustments = generate_adjustments(female_profile, summary, targets=low_targets(1220, 1500))
        calories = adjustments[0]
        assert calories.value == -20
        assert calories.warnings

    def test_goal_override(self, male_profile) -> None:
        summary = analyze_window(make_logs(5, weight_kg=80.0, workout_done=True))
        adjustments = generate_adjustments(male_profile, summary, goal_type="fat_loss")
        assert adjustments[0].value == -50

    def test_custom_validator_is_used(self, male_profile) -> None:
        summary = analyze_window(make_logs(5, weight_kg=80.0, workout_done=True))
        adjustments = generate_adjustments(male_profile, summary, validator=FixedValidator())
        assert adjustments[0].value == 7
        assert adjustments[0].warnings == ["fixed"]

    def test_high_fatigue_orders_by_priority(self, male_profile) -> None:
        logs = make_logs(5, energy_level=3, sleep_hours=5, protein_completion_percent=60, workout_done=True)
        adjustments = generate_adjustments(male_profile, analyze_window(logs))

        assert [a.type for a in adjustments] == ["workout_volume", "rest_day", "lifestyle", "protein"]
        assert adjustments[0].value == -0.2
        assert adjustments[2].action == "sleep_priority"
        priorities = [a.priority for a in adjustments]
        assert priorities == sorted(priorities, reverse=True)

    def test_protein_step(self, male_profile) -> None:
        logs = make_logs(5, protein_completion_percent=60, workout_done=True)
        protein = generate_adjustments(male_profile, analyze_window(logs))[0]
        assert protein.type == "protein"
        assert protein.value == 10

    def test_skips_reduce_difficulty(self, male_profile) -> None:
        logs = make_logs(3, workout_skipped_reason="fatigue")
        adjustments = generate_adjustments(male_profile, analyze_window(logs))
        difficulty = next(a for a in adjustments if a.type == "workout_difficulty")
        assert difficulty.action == "reduce_intensity"


class TestAdaptationReport:
    """Tests for generate_adaptation_report."""

    def test_no_data(self, male_profile) -> None:
        report = generate_adaptation_report(male_profile, [], today=END)
        assert not report.has_data
        assert report.adjustments == []
        assert report.summary.startswith("Not enough data")
        assert report.to_dict()["patterns"] is None

    def test_clean_week(self, male_profile) -> None:
        logs = make_logs(7, energy_level=8, sleep_hours=8, protein_completion_percent=95,
                         food_compliance_percent=90, workout_done=True)
        report = generate_adaptation_report(male_profile, logs, today=END)
        assert report.has_data
        assert report.adjustments == []
        assert report.summary == "No changes needed. Keep going."

    def test_summary_names_top_adjustment(self, male_profile) -> None:
        logs = make_logs(5, energy_level=3, sleep_hours=5, workout_done=True)
        report = generate_adaptation_report(male_profile, logs, today=END)
        assert report.find("workout_volume") is report.adjustments[0]
        assert report.summary.endswith("more)")
        assert report.find("calories") is None

    def test_to_dict_is_plain(self, male_profile) -> None:
        logs = make_logs(5, weight_kg=80.0, workout_done=True)
        data = generate_adaptation_report(male_profile, logs, today=END).to_dict()
        assert data["analysis_date"] == "2024-03-10"
        assert data["weight_status"]["stalled"] is True
        assert data["adjustments"][0]["priority"] == 2

    def test_window_respected(self, male_profile) -> None:
        # Old low-energy days fall outside a 3-day window
        logs = make_logs(3, energy_level=8, workout_done=True) + [
            DailyLog(log_date=END - timedelta(days=3 + i), energy_level=1, workout_done=True) for i in range(5)
        ]
        report = generate_adaptation_report(male_profile, logs, window_size=3, today=END)
        assert isinstance(report, AdaptationReport)
        assert report.patterns.days_logged == 3
        assert not report.fatigue.fatigued
