"""Tests for BMR, TDEE, calorie and macro calculations."""

from __future__ import annotations

import pytest

from lifeplan.profiles.body_calc import (
    MIN_CALORIES,
    Sex,
    bmi_category,
    calculate_adaptive_tdee,
    calculate_bmi,
    calculate_bmr,
    calculate_bmr_katch_mcardle,
    calculate_macros,
    calculate_target_calories,
    calculate_targets,
    calculate_tdee,
    calculate_weekly_weight_change,
)


class TestBMR:
    """Tests for Mifflin-St Jeor and Katch-McArdle."""

    def test_male(self) -> None:
        # 10*80 + 6.25*180 - 5*30 + 5
        assert calculate_bmr("male", 80, 180, 30) == 1780

    def test_female(self) -> None:
        # 10*62 + 6.25*165 - 5*28 - 161 = 1350.25
        assert calculate_bmr(Sex.FEMALE, 62, 165, 28) == 1350

    def test_sex_is_case_insensitive(self) -> None:
        assert calculate_bmr("MALE", 80, 180, 30) == calculate_bmr("male", 80, 180, 30)

    def test_katch_mcardle(self) -> None:
        # Lean mass 80 * 0.8 = 64 kg
        assert calculate_bmr_katch_mcardle(80, 20) == round(370 + 21.6 * 64)


class TestTDEE:
    def test_moderate_multiplier(self) -> None:
        assert calculate_tdee(1780, "moderate") == round(1780 * 1.55)

    def test_unknown_level_is_sedentary(self) -> None:
        assert calculate_tdee(1780, "couch") == round(1780 * 1.2)

    def test_adaptive_components_sum(self) -> None:
        result = calculate_adaptive_tdee(
            "male", 80, 180, 30, job_type="standing_job", workouts=[("yoga", 60)]
        )
        components = result["components"]
        assert components["neat"] == 500
        assert components["exercise"] == round(150 + 2.5 * 80)
        assert result["total"] == sum(components.values())


class TestTargetCalories:
    """Tests for goal-based calorie targets."""

    def test_fat_loss_deficit(self) -> None:
        target = calculate_target_calories(2500, "fat_loss", "male")
        assert target.adjustment == -375
        assert target.target_calories == 2125

    def test_muscle_gain_surplus_capped(self) -> None:
        target = calculate_target_calories(2500, "muscle_gain", "male", aggressiveness=5.0)
        assert target.adjustment == 300

    def test_health_is_maintenance(self) -> None:
        target = calculate_target_calories(2200, "health", "female")
        assert target.adjustment == 0
        assert target.target_calories == 2200

    def test_unknown_goal_treated_as_health(self) -> None:
        target = calculate_target_calories(2200, "maintenance", "female")
        assert target.adjustment == 0

    def test_raised_to_safe_minimum(self) -> None:
        target = calculate_target_calories(1400, "fat_loss", "female", aggressiveness=1.0)
        assert target.target_calories == MIN_CALORIES[Sex.FEMALE]
        assert "safe minimum" in target.explanation


class TestMacros:
    def test_protein_and_fats_from_body_weight(self) -> None:
        macros = calculate_macros(80, 2984, "muscle_gain")
        assert macros.protein == 152
        assert macros.fats == 88
        assert macros.carbs == round((2984 - 152 * 4 - 88 * 9) / 4)

    def test_carbs_never_below_minimum(self) -> None:
        macros = calculate_macros(120, 1500, "fat_loss")
        assert macros.carbs == 50


class TestBMI:
    def test_value(self) -> None:
        assert calculate_bmi(80, 180) == 24.7

    @pytest.mark.parametrize(
        "bmi,category",
        [(15.0, "severely_underweight"), (18.0, "underweight"), (22.0, "normal"),
         (27.0, "overweight"), (32.0, "obese_1"), (37.0, "obese_2"), (45.0, "obese_3")],
    )
    def test_categories(self, bmi: float, category: str) -> None:
        assert bmi_category(bmi) == category


class TestCalculateTargets:
    """Tests for the combined profile calculation."""

    def test_formula_targets(self, male_profile) -> None:
        targets = calculate_targets(male_profile)
        assert targets.bmr == 1780
        assert targets.tdee == 2759
        assert targets.target_calories == 2759 + 225
        assert targets.tdee_source == "formula"
        assert targets.bmi_category == "normal"
        # 225 kcal/day surplus
        assert targets.expected_weekly_change_kg == calculate_weekly_weight_change(225)

    def test_calibrated_override(self, male_profile) -> None:
        targets = calculate_targets(male_profile, tdee_override=2900.4)
        assert targets.tdee == 2900
        assert targets.tdee_source == "calibrated"
        assert targets.target_calories == 2900 + 225

    def test_body_fat_uses_katch_mcardle(self, male_profile) -> None:
        male_profile.body_fat_percent = 20
        assert calculate_targets(male_profile).bmr == calculate_bmr_katch_mcardle(80, 20)

    def test_to_dict_nests_macros(self, female_profile) -> None:
        data = calculate_targets(female_profile).to_dict()
        assert set(data["macros"]) == {"protein_g", "carbs_g", "fats_g"}
        assert data["tdee"] == 1856
        # 1856 - 375 = 1481, no floor
        assert data["expected_weekly_change_kg"] == pytest.approx(-0.34, abs=0.01)


def test_weekly_weight_change() -> None:
    # 500 kcal/day deficit ~ 0.45 kg/week
    assert calculate_weekly_weight_change(-500) == pytest.approx(-0.45, abs=0.01)
