"""Body metric calculator for energy and macro targets.

Calculates BMR, TDEE and macronutrient targets from a profile snapshot.
All inputs are metric (kg, cm). Uses Mifflin-St Jeor for BMR as it's
widely validated for resting metabolic rate; Katch-McArdle is available
when body fat percentage is known.

Everything here is pure arithmetic with no state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lifeplan.tracking.models import Profile


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level multipliers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    VERY_ACTIVE = "very_active"      # Very hard exercise, physical job


class GoalType(Enum):
    """Body composition goal."""
    FAT_LOSS = "fat_loss"
    MUSCLE_GAIN = "muscle_gain"
    RECOMP = "recomp"
    HEALTH = "health"


# 1 kg of body mass ~ 7700 kcal (mix of fat and lean tissue)
KCAL_PER_KG = 7700

# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# Never prescribe below these, regardless of goal
MIN_CALORIES = {
    Sex.MALE: 1500,
    Sex.FEMALE: 1200,
}

MAX_DEFICIT = 500
MAX_SURPLUS = 300

# Grams per kg of body weight, (min, max)
MACRO_RATIOS = {
    GoalType.FAT_LOSS: {"protein": (2.0, 2.2), "carbs": (2.0, 3.0), "fats": (0.8, 1.0)},
    GoalType.MUSCLE_GAIN: {"protein": (1.8, 2.0), "carbs": (4.0, 5.0), "fats": (1.0, 1.2)},
    GoalType.RECOMP: {"protein": (2.0, 2.2), "carbs": (2.5, 3.5), "fats": (0.9, 1.0)},
    GoalType.HEALTH: {"protein": (1.6, 1.8), "carbs": (3.0, 4.0), "fats": (0.9, 1.1)},
}

CALORIES_PER_GRAM = {
    "protein": 4,
    "carbs": 4,
    "fats": 9,
}

MIN_CARBS_GRAMS = 50

# Non-exercise activity thermogenesis by job type (kcal/day)
NEAT_ESTIMATES = {
    "desk_job_at_home": 200,
    "desk_job_office": 350,
    "standing_job": 500,
    "light_active_job": 700,
    "physical_job": 900,
    "very_physical_job": 1200,
}

# Hourly burn = base + per_kg * weight
EXERCISE_CALORIES_PER_HOUR = {
    "bodyweight_light": (200, 3.0),
    "bodyweight_moderate": (300, 4.5),
    "bodyweight_intense": (400, 6.0),
    "walking_brisk": (250, 3.5),
    "running_moderate": (500, 8.0),
    "cycling_moderate": (350, 5.0),
    "yoga": (150, 2.5),
    "hiit": (450, 7.0),
}


@dataclass
class CalorieTarget:
    """Daily calorie target derived from TDEE and goal."""

    target_calories: int
    adjustment: int  # kcal relative to TDEE (negative = deficit)
    explanation: str


@dataclass
class Macros:
    """Macronutrient targets in grams."""

    protein: int
    carbs: int
    fats: int

    @property
    def calories(self) -> int:
        return (
            self.protein * CALORIES_PER_GRAM["protein"]
            + self.carbs * CALORIES_PER_GRAM["carbs"]
            + self.fats * CALORIES_PER_GRAM["fats"]
        )


@dataclass
class NutritionTargets:
    """Baseline numeric targets for one profile snapshot."""

    bmr: int
    tdee: int
    target_calories: int
    calorie_adjustment: int
    protein_g: int
    carbs_g: int
    fats_g: int
    bmi: float
    bmi_category: str
    explanation: str
    tdee_source: str = "formula"  # "formula" or "calibrated"
    expected_weekly_change_kg: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dict for JSON output."""
        return {
            "bmr": self.bmr,
            "tdee": self.tdee,
            "tdee_source": self.tdee_source,
            "target_calories": self.target_calories,
            "calorie_adjustment": self.calorie_adjustment,
            "expected_weekly_change_kg": self.expected_weekly_change_kg,
            "macros": {
                "protein_g": self.protein_g,
                "carbs_g": self.carbs_g,
                "fats_g": self.fats_g,
            },
            "bmi": self.bmi,
            "bmi_category": self.bmi_category,
            "explanation": self.explanation,
        }

    def summary(self) -> str:
        """Human-readable summary of targets."""
        return "\n".join([
            f"BMR: {self.bmr} kcal/day",
            f"TDEE: {self.tdee} kcal/day ({self.tdee_source})",
            f"Target: {self.target_calories} kcal/day ({self.calorie_adjustment:+d} from TDEE)",
            f"Expected change: {self.expected_weekly_change_kg:+.2f} kg/week",
            f"Protein: {self.protein_g}g  Carbs: {self.carbs_g}g  Fats: {self.fats_g}g",
            f"BMI: {self.bmi} ({self.bmi_category})",
        ])


def _parse_sex(sex: Sex | str) -> Sex:
    return sex if isinstance(sex, Sex) else Sex(sex.lower())


def _parse_goal(goal_type: GoalType | str) -> GoalType:
    if isinstance(goal_type, GoalType):
        return goal_type
    try:
        return GoalType(goal_type.lower())
    except ValueError:
        # "maintenance" and friends are treated as general health
        return GoalType.HEALTH


def calculate_bmr(
    sex: Sex | str,
    weight_kg: float,
    height_cm: float,
    age: int,
) -> int:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        sex: Biological sex
        weight_kg: Weight in kilograms
        height_cm: Height in centimeters
        age: Age in years

    Returns:
        BMR in kcal/day, rounded
    """
    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)
    if _parse_sex(sex) == Sex.MALE:
        return round(base + 5)
    return round(base - 161)


def calculate_bmr_katch_mcardle(weight_kg: float, body_fat_percent: float) -> int:
    """Calculate BMR from lean body mass (Katch-McArdle).

    More accurate than Mifflin-St Jeor when body fat is actually known.
    """
    lean_mass = weight_kg * (1 - body_fat_percent / 100)
    return round(370 + 21.6 * lean_mass)


def calculate_tdee(bmr: float, activity_level: ActivityLevel | str) -> int:
    """Calculate Total Daily Energy Expenditure.

    Unknown activity levels fall back to sedentary.

    Args:
        bmr: Basal Metabolic Rate
        activity_level: Activity level

    Returns:
        TDEE in kcal/day, rounded
    """
    if not isinstance(activity_level, ActivityLevel):
        try:
            activity_level = ActivityLevel(activity_level.lower())
        except ValueError:
            activity_level = ActivityLevel.SEDENTARY
    return round(bmr * ACTIVITY_MULTIPLIERS[activity_level])


def calculate_neat(job_type: Optional[str], steps: int = 0) -> int:
    """Estimate NEAT from job type, raised to a step-count estimate if higher."""
    neat = float(NEAT_ESTIMATES.get(job_type or "", 300))
    if steps > 0:
        # Rough: 0.04 kcal per step
        neat = max(neat, steps * 0.04)
    return round(neat)


def calculate_exercise_burn(workout_type: str, duration_minutes: float, weight_kg: float) -> int:
    """Estimate calories burned by one session; unknown types count as moderate bodyweight."""
    base, per_kg = EXERCISE_CALORIES_PER_HOUR.get(
        workout_type, EXERCISE_CALORIES_PER_HOUR["bodyweight_moderate"]
    )
    return round((base + per_kg * weight_kg) * (duration_minutes / 60))


def calculate_adaptive_tdee(
    sex: Sex | str,
    weight_kg: float,
    height_cm: float,
    age: int,
    job_type: Optional[str] = "desk_job_office",
    steps: int = 0,
    workouts: Optional[list[tuple[str, float]]] = None,
    estimated_intake: Optional[float] = None,
) -> dict:
    """Calculate TDEE with the component method: BMR + NEAT + exercise + TEF.

    Args:
        workouts: List of (workout_type, duration_minutes)
        estimated_intake: Daily intake used for thermic effect of food.
            Defaults to 1.5x BMR.

    Returns:
        Dict with total and per-component kcal
    """
    bmr = calculate_bmr(sex, weight_kg, height_cm, age)
    neat = calculate_neat(job_type, steps)
    exercise = sum(
        calculate_exercise_burn(kind, minutes, weight_kg) for kind, minutes in (workouts or [])
    )
    intake = estimated_intake if estimated_intake else bmr * 1.5
    tef = round(intake * 0.10)

    return {
        "total": bmr + neat + exercise + tef,
        "components": {"bmr": bmr, "neat": neat, "exercise": exercise, "tef": tef},
    }


def calculate_target_calories(
    tdee: float,
    goal_type: GoalType | str,
    sex: Sex | str,
    aggressiveness: float = 0.5,
) -> CalorieTarget:
    """Calculate target daily calories for a goal.

    Args:
        tdee: Total Daily Energy Expenditure
        goal_type: fat_loss, muscle_gain, recomp or health
        sex: Used for the safe minimum
        aggressiveness: 0-1, how far into the deficit/surplus range to go

    Returns:
        CalorieTarget with explanation
    """
    goal = _parse_goal(goal_type)
    min_calories = MIN_CALORIES[_parse_sex(sex)]

    if goal == GoalType.FAT_LOSS:
        adjustment = max(-round(250 + aggressiveness * 250), -MAX_DEFICIT)
        explanation = f"Deficit of {abs(adjustment)} kcal for steady fat loss"
    elif goal == GoalType.MUSCLE_GAIN:
        adjustment = min(round(150 + aggressiveness * 150), MAX_SURPLUS)
        explanation = f"Surplus of {adjustment} kcal for lean muscle gain"
    elif goal == GoalType.RECOMP:
        adjustment = round(-100 * aggressiveness)
        explanation = "Near maintenance calories for body recomposition"
    else:
        adjustment = 0
        explanation = "Maintenance calories for general health"

    target = round(tdee + adjustment)
    if target < min_calories:
        target = min_calories
        explanation += f" (raised to safe minimum of {min_calories} kcal)"

    return CalorieTarget(target_calories=target, adjustment=adjustment, explanation=explanation)


def calculate_macros(
    weight_kg: float,
    target_calories: float,
    goal_type: GoalType | str,
) -> Macros:
    """Split calories into macros.

    Protein and fats are set first (mid-range g/kg for the goal); the
    remainder goes to carbs, never below 50 g.
    """
    ratios = MACRO_RATIOS[_parse_goal(goal_type)]
    protein = round(weight_kg * sum(ratios["protein"]) / 2)
    fats = round(weight_kg * sum(ratios["fats"]) / 2)

    remaining = (
        target_calories
        - protein * CALORIES_PER_GRAM["protein"]
        - fats * CALORIES_PER_GRAM["fats"]
    )
    carbs = round(remaining / CALORIES_PER_GRAM["carbs"])

    return Macros(protein=protein, carbs=max(carbs, MIN_CARBS_GRAMS), fats=fats)


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """Body-mass index, one decimal."""
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> str:
    """Map a BMI value to its WHO category id."""
    if bmi < 16:
        return "severely_underweight"
    if bmi < 18.5:
        return "underweight"
    if bmi < 25:
        return "normal"
    if bmi < 30:
        return "overweight"
    if bmi < 35:
        return "obese_1"
    if bmi < 40:
        return "obese_2"
    return "obese_3"


def calculate_weekly_weight_change(calorie_adjustment: float) -> float:
    """Expected weekly weight change (kg) for a daily surplus/deficit."""
    return round(calorie_adjustment * 7 / KCAL_PER_KG, 2)


def calculate_targets(
    profile: "Profile",
    tdee_override: Optional[float] = None,
    aggressiveness: float = 0.5,
) -> NutritionTargets:
    """Calculate baseline targets for a profile.

    Args:
        profile: Profile snapshot
        tdee_override: Calibrated TDEE estimate; replaces the formula value
        aggressiveness: Passed through to calculate_target_calories

    Returns:
        NutritionTargets
    """
    if profile.body_fat_percent:
        bmr = calculate_bmr_katch_mcardle(profile.weight_kg, profile.body_fat_percent)
    else:
        bmr = calculate_bmr(profile.sex, profile.weight_kg, profile.height_cm, profile.age)

    if tdee_override is not None:
        tdee = round(tdee_override)
        source = "calibrated"
    else:
        tdee = calculate_tdee(bmr, profile.activity_level)
        source = "formula"

    target = calculate_target_calories(tdee, profile.goal_type, profile.sex, aggressiveness)
    macros = calculate_macros(profile.weight_kg, target.target_calories, profile.goal_type)
    bmi = calculate_bmi(profile.weight_kg, profile.height_cm)

    return NutritionTargets(
        bmr=bmr,
        tdee=tdee,
        target_calories=target.target_calories,
        calorie_adjustment=target.adjustment,
        protein_g=macros.protein,
        carbs_g=macros.carbs,
        fats_g=macros.fats,
        bmi=bmi,
        bmi_category=bmi_category(bmi),
        explanation=target.explanation,
        tdee_source=source,
        expected_weekly_change_kg=calculate_weekly_weight_change(target.target_calories - tdee),
    )
