"""Safety checks for proposed calorie and protein changes.

Nothing here drops a value. A proposal that fails a check is replaced by
the nearest safe value and the caller gets a warning explaining why.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from lifeplan.profiles.body_calc import MAX_DEFICIT, MIN_CALORIES, Sex

# Maximum change applied in one adaptation cycle
ADJUSTMENT_LIMITS = {
    "calories": 50,  # kcal/day
    "protein": 10,  # g/day
    "volume": 0.2,  # fraction
}

MIN_PROTEIN_PER_KG = 1.4
MAX_PROTEIN_PER_KG = 3.0
CLAMPED_PROTEIN_PER_KG = 2.5


@dataclass
class CalorieCheck:
    adjusted_delta: int
    adjusted_calories: int
    warnings: list[str] = field(default_factory=list)

    @property
    def safe(self) -> bool:
        return not self.warnings


@dataclass
class ProteinCheck:
    adjusted_protein: int
    warnings: list[str] = field(default_factory=list)

    @property
    def safe(self) -> bool:
        return not self.warnings


@dataclass
class ChangeCheck:
    adjusted_value: float
    warnings: list[str] = field(default_factory=list)

    @property
    def safe(self) -> bool:
        return not self.warnings


class SafetyValidator(Protocol):
    """Capability the adaptation engine routes every numeric change through."""

    def validate_calorie_delta(
        self, current_calories: float, delta: float, sex: str, tdee: float
    ) -> CalorieCheck: ...

    def validate_protein_target(self, protein_g: float, weight_kg: float) -> ProteinCheck: ...


def validate_adaptation_change(proposed: float, current: float, change_type: str) -> ChangeCheck:
    """Limit how far one cycle may move a value.

    Args:
        proposed: Proposed new value
        current: Current value
        change_type: 'calories', 'protein' or 'volume'

    Returns:
        ChangeCheck with the proposal, or the current value moved by the limit
    """
    max_change = ADJUSTMENT_LIMITS.get(change_type, 0)
    actual = abs(proposed - current)
    if actual <= max_change:
        return ChangeCheck(adjusted_value=proposed)

    safe_value = current + max_change if proposed > current else current - max_change
    return ChangeCheck(
        adjusted_value=safe_value,
        warnings=[f"{change_type} change of {actual:g} exceeds safe limit of {max_change:g}"],
    )


class DefaultSafetyValidator:
    """Default limits: per-cycle step, sex floor, max deficit below TDEE."""

    def validate_calorie_delta(
        self, current_calories: float, delta: float, sex: str, tdee: float
    ) -> CalorieCheck:
        """Validate a calorie delta against the current target.

        Args:
            current_calories: Current daily calorie target
            delta: Proposed change (kcal/day)
            sex: 'male' or 'female', selects the floor
            tdee: Current TDEE estimate, for the maximum deficit

        Returns:
            CalorieCheck with the safe delta and any warnings
        """
        warnings = []

        step = validate_adaptation_change(current_calories + delta, current_calories, "calories")
        warnings.extend(step.warnings)
        proposed = step.adjusted_value

        floor = MIN_CALORIES[Sex(sex)]
        if proposed < floor:
            warnings.append(f"Calories ({proposed:.0f}) below safe minimum. Adjusted to {floor}.")
            proposed = floor

        deficit = tdee - proposed
        if deficit > MAX_DEFICIT:
            safe_calories = tdee - MAX_DEFICIT
            warnings.append(
                f"Deficit of {deficit:.0f} kcal exceeds max safe deficit. Adjusted to {safe_calories:.0f}."
            )
            proposed = max(proposed, safe_calories)

        adjusted = round(proposed)
        return CalorieCheck(
            adjusted_delta=adjusted - round(current_calories),
            adjusted_calories=adjusted,
            warnings=warnings,
        )

    def validate_protein_target(self, protein_g: float, weight_kg: float) -> ProteinCheck:
        per_kg = protein_g / weight_kg
        if per_kg < MIN_PROTEIN_PER_KG:
            adjusted = round(weight_kg * MIN_PROTEIN_PER_KG)
            return ProteinCheck(adjusted, [f"Protein ({protein_g:.0f}g) below minimum. Adjusted to {adjusted}g."])
        if per_kg > MAX_PROTEIN_PER_KG:
            adjusted = round(weight_kg * CLAMPED_PROTEIN_PER_KG)
            return ProteinCheck(adjusted, [f"Protein ({protein_g:.0f}g) exceeds safe maximum. Adjusted to {adjusted}g."])
        return ProteinCheck(round(protein_g))
