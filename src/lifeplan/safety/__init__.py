"""Safety bounds for calorie, protein and adaptation changes."""

from __future__ import annotations

from lifeplan.safety.validators import DefaultSafetyValidator, SafetyValidator

__all__ = ["DefaultSafetyValidator", "SafetyValidator"]
