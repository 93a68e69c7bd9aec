"""Static mode table.

Each mode is a set of overrides applied to a fresh Adjustments value before
any rule runs. The table is read-only process-wide configuration.
"""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Optional

from lifeplan.advisor.models import UserMode

DEFAULT_MODE = "normal"

MODES = MappingProxyType({
    "normal": MappingProxyType({
        "workout_intensity": 1.0,
        "meal_complexity": "full",
        "routine_level": "full",
        "notifications_enabled": True,
    }),
    "travel": MappingProxyType({
        "workout_intensity": 0.5,
        "meal_complexity": "simple",
        "routine_level": "minimal",
        "notifications_enabled": True,
        "maintenance_calories": True,
    }),
    "sick": MappingProxyType({
        "workout_intensity": 0.0,
        "meal_complexity": "simple",
        "routine_level": "rest",
        "notifications_enabled": False,
        "skip_workout": True,
        "skip_skincare": True,
        "hydration_priority": True,
    }),
    "festival": MappingProxyType({
        "workout_intensity": 0.6,
        "meal_complexity": "flexible",
        "routine_level": "minimal",
        "notifications_enabled": False,
        "maintenance_calories": True,
        "skip_logging": True,
    }),
    "exam": MappingProxyType({
        "workout_intensity": 0.4,
        "meal_complexity": "quick",
        "routine_level": "minimal",
        "notifications_enabled": True,
        "sleep_priority": True,
        "focus_priority": True,
    }),
})

MODE_DESCRIPTIONS = MappingProxyType({
    "normal": "Full plan",
    "travel": "Light workouts, simple meals, maintenance calories",
    "sick": "Rest, hydrate, skip workouts and skincare",
    "festival": "Flexible meals, maintenance calories, no logging pressure",
    "exam": "Short workouts, quick meals, sleep and focus first",
})


def should_expire(mode: UserMode, on: date) -> bool:
    """True when the mode's auto-expiry date has passed."""
    return mode.auto_expiry is not None and on > mode.auto_expiry


def effective_mode(mode: Optional[UserMode], on: date) -> tuple[str, Optional[str]]:
    """
    Resolve the mode that applies on ``on``.

    Returns:
        Tuple of (mode name, warning). Unknown or expired modes fall back
        to normal with a warning.
    """
    if mode is None:
        return DEFAULT_MODE, None
    if mode.mode not in MODES:
        return DEFAULT_MODE, f"Unknown mode '{mode.mode}', using normal"
    if should_expire(mode, on):
        return DEFAULT_MODE, f"Mode '{mode.mode}' expired on {mode.auto_expiry.isoformat()}, using normal"
    return mode.mode, None
