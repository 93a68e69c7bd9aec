"""Weight tracking and TDEE calibration.

Key components:
- EMA weight trend (10% smoothing, time-scaled for gaps)
- Calibration of the TDEE estimate from intended vs observed weight change
- Scalar Kalman filter that blends calibration runs into a rolling estimate
- Day-to-day TDEE multipliers and the static vs component comparison
"""

from __future__ import annotations

from lifeplan.tracking.adaptive_tdee import compare_to_static_tdee, daily_tdee_multiplier
from lifeplan.tracking.calibration import (
    CalibrationResult,
    CalibrationState,
    calibrate,
    recalibrate,
)
from lifeplan.tracking.ema import update_trend
from lifeplan.tracking.models import DailyLog, HealthLog, LooksLog, Profile, RoutineLog, WeightSample
from lifeplan.tracking.tdee_filter import TDEEFilter

__all__ = [
    "CalibrationResult",
    "CalibrationState",
    "DailyLog",
    "HealthLog",
    "LooksLog",
    "Profile",
    "RoutineLog",
    "TDEEFilter",
    "WeightSample",
    "calibrate",
    "compare_to_static_tdee",
    "daily_tdee_multiplier",
    "recalibrate",
    "update_trend",
]
