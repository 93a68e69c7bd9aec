"""Multi-day pattern analysis and plan adjustments."""

from __future__ import annotations

from lifeplan.adaptation.engine import AdaptationReport, PlanAdjustment, generate_adaptation_report
from lifeplan.adaptation.patterns import PatternSummary, analyze_window
from lifeplan.adaptation.plateau import PlateauResult, detect_plateau
from lifeplan.adaptation.recovery import StreakBreak, WorkoutAdjustment, handle_streak_break

__all__ = [
    "AdaptationReport",
    "PatternSummary",
    "PlanAdjustment",
    "PlateauResult",
    "StreakBreak",
    "WorkoutAdjustment",
    "analyze_window",
    "detect_plateau",
    "generate_adaptation_report",
    "handle_streak_break",
]
