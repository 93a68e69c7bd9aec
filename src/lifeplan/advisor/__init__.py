"""Cross-domain rule resolver producing the unified daily plan.

Storage-backed workflows live in ``lifeplan.advisor.service``.
"""

from __future__ import annotations

from lifeplan.advisor.models import Adjustments, DailyPlan, Explanation, PlanContext, UserMode
from lifeplan.advisor.resolver import calculate_life_score, explain_recommendation, generate_plan
from lifeplan.advisor.rules import RULES, Rule

__all__ = [
    "Adjustments",
    "DailyPlan",
    "Explanation",
    "PlanContext",
    "RULES",
    "Rule",
    "UserMode",
    "calculate_life_score",
    "explain_recommendation",
    "generate_plan",
]
