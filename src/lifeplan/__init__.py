"""Daily life planner: one explainable plan from health, looks, routine and training signals."""

__version__ = "0.1.0"
