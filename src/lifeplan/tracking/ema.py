"""Exponentially smoothed moving average for weight samples.

Hacker's Diet trend calculation:
    T_n = T_{n-1} + smoothing × (W_n - T_{n-1})

With smoothing=0.1 this is a low-pass filter with a ~10-day time constant,
removing day-to-day noise from water retention and scale error.

For non-daily samples the smoothing is time-scaled:
    α_adjusted = 1 - (1 - α)^t
where t is days since the previous sample.

Reference: https://www.fourmilab.ch/hackdiet/
"""

from __future__ import annotations

from datetime import date

from lifeplan.profiles.body_calc import KCAL_PER_KG

DEFAULT_SMOOTHING = 0.1


def time_scaled_alpha(base_alpha: float, days_elapsed: int) -> float:
    """
    Adjust smoothing factor for non-daily measurements.

    Args:
        base_alpha: Base smoothing factor (typically 0.1)
        days_elapsed: Days since last measurement; values below 1 count as 1

    Returns:
        Adjusted smoothing factor
    """
    if days_elapsed <= 0:
        days_elapsed = 1
    return 1 - (1 - base_alpha) ** days_elapsed


def update_trend(
    prev_trend: float,
    weight_kg: float,
    smoothing: float = DEFAULT_SMOOTHING,
    days_elapsed: int = 1,
) -> float:
    """
    Calculate the new trend value for one sample.

    Args:
        prev_trend: Previous trend value (T_{n-1})
        weight_kg: Today's scale weight (W_n)
        smoothing: Base smoothing factor
        days_elapsed: Days since the previous sample

    Returns:
        Today's trend value (T_n)
    """
    alpha = time_scaled_alpha(smoothing, days_elapsed)
    return prev_trend + alpha * (weight_kg - prev_trend)


def calculate_trend_from_scratch(
    samples: list[tuple[date, float]],
    smoothing: float = DEFAULT_SMOOTHING,
) -> list[float]:
    """
    Calculate trend values for chronologically ordered (date, weight) pairs.

    The first weight seeds the trend. Gaps between dates scale the
    smoothing factor.
    """
    if not samples:
        return []

    trends = [samples[0][1]]
    for (prev_date, _), (curr_date, weight) in zip(samples, samples[1:]):
        days = (curr_date - prev_date).days
        trends.append(update_trend(trends[-1], weight, smoothing, days))
    return trends


def estimate_daily_energy_balance(weight_change_kg: float, days: int) -> float:
    """
    Daily kcal surplus (positive) or deficit (negative) implied by a change.

    Args:
        weight_change_kg: End minus start (negative = loss)
        days: Period length

    Returns:
        Average daily energy balance in kcal
    """
    if days <= 0:
        return 0.0
    return weight_change_kg * KCAL_PER_KG / days
