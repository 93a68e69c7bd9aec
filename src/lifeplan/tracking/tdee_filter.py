"""Scalar Kalman filter for the rolling TDEE estimate.

The state is a single scalar: the deviation (kcal/day) between the user's
real expenditure and the formula TDEE. Each calibration run produces a
suggested estimate; its offset from the formula is one noisy observation
of that deviation. The filter blends observations so the rolling estimate
settles over sessions instead of jumping to every new suggestion.

Process model is a random walk: expenditure drifts slowly as weight and
habits change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Observation noise by calibration confidence (kcal/day std, squared)
OBS_NOISE_BY_CONFIDENCE = {
    "high": 100.0 ** 2,
    "moderate": 150.0 ** 2,
    "low": 250.0 ** 2,
}

INITIAL_VARIANCE = 10000.0  # 100 kcal/day std
MAX_VARIANCE = 250000.0  # 500 kcal/day std, caps uncertainty growth over long gaps


@dataclass
class TDEEFilter:
    """
    Scalar Kalman filter for TDEE bias estimation.

    Attributes:
        bias: Current deviation estimate (kcal/day)
        variance: Current uncertainty (kcal²/day²)
        process_noise: Random walk variance per day (default: 25 = 5² kcal/day)
    """

    bias: float = 0.0
    variance: float = INITIAL_VARIANCE
    process_noise: float = 25.0

    def predict(self, days: int = 7) -> None:
        """
        Predict step: increase uncertainty due to process noise.

        Args:
            days: Number of days since last update
        """
        self.variance = min(self.variance + self.process_noise * max(days, 0), MAX_VARIANCE)

    def update(self, observed_bias: float, obs_noise: float) -> float:
        """
        Update step: incorporate one observation of the bias.

        Args:
            observed_bias: Suggested estimate minus formula TDEE
            obs_noise: Observation noise variance

        Returns:
            Residual (observed - predicted). Positive means the observation
            sits above the current estimate.
        """
        residual = observed_bias - self.bias

        kalman_gain = self.variance / (self.variance + obs_noise)
        self.bias += kalman_gain * residual
        self.variance *= 1 - kalman_gain

        return residual

    def predict_and_update(
        self,
        observed_bias: float,
        confidence: str = "moderate",
        days: int = 7,
    ) -> float:
        """Combined predict + update for one calibration run."""
        self.predict(days)
        noise = OBS_NOISE_BY_CONFIDENCE.get(confidence, OBS_NOISE_BY_CONFIDENCE["low"])
        return self.update(observed_bias, noise)

    def get_adjusted_tdee(self, formula_tdee: float) -> tuple[float, float]:
        """
        Get adjusted TDEE with uncertainty.

        Returns:
            Tuple of (adjusted_tdee, uncertainty_95ci_half_width)
        """
        return formula_tdee + self.bias, 1.96 * math.sqrt(self.variance)
