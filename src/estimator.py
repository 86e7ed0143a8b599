"""
Estimation of the spawn process from observed spawn times.

Interarrival gaps are max(X, m) with X ~ Exp(λ) and floor m. Gaps above
the floor are uncensored, and by memorylessness X - m given X > m is again
Exp(λ), so λ is estimated from the mean excess of those gaps alone.
"""

import math
from typing import Dict, Iterable
import numpy as np


def expected_interarrival(spawn_rate: float, min_interarrival: float) -> float:
    """Mean of max(X, m) for X ~ Exp(spawn_rate).

    E[max(X, m)] = m + exp(-λ m) / λ
    """
    return min_interarrival + math.exp(-spawn_rate * min_interarrival) / spawn_rate


def expected_floored_fraction(spawn_rate: float, min_interarrival: float) -> float:
    """Probability that a draw falls below the floor, P(X <= m)."""
    return 1.0 - math.exp(-spawn_rate * min_interarrival)


class SpawnProcessEstimator:
    """Fit a floored-exponential arrival process to spawn timestamps."""

    def __init__(self, min_interarrival: float, resolution: float = 0.0):
        """Initialize estimator.

        Args:
            min_interarrival: Floor applied by the spawner
            resolution: Time quantum of the spawn times (the step size);
                gaps within one quantum of the floor count as floored
        """
        self.min_interarrival = min_interarrival
        self.resolution = resolution
        self.spawn_times = []

    def observe_spawn(self, timestamp: float):
        self.spawn_times.append(timestamp)

    def observe_all(self, timestamps: Iterable[float]):
        self.spawn_times.extend(timestamps)

    @property
    def interarrivals(self) -> np.ndarray:
        return np.diff(np.asarray(self.spawn_times, dtype=float))

    def _floored_mask(self, gaps: np.ndarray) -> np.ndarray:
        return gaps < self.min_interarrival + self.resolution + 1e-12

    def observed_rate(self) -> float:
        """Spawns per unit time, 1 / mean gap."""
        gaps = self.interarrivals
        if gaps.size == 0 or gaps.mean() <= 0:
            return 0.0
        return float(1.0 / gaps.mean())

    def floored_fraction(self) -> float:
        """Share of gaps that sit on the floor."""
        gaps = self.interarrivals
        if gaps.size == 0:
            return 0.0
        return float(self._floored_mask(gaps).mean())

    def rate_mle(self) -> float:
        """Estimate of λ from the excess of uncensored gaps over the floor."""
        gaps = self.interarrivals
        excess = gaps[~self._floored_mask(gaps)] - self.min_interarrival
        if excess.size == 0 or excess.mean() <= 0:
            return 0.0
        return float(1.0 / excess.mean())

    def compare(self, spawn_rate: float) -> Dict[str, float]:
        """Observed figures side by side with those implied by spawn_rate."""
        mean_gap = expected_interarrival(spawn_rate, self.min_interarrival)
        return {
            "samples": int(self.interarrivals.size),
            "observed_rate": self.observed_rate(),
            "expected_rate": 1.0 / mean_gap,
            "observed_floored_fraction": self.floored_fraction(),
            "expected_floored_fraction": expected_floored_fraction(
                spawn_rate, self.min_interarrival
            ),
            "estimated_spawn_rate": self.rate_mle(),
            "configured_spawn_rate": spawn_rate,
        }
