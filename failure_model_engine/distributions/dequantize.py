"""Reconstruction of continuous values from quantized samples."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from failure_model_engine.distributions.models import FittedDistribution


class Dequantizer:
    """Draw a continuous value consistent with the bin a sample was observed in.

    For a sample x in bin [lo, lo + interval), a uniform draw r picks a
    target CDF level between CDF(lo) and CDF(hi); bisection then locates the
    frequency with that CDF level, i.e. an inverse-CDF draw from the fitted
    Gaussian truncated to the bin. Instances hold only configuration.
    """

    def __init__(self, interval: int, tolerance: float = 0.001) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if tolerance <= 0:
            raise ValueError("tolerance must be positive")
        self.interval = interval
        self.tolerance = tolerance

    def bin_bounds(self, x: float) -> tuple[float, float]:
        lo = math.floor(x / self.interval) * self.interval
        return float(lo), float(lo + self.interval)

    def dequantize(self, x: float, distribution: FittedDistribution, rng: np.random.Generator) -> float:
        return self.dequantize_with_draw(x, distribution, float(rng.random()))

    def dequantize_with_draw(self, x: float, distribution: FittedDistribution, r: float) -> float:
        """Deterministic core: ``r`` in [0, 1) selects the position within the bin."""
        lo, hi = self.bin_bounds(x)
        cdf_lo = distribution.cdf(lo)
        cdf_hi = distribution.cdf(hi)
        target = cdf_lo + r * (cdf_hi - cdf_lo)

        while hi - lo > self.tolerance:
            mid = 0.5 * (lo + hi)
            if distribution.cdf(mid) < target:
                lo = mid
            else:
                hi = mid
        return 0.5 * (lo + hi)

    def dequantize_batch(
        self, samples: Sequence[float], distribution: FittedDistribution, rng: np.random.Generator
    ) -> np.ndarray:
        """Dequantize every sample with a fresh draw each."""
        draws = rng.random(len(samples))
        return np.array(
            [self.dequantize_with_draw(x, distribution, float(r)) for x, r in zip(samples, draws)],
            dtype=float,
        )


__all__ = ["Dequantizer"]
