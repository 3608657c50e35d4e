"""Closed-form Gaussian CDF used by every bin and dequantization computation."""

from __future__ import annotations

import math

import numpy as np
from scipy.special import erf

from failure_model_engine.exceptions import DegenerateDistributionError

SQRT2 = math.sqrt(2.0)


def gaussian_cdf(t, mean: float, stddev: float):
    """Return P(X <= t) for X ~ N(mean, stddev**2).

    Accepts scalars or arrays; scalars come back as plain floats.
    """
    if not stddev > 0:
        raise DegenerateDistributionError(f"CDF undefined for stddev={stddev}")
    z = (np.asarray(t, dtype=float) - mean) / (stddev * SQRT2)
    value = 0.5 * (1.0 + erf(z))
    if np.ndim(value) == 0:
        return float(value)
    return value


__all__ = ["gaussian_cdf"]
