"""Fisher's method for combining independent p-values."""

from __future__ import annotations

import math
from typing import Sequence

from failure_model_engine.exceptions import InvalidPValueError


def fisher_statistic(pvalues: Sequence[float]) -> float:
    """Return chi2 = -2 * sum(ln p_i)."""
    if not pvalues:
        raise InvalidPValueError("Fisher's method needs at least one p-value")
    total = 0.0
    for p in pvalues:
        if not p > 0:
            raise InvalidPValueError(f"p-value must be > 0 for Fisher's method, got {p}")
        total += math.log(p)
    return -2.0 * total


def fisher_combine(pvalues: Sequence[float]) -> float:
    """Combine p-values into one via Fisher's method.

    The survival function of chi-square with even degrees of freedom
    df = 2k has the closed form exp(-x/2) * sum_{j<k} (x/2)^j / j!, which
    is accumulated term by term: t_0 = exp(-x/2), t_k = t_{k-2} * x / k
    for k = 2, 4, ... < df.
    """
    chi2 = fisher_statistic(pvalues)
    df = 2 * len(pvalues)
    term = math.exp(-0.5 * chi2)
    total = term
    for k in range(2, df, 2):
        term *= chi2 / k
        total += term
    return total


__all__ = ["fisher_combine", "fisher_statistic"]
