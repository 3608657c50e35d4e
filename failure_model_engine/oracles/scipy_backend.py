"""In-process oracle backends built on scipy."""

from __future__ import annotations

from itertools import combinations
from math import comb

import numpy as np
from scipy import stats

from failure_model_engine.exceptions import OracleUnavailableError
from failure_model_engine.oracles.base import MultinomialOracle, NormalityOracle, OracleResult

MIN_SHAPIRO_SAMPLES = 3


class ShapiroNormalityOracle(NormalityOracle):
    """Shapiro-Wilk normality test."""

    name = "shapiro"

    def _test(self, samples: np.ndarray) -> OracleResult:
        if samples.size < MIN_SHAPIRO_SAMPLES:
            raise OracleUnavailableError(
                f"Shapiro-Wilk needs >= {MIN_SHAPIRO_SAMPLES} samples, got {samples.size}"
            )
        if np.ptp(samples) == 0:
            raise OracleUnavailableError("Shapiro-Wilk undefined for constant samples")
        res = stats.shapiro(samples)
        w, p = float(res.statistic), float(res.pvalue)
        return OracleResult(
            value=p,
            statistic=w,
            report=f"Shapiro-Wilk normality test\nW = {w:.5f}, p-value = {p:.5g}",
        )


def _compositions(n: int, k: int) -> np.ndarray:
    """All vectors of k non-negative integers summing to n (stars and bars)."""
    if k == 1:
        return np.array([[n]], dtype=int)
    bars = np.array(list(combinations(range(n + k - 1), k - 1)), dtype=int)
    edges = np.hstack(
        [
            np.full((bars.shape[0], 1), -1, dtype=int),
            bars,
            np.full((bars.shape[0], 1), n + k - 1, dtype=int),
        ]
    )
    return np.diff(edges, axis=1) - 1


class ExactMultinomialOracle(MultinomialOracle):
    """Exact multinomial goodness-of-fit test.

    The p-value is the total probability of every outcome that is no more
    likely than the observed one. Expected probabilities are renormalized to
    sum to 1. Outcome spaces larger than ``max_outcomes`` are sampled with a
    seeded Monte Carlo estimate instead of enumerated.
    """

    name = "exact_multinomial"

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        max_outcomes: int = 500_000,
        monte_carlo_draws: int = 100_000,
        seed: int = 0,
    ) -> None:
        super().__init__(timeout=timeout)
        self.max_outcomes = max_outcomes
        self.monte_carlo_draws = monte_carlo_draws
        self.seed = seed

    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        if observed.size == 0:
            raise OracleUnavailableError("no bins to test")
        if (observed < 0).any() or (expected < 0).any():
            raise OracleUnavailableError("counts and probabilities must be non-negative")
        total = float(expected.sum())
        if total <= 0:
            raise OracleUnavailableError("expected probabilities sum to zero")
        n = int(observed.sum())
        if n == 0:
            raise OracleUnavailableError("no observations to test")

        probs = expected / total
        support = probs > 0
        if observed[~support].any():
            # The observed outcome is impossible under the model.
            return self._result(n, observed.size, p_obs=0.0, pvalue=0.0, method="exact")

        obs = observed[support]
        probs = probs[support]
        k = obs.size
        p_obs = float(stats.multinomial.pmf(obs, n, probs))

        if comb(n + k - 1, k - 1) <= self.max_outcomes:
            outcomes = _compositions(n, k)
            pmf = stats.multinomial.pmf(outcomes, n, probs)
            pvalue = float(pmf[pmf <= p_obs * (1 + 1e-7)].sum())
            method = "exact"
        else:
            rng = np.random.default_rng(self.seed)
            draws = rng.multinomial(n, probs, size=self.monte_carlo_draws)
            logpmf = stats.multinomial.logpmf(draws, n, probs)
            pvalue = float(np.mean(logpmf <= np.log(p_obs) + 1e-7)) if p_obs > 0 else 0.0
            method = f"monte carlo ({self.monte_carlo_draws} draws)"
        return self._result(n, observed.size, p_obs=p_obs, pvalue=min(pvalue, 1.0), method=method)

    @staticmethod
    def _result(n: int, k: int, *, p_obs: float, pvalue: float, method: str) -> OracleResult:
        report = (
            f"Exact multinomial test ({method})\n"
            f"events = {n}, categories = {k}\n"
            f"pObs = {p_obs:.6g}, p-value = {pvalue:.6g}"
        )
        return OracleResult(value=pvalue, statistic=p_obs, report=report)


__all__ = ["ExactMultinomialOracle", "ShapiroNormalityOracle"]
