"""Shared data models for batches, fitted distributions and probability tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from failure_model_engine.distributions.gaussian import gaussian_cdf
from failure_model_engine.evaluation.fisher import fisher_combine


@dataclass(frozen=True)
class MeasurementBatch:
    """Shifted frequency readings from one independently measured board population."""

    index: int
    samples: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def values(self) -> np.ndarray:
        return np.asarray(self.samples, dtype=float)

    @property
    def label(self) -> str:
        return f"batch {self.index + 1}"


@dataclass(frozen=True)
class FittedDistribution:
    mean: float
    variance: float
    stddev: float
    n: int

    def cdf(self, t):
        return gaussian_cdf(t, self.mean, self.stddev)


@dataclass(frozen=True)
class Bin:
    start: int
    width: int
    probability: float
    observed: int

    @property
    def end(self) -> int:
        return self.start + self.width


@dataclass(frozen=True)
class ProbabilityModel:
    """Per-bin probability mass and observed counts, ordered by bin start."""

    batch_index: int
    interval: int
    bins: Tuple[Bin, ...]

    def __iter__(self) -> Iterator[Bin]:
        return iter(self.bins)

    def __len__(self) -> int:
        return len(self.bins)

    @property
    def start(self) -> int:
        return self.bins[0].start

    @property
    def stop(self) -> int:
        return self.bins[-1].end

    @property
    def frequencies(self) -> np.ndarray:
        return np.array([b.start for b in self.bins], dtype=int)

    @property
    def probabilities(self) -> np.ndarray:
        return np.array([b.probability for b in self.bins], dtype=float)

    @property
    def observed(self) -> np.ndarray:
        return np.array([b.observed for b in self.bins], dtype=int)

    def probability_at(self, frequency: int) -> float:
        """Probability mass of the bin starting at ``frequency``; 0 outside the model."""
        entry = self._index.get(frequency)
        return entry[0] if entry is not None else 0.0

    def to_dict(self) -> Dict[int, Tuple[float, int]]:
        return {b.start: (b.probability, b.observed) for b in self.bins}

    @cached_property
    def _index(self) -> Dict[int, Tuple[float, int]]:
        return self.to_dict()

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "frequency": self.frequencies,
                "probability": self.probabilities,
                "observed": self.observed,
            }
        )


@dataclass(frozen=True)
class CumulativeRow:
    frequency: int
    failure_pct: float


@dataclass
class PValueSet:
    """P-values from the normality trials of one batch; may be empty."""

    batch_index: int
    values: List[float] = field(default_factory=list)
    trials: int = 0

    def __len__(self) -> int:
        return len(self.values)

    @property
    def discarded(self) -> int:
        return self.trials - len(self.values)

    def combined(self) -> Optional[float]:
        """Fisher-combined p-value, or None when no trial produced a verdict."""
        if not self.values:
            return None
        return fisher_combine(self.values)


__all__ = [
    "Bin",
    "CumulativeRow",
    "FittedDistribution",
    "MeasurementBatch",
    "PValueSet",
    "ProbabilityModel",
]
