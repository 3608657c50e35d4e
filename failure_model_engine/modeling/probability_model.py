"""Per-bin probability tables over the statistically relevant frequency range."""

from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np

from failure_model_engine.distributions.models import (
    Bin,
    CumulativeRow,
    FittedDistribution,
    MeasurementBatch,
    ProbabilityModel,
)
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="probability_model")

REPORT_FLOOR = 0.0001
REPORT_CEILING = 0.99


class ProbabilityModelBuilder:
    """Build probability models and cumulative failure tables for fitted batches."""

    def __init__(
        self,
        interval: int,
        range_sigmas: float = 6.0,
        report_floor: float = REPORT_FLOOR,
        report_ceiling: float = REPORT_CEILING,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.range_sigmas = range_sigmas
        self.report_floor = report_floor
        self.report_ceiling = report_ceiling

    def bounds(self, distribution: FittedDistribution) -> Tuple[int, int]:
        """First and last bin start, mean +/- range_sigmas*stddev snapped to bin edges."""
        step = self.interval
        mid = math.floor(distribution.mean / step) * step
        half = math.floor(self.range_sigmas * distribution.stddev / step) * step
        return mid - half, mid + half

    def build(self, batch: MeasurementBatch, distribution: FittedDistribution) -> ProbabilityModel:
        lo, hi = self.bounds(distribution)
        starts = np.arange(lo, hi + self.interval, self.interval, dtype=np.int64)
        edges = np.append(starts, starts[-1] + self.interval)

        cdf = distribution.cdf(edges)
        probabilities = np.diff(cdf)

        # count of samples in [edge_i, edge_{i+1})
        ordered = np.sort(batch.values)
        observed = np.diff(np.searchsorted(ordered, edges, side="left"))

        bins = tuple(
            Bin(start=int(f), width=self.interval, probability=float(p), observed=int(c))
            for f, p, c in zip(starts, probabilities, observed)
        )
        outside = len(batch) - int(observed.sum())
        log.info(
            "Built probability model",
            extra={"batch": batch.index, "bins": len(bins), "start": lo, "stop": hi + self.interval, "outside": outside},
        )
        return ProbabilityModel(batch_index=batch.index, interval=self.interval, bins=bins)

    def cumulative_table(self, distribution: FittedDistribution, model: ProbabilityModel) -> List[CumulativeRow]:
        """Failure percentage per frequency across the transition region only.

        Walks down from the model's last bin start while the CDF is still at
        least ``report_floor``, then walks back up emitting rows until the CDF
        reaches ``report_ceiling``; the flat 0% and 100% tails are omitted.
        """
        step = self.interval
        f = model.bins[-1].start
        while distribution.cdf(f) >= self.report_floor:
            f -= step

        rows: List[CumulativeRow] = []
        while True:
            level = distribution.cdf(f)
            rows.append(CumulativeRow(frequency=int(f), failure_pct=100.0 * level))
            if level >= self.report_ceiling:
                break
            f += step
        return rows


__all__ = ["ProbabilityModelBuilder", "REPORT_CEILING", "REPORT_FLOOR"]
