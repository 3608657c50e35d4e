"""Mean/variance estimation for a single measurement batch."""

from __future__ import annotations

import numpy as np

from failure_model_engine.distributions.models import FittedDistribution, MeasurementBatch
from failure_model_engine.exceptions import DegenerateDistributionError, InsufficientSamplesError
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="batch_statistics")

MIN_SAMPLES = 2


def ensure_min_samples(batch: MeasurementBatch) -> None:
    """Raise if the batch cannot support a variance estimate."""
    if len(batch) < MIN_SAMPLES:
        raise InsufficientSamplesError(
            f"Insufficient samples in {batch.label}: need >= {MIN_SAMPLES}, got {len(batch)}"
        )


def fit_batch(batch: MeasurementBatch) -> FittedDistribution:
    """Fit N(mean, stddev) using the Bessel-corrected (n-1) variance."""
    ensure_min_samples(batch)
    values = batch.values
    mean = float(np.mean(values))
    variance = float(np.var(values, ddof=1))
    stddev = float(np.sqrt(variance))
    if stddev == 0.0:
        raise DegenerateDistributionError(
            f"All samples in {batch.label} are identical ({values[0]}); zero variance"
        )
    log.info(
        "Fitted batch distribution",
        extra={"batch": batch.index, "n_samples": len(batch), "mean": mean, "stddev": stddev},
    )
    return FittedDistribution(mean=mean, variance=variance, stddev=stddev, n=len(batch))


__all__ = ["MIN_SAMPLES", "ensure_min_samples", "fit_batch"]
