"""Repeated dequantization trials feeding a normality oracle."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from failure_model_engine.distributions.dequantize import Dequantizer
from failure_model_engine.distributions.models import FittedDistribution, MeasurementBatch, PValueSet
from failure_model_engine.oracles.base import NormalityOracle
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="normality")

DEFAULT_TRIALS = 5


class NormalityEvaluator:
    """Collect normality p-values over independently dequantized copies of a batch."""

    def __init__(self, dequantizer: Dequantizer, oracle: NormalityOracle, trials: int = DEFAULT_TRIALS) -> None:
        self.dequantizer = dequantizer
        self.oracle = oracle
        self.trials = trials

    def run_trial(
        self, batch: MeasurementBatch, distribution: FittedDistribution, rng: np.random.Generator, trial: int = 0
    ) -> Optional[float]:
        samples = self.dequantizer.dequantize_batch(batch.samples, distribution, rng)
        result = self.oracle.test(samples)
        if not result.ok:
            log.warning(
                "Discarding normality trial",
                extra={"batch": batch.index, "trial": trial, "reason": result.reason},
            )
            return None
        return result.value

    def evaluate(
        self, batch: MeasurementBatch, distribution: FittedDistribution, rng: np.random.Generator
    ) -> PValueSet:
        outcomes: List[Optional[float]] = [
            self.run_trial(batch, distribution, rng, trial) for trial in range(self.trials)
        ]
        pvalues = PValueSet(
            batch_index=batch.index,
            values=[p for p in outcomes if p is not None],
            trials=self.trials,
        )
        log.info(
            "Normality trials complete",
            extra={"batch": batch.index, "kept": len(pvalues), "discarded": pvalues.discarded},
        )
        return pvalues


__all__ = ["DEFAULT_TRIALS", "NormalityEvaluator"]
