"""Train/validate goodness-of-fit comparison between measurement batches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from failure_model_engine.distributions.models import ProbabilityModel
from failure_model_engine.oracles.base import MultinomialOracle, OracleResult
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="goodness_of_fit")

DEFAULT_CUTOFF = 0.0001


@dataclass(frozen=True)
class AlignedBins:
    """Expected probabilities and observed counts ordered by bin frequency."""

    frequencies: Tuple[int, ...]
    expected: Tuple[float, ...]
    observed: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.frequencies)

    @property
    def total_observed(self) -> int:
        return int(sum(self.observed))


@dataclass(frozen=True)
class GoodnessOfFitVerdict:
    training_index: int
    validation_index: int
    aligned: AlignedBins
    result: OracleResult

    @property
    def available(self) -> bool:
        return self.result.ok

    @property
    def pvalue(self) -> Optional[float]:
        return self.result.value

    @property
    def text(self) -> str:
        if not self.available:
            return f"no verdict ({self.result.reason or 'oracle produced no result'})"
        return self.result.report or f"p-value = {self.result.value:.6g}"


class GoodnessOfFitComparator:
    """Check a validation batch's bin counts against a training batch's model."""

    def __init__(self, oracle: MultinomialOracle, cutoff: float = DEFAULT_CUTOFF) -> None:
        self.oracle = oracle
        self.cutoff = cutoff

    def align(self, training: ProbabilityModel, validation: ProbabilityModel) -> AlignedBins:
        combined: Dict[int, Tuple[float, int]] = {
            b.start: (b.probability, 0) for b in training if b.probability >= self.cutoff
        }
        for b in validation:
            probability = training.probability_at(b.start)
            if b.observed == 0 and probability < self.cutoff:
                continue
            combined[b.start] = (probability, b.observed)

        frequencies = tuple(sorted(combined))
        return AlignedBins(
            frequencies=frequencies,
            expected=tuple(combined[f][0] for f in frequencies),
            observed=tuple(combined[f][1] for f in frequencies),
        )

    def compare(self, training: ProbabilityModel, validation: ProbabilityModel) -> GoodnessOfFitVerdict:
        aligned = self.align(training, validation)
        if training.interval != validation.interval:
            log.warning(
                "Binning intervals differ between batches",
                extra={"training": training.interval, "validation": validation.interval},
            )
        result = self.oracle.test(np.asarray(aligned.observed), np.asarray(aligned.expected))
        verdict = GoodnessOfFitVerdict(
            training_index=training.batch_index,
            validation_index=validation.batch_index,
            aligned=aligned,
            result=result,
        )
        if verdict.available:
            log.info(
                "Goodness-of-fit verdict",
                extra={"bins": len(aligned), "observed": aligned.total_observed, "pvalue": verdict.pvalue},
            )
        else:
            log.warning("No goodness-of-fit verdict", extra={"reason": result.reason})
        return verdict


__all__ = ["AlignedBins", "DEFAULT_CUTOFF", "GoodnessOfFitComparator", "GoodnessOfFitVerdict"]
