"""End-to-end analysis: per-batch fits and models, then the generalization check."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from failure_model_engine.distributions.batch_statistics import ensure_min_samples, fit_batch
from failure_model_engine.distributions.dequantize import Dequantizer
from failure_model_engine.distributions.models import (
    CumulativeRow,
    FittedDistribution,
    MeasurementBatch,
    PValueSet,
    ProbabilityModel,
)
from failure_model_engine.evaluation.goodness_of_fit import GoodnessOfFitComparator, GoodnessOfFitVerdict
from failure_model_engine.evaluation.normality import NormalityEvaluator
from failure_model_engine.exceptions import ConfigurationError
from failure_model_engine.modeling.probability_model import ProbabilityModelBuilder
from failure_model_engine.oracles.base import MultinomialOracle, NormalityOracle
from failure_model_engine.oracles.factory import oracle_factory
from failure_model_engine.plotting.failure_chart import chart_series, render_failure_chart
from failure_model_engine.schema.run_config import RunConfig
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="pipeline")


@dataclass
class BatchAnalysis:
    batch: MeasurementBatch
    distribution: FittedDistribution
    pvalues: PValueSet
    model: ProbabilityModel
    cumulative: List[CumulativeRow]
    combined_pvalue: Optional[float] = None


@dataclass
class AnalysisResult:
    config: RunConfig
    batches: List[BatchAnalysis]
    verdict: GoodnessOfFitVerdict
    chart_path: Optional[Path] = None
    duration_ms: float = 0.0


def _clamp_workers(max_workers: int, n_batches: int) -> int:
    return max(1, min(int(max_workers), n_batches))


class AnalysisPipeline:
    """Wire the per-batch stages and the comparator from a RunConfig."""

    def __init__(
        self,
        config: RunConfig,
        normality_oracle: Optional[NormalityOracle] = None,
        multinomial_oracle: Optional[MultinomialOracle] = None,
    ) -> None:
        if normality_oracle is None or multinomial_oracle is None:
            default_normality, default_multinomial = oracle_factory(config.oracle_backend, config.oracle_timeout).create()
            normality_oracle = normality_oracle or default_normality
            multinomial_oracle = multinomial_oracle or default_multinomial
        self.config = config
        self.dequantizer = Dequantizer(config.binning_interval, tolerance=config.tolerance)
        self.evaluator = NormalityEvaluator(self.dequantizer, normality_oracle, trials=config.trials)
        self.builder = ProbabilityModelBuilder(config.binning_interval, range_sigmas=config.range_sigmas)
        self.comparator = GoodnessOfFitComparator(multinomial_oracle, cutoff=config.cutoff)

    def analyze_batch(self, batch: MeasurementBatch, rng: np.random.Generator) -> BatchAnalysis:
        distribution = fit_batch(batch)
        pvalues = self.evaluator.evaluate(batch, distribution, rng)
        combined = None
        if self.config.combine_pvalues:
            combined = pvalues.combined()
        model = self.builder.build(batch, distribution)
        return BatchAnalysis(
            batch=batch,
            distribution=distribution,
            pvalues=pvalues,
            model=model,
            cumulative=self.builder.cumulative_table(distribution, model),
            combined_pvalue=combined,
        )

    def run(self, batches: Sequence[MeasurementBatch]) -> AnalysisResult:
        if not batches:
            raise ConfigurationError("at least one measurement batch is required")
        started = time.perf_counter()
        for batch in batches:
            ensure_min_samples(batch)

        # One independent stream per batch keeps results independent of scheduling.
        rngs = [np.random.default_rng(s) for s in np.random.SeedSequence(self.config.seed).spawn(len(batches))]

        workers = _clamp_workers(self.config.max_workers, len(batches))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                analyses = list(executor.map(self.analyze_batch, batches, rngs))
        else:
            analyses = [self.analyze_batch(batch, rng) for batch, rng in zip(batches, rngs)]

        training = analyses[0]
        validation = analyses[1] if len(analyses) > 1 else analyses[0]
        if len(analyses) > 2:
            log.info("Only the first two batches take part in the comparison", extra={"batches": len(analyses)})
        verdict = self.comparator.compare(training.model, validation.model)

        chart_path = None
        if self.config.chart_path is not None:
            series = [chart_series(a.distribution, a.model, self.config.chart_step, a.batch.label) for a in analyses]
            chart_path = render_failure_chart(series, self.config.chart_path)

        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        log.info("Analysis complete", extra={"batches": len(analyses), "duration_ms": duration_ms})
        return AnalysisResult(
            config=self.config,
            batches=analyses,
            verdict=verdict,
            chart_path=chart_path,
            duration_ms=duration_ms,
        )


def run_analysis(
    config: RunConfig,
    batches: Sequence[MeasurementBatch],
    normality_oracle: Optional[NormalityOracle] = None,
    multinomial_oracle: Optional[MultinomialOracle] = None,
) -> AnalysisResult:
    return AnalysisPipeline(config, normality_oracle, multinomial_oracle).run(batches)


__all__ = ["AnalysisPipeline", "AnalysisResult", "BatchAnalysis", "run_analysis"]
