import numpy as np
import pytest

from failure_model_engine.distributions.models import Bin, ProbabilityModel
from failure_model_engine.evaluation.goodness_of_fit import GoodnessOfFitComparator
from failure_model_engine.exceptions import OracleUnavailableError
from failure_model_engine.oracles.base import MultinomialOracle, OracleResult
from failure_model_engine.oracles.scipy_backend import ExactMultinomialOracle


class RecordingOracle(MultinomialOracle):
    name = "recording"

    def __init__(self, value: float = 0.5) -> None:
        super().__init__(timeout=5.0)
        self.value = value
        self.calls = []

    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        self.calls.append((observed.tolist(), expected.tolist()))
        return OracleResult(value=self.value, report=f"stub p-value = {self.value}")


class MissingOracle(MultinomialOracle):
    name = "missing"

    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        raise OracleUnavailableError("tool not installed")


def _model(index: int, rows) -> ProbabilityModel:
    return ProbabilityModel(
        batch_index=index,
        interval=24,
        bins=tuple(Bin(start=f, width=24, probability=p, observed=c) for f, p, c in rows),
    )


TRAINING = _model(
    0,
    [
        (600, 0.00001, 0),
        (624, 0.1, 1),
        (648, 0.4, 3),
        (672, 0.4, 0),
        (696, 0.09999, 2),
        (720, 0.00000001, 0),
    ],
)


def test_align_merges_training_and_validation_bins() -> None:
    validation = _model(
        1,
        [
            (576, 0.001, 0),  # no information: unseen and absent from training
            (600, 0.01, 1),  # observed although training gives sub-cutoff mass
            (648, 0.5, 4),
            (672, 0.3, 0),
            (744, 0.001, 2),  # outside training entirely
        ],
    )
    aligned = GoodnessOfFitComparator(RecordingOracle()).align(TRAINING, validation)
    assert aligned.frequencies == (600, 624, 648, 672, 696, 744)
    assert aligned.expected == pytest.approx((0.00001, 0.1, 0.4, 0.4, 0.09999, 0.0))
    assert aligned.observed == (1, 0, 4, 0, 0, 2)
    assert aligned.total_observed == 7


def test_no_bin_with_observations_is_dropped() -> None:
    validation = _model(1, [(f, 0.0, 1) for f in range(480, 840, 24)])
    aligned = GoodnessOfFitComparator(RecordingOracle()).align(TRAINING, validation)
    assert aligned.total_observed == len(range(480, 840, 24))
    assert list(aligned.frequencies) == sorted(aligned.frequencies)


def test_compare_submits_aligned_vectors() -> None:
    oracle = RecordingOracle(0.8)
    verdict = GoodnessOfFitComparator(oracle).compare(TRAINING, TRAINING)
    observed, expected = oracle.calls[0]
    assert observed == [1, 3, 0, 2]
    assert expected == pytest.approx([0.1, 0.4, 0.4, 0.09999])
    assert verdict.available
    assert verdict.pvalue == 0.8
    assert verdict.training_index == verdict.validation_index == 0
    assert "stub" in verdict.text


def test_missing_oracle_means_no_verdict() -> None:
    verdict = GoodnessOfFitComparator(MissingOracle()).compare(TRAINING, TRAINING)
    assert not verdict.available
    assert verdict.pvalue is None
    assert verdict.text.startswith("no verdict")
    assert "tool not installed" in verdict.text


def test_counts_matching_training_probabilities_do_not_reject() -> None:
    training = _model(0, [(0, 0.25, 0), (24, 0.5, 0), (48, 0.25, 0)])
    validation = _model(1, [(0, 0.2, 2), (24, 0.5, 4), (48, 0.3, 2)])
    verdict = GoodnessOfFitComparator(ExactMultinomialOracle()).compare(training, validation)
    assert verdict.available
    assert verdict.pvalue == pytest.approx(1.0)


def test_counts_far_from_training_probabilities_reject() -> None:
    training = _model(0, [(0, 0.25, 0), (24, 0.5, 0), (48, 0.25, 0)])
    validation = _model(1, [(0, 0.9, 4), (24, 0.1, 0)])
    verdict = GoodnessOfFitComparator(ExactMultinomialOracle()).compare(training, validation)
    assert verdict.available
    assert verdict.pvalue == pytest.approx(2 * 0.25 ** 4)


class CrashingOracle(MultinomialOracle):
    name = "crashing"

    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        raise RuntimeError("backend blew up")


def test_crashing_oracle_means_no_verdict() -> None:
    verdict = GoodnessOfFitComparator(CrashingOracle()).compare(TRAINING, TRAINING)
    assert not verdict.available
    assert "RuntimeError: backend blew up" in verdict.text
