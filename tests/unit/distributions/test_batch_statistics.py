import math

import pytest

from failure_model_engine.distributions.batch_statistics import fit_batch
from failure_model_engine.distributions.models import MeasurementBatch
from failure_model_engine.exceptions import DegenerateDistributionError, InsufficientSamplesError


def test_fit_batch_uses_bessel_correction() -> None:
    dist = fit_batch(MeasurementBatch(index=0, samples=(1.0, 2.0, 3.0)))
    assert dist.mean == pytest.approx(2.0)
    assert dist.variance == pytest.approx(1.0)
    assert dist.stddev == pytest.approx(1.0)
    assert dist.n == 3


def test_fit_batch_two_point_sample() -> None:
    dist = fit_batch(MeasurementBatch(index=0, samples=(684.0, 708.0)))
    assert dist.mean == pytest.approx(696.0)
    assert dist.stddev == pytest.approx(math.sqrt(288.0))


def test_single_sample_batch_is_rejected() -> None:
    with pytest.raises(InsufficientSamplesError):
        fit_batch(MeasurementBatch(index=0, samples=(684.0,)))


def test_identical_samples_are_degenerate() -> None:
    with pytest.raises(DegenerateDistributionError):
        fit_batch(MeasurementBatch(index=2, samples=(660.0, 660.0, 660.0)))
