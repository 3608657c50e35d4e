import math

import numpy as np
import pytest

from failure_model_engine.distributions.batch_statistics import fit_batch
from failure_model_engine.distributions.models import FittedDistribution, MeasurementBatch
from failure_model_engine.modeling.probability_model import ProbabilityModelBuilder

BATCH_A = MeasurementBatch(index=0, samples=(684.0, 708.0))


@pytest.fixture
def scenario_a():
    dist = fit_batch(BATCH_A)
    builder = ProbabilityModelBuilder(24)
    return builder, dist, builder.build(BATCH_A, dist)


def test_range_snaps_six_sigma_to_bin_edges(scenario_a) -> None:
    builder, dist, model = scenario_a
    assert builder.bounds(dist) == (600, 792)
    assert list(model.frequencies) == list(range(600, 793, 24))
    assert model.start == 600
    assert model.stop == 816


def test_probability_mass_is_symmetric_about_mean(scenario_a) -> None:
    _, _, model = scenario_a
    for k in range(4):
        assert model.probability_at(696 + 24 * k) == pytest.approx(model.probability_at(672 - 24 * k), abs=1e-12)
    assert model.probabilities.sum() == pytest.approx(1.0, abs=1e-6)
    assert model.probability_at(12345) == 0.0


def test_observed_counts_use_half_open_bins(scenario_a) -> None:
    _, _, model = scenario_a
    counts = model.to_dict()
    assert counts[672][1] == 1
    assert counts[696][1] == 1
    assert int(model.observed.sum()) == 2

    batch = MeasurementBatch(index=1, samples=(695.999, 696.0, 719.5, 720.0))
    dist = fit_batch(batch)
    other = ProbabilityModelBuilder(24).build(batch, dist).to_dict()
    assert other[672][1] == 1
    assert other[696][1] == 2
    assert other[720][1] == 1


def test_narrow_distribution_gives_single_bin() -> None:
    dist = FittedDistribution(mean=700.0, variance=1.0, stddev=1.0, n=3)
    model = ProbabilityModelBuilder(24).build(MeasurementBatch(index=0, samples=(699.0, 700.0, 701.0)), dist)
    assert len(model) == 1
    assert model.bins[0].start == 696
    assert model.bins[0].observed == 3


def test_cumulative_table_covers_transition_region(scenario_a) -> None:
    builder, dist, model = scenario_a
    rows = builder.cumulative_table(dist, model)
    assert [r.frequency for r in rows] == [624, 648, 672, 696, 720, 744]
    assert rows[0].failure_pct < 0.01
    assert rows[3].failure_pct == pytest.approx(50.0)
    assert rows[-1].failure_pct >= 99.0
    assert all(r.failure_pct < 99.0 for r in rows[:-1])
    pct = np.array([r.failure_pct for r in rows])
    assert np.all(np.diff(pct) > 0)


def test_to_frame_columns(scenario_a) -> None:
    _, _, model = scenario_a
    frame = model.to_frame()
    assert list(frame.columns) == ["frequency", "probability", "observed"]
    assert len(frame) == 9
    assert math.isclose(frame["probability"].sum(), 1.0, abs_tol=1e-6)
