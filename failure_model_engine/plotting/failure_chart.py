"""Failure-probability chart data and rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from failure_model_engine.distributions.models import FittedDistribution, ProbabilityModel
from failure_model_engine.exceptions import OracleUnavailableError
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="failure_chart")


def chart_series(
    distribution: FittedDistribution, model: ProbabilityModel, step: float = 1.0, label: str | None = None
) -> pd.DataFrame:
    """Sample (frequency, failure %) at fixed steps across the model's range."""
    frequencies = np.arange(model.start, model.stop + step / 2, step, dtype=float)
    return pd.DataFrame(
        {
            "batch": label or f"batch {model.batch_index + 1}",
            "frequency": frequencies,
            "failure_pct": 100.0 * distribution.cdf(frequencies),
        }
    )


def write_chart_data(series: Sequence[pd.DataFrame], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.concat(series, ignore_index=True).to_csv(path, index=False)
    return path


def _pyplot():
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as exc:
        raise OracleUnavailableError("matplotlib is required to render failure charts") from exc
    return plt


def render_failure_chart(series: Sequence[pd.DataFrame], output_path: Path, title: str = "Failure probability") -> Path:
    """Plot one cumulative failure curve per batch and save the figure.

    Writes the sampled data next to the image as ``<name>.csv``. Raises
    OracleUnavailableError when no plotting backend is available.
    """
    plt = _pyplot()
    data_path = write_chart_data(series, output_path.with_suffix(".csv"))

    fig, ax = plt.subplots(figsize=(10, 6))
    for frame in series:
        ax.plot(frame["frequency"], frame["failure_pct"], label=str(frame["batch"].iloc[0]))
    ax.set_title(title)
    ax.set_xlabel("Frequency")
    ax.set_ylabel("Failure probability (%)")
    ax.set_ylim(0, 100)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower right")
    fig.tight_layout()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=120)
    plt.close(fig)
    log.info("Chart written", extra={"path": str(output_path), "data": str(data_path)})
    return output_path


__all__ = ["chart_series", "render_failure_chart", "write_chart_data"]
