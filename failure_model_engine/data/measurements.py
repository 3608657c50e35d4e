"""Parsing of the comma-grouped measurement payload."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List

from failure_model_engine.distributions.models import MeasurementBatch
from failure_model_engine.exceptions import ConfigurationError


def parse_measurements(payload: str, shift: float) -> List[MeasurementBatch]:
    """Split ``payload`` into batches and apply ``shift`` to every reading.

    Groups are separated by commas, readings within a group by whitespace.
    """
    if payload is None or not payload.strip():
        raise ConfigurationError("no measurements supplied")

    batches: List[MeasurementBatch] = []
    for index, group in enumerate(payload.split(",")):
        tokens = group.split()
        if not tokens:
            raise ConfigurationError(f"measurement group {index + 1} is empty")
        try:
            values = tuple(float(tok) + shift for tok in tokens)
        except ValueError as exc:
            raise ConfigurationError(f"measurement group {index + 1}: {exc}") from exc
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"measurement group {index + 1} contains a non-finite value")
        batches.append(MeasurementBatch(index=index, samples=values))
    return batches


def load_payload(path: Path) -> str:
    """Read a payload file; each non-blank line is one more group."""
    if not path.exists():
        raise ConfigurationError(f"measurement file not found: {path}")
    lines = [line.strip().rstrip(",") for line in path.read_text().splitlines()]
    return ", ".join(line for line in lines if line and not line.startswith("#"))


__all__ = ["load_payload", "parse_measurements"]
