"""Run configuration schema and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from failure_model_engine.exceptions import ConfigurationError

OracleBackend = Literal["scipy", "rscript"]

ORACLE_BACKENDS = {"scipy", "rscript"}


@dataclass(slots=True)
class RunConfig:
    shift: float
    trials: int = 5
    seed: Optional[int] = None
    cutoff: float = 0.0001
    range_sigmas: float = 6.0
    tolerance: float = 0.001
    oracle_timeout: float = 30.0
    oracle_backend: OracleBackend = "scipy"
    chart_path: Optional[Path] = None
    chart_step: float = 1.0
    combine_pvalues: bool = False
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.binning_interval < 1:
            raise ConfigurationError(
                f"shift {self.shift} gives a binning interval below 1; use |shift| >= 0.25"
            )
        if self.trials < 0:
            raise ConfigurationError("trials must be >= 0")
        if not 0.0 < self.cutoff < 1.0:
            raise ConfigurationError("cutoff must lie in (0, 1)")
        if self.range_sigmas <= 0:
            raise ConfigurationError("range_sigmas must be positive")
        if self.tolerance <= 0:
            raise ConfigurationError("tolerance must be positive")
        if self.oracle_timeout <= 0:
            raise ConfigurationError("oracle_timeout must be positive")
        if self.oracle_backend not in ORACLE_BACKENDS:
            raise ConfigurationError(f"invalid oracle_backend: {self.oracle_backend}")
        if self.chart_step <= 0:
            raise ConfigurationError("chart_step must be positive")
        if self.max_workers <= 0:
            raise ConfigurationError("max_workers must be positive")

    @property
    def binning_interval(self) -> int:
        """Width of every frequency bin, derived as 2*|shift| rounded to an integer."""
        return int(round(2 * abs(self.shift)))

    @classmethod
    def from_dict(cls, data: dict) -> "RunConfig":
        data = dict(data)
        if data.get("chart_path") is not None:
            data["chart_path"] = Path(data["chart_path"])
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"invalid run configuration: {exc}") from exc

    def to_dict(self) -> dict:
        return {
            "shift": self.shift,
            "trials": self.trials,
            "seed": self.seed,
            "cutoff": self.cutoff,
            "range_sigmas": self.range_sigmas,
            "tolerance": self.tolerance,
            "oracle_timeout": self.oracle_timeout,
            "oracle_backend": self.oracle_backend,
            "chart_path": str(self.chart_path) if self.chart_path is not None else None,
            "chart_step": self.chart_step,
            "combine_pvalues": self.combine_pvalues,
            "max_workers": self.max_workers,
        }
