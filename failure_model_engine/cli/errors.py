"""Exit codes for the error taxonomy."""

from __future__ import annotations

from failure_model_engine.exceptions import (
    ConfigurationError,
    DegenerateDistributionError,
    InsufficientSamplesError,
    InvalidPValueError,
    OracleUnavailableError,
)

# 2 is left to click for usage errors.
EXIT_CODES = (
    (ConfigurationError, 1),
    (InsufficientSamplesError, 3),
    (DegenerateDistributionError, 4),
    (OracleUnavailableError, 5),
    (InvalidPValueError, 6),
)

USAGE = 'Usage: fme analyze SHIFT "V1 V2 ..., V1 V2 ..." [OPTIONS]  (or --input FILE; use -- before a negative SHIFT)'


def exit_code_for(exc: Exception) -> int:
    for exc_type, code in EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return 255


__all__ = ["EXIT_CODES", "USAGE", "exit_code_for"]
