"""Oracle backends that shell out to R via Rscript."""

from __future__ import annotations

import re
import shutil
import subprocess
from typing import Sequence

import numpy as np

from failure_model_engine.exceptions import OracleUnavailableError
from failure_model_engine.oracles.base import MultinomialOracle, NormalityOracle, OracleResult

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_SHAPIRO_RE = re.compile(rf"W\s*=\s*({_NUMBER}),\s*p-value\s*[=<]\s*({_NUMBER})")


def _r_vector(values: Sequence[float]) -> str:
    return "c(" + ", ".join(repr(float(v)) for v in values) + ")"


def run_rscript(expression: str, timeout: float, executable: str = "Rscript") -> str:
    """Evaluate an R expression and return its stdout."""
    exe = shutil.which(executable)
    if exe is None:
        raise OracleUnavailableError(f"{executable} not found on PATH")
    try:
        proc = subprocess.run(
            [exe, "--vanilla", "-e", expression],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise OracleUnavailableError(f"{executable} timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise OracleUnavailableError(f"{executable} could not be started: {exc}") from exc
    if proc.returncode != 0:
        raise OracleUnavailableError(
            f"{executable} exited with {proc.returncode}: {proc.stderr.strip()[:200]}"
        )
    return proc.stdout


def parse_shapiro_output(text: str) -> OracleResult:
    match = _SHAPIRO_RE.search(text)
    if match is None:
        raise OracleUnavailableError("could not parse shapiro.test output")
    return OracleResult(value=float(match.group(2)), statistic=float(match.group(1)), report=text.strip())


def parse_multinomial_output(text: str) -> OracleResult:
    """Parse the ``Events pObs p.value`` table printed by EMT::multinomial.test."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for idx, line in enumerate(lines):
        if "p.value" in line and idx + 1 < len(lines):
            numbers = re.findall(_NUMBER, lines[idx + 1])
            if len(numbers) >= 3:
                return OracleResult(
                    value=float(numbers[-1]),
                    statistic=float(numbers[-2]),
                    report=text.strip(),
                )
    raise OracleUnavailableError("could not parse multinomial.test output")


class RscriptNormalityOracle(NormalityOracle):
    name = "rscript_shapiro"

    def _test(self, samples: np.ndarray) -> OracleResult:
        text = run_rscript(f"shapiro.test({_r_vector(samples)})", self.timeout)
        return parse_shapiro_output(text)


class RscriptMultinomialOracle(MultinomialOracle):
    name = "rscript_multinomial"

    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        probs = expected / expected.sum() if expected.sum() > 0 else expected
        expression = (
            "suppressMessages(library(EMT)); "
            f"multinomial.test({_r_vector(observed.astype(int))}, {_r_vector(probs)})"
        )
        text = run_rscript(expression, self.timeout)
        return parse_multinomial_output(text)


__all__ = [
    "RscriptMultinomialOracle",
    "RscriptNormalityOracle",
    "parse_multinomial_output",
    "parse_shapiro_output",
    "run_rscript",
]
