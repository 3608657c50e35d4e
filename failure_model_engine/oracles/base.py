"""Oracle interfaces for out-of-process statistical computations."""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from failure_model_engine.exceptions import OracleUnavailableError
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="oracle")


@dataclass(frozen=True)
class OracleResult:
    """Structured oracle outcome: a p-value, or no result with a reason."""

    value: Optional[float] = None
    statistic: Optional[float] = None
    report: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def no_result(cls, reason: str) -> "OracleResult":
        return cls(reason=reason)


def run_bounded(fn: Callable[..., OracleResult], timeout: float, *args: Any) -> OracleResult:
    """Run ``fn`` and wait at most ``timeout`` seconds for its result.

    A call that times out is abandoned, not killed: its worker thread keeps
    running and the interpreter still joins it at exit, so an in-process
    backend that never returns delays shutdown. Subprocess backends pass
    their own timeout to ``subprocess.run`` and are terminated instead.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn, *args)
    try:
        return future.result(timeout=timeout)
    except FuturesTimeout as exc:
        raise OracleUnavailableError(f"oracle did not answer within {timeout:g}s") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


class StatisticalOracle(ABC):
    """Base class: subclasses compute, the base bounds the wait and absorbs failures."""

    name: str = "oracle"

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    def _guarded(self, fn: Callable[..., OracleResult], *args: Any) -> OracleResult:
        started = time.perf_counter()
        try:
            result = run_bounded(fn, self.timeout, *args)
        except OracleUnavailableError as exc:
            log.warning(
                "Oracle produced no result",
                extra={"oracle": self.name, "error": str(exc)},
            )
            return OracleResult.no_result(str(exc))
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Oracle failed",
                extra={"oracle": self.name, "error": str(exc)},
                exc_info=True,
            )
            return OracleResult.no_result(f"{type(exc).__name__}: {exc}")
        if result.value is not None and not math.isfinite(result.value):
            log.warning("Oracle returned a non-finite p-value", extra={"oracle": self.name})
            return OracleResult.no_result(f"non-finite p-value {result.value}")
        log.debug(
            "Oracle answered",
            extra={"oracle": self.name, "duration_ms": round((time.perf_counter() - started) * 1000, 3)},
        )
        return result


class NormalityOracle(StatisticalOracle):
    """Judge whether continuous samples are plausibly Gaussian."""

    def test(self, samples: Sequence[float]) -> OracleResult:
        return self._guarded(self._test, np.asarray(samples, dtype=float))

    @abstractmethod
    def _test(self, samples: np.ndarray) -> OracleResult:
        """Return the normality p-value or raise OracleUnavailableError."""


class MultinomialOracle(StatisticalOracle):
    """Judge whether observed counts are a plausible draw from expected probabilities."""

    def test(self, observed: Sequence[int], expected: Sequence[float]) -> OracleResult:
        obs = np.asarray(observed, dtype=int)
        probs = np.asarray(expected, dtype=float)
        if obs.shape != probs.shape:
            return OracleResult.no_result(
                f"observed and expected lengths differ ({obs.size} vs {probs.size})"
            )
        return self._guarded(self._test, obs, probs)

    @abstractmethod
    def _test(self, observed: np.ndarray, expected: np.ndarray) -> OracleResult:
        """Return the goodness-of-fit p-value or raise OracleUnavailableError."""


__all__ = [
    "MultinomialOracle",
    "NormalityOracle",
    "OracleResult",
    "StatisticalOracle",
    "run_bounded",
]
