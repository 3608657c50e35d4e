"""Factory for oracle backend pairs."""

from __future__ import annotations

from typing import Tuple

from failure_model_engine.config.factories import FactoryBase
from failure_model_engine.exceptions import ConfigurationError
from failure_model_engine.oracles.base import MultinomialOracle, NormalityOracle
from failure_model_engine.oracles.rscript import RscriptMultinomialOracle, RscriptNormalityOracle
from failure_model_engine.oracles.scipy_backend import ExactMultinomialOracle, ShapiroNormalityOracle

_BACKENDS = {
    "scipy": (ShapiroNormalityOracle, ExactMultinomialOracle),
    "rscript": (RscriptNormalityOracle, RscriptMultinomialOracle),
    "r": (RscriptNormalityOracle, RscriptMultinomialOracle),
}


def get_oracles(backend: str, timeout: float = 30.0) -> Tuple[NormalityOracle, MultinomialOracle]:
    normalized = backend.lower()
    classes = _BACKENDS.get(normalized)
    if classes is None:
        raise ConfigurationError(f"Unknown oracle backend: {backend}")
    normality_cls, multinomial_cls = classes
    return normality_cls(timeout=timeout), multinomial_cls(timeout=timeout)


def oracle_factory(backend: str, timeout: float = 30.0) -> FactoryBase:
    normalized = backend.lower()
    return FactoryBase(name=normalized, builder=lambda: get_oracles(normalized, timeout))


__all__ = ["get_oracles", "oracle_factory"]
