"""Statistical oracles consulted as black boxes."""

from failure_model_engine.oracles.base import (
    MultinomialOracle,
    NormalityOracle,
    OracleResult,
    StatisticalOracle,
)
from failure_model_engine.oracles.factory import get_oracles, oracle_factory

__all__ = [
    "MultinomialOracle",
    "NormalityOracle",
    "OracleResult",
    "StatisticalOracle",
    "get_oracles",
    "oracle_factory",
]
