import subprocess

import pytest

from failure_model_engine.oracles import rscript
from failure_model_engine.oracles.rscript import (
    RscriptMultinomialOracle,
    RscriptNormalityOracle,
    parse_multinomial_output,
    parse_shapiro_output,
)
from failure_model_engine.exceptions import OracleUnavailableError

SHAPIRO_TEXT = """
	Shapiro-Wilk normality test

data:  c(683.1, 701.2, 690.4)
W = 0.98123, p-value = 0.7421
"""

EMT_TEXT = """
 Exact Multinomial Test, distance measure: p

    Events    pObs    p.value
        56  0.0469     0.4375
"""


def test_parse_shapiro_output() -> None:
    result = parse_shapiro_output(SHAPIRO_TEXT)
    assert result.value == pytest.approx(0.7421)
    assert result.statistic == pytest.approx(0.98123)


def test_parse_shapiro_output_with_bound() -> None:
    result = parse_shapiro_output("W = 0.5, p-value < 2.2e-16")
    assert result.value == pytest.approx(2.2e-16)


def test_parse_multinomial_output() -> None:
    result = parse_multinomial_output(EMT_TEXT)
    assert result.value == pytest.approx(0.4375)
    assert result.statistic == pytest.approx(0.0469)
    assert "Exact Multinomial" in result.report


@pytest.mark.parametrize("parser", [parse_shapiro_output, parse_multinomial_output])
def test_garbage_output_is_unparseable(parser) -> None:
    with pytest.raises(OracleUnavailableError):
        parser("Error in library(EMT): there is no package called 'EMT'")


def test_missing_rscript_degrades_to_no_result(monkeypatch) -> None:
    monkeypatch.setattr(rscript.shutil, "which", lambda _: None)
    result = RscriptNormalityOracle().test([1.0, 2.0, 4.0])
    assert not result.ok
    assert "not found" in result.reason
    assert not RscriptMultinomialOracle().test([1, 2], [0.5, 0.5]).ok


def test_rscript_timeout_degrades_to_no_result(monkeypatch) -> None:
    monkeypatch.setattr(rscript.shutil, "which", lambda _: "/usr/bin/Rscript")

    def _timeout(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr(rscript.subprocess, "run", _timeout)
    result = RscriptNormalityOracle(timeout=2.0).test([1.0, 2.0, 4.0])
    assert not result.ok
    assert "timed out" in result.reason


def test_rscript_output_is_parsed(monkeypatch) -> None:
    monkeypatch.setattr(rscript.shutil, "which", lambda _: "/usr/bin/Rscript")
    seen = {}

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        return subprocess.CompletedProcess(cmd, 0, stdout=EMT_TEXT, stderr="")

    monkeypatch.setattr(rscript.subprocess, "run", _run)
    result = RscriptMultinomialOracle().test([1, 2, 0], [0.2, 0.6, 0.2])
    assert result.value == pytest.approx(0.4375)
    assert "multinomial.test" in seen["cmd"][-1]
