import logging

import pytest
from typer.testing import CliRunner

from failure_model_engine.cli.errors import EXIT_CODES, exit_code_for
from failure_model_engine.cli.main import app
from failure_model_engine.exceptions import (
    ConfigurationError,
    DegenerateDistributionError,
    InsufficientSamplesError,
    InvalidPValueError,
    OracleUnavailableError,
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.getLogger().handlers.clear()


def test_analyze_two_batches_reports_verdict() -> None:
    result = runner.invoke(app, ["analyze", "12", "672 696, 648 648 672", "--seed", "3", "--combine"])
    assert result.exit_code == 0, result.output
    assert "batch 1" in result.output
    assert "batch 2" in result.output
    assert "Failure %" in result.output
    assert "Fisher combined p-value" in result.output
    assert "Goodness of fit" in result.output
    assert "Exact multinomial test" in result.output


def test_analyze_reads_input_file(tmp_path) -> None:
    path = tmp_path / "lots.txt"
    path.write_text("672 696\n648 648 672\n")
    result = runner.invoke(app, ["analyze", "12", "--input", str(path), "--trials", "2"])
    assert result.exit_code == 0, result.output
    assert "batch 2" in result.output


def test_env_overrides_default_trials(monkeypatch) -> None:
    monkeypatch.setenv("FME_TRIALS", "0")
    result = runner.invoke(app, ["analyze", "12", "672 696 720"])
    assert result.exit_code == 0, result.output
    assert "0/0 trials" in result.output


@pytest.mark.parametrize(
    "args,code",
    [
        (["analyze", "12", "672"], 3),
        (["analyze", "12", "672 672 672"], 4),
        (["analyze"], 2),
        (["analyze", "12"], 1),
        (["analyze", "12", "672 abc"], 1),
        (["analyze", "0.1", "672 696"], 1),
        (["analyze", "12", "672 696", "--oracle", "sas"], 1),
    ],
)
def test_errors_map_to_exit_codes(args, code) -> None:
    result = runner.invoke(app, args)
    assert result.exit_code == code


def test_exit_code_table() -> None:
    assert exit_code_for(ConfigurationError("x")) == 1
    assert exit_code_for(InsufficientSamplesError("x")) == 3
    assert exit_code_for(DegenerateDistributionError("x")) == 4
    assert exit_code_for(OracleUnavailableError("x")) == 5
    assert exit_code_for(InvalidPValueError("x")) == 6
    assert exit_code_for(RuntimeError("x")) == 255
    assert 2 not in {code for _, code in EXIT_CODES}
