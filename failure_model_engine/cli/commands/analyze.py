"""Analyze CLI command wiring."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from failure_model_engine.cli.errors import USAGE, exit_code_for
from failure_model_engine.config.loader import load_config_with_precedence
from failure_model_engine.data.measurements import load_payload, parse_measurements
from failure_model_engine.exceptions import ConfigurationError, FailureModelError
from failure_model_engine.reporting.report import print_report
from failure_model_engine.schema.run_config import RunConfig
from failure_model_engine.simulation.pipeline import run_analysis
from failure_model_engine.utils.logging import configure_logging, get_logger

log = get_logger(__name__, component="cli_analyze")

_DEFAULTS = {
    "trials": 5,
    "seed": None,
    "cutoff": 0.0001,
    "range_sigmas": 6.0,
    "tolerance": 0.001,
    "oracle_timeout": 30.0,
    "oracle_backend": "scipy",
    "chart_path": None,
    "chart_step": 1.0,
    "combine_pvalues": False,
    "max_workers": 1,
}

_CASTERS = {
    "trials": int,
    "seed": int,
    "cutoff": float,
    "range_sigmas": float,
    "tolerance": float,
    "oracle_timeout": float,
    "oracle_backend": str,
    "chart_path": str,
    "chart_step": float,
    "combine_pvalues": lambda v: v if isinstance(v, bool) else str(v).lower() in {"1", "true", "yes", "on"},
    "max_workers": int,
}


def _resolve_payload(measurements: Optional[str], input_file: Optional[Path]) -> str:
    if measurements and input_file:
        raise ConfigurationError("give measurements either inline or with --input, not both")
    if input_file is not None:
        return load_payload(input_file)
    if not measurements:
        raise ConfigurationError("no measurements supplied")
    return measurements


def analyze(
    shift: float = typer.Argument(..., help="Frequency shift applied to every reading; bin width is 2*|shift|"),
    measurements: Optional[str] = typer.Argument(
        None, help="Comma-separated groups of whitespace-separated readings"
    ),
    input_file: Optional[Path] = typer.Option(None, "--input", help="Read measurement groups from a file"),
    trials: Optional[int] = typer.Option(None, help="Normality trials per batch"),
    seed: Optional[int] = typer.Option(None, help="Random seed for dequantization"),
    combine: Optional[bool] = typer.Option(
        None, "--combine/--no-combine", help="Report Fisher-combined normality p-values"
    ),
    oracle: Optional[str] = typer.Option(None, "--oracle", help="Oracle backend: scipy or rscript"),
    oracle_timeout: Optional[float] = typer.Option(None, "--oracle-timeout", help="Seconds to wait per oracle call"),
    chart: Optional[Path] = typer.Option(None, "--chart", help="Render a failure chart to this image path"),
    chart_step: Optional[float] = typer.Option(None, "--chart-step", help="Frequency step of chart samples"),
    max_workers: Optional[int] = typer.Option(None, "--max-workers", help="Batches analyzed in parallel"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Fit failure models per batch and check they generalize across batches."""

    configure_logging(component="cli", level=logging.DEBUG if verbose else logging.INFO)
    cli_values = {
        "trials": trials,
        "seed": seed,
        "oracle_timeout": oracle_timeout,
        "oracle_backend": oracle,
        "chart_path": str(chart) if chart else None,
        "chart_step": chart_step,
        "combine_pvalues": combine,
        "max_workers": max_workers,
    }
    try:
        cfg = load_config_with_precedence(
            config_path=config,
            env_prefix="FME_",
            cli_values=cli_values,
            defaults=_DEFAULTS,
            casters=_CASTERS,
        )
        run_config = RunConfig.from_dict({"shift": shift, **cfg})
        batches = parse_measurements(_resolve_payload(measurements, input_file), shift)
        result = run_analysis(run_config, batches)
    except FailureModelError as exc:
        code = exit_code_for(exc)
        log.error(str(exc), extra={"error_type": type(exc).__name__})
        typer.echo(f"Error: {exc}", err=True)
        if isinstance(exc, ConfigurationError):
            typer.echo(USAGE, err=True)
        raise typer.Exit(code=code)

    print_report(result)
