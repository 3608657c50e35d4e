"""Human-readable report of fitted batches and the comparison verdict."""

from __future__ import annotations

import io
from typing import Optional

from rich.console import Console
from rich.table import Table

from failure_model_engine.simulation.pipeline import AnalysisResult, BatchAnalysis


def _format_pvalues(analysis: BatchAnalysis) -> str:
    if not analysis.pvalues.values:
        return "none (no trial produced a verdict)"
    return ", ".join(f"{p:.4f}" for p in analysis.pvalues.values)


def _batch_table(analysis: BatchAnalysis) -> Table:
    table = Table(title=f"{analysis.batch.label}: failure probability")
    table.add_column("Frequency", justify="right")
    table.add_column("Failure %", justify="right")
    for row in analysis.cumulative:
        table.add_row(f"{row.frequency}", f"{row.failure_pct:.2f}%")
    return table


def print_report(result: AnalysisResult, console: Optional[Console] = None) -> None:
    console = console or Console()
    cfg = result.config
    console.print(
        f"[bold]Binning interval:[/bold] {cfg.binning_interval} (shift {cfg.shift:g}), "
        f"{len(result.batches)} batch(es)"
    )
    for analysis in result.batches:
        dist = analysis.distribution
        console.print()
        console.print(
            f"[bold cyan]{analysis.batch.label}[/bold cyan] n={dist.n} "
            f"mean={dist.mean:.3f} variance={dist.variance:.3f} stddev={dist.stddev:.3f}"
        )
        console.print(
            f"Normality p-values ({len(analysis.pvalues)}/{analysis.pvalues.trials} trials): "
            f"{_format_pvalues(analysis)}"
        )
        if cfg.combine_pvalues:
            combined = analysis.combined_pvalue
            console.print(
                "Fisher combined p-value: " + (f"{combined:.4f}" if combined is not None else "no verdict")
            )
        console.print(_batch_table(analysis))

    verdict = result.verdict
    console.print()
    console.print(
        f"[bold]Goodness of fit[/bold] (training {verdict.training_index + 1}, "
        f"validation {verdict.validation_index + 1}, {len(verdict.aligned)} bins):"
    )
    console.print(verdict.text, markup=False)
    if result.chart_path is not None:
        console.print(f"Chart written to {result.chart_path}", markup=False)


def render_report(result: AnalysisResult, width: int = 100) -> str:
    """Plain-text rendering of the report."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    print_report(result, console)
    return buffer.getvalue()


__all__ = ["print_report", "render_report"]
