"""Typer CLI entrypoint with structured error handling."""

from __future__ import annotations

import sys

import typer

from failure_model_engine.cli.commands.analyze import analyze
from failure_model_engine.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Failure probability model CLI")


@app.callback()
def _root() -> None:
    """Failure probability modelling for quantized pass/fail measurements."""


app.command()(analyze)


log = get_logger(__name__, component="cli")


def main() -> None:
    configure_logging(component="cli")
    try:
        app()
    except KeyboardInterrupt:
        log.info("Interrupted")
        sys.exit(130)
    except Exception:
        log.exception("Unhandled exception")
        sys.exit(255)


if __name__ == "__main__":
    # Use sys.exit to ensure proper exit code propagation under raw python invocation
    sys.exit(main())
