"""Failure probability modelling for quantized pass/fail hardware measurements."""

__version__ = "0.1.0"
