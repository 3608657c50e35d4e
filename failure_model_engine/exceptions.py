"""Project-wide exception types."""

class FailureModelError(Exception):
    """Base exception for all engine errors."""


class ConfigurationError(FailureModelError):
    """Raised when the invocation or configuration is missing or malformed."""


class InsufficientSamplesError(FailureModelError):
    """Raised when a measurement batch has fewer than two samples."""


class DegenerateDistributionError(FailureModelError):
    """Raised when a batch has zero variance and no Gaussian can be fitted."""


class InvalidPValueError(FailureModelError):
    """Raised when a p-value cannot take part in Fisher's method."""


class OracleUnavailableError(FailureModelError):
    """Raised when an external statistical or charting tool cannot be used."""
