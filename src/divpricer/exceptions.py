"""Exception hierarchy.

Precondition violations surface immediately and are never retried: every
computation in the package is deterministic, so a retry cannot change the
outcome.
"""

from __future__ import annotations

__all__ = ["DivPricerError", "InvalidInputError", "GridConfigurationError"]


class DivPricerError(Exception):
    """Base class for all package errors."""


class InvalidInputError(DivPricerError, ValueError):
    """Non-positive volatility, maturity or strike, or otherwise unusable inputs."""


class GridConfigurationError(DivPricerError, ValueError):
    """Sweep configuration that cannot be laid out (e.g. a dividend past maturity)."""
