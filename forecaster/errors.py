"""
Errors raised by the bias forecaster.

Both kinds are contract violations by the caller; nothing here is transient
and nothing is retried.
"""

from __future__ import annotations


class ForecastError(ValueError):
    """Base class for every forecaster failure."""


class InvalidInputError(ForecastError):
    """A bar field is missing, non-numeric, non-finite or out of range."""

    def __init__(self, message: str, bar: str = "", field: str = "", value=None):
        super().__init__(message)
        self.bar = bar
        self.field = field
        self.value = value


class DegenerateRangeError(ForecastError):
    """A zero-range bar reached the candle classifier."""
