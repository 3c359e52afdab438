"""Exceptions raised by the indicator library.

Only :func:`indicators.core.moving_average` raises; every other indicator
reports degenerate input through NaN / Infinity values in its output.
"""

from __future__ import annotations


class IndicatorError(Exception):
    """Base class for indicator library errors."""


class InsufficientDataError(IndicatorError, ValueError):
    """Raised when fewer data points are supplied than the window needs."""
