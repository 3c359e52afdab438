"""Value types consumed and produced by the indicator functions.

All records are immutable and owned by the caller; the indicator functions
only read them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import numpy as np

# Unit of numeric bar timestamps (Unix epoch milliseconds), as exchanges report them.
EPOCH_UNIT = "ms"


@dataclass(frozen=True)
class Candle:
    """One OHLCV bar."""

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class CryptoDataPoint:
    """Bar shape read by the Accumulation/Distribution line.

    Attributes:
        timestamp: Bar open time in :data:`EPOCH_UNIT` (epoch milliseconds).
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price.
        volume: Traded volume.
    """

    timestamp: int
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class MacdPoint:
    """A MACD line value paired with the candle it lines up with.

    ``candle`` is ``None`` when the EMA offset points outside the candle list.
    """

    candle: Optional[Candle]
    macd_line: float


class PriceField(Enum):
    """Scalar candle fields an EMA can be computed over."""

    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"

    @property
    def accessor(self) -> Callable[[Candle], float]:
        """Return a callable reading this field from a :class:`Candle`."""
        return _FIELD_ACCESSORS[self]


_FIELD_ACCESSORS: dict[PriceField, Callable[[Candle], float]] = {
    PriceField.OPEN: lambda c: c.open,
    PriceField.HIGH: lambda c: c.high,
    PriceField.LOW: lambda c: c.low,
    PriceField.CLOSE: lambda c: c.close,
    PriceField.VOLUME: lambda c: c.volume,
}


def macd_line_of(point: MacdPoint) -> float:
    """Accessor selecting the MACD line value of a :class:`MacdPoint`."""
    return point.macd_line


@dataclass(frozen=True)
class Envelope:
    """Upper and lower moving average envelope."""

    upper_envelope: np.ndarray
    lower_envelope: np.ndarray


@dataclass(frozen=True)
class BollingerBand:
    """Bollinger Band values for a single bar.

    All three fields are NaN while the lookback window is still filling.
    """

    upper_band: float
    middle_band: float
    lower_band: float
