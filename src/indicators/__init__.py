"""Technical indicators module.

Pure-function implementations built on numpy and pandas.  Import individual
functions or use the module-level ``__all__`` for a convenient wildcard
import.  DataFrame adapters live in :mod:`indicators.frame`.
"""

from indicators.core import (
    bollinger_bands,
    calculate_ad,
    calculate_moving_average,
    calculate_moving_average_envelope,
    ema,
    macd,
    mad,
    moving_average,
    moving_average_envelope,
    rsi,
    simple_moving_average,
)
from indicators.errors import IndicatorError, InsufficientDataError
from indicators.models import (
    BollingerBand,
    Candle,
    CryptoDataPoint,
    Envelope,
    MacdPoint,
    PriceField,
)

__all__ = [
    "BollingerBand",
    "Candle",
    "CryptoDataPoint",
    "Envelope",
    "IndicatorError",
    "InsufficientDataError",
    "MacdPoint",
    "PriceField",
    "bollinger_bands",
    "calculate_ad",
    "calculate_moving_average",
    "calculate_moving_average_envelope",
    "ema",
    "macd",
    "mad",
    "moving_average",
    "moving_average_envelope",
    "rsi",
    "simple_moving_average",
]
