"""pandas adapters for the indicator functions.

Converts OHLCV DataFrames to the record types the core expects and lines the
suffix-aligned core outputs back up with the DataFrame index.  Adapters are
looked up by name via :func:`get_indicator`, or iterate
:data:`INDICATOR_REGISTRY` for the full set.

OHLCV DataFrame columns: ``timestamp`` (optional), ``open``, ``high``,
``low``, ``close``, ``volume``.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import numpy as np
import pandas as pd

from app.logging import get_logger
from indicators.core import (
    bollinger_bands,
    calculate_ad,
    ema,
    macd,
    mad,
    moving_average,
    moving_average_envelope,
    rsi,
    simple_moving_average,
)
from indicators.models import Candle, PriceField

logger = get_logger(__name__)

_OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]

IndicatorAdapter = Callable[[pd.DataFrame, dict[str, Any]], pd.DataFrame]


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"DataFrame is missing required column(s): {', '.join(missing)}")


def candles_from_frame(df: pd.DataFrame) -> list[Candle]:
    """Convert an OHLCV DataFrame into a list of :class:`Candle` records.

    The ``timestamp`` column supplies ``Candle.time`` when present; otherwise
    the DataFrame index is used.

    Raises:
        KeyError: If any of the OHLCV columns is missing.
    """
    _require_columns(df, _OHLCV_COLUMNS)
    times = df["timestamp"] if "timestamp" in df.columns else df.index.to_series()

    return [
        Candle(
            time=t,
            open=float(o),
            high=float(h),
            low=float(lo),
            close=float(c),
            volume=float(v),
        )
        for t, o, h, lo, c, v in zip(
            times, df["open"], df["high"], df["low"], df["close"], df["volume"]
        )
    ]


def align_right(
    values: Sequence[float], index: pd.Index, name: Optional[str] = None
) -> pd.Series:
    """Line a suffix-aligned output up with *index*.

    Missing leading positions are filled with NaN.  When *values* is longer
    than *index*, only its last ``len(index)`` entries are kept.
    """
    arr = np.asarray(values, dtype="float64")
    n = len(index)
    if len(arr) >= n:
        arr = arr[len(arr) - n:]
    else:
        arr = np.concatenate([np.full(n - len(arr), np.nan), arr])
    return pd.Series(arr, index=index, name=name, dtype="float64")


def _source(df: pd.DataFrame, params: dict[str, Any]) -> pd.Series:
    column = params.get("source", "close")
    _require_columns(df, [column])
    return df[column]


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


def _last_ma_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    n = int(params.get("n", 20))
    value = moving_average(_source(df, params), n)
    return pd.DataFrame({"moving_average": [value]}, index=df.index[-1:])


def _sma_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    n = int(params.get("n", 20))
    sma = simple_moving_average(_source(df, params), n)
    return pd.DataFrame({"sma": align_right(sma, df.index)})


def _envelope_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    n = int(params.get("n", 20))
    k = float(params.get("k", 2.5))
    env = moving_average_envelope(_source(df, params), n, k)
    return pd.DataFrame(
        {
            "upper_envelope": align_right(env.upper_envelope, df.index),
            "lower_envelope": align_right(env.lower_envelope, df.index),
        }
    )


def _mad_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    window_size = int(params.get("window_size", 20))
    values = mad(_source(df, params), window_size)
    return pd.DataFrame({"mad": align_right(values, df.index)})


def _bollinger_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    period = int(params.get("period", 20))
    deviation = float(params.get("deviation", 2.0))
    bands = bollinger_bands(_source(df, params), period, deviation)
    return pd.DataFrame(
        {
            "upper_band": [b.upper_band for b in bands],
            "middle_band": [b.middle_band for b in bands],
            "lower_band": [b.lower_band for b in bands],
        },
        index=df.index,
        dtype="float64",
    )


def _rsi_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    period = int(params.get("period", 14))
    values = rsi(_source(df, params), period)
    return pd.DataFrame({"rsi": align_right(values, df.index)})


def _ema_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    period = int(params.get("period", 20))
    field = PriceField(params.get("source", "close"))
    values = ema(candles_from_frame(df), period, field)
    return pd.DataFrame({"ema": align_right(values, df.index)})


def _macd_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    short_period = int(params.get("short_period", 12))
    long_period = int(params.get("long_period", 26))
    signal_period = int(params.get("signal_period", 9))
    field = PriceField(params.get("source", "close"))

    candles = candles_from_frame(df)
    short_ema = ema(candles, short_period, field)
    long_ema = ema(candles, long_period, field)
    histogram = macd(candles, short_ema, long_ema, signal_period)
    return pd.DataFrame({"macd": align_right(histogram, df.index)})


def _ad_frame(df: pd.DataFrame, params: dict[str, Any]) -> pd.DataFrame:
    values = calculate_ad(candles_from_frame(df))
    return pd.DataFrame({"ad": pd.Series(values, index=df.index, dtype="float64")})


INDICATOR_REGISTRY: dict[str, IndicatorAdapter] = {
    "last_ma": _last_ma_frame,
    "sma": _sma_frame,
    "envelope": _envelope_frame,
    "mad": _mad_frame,
    "bollinger": _bollinger_frame,
    "rsi": _rsi_frame,
    "ema": _ema_frame,
    "macd": _macd_frame,
    "ad": _ad_frame,
}


def get_indicator(name: str) -> IndicatorAdapter:
    """Look up a DataFrame adapter by its registered name.

    Raises:
        ValueError: If no indicator is registered under *name*.
    """
    adapter = INDICATOR_REGISTRY.get(name)
    if adapter is None:
        available = ", ".join(sorted(INDICATOR_REGISTRY.keys()))
        raise ValueError(f"Unknown indicator '{name}'. Available: {available}")
    return adapter


def compute_indicator(
    df: pd.DataFrame, name: str, params: Optional[dict[str, Any]] = None
) -> pd.DataFrame:
    """Run a registered indicator over an OHLCV DataFrame.

    Args:
        df:     OHLCV DataFrame, oldest row first.
        name:   Registered indicator name (e.g. ``"rsi"``).
        params: Indicator parameters; ``source`` selects the input column.

    Returns:
        A DataFrame indexed like *df* (a single row for ``last_ma``).
    """
    adapter = get_indicator(name)
    params = dict(params or {})
    logger.debug("compute_indicator: %s rows=%d params=%s", name, len(df), params)
    return adapter(df, params)
