"""Technical indicators implemented as pure functions on plain sequences.

Every function accepts a list, tuple, numpy array or pandas Series of
floats (or a sequence of bar records) and recomputes from scratch on each
call.  Sequence outputs are ``float64`` numpy arrays aligned to a suffix of
the input unless noted otherwise.

Degenerate input is never "fixed": divisions by zero follow IEEE-754 and
the resulting NaN / Infinity values propagate to the caller.  The only
function that raises is :func:`moving_average`.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, Union

import numpy as np
import pandas as pd

from indicators.errors import InsufficientDataError
from indicators.models import (
    BollingerBand,
    Candle,
    CryptoDataPoint,
    Envelope,
    MacdPoint,
    PriceField,
    macd_line_of,
)

FieldKey = Union[PriceField, Callable[[Any], float]]


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype="float64")


def _empty() -> np.ndarray:
    return np.empty(0, dtype="float64")


# ---------------------------------------------------------------------------
# Rolling statistics
# ---------------------------------------------------------------------------


def moving_average(data: Sequence[float], n: int) -> float:
    """Mean of the last ``n`` data points.

    Args:
        data: Price or value series, oldest first.
        n:    Number of trailing points to average.

    Returns:
        The arithmetic mean of ``data[-n:]``.

    Raises:
        InsufficientDataError: If ``n`` is not positive or ``data`` holds
            fewer than ``n`` points.
    """
    values = _as_array(data)
    if n <= 0 or len(values) < n:
        raise InsufficientDataError(
            "Not enough data points to calculate moving average"
        )
    return float(values[-n:].sum() / n)


def simple_moving_average(close_prices: Sequence[float], n: int) -> np.ndarray:
    """Simple Moving Average computed with a running sum.

    The running sum starts subtracting the value leaving the window at index
    ``n``, so the first emitted average covers indices ``1..n`` and the window
    ``0..n-1`` is never emitted.

    Args:
        close_prices: Closing prices, oldest first.
        n:            Number of periods in the average.

    Returns:
        ``max(0, len(close_prices) - n)`` averages.  Empty when ``n`` is not
        positive or exceeds the number of prices.
    """
    values = _as_array(close_prices)
    if n <= 0 or n > len(values):
        return _empty()

    sma: list[float] = []
    running = 0.0
    for i, price in enumerate(values):
        running += price
        if i >= n:
            running -= values[i - n]
            sma.append(running / n)

    return np.asarray(sma, dtype="float64")


def moving_average_envelope(
    close_prices: Sequence[float], n: int, k: float
) -> Envelope:
    """Moving Average Envelope offset by ``k`` percent around the SMA.

    Args:
        close_prices: Closing prices, oldest first.
        n:            SMA period.
        k:            Envelope offset in percent (``10`` means +/-10%).

    Returns:
        An :class:`Envelope` whose arrays have the same length and offset as
        :func:`simple_moving_average`.
    """
    sma = simple_moving_average(close_prices, n)
    return Envelope(
        upper_envelope=sma * (1 + k / 100),
        lower_envelope=sma * (1 - k / 100),
    )


def mad(numbers: Sequence[float], window_size: int) -> np.ndarray:
    """Mean Absolute Deviation over every window of ``window_size`` values.

    Windows slide by one starting at index 0, so the output holds
    ``len(numbers) - window_size + 1`` values.  An empty array is returned
    when ``window_size`` is not positive or exceeds the input length.
    """
    values = _as_array(numbers)
    if window_size <= 0 or window_size > len(values):
        return _empty()

    windows = np.lib.stride_tricks.sliding_window_view(values, window_size)
    means = windows.sum(axis=1, keepdims=True) / window_size
    return np.abs(windows - means).sum(axis=1) / window_size


def bollinger_bands(
    data: Sequence[float], period: int, deviation: float
) -> list[BollingerBand]:
    """Bollinger Bands using the population standard deviation.

    Args:
        data:      Price series, oldest first.
        period:    Lookback window for the mean and standard deviation.
        deviation: Number of standard deviations between the middle band
                   and the outer bands.

    Returns:
        One :class:`BollingerBand` per input value.  The first
        ``period - 1`` records hold NaN in every field.
    """
    series = pd.Series(_as_array(data), dtype="float64")
    if period <= 0:
        return [BollingerBand(np.nan, np.nan, np.nan) for _ in range(len(series))]

    window = series.rolling(window=period, min_periods=period)
    mid = window.mean()
    std = window.std(ddof=0)
    upper = mid + deviation * std
    lower = mid - deviation * std

    return [
        BollingerBand(upper_band=float(u), middle_band=float(m), lower_band=float(lo))
        for u, m, lo in zip(upper, mid, lower)
    ]


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


def _rsi_value(avg_gain: np.float64, avg_loss: np.float64) -> float:
    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def rsi(values: Sequence[float], period: int = 14) -> np.ndarray:
    """Relative Strength Index with a simple-average seed and Wilder smoothing.

    The seed averages the first ``period`` price changes, so ``period + 1``
    prices are consumed before the first value.  Each later change updates
    the averages as ``(avg * (period - 1) + x) / period``.

    A window without losses divides by zero and yields exactly 100; a window
    with neither gains nor losses yields NaN.

    Args:
        values: Price series, oldest first.
        period: Lookback period (default 14).

    Returns:
        ``len(values) - period`` RSI values, or an empty array when there are
        not more than ``period`` prices.
    """
    prices = _as_array(values)
    if period <= 0 or len(prices) <= period:
        return _empty()

    deltas = np.diff(prices)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        avg_gain = gains[:period].mean()
        avg_loss = losses[:period].mean()
        result = [_rsi_value(avg_gain, avg_loss)]

        for gain, loss in zip(gains[period:], losses[period:]):
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
            result.append(_rsi_value(avg_gain, avg_loss))

    return np.asarray(result, dtype="float64")


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


def ema(
    records: Sequence[Any],
    period: int,
    key: FieldKey = PriceField.CLOSE,
) -> np.ndarray:
    """Exponential Moving Average over one field of a record sequence.

    Seeds with ``sum(first period values) / period`` and then applies
    ``ema = price * alpha + ema * (1 - alpha)`` with
    ``alpha = 2 / (period + 1)``.

    Args:
        records: Candles or other bar-like records, oldest first.
        period:  EMA period.
        key:     Field selector: a :class:`PriceField` or any callable
                 mapping a record to a float.

    Returns:
        ``len(records) - period + 1`` values, the seed first.  Fewer than
        ``period`` records yield the single partial seed; no records yield
        an empty array.
    """
    accessor = key.accessor if isinstance(key, PriceField) else key
    prices = np.asarray([accessor(record) for record in records], dtype="float64")
    if period <= 0 or len(prices) == 0:
        return _empty()

    alpha = 2 / (period + 1)
    current = prices[:period].sum() / period
    result = [current]
    for price in prices[period:]:
        current = price * alpha + current * (1 - alpha)
        result.append(current)

    return np.asarray(result, dtype="float64")


def macd(
    candles: Sequence[Candle],
    short_ema: Sequence[float],
    long_ema: Sequence[float],
    signal_period: int,
) -> np.ndarray:
    """MACD histogram from precomputed short and long EMA series.

    Both EMA series are sliced from ``len(long_ema) - len(short_ema)``
    (a negative offset counts from the end), the MACD line is their
    difference, and the signal line is :func:`ema` of that line over
    ``signal_period``.  The histogram is aligned on index: positions past the
    end of the shorter signal line have no signal and come back as NaN.

    Args:
        candles:       Candles the EMA series were computed from.
        short_ema:     Fast EMA values.
        long_ema:      Slow EMA values.
        signal_period: Signal line EMA period.

    Returns:
        ``macd_line - signal_line`` with the MACD line's length.
    """
    offset = len(long_ema) - len(short_ema)
    short_aligned = _as_array(short_ema)[offset:]
    long_aligned = _as_array(long_ema)[offset:]

    macd_line = np.full(len(short_aligned), np.nan)
    overlap = min(len(short_aligned), len(long_aligned))
    macd_line[:overlap] = short_aligned[:overlap] - long_aligned[:overlap]

    points = []
    for i, value in enumerate(macd_line):
        j = i + offset
        candle = candles[j] if 0 <= j < len(candles) else None
        points.append(MacdPoint(candle=candle, macd_line=float(value)))

    signal_line = ema(points, signal_period, key=macd_line_of)

    histogram = np.full(len(macd_line), np.nan)
    matched = min(len(macd_line), len(signal_line))
    histogram[:matched] = macd_line[:matched] - signal_line[:matched]
    return histogram


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------


def calculate_ad(bars: Sequence[Union[CryptoDataPoint, Candle]]) -> np.ndarray:
    """Accumulation/Distribution line.

    Money flow multiplier ``((close - low) - (high - close)) / (high - low)``
    times volume, accumulated as a running sum.  A bar with ``high == low``
    produces NaN or Infinity that carries through every later value.

    Args:
        bars: Bars exposing ``high``, ``low``, ``close`` and ``volume``.

    Returns:
        One cumulative value per bar.
    """
    high = _as_array([bar.high for bar in bars])
    low = _as_array([bar.low for bar in bars])
    close = _as_array([bar.close for bar in bars])
    volume = _as_array([bar.volume for bar in bars])

    with np.errstate(divide="ignore", invalid="ignore"):
        multiplier = ((close - low) - (high - close)) / (high - low)
        flow_volume = multiplier * volume
        return np.cumsum(flow_volume)


calculate_moving_average = moving_average
calculate_moving_average_envelope = moving_average_envelope
