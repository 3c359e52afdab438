"""Shared test fixtures for indicator-lab.

Provides reusable OHLCV DataFrames, a temporary CSV file and a config reset
used across all test modules.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from app.config import load_config


@pytest.fixture()
def sample_ohlcv_df() -> pd.DataFrame:
    """A 100-row OHLCV DataFrame with realistic daily price data.

    The series starts at $100 and follows a random walk with moderate
    volatility.  Volume oscillates around 1 000 000 shares.
    """
    rng = np.random.default_rng(42)
    n = 100

    log_returns = rng.normal(loc=0.0005, scale=0.015, size=n)
    close = 100.0 * np.exp(np.cumsum(log_returns))

    high = close * (1.0 + rng.uniform(0.001, 0.02, size=n))
    low = close * (1.0 - rng.uniform(0.001, 0.02, size=n))
    open_ = low + rng.uniform(0.3, 0.7, size=n) * (high - low)
    volume = rng.integers(500_000, 2_000_000, size=n).astype(float)

    return pd.DataFrame(
        {
            "timestamp": pd.date_range("2024-01-01", periods=n, freq="D"),
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": volume,
        }
    )


@pytest.fixture()
def small_ohlcv_df() -> pd.DataFrame:
    """A 20-row OHLCV DataFrame with a deterministic uptrend from $50 to $60."""
    n = 20
    close = np.linspace(50.0, 60.0, n)

    return pd.DataFrame(
        {
            "timestamp": pd.date_range("2024-06-01", periods=n, freq="D"),
            "open": close - 0.5,
            "high": close + 1.0,
            "low": close - 1.0,
            "close": close,
            "volume": np.full(n, 1_000_000.0),
        }
    )


@pytest.fixture()
def ohlcv_csv(tmp_path: Path, small_ohlcv_df: pd.DataFrame) -> Path:
    """Write ``small_ohlcv_df`` to a CSV file and return its path."""
    path = tmp_path / "prices.csv"
    small_ohlcv_df.to_csv(path, index=False)
    return path


@pytest.fixture()
def fresh_config(monkeypatch: pytest.MonkeyPatch):
    """Clear ILAB_* overrides and reload the config before and after a test."""
    for var in (
        "ILAB_LOG_LEVEL",
        "ILAB_DEFAULT_SOURCE",
        "ILAB_RSI_PERIOD",
        "ILAB_BOLLINGER_PERIOD",
        "ILAB_BOLLINGER_DEVIATION",
    ):
        monkeypatch.delenv(var, raising=False)
    load_config(reload=True)
    yield monkeypatch
    monkeypatch.undo()
    load_config(reload=True)
