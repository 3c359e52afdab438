"""Tests for the pandas adapter layer in indicators.frame."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from indicators.errors import InsufficientDataError
from indicators.frame import (
    INDICATOR_REGISTRY,
    align_right,
    candles_from_frame,
    compute_indicator,
    get_indicator,
)
from indicators.models import Candle


class TestConversion:
    def test_candles_from_frame(self, small_ohlcv_df: pd.DataFrame) -> None:
        candles = candles_from_frame(small_ohlcv_df)
        assert len(candles) == 20
        assert all(isinstance(c, Candle) for c in candles)
        assert candles[0].close == pytest.approx(50.0)
        assert candles[-1].high == pytest.approx(61.0)
        assert candles[0].time == small_ohlcv_df["timestamp"].iloc[0]

    def test_candles_use_index_without_timestamp(self, small_ohlcv_df: pd.DataFrame) -> None:
        df = small_ohlcv_df.drop(columns=["timestamp"])
        candles = candles_from_frame(df)
        assert candles[3].time == df.index[3]

    def test_missing_column(self, small_ohlcv_df: pd.DataFrame) -> None:
        with pytest.raises(KeyError, match="volume"):
            candles_from_frame(small_ohlcv_df.drop(columns=["volume"]))

    def test_align_right_pads(self) -> None:
        result = align_right([1.0, 2.0], pd.RangeIndex(4), name="x")
        assert result.name == "x"
        assert result.iloc[:2].isna().all()
        assert result.iloc[2:].tolist() == [1.0, 2.0]

    def test_align_right_truncates(self) -> None:
        result = align_right([1.0, 2.0, 3.0, 4.0, 5.0], pd.RangeIndex(3))
        assert result.tolist() == [3.0, 4.0, 5.0]


class TestRegistry:
    def test_known_names(self) -> None:
        assert set(INDICATOR_REGISTRY) == {
            "last_ma",
            "sma",
            "envelope",
            "mad",
            "bollinger",
            "rsi",
            "ema",
            "macd",
            "ad",
        }

    def test_unknown_indicator(self) -> None:
        with pytest.raises(ValueError, match="Unknown indicator 'nope'"):
            get_indicator("nope")

    def test_missing_source_column(self, small_ohlcv_df: pd.DataFrame) -> None:
        with pytest.raises(KeyError):
            compute_indicator(small_ohlcv_df, "sma", {"n": 3, "source": "vwap"})


class TestComputeIndicator:
    def test_sma_aligned(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "sma", {"n": 3})
        assert list(result.columns) == ["sma"]
        assert result.index.equals(small_ohlcv_df.index)
        assert result["sma"].iloc[:3].isna().all()
        assert result["sma"].iloc[3:].notna().all()

    def test_envelope_columns(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "envelope", {"n": 5, "k": 10})
        valid = result.dropna()
        assert len(valid) == 15
        assert (valid["upper_envelope"] > valid["lower_envelope"]).all()

    def test_mad_warmup(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "mad", {"window_size": 4})
        assert result["mad"].isna().sum() == 3

    def test_bollinger_keeps_length(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "bollinger", {"period": 5, "deviation": 2})
        assert len(result) == len(small_ohlcv_df)
        assert result.iloc[:4].isna().all().all()
        assert result.iloc[4:].notna().all().all()

    def test_rsi_uptrend(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "rsi", {"period": 5})
        assert result["rsi"].iloc[:5].isna().all()
        assert (result["rsi"].iloc[5:] == 100.0).all()

    def test_ema_on_other_field(self, small_ohlcv_df: pd.DataFrame) -> None:
        close = compute_indicator(small_ohlcv_df, "ema", {"period": 5})
        high = compute_indicator(small_ohlcv_df, "ema", {"period": 5, "source": "high"})
        assert close["ema"].isna().sum() == 4
        np.testing.assert_allclose(
            high["ema"].dropna().to_numpy(), close["ema"].dropna().to_numpy() + 1.0
        )

    def test_macd_default_periods(self, sample_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(sample_ohlcv_df, "macd", {})
        assert len(result) == len(sample_ohlcv_df)
        # 89 fast and 75 slow EMA values -> offset -14 -> 14 MACD points, 6 signal points.
        assert result["macd"].notna().sum() == 6

    def test_ad(self, sample_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(sample_ohlcv_df, "ad")
        assert len(result) == len(sample_ohlcv_df)
        assert np.isfinite(result["ad"]).all()

    def test_last_ma(self, small_ohlcv_df: pd.DataFrame) -> None:
        result = compute_indicator(small_ohlcv_df, "last_ma", {"n": 4})
        assert len(result) == 1
        expected = small_ohlcv_df["close"].iloc[-4:].mean()
        assert result["moving_average"].iloc[0] == pytest.approx(expected)

    def test_last_ma_insufficient(self, small_ohlcv_df: pd.DataFrame) -> None:
        with pytest.raises(InsufficientDataError):
            compute_indicator(small_ohlcv_df, "last_ma", {"n": 50})

    def test_params_not_mutated(self, small_ohlcv_df: pd.DataFrame) -> None:
        params = {"period": 5}
        compute_indicator(small_ohlcv_df, "rsi", params)
        assert params == {"period": 5}
