"""Tests for market structure and model-style features"""

from datetime import datetime, timedelta, timezone

import pytest

from atlas_app.data.models import Bar
from atlas_app.features.structure import (
    calculate_confidence_interval,
    calculate_ensemble_prediction,
    calculate_momentum,
    calculate_price_velocity,
    calculate_support_resistance_distance,
    calculate_trend_strength,
    classify_volatility_regime,
)
from atlas_app.models.features import VolatilityRegime


class TestTrendStrength:
    """Test normalised slope trend strength"""

    def test_insufficient_data(self):
        assert calculate_trend_strength([100.0] * 49, window=50) is None

    def test_linear_rise(self):
        closes = [100.0 + i for i in range(50)]
        # slope = 49 / 50, mean = 124.5
        expected = (49.0 / 50.0) / 124.5 * 100.0
        assert calculate_trend_strength(closes) == pytest.approx(expected)

    def test_clamped(self):
        rising = [100.0 + 2 * i for i in range(50)]
        falling = [300.0 - 4 * i for i in range(50)]
        assert calculate_trend_strength(rising) == 1.0
        assert calculate_trend_strength(falling) == -1.0

    def test_flat(self):
        assert calculate_trend_strength([100.0] * 50) == 0.0


class TestVolatilityRegime:
    """Test ATR / price buckets"""

    @pytest.mark.parametrize("atr,expected", [
        (6.0, VolatilityRegime.EXTREME),
        (4.0, VolatilityRegime.HIGH),
        (2.0, VolatilityRegime.NORMAL),
        (0.5, VolatilityRegime.LOW),
    ])
    def test_buckets(self, atr, expected):
        assert classify_volatility_regime(atr, 100.0) == expected

    def test_thresholds_are_exclusive(self):
        assert classify_volatility_regime(5.0, 100.0) == VolatilityRegime.HIGH

    def test_non_positive_price(self):
        assert classify_volatility_regime(5.0, 0.0) == VolatilityRegime.LOW


class TestMomentum:
    """Test momentum over a lookback"""

    def test_ten_bar_change(self):
        closes = [100.0] * 10 + [110.0]
        assert calculate_momentum(closes, 10) == pytest.approx(0.1)

    def test_insufficient_data(self):
        assert calculate_momentum([100.0] * 10, 10) is None


class TestSupportResistance:
    """Test distance to recent high / low"""

    def _bars(self, rows):
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return [
            Bar(timestamp=t0 + timedelta(minutes=i), open=c, high=h, low=l, close=c, volume=1.0)
            for i, (h, l, c) in enumerate(rows)
        ]

    def test_nearer_level(self):
        rows = [(110.0, 90.0, 100.0)] * 19 + [(104.0, 99.0, 102.0)]
        bars = self._bars(rows)
        # resistance 110 (8 away), support 90 (12 away)
        assert calculate_support_resistance_distance(bars) == pytest.approx(8.0 / 102.0)

    def test_insufficient_data(self):
        bars = self._bars([(101.0, 99.0, 100.0)] * 19)
        assert calculate_support_resistance_distance(bars) is None

    def test_non_negative(self, uptrend_bars, volatile_bars):
        for bars in (uptrend_bars, volatile_bars):
            assert calculate_support_resistance_distance(bars) >= 0.0


class TestModelFeatures:
    """Test velocity, ensemble prediction and confidence interval"""

    def test_price_velocity(self):
        assert calculate_price_velocity([100.0, 101.0, 103.0]) == pytest.approx(1.0 / 103.0)

    def test_price_velocity_short(self):
        assert calculate_price_velocity([100.0, 101.0]) == 0.0

    def test_ensemble_prediction_rising(self):
        closes = [100.0 + i for i in range(20)]
        assert calculate_ensemble_prediction(closes) == pytest.approx((0.6 + 0.65 + 0.5) / 3)

    def test_ensemble_prediction_falling(self):
        closes = [100.0 - i for i in range(20)]
        assert calculate_ensemble_prediction(closes) == pytest.approx((0.4 + 0.35 + 0.5) / 3)

    def test_ensemble_prediction_short(self):
        assert calculate_ensemble_prediction([100.0] * 10) == 0.5

    def test_confidence_interval(self, ranging_bars):
        closes = [bar.close for bar in ranging_bars]
        low, high = calculate_confidence_interval(closes)
        assert low < closes[-1] < high
        assert closes[-1] - low == pytest.approx(high - closes[-1])

    def test_confidence_interval_flat(self):
        assert calculate_confidence_interval([100.0] * 20) == (100.0, 100.0)

    def test_confidence_interval_short(self):
        assert calculate_confidence_interval([99.0, 100.0]) == (100.0, 100.0)

    def test_confidence_interval_empty(self):
        assert calculate_confidence_interval([]) == (0.0, 0.0)
