"""Tests for market regime classification"""

import dataclasses

import pytest

from atlas_app import classify_regime
from atlas_app.config.defaults import RegimeParams
from atlas_app.models.regime import Regime, RegimeType
from atlas_app.regime.classifier import (
    RegimeClassifier,
    calculate_linear_trend,
    calculate_returns,
)


class TestHelpers:
    """Test return and linear trend helpers"""

    def test_returns(self):
        assert calculate_returns([100.0, 110.0, 99.0]) == pytest.approx([0.1, -0.1])

    def test_perfect_line(self):
        assert calculate_linear_trend([float(i) for i in range(50)]) == pytest.approx(1.0)
        assert calculate_linear_trend([float(-i) for i in range(50)]) == pytest.approx(-1.0)

    def test_flat_line(self):
        assert calculate_linear_trend([100.0] * 50) == 0.0

    def test_bounded(self, ranging_bars, volatile_bars):
        for bars in (ranging_bars, volatile_bars):
            trend = calculate_linear_trend([bar.close for bar in bars])
            assert -1.0 <= trend <= 1.0


class TestRegimeClassifier:
    """Test RegimeClassifier"""

    def setup_method(self):
        self.classifier = RegimeClassifier()

    def test_insufficient_data_fallback(self, uptrend_bars):
        regime = self.classifier.classify(uptrend_bars[:49])
        assert regime == Regime.fallback()
        assert regime.regime_type == RegimeType.RANGE
        assert regime.confidence == 0.5
        assert regime.trend_strength == 0.0
        assert regime.volatility == 0.0

    def test_uptrend(self, uptrend_bars):
        regime = self.classifier.classify(uptrend_bars)
        assert regime.regime_type == RegimeType.TREND
        assert regime.confidence > 0.6
        assert regime.trend_strength > 0

    def test_downtrend(self, downtrend_bars):
        regime = self.classifier.classify(downtrend_bars)
        assert regime.regime_type == RegimeType.TREND
        assert regime.trend_strength < 0

    def test_ranging(self, ranging_bars):
        regime = self.classifier.classify(ranging_bars)
        assert regime.regime_type == RegimeType.RANGE
        assert regime.confidence == pytest.approx(min(1.0 - abs(regime.trend_strength), 0.95))

    def test_flat_is_range(self, flat_bars):
        regime = self.classifier.classify(flat_bars)
        assert regime.regime_type == RegimeType.RANGE
        assert regime.volatility == 0.0
        assert regime.confidence == 0.95

    def test_high_volatility_checked_first(self, volatile_bars):
        regime = self.classifier.classify(volatile_bars)
        assert regime.regime_type == RegimeType.HIGH_VOLATILITY
        assert regime.volatility > 0.03
        assert regime.confidence == 0.95

    def test_confidence_bounds(self, uptrend_bars, downtrend_bars, ranging_bars, volatile_bars):
        for bars in (uptrend_bars, downtrend_bars, ranging_bars, volatile_bars):
            regime = classify_regime(bars)
            assert 0.0 <= regime.confidence <= 0.95

    def test_uses_last_window_only(self, volatile_bars, uptrend_bars):
        # A noisy history followed by a clean 50-bar trend classifies as trend
        shifted = [
            dataclasses.replace(bar, timestamp=bar.timestamp.replace(year=2025))
            for bar in uptrend_bars[-50:]
        ]
        regime = classify_regime(volatile_bars + shifted)
        assert regime.regime_type == RegimeType.TREND

    def test_custom_threshold(self, ranging_bars):
        params = RegimeParams(high_volatility_threshold=0.0001)
        regime = classify_regime(ranging_bars, params)
        assert regime.regime_type == RegimeType.HIGH_VOLATILITY

    def test_to_dict(self, uptrend_bars):
        data = classify_regime(uptrend_bars).to_dict()
        assert data["regime"] == "trend"
        assert set(data) == {"regime", "confidence", "trend_strength", "volatility"}
