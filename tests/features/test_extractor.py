"""Tests for the feature extractor"""

import dataclasses

import pytest

from atlas_app import compute_features
from atlas_app.config.defaults import FeatureParams
from atlas_app.features.extractor import FeatureExtractor
from atlas_app.models.features import (
    FeatureVector,
    MarketStructure,
    ModelFeatures,
    TechnicalIndicators,
)


class TestFeatureExtractor:
    """Test FeatureExtractor"""

    def setup_method(self):
        self.extractor = FeatureExtractor()

    def test_empty_window(self):
        features = self.extractor.compute([])
        assert features.price == 0.0
        assert features.bar_count == 0
        assert features.technical == TechnicalIndicators()
        assert features.structure == MarketStructure()
        assert features.model == ModelFeatures()

    def test_short_window_neutral_defaults(self, bar_factory):
        bars = bar_factory([100.0] * 10)
        features = self.extractor.compute(bars)

        assert features.technical.rsi == 50.0
        assert features.technical.macd == 0.0
        assert features.technical.adx == 25.0
        assert features.technical.atr == 0.0
        assert features.technical.bollinger_position == 0.5
        assert features.technical.volume_ratio == 1.0
        assert features.structure.trend_strength == 0.0
        assert features.structure.momentum == 0.0
        assert features.structure.support_resistance_distance == 0.0
        assert features.model.price_velocity == 0.0
        assert features.model.ensemble_prediction == 0.5
        assert features.model.confidence_interval == (100.0, 100.0)
        assert features.price == 100.0
        assert features.bar_count == 10

    def test_minimum_band_window(self, uptrend_bars):
        below = self.extractor.compute(uptrend_bars[:19])
        at = self.extractor.compute(uptrend_bars[:20])

        assert below.technical.atr == 0.0
        assert below.technical.adx == 25.0
        assert at.technical.atr > 0.0
        assert at.technical.adx != 25.0

    def test_minimum_trend_window(self, uptrend_bars):
        assert self.extractor.compute(uptrend_bars[:49]).structure.trend_strength == 0.0
        assert self.extractor.compute(uptrend_bars[:50]).structure.trend_strength > 0.0

    def test_uptrend_features(self, uptrend_bars):
        features = self.extractor.compute(uptrend_bars)

        assert features.technical.rsi == 100.0
        assert features.technical.macd > 0
        assert features.structure.trend_strength > 0
        assert features.structure.momentum > 0
        assert features.model.ensemble_prediction > 0.5
        assert features.price == uptrend_bars[-1].close
        assert features.bar_count == len(uptrend_bars)

    def test_value_ranges(self, uptrend_bars, downtrend_bars, ranging_bars, volatile_bars):
        for bars in (uptrend_bars, downtrend_bars, ranging_bars, volatile_bars):
            features = self.extractor.compute(bars)
            assert 0.0 <= features.technical.rsi <= 100.0
            assert 0.0 <= features.technical.bollinger_position <= 1.0
            assert features.technical.adx >= 0.0
            assert features.technical.atr >= 0.0
            assert -1.0 <= features.structure.trend_strength <= 1.0
            assert 0.0 <= features.model.ensemble_prediction <= 1.0
            low, high = features.model.confidence_interval
            assert low <= features.price <= high

    def test_idempotent(self, ranging_bars):
        first = compute_features(ranging_bars)
        second = compute_features(ranging_bars)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_does_not_mutate_window(self, ranging_bars):
        window = tuple(ranging_bars)
        compute_features(window)
        assert window == tuple(ranging_bars)

    def test_custom_params(self, uptrend_bars):
        params = FeatureParams(min_bars_rsi=200)
        features = compute_features(uptrend_bars, params)
        assert features.technical.rsi == 50.0

    def test_vector_is_frozen(self, ranging_bars):
        features = compute_features(ranging_bars)
        with pytest.raises(dataclasses.FrozenInstanceError):
            features.price = 1.0

    def test_to_dict(self, ranging_bars):
        data = compute_features(ranging_bars).to_dict()
        assert set(data) == {"technical_indicators", "market_structure", "ml_features",
                             "price", "bar_count"}
        assert data["market_structure"]["volatility_regime"] in ("low", "normal", "high", "extreme")
        assert isinstance(data["ml_features"]["confidence_interval"], list)

    def test_returns_feature_vector(self, ranging_bars):
        assert isinstance(compute_features(ranging_bars), FeatureVector)
