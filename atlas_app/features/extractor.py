"""Feature extractor coordinating all indicator calculations for a bar window"""

from typing import Optional, Sequence

from ..config.defaults import FeatureParams
from ..data.models import Bar
from ..logging import get_logger
from ..models.features import (
    FeatureVector,
    MarketStructure,
    ModelFeatures,
    TechnicalIndicators,
)
from .atr import calculate_adx, calculate_atr
from .indicators import (
    bollinger_position,
    calculate_bollinger_bands,
    calculate_macd,
    calculate_rsi,
)
from .structure import (
    calculate_confidence_interval,
    calculate_ensemble_prediction,
    calculate_momentum,
    calculate_price_velocity,
    calculate_support_resistance_distance,
    calculate_trend_strength,
    classify_volatility_regime,
)
from .volume import calculate_volume_ratio

logger = get_logger(__name__)


class FeatureExtractor:
    """
    Computes the full feature vector for an ordered bar window

    Every indicator below its minimum window degrades to the neutral default
    declared on the feature models. The extractor holds no state between
    calls, so identical windows always produce equal vectors.
    """

    def __init__(self, params: Optional[FeatureParams] = None):
        self.params = params or FeatureParams()

    def compute(self, bars: Sequence[Bar]) -> FeatureVector:
        """
        Compute features for the last bar of the window

        Args:
            bars: Bars in chronological order

        Returns:
            FeatureVector; an empty window yields price 0 and all defaults
        """
        if not bars:
            return FeatureVector(
                technical=TechnicalIndicators(),
                structure=MarketStructure(),
                model=ModelFeatures(),
                price=0.0,
                bar_count=0,
            )

        closes = [bar.close for bar in bars]
        price = closes[-1]

        technical = self._technical(bars, closes)
        structure = self._structure(bars, closes, technical.atr, price)
        model = self._model(closes, price)

        logger.debug("Features computed",
                     bar_count=len(bars),
                     price=price,
                     rsi=technical.rsi,
                     adx=technical.adx,
                     volatility_regime=structure.volatility_regime.value)

        return FeatureVector(
            technical=technical,
            structure=structure,
            model=model,
            price=price,
            bar_count=len(bars),
        )

    def _technical(self, bars: Sequence[Bar], closes: list[float]) -> TechnicalIndicators:
        p = self.params
        defaults = TechnicalIndicators()
        bar_count = len(bars)

        rsi = defaults.rsi
        if bar_count >= p.min_bars_rsi:
            rsi = calculate_rsi(closes, p.rsi_period)
            if rsi is None:
                rsi = defaults.rsi

        macd, macd_signal, macd_histogram = defaults.macd, defaults.macd_signal, defaults.macd_histogram
        if bar_count >= p.min_bars_macd:
            macd_values = calculate_macd(closes, p.macd_fast, p.macd_slow, p.macd_signal)
            if macd_values is not None:
                macd, macd_signal, macd_histogram = macd_values

        adx = defaults.adx
        atr = defaults.atr
        band_position = defaults.bollinger_position
        volume_ratio = defaults.volume_ratio

        if bar_count >= p.min_bars_band:
            adx_value = calculate_adx(bars, p.adx_period)
            if adx_value is not None:
                adx = adx_value

            atr_value = calculate_atr(bars, p.atr_period)
            if atr_value is not None:
                atr = atr_value

            bands = calculate_bollinger_bands(closes, p.bollinger_period, p.bollinger_std)
            if bands is not None:
                upper, _, lower = bands
                band_position = bollinger_position(closes[-1], upper, lower)

            ratio = calculate_volume_ratio([bar.volume for bar in bars], p.volume_period)
            if ratio is not None:
                volume_ratio = ratio

        return TechnicalIndicators(
            rsi=rsi,
            macd=macd,
            macd_signal=macd_signal,
            macd_histogram=macd_histogram,
            adx=adx,
            atr=atr,
            bollinger_position=band_position,
            volume_ratio=volume_ratio,
        )

    def _structure(self, bars: Sequence[Bar], closes: list[float],
                   atr: float, price: float) -> MarketStructure:
        p = self.params

        trend_strength = 0.0
        if len(bars) >= p.min_bars_trend:
            trend_strength = calculate_trend_strength(closes, p.trend_window) or 0.0

        return MarketStructure(
            trend_strength=trend_strength,
            volatility_regime=classify_volatility_regime(
                atr, price,
                extreme=p.extreme_volatility,
                high=p.high_volatility,
                normal=p.normal_volatility,
            ),
            momentum=calculate_momentum(closes, p.momentum_period) or 0.0,
            support_resistance_distance=calculate_support_resistance_distance(
                bars, p.support_resistance_window) or 0.0,
        )

    def _model(self, closes: list[float], price: float) -> ModelFeatures:
        p = self.params
        return ModelFeatures(
            price_velocity=calculate_price_velocity(closes),
            ensemble_prediction=calculate_ensemble_prediction(closes, p.momentum_period),
            confidence_interval=calculate_confidence_interval(
                closes, p.confidence_window, p.confidence_z),
        )


def compute_features(bars: Sequence[Bar], params: Optional[FeatureParams] = None) -> FeatureVector:
    """Compute the feature vector for a bar window with the given (or default) params."""
    return FeatureExtractor(params).compute(bars)
