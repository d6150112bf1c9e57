"""Feature vector models produced by the feature extractor."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class VolatilityRegime(str, Enum):
    """ATR-to-price volatility buckets."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class TechnicalIndicators:
    """Classic indicator readings for the last bar of the window."""
    rsi: float = 50.0
    macd: float = 0.0                  # EMA(fast) - EMA(slow)
    macd_signal: float = 0.0
    macd_histogram: float = 0.0
    adx: float = 25.0
    atr: float = 0.0
    bollinger_position: float = 0.5    # 0 at lower band, 1 at upper band
    volume_ratio: float = 1.0


@dataclass(frozen=True)
class MarketStructure:
    """Structural reading of the trailing window."""
    trend_strength: float = 0.0        # Signed, [-1, 1]
    volatility_regime: VolatilityRegime = VolatilityRegime.LOW
    momentum: float = 0.0
    support_resistance_distance: float = 0.0


@dataclass(frozen=True)
class ModelFeatures:
    """Deterministic model-style features."""
    price_velocity: float = 0.0
    ensemble_prediction: float = 0.5
    confidence_interval: tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class FeatureVector:
    """Complete feature snapshot for one bar window."""
    technical: TechnicalIndicators
    structure: MarketStructure
    model: ModelFeatures
    price: float
    bar_count: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        return {
            "technical_indicators": {
                "rsi": self.technical.rsi,
                "macd": self.technical.macd,
                "macd_signal": self.technical.macd_signal,
                "macd_histogram": self.technical.macd_histogram,
                "adx": self.technical.adx,
                "atr": self.technical.atr,
                "bollinger_position": self.technical.bollinger_position,
                "volume_ratio": self.technical.volume_ratio,
            },
            "market_structure": {
                "trend_strength": self.structure.trend_strength,
                "volatility_regime": self.structure.volatility_regime.value,
                "momentum": self.structure.momentum,
                "support_resistance_distance": self.structure.support_resistance_distance,
            },
            "ml_features": {
                "price_velocity": self.model.price_velocity,
                "ensemble_prediction": self.model.ensemble_prediction,
                "confidence_interval": list(self.model.confidence_interval),
            },
            "price": self.price,
            "bar_count": self.bar_count,
        }
