"""Market regime model."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RegimeType(str, Enum):
    """Qualitative market behaviour."""
    TREND = "trend"
    RANGE = "range"
    HIGH_VOLATILITY = "high_volatility"


@dataclass(frozen=True)
class Regime:
    """Regime classification for a price window."""
    regime_type: RegimeType
    confidence: float
    trend_strength: float
    volatility: float

    @classmethod
    def fallback(cls) -> "Regime":
        """Explicit answer for windows too short to classify."""
        return cls(regime_type=RegimeType.RANGE, confidence=0.5,
                   trend_strength=0.0, volatility=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "regime": self.regime_type.value,
            "confidence": self.confidence,
            "trend_strength": self.trend_strength,
            "volatility": self.volatility,
        }
