"""Trading signal models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .features import FeatureVector
from .regime import Regime


class SignalType(str, Enum):
    """Trade direction recommendation."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class StrategyType(str, Enum):
    """Strategy that produced the signal."""
    ENSEMBLE = "ensemble"
    TREND_FOLLOWING = "trend_following"
    MEAN_REVERSION = "mean_reversion"


@dataclass(frozen=True)
class SignalRisk:
    """Risk envelope attached to a signal."""
    risk_score: float
    position_size: float
    stop_loss: float
    take_profit: float


@dataclass(frozen=True)
class TradingSignal:
    """Immutable trading signal, written once to the audit log."""
    symbol: str
    signal_type: SignalType
    confidence: float
    ensemble_score: float
    strategy: StrategyType
    price: float
    features: FeatureVector
    regime: Regime
    risk_assessment: SignalRisk
    filters_passed: frozenset[str]
    created_at: datetime

    @property
    def is_actionable(self) -> bool:
        return self.signal_type != SignalType.HOLD

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dictionary."""
        return {
            "symbol": self.symbol,
            "signal_type": self.signal_type.value,
            "confidence": self.confidence,
            "ensemble_score": self.ensemble_score,
            "strategy": self.strategy.value,
            "price": self.price,
            "features": self.features.to_dict(),
            "regime": self.regime.to_dict(),
            "risk_assessment": {
                "risk_score": self.risk_assessment.risk_score,
                "position_size": self.risk_assessment.position_size,
                "stop_loss": self.risk_assessment.stop_loss,
                "take_profit": self.risk_assessment.take_profit,
            },
            "filters_passed": sorted(self.filters_passed),
            "created_at": self.created_at.isoformat(),
        }
