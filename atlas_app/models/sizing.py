"""Position sizing models."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class SizingMethod(str, Enum):
    """Supported position sizing formulas."""
    KELLY = "kelly"
    FIXED_PERCENTAGE = "fixed_percentage"
    VOLATILITY_ADJUSTED = "volatility_adjusted"
    RISK_PARITY = "risk_parity"


@dataclass(frozen=True)
class TradeStats:
    """Method-specific statistics; any field may be unknown."""
    win_rate: Optional[float] = None
    avg_win: Optional[float] = None
    avg_loss: Optional[float] = None
    volatility: Optional[float] = None


@dataclass(frozen=True)
class PositionSizingResult:
    """Bounded position recommendation. recommended_size never exceeds max_size."""
    method: SizingMethod
    recommended_size: float
    max_size: float
    risk_score: float
    confidence_level: float
    method_diagnostic: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method_diagnostic",
                           MappingProxyType(dict(self.method_diagnostic)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "recommended_size": self.recommended_size,
            "max_size": self.max_size,
            "risk_score": self.risk_score,
            "confidence_level": self.confidence_level,
            "method_diagnostic": dict(self.method_diagnostic),
        }
