"""Risk monitoring models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class RiskState(str, Enum):
    """Circuit-breaker state for an account."""
    NORMAL = "normal"
    WARNING = "warning"
    HALTED = "halted"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class AlertType(str, Enum):
    CIRCUIT_BREAKER = "circuit_breaker"
    CONCENTRATION_RISK = "concentration_risk"
    VOLATILITY_SPIKE = "volatility_spike"
    PORTFOLIO_RISK = "portfolio_risk"


class UtilizationStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Position:
    """Open position as read from the persistent store."""
    symbol: str
    quantity: float
    current_price: float
    risk_amount: float = 0.0

    @property
    def notional(self) -> float:
        return self.quantity * self.current_price


@dataclass(frozen=True)
class RiskAlert:
    """Alert for the notification collaborator."""
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    symbol: Optional[str] = None

    @property
    def actions(self) -> list[str]:
        """Actions the alert implies for downstream collaborators."""
        if self.alert_type == AlertType.CIRCUIT_BREAKER:
            return ["halt_trading", "notify_user"]
        return ["notify_user"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.alert_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "symbol": self.symbol,
            "actions": self.actions,
        }


@dataclass(frozen=True)
class LimitUtilization:
    """How much of a configured limit is currently used."""
    limit_type: str
    current_value: float
    limit_value: float
    utilization_pct: float
    status: UtilizationStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "limit_type": self.limit_type,
            "current_value": self.current_value,
            "limit_value": self.limit_value,
            "utilization_pct": self.utilization_pct,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Per-tick risk evaluation. Recomputed every tick, never accumulated."""
    state: RiskState
    daily_loss_fraction: float
    portfolio_risk: float
    symbol_exposures: dict[str, float]
    volatility: float
    overall_risk_score: float
    circuit_breaker_triggered: bool
    alerts: tuple[RiskAlert, ...]
    limit_utilization: tuple[LimitUtilization, ...]
    evaluated_at: datetime

    @property
    def critical_alerts(self) -> list[RiskAlert]:
        return [a for a in self.alerts if a.severity == AlertSeverity.CRITICAL]

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "daily_loss_fraction": self.daily_loss_fraction,
            "portfolio_risk": self.portfolio_risk,
            "symbol_exposures": dict(self.symbol_exposures),
            "volatility": self.volatility,
            "overall_risk_score": self.overall_risk_score,
            "circuit_breaker_triggered": self.circuit_breaker_triggered,
            "alerts": [a.to_dict() for a in self.alerts],
            "limit_utilization": [u.to_dict() for u in self.limit_utilization],
            "evaluated_at": self.evaluated_at.isoformat(),
        }
