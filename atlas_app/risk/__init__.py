"""Risk monitoring module."""

from .monitor import RiskMonitor, evaluate_risk_limits

__all__ = ["RiskMonitor", "evaluate_risk_limits"]
