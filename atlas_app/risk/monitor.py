"""Per-tick risk limit evaluation and circuit breaker"""

import math
from typing import Optional, Sequence

from ..config.bot_config import RiskLimits
from ..config.defaults import RiskParams
from ..features.indicators import clamp
from ..logging import get_risk_logger
from ..models.risk import (
    AlertSeverity,
    AlertType,
    LimitUtilization,
    Position,
    RiskAlert,
    RiskAssessment,
    RiskState,
    UtilizationStatus,
)
from ..utils.time import utc_now

logger = get_risk_logger(__name__)


class RiskMonitor:
    """
    Evaluates account risk against configured limits

    The evaluation is pure: every tick recomputes the assessment from the
    positions and PnL passed in. The only carried state is the persisted
    circuit-breaker latch, which the caller supplies as `halt_latched`.
    """

    def __init__(self, params: Optional[RiskParams] = None):
        self.params = params or RiskParams()

    def evaluate(self, positions: Sequence[Position], daily_pnl: float,
                 portfolio_value: float, volatility: float, limits: RiskLimits,
                 halt_latched: bool = False) -> RiskAssessment:
        """
        Evaluate risk limits for one tick

        Args:
            positions: Open positions
            daily_pnl: Realised plus unrealised PnL for the day
            portfolio_value: Current portfolio value
            volatility: Current market volatility estimate
            limits: Account risk limits
            halt_latched: Whether a previous breach is still latched

        Returns:
            RiskAssessment; a limit breach is reported, never raised
        """
        p = self.params
        volatility = volatility if _finite(volatility) and volatility > 0 else 0.0
        daily_pnl = daily_pnl if _finite(daily_pnl) else 0.0
        valid_value = _finite(portfolio_value) and portfolio_value > 0

        daily_loss_fraction = abs(daily_pnl) / portfolio_value if valid_value else 1.0
        exposures = self._symbol_exposures(positions, portfolio_value if valid_value else 0.0)
        portfolio_risk = self._portfolio_risk(positions, portfolio_value if valid_value else 0.0)

        alerts = []
        triggered = daily_loss_fraction > limits.circuit_breaker_threshold
        if triggered:
            alerts.append(RiskAlert(
                alert_type=AlertType.CIRCUIT_BREAKER,
                severity=AlertSeverity.CRITICAL,
                message=(f"Daily loss {daily_loss_fraction:.2%} exceeds circuit breaker "
                         f"threshold {limits.circuit_breaker_threshold:.2%}"),
            ))

        for symbol, exposure in sorted(exposures.items()):
            if exposure > limits.max_symbol_exposure_fraction:
                alerts.append(RiskAlert(
                    alert_type=AlertType.CONCENTRATION_RISK,
                    severity=AlertSeverity.HIGH,
                    message=(f"{symbol} exposure {exposure:.2%} exceeds limit "
                             f"{limits.max_symbol_exposure_fraction:.2%}"),
                    symbol=symbol,
                ))

        if volatility > p.volatility_alert_threshold:
            alerts.append(RiskAlert(
                alert_type=AlertType.VOLATILITY_SPIKE,
                severity=AlertSeverity.MEDIUM,
                message=f"Market volatility {volatility:.2%} above {p.volatility_alert_threshold:.2%}",
            ))

        if portfolio_risk > limits.max_portfolio_risk_fraction:
            alerts.append(RiskAlert(
                alert_type=AlertType.PORTFOLIO_RISK,
                severity=AlertSeverity.HIGH,
                message=(f"Portfolio risk {portfolio_risk:.2%} exceeds limit "
                         f"{limits.max_portfolio_risk_fraction:.2%}"),
            ))

        utilization = (
            self._utilization("daily_loss", daily_loss_fraction, limits.max_daily_loss_fraction),
            self._utilization("portfolio_risk", portfolio_risk, limits.max_portfolio_risk_fraction),
        )

        if triggered or halt_latched:
            state = RiskState.HALTED
        elif alerts or any(u.status != UtilizationStatus.NORMAL for u in utilization):
            state = RiskState.WARNING
        else:
            state = RiskState.NORMAL

        max_exposure = max(exposures.values(), default=0.0)
        overall_score = clamp(
            0.5 + 2.0 * daily_loss_fraction + max(max_exposure, 0.0) + 5.0 * volatility,
            0.1, 0.9)

        for alert in alerts:
            logger.warning("Risk alert raised",
                           alert_type=alert.alert_type.value,
                           severity=alert.severity.value,
                           symbol=alert.symbol,
                           message=alert.message)

        return RiskAssessment(
            state=state,
            daily_loss_fraction=daily_loss_fraction,
            portfolio_risk=portfolio_risk,
            symbol_exposures=exposures,
            volatility=volatility,
            overall_risk_score=overall_score,
            circuit_breaker_triggered=triggered,
            alerts=tuple(alerts),
            limit_utilization=utilization,
            evaluated_at=utc_now(),
        )

    def _symbol_exposures(self, positions: Sequence[Position],
                          portfolio_value: float) -> dict[str, float]:
        notionals: dict[str, float] = {}
        for position in positions:
            notional = abs(position.notional)
            if not _finite(notional):
                continue
            notionals[position.symbol] = notionals.get(position.symbol, 0.0) + notional

        if portfolio_value <= 0:
            return {symbol: 1.0 for symbol, value in notionals.items() if value > 0}
        return {symbol: value / portfolio_value for symbol, value in notionals.items()}

    def _portfolio_risk(self, positions: Sequence[Position], portfolio_value: float) -> float:
        p = self.params
        total_risk = sum(abs(pos.risk_amount) for pos in positions if _finite(pos.risk_amount))
        if total_risk <= 0:
            return 0.0
        if portfolio_value <= 0:
            return 1.0

        diversification = 1.0 - p.diversification_benefit * min(
            1.0, len(positions) / p.diversification_positions)
        return total_risk / portfolio_value * diversification

    def _utilization(self, limit_type: str, current: float, limit: float) -> LimitUtilization:
        p = self.params
        if limit > 0:
            ratio = current / limit
        else:
            ratio = 1.0 if current > 0 else 0.0

        if ratio > p.utilization_critical:
            status = UtilizationStatus.CRITICAL
        elif ratio > p.utilization_warning:
            status = UtilizationStatus.WARNING
        else:
            status = UtilizationStatus.NORMAL

        return LimitUtilization(
            limit_type=limit_type,
            current_value=current,
            limit_value=limit,
            utilization_pct=ratio * 100.0,
            status=status,
        )


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def evaluate_risk_limits(positions: Sequence[Position], daily_pnl: float,
                         portfolio_value: float, volatility: float, limits: RiskLimits,
                         halt_latched: bool = False,
                         params: Optional[RiskParams] = None) -> RiskAssessment:
    """Evaluate risk limits for one tick with the given (or default) params."""
    return RiskMonitor(params).evaluate(
        positions, daily_pnl, portfolio_value, volatility, limits, halt_latched)
