"""Position sizing with per-method hard caps"""

import math
from typing import Optional, Union

from ..config.defaults import SizingParams
from ..errors import MalformedDataError
from ..features.indicators import clamp
from ..logging import get_logger
from ..models.sizing import PositionSizingResult, SizingMethod, TradeStats

logger = get_logger(__name__)


class PositionSizer:
    """
    Computes a bounded position size for one of four sizing methods

    Every method has a hard cap as a fraction of capital, and the final
    recommendation is always clamped into [0, max_size] so that degenerate
    statistics can never produce an unbounded size.
    """

    def __init__(self, params: Optional[SizingParams] = None):
        self.params = params or SizingParams()

    def size(self, method: Union[str, SizingMethod], capital: float,
             risk_per_trade: float, stats: Optional[TradeStats] = None) -> PositionSizingResult:
        """
        Size a position

        Args:
            method: Sizing method name
            capital: Account capital (negative values are treated as 0)
            risk_per_trade: Fraction of capital risked per trade
            stats: Optional trade statistics for kelly / volatility methods

        Returns:
            PositionSizingResult with 0 <= recommended_size <= max_size

        Raises:
            MalformedDataError: If capital or risk_per_trade is not finite
        """
        if not _is_finite(capital):
            raise MalformedDataError("Capital must be a finite number",
                                     raw_data=repr(capital), expected_format="finite float")
        if not _is_finite(risk_per_trade):
            raise MalformedDataError("risk_per_trade must be a finite number",
                                     raw_data=repr(risk_per_trade), expected_format="finite float")

        stats = stats or TradeStats()
        capital = max(0.0, float(capital))
        risk_per_trade = max(0.0, float(risk_per_trade))
        sizing_method = self._resolve_method(method)

        if sizing_method == SizingMethod.KELLY:
            recommended, max_size, fraction, confidence, diagnostic = self._kelly(
                capital, risk_per_trade, stats)
        elif sizing_method == SizingMethod.VOLATILITY_ADJUSTED:
            recommended, max_size, fraction, confidence, diagnostic = self._volatility_adjusted(
                capital, risk_per_trade, stats)
        elif sizing_method == SizingMethod.RISK_PARITY:
            recommended, max_size, fraction, confidence, diagnostic = self._risk_parity(
                capital, risk_per_trade, stats)
        else:
            recommended, max_size, fraction, confidence, diagnostic = self._fixed_percentage(
                capital, risk_per_trade)

        if not _is_finite(recommended):
            recommended = max_size
        recommended = clamp(recommended, 0.0, max_size)

        result = PositionSizingResult(
            method=sizing_method,
            recommended_size=recommended,
            max_size=max_size,
            risk_score=self._risk_score(fraction, stats),
            confidence_level=confidence,
            method_diagnostic=diagnostic,
        )

        logger.debug("Position sized",
                     method=sizing_method.value,
                     recommended_size=result.recommended_size,
                     max_size=result.max_size,
                     risk_score=result.risk_score)
        return result

    def _resolve_method(self, method: Union[str, SizingMethod]) -> SizingMethod:
        try:
            return SizingMethod(method)
        except ValueError:
            logger.warning("Unknown sizing method, using fixed_percentage", method=str(method))
            return SizingMethod.FIXED_PERCENTAGE

    def _kelly(self, capital: float, risk_per_trade: float, stats: TradeStats):
        p = self.params
        win_rate = _stat(stats.win_rate, p.default_win_rate)
        avg_win = _stat(stats.avg_win, p.default_avg_win)
        avg_loss = _stat(stats.avg_loss, p.default_avg_loss)

        if avg_loss <= 0:
            odds = p.max_odds_ratio
        else:
            odds = avg_win / avg_loss
        odds = max(odds, p.min_odds_ratio)

        kelly_fraction = (odds * win_rate - (1.0 - win_rate)) / odds
        position_fraction = clamp(kelly_fraction * p.kelly_safety_factor, 0.0, p.kelly_max_fraction)

        max_size = capital * p.kelly_cap
        recommended = capital * position_fraction * risk_per_trade
        return recommended, max_size, position_fraction, 0.95, {
            "kelly_fraction": kelly_fraction,
            "position_fraction": position_fraction,
            "odds_ratio": odds,
        }

    def _fixed_percentage(self, capital: float, risk_per_trade: float):
        max_size = capital * self.params.fixed_cap
        return capital * risk_per_trade, max_size, risk_per_trade, 0.85, {
            "risk_per_trade": risk_per_trade,
        }

    def _volatility_adjusted(self, capital: float, risk_per_trade: float, stats: TradeStats):
        p = self.params
        volatility = max(_stat(stats.volatility, p.default_volatility), p.min_volatility)
        adjustment = clamp(1.0 / (volatility * p.volatility_scale),
                           p.min_volatility_adjustment, p.max_volatility_adjustment)
        adjusted_risk = risk_per_trade * adjustment

        max_size = capital * p.volatility_adjusted_cap
        return capital * adjusted_risk, max_size, adjusted_risk, 0.88, {
            "volatility_adjustment": adjustment,
        }

    def _risk_parity(self, capital: float, risk_per_trade: float, stats: TradeStats):
        p = self.params
        volatility = max(_stat(stats.volatility, p.default_volatility), p.min_volatility)
        parity_size = capital * p.risk_parity_target / volatility

        max_size = capital * p.risk_parity_cap
        return min(parity_size, capital * risk_per_trade), max_size, p.risk_parity_target, 0.92, {
            "target_risk_contribution": p.risk_parity_target,
        }

    def _risk_score(self, position_fraction: float, stats: TradeStats) -> float:
        score = 0.5 + position_fraction * 2.0
        if stats.volatility is not None and _is_finite(stats.volatility):
            score += stats.volatility * 10.0
        if stats.win_rate is not None and _is_finite(stats.win_rate):
            score -= (stats.win_rate - 0.5) * 0.5
        return clamp(score, 0.1, 0.9)


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _stat(value: Optional[float], default: float) -> float:
    if value is None or not _is_finite(value):
        return default
    return float(value)


def size_position(method: Union[str, SizingMethod], capital: float, risk_per_trade: float,
                  stats: Optional[TradeStats] = None,
                  params: Optional[SizingParams] = None) -> PositionSizingResult:
    """Size a position with the given (or default) params."""
    return PositionSizer(params).size(method, capital, risk_per_trade, stats)
