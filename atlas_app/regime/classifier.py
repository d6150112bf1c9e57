"""Market regime classification from the trailing close window."""

import math
from typing import Optional, Sequence

from ..config.defaults import RegimeParams
from ..data.models import Bar
from ..features.indicators import calculate_std, clamp
from ..logging import get_logger
from ..models.regime import Regime, RegimeType

logger = get_logger(__name__)


def calculate_returns(closes: Sequence[float]) -> list[float]:
    """Simple returns between consecutive closes; zero-priced bases are skipped."""
    return [
        (closes[i] - closes[i - 1]) / closes[i - 1]
        for i in range(1, len(closes))
        if closes[i - 1] > 0
    ]


def calculate_linear_trend(closes: Sequence[float]) -> float:
    """
    Signed goodness of a least-squares line through the closes.

    Returns sign(slope) * R^2, in [-1, 1]. A flat window reads 0.
    """
    n = len(closes)
    if n < 2:
        return 0.0

    mean_x = (n - 1) / 2.0
    mean_y = sum(closes) / n

    ss_xy = 0.0
    ss_xx = 0.0
    ss_yy = 0.0
    for i, y in enumerate(closes):
        dx = i - mean_x
        dy = y - mean_y
        ss_xy += dx * dy
        ss_xx += dx * dx
        ss_yy += dy * dy

    if ss_xx == 0 or ss_yy == 0:
        return 0.0

    slope = ss_xy / ss_xx
    r_squared = (ss_xy * ss_xy) / (ss_xx * ss_yy)
    return math.copysign(clamp(r_squared, 0.0, 1.0), slope)


class RegimeClassifier:
    """
    Classifies a bar window as trend, range or high volatility

    Volatility is checked first: a window whose returns are too noisy is
    high_volatility regardless of its direction.
    """

    def __init__(self, params: Optional[RegimeParams] = None):
        self.params = params or RegimeParams()

    def classify(self, bars: Sequence[Bar]) -> Regime:
        p = self.params
        if len(bars) < p.window:
            logger.debug("Insufficient bars for regime classification",
                         bar_count=len(bars), required=p.window)
            return Regime.fallback()

        closes = [bar.close for bar in bars[-p.window:]]
        volatility = calculate_std(calculate_returns(closes))
        trend_strength = calculate_linear_trend(closes)

        if volatility > p.high_volatility_threshold:
            regime_type = RegimeType.HIGH_VOLATILITY
            confidence = min(volatility * p.volatility_confidence_mult, p.max_confidence)
        elif abs(trend_strength) > p.trend_threshold:
            regime_type = RegimeType.TREND
            confidence = abs(trend_strength)
        else:
            regime_type = RegimeType.RANGE
            confidence = 1.0 - abs(trend_strength)

        regime = Regime(
            regime_type=regime_type,
            confidence=clamp(confidence, 0.0, p.max_confidence),
            trend_strength=trend_strength,
            volatility=volatility,
        )

        logger.debug("Regime classified",
                     regime=regime.regime_type.value,
                     confidence=regime.confidence,
                     trend_strength=trend_strength,
                     volatility=volatility)
        return regime


def classify_regime(bars: Sequence[Bar], params: Optional[RegimeParams] = None) -> Regime:
    """Classify the regime of a bar window with the given (or default) params."""
    return RegimeClassifier(params).classify(bars)
