"""Market structure and model-style features derived from the bar window."""

from typing import Optional, Sequence

from ..data.models import Bar
from ..models.features import VolatilityRegime
from .indicators import calculate_std, clamp


def calculate_trend_strength(closes: Sequence[float], window: int = 50) -> Optional[float]:
    """
    Signed trend strength over the last `window` closes, in [-1, 1].

    strength = clamp((last - first) / window / mean * 100, -1, 1)
    """
    if len(closes) < window:
        return None

    recent = closes[-window:]
    average = sum(recent) / window
    if average <= 0:
        return 0.0

    slope = (recent[-1] - recent[0]) / window
    return clamp(slope / average * 100.0, -1.0, 1.0)


def classify_volatility_regime(
    atr: float,
    price: float,
    extreme: float = 0.05,
    high: float = 0.03,
    normal: float = 0.01
) -> VolatilityRegime:
    """Bucket ATR / price into a volatility regime."""
    if price <= 0:
        return VolatilityRegime.LOW

    ratio = atr / price
    if ratio > extreme:
        return VolatilityRegime.EXTREME
    if ratio > high:
        return VolatilityRegime.HIGH
    if ratio > normal:
        return VolatilityRegime.NORMAL
    return VolatilityRegime.LOW


def calculate_momentum(closes: Sequence[float], period: int = 10) -> Optional[float]:
    """Fractional change from the close `period` bars back."""
    if len(closes) <= period:
        return None

    base = closes[-1 - period]
    if base <= 0:
        return 0.0
    return (closes[-1] - base) / base


def calculate_support_resistance_distance(
    bars: Sequence[Bar],
    window: int = 20
) -> Optional[float]:
    """
    Distance to the nearer of the recent high and low, as a fraction of price.

    Returns:
        Non-negative distance or None if fewer than `window` bars
    """
    if len(bars) < window:
        return None

    recent = bars[-window:]
    price = recent[-1].close
    if price <= 0:
        return 0.0

    resistance = max(bar.high for bar in recent)
    support = min(bar.low for bar in recent)
    return max(0.0, min(resistance - price, price - support) / price)


def calculate_price_velocity(closes: Sequence[float]) -> float:
    """Second difference of the last three closes, normalised by price."""
    if len(closes) < 3 or closes[-1] <= 0:
        return 0.0

    velocity = closes[-1] - closes[-2]
    previous_velocity = closes[-2] - closes[-3]
    return (velocity - previous_velocity) / closes[-1]


def calculate_ensemble_prediction(closes: Sequence[float], lookback: int = 10) -> float:
    """
    Mean of three deterministic votes in [0, 1].

    Trend vote 0.6/0.4 against the close `lookback` bars back, 5-bar momentum
    vote 0.65/0.35 and a neutral 0.5.
    """
    if len(closes) <= lookback:
        return 0.5

    trend_vote = 0.6 if closes[-1] > closes[-1 - lookback] else 0.4
    momentum = calculate_momentum(closes, 5) or 0.0
    momentum_vote = 0.65 if momentum > 0 else 0.35
    return clamp((trend_vote + momentum_vote + 0.5) / 3.0, 0.0, 1.0)


def calculate_confidence_interval(
    closes: Sequence[float],
    window: int = 20,
    z_score: float = 1.96
) -> tuple[float, float]:
    """price +/- z * population std-dev of the last `window` closes."""
    if not closes:
        return 0.0, 0.0

    price = closes[-1]
    if len(closes) < window:
        return price, price

    margin = z_score * calculate_std(closes[-window:])
    return price - margin, price + margin
