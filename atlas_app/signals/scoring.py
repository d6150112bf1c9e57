"""Sub-scores blended into the ensemble score.

Each scorer maps a slice of the feature vector to [0, 1], where 0.5 is
neutral, above 0.5 favours buying and below favours selling.
"""

from ..config.defaults import SignalParams
from ..features.indicators import clamp
from ..models.features import FeatureVector, VolatilityRegime


def _direction(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def technical_score(features: FeatureVector, params: SignalParams) -> float:
    """RSI extremes, MACD sign, and ADX / volume confirmation of the MACD direction."""
    tech = features.technical
    score = 0.5

    if tech.rsi < params.rsi_oversold:
        score += 0.2
    elif tech.rsi > params.rsi_overbought:
        score -= 0.2

    direction = _direction(tech.macd)
    score += 0.1 * direction

    if tech.adx > params.adx_trend_level:
        score += 0.15 * direction
    if tech.volume_ratio > params.volume_surge_ratio:
        score += 0.1 * direction

    return clamp(score, 0.0, 1.0)


def structural_score(features: FeatureVector, params: SignalParams) -> float:
    """Trend strength and momentum, damped in high and extreme volatility."""
    structure = features.structure
    deviation = (0.3 * structure.trend_strength
                 + 0.2 * clamp(structure.momentum * 10.0, -1.0, 1.0))

    if structure.volatility_regime == VolatilityRegime.EXTREME:
        deviation *= 0.5
    elif structure.volatility_regime == VolatilityRegime.HIGH:
        deviation *= 0.75

    return clamp(0.5 + deviation, 0.0, 1.0)


def ml_score(features: FeatureVector, params: SignalParams) -> float:
    """Ensemble prediction, pulled towards neutral when price is accelerating hard."""
    model = features.model
    deviation = model.ensemble_prediction - 0.5
    if abs(model.price_velocity) > params.velocity_penalty_threshold:
        deviation *= 0.9
    return clamp(0.5 + deviation, 0.0, 1.0)


def ensemble_score(features: FeatureVector, params: SignalParams) -> float:
    """Weighted blend of the technical, structural and ml sub-scores."""
    score = (params.technical_weight * technical_score(features, params)
             + params.structural_weight * structural_score(features, params)
             + params.ml_weight * ml_score(features, params))
    return clamp(score, 0.0, 1.0)
