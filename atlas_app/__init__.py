"""
Atlas App - Quantitative Crypto Trading Decision Engine

Turns OHLCV bar windows into feature vectors, market regimes, trading
signals and bounded position sizes, and evaluates account risk limits with
a persisted circuit breaker.
"""

from .features.extractor import compute_features
from .regime.classifier import classify_regime
from .risk.monitor import evaluate_risk_limits
from .signals.generator import generate_signal
from .sizing.position_sizer import size_position

__version__ = "0.1.0"
__author__ = "Atlas Team"

__all__ = [
    "classify_regime",
    "compute_features",
    "evaluate_risk_limits",
    "generate_signal",
    "size_position",
]
