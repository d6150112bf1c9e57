"""Market regime classification."""

from .classifier import RegimeClassifier, classify_regime

__all__ = ["RegimeClassifier", "classify_regime"]
