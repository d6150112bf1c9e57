"""
Feature extraction module.

Technical indicators, market structure and model-style features computed
from an ordered bar window.
"""

from .extractor import FeatureExtractor, compute_features

__all__ = ["FeatureExtractor", "compute_features"]
