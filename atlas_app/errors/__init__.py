"""
Error classification for the decision pipeline and its I/O boundary.

Data quality errors describe bad caller input; system failures describe
problems with collaborators (market data, persistence) or configuration.
Risk-limit breaches are results, not exceptions, and have no class here.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    ExternalIOError,
    MarketDataError,
    PersistenceError,
    ConfigurationError,
    RateLimitExceededError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "ExternalIOError",
    "MarketDataError",
    "PersistenceError",
    "ConfigurationError",
    "RateLimitExceededError",
]
