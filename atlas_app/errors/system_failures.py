"""
System failure error classifications.

External I/O failures (market data, persistence) are a distinct error kind so
callers can apply their own retry policy. The pipeline itself never retries.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for failures that are not caused by the input data."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ExternalIOError(SystemFailureError):
    """Failure talking to a collaborator outside the compute stage."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
        # Transient by nature; the caller owns the retry/backoff decision.
        self.recoverable = True


class MarketDataError(ExternalIOError):
    """Bar fetch from the market-data source failed."""


class PersistenceError(ExternalIOError):
    """Database read or write failed."""


class ConfigurationError(SystemFailureError):
    """Persisted or loaded configuration is invalid."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class RateLimitExceededError(Exception):
    """Actor exceeded its request budget in the shared rate-limit store."""

    def __init__(self, message: str, actor_key: Optional[str] = None,
                 retry_after_seconds: int = 0):
        super().__init__(message)
        self.actor_key = actor_key
        self.retry_after_seconds = retry_after_seconds
        self.recoverable = True
