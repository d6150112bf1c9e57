"""
SQLite persistence layer.

Append-only decision records, per-user risk state and shared rate-limit
counters. Store failures raise PersistenceError.
"""

from .rate_limits import RateLimitResult, RateLimitStore
from .risk_state import RiskStateStore
from .store import RecordStore, StoredRecord

__all__ = [
    "RateLimitResult",
    "RateLimitStore",
    "RecordStore",
    "RiskStateStore",
    "StoredRecord",
]
