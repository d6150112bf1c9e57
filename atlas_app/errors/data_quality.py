"""
Data quality error classifications for bar and position inputs.

These exceptions describe problems with caller-supplied data. They are raised
at the parsing boundary; the pure pipeline stages degrade to neutral values
instead of raising them for short windows.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class TemporalDataError(DataQualityError):
    """Bars out of chronological order or duplicated."""

    def __init__(self, message: str, timestamp: Optional[int] = None,
                 previous_timestamp: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.previous_timestamp = previous_timestamp


class MalformedDataError(DataQualityError):
    """Data exists but is in an incorrect format or is numerically invalid."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """Not enough history for a calculation that cannot degrade."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count
