"""
Timestamp utilities.

Bar timestamps from the market-data source are authoritative for ordering.
Wall-clock time is only used to stamp records the pipeline produces.
"""

from datetime import datetime, timezone
from typing import Any

# Epoch values above this are milliseconds (year 2286 in seconds)
_MS_THRESHOLD = 10_000_000_000


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_datetime(value: Any) -> datetime:
    """
    Convert a raw timestamp into an aware UTC datetime.

    Accepts epoch seconds, epoch milliseconds, ISO-8601 strings (a trailing
    'Z' is allowed) and datetimes. Naive datetimes are taken to be UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if abs(value) >= _MS_THRESHOLD else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        try:
            return to_utc_datetime(float(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_utc_datetime(datetime.fromisoformat(text))

    raise ValueError(f"Invalid timestamp: {value!r}")


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 representation used in persisted records."""
    return to_utc_datetime(ts).isoformat()
