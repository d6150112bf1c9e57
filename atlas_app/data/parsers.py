"""
Market data parsers for converting raw OHLC payloads to Bar objects.

Supports the exchange row format
    [time, open, high, low, close, vwap, volume, count]
as returned by OHLC endpoints, plain dict rows, and raw JSON text.
"""

import math
from typing import Any, Iterable, Union

import orjson

from ..errors import MalformedDataError, TemporalDataError
from ..utils.time import to_utc_datetime
from .models import Bar

# Positions within an exchange OHLC row
_ROW_TIME, _ROW_OPEN, _ROW_HIGH, _ROW_LOW, _ROW_CLOSE, _ROW_VWAP, _ROW_VOLUME = range(7)


def parse_json_payload(raw_data: Union[str, bytes]) -> Any:
    """
    Parse raw JSON text with orjson.

    Raises:
        MalformedDataError: If the text is not valid JSON
    """
    try:
        return orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise MalformedDataError(f"Invalid JSON: {e}", expected_format="json")


def _to_float(value: Any, field: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedDataError(f"Invalid {field}: {value!r}", raw_data=repr(value))
    if not math.isfinite(number):
        raise MalformedDataError(f"Non-finite {field}: {value!r}", raw_data=repr(value))
    return number


def parse_bar(row: Any) -> Bar:
    """
    Parse a single OHLC row or dict into a Bar.

    Raises:
        MalformedDataError: If fields are missing, non-numeric, or the OHLC
            prices are inconsistent
    """
    if isinstance(row, dict):
        raw_ts = row.get("timestamp", row.get("time"))
        raw_values = [row.get(k) for k in ("open", "high", "low", "close", "volume")]
    elif isinstance(row, (list, tuple)):
        if len(row) < 5:
            raise MalformedDataError(f"OHLC row too short: {row!r}", raw_data=repr(row))
        raw_ts = row[_ROW_TIME]
        # Exchange rows carry vwap before volume; six-field rows end with volume
        if len(row) > _ROW_VOLUME:
            volume = row[_ROW_VOLUME]
        elif len(row) == 6:
            volume = row[5]
        else:
            volume = 0.0
        raw_values = [row[_ROW_OPEN], row[_ROW_HIGH], row[_ROW_LOW], row[_ROW_CLOSE], volume]
    else:
        raise MalformedDataError(f"Unsupported bar format: {type(row).__name__}",
                                 expected_format="list or dict")

    try:
        timestamp = to_utc_datetime(raw_ts)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        raise MalformedDataError(f"Invalid timestamp {raw_ts!r}: {e}", raw_data=repr(raw_ts))

    open_, high, low, close, volume = (
        _to_float(v, name) for v, name in zip(raw_values, ("open", "high", "low", "close", "volume"))
    )

    if min(open_, high, low, close) <= 0:
        raise MalformedDataError("All bar prices must be positive", raw_data=repr(row))
    if high < max(open_, close) or low > min(open_, close):
        raise MalformedDataError(
            f"Inconsistent OHLC: open={open_} high={high} low={low} close={close}",
            raw_data=repr(row),
        )
    if volume < 0:
        raise MalformedDataError(f"Negative volume: {volume}", raw_data=repr(row))

    return Bar(timestamp=timestamp, open=open_, high=high, low=low, close=close, volume=volume)


def validate_bar_sequence(bars: Iterable[Bar]) -> None:
    """
    Check that bars are strictly increasing in time.

    Raises:
        TemporalDataError: On an out-of-order or duplicated timestamp
    """
    previous = None
    for bar in bars:
        if previous is not None and bar.timestamp <= previous.timestamp:
            raise TemporalDataError(
                "Bars must be in strictly increasing timestamp order",
                timestamp=int(bar.timestamp.timestamp()),
                previous_timestamp=int(previous.timestamp.timestamp()),
            )
        previous = bar


def parse_bars(payload: Any) -> list[Bar]:
    """
    Parse an OHLC payload into an ordered list of bars.

    Args:
        payload: JSON text, a list of rows, or an exchange response of the
            form {"result": {"<pair>": [rows...], "last": ...}}

    Returns:
        Bars ordered oldest first

    Raises:
        MalformedDataError: If the payload or any row is malformed
        TemporalDataError: If rows are out of order
    """
    if isinstance(payload, (str, bytes)):
        payload = parse_json_payload(payload)

    if isinstance(payload, dict):
        result = payload.get("result", payload)
        if not isinstance(result, dict):
            raise MalformedDataError(
                f"Unsupported result type: {type(result).__name__}",
                expected_format="result.<pair>",
            )
        rows = next(
            (value for key, value in result.items() if key != "last" and isinstance(value, list)),
            None,
        )
        if rows is None:
            raise MalformedDataError("No OHLC rows found in payload", expected_format="result.<pair>")
    elif isinstance(payload, list):
        rows = payload
    else:
        raise MalformedDataError(f"Unsupported payload type: {type(payload).__name__}")

    bars = [parse_bar(row) for row in rows]
    validate_bar_sequence(bars)
    return bars
