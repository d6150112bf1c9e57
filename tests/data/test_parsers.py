"""Tests for OHLC payload parsing."""

from datetime import datetime, timezone

import orjson
import pytest

from atlas_app.data.parsers import parse_bar, parse_bars, parse_json_payload, validate_bar_sequence
from atlas_app.errors import MalformedDataError, TemporalDataError


class TestParseBar:
    """Test single-row parsing."""

    def test_exchange_row(self):
        bar = parse_bar([1704067200, "42000.0", "42100.0", "41900.0", "42050.0",
                         "42010.0", "12.5", 340])

        assert bar.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert (bar.open, bar.high, bar.low, bar.close) == (42000.0, 42100.0, 41900.0, 42050.0)
        # vwap is skipped, volume comes from the seventh field
        assert bar.volume == 12.5

    def test_six_field_row(self):
        bar = parse_bar([1704067200, 10, 11, 9, 10.5, 250])
        assert bar.volume == 250.0

    def test_five_field_row_has_zero_volume(self):
        bar = parse_bar([1704067200, 10, 11, 9, 10.5])
        assert bar.volume == 0.0

    def test_dict_row(self):
        bar = parse_bar({
            "timestamp": "2024-01-01T00:15:00Z",
            "open": 10, "high": 11, "low": 9, "close": 10.5, "volume": 3,
        })
        assert bar.timestamp == datetime(2024, 1, 1, 0, 15, tzinfo=timezone.utc)
        assert bar.close == 10.5

    def test_millisecond_timestamp(self):
        bar = parse_bar([1704067200000, 10, 11, 9, 10.5, 1])
        assert bar.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("row", [
        [1704067200, 10, 11, 9],                        # too short
        [1704067200, "ten", 11, 9, 10.5, 1],            # non-numeric
        [1704067200, 10, 11, 9, float("nan"), 1],       # non-finite
        [1704067200, 10, 9.5, 9, 10.5, 1],              # high below close
        [1704067200, 10, 11, 10.2, 10.5, 1],            # low above open
        [1704067200, 0, 11, 9, 10.5, 1],                # non-positive price
        [1704067200, 10, 11, 9, 10.5, -1],              # negative volume
        ["not-a-time", 10, 11, 9, 10.5, 1],             # bad timestamp
        "10,11,9,10.5",                                 # unsupported type
    ])
    def test_malformed_rows(self, row):
        with pytest.raises(MalformedDataError):
            parse_bar(row)


class TestParseBars:
    """Test payload parsing."""

    def test_exchange_response(self, kraken_ohlc_payload):
        bars = parse_bars(kraken_ohlc_payload)

        assert len(bars) == 3
        assert [b.close for b in bars] == [42050.0, 42150.0, 42000.0]
        assert bars[0].timestamp < bars[1].timestamp < bars[2].timestamp

    def test_json_text(self, kraken_ohlc_payload):
        raw = orjson.dumps(kraken_ohlc_payload)
        assert parse_bars(raw) == parse_bars(raw.decode())
        assert len(parse_bars(raw)) == 3

    def test_plain_row_list(self, kraken_ohlc_payload):
        rows = kraken_ohlc_payload["result"]["XXBTZUSD"]
        assert len(parse_bars(rows)) == 3

    def test_invalid_json(self):
        with pytest.raises(MalformedDataError) as exc_info:
            parse_json_payload("{not json")
        assert exc_info.value.expected_format == "json"

    def test_missing_rows(self):
        with pytest.raises(MalformedDataError):
            parse_bars({"error": [], "result": {"last": 1704069000}})

    def test_unsupported_payload(self):
        with pytest.raises(MalformedDataError):
            parse_bars(42)

    def test_result_must_be_a_mapping(self, kraken_ohlc_payload):
        rows = kraken_ohlc_payload["result"]["XXBTZUSD"]
        with pytest.raises(MalformedDataError):
            parse_bars({"error": [], "result": rows})

    def test_out_of_order_rows(self, kraken_ohlc_payload):
        rows = list(kraken_ohlc_payload["result"]["XXBTZUSD"])
        rows[1], rows[2] = rows[2], rows[1]

        with pytest.raises(TemporalDataError) as exc_info:
            parse_bars(rows)
        assert exc_info.value.previous_timestamp == 1704069000

    def test_duplicate_timestamps(self, bar_factory):
        bars = bar_factory([100.0, 101.0])
        with pytest.raises(TemporalDataError):
            validate_bar_sequence([bars[0], bars[0]])
