"""
Market data module.

Bar model, payload parsing and the market-data source boundary.
"""

from .models import Bar
from .parsers import parse_bar, parse_bars, validate_bar_sequence
from .source import MarketDataSource, StaticMarketDataSource

__all__ = [
    "Bar",
    "MarketDataSource",
    "StaticMarketDataSource",
    "parse_bar",
    "parse_bars",
    "validate_bar_sequence",
]
