"""Market-data source boundary."""

from typing import Protocol, Sequence

from .models import Bar


class MarketDataSource(Protocol):
    """Supplies an ordered, immutable bar window per symbol and interval.

    Implementations perform blocking I/O and should raise MarketDataError
    (or let the engine wrap their exceptions into one).
    """

    def fetch_bars(self, symbol: str, interval: str, limit: int) -> Sequence[Bar]:
        ...


class StaticMarketDataSource:
    """In-memory source over pre-loaded windows, for replays and tests."""

    def __init__(self, windows: dict[str, Sequence[Bar]]):
        self._windows = {symbol: tuple(bars) for symbol, bars in windows.items()}

    def fetch_bars(self, symbol: str, interval: str, limit: int) -> Sequence[Bar]:
        bars = self._windows.get(symbol)
        if bars is None:
            raise KeyError(f"No bars loaded for {symbol}")
        return bars[-limit:]
