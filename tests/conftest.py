"""Pytest configuration and shared fixtures."""

import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

import pytest

from atlas_app.config.bot_config import RiskLimits
from atlas_app.data.models import Bar
from atlas_app.models.sizing import SizingMethod

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _build_bars(closes: Sequence[float], volumes: Optional[Sequence[float]] = None,
                spread: float = 0.002, interval_minutes: int = 15) -> list[Bar]:
    bars = []
    previous_close = closes[0]
    for i, close in enumerate(closes):
        open_ = previous_close
        high = max(open_, close) * (1 + spread)
        low = min(open_, close) * (1 - spread)
        bars.append(Bar(
            timestamp=START + timedelta(minutes=interval_minutes * i),
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=volumes[i] if volumes is not None else 1000.0,
        ))
        previous_close = close
    return bars


@pytest.fixture
def bar_factory() -> Callable[..., list[Bar]]:
    """Build a bar window from a close series; opens chain from the previous close."""
    return _build_bars


@pytest.fixture
def uptrend_bars() -> list[Bar]:
    """Low-noise linear uptrend, 100 bars."""
    closes = [100.0 + 0.5 * i + 0.05 * math.sin(i) for i in range(100)]
    return _build_bars(closes)


@pytest.fixture
def downtrend_bars() -> list[Bar]:
    """Low-noise linear downtrend, 100 bars."""
    closes = [150.0 - 0.5 * i + 0.05 * math.sin(i) for i in range(100)]
    return _build_bars(closes)


@pytest.fixture
def ranging_bars() -> list[Bar]:
    """Oscillation around a flat mean with no drift, 100 bars."""
    closes = [100.0 + 0.5 * math.sin(i * 1.3) for i in range(100)]
    return _build_bars(closes)


@pytest.fixture
def volatile_bars() -> list[Bar]:
    """Alternating +/-10% closes, 100 bars."""
    closes = [100.0 if i % 2 == 0 else 110.0 for i in range(100)]
    return _build_bars(closes)


@pytest.fixture
def flat_bars() -> list[Bar]:
    """Perfectly flat closes, 60 bars."""
    return _build_bars([100.0] * 60, spread=0.0)


@pytest.fixture
def risk_limits() -> RiskLimits:
    """Default account risk limits."""
    return RiskLimits(
        max_daily_loss_fraction=0.05,
        max_symbol_exposure_fraction=0.25,
        max_portfolio_risk_fraction=0.10,
        circuit_breaker_threshold=0.02,
        sizing_method=SizingMethod.FIXED_PERCENTAGE,
    )


@pytest.fixture
def kraken_ohlc_payload() -> dict:
    """Exchange OHLC response: [time, open, high, low, close, vwap, volume, count]."""
    return {
        "error": [],
        "result": {
            "XXBTZUSD": [
                [1704067200, "42000.0", "42100.0", "41900.0", "42050.0", "42010.0", "12.5", 340],
                [1704068100, "42050.0", "42200.0", "42000.0", "42150.0", "42100.0", "8.25", 210],
                [1704069000, "42150.0", "42180.0", "41950.0", "42000.0", "42060.0", "15.0", 402],
            ],
            "last": 1704069000,
        },
    }
