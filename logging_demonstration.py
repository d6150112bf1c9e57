#!/usr/bin/env python3
"""
Demonstration script for the structured audit logging of the decision pipeline.

Shows how every signal filter evaluation and every risk tick is captured as a
structured event alongside the persisted records.
"""

import math
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Configure logging to show output
from atlas_app.logging.config import configure_logging
configure_logging(level="DEBUG", format_json=False, include_timestamp=True)

from atlas_app.data.models import Bar
from atlas_app.engine import DecisionEngine


def build_bars(count: int = 80) -> list:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    bars = []
    previous = 100.0
    for i in range(count):
        close = 100.0 + 0.4 * i + 0.3 * math.sin(i)
        bars.append(Bar(
            timestamp=start + timedelta(minutes=15 * i),
            open=previous,
            high=max(previous, close) * 1.002,
            low=min(previous, close) * 0.998,
            close=close,
            volume=1000.0 + 400.0 * (i % 5),
        ))
        previous = close
    return bars


def demonstrate_signal_logging(engine: DecisionEngine) -> None:
    """Every filter is logged with PASS/FAIL and the condition checked."""
    print("=" * 70)
    print("SIGNAL FILTER LOGGING DEMONSTRATION")
    print("=" * 70)
    engine.analyze_market("XBTUSD", build_bars())


def demonstrate_risk_logging(engine: DecisionEngine) -> None:
    """Risk ticks log at info, warning or critical depending on state."""
    print("\n" + "=" * 70)
    print("RISK STATE LOGGING DEMONSTRATION")
    print("=" * 70)

    print("\n1. Quiet account (info):")
    engine.monitor_risk("demo-user", volatility=0.01)

    print("\n2. Volatility spike (warning):")
    engine.monitor_risk("demo-user", volatility=0.08)

    print("\n3. Daily loss beyond the circuit breaker (critical):")
    engine.risk_state.record_pnl("demo-user", -300.0)
    engine.monitor_risk("demo-user", volatility=0.01)

    print("\n4. Manual reset (warning):")
    engine.reset_circuit_breaker("demo-user", "demonstration complete")


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        engine = DecisionEngine(db_path=Path(tmp) / "atlas.db")
        demonstrate_signal_logging(engine)
        demonstrate_risk_logging(engine)


if __name__ == "__main__":
    main()
