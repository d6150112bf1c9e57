#!/usr/bin/env python3
"""
Basic Usage Example - Atlas Decision Engine

This script demonstrates the decision pipeline with simulated market data.
It shows how to:
- Parse an exchange OHLC payload into bars
- Run the engine for one account and inspect the analysis
- Tick the risk monitor and observe the circuit breaker latch

Run: python examples/basic_usage.py
"""

import math
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import orjson

from atlas_app.data.parsers import parse_bars
from atlas_app.data.source import StaticMarketDataSource
from atlas_app.engine import DecisionEngine
from atlas_app.logging import configure_logging
from atlas_app.models.risk import Position


def create_ohlc_payload(symbol_key: str, start_price: float, drift: float,
                        count: int = 120) -> bytes:
    """Create an exchange-format OHLC response with a drifting close."""
    start_ts = 1704067200
    rows: List[List[Any]] = []
    previous = start_price
    for i in range(count):
        close = start_price + drift * i + start_price * 0.002 * math.sin(i / 3)
        high = max(previous, close) * 1.0015
        low = min(previous, close) * 0.9985
        rows.append([start_ts + i * 900, f"{previous:.2f}", f"{high:.2f}", f"{low:.2f}",
                     f"{close:.2f}", f"{(high + low) / 2:.2f}", f"{5 + (i % 7):.4f}", 120 + i])
        previous = close
    payload: Dict[str, Any] = {"error": [], "result": {symbol_key: rows, "last": rows[-1][0]}}
    return orjson.dumps(payload)


def print_analysis(analysis) -> None:
    features = analysis.features
    technical = features.technical
    print(f"\n📈 {analysis.symbol} @ {features.price:,.2f}")
    print(f"  RSI {technical.rsi:.1f}  MACD {technical.macd:.2f}  ADX {technical.adx:.1f}")
    print(f"  Regime: {analysis.regime.regime_type.value} "
          f"(confidence {analysis.regime.confidence:.2f})")
    print(f"  Signal: {analysis.signal.signal_type.value} "
          f"(confidence {analysis.signal.confidence:.2f}, "
          f"score {analysis.signal.ensemble_score:.3f})")
    print(f"  Filters passed: {', '.join(sorted(analysis.signal.filters_passed)) or 'none'}")
    print(f"  Size: {analysis.sizing.recommended_size:,.2f} "
          f"(max {analysis.sizing.max_size:,.2f}, {analysis.sizing.method.value})")
    if analysis.trading_halted:
        print("  ⛔ Trading halted for this account")


def main() -> None:
    configure_logging(level="WARNING")

    bars = {
        "XBTUSD": parse_bars(create_ohlc_payload("XXBTZUSD", 42000.0, 35.0)),
        "ETHUSD": parse_bars(create_ohlc_payload("XETHZUSD", 2300.0, -1.5)),
    }

    with tempfile.TemporaryDirectory() as tmp:
        engine = DecisionEngine(source=StaticMarketDataSource(bars),
                                db_path=Path(tmp) / "atlas.db")
        user_id = "demo-user"
        engine.risk_state.save_bot_config(user_id, {
            "capital": 25000,
            "risk_per_trade": 0.01,
            "sizing_method": "volatility_adjusted",
        })

        print("🚀 Running analysis")
        for symbol in bars:
            print_analysis(engine.analyze_market(symbol, user_id=user_id))

        print("\n🛡️  Risk monitoring")
        engine.risk_state.upsert_position(user_id, Position("XBTUSD", 0.1, 46000.0, 92.0))
        assessment = engine.monitor_risk(user_id, volatility=0.02)
        print(f"  State: {assessment.state.value}, "
              f"risk score {assessment.overall_risk_score:.2f}")

        engine.risk_state.record_pnl(user_id, -600.0)
        assessment = engine.monitor_risk(user_id, volatility=0.02)
        print(f"  After a -600 day: {assessment.state.value}")
        for alert in assessment.alerts:
            print(f"    [{alert.severity.value}] {alert.message}")

        print_analysis(engine.analyze_market("XBTUSD", user_id=user_id))

        engine.reset_circuit_breaker(user_id, "demo reset")
        print(f"\n🔓 Halted after reset: {engine.is_trading_halted(user_id)}")


if __name__ == "__main__":
    main()
