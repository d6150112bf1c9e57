"""Tests for per-user risk state persistence."""

from datetime import date

import pytest

from atlas_app.models.risk import Position
from atlas_app.persistence.risk_state import RiskStateStore


class TestRiskStateStore:
    """Test RiskStateStore class."""

    def setup_method(self):
        self.user_id = "user-1"

    @pytest.fixture
    def store(self, tmp_path):
        return RiskStateStore(tmp_path / "risk.db")

    def test_bot_config_round_trip(self, store):
        assert store.load_bot_config(self.user_id) == {}

        store.save_bot_config(self.user_id, {"capital_cad": 5000, "risk_per_trade": 0.01})
        store.save_bot_config(self.user_id, {"capital_cad": 7500})

        assert store.load_bot_config(self.user_id) == {"capital_cad": 7500}

    def test_positions(self, store):
        store.upsert_position(self.user_id, Position("XBTUSD", 0.1, 40000.0, 200.0))
        store.upsert_position(self.user_id, Position("ETHUSD", 1.0, 2500.0))
        store.upsert_position(self.user_id, Position("XBTUSD", 0.2, 41000.0, 300.0))

        positions = store.get_positions(self.user_id)
        assert [p.symbol for p in positions] == ["ETHUSD", "XBTUSD"]
        assert positions[1] == Position("XBTUSD", 0.2, 41000.0, 300.0)
        assert store.get_positions("someone-else") == []

    def test_remove_position(self, store):
        store.upsert_position(self.user_id, Position("XBTUSD", 0.1, 40000.0))
        assert store.remove_position(self.user_id, "XBTUSD") is True
        assert store.remove_position(self.user_id, "XBTUSD") is False
        assert store.get_positions(self.user_id) == []

    def test_daily_pnl_accumulates(self, store):
        day = date(2024, 3, 1)
        assert store.get_daily_pnl(self.user_id, day) == 0.0
        store.record_pnl(self.user_id, -100.0, day)
        total = store.record_pnl(self.user_id, -50.0, day)

        assert total == pytest.approx(-150.0)
        assert store.get_daily_pnl(self.user_id, day) == pytest.approx(-150.0)
        assert store.get_daily_pnl(self.user_id, date(2024, 3, 2)) == 0.0

    def test_circuit_breaker_latch(self, store):
        assert store.is_halted(self.user_id) is False

        store.latch_circuit_breaker(self.user_id, "Daily loss 2.50% exceeded 2.00%")
        assert store.is_halted(self.user_id) is True
        status = store.circuit_breaker_status(self.user_id)
        assert status["halted"] is True
        assert status["latched_at"] is not None

    def test_circuit_breaker_reset(self, store):
        assert store.reset_circuit_breaker(self.user_id, "nothing latched") is False

        store.latch_circuit_breaker(self.user_id, "breach")
        assert store.reset_circuit_breaker(self.user_id, "reviewed by operator") is True
        assert store.is_halted(self.user_id) is False

        status = store.circuit_breaker_status(self.user_id)
        assert status["reason"] == "reviewed by operator"
        assert status["reset_at"] is not None

    def test_latch_visible_to_other_instances(self, tmp_path):
        writer = RiskStateStore(tmp_path / "shared.db")
        reader = RiskStateStore(tmp_path / "shared.db")

        writer.latch_circuit_breaker(self.user_id, "breach")
        assert reader.is_halted(self.user_id) is True
