"""Tests for position sizing"""

import math

import pytest

from atlas_app import size_position
from atlas_app.errors import MalformedDataError
from atlas_app.models.sizing import PositionSizingResult, SizingMethod, TradeStats
from atlas_app.sizing.position_sizer import PositionSizer


class TestKelly:
    """Test Kelly criterion sizing"""

    def test_reference_example(self):
        stats = TradeStats(win_rate=0.6, avg_win=1.5, avg_loss=1.0)
        result = size_position("kelly", 10000.0, 0.005, stats)

        # f = (1.5 * 0.6 - 0.4) / 1.5 = 0.3333; 0.25 * f = 0.0833
        assert result.recommended_size == pytest.approx(4.1667, abs=1e-4)
        assert result.max_size == pytest.approx(1000.0)
        assert result.confidence_level == 0.95
        assert result.method == SizingMethod.KELLY
        assert result.method_diagnostic["kelly_fraction"] == pytest.approx(1.0 / 3.0)

    def test_missing_stats_use_defaults(self):
        result = size_position("kelly", 10000.0, 0.005)
        assert result.recommended_size == pytest.approx(4.1667, abs=1e-4)

    def test_zero_avg_loss_is_bounded(self):
        stats = TradeStats(win_rate=0.6, avg_win=1.5, avg_loss=0.0)
        result = size_position("kelly", 10000.0, 0.005, stats)

        assert math.isfinite(result.recommended_size)
        assert result.method_diagnostic["odds_ratio"] == 100.0
        # 0.25 * 0.596 clipped to 0.1
        assert result.recommended_size == pytest.approx(10000.0 * 0.1 * 0.005)

    def test_negative_edge_sizes_zero(self):
        stats = TradeStats(win_rate=0.2, avg_win=1.0, avg_loss=1.0)
        result = size_position("kelly", 10000.0, 0.005, stats)
        assert result.recommended_size == 0.0

    def test_zero_avg_win_floored(self):
        stats = TradeStats(win_rate=0.6, avg_win=0.0, avg_loss=1.0)
        result = size_position("kelly", 10000.0, 0.005, stats)
        assert result.recommended_size == 0.0
        assert math.isfinite(result.method_diagnostic["kelly_fraction"])


class TestOtherMethods:
    """Test fixed, volatility-adjusted and risk-parity sizing"""

    def test_fixed_percentage(self):
        result = size_position("fixed_percentage", 10000.0, 0.005)
        assert result.recommended_size == pytest.approx(50.0)
        assert result.max_size == pytest.approx(1500.0)
        assert result.confidence_level == 0.85

    def test_fixed_percentage_capped(self):
        result = size_position("fixed_percentage", 10000.0, 0.5)
        assert result.recommended_size == pytest.approx(1500.0)

    @pytest.mark.parametrize("volatility,expected", [
        (0.02, 50.0),      # adjustment 1.0
        (0.005, 100.0),    # adjustment 4.0 clamped to 2.0
        (0.1, 25.0),       # adjustment 0.2 clamped to 0.5
        (0.0, 100.0),      # floored volatility -> 2.0
        (None, 50.0),      # default volatility 0.02
    ])
    def test_volatility_adjusted(self, volatility, expected):
        result = size_position("volatility_adjusted", 10000.0, 0.005,
                               TradeStats(volatility=volatility))
        assert result.recommended_size == pytest.approx(expected)
        assert result.confidence_level == 0.88

    def test_volatility_adjusted_capped(self):
        result = size_position("volatility_adjusted", 10000.0, 0.1, TradeStats(volatility=0.005))
        assert result.recommended_size == pytest.approx(1200.0)

    def test_risk_parity(self):
        result = size_position("risk_parity", 10000.0, 0.005, TradeStats(volatility=0.02))
        # min(10000 * 0.05 / 0.02, 10000 * 0.005)
        assert result.recommended_size == pytest.approx(50.0)
        assert result.confidence_level == 0.92

    def test_risk_parity_capped(self):
        result = size_position("risk_parity", 10000.0, 0.5, TradeStats(volatility=0.02))
        assert result.recommended_size == pytest.approx(800.0)

    def test_risk_parity_high_volatility(self):
        result = size_position("risk_parity", 10000.0, 0.5, TradeStats(volatility=2.0))
        assert result.recommended_size == pytest.approx(250.0)


class TestSizerGuards:
    """Test degenerate inputs and fallbacks"""

    def test_unknown_method_falls_back(self):
        result = size_position("martingale", 10000.0, 0.005)
        assert result.method == SizingMethod.FIXED_PERCENTAGE
        assert result.recommended_size == pytest.approx(50.0)

    def test_accepts_enum(self):
        result = PositionSizer().size(SizingMethod.RISK_PARITY, 10000.0, 0.005)
        assert result.method == SizingMethod.RISK_PARITY

    @pytest.mark.parametrize("capital", [math.nan, math.inf, -math.inf])
    def test_non_finite_capital(self, capital):
        with pytest.raises(MalformedDataError):
            size_position("kelly", capital, 0.005)

    def test_non_finite_risk(self):
        with pytest.raises(MalformedDataError):
            size_position("fixed_percentage", 10000.0, math.nan)

    def test_negative_capital_sizes_zero(self):
        result = size_position("fixed_percentage", -5000.0, 0.005)
        assert result.recommended_size == 0.0
        assert result.max_size == 0.0

    def test_risk_score_components(self):
        bare = size_position("kelly", 10000.0, 0.005)
        with_stats = size_position("kelly", 10000.0, 0.005,
                                   TradeStats(win_rate=0.6, avg_win=1.5, avg_loss=1.0,
                                              volatility=0.01))
        # 0.5 + 2 * 0.0833
        assert bare.risk_score == pytest.approx(0.5 + 2.0 / 12.0)
        # + 10 * 0.01 - 0.5 * 0.1
        assert with_stats.risk_score == pytest.approx(0.5 + 2.0 / 12.0 + 0.1 - 0.05)

    def test_bounds_for_every_method(self):
        for method in ("kelly", "fixed_percentage", "volatility_adjusted", "risk_parity"):
            for capital in (0.0, 1.0, 10000.0, 1e9):
                for risk in (0.0, 0.005, 0.5, 1.0):
                    for stats in (
                        TradeStats(),
                        TradeStats(win_rate=1.0, avg_win=100.0, avg_loss=0.0, volatility=0.0),
                        TradeStats(win_rate=0.0, avg_win=0.0, avg_loss=5.0, volatility=10.0),
                    ):
                        result = size_position(method, capital, risk, stats)
                        assert 0.0 <= result.recommended_size <= result.max_size
                        assert 0.1 <= result.risk_score <= 0.9

    def test_to_dict(self):
        data = size_position("kelly", 10000.0, 0.005).to_dict()
        assert data["method"] == "kelly"
        assert "kelly_fraction" in data["method_diagnostic"]

    def test_diagnostic_is_read_only(self):
        diagnostic = {"risk_per_trade": 0.005}
        result = size_position("fixed_percentage", 10000.0, 0.005)

        with pytest.raises(TypeError):
            result.method_diagnostic["risk_per_trade"] = 1.0

        built = PositionSizingResult(SizingMethod.FIXED_PERCENTAGE, 50.0, 1500.0, 0.5, 0.85,
                                     diagnostic)
        diagnostic["risk_per_trade"] = 1.0
        assert built.method_diagnostic["risk_per_trade"] == 0.005
