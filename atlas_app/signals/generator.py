"""Signal generation from features and regime"""

import math
from typing import Optional

from ..config.defaults import SignalParams
from ..features.indicators import clamp
from ..logging import get_signal_logger
from ..logging.config import log_filter_decision
from ..models.features import FeatureVector, VolatilityRegime
from ..models.regime import Regime, RegimeType
from ..models.signal import SignalRisk, SignalType, StrategyType, TradingSignal
from ..utils.time import utc_now
from .scoring import ensemble_score

logger = get_signal_logger(__name__)

ENSEMBLE = "ensemble"
RULE_BASED = "rule_based"


class SignalGenerator:
    """
    Produces an immutable TradingSignal from a feature vector and regime

    Two strategies are supported: the default weighted ensemble, and a
    rule-based strategy that follows trends in confident trend regimes and
    fades RSI extremes otherwise. The ensemble score is computed either way
    and drives the risk envelope.
    """

    def __init__(self, params: Optional[SignalParams] = None):
        self.params = params or SignalParams()

    def generate(self, symbol: str, features: FeatureVector, regime: Regime,
                 price: float, capital: float,
                 strategy: Optional[str] = None) -> TradingSignal:
        """
        Generate a signal for one symbol

        Args:
            symbol: Trading pair
            features: Feature vector for the current window
            regime: Regime of the current window
            price: Reference price for stops and targets
            capital: Account capital used for the signal-level size
            strategy: "ensemble" or "rule_based" (defaults to params.strategy)

        Returns:
            TradingSignal with confidence and ensemble score in [0, 1]
        """
        p = self.params
        strategy_name = self._resolve_strategy(strategy or p.strategy, symbol)
        score = ensemble_score(features, p)

        if strategy_name == RULE_BASED:
            signal_type, confidence, strategy_type = self._rule_based(features, regime)
        else:
            signal_type, confidence, strategy_type = self._ensemble(score)

        confidence = clamp(confidence, 0.0, p.max_confidence)
        filters_passed = self._evaluate_filters(symbol, features, regime, score, strategy_type)
        risk = self._risk_envelope(signal_type, features, score, confidence, price, capital)

        signal = TradingSignal(
            symbol=symbol,
            signal_type=signal_type,
            confidence=confidence,
            ensemble_score=score,
            strategy=strategy_type,
            price=price,
            features=features,
            regime=regime,
            risk_assessment=risk,
            filters_passed=filters_passed,
            created_at=utc_now(),
        )

        logger.info("Signal generated",
                    symbol=symbol,
                    signal_type=signal_type.value,
                    strategy=strategy_type.value,
                    confidence=confidence,
                    ensemble_score=score,
                    risk_score=risk.risk_score,
                    filters_passed=sorted(filters_passed))
        return signal

    def _resolve_strategy(self, strategy: str, symbol: str) -> str:
        if strategy in (ENSEMBLE, RULE_BASED):
            return strategy
        logger.warning("Unknown strategy, using ensemble",
                       symbol=symbol, strategy=strategy)
        return ENSEMBLE

    def _ensemble(self, score: float) -> tuple[SignalType, float, StrategyType]:
        p = self.params
        if score > p.buy_threshold:
            signal_type = SignalType.BUY
        elif score < p.sell_threshold:
            signal_type = SignalType.SELL
        else:
            signal_type = SignalType.HOLD

        confidence = min(0.5 + abs(score - 0.5), p.max_confidence)
        return signal_type, confidence, StrategyType.ENSEMBLE

    def _rule_based(self, features: FeatureVector,
                    regime: Regime) -> tuple[SignalType, float, StrategyType]:
        p = self.params
        rsi = features.technical.rsi
        macd = features.technical.macd

        if regime.regime_type == RegimeType.TREND and regime.confidence > p.trend_confidence_gate:
            confidence = 0.7 + 0.2 * regime.confidence
            if macd > 0 and rsi < p.rsi_overbought:
                return SignalType.BUY, confidence, StrategyType.TREND_FOLLOWING
            if macd < 0 and rsi > p.rsi_oversold:
                return SignalType.SELL, confidence, StrategyType.TREND_FOLLOWING
            return SignalType.HOLD, 0.5, StrategyType.TREND_FOLLOWING

        if rsi < p.rsi_oversold:
            confidence = 0.6 + 0.3 * (p.rsi_oversold - rsi) / 30.0
            return SignalType.BUY, confidence, StrategyType.MEAN_REVERSION
        if rsi > p.rsi_overbought:
            confidence = 0.6 + 0.3 * (rsi - p.rsi_overbought) / 30.0
            return SignalType.SELL, confidence, StrategyType.MEAN_REVERSION
        return SignalType.HOLD, 0.5, StrategyType.MEAN_REVERSION

    def _evaluate_filters(self, symbol: str, features: FeatureVector, regime: Regime,
                          score: float, strategy_type: StrategyType) -> frozenset[str]:
        p = self.params
        tech = features.technical
        structure = features.structure

        checks = [
            ("High Ensemble Score", score > p.buy_threshold,
             f"score {score:.3f} vs buy threshold {p.buy_threshold}"),
            ("Low Ensemble Score", score < p.sell_threshold,
             f"score {score:.3f} vs sell threshold {p.sell_threshold}"),
            ("RSI Normal", p.rsi_oversold < tech.rsi < p.rsi_overbought,
             f"rsi {tech.rsi:.1f}"),
            ("Strong Trend", abs(structure.trend_strength) > p.strong_trend_level,
             f"trend_strength {structure.trend_strength:.3f}"),
            ("Volume Confirmation", tech.volume_ratio > p.volume_confirmation_ratio,
             f"volume_ratio {tech.volume_ratio:.2f}"),
            ("Normal Volatility", structure.volatility_regime != VolatilityRegime.EXTREME,
             f"volatility_regime {structure.volatility_regime.value}"),
            ("Regime Aligned", strategy_type == StrategyType.TREND_FOLLOWING,
             f"regime {regime.regime_type.value} strategy {strategy_type.value}"),
        ]

        passed = []
        for name, result, reason in checks:
            log_filter_decision(logger, name, result, symbol, reason)
            if result:
                passed.append(name)
        return frozenset(passed)

    def _risk_envelope(self, signal_type: SignalType, features: FeatureVector,
                       score: float, confidence: float, price: float,
                       capital: float) -> SignalRisk:
        p = self.params
        atr = features.technical.atr

        risk_score = 0.5
        if features.structure.volatility_regime == VolatilityRegime.EXTREME:
            risk_score += 0.3
        elif features.structure.volatility_regime == VolatilityRegime.HIGH:
            risk_score += 0.15
        risk_score += 0.3 * (1.0 - score)
        if price > 0 and math.isfinite(price):
            risk_score += min(0.2, 10.0 * atr / price)
        risk_score = clamp(risk_score, 0.1, 0.9)

        usable_capital = capital if math.isfinite(capital) and capital > 0 else 0.0
        position_size = usable_capital * p.base_risk_fraction * (1.0 - risk_score) * confidence

        if signal_type == SignalType.BUY:
            stop_loss = price - p.stop_loss_atr_mult * atr
            take_profit = price + p.take_profit_atr_mult * atr
        elif signal_type == SignalType.SELL:
            stop_loss = price + p.stop_loss_atr_mult * atr
            take_profit = price - p.take_profit_atr_mult * atr
        else:
            stop_loss = price
            take_profit = price

        return SignalRisk(
            risk_score=risk_score,
            position_size=position_size,
            stop_loss=stop_loss,
            take_profit=take_profit,
        )


def generate_signal(symbol: str, features: FeatureVector, regime: Regime,
                    price: float, capital: float, strategy: Optional[str] = None,
                    params: Optional[SignalParams] = None) -> TradingSignal:
    """Generate a signal with the given (or default) params."""
    return SignalGenerator(params).generate(symbol, features, regime, price, capital, strategy)
