"""
Main decision engine coordinator.

Orchestrates the decision pipeline for one symbol or account, coordinating
market data, feature extraction, regime classification, signal generation,
position sizing and risk monitoring, and writes every output to the
append-only record store.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import structlog

from .config.bot_config import BotConfig, resolve_bot_config
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .data.models import Bar
from .data.source import MarketDataSource
from .errors import (
    ConfigurationError,
    ExternalIOError,
    InsufficientDataError,
    MarketDataError,
)
from .features.extractor import FeatureExtractor
from .logging.config import get_risk_logger, log_risk_state
from .models.features import FeatureVector
from .models.regime import Regime
from .models.risk import RiskAssessment
from .models.signal import TradingSignal
from .models.sizing import PositionSizingResult, TradeStats
from .persistence.rate_limits import RateLimitStore
from .persistence.risk_state import RiskStateStore
from .persistence.store import RecordStore
from .regime.classifier import RegimeClassifier
from .risk.monitor import RiskMonitor
from .signals.generator import SignalGenerator
from .sizing.position_sizer import PositionSizer

logger = structlog.get_logger(__name__)
risk_logger = get_risk_logger(__name__)


@dataclass(frozen=True)
class MarketAnalysis:
    """Result of one analyze_market call."""
    symbol: str
    features: FeatureVector
    regime: Regime
    signal: TradingSignal
    sizing: PositionSizingResult
    trading_halted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "features": self.features.to_dict(),
            "regime": self.regime.to_dict(),
            "signal": self.signal.to_dict(),
            "sizing": self.sizing.to_dict(),
            "trading_halted": self.trading_halted,
        }


class DecisionEngine:
    """
    Main coordinator for the decision pipeline.

    Manages the analysis pipeline:
    Market Data → Features → Regime → Signal → Sizing → Records

    and the per-account risk tick:
    Positions + PnL → Risk Limits → Circuit Breaker Latch → Records
    """

    def __init__(
        self,
        source: Optional[MarketDataSource] = None,
        db_path: Union[str, Path] = "atlas.db",
        config_dir: Optional[Path] = None,
        record_store: Optional[RecordStore] = None,
        risk_store: Optional[RiskStateStore] = None,
        rate_limits: Optional[RateLimitStore] = None,
    ) -> None:
        """Initialize the decision engine."""
        self.logger = logger
        self.source = source

        self.config_loader = ConfigLoader.create(config_dir)
        self.records = record_store or RecordStore(db_path)
        self.risk_state = risk_store or RiskStateStore(db_path)
        self.rate_limits = rate_limits or RateLimitStore(db_path)

        self.logger.info("Decision engine initialized", db_path=str(db_path))

    def analyze_market(
        self,
        symbol: str,
        bars: Optional[Sequence[Bar]] = None,
        *,
        user_id: Optional[str] = None
    ) -> MarketAnalysis:
        """
        Run the full analysis pipeline for one symbol.

        Args:
            symbol: Trading pair
            bars: Bar window to analyse; fetched from the source when None
            user_id: Account whose bot configuration, rate limit and
                circuit breaker apply

        Returns:
            MarketAnalysis with features, regime, signal and sizing

        Raises:
            RateLimitExceededError: If the account exceeded its trading budget
            MarketDataError: If bars could not be fetched
            InsufficientDataError: If the bar window is empty
            ConfigurationError: If symbol or bot configuration is invalid
            PersistenceError: If the records could not be written
        """
        config = self.config_loader.load_config(symbol)
        bot_config = self._load_bot_config(user_id, config)

        if user_id is not None:
            self.rate_limits.enforce(f"trading:{user_id}", config.rate_limits.trading)

        if bars is None:
            bars = self._fetch_bars(symbol, bot_config)

        if not bars:
            raise InsufficientDataError(
                f"No bars available for {symbol}",
                required_count=1,
                available_count=0,
            )

        price = bars[-1].close
        features = FeatureExtractor(config.features).compute(bars)
        regime = RegimeClassifier(config.regime).classify(bars)
        signal = SignalGenerator(config.signals).generate(
            symbol, features, regime, price, bot_config.capital, bot_config.strategy)

        stats = TradeStats(volatility=regime.volatility if regime.volatility > 0 else None)
        sizing = PositionSizer(config.sizing).size(
            bot_config.sizing_method, bot_config.capital, bot_config.risk_per_trade, stats)

        halted = self.is_trading_halted(user_id) if user_id is not None else False
        if halted and signal.is_actionable:
            self.logger.warning("Signal produced while trading is halted",
                                symbol=symbol,
                                user_id=user_id,
                                signal_type=signal.signal_type.value)

        self.records.store_analysis(
            symbol, features, regime, signal, sizing,
            inputs={
                "method": bot_config.sizing_method.value,
                "capital": bot_config.capital,
                "risk_per_trade": bot_config.risk_per_trade,
                "volatility": stats.volatility,
            },
            user_id=user_id,
        )

        self.logger.info("Market analyzed",
                         symbol=symbol,
                         bar_count=len(bars),
                         regime=regime.regime_type.value,
                         signal_type=signal.signal_type.value,
                         confidence=signal.confidence,
                         recommended_size=sizing.recommended_size,
                         trading_halted=halted)

        return MarketAnalysis(
            symbol=symbol,
            features=features,
            regime=regime,
            signal=signal,
            sizing=sizing,
            trading_halted=halted,
        )

    def monitor_risk(
        self,
        user_id: str,
        volatility: float,
        portfolio_value: Optional[float] = None
    ) -> RiskAssessment:
        """
        Evaluate an account's risk limits and latch the circuit breaker on breach.

        Positions, daily PnL and limits are read fresh from the store on
        every call. The latch is written before this method returns, so a
        halt is visible to the very next is_trading_halted call.
        A stored bot configuration that fails validation is logged and the
        tick runs against the default limits and capital instead.

        Args:
            user_id: Account to evaluate
            volatility: Current market volatility estimate
            portfolio_value: Portfolio value; defaults to the configured capital

        Returns:
            RiskAssessment for this tick
        """
        defaults = self.config_loader.defaults
        try:
            bot_config = self._load_bot_config(user_id, defaults)
        except ConfigurationError as e:
            # A bad stored row must not skip the breaker check
            risk_logger.error("Invalid bot configuration, evaluating against defaults",
                              user_id=user_id,
                              errors=e.errors)
            bot_config = resolve_bot_config({}, defaults)

        positions = self.risk_state.get_positions(user_id)
        daily_pnl = self.risk_state.get_daily_pnl(user_id)
        halt_latched = self.risk_state.is_halted(user_id)
        value = bot_config.capital if portfolio_value is None else portfolio_value

        assessment = RiskMonitor(defaults.risk).evaluate(
            positions, daily_pnl, value, volatility, bot_config.limits, halt_latched)

        if assessment.circuit_breaker_triggered and not halt_latched:
            self.risk_state.latch_circuit_breaker(
                user_id,
                f"Daily loss {assessment.daily_loss_fraction:.2%} exceeded "
                f"{bot_config.limits.circuit_breaker_threshold:.2%}",
            )

        self.records.store_risk_assessment(user_id, assessment)
        for alert in assessment.alerts:
            self.records.store_risk_event(user_id, alert)

        log_risk_state(
            risk_logger,
            user_id,
            assessment.state.value,
            assessment.circuit_breaker_triggered,
            len(assessment.alerts),
            context={
                "daily_loss_fraction": assessment.daily_loss_fraction,
                "portfolio_risk": assessment.portfolio_risk,
                "overall_risk_score": assessment.overall_risk_score,
                "halt_latched": halt_latched,
            },
        )
        return assessment

    def is_trading_halted(self, user_id: str) -> bool:
        """Whether the account's circuit breaker is latched."""
        return self.risk_state.is_halted(user_id)

    def reset_circuit_breaker(self, user_id: str, reason: str) -> bool:
        """Manually reset a latched circuit breaker. Returns False if none was latched."""
        return self.risk_state.reset_circuit_breaker(user_id, reason)

    def _load_bot_config(self, user_id: Optional[str], config: DefaultConfig) -> BotConfig:
        raw = self.risk_state.load_bot_config(user_id) if user_id is not None else {}
        return resolve_bot_config(raw, config)

    def _fetch_bars(self, symbol: str, bot_config: BotConfig) -> Sequence[Bar]:
        if self.source is None:
            raise MarketDataError(
                f"No market data source configured to fetch {symbol}",
                operation="fetch_bars",
                target=symbol,
            )

        try:
            return self.source.fetch_bars(symbol, bot_config.interval, bot_config.bar_limit)
        except ExternalIOError:
            raise
        except Exception as e:
            self.logger.error("Market data fetch failed",
                              symbol=symbol,
                              interval=bot_config.interval,
                              error=str(e))
            raise MarketDataError(
                f"Failed to fetch bars for {symbol}: {e}",
                operation="fetch_bars",
                target=symbol,
            ) from e
