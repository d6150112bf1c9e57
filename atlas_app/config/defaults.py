"""Default configuration parameters for the decision pipeline.

Every tunable constant of the pipeline is declared here once. Components
receive the relevant params object instead of carrying inline fallbacks.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureParams:
    """Indicator periods and minimum windows for feature extraction."""
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    adx_period: int = 14
    atr_period: int = 14
    bollinger_period: int = 20
    bollinger_std: float = 2.0
    volume_period: int = 20
    trend_window: int = 50
    momentum_period: int = 10
    support_resistance_window: int = 20
    confidence_window: int = 20
    confidence_z: float = 1.96

    # Minimum bar counts below which a neutral default is returned
    min_bars_rsi: int = 15
    min_bars_macd: int = 26
    min_bars_band: int = 20                          # Bollinger, ADX, ATR, volume ratio
    min_bars_trend: int = 50

    # Volatility regime thresholds on ATR / price
    extreme_volatility: float = 0.05
    high_volatility: float = 0.03
    normal_volatility: float = 0.01


@dataclass(frozen=True)
class RegimeParams:
    """Market regime classification thresholds."""
    window: int = 50
    high_volatility_threshold: float = 0.03          # Std-dev of returns
    trend_threshold: float = 0.6                     # |trend_strength| for a trend
    volatility_confidence_mult: float = 20.0
    max_confidence: float = 0.95


@dataclass(frozen=True)
class SignalParams:
    """Ensemble weights, thresholds and signal risk parameters."""
    strategy: str = "ensemble"                       # ensemble | rule_based

    technical_weight: float = 0.4
    structural_weight: float = 0.35
    ml_weight: float = 0.25

    buy_threshold: float = 0.65
    sell_threshold: float = 0.35
    max_confidence: float = 0.95

    # Rule-based strategy
    trend_confidence_gate: float = 0.7
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0

    # Filter checklist
    adx_trend_level: float = 25.0
    strong_trend_level: float = 0.6
    volume_confirmation_ratio: float = 1.2
    volume_surge_ratio: float = 1.5
    velocity_penalty_threshold: float = 0.01         # |acceleration| / price

    # Stops and signal-level sizing
    stop_loss_atr_mult: float = 2.0
    take_profit_atr_mult: float = 3.0
    base_risk_fraction: float = 0.02


@dataclass(frozen=True)
class SizingParams:
    """Position sizing caps and formula defaults."""
    kelly_cap: float = 0.10
    fixed_cap: float = 0.15
    volatility_adjusted_cap: float = 0.12
    risk_parity_cap: float = 0.08

    kelly_safety_factor: float = 0.25
    kelly_max_fraction: float = 0.10
    max_odds_ratio: float = 100.0                    # Used when avg_loss <= 0
    min_odds_ratio: float = 1e-6

    default_win_rate: float = 0.6
    default_avg_win: float = 1.5
    default_avg_loss: float = 1.0
    default_volatility: float = 0.02
    min_volatility: float = 1e-6

    volatility_scale: float = 50.0
    min_volatility_adjustment: float = 0.5
    max_volatility_adjustment: float = 2.0
    risk_parity_target: float = 0.05


@dataclass(frozen=True)
class RiskParams:
    """Default risk limits and monitoring thresholds."""
    max_daily_loss_fraction: float = 0.05
    max_symbol_exposure_fraction: float = 0.25
    max_portfolio_risk_fraction: float = 0.10
    circuit_breaker_threshold: float = 0.02
    sizing_method: str = "fixed_percentage"

    volatility_alert_threshold: float = 0.05
    utilization_warning: float = 0.6                 # Fraction of a limit
    utilization_critical: float = 0.8
    diversification_positions: int = 10
    diversification_benefit: float = 0.2


@dataclass(frozen=True)
class BotDefaults:
    """Defaults for persisted bot configuration fields."""
    capital: float = 10000.0
    risk_per_trade: float = 0.005
    interval: str = "15m"
    bar_limit: int = 100


@dataclass(frozen=True)
class RateLimitPolicy:
    """Sliding window request budget."""
    window_seconds: int
    max_requests: int
    message: str


@dataclass(frozen=True)
class RateLimitParams:
    """Named request budgets keyed by actor."""
    api: RateLimitPolicy = RateLimitPolicy(
        900, 100, "Too many requests, please try again later")
    auth: RateLimitPolicy = RateLimitPolicy(
        3600, 5, "Too many login attempts, please try again later")
    trading: RateLimitPolicy = RateLimitPolicy(
        60, 10, "Too many trading requests, please slow down")


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    features: FeatureParams
    regime: RegimeParams
    signals: SignalParams
    sizing: SizingParams
    risk: RiskParams
    bot: BotDefaults
    rate_limits: RateLimitParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        features=FeatureParams(),
        regime=RegimeParams(),
        signals=SignalParams(),
        sizing=SizingParams(),
        risk=RiskParams(),
        bot=BotDefaults(),
        rate_limits=RateLimitParams(),
    )
