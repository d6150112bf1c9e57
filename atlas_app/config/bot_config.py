"""Resolved bot configuration.

Persisted bot and risk settings arrive as loosely typed rows with optional
fields. They are resolved once, at load time, into a validated BotConfig so
downstream components never apply their own fallbacks.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..errors import ConfigurationError
from ..models.sizing import SizingMethod
from .defaults import DefaultConfig, get_default_config
from .validation import ConfigValidator, _is_number

# Column names used by older rows in the persistent store
_FIELD_ALIASES = {
    "capital_cad": "capital",
    "max_symbol_exposure": "max_symbol_exposure_fraction",
    "max_portfolio_risk": "max_portfolio_risk_fraction",
}

# Legacy rows store the daily loss limit as a currency amount
_DAILY_LOSS_AMOUNT = "max_daily_loss"


@dataclass(frozen=True)
class RiskLimits:
    """Account risk limits read fresh from the store each tick."""
    max_daily_loss_fraction: float
    max_symbol_exposure_fraction: float
    max_portfolio_risk_fraction: float
    circuit_breaker_threshold: float
    sizing_method: SizingMethod

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_daily_loss_fraction": self.max_daily_loss_fraction,
            "max_symbol_exposure_fraction": self.max_symbol_exposure_fraction,
            "max_portfolio_risk_fraction": self.max_portfolio_risk_fraction,
            "circuit_breaker_threshold": self.circuit_breaker_threshold,
            "sizing_method": self.sizing_method.value,
        }


@dataclass(frozen=True)
class BotConfig:
    """Complete per-user bot configuration."""
    capital: float
    risk_per_trade: float
    strategy: str
    interval: str
    bar_limit: int
    limits: RiskLimits

    @property
    def sizing_method(self) -> SizingMethod:
        return self.limits.sizing_method


def default_risk_limits(defaults: Optional[DefaultConfig] = None) -> RiskLimits:
    """Risk limits built purely from the defaults module."""
    risk = (defaults or get_default_config()).risk
    return RiskLimits(
        max_daily_loss_fraction=risk.max_daily_loss_fraction,
        max_symbol_exposure_fraction=risk.max_symbol_exposure_fraction,
        max_portfolio_risk_fraction=risk.max_portfolio_risk_fraction,
        circuit_breaker_threshold=risk.circuit_breaker_threshold,
        sizing_method=SizingMethod(risk.sizing_method),
    )


def resolve_bot_config(
    raw: Mapping[str, Any],
    defaults: Optional[DefaultConfig] = None
) -> BotConfig:
    """
    Resolve a raw persisted row into a validated BotConfig.

    Args:
        raw: Row from the persistent store; missing or None fields take
            the documented defaults
        defaults: Configuration providing the defaults

    Returns:
        Validated BotConfig

    Raises:
        ConfigurationError: If any provided field is invalid
    """
    defaults = defaults or get_default_config()

    values = {}
    for key, value in raw.items():
        if value is None:
            continue
        values[_FIELD_ALIASES.get(key, key)] = value

    bot_fields = {
        "capital": values.get("capital", defaults.bot.capital),
        "risk_per_trade": values.get("risk_per_trade", defaults.bot.risk_per_trade),
        "bar_limit": values.get("bar_limit", defaults.bot.bar_limit),
    }
    risk_fields = {
        "max_daily_loss_fraction": _daily_loss_fraction(
            values, bot_fields["capital"], defaults.risk.max_daily_loss_fraction),
        "max_symbol_exposure_fraction": values.get(
            "max_symbol_exposure_fraction", defaults.risk.max_symbol_exposure_fraction),
        "max_portfolio_risk_fraction": values.get(
            "max_portfolio_risk_fraction", defaults.risk.max_portfolio_risk_fraction),
        "circuit_breaker_threshold": values.get(
            "circuit_breaker_threshold", defaults.risk.circuit_breaker_threshold),
        "sizing_method": values.get("sizing_method", defaults.risk.sizing_method),
    }
    strategy = values.get("strategy", defaults.signals.strategy)

    errors = ConfigValidator.validate_risk_limits(risk_fields)
    errors.extend(ConfigValidator.validate_bot_params(bot_fields))
    errors.extend(ConfigValidator.validate_signal_params({"strategy": strategy}))
    if errors:
        raise ConfigurationError(
            "Invalid bot configuration",
            errors=[f"{err.field}: {err.message} (got: {err.value})" for err in errors],
        )

    limits = RiskLimits(
        max_daily_loss_fraction=float(risk_fields["max_daily_loss_fraction"]),
        max_symbol_exposure_fraction=float(risk_fields["max_symbol_exposure_fraction"]),
        max_portfolio_risk_fraction=float(risk_fields["max_portfolio_risk_fraction"]),
        circuit_breaker_threshold=float(risk_fields["circuit_breaker_threshold"]),
        sizing_method=SizingMethod(risk_fields["sizing_method"]),
    )

    return BotConfig(
        capital=float(bot_fields["capital"]),
        risk_per_trade=float(bot_fields["risk_per_trade"]),
        strategy=strategy,
        interval=str(values.get("interval", defaults.bot.interval)),
        bar_limit=int(bot_fields["bar_limit"]),
        limits=limits,
    )


def _daily_loss_fraction(values: Mapping[str, Any], capital: Any, default: float) -> Any:
    """Daily loss limit as a fraction, converting a legacy currency amount by capital."""
    if "max_daily_loss_fraction" in values:
        return values["max_daily_loss_fraction"]
    if _DAILY_LOSS_AMOUNT not in values:
        return default

    amount = values[_DAILY_LOSS_AMOUNT]
    if not _is_number(amount) or not _is_number(capital):
        return amount
    if capital <= 0:
        return default
    # An amount at or above capital cannot bind tighter than a total loss
    return min(amount / capital, 1.0)
