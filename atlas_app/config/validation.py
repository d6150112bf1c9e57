"""Configuration validation utilities."""

import math
from dataclasses import dataclass
from typing import Any

SIZING_METHODS = ("kelly", "fixed_percentage", "volatility_adjusted", "risk_parity")
STRATEGIES = ("ensemble", "rule_based")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _check_fraction(params: dict[str, Any], name: str, errors: list[ValidationError],
                    allow_zero: bool = False) -> None:
    if name not in params:
        return
    value = params[name]
    if not _is_number(value):
        in_range = False
    elif allow_zero:
        in_range = 0 <= value <= 1
    else:
        in_range = 0 < value <= 1
    if not in_range:
        errors.append(ValidationError(
            field=name,
            message="Must be a number between 0 and 1",
            value=value
        ))


def _check_positive_int(params: dict[str, Any], name: str, errors: list[ValidationError]) -> None:
    if name not in params:
        return
    value = params[name]
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        errors.append(ValidationError(
            field=name,
            message="Must be a positive integer",
            value=value
        ))


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_risk_limits(params: dict[str, Any]) -> list[ValidationError]:
        """Validate risk limit fractions and the sizing method."""
        errors: list[ValidationError] = []

        for name in ("max_daily_loss_fraction", "max_symbol_exposure_fraction",
                     "max_portfolio_risk_fraction", "circuit_breaker_threshold"):
            _check_fraction(params, name, errors)

        if "sizing_method" in params and params["sizing_method"] not in SIZING_METHODS:
            errors.append(ValidationError(
                field="sizing_method",
                message=f"Must be one of {', '.join(SIZING_METHODS)}",
                value=params["sizing_method"]
            ))

        return errors

    @staticmethod
    def validate_sizing_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate sizing caps and Kelly defaults."""
        errors: list[ValidationError] = []

        for name in ("kelly_cap", "fixed_cap", "volatility_adjusted_cap", "risk_parity_cap",
                     "kelly_safety_factor", "kelly_max_fraction", "default_win_rate",
                     "risk_parity_target"):
            _check_fraction(params, name, errors)

        for name in ("default_avg_win", "default_avg_loss", "default_volatility",
                     "max_odds_ratio", "min_volatility"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_feature_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator periods."""
        errors: list[ValidationError] = []

        for name in ("rsi_period", "macd_fast", "macd_slow", "macd_signal", "adx_period",
                     "atr_period", "bollinger_period", "volume_period", "trend_window",
                     "momentum_period", "support_resistance_window"):
            _check_positive_int(params, name, errors)

        fast = params.get("macd_fast")
        slow = params.get("macd_slow")
        if isinstance(fast, int) and isinstance(slow, int) and fast >= slow:
            errors.append(ValidationError(
                field="macd_fast",
                message="Must be shorter than macd_slow",
                value=fast
            ))

        return errors

    @staticmethod
    def validate_signal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate ensemble weights and thresholds."""
        errors: list[ValidationError] = []

        if "strategy" in params and params["strategy"] not in STRATEGIES:
            errors.append(ValidationError(
                field="strategy",
                message=f"Must be one of {', '.join(STRATEGIES)}",
                value=params["strategy"]
            ))

        for name in ("technical_weight", "structural_weight", "ml_weight",
                     "buy_threshold", "sell_threshold", "max_confidence"):
            _check_fraction(params, name, errors, allow_zero=True)

        weights = [params.get(n) for n in ("technical_weight", "structural_weight", "ml_weight")]
        if all(_is_number(w) for w in weights) and not math.isclose(sum(weights), 1.0, abs_tol=1e-9):
            errors.append(ValidationError(
                field="technical_weight",
                message="Ensemble weights must sum to 1",
                value=weights
            ))

        buy = params.get("buy_threshold")
        sell = params.get("sell_threshold")
        if _is_number(buy) and _is_number(sell) and sell >= buy:
            errors.append(ValidationError(
                field="sell_threshold",
                message="Must be below buy_threshold",
                value=sell
            ))

        return errors

    @staticmethod
    def validate_bot_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate persisted bot account fields."""
        errors: list[ValidationError] = []

        if "capital" in params:
            value = params["capital"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="capital",
                    message="Must be a non-negative number",
                    value=value
                ))

        _check_fraction(params, "risk_per_trade", errors)
        _check_positive_int(params, "bar_limit", errors)

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "risk" in config:
            errors.extend(ConfigValidator.validate_risk_limits(config["risk"]))

        if "sizing" in config:
            errors.extend(ConfigValidator.validate_sizing_params(config["sizing"]))

        if "features" in config:
            errors.extend(ConfigValidator.validate_feature_params(config["features"]))

        if "signals" in config:
            errors.extend(ConfigValidator.validate_signal_params(config["signals"]))

        if "bot" in config:
            errors.extend(ConfigValidator.validate_bot_params(config["bot"]))

        return errors
