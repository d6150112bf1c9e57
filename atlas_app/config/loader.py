"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    BotDefaults,
    DefaultConfig,
    FeatureParams,
    RateLimitParams,
    RateLimitPolicy,
    RegimeParams,
    RiskParams,
    SignalParams,
    SizingParams,
    get_default_config,
)
from .validation import ConfigValidator

_SECTIONS = {
    "features": FeatureParams,
    "regime": RegimeParams,
    "signals": SignalParams,
    "sizing": SizingParams,
    "risk": RiskParams,
    "bot": BotDefaults,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_symbol_config(self, symbol: str) -> dict[str, Any]:
        """Load symbol-specific configuration overrides."""
        symbols_file = self.config_dir / "symbols.yaml"

        if not symbols_file.exists():
            return {}

        try:
            with open(symbols_file) as f:
                symbols_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {symbols_file}: {e}")

        return symbols_config.get("symbols", {}).get(symbol, {})  # type: ignore[no-any-return]

    def merge_config(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call overrides (highest priority)
        2. Symbol-specific overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        symbol_config = self.load_symbol_config(symbol)
        config = self._deep_merge(config, symbol_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load_config(
        self,
        symbol: str,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """
        Merge, validate and rebuild a typed configuration for a symbol.

        Raises:
            ConfigurationError: If merged values fail validation or contain
                unknown fields
        """
        merged = self.merge_config(symbol, overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            raise ConfigurationError(
                f"Invalid configuration for {symbol}",
                errors=[f"{err.field}: {err.message} (got: {err.value})" for err in errors],
            )

        return self._dict_to_config(merged)

    def _dict_to_config(self, config: dict[str, Any]) -> DefaultConfig:
        """Rebuild the frozen dataclass tree from a merged dictionary."""
        sections: dict[str, Any] = {}
        for name, params_cls in _SECTIONS.items():
            sections[name] = self._build(params_cls, config.get(name, {}), name)

        policies = {}
        for policy_field in fields(RateLimitParams):
            raw = config.get("rate_limits", {}).get(policy_field.name, {})
            policies[policy_field.name] = self._build(
                RateLimitPolicy, raw, f"rate_limits.{policy_field.name}"
            )
        sections["rate_limits"] = RateLimitParams(**policies)

        return DefaultConfig(**sections)

    @staticmethod
    def _build(params_cls: type, values: dict[str, Any], section: str) -> Any:
        known = {f.name for f in fields(params_cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration fields in {section}: {sorted(unknown)}"
            )
        return params_cls(**values)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
