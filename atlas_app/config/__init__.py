"""
Configuration module.

Defaults, YAML overrides, validation and the resolved per-user bot
configuration.
"""

from .bot_config import BotConfig, RiskLimits, default_risk_limits, resolve_bot_config
from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader

__all__ = [
    "BotConfig",
    "ConfigLoader",
    "DefaultConfig",
    "RiskLimits",
    "default_risk_limits",
    "get_default_config",
    "resolve_bot_config",
]
