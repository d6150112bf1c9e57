"""
Logging configuration and utilities for the Atlas decision pipeline.
"""
from .config import configure_logging, get_logger, get_risk_logger, get_signal_logger

__all__ = ["configure_logging", "get_logger", "get_risk_logger", "get_signal_logger"]
