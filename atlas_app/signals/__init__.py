"""Signal generation module."""

from .generator import SignalGenerator, generate_signal

__all__ = ["SignalGenerator", "generate_signal"]
