"""Position sizing module."""

from .position_sizer import PositionSizer, size_position

__all__ = ["PositionSizer", "size_position"]
