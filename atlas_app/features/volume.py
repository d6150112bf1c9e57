"""Volume ratio calculations"""

from typing import Optional, Sequence


def calculate_volume_ratio(volumes: Sequence[float], period: int = 20) -> Optional[float]:
    """
    Calculate volume ratio of the latest bar

    ratio = volume / SMA(volume, period), with the latest bar included in
    the average.

    Args:
        volumes: Volume history, oldest first, ending with the current bar
        period: Lookback period for the average (default 20)

    Returns:
        Ratio or None if insufficient data or a zero average
    """
    if len(volumes) < period:
        return None

    recent_volumes = volumes[-period:]
    volume_average = sum(recent_volumes) / len(recent_volumes)

    if volume_average <= 0:
        return None

    return volumes[-1] / volume_average
