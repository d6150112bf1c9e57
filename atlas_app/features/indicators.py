"""Close-price indicators: SMA, EMA, RSI, MACD and Bollinger Bands."""

import math
from typing import Optional, Sequence


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def calculate_sma(values: Sequence[float], period: int) -> Optional[float]:
    """Simple moving average of the last `period` values, None if too short."""
    if len(values) < period or period <= 0:
        return None
    recent = values[-period:]
    return sum(recent) / len(recent)


def calculate_std(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def calculate_ema(values: Sequence[float], period: int) -> list[float]:
    """
    Exponential moving average series seeded with the first value.

    EMA_t = (x_t - EMA_{t-1}) * k + EMA_{t-1},  k = 2 / (period + 1)
    """
    if not values:
        return []

    multiplier = 2.0 / (period + 1)
    ema = [float(values[0])]
    for value in values[1:]:
        ema.append((value - ema[-1]) * multiplier + ema[-1])
    return ema


def calculate_rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """
    Calculate RSI from a simple rolling average of gains and losses.

    Uses the last `period` close-to-close changes. A window with no losses
    reads 100; a perfectly flat window (no gains either) reads 50.

    Returns:
        RSI in [0, 100] or None if fewer than period + 1 closes
    """
    if len(closes) < period + 1:
        return None

    gains = 0.0
    losses = 0.0
    for i in range(len(closes) - period, len(closes)):
        change = closes[i] - closes[i - 1]
        if change > 0:
            gains += change
        elif change < 0:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0

    rs = avg_gain / avg_loss
    return clamp(100.0 - (100.0 / (1.0 + rs)), 0.0, 100.0)


def calculate_macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9
) -> Optional[tuple[float, float, float]]:
    """
    Calculate MACD line, signal line and histogram for the last close.

    Returns:
        (macd, signal, histogram) or None if fewer than `slow` closes
    """
    if len(closes) < slow:
        return None

    ema_fast = calculate_ema(closes, fast)
    ema_slow = calculate_ema(closes, slow)
    macd_line = [f - s for f, s in zip(ema_fast, ema_slow)]
    signal_line = calculate_ema(macd_line, signal)

    macd = macd_line[-1]
    signal_value = signal_line[-1]
    return macd, signal_value, macd - signal_value


def calculate_bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    num_std: float = 2.0
) -> Optional[tuple[float, float, float]]:
    """
    Calculate Bollinger Bands over the last `period` closes.

    Returns:
        (upper, middle, lower) or None if fewer than `period` closes
    """
    if len(closes) < period:
        return None

    window = closes[-period:]
    middle = sum(window) / period
    std = calculate_std(window)
    return middle + std * num_std, middle, middle - std * num_std


def bollinger_position(price: float, upper: float, lower: float) -> float:
    """
    Position of price within the bands: 0.0 at the lower band, 1.0 at the upper.

    Zero-width bands (a flat window) read 0.5.
    """
    width = upper - lower
    if width <= 0:
        return 0.5
    return clamp((price - lower) / width, 0.0, 1.0)
