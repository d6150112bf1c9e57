"""ATR (Average True Range) and ADX (Average Directional Index) calculations"""

from typing import Optional, Sequence

from ..data.models import Bar


def calculate_true_range(current: Bar, previous: Optional[Bar] = None) -> float:
    """
    Calculate True Range for a single bar

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    Args:
        current: Current bar
        previous: Previous bar (None for first bar)

    Returns:
        True Range value
    """
    if previous is None:
        return current.high - current.low

    range_hl = current.high - current.low
    range_hc = abs(current.high - previous.close)
    range_lc = abs(current.low - previous.close)

    return max(range_hl, range_hc, range_lc)


def calculate_atr(bars: Sequence[Bar], period: int = 14) -> Optional[float]:
    """
    Calculate Average True Range as the simple mean of the last `period` TRs

    Args:
        bars: Bars in chronological order
        period: ATR period (default 14)

    Returns:
        ATR value or None if insufficient data
    """
    if len(bars) < period:
        return None

    true_ranges = []
    for i in range(len(bars)):
        previous = bars[i - 1] if i > 0 else None
        true_ranges.append(calculate_true_range(bars[i], previous))

    recent_trs = true_ranges[-period:]
    return sum(recent_trs) / len(recent_trs)


def calculate_natr(atr: float, current_price: float) -> float:
    """
    ATR as a fraction of price (0.02 == 2%)

    Returns 0.0 for a non-positive price.
    """
    if current_price <= 0:
        return 0.0

    return atr / current_price


def _directional_movement(current: Bar, previous: Bar) -> tuple[float, float]:
    up_move = current.high - previous.high
    down_move = previous.low - current.low

    plus_dm = up_move if up_move > down_move and up_move > 0 else 0.0
    minus_dm = down_move if down_move > up_move and down_move > 0 else 0.0
    return plus_dm, minus_dm


def calculate_adx(bars: Sequence[Bar], period: int = 14) -> Optional[float]:
    """
    Calculate ADX using Wilder's directional movement method

    TR, +DM and -DM are Wilder-smoothed over `period`; DX is derived from
    the directional indicators and ADX is Wilder's average of DX. While
    fewer than `period` DX values exist the plain mean of the available
    values is used.

    Args:
        bars: Bars in chronological order
        period: Smoothing period (default 14)

    Returns:
        ADX in [0, 100] or None if fewer than period + 1 bars
    """
    if len(bars) < period + 1:
        return None

    trs = []
    plus_dms = []
    minus_dms = []
    for i in range(1, len(bars)):
        trs.append(calculate_true_range(bars[i], bars[i - 1]))
        plus_dm, minus_dm = _directional_movement(bars[i], bars[i - 1])
        plus_dms.append(plus_dm)
        minus_dms.append(minus_dm)

    smoothed_tr = sum(trs[:period])
    smoothed_plus = sum(plus_dms[:period])
    smoothed_minus = sum(minus_dms[:period])

    dx_values = [_dx(smoothed_tr, smoothed_plus, smoothed_minus)]
    for i in range(period, len(trs)):
        smoothed_tr = smoothed_tr - smoothed_tr / period + trs[i]
        smoothed_plus = smoothed_plus - smoothed_plus / period + plus_dms[i]
        smoothed_minus = smoothed_minus - smoothed_minus / period + minus_dms[i]
        dx_values.append(_dx(smoothed_tr, smoothed_plus, smoothed_minus))

    if len(dx_values) < period:
        return sum(dx_values) / len(dx_values)

    adx = sum(dx_values[:period]) / period
    for dx in dx_values[period:]:
        adx = (adx * (period - 1) + dx) / period
    return adx


def _dx(smoothed_tr: float, smoothed_plus: float, smoothed_minus: float) -> float:
    if smoothed_tr <= 0:
        return 0.0

    plus_di = 100.0 * smoothed_plus / smoothed_tr
    minus_di = 100.0 * smoothed_minus / smoothed_tr
    di_sum = plus_di + minus_di
    if di_sum <= 0:
        return 0.0

    return 100.0 * abs(plus_di - minus_di) / di_sum
