"""Indicator library — pure functions over ascending numeric sequences.

Every function returns ``None`` ("unavailable") when the input is shorter
than the window it needs; none of them raise on short input.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence


def sma(values: Sequence[float], period: int) -> float | None:
    """Mean of the last *period* values."""
    if period <= 0 or len(values) < period:
        return None
    return sum(values[-period:]) / period


def ema(values: Sequence[float], period: int) -> float | None:
    """Exponential moving average of the whole sequence.

    Seeded with the SMA of the *first* ``period`` values, then blended
    forward through the rest with ``k = 2 / (period + 1)``.  The result
    therefore depends on the full history length, not just the trailing
    window.
    """
    if period <= 0 or len(values) < period:
        return None
    k = 2 / (period + 1)
    e = sum(values[:period]) / period
    for v in values[period:]:
        e = v * k + e * (1 - k)
    return e


def true_range(prev_close: float | None, high: float, low: float) -> float:
    """Greatest of the bar range and the gaps from the previous close."""
    if prev_close is None:
        return high - low
    return max(high - low, abs(high - prev_close), abs(low - prev_close))


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float | None:
    """Average true range with Wilder smoothing.

    Needs ``period + 1`` bars.  The seed is the plain mean of the first
    ``period`` true ranges (the first bar has no previous close, so its
    TR is ``high - low``); each later TR is folded in as
    ``(atr * (period - 1) + tr) / period``.
    """
    if len(highs) != len(lows) or len(highs) != len(closes):
        raise ValueError("highs, lows and closes must be the same length")
    if period <= 0 or len(closes) < period + 1:
        return None

    trs = [
        true_range(closes[i - 1] if i > 0 else None, highs[i], lows[i])
        for i in range(len(closes))
    ]

    value = sum(trs[:period]) / period
    for tr in trs[period:]:
        value = (value * (period - 1) + tr) / period
    return value


def zscore(values: Sequence[float], lookback: int) -> float | None:
    """Z-score of the latest value against the trailing *lookback* window.

    Uses the population standard deviation.  A flat window scores 0.
    """
    if lookback <= 0 or len(values) < lookback:
        return None
    window = list(values[-lookback:])
    mean = statistics.fmean(window)
    sd = statistics.pstdev(window)
    if sd == 0:
        return 0.0
    return (window[-1] - mean) / sd
