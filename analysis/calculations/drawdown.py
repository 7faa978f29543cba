"""
Drawdown and recovery calculation utilities.
Pure functions for maximum drawdown analysis.
"""

from datetime import date
from typing import Dict, Optional, Sequence, Union


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def max_drawdown_pct(prices: Sequence[float]) -> Optional[float]:
    """
    Largest decline from a running peak, in percent.

    Single left-to-right pass: keep the running peak and track the most
    negative (value - peak) / peak. Only positive peaks are measured
    against, so the result stays <= 0.

    Args:
        prices: Levels in chronological order

    Returns:
        Max drawdown as a non-positive percent (-9.52 = -9.52%), 0.0 for a
        non-decreasing series, None with fewer than 2 levels
    """
    if len(prices) < 2:
        return None

    peak = prices[0]
    worst = 0.0

    for value in prices:
        if value > peak:
            peak = value
        if peak <= 0:
            continue
        dd = (value - peak) / peak
        if dd < worst:
            worst = dd

    return worst * 100


def drawdown_stats(
    prices: Sequence[float],
    dates: Sequence[date]
) -> Dict[str, Union[float, date, int, None]]:
    """
    Calculate maximum drawdown statistics for a price series.

    Finds the largest peak-to-trough decline and recovery information.

    Args:
        prices: List of prices in chronological order
        dates: Corresponding dates

    Returns:
        Dictionary with drawdown statistics:
        - max_drawdown_pct: Largest decline in percent (non-positive)
        - peak_date: Date of peak before max drawdown
        - trough_date: Date of lowest point
        - recovery_date: First date strictly above the peak (None if no recovery)
        - drawdown_periods: Observations from peak to trough
        - recovery_periods: Observations from trough to recovery (None if no recovery)

    Raises:
        DrawdownError: If insufficient data or mismatched inputs
    """
    if len(prices) < 2:
        raise DrawdownError("Insufficient data: need at least 2 prices")

    if len(prices) != len(dates):
        raise DrawdownError("Prices and dates must have same length")

    peak_idx = 0
    worst = 0.0
    worst_peak_idx = 0
    trough_idx = 0

    for i, value in enumerate(prices):
        if value > prices[peak_idx]:
            peak_idx = i
        peak = prices[peak_idx]
        if peak <= 0:
            continue
        dd = (value - peak) / peak
        if dd < worst:
            worst = dd
            worst_peak_idx = peak_idx
            trough_idx = i

    # No decline at all: peak and trough collapse onto the first point
    if worst == 0.0:
        return {
            'max_drawdown_pct': 0.0,
            'peak_date': dates[0],
            'trough_date': dates[0],
            'recovery_date': dates[0],
            'drawdown_periods': 0,
            'recovery_periods': 0
        }

    peak_value = prices[worst_peak_idx]
    recovery_idx = None
    for i in range(trough_idx + 1, len(prices)):
        if prices[i] > peak_value:
            recovery_idx = i
            break

    return {
        'max_drawdown_pct': worst * 100,
        'peak_date': dates[worst_peak_idx],
        'trough_date': dates[trough_idx],
        'recovery_date': dates[recovery_idx] if recovery_idx is not None else None,
        'drawdown_periods': trough_idx - worst_peak_idx,
        'recovery_periods': (recovery_idx - trough_idx) if recovery_idx is not None else None
    }


def calculate_drawdown_metrics(
    prices: Sequence[float],
    dates: Sequence[date]
) -> Dict[str, Union[float, date, int, None]]:
    """
    Drawdown statistics with null metrics instead of an exception.

    Args:
        prices: List of prices in chronological order
        dates: Corresponding dates

    Returns:
        Dictionary with drawdown metrics (all None if insufficient data)
    """
    try:
        return drawdown_stats(prices, dates)
    except DrawdownError:
        return {
            'max_drawdown_pct': None,
            'peak_date': None,
            'trough_date': None,
            'recovery_date': None,
            'drawdown_periods': None,
            'recovery_periods': None
        }
