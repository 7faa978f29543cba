"""
Returns calculation utilities.
Pure functions for turning level series into simple period returns and
compounding them back into cumulative and annualized figures.
"""

import math
import numpy as np
from typing import List, Optional, Sequence

from analysis.calculations.series import LevelPoint, ReturnPoint


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


def compute_returns_from_levels(levels: Sequence[LevelPoint]) -> List[ReturnPoint]:
    """
    Convert a level series into simple period returns.

    Formula: r_t = (V_t / V_{t-1}) - 1

    Args:
        levels: Normalized level series in ascending date order

    Returns:
        List of ReturnPoint dated at the later level (one fewer than input)

    Example:
        levels 100 -> 110 -> 121 give returns [0.10, 0.10]

        A period whose prior level is exactly 0 is skipped outright, so
        levels 100 -> 0 -> 50 give a single return of -1.0 (100 -> 0)
        and nothing for 0 -> 50.
    """
    returns = []

    for prev, cur in zip(levels, levels[1:]):
        if prev.value == 0:
            continue
        returns.append(ReturnPoint(date=cur.date, ret=(cur.value / prev.value) - 1))

    return returns


def return_values(returns: Sequence[ReturnPoint]) -> List[float]:
    return [r.ret for r in returns]


def levels_from_returns(returns: Sequence[float], start_value: float) -> np.ndarray:
    """
    Rebuild a level series from returns by cumulative product.

    Args:
        returns: Period returns in chronological order
        start_value: Level before the first return

    Returns:
        Numpy array of levels, starting with ``start_value``
        (length = len(returns) + 1)

    Raises:
        ReturnsError: If start_value is not a finite number
    """
    if not math.isfinite(start_value):
        raise ReturnsError(f"Start value must be finite, got {start_value}")

    growth = np.cumprod(1.0 + np.asarray(returns, dtype=float))
    return np.concatenate(([start_value], start_value * growth))


def _growth_factor(returns: Sequence[float]) -> float:
    return float(np.prod(1.0 + np.asarray(returns, dtype=float)))


def cumulative_return_pct(returns: Sequence[float]) -> Optional[float]:
    """Compounded return over the whole sample, in percent."""
    if len(returns) == 0:
        return None
    return (_growth_factor(returns) - 1.0) * 100


def annualized_return_pct(
    returns: Sequence[float],
    periods_per_year: int
) -> Optional[float]:
    """
    Geometric annualized return in percent.

    Formula: (Π(1 + r_t)) ^ (periods_per_year / n) - 1

    Args:
        returns: Period returns
        periods_per_year: Sampling frequency of the returns

    Returns:
        Annualized return as percent (12.3 = 12.3%), or None when there are
        no returns or the compounded growth is not positive
    """
    n = len(returns)
    if n == 0 or periods_per_year <= 0:
        return None

    growth = _growth_factor(returns)
    if growth <= 0 or not math.isfinite(growth):
        return None

    try:
        annualized = growth ** (periods_per_year / n) - 1.0
    except OverflowError:
        return None

    return annualized * 100
