"""
Volatility calculation utilities.
Pure functions for annualized total and downside volatility of a return series.
"""

import math
from typing import List, Optional, Sequence

from analysis.calculations.statistics import stddev_population

MIN_RETURNS_FOR_VOLATILITY = 2


def annualized_volatility_pct(
    returns: Sequence[float],
    periods_per_year: int
) -> Optional[float]:
    """
    Annualized volatility from period returns.

    Formula: σ = std_pop(returns) × √periods_per_year × 100

    Args:
        returns: Period returns
        periods_per_year: Annualization factor (252 for daily)

    Returns:
        Annualized volatility in percent (25.0 = 25%), or None with fewer
        than 2 returns
    """
    if len(returns) < MIN_RETURNS_FOR_VOLATILITY:
        return None

    return stddev_population(returns) * math.sqrt(periods_per_year) * 100


def returns_below(returns: Sequence[float], hurdle: float) -> List[float]:
    """Returns strictly below the hurdle rate."""
    return [r for r in returns if r < hurdle]


def downside_deviation_pct(
    returns: Sequence[float],
    periods_per_year: int,
    period_risk_free: float = 0.0
) -> Optional[float]:
    """
    Annualized population stddev of the returns that miss the hurdle.

    Args:
        returns: Period returns
        periods_per_year: Annualization factor
        period_risk_free: Per-period hurdle rate

    Returns:
        Downside deviation in percent, or None when no return falls below
        the hurdle
    """
    downside = returns_below(returns, period_risk_free)
    if not downside:
        return None

    return stddev_population(downside) * math.sqrt(periods_per_year) * 100
