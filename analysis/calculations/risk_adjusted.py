"""
Risk-adjusted return ratios.
Sharpe and Sortino from period returns against a compounded risk-free hurdle.
"""

import math
from typing import Optional, Sequence

from analysis.calculations.statistics import (
    is_effectively_zero,
    mean,
    stddev_population,
)
from analysis.calculations.volatility import MIN_RETURNS_FOR_VOLATILITY, returns_below

DEFAULT_ANNUAL_RISK_FREE_RATE = 0.02


def period_risk_free_rate(annual_rate: float, periods_per_year: int) -> float:
    """
    De-annualize a risk-free rate by compounding.

    Formula: (1 + annual) ^ (1 / periods_per_year) - 1

    Raises:
        ValueError: If the annual rate is not finite or not above -100%
    """
    if not math.isfinite(annual_rate) or annual_rate <= -1.0:
        raise ValueError(f"Annual risk-free rate must be a finite decimal above -1, got {annual_rate}")
    return (1.0 + annual_rate) ** (1.0 / periods_per_year) - 1.0


def sharpe_ratio(
    returns: Sequence[float],
    periods_per_year: int,
    annual_risk_free_rate: float = DEFAULT_ANNUAL_RISK_FREE_RATE
) -> Optional[float]:
    """
    Annualized Sharpe ratio.

    Formula: (mean(r) - rf_p) / std_pop(r) × √periods_per_year

    Args:
        returns: Period returns
        periods_per_year: Annualization factor
        annual_risk_free_rate: Annual risk-free rate as a decimal (0.02 = 2%)

    Returns:
        Sharpe ratio, or None with fewer than 2 returns or zero volatility
    """
    if len(returns) < MIN_RETURNS_FOR_VOLATILITY:
        return None

    sd = stddev_population(returns)
    if is_effectively_zero(sd):
        return None

    rf = period_risk_free_rate(annual_risk_free_rate, periods_per_year)
    return (mean(returns) - rf) / sd * math.sqrt(periods_per_year)


def sortino_ratio(
    returns: Sequence[float],
    periods_per_year: int,
    annual_risk_free_rate: float = DEFAULT_ANNUAL_RISK_FREE_RATE
) -> Optional[float]:
    """
    Annualized Sortino ratio.

    Same numerator as Sharpe; the denominator is the population stddev of
    only those returns that fall below the per-period risk-free hurdle.

    Returns:
        Sortino ratio, or None when no return misses the hurdle or the
        downside deviation is zero
    """
    if len(returns) < MIN_RETURNS_FOR_VOLATILITY:
        return None

    rf = period_risk_free_rate(annual_risk_free_rate, periods_per_year)
    downside = returns_below(returns, rf)
    if not downside:
        return None

    downside_sd = stddev_population(downside)
    if is_effectively_zero(downside_sd):
        return None

    return (mean(returns) - rf) / downside_sd * math.sqrt(periods_per_year)
