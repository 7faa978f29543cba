"""
Benchmark-relative metrics.
Beta, annualized alpha, tracking error and information ratio from
date-aligned portfolio and benchmark returns.
"""

import math
from typing import Dict, Optional, Sequence

from analysis.calculations.statistics import (
    covariance_population,
    is_effectively_zero,
    mean,
    stddev_population,
    variance_population,
)

MIN_ALIGNED_RETURNS = 2


class BenchmarkError(Exception):
    """Raised when portfolio and benchmark returns are not aligned."""
    pass


def _check_pair(portfolio: Sequence[float], benchmark: Sequence[float]) -> bool:
    """True when the pair is usable; raises on a length mismatch."""
    if len(portfolio) != len(benchmark):
        raise BenchmarkError(
            f"Portfolio and benchmark returns must have same length, "
            f"got {len(portfolio)} and {len(benchmark)}"
        )
    return len(portfolio) >= MIN_ALIGNED_RETURNS


def beta(portfolio: Sequence[float], benchmark: Sequence[float]) -> Optional[float]:
    """
    Sensitivity of portfolio returns to benchmark returns.

    Formula: β = cov_pop(p, b) / var_pop(b)

    Args:
        portfolio: Portfolio period returns
        benchmark: Benchmark period returns on the same dates

    Returns:
        Beta, or None with fewer than 2 pairs or a flat benchmark

    Raises:
        BenchmarkError: If the two series differ in length
    """
    if not _check_pair(portfolio, benchmark):
        return None

    bench_var = variance_population(benchmark)
    if is_effectively_zero(bench_var):
        return None

    return covariance_population(portfolio, benchmark) / bench_var


def alpha_annualized_pct(
    portfolio: Sequence[float],
    benchmark: Sequence[float],
    periods_per_year: int,
    portfolio_beta: Optional[float] = None
) -> Optional[float]:
    """
    Annualized return not explained by beta-scaled benchmark movement.

    Formula: α = (mean(p) - β × mean(b)) × periods_per_year × 100

    Returns:
        Alpha in percent, or None when beta is undefined
    """
    if portfolio_beta is None:
        portfolio_beta = beta(portfolio, benchmark)
    if portfolio_beta is None:
        return None

    return (mean(portfolio) - portfolio_beta * mean(benchmark)) * periods_per_year * 100


def active_returns(portfolio: Sequence[float], benchmark: Sequence[float]):
    return [p - b for p, b in zip(portfolio, benchmark)]


def tracking_error_pct(
    portfolio: Sequence[float],
    benchmark: Sequence[float],
    periods_per_year: int
) -> Optional[float]:
    """Annualized stddev of active returns, in percent."""
    if not _check_pair(portfolio, benchmark):
        return None

    active = active_returns(portfolio, benchmark)
    return stddev_population(active) * math.sqrt(periods_per_year) * 100


def information_ratio(
    portfolio: Sequence[float],
    benchmark: Sequence[float],
    periods_per_year: int
) -> Optional[float]:
    """Annualized mean active return per unit of tracking error."""
    if not _check_pair(portfolio, benchmark):
        return None

    active = active_returns(portfolio, benchmark)
    sd = stddev_population(active)
    if is_effectively_zero(sd):
        return None

    return (mean(active) * periods_per_year) / (sd * math.sqrt(periods_per_year))


def benchmark_relative_metrics(
    portfolio: Sequence[float],
    benchmark: Sequence[float],
    periods_per_year: int
) -> Dict[str, Optional[float]]:
    """
    Compute the benchmark-relative group in one go.

    Args:
        portfolio: Portfolio period returns
        benchmark: Benchmark period returns on the same dates
        periods_per_year: Annualization factor

    Returns:
        Dictionary with beta, alpha_annualized_pct, tracking_error_pct and
        information_ratio (each None when undefined)
    """
    portfolio_beta = beta(portfolio, benchmark)

    return {
        'beta': portfolio_beta,
        'alpha_annualized_pct': alpha_annualized_pct(
            portfolio, benchmark, periods_per_year, portfolio_beta=portfolio_beta
        ),
        'tracking_error_pct': tracking_error_pct(portfolio, benchmark, periods_per_year),
        'information_ratio': information_ratio(portfolio, benchmark, periods_per_year),
    }
