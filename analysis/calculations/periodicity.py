"""
Sampling frequency estimation.
Infers periods-per-year from the observed spacing of a date axis.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

TRADING_DAYS = 252

# (max median gap in days, periods per year), checked in order
DEFAULT_PERIODICITY_THRESHOLDS: Tuple[Tuple[float, int], ...] = (
    (2.5, 252),   # daily
    (10.0, 52),   # weekly
    (45.0, 12),   # monthly
    (120.0, 4),   # quarterly
)
SPARSE_PERIODS_PER_YEAR = 1

MIN_USABLE_GAPS = 3


def date_gaps(dates: Sequence[date]) -> List[int]:
    """
    Consecutive gaps in days, keeping only strictly positive ones.

    Duplicate or out-of-order dates produce non-positive gaps and are
    ignored rather than treated as errors.
    """
    gaps = []
    for prev, cur in zip(dates, dates[1:]):
        delta = (cur - prev).days
        if delta > 0:
            gaps.append(delta)
    return gaps


def classify_median_gap(
    median_days: float,
    thresholds: Optional[Sequence[Tuple[float, int]]] = None
) -> int:
    """
    Map a median gap to a periods-per-year bucket.

    Args:
        median_days: Median spacing between observations in days
        thresholds: Ascending (max_gap_days, periods_per_year) pairs

    Returns:
        Periods per year; 1 when the gap exceeds every threshold
    """
    if thresholds is None:
        thresholds = DEFAULT_PERIODICITY_THRESHOLDS

    for max_gap, periods in thresholds:
        if median_days <= max_gap:
            return periods

    # Very sparse series; treat as annual-ish
    return SPARSE_PERIODS_PER_YEAR


def estimate_periods_per_year(
    dates: Sequence[date],
    fallback: int = TRADING_DAYS,
    thresholds: Optional[Sequence[Tuple[float, int]]] = None,
    min_gaps: int = MIN_USABLE_GAPS
) -> int:
    """
    Estimate how many observations a year the series carries.

    Uses the median day gap, which shrugs off weekends, holidays and the
    occasional missing snapshot far better than a mean gap would.

    Args:
        dates: Ascending observation dates
        fallback: Value returned when there are too few usable gaps
        thresholds: Optional override of the gap classification table
        min_gaps: Minimum number of positive gaps needed to estimate

    Returns:
        Integer periods-per-year estimate
    """
    if not dates:
        return fallback

    gaps = date_gaps(list(dates))
    if len(gaps) < min_gaps:
        logger.debug("Only %d usable date gaps, using fallback %d", len(gaps), fallback)
        return fallback

    median_days = float(np.median(gaps))
    periods = classify_median_gap(median_days, thresholds)

    logger.debug("Median gap %.1f days -> %d periods per year", median_days, periods)
    return periods
