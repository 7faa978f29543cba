"""
Population statistics primitives.
Pure functions over arrays of numbers. Non-finite entries are filtered out
first and empty input yields 0.0, so callers never see an exception here.
"""

import numpy as np
from typing import Sequence, Tuple

# Anything smaller is treated as a zero denominator
ZERO_TOLERANCE = 1e-12


def _finite(xs: Sequence[float]) -> np.ndarray:
    arr = np.asarray(xs, dtype=float).ravel()
    return arr[np.isfinite(arr)]


def is_effectively_zero(value: float) -> bool:
    """True when a variance/stddev is too small to divide by."""
    return abs(value) <= ZERO_TOLERANCE


def mean(xs: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for empty input."""
    arr = _finite(xs)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def variance_population(xs: Sequence[float]) -> float:
    """
    Population variance (ddof=0).

    Formula: σ² = Σ(x - μ)² / n

    Args:
        xs: Observations

    Returns:
        Variance, 0.0 for empty input
    """
    arr = _finite(xs)
    if arr.size == 0:
        return 0.0
    deviations = arr - arr.mean()
    return float(np.mean(deviations * deviations))


def stddev_population(xs: Sequence[float]) -> float:
    """Population standard deviation (ddof=0)."""
    return float(np.sqrt(variance_population(xs)))


def _paired(a: Sequence[float], b: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    n = min(len(a), len(b))
    a_arr = np.asarray(a[:n], dtype=float).ravel()
    b_arr = np.asarray(b[:n], dtype=float).ravel()

    # Drop the whole pair if either side is unusable
    keep = np.isfinite(a_arr) & np.isfinite(b_arr)
    return a_arr[keep], b_arr[keep]


def covariance_population(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Population covariance (ddof=0) of two series.

    Formula: cov = Σ(a - μa)(b - μb) / n, with n = min(len(a), len(b))

    Args:
        a: First series
        b: Second series, paired with ``a`` by position

    Returns:
        Covariance, 0.0 when there are no usable pairs
    """
    a_arr, b_arr = _paired(a, b)
    if a_arr.size == 0:
        return 0.0
    return float(np.mean((a_arr - a_arr.mean()) * (b_arr - b_arr.mean())))
