"""
Tests for population statistics primitives.
Hand-verifiable inputs; population (divide by n) semantics throughout.
"""

import math
import pytest

from analysis.calculations.statistics import (
    mean,
    variance_population,
    stddev_population,
    covariance_population,
    is_effectively_zero,
    ZERO_TOLERANCE
)


class TestMean:
    def test_basic(self):
        assert mean([1, 2, 3, 4]) == 2.5

    def test_empty(self):
        assert mean([]) == 0.0

    def test_ignores_non_finite(self):
        assert mean([1.0, float('nan'), 3.0, float('inf')]) == 2.0


class TestVariancePopulation:
    def test_divides_by_n(self):
        """[2, 4, 4, 4, 5, 5, 7, 9] has population variance 4."""
        xs = [2, 4, 4, 4, 5, 5, 7, 9]

        assert variance_population(xs) == pytest.approx(4.0)
        assert stddev_population(xs) == pytest.approx(2.0)

    def test_single_value(self):
        assert variance_population([5.0]) == 0.0

    def test_empty(self):
        assert variance_population([]) == 0.0
        assert stddev_population([]) == 0.0

    def test_constant_series(self):
        assert stddev_population([0.01] * 10) == pytest.approx(0.0, abs=1e-15)


class TestCovariancePopulation:
    def test_basic(self):
        """cov([1,2,3], [2,4,6]) = 2 * var([1,2,3]) = 4/3."""
        assert covariance_population([1, 2, 3], [2, 4, 6]) == pytest.approx(4 / 3)

    def test_self_covariance_is_variance(self):
        xs = [0.01, -0.02, 0.03, 0.005]

        assert covariance_population(xs, xs) == pytest.approx(variance_population(xs))

    def test_truncates_to_shorter(self):
        assert covariance_population([1, 2, 3, 100], [2, 4, 6]) == pytest.approx(4 / 3)

    def test_drops_non_finite_pairs(self):
        a = [1, 2, float('nan'), 3]
        b = [2, 4, 5, 6]

        assert covariance_population(a, b) == pytest.approx(4 / 3)

    def test_empty(self):
        assert covariance_population([], []) == 0.0


class TestIsEffectivelyZero:
    def test_tolerance(self):
        assert is_effectively_zero(0.0)
        assert is_effectively_zero(ZERO_TOLERANCE / 10)
        assert is_effectively_zero(-ZERO_TOLERANCE)
        assert not is_effectively_zero(1e-6)
        assert not math.isnan(ZERO_TOLERANCE)
