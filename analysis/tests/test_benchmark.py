"""
Tests for benchmark-relative metrics.
"""

import math
import pytest

from analysis.calculations.benchmark import (
    beta,
    alpha_annualized_pct,
    tracking_error_pct,
    information_ratio,
    benchmark_relative_metrics,
    BenchmarkError
)

BENCH = [0.01, -0.02, 0.03, -0.01, 0.02]


class TestBeta:
    """Tests for beta function."""

    def test_identical_series(self):
        assert beta(BENCH, BENCH) == pytest.approx(1.0)

    def test_leveraged_series(self):
        """Twice the benchmark return every period means beta 2."""
        portfolio = [2 * r for r in BENCH]

        assert beta(portfolio, BENCH) == pytest.approx(2.0)

    def test_inverse_series(self):
        portfolio = [-r for r in BENCH]

        assert beta(portfolio, BENCH) == pytest.approx(-1.0)

    def test_flat_benchmark_is_none(self):
        assert beta(BENCH, [0.01] * 5) is None

    def test_too_few_pairs(self):
        assert beta([0.01], [0.02]) is None

    def test_length_mismatch_raises(self):
        with pytest.raises(BenchmarkError):
            beta([0.01, 0.02], [0.01])


class TestAlphaAnnualizedPct:
    """Tests for alpha_annualized_pct function."""

    def test_identical_series_zero_alpha(self):
        assert alpha_annualized_pct(BENCH, BENCH, 252) == pytest.approx(0.0, abs=1e-9)

    def test_constant_outperformance(self):
        """Benchmark plus 0.1% per period: beta 1, alpha 0.1% x 12."""
        portfolio = [r + 0.001 for r in BENCH]

        result = alpha_annualized_pct(portfolio, BENCH, 12)

        assert result == pytest.approx(0.001 * 12 * 100)

    def test_undefined_beta(self):
        assert alpha_annualized_pct(BENCH, [0.0] * 5, 12) is None


class TestTrackingErrorAndInformationRatio:
    def test_identical_series(self):
        assert tracking_error_pct(BENCH, BENCH, 252) == pytest.approx(0.0, abs=1e-12)
        assert information_ratio(BENCH, BENCH, 252) is None

    def test_known_active_returns(self):
        """Active returns alternate 0 and 0.02: mean 0.01, std 0.01."""
        benchmark = [0.01, 0.01, 0.01, 0.01]
        portfolio = [0.01, 0.03, 0.01, 0.03]

        te = tracking_error_pct(portfolio, benchmark, 12)
        ir = information_ratio(portfolio, benchmark, 12)

        assert te == pytest.approx(0.01 * math.sqrt(12) * 100)
        assert ir == pytest.approx(0.01 * 12 / (0.01 * math.sqrt(12)))


class TestBenchmarkRelativeMetrics:
    def test_bundle_keys(self):
        result = benchmark_relative_metrics(BENCH, BENCH, 252)

        assert set(result) == {'beta', 'alpha_annualized_pct', 'tracking_error_pct', 'information_ratio'}
        assert result['beta'] == pytest.approx(1.0)

    def test_insufficient_pairs_all_none(self):
        result = benchmark_relative_metrics([0.01], [0.02], 252)

        assert all(value is None for value in result.values())
