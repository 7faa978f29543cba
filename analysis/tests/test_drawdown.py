"""
Tests for drawdown and recovery calculation utilities.
Uses crafted series with known drawdown patterns for verification.
"""

import pytest
import numpy as np
from datetime import date, timedelta

from analysis.calculations.drawdown import (
    max_drawdown_pct,
    drawdown_stats,
    calculate_drawdown_metrics,
    DrawdownError
)


class TestMaxDrawdownPct:
    """Tests for max_drawdown_pct function."""

    def test_three_point_scenario(self):
        """100 -> 105 -> 95 falls 9.52% from the 105 peak."""
        result = max_drawdown_pct([100.0, 105.0, 95.0])

        assert result == pytest.approx((95 / 105 - 1) * 100)
        assert result == pytest.approx(-9.52, abs=0.01)

    def test_strictly_increasing_is_zero(self):
        assert max_drawdown_pct([100.0, 101.0, 102.5, 110.0]) == 0.0

    def test_never_positive(self):
        """Random walks of every shape stay at or below zero."""
        rng = np.random.default_rng(42)
        for _ in range(50):
            steps = rng.normal(0.0, 0.03, size=40)
            prices = list(100.0 * np.cumprod(1.0 + steps))

            assert max_drawdown_pct(prices) <= 0

    def test_deepest_of_several_declines(self):
        prices = [100.0, 90.0, 120.0, 60.0, 130.0, 120.0]

        assert max_drawdown_pct(prices) == pytest.approx(-50.0)

    def test_non_positive_peaks_ignored(self):
        """Levels at or below zero never act as a peak."""
        assert max_drawdown_pct([0.0, -5.0, -10.0]) == 0.0
        assert max_drawdown_pct([-5.0, 10.0, 5.0]) == pytest.approx(-50.0)

    def test_too_short(self):
        assert max_drawdown_pct([]) is None
        assert max_drawdown_pct([100.0]) is None


class TestDrawdownStats:
    """Tests for drawdown_stats function."""

    def test_peak_trough_recovery(self):
        """Clear peak-trough-recovery pattern."""
        # 100 -> 120 (peak) -> 90 (trough) -> 125 (recovery)
        prices = [100.0, 110.0, 120.0, 110.0, 90.0, 100.0, 115.0, 125.0]
        dates = [date(2024, 8, 1) + timedelta(days=i) for i in range(8)]

        result = drawdown_stats(prices, dates)

        # 120 -> 90 = -25%
        assert abs(result['max_drawdown_pct'] - (-25.0)) < 1e-6
        assert result['peak_date'] == dates[2]
        assert result['trough_date'] == dates[4]
        assert result['recovery_date'] == dates[7]
        assert result['drawdown_periods'] == 2
        assert result['recovery_periods'] == 3

    def test_no_recovery(self):
        prices = [100.0, 110.0, 120.0, 100.0, 80.0, 85.0, 90.0]
        dates = [date(2024, 8, 1) + timedelta(days=i) for i in range(7)]

        result = drawdown_stats(prices, dates)

        assert abs(result['max_drawdown_pct'] - ((80.0 / 120.0) - 1) * 100) < 1e-6
        assert result['peak_date'] == dates[2]
        assert result['trough_date'] == dates[4]
        assert result['recovery_date'] is None
        assert result['recovery_periods'] is None
        assert result['drawdown_periods'] == 2

    def test_equal_to_peak_is_not_recovery(self):
        """Recovery needs a level strictly above the old peak."""
        prices = [100.0, 80.0, 100.0]
        dates = [date(2024, 8, 1) + timedelta(days=i) for i in range(3)]

        assert drawdown_stats(prices, dates)['recovery_date'] is None

    def test_no_drawdown(self):
        prices = [100.0, 105.0, 110.0]
        dates = [date(2024, 8, 1) + timedelta(days=i) for i in range(3)]

        result = drawdown_stats(prices, dates)

        assert result['max_drawdown_pct'] == 0.0
        assert result['peak_date'] == dates[0]
        assert result['drawdown_periods'] == 0

    def test_matches_single_pass_depth(self):
        prices = [100.0, 90.0, 120.0, 60.0, 130.0, 120.0]
        dates = [date(2024, 8, 1) + timedelta(days=i) for i in range(6)]

        assert drawdown_stats(prices, dates)['max_drawdown_pct'] == pytest.approx(
            max_drawdown_pct(prices)
        )

    def test_insufficient_data(self):
        with pytest.raises(DrawdownError, match="Insufficient data"):
            drawdown_stats([100.0], [date(2024, 8, 1)])

    def test_mismatched_lengths(self):
        with pytest.raises(DrawdownError, match="same length"):
            drawdown_stats([100.0, 90.0], [date(2024, 8, 1)])


class TestCalculateDrawdownMetrics:
    def test_insufficient_data_is_all_none(self):
        result = calculate_drawdown_metrics([100.0], [date(2024, 8, 1)])

        assert set(result) == {
            'max_drawdown_pct', 'peak_date', 'trough_date', 'recovery_date',
            'drawdown_periods', 'recovery_periods'
        }
        assert all(value is None for value in result.values())

    def test_passes_through_stats(self):
        prices = [100.0, 105.0, 95.0]
        dates = [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]

        result = calculate_drawdown_metrics(prices, dates)

        assert result['peak_date'] == date(2024, 1, 2)
        assert result['trough_date'] == date(2024, 1, 3)
