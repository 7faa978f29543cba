"""
Guardrails for analysis engine - validation and safety checks.
Flags data quality issues in computed metrics and their inputs.
"""

import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from analysis.config import MetricsConfig
from analysis.metrics_aggregator import MetricsResult

logger = logging.getLogger(__name__)


class DataQualityError(Exception):
    """Raised when data quality issues require user intervention."""
    pass


def validate_metrics_result(result: MetricsResult) -> None:
    """
    Validate that all numeric metrics are finite and within sign bounds.

    Args:
        result: Computed metrics

    Raises:
        DataQualityError: If NaN/infinite values are found, or the drawdown
            is positive
    """
    def check_value(value, path: str):
        if value is None:
            return  # None is acceptable for missing data

        if isinstance(value, (int, float)):
            if math.isnan(value):
                raise DataQualityError(f"NaN value found in {path}")
            if math.isinf(value):
                raise DataQualityError(f"Infinite value found in {path}")

    metrics = result.to_dict()
    for group, fields in metrics.items():
        for name, value in fields.items():
            check_value(value, f'{group}.{name}')

    drawdown = result.risk.max_drawdown_pct
    if drawdown is not None and drawdown > 0:
        raise DataQualityError(f"Max drawdown must be <= 0, got {drawdown}")

    hit_rate = result.trading_profile.hit_rate_pct
    if hit_rate is not None and not (0 <= hit_rate <= 100):
        raise DataQualityError(f"Hit rate out of bounds: {hit_rate}")


def check_sample_sufficiency(
    result: MetricsResult,
    config: MetricsConfig,
    observation_count: Optional[int] = None
) -> List[str]:
    """
    Check whether the sample is large enough for the metrics to mean much.

    Args:
        result: Computed metrics
        config: Engine configuration (warning thresholds)
        observation_count: Number of level points the periodicity estimate
            was based on, when known

    Returns:
        List of sufficiency warnings

    Raises:
        DataQualityError: If not a single return period was computed
    """
    warnings = []
    periods = result.performance.days_in_sample

    if periods == 0:
        raise DataQualityError(
            "No return periods could be computed; need at least 2 usable level points"
        )

    if periods < config.min_periods_warning:
        warnings.append(
            f"Only {periods} return periods in sample "
            f"(recommend at least {config.min_periods_warning} for stable metrics)."
        )

    # Too few gaps to infer frequency means the fallback was used
    if observation_count is not None and observation_count - 1 < config.min_periodicity_gaps:
        warnings.append(
            f"Sampling frequency could not be inferred from {observation_count} dates; "
            f"assumed {result.performance.periods_per_year} periods per year."
        )

    return warnings


def check_alignment_coverage(
    portfolio_count: int,
    aligned_count: int,
    config: MetricsConfig
) -> List[str]:
    """
    Warn when aligning to the benchmark discarded much of the portfolio.

    Args:
        portfolio_count: Portfolio observations before alignment
        aligned_count: Observations shared with the benchmark
        config: Engine configuration (coverage threshold)

    Returns:
        List of coverage warnings
    """
    warnings = []
    if portfolio_count <= 0:
        return warnings

    coverage = aligned_count / portfolio_count
    if coverage < config.min_overlap_ratio_warning:
        warnings.append(
            f"Benchmark alignment kept {aligned_count} of {portfolio_count} portfolio "
            f"observations ({coverage:.0%}). Check that both series use the same calendar."
        )

    return warnings


def run_all_guardrails(
    fund: str,
    result: MetricsResult,
    config: MetricsConfig,
    portfolio_count: Optional[int] = None,
    aligned_count: Optional[int] = None
) -> Dict[str, Any]:
    """
    Run all guardrail checks and compile results.

    Args:
        fund: Fund identifier
        result: Computed metrics
        config: Engine configuration
        portfolio_count: Usable portfolio level points before alignment
        aligned_count: Level points left after alignment (None without benchmark)

    Returns:
        Dictionary with guardrail results

    Raises:
        DataQualityError: If critical issues found that require user intervention
    """
    guardrail_results = {
        'fund': fund,
        'timestamp': date.today().isoformat(),
        'checks': {
            'numeric_validation': None,
            'sample_sufficiency': None,
            'alignment_coverage': None
        },
        'warnings': [],
        'errors': []
    }

    try:
        # 1. Numeric validation
        validate_metrics_result(result)
        guardrail_results['checks']['numeric_validation'] = 'passed'

        # 2. Sample size
        observation_count = aligned_count if aligned_count is not None else portfolio_count
        sufficiency = check_sample_sufficiency(result, config, observation_count)
        guardrail_results['checks']['sample_sufficiency'] = sufficiency
        guardrail_results['warnings'].extend(sufficiency)

        # 3. Benchmark overlap
        if portfolio_count is not None and aligned_count is not None:
            coverage = check_alignment_coverage(portfolio_count, aligned_count, config)
            guardrail_results['checks']['alignment_coverage'] = coverage
            guardrail_results['warnings'].extend(coverage)

        for warning in guardrail_results['warnings']:
            logger.warning("%s: %s", fund, warning)

        return guardrail_results

    except DataQualityError as e:
        guardrail_results['errors'].append(str(e))
        raise  # Re-raise for caller to handle


def create_data_quality_report(guardrail_results: Dict[str, Any]) -> str:
    """
    Create human-readable data quality report.

    Args:
        guardrail_results: Results from run_all_guardrails()

    Returns:
        Formatted text report
    """
    fund = guardrail_results['fund']
    timestamp = guardrail_results['timestamp']

    report = [
        f"Data Quality Report for {fund}",
        f"Generated: {timestamp}",
        "=" * 50,
        ""
    ]

    errors = guardrail_results.get('errors', [])
    if errors:
        report.append("CRITICAL ISSUES:")
        for error in errors:
            report.append(f"   - {error}")
        report.append("")

    warnings = guardrail_results.get('warnings', [])
    if warnings:
        report.append("WARNINGS:")
        for warning in warnings:
            report.append(f"   - {warning}")
        report.append("")

    if errors:
        report.append("OVERALL STATUS: CRITICAL ISSUES FOUND")
        report.append("   Manual review required before using these metrics.")
    elif warnings:
        report.append("OVERALL STATUS: WARNINGS PRESENT")
        report.append("   Metrics computed; note the limitations above.")
    else:
        report.append("OVERALL STATUS: DATA QUALITY ACCEPTABLE")

    return "\n".join(report)
