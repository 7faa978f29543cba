#!/usr/bin/env python3
"""
CLI tool for displaying calculated fund metrics.
Usage: python analysis/show_metrics.py METRICS_JSON [options]
"""

import sys
import json
import argparse
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from reports.formatters import (
    NOT_AVAILABLE,
    format_date_display,
    format_percentage,
    format_periods,
    format_ratio,
    format_recovery_status,
    format_signed_percentage,
)

# (group, field, label, formatter)
SUMMARY_ROWS: List[Tuple[str, str, str, Any]] = [
    ('performance', 'annualized_return_pct', 'Annualized Return', format_signed_percentage),
    ('performance', 'cumulative_return_pct', 'Cumulative Return', format_signed_percentage),
    ('performance', 'excess_annualized_return_pct', 'Excess vs Benchmark', format_signed_percentage),
    ('risk', 'annualized_volatility_pct', 'Volatility', format_percentage),
    ('risk', 'max_drawdown_pct', 'Max Drawdown', format_percentage),
    ('risk', 'downside_deviation_pct', 'Downside Deviation', format_percentage),
    ('risk_adjusted', 'sharpe_ratio', 'Sharpe Ratio', format_ratio),
    ('risk_adjusted', 'sortino_ratio', 'Sortino Ratio', format_ratio),
    ('relative_to_benchmark', 'beta', 'Beta', format_ratio),
    ('relative_to_benchmark', 'alpha_annualized_pct', 'Alpha', format_signed_percentage),
    ('relative_to_benchmark', 'tracking_error_pct', 'Tracking Error', format_percentage),
    ('relative_to_benchmark', 'information_ratio', 'Information Ratio', format_ratio),
    ('trading_profile', 'hit_rate_pct', 'Hit Rate', format_percentage),
    ('trading_profile', 'best_day_return_pct', 'Best Period', format_signed_percentage),
    ('trading_profile', 'worst_day_return_pct', 'Worst Period', format_signed_percentage),
]


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Display a saved fund metrics file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analysis/show_metrics.py ./data/processed/metrics/growth_fund.json
  python analysis/show_metrics.py growth_fund.json --format json
        """
    )

    parser.add_argument('metrics_file', help='Metrics JSON written by analyze_fund.py')
    parser.add_argument('--format',
                       choices=['summary', 'full', 'json'],
                       default='summary',
                       help='Output format (default: summary)')

    args = parser.parse_args()

    metrics_file = Path(args.metrics_file)
    if not metrics_file.exists():
        print(f"No metrics file found: {metrics_file}", file=sys.stderr)
        print("Run analysis first: python analysis/analyze_fund.py PORTFOLIO_FILE", file=sys.stderr)
        sys.exit(1)

    # Load metrics
    try:
        with open(metrics_file, 'r') as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Failed to load metrics: {e}", file=sys.stderr)
        sys.exit(1)

    # Display based on format
    if args.format == 'json':
        print(json.dumps(document, indent=2))
    elif args.format == 'full':
        print("\n".join(summary_lines(document, full=True)))
    else:  # summary
        print("\n".join(summary_lines(document)))


def summary_lines(document: Dict[str, Any], full: bool = False) -> List[str]:
    """
    Render a metrics document as display lines.

    Args:
        document: Metrics document (analysis job output) or a bare
            MetricsResult dict
        full: Include drawdown detail and data quality notes

    Returns:
        Lines of text, "n/a" for null fields
    """
    metrics = document.get('metrics', document)
    fund = document.get('fund', 'Fund')
    as_of = document.get('as_of_date')

    header = f"{fund} Metrics"
    if as_of:
        header += f" (as of {as_of})"
    lines = [header, "=" * 50]

    performance = metrics.get('performance', {})
    lines.append(f"   {'Frequency':20}: {format_periods(performance.get('periods_per_year'))}")
    lines.append(f"   {'Return Periods':20}: {performance.get('days_in_sample', NOT_AVAILABLE)}")

    current_group = None
    for group, field, label, formatter in SUMMARY_ROWS:
        if group not in metrics:
            continue  # no benchmark group without a benchmark
        if group != current_group:
            lines.append("")
            lines.append(group.replace('_', ' ').title() + ":")
            current_group = group
        lines.append(f"   {label:20}: {formatter(metrics[group].get(field))}")

    if full:
        drawdown = document.get('drawdown')
        if drawdown and drawdown.get('max_drawdown_pct') is not None:
            lines.append("")
            lines.append("Drawdown Detail:")
            lines.append(f"   {'Depth':20}: {format_percentage(drawdown['max_drawdown_pct'])}")
            lines.append(f"   {'Peak':20}: {format_date_display(drawdown.get('peak_date'))}")
            lines.append(f"   {'Trough':20}: {format_date_display(drawdown.get('trough_date'))}")
            if as_of:
                lines.append(
                    f"   {'Recovery':20}: "
                    f"{format_recovery_status(drawdown.get('recovery_date'), as_of)}"
                )

        dq = document.get('data_quality', {})
        warnings = dq.get('warnings', [])
        if warnings:
            lines.append("")
            lines.append("Data Quality Warnings:")
            for warning in warnings:
                lines.append(f"   - {warning}")

    return lines


if __name__ == '__main__':
    main()
