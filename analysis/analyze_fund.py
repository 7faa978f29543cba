#!/usr/bin/env python3
"""
CLI tool for analyzing a fund's level history.
Usage: python analysis/analyze_fund.py PORTFOLIO_FILE [options]
"""

import os
import sys
import json
import argparse
import logging
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from analysis.analysis_job import analyze_fund
from analysis.config import MetricsConfigError, load_metrics_config
from reports.formatters import (
    format_percentage,
    format_periods,
    format_ratio,
    format_signed_percentage,
)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Compute performance and risk metrics for a fund',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analysis/analyze_fund.py data/growth_fund.csv
  python analysis/analyze_fund.py data/growth_fund.csv --benchmark data/index.csv
  python analysis/analyze_fund.py nav.json --risk-free 0.045 --value-column nav
        """
    )

    parser.add_argument('portfolio_file', help='CSV or JSON file of dated portfolio levels')
    parser.add_argument('--benchmark',
                       help='CSV or JSON file of dated benchmark levels')
    parser.add_argument('--risk-free',
                       type=float,
                       help='Annual risk-free rate as decimal (default: config, 0.02)')
    parser.add_argument('--output',
                       help='Output JSON file path (default: ./data/processed/metrics/{FUND}.json)')
    parser.add_argument('--fund',
                       help='Fund identifier (default: portfolio file name)')
    parser.add_argument('--as-of',
                       type=date.fromisoformat,
                       default=date.today(),
                       help='Analysis date (YYYY-MM-DD, default: today)')
    parser.add_argument('--date-column',
                       default='date',
                       help='Date column in the level files (default: date)')
    parser.add_argument('--value-column',
                       default='value',
                       help='Value column in the level files (default: value)')
    parser.add_argument('--config',
                       help='Metrics config YAML (default: METRICS_CONFIG_PATH or ./config/metrics.yml)')
    parser.add_argument('--verbose', '-v',
                       action='store_true',
                       help='Debug logging')
    parser.add_argument('--quiet', '-q',
                       action='store_true',
                       help='Minimal output (just success/failure)')

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else os.getenv('LOG_LEVEL', 'WARNING').upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    portfolio_file = Path(args.portfolio_file)
    fund = args.fund or portfolio_file.stem

    # Set default output path
    if args.output is None:
        output = Path('./data/processed/metrics') / f'{fund}.json'
    else:
        output = Path(args.output)

    try:
        config = load_metrics_config(args.config)
    except MetricsConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print(f"Analyzing {fund}")
        print(f"Portfolio: {portfolio_file}")
        print(f"Benchmark: {args.benchmark or 'none'}")
        print(f"Analysis date: {args.as_of}")
        print()

    result = analyze_fund(
        portfolio_path=portfolio_file,
        output_path=output,
        benchmark_path=Path(args.benchmark) if args.benchmark else None,
        fund=fund,
        annual_risk_free_rate=args.risk_free,
        config=config,
        as_of_date=args.as_of,
        date_column=args.date_column,
        value_column=args.value_column,
    )

    if result['status'] != 'completed':
        print(f"Analysis failed for {fund}: {result['error_message']}", file=sys.stderr)
        sys.exit(1)

    if args.quiet:
        print(f"{fund} analysis complete: {result['output_path']}")
        sys.exit(0)

    print("Analysis completed successfully!")
    print(f"Metrics calculated: {result['metrics_calculated']}")
    print(f"Observations: {result['observations']}")
    print(f"Duration: {result['duration_seconds']:.1f}s")
    print(f"Results saved to: {result['output_path']}")
    for warning in result['warnings']:
        print(f"Warning: {warning}")
    print()

    _show_quick_summary(result['output_path'])
    sys.exit(0)


def _show_quick_summary(output_path: str):
    """Show quick summary of calculated metrics."""
    try:
        with open(output_path, 'r') as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not show summary: {e}")
        return

    metrics = document['metrics']
    performance = metrics['performance']
    risk = metrics['risk']
    risk_adjusted = metrics['risk_adjusted']

    print(f"Quick Summary for {document['fund']}:")
    print(f"   Frequency: {format_periods(performance['periods_per_year'])}")
    print(f"   Annualized Return: {format_signed_percentage(performance['annualized_return_pct'])}")
    print(f"   Volatility: {format_percentage(risk['annualized_volatility_pct'])}")
    print(f"   Max Drawdown: {format_percentage(risk['max_drawdown_pct'])}")
    print(f"   Sharpe Ratio: {format_ratio(risk_adjusted['sharpe_ratio'])}")

    relative = metrics.get('relative_to_benchmark')
    if relative:
        print(f"   Beta: {format_ratio(relative['beta'])}")
        print(f"   Alpha: {format_signed_percentage(relative['alpha_annualized_pct'])}")

    print()


if __name__ == '__main__':
    main()
