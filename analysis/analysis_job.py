"""
Orchestrated analysis job - level files to metrics JSON pipeline.
Reads level files, calls pure functions, persists analysis JSON.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from analysis import __version__
from analysis.calculations.drawdown import calculate_drawdown_metrics
from analysis.calculations.series import (
    align_by_date,
    normalize_series,
    series_dates,
    series_values,
)
from analysis.config import MetricsConfig, load_metrics_config
from analysis.guardrails import run_all_guardrails
from analysis.metrics_aggregator import compute_metrics
from ingestion.providers.file_adapter import read_level_rows

logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when analysis job fails."""
    pass


def compose_fund_document(
    fund: str,
    portfolio_rows: List[Dict[str, Any]],
    benchmark_rows: Optional[List[Dict[str, Any]]] = None,
    annual_risk_free_rate: Optional[float] = None,
    config: Optional[MetricsConfig] = None,
    as_of_date: Optional[date] = None
) -> Dict[str, Any]:
    """
    Compose metrics, drawdown detail and data quality into one document.

    Args:
        fund: Fund identifier
        portfolio_rows: Raw portfolio {date, value} rows
        benchmark_rows: Raw benchmark rows (optional)
        annual_risk_free_rate: Annual rate as decimal; None for config default
        config: Engine configuration
        as_of_date: Date for which metrics are reported (defaults to today)

    Returns:
        Metrics document dictionary

    Raises:
        AnalysisJobError: If the portfolio has no usable observations
        AlignmentError: If portfolio and benchmark share no dates
        DataQualityError: If the computed metrics fail guardrails
    """
    if config is None:
        config = load_metrics_config()
    if annual_risk_free_rate is None:
        annual_risk_free_rate = config.annual_risk_free_rate
    if as_of_date is None:
        as_of_date = date.today()

    portfolio = normalize_series(portfolio_rows)
    if not portfolio:
        raise AnalysisJobError(f"No usable portfolio levels for {fund}")

    portfolio_count = len(portfolio)
    aligned = portfolio
    aligned_count = None
    benchmark = None

    if benchmark_rows is not None:
        benchmark = normalize_series(benchmark_rows)
        aligned, _ = align_by_date(portfolio, benchmark)
        aligned_count = len(aligned)

    result = compute_metrics(
        portfolio,
        benchmark,
        annual_risk_free_rate=annual_risk_free_rate,
        config=config,
    )

    drawdown = calculate_drawdown_metrics(series_values(aligned), series_dates(aligned))

    data_quality = run_all_guardrails(
        fund,
        result,
        config,
        portfolio_count=portfolio_count,
        aligned_count=aligned_count,
    )

    return {
        'fund': fund,
        'as_of_date': as_of_date.isoformat(),
        'data_period': {
            'start_date': aligned[0].date.isoformat(),
            'end_date': aligned[-1].date.isoformat(),
            'observations': len(aligned),
            'portfolio_observations': portfolio_count,
            'benchmark_observations': len(benchmark) if benchmark is not None else None
        },
        'metrics': result.to_dict(),
        'drawdown': {
            'max_drawdown_pct': drawdown['max_drawdown_pct'],
            'peak_date': drawdown['peak_date'].isoformat() if drawdown['peak_date'] else None,
            'trough_date': drawdown['trough_date'].isoformat() if drawdown['trough_date'] else None,
            'recovery_date': drawdown['recovery_date'].isoformat() if drawdown['recovery_date'] else None,
            'drawdown_periods': drawdown['drawdown_periods'],
            'recovery_periods': drawdown['recovery_periods']
        },
        'data_quality': data_quality,
        'metadata': {
            'calculated_at': datetime.now().isoformat(),
            'calculation_version': __version__,
            'annual_risk_free_rate': annual_risk_free_rate
        }
    }


def analyze_fund(
    portfolio_path: Path,
    output_path: Path,
    benchmark_path: Optional[Path] = None,
    fund: Optional[str] = None,
    annual_risk_free_rate: Optional[float] = None,
    config: Optional[MetricsConfig] = None,
    as_of_date: Optional[date] = None,
    date_column: str = 'date',
    value_column: str = 'value'
) -> Dict[str, Any]:
    """
    Run complete analysis for a fund and save results to JSON.

    Args:
        portfolio_path: CSV/JSON file with portfolio levels
        output_path: Path to save the metrics JSON file
        benchmark_path: CSV/JSON file with benchmark levels (optional)
        fund: Fund identifier (defaults to the portfolio file stem)
        annual_risk_free_rate: Annual rate as decimal; None for config default
        config: Engine configuration
        as_of_date: Date for analysis (defaults to today)
        date_column: Date column name in the level files
        value_column: Value column name in the level files

    Returns:
        Dictionary with job results and summary; failures are reported with
        status 'failed' and an error_message rather than raised
    """
    portfolio_path = Path(portfolio_path)
    output_path = Path(output_path)
    if fund is None:
        fund = portfolio_path.stem

    start_time = datetime.now()

    try:
        portfolio_rows = read_level_rows(portfolio_path, date_column, value_column)
        benchmark_rows = None
        if benchmark_path is not None:
            benchmark_rows = read_level_rows(benchmark_path, date_column, value_column)

        document = compose_fund_document(
            fund,
            portfolio_rows,
            benchmark_rows,
            annual_risk_free_rate=annual_risk_free_rate,
            config=config,
            as_of_date=as_of_date,
        )

        # Create output directory if needed
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            json.dump(document, f, indent=2, default=str)

        metrics_count = _count_calculated_metrics(document['metrics'])
        logger.info("%s: %d metrics written to %s", fund, metrics_count, output_path)

        return {
            'fund': fund,
            'status': 'completed',
            'output_path': str(output_path),
            'metrics_calculated': metrics_count,
            'observations': document['data_period']['observations'],
            'warnings': document['data_quality']['warnings'],
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except Exception as e:
        logger.error("%s: analysis failed: %s", fund, e)
        return {
            'fund': fund,
            'status': 'failed',
            'error_message': str(e),
            'output_path': None,
            'metrics_calculated': 0,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }


def _count_calculated_metrics(metrics: Dict[str, Any]) -> int:
    """
    Count how many metrics were successfully calculated (not None).

    Args:
        metrics: MetricsResult.to_dict() output

    Returns:
        Number of non-null metric fields
    """
    return sum(
        1
        for group in metrics.values()
        for value in group.values()
        if value is not None
    )


def batch_analyze_funds(
    portfolio_paths: Dict[str, Path],
    output_dir: Path,
    benchmark_path: Optional[Path] = None,
    annual_risk_free_rate: Optional[float] = None,
    config: Optional[MetricsConfig] = None,
    as_of_date: Optional[date] = None,
    workers: int = 4
) -> Dict[str, Any]:
    """
    Run analysis for multiple funds against a shared benchmark.

    Each fund is computed independently, so they run on a thread pool.

    Args:
        portfolio_paths: Mapping of fund identifier to level file
        output_dir: Directory to save JSON files
        benchmark_path: Shared benchmark level file (optional)
        annual_risk_free_rate: Annual rate as decimal; None for config default
        config: Engine configuration (loaded once and shared)
        as_of_date: Analysis date
        workers: Number of worker threads

    Returns:
        Summary of batch analysis results
    """
    if config is None:
        config = load_metrics_config()
    if as_of_date is None:
        as_of_date = date.today()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    start_time = datetime.now()

    def process_fund(fund: str) -> Dict[str, Any]:
        return analyze_fund(
            portfolio_path=portfolio_paths[fund],
            output_path=output_dir / f'{fund}.json',
            benchmark_path=benchmark_path,
            fund=fund,
            annual_risk_free_rate=annual_risk_free_rate,
            config=config,
            as_of_date=as_of_date,
        )

    funds = list(portfolio_paths)
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        # map preserves input order
        results = list(executor.map(process_fund, funds))

    # Calculate summary statistics
    completed = [r for r in results if r['status'] == 'completed']
    failed = [r for r in results if r['status'] == 'failed']

    for r in failed:
        logger.warning("%s failed: %s", r['fund'], r['error_message'])

    return {
        'total_funds': len(funds),
        'completed': len(completed),
        'failed': len(failed),
        'success_rate': len(completed) / len(funds) if funds else 0,
        'total_metrics_calculated': sum(r.get('metrics_calculated', 0) for r in completed),
        'duration_seconds': (datetime.now() - start_time).total_seconds(),
        'results': results
    }
