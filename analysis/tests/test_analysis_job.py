"""
Tests for orchestrated analysis job - level files to metrics JSON pipeline.
Uses the weekly fixtures and temp directories for output.
"""

import pytest
import json
import shutil
from datetime import date
from pathlib import Path

from analysis.analysis_job import (
    analyze_fund,
    batch_analyze_funds,
    compose_fund_document,
    AnalysisJobError
)
from analysis.calculations.series import AlignmentError
from analysis.config import MetricsConfig
from analysis.guardrails import DataQualityError

FIXTURES = Path(__file__).parent.parent.parent / 'tests' / 'fixtures'
CONFIG = MetricsConfig()


def rows(values, start_day=1):
    return [{'date': f'2024-01-{start_day + i:02d}', 'value': v} for i, v in enumerate(values)]


class TestComposeFundDocument:
    """Tests for compose_fund_document function."""

    def test_document_shape(self):
        document = compose_fund_document(
            'growth', rows([100, 105, 95, 97, 110]), rows([50, 51, 50, 52, 53]),
            config=CONFIG, as_of_date=date(2024, 1, 31)
        )

        assert set(document) == {
            'fund', 'as_of_date', 'data_period', 'metrics', 'drawdown', 'data_quality', 'metadata'
        }
        assert document['as_of_date'] == '2024-01-31'
        assert document['data_period'] == {
            'start_date': '2024-01-01',
            'end_date': '2024-01-05',
            'observations': 5,
            'portfolio_observations': 5,
            'benchmark_observations': 5
        }
        assert document['metadata']['annual_risk_free_rate'] == 0.02

    def test_drawdown_detail(self):
        document = compose_fund_document(
            'growth', rows([100, 105, 95, 97, 110]), config=CONFIG
        )

        drawdown = document['drawdown']
        assert drawdown['peak_date'] == '2024-01-02'
        assert drawdown['trough_date'] == '2024-01-03'
        assert drawdown['recovery_date'] == '2024-01-05'
        assert drawdown['max_drawdown_pct'] == pytest.approx(
            document['metrics']['risk']['max_drawdown_pct']
        )

    def test_no_benchmark(self):
        document = compose_fund_document('solo', rows([100, 101, 102]), config=CONFIG)

        assert 'relative_to_benchmark' not in document['metrics']
        assert document['data_period']['benchmark_observations'] is None

    def test_empty_portfolio_raises(self):
        with pytest.raises(AnalysisJobError, match="No usable portfolio levels"):
            compose_fund_document('empty', [{'date': '2024-01-01', 'value': None}], config=CONFIG)

    def test_single_point_fails_guardrails(self):
        with pytest.raises(DataQualityError):
            compose_fund_document('tiny', rows([100]), config=CONFIG)

    def test_disjoint_benchmark_raises(self):
        with pytest.raises(AlignmentError):
            compose_fund_document('x', rows([100, 101]), rows([1, 2], start_day=10), config=CONFIG)

    def test_poor_overlap_warns(self):
        portfolio = rows([100 + i for i in range(10)])
        benchmark = rows([50, 51, 52, 53])

        document = compose_fund_document('x', portfolio, benchmark, config=CONFIG)

        assert any('Benchmark alignment kept 4 of 10' in w for w in document['data_quality']['warnings'])


class TestAnalyzeFund:
    """Tests for analyze_fund function."""

    def test_writes_json(self, tmp_path):
        output_path = tmp_path / 'out' / 'growth.json'

        result = analyze_fund(
            FIXTURES / 'fund_levels_weekly.csv',
            output_path,
            benchmark_path=FIXTURES / 'benchmark_levels_weekly.csv',
            fund='growth',
            config=CONFIG,
            as_of_date=date(2024, 6, 28),
        )

        assert result['status'] == 'completed'
        assert result['fund'] == 'growth'
        assert result['observations'] == 26
        assert result['metrics_calculated'] > 15
        assert output_path.exists()

        with open(output_path, 'r') as f:
            document = json.load(f)

        assert document['metrics']['performance']['periods_per_year'] == 52
        assert document['data_period']['start_date'] == '2024-01-05'
        assert document['data_period']['end_date'] == '2024-06-28'

    def test_fund_defaults_to_file_stem(self, tmp_path):
        result = analyze_fund(FIXTURES / 'fund_levels_weekly.csv', tmp_path / 'x.json', config=CONFIG)

        assert result['fund'] == 'fund_levels_weekly'

    def test_failure_reported_not_raised(self, tmp_path):
        output_path = tmp_path / 'x.json'

        result = analyze_fund(
            FIXTURES / 'fund_levels_missing_column.csv', output_path, config=CONFIG
        )

        assert result['status'] == 'failed'
        assert 'Missing required columns' in result['error_message']
        assert result['metrics_calculated'] == 0
        assert not output_path.exists()


class TestBatchAnalyzeFunds:
    """Tests for batch_analyze_funds function."""

    def test_mixed_batch(self, tmp_path):
        shutil.copy2(FIXTURES / 'fund_levels_weekly.csv', tmp_path / 'a.csv')
        shutil.copy2(FIXTURES / 'benchmark_levels_weekly.csv', tmp_path / 'b.csv')

        summary = batch_analyze_funds(
            {
                'alpha': tmp_path / 'a.csv',
                'broken': tmp_path / 'missing.csv',
                'beta': tmp_path / 'b.csv',
            },
            tmp_path / 'metrics',
            benchmark_path=FIXTURES / 'benchmark_levels_weekly.csv',
            config=CONFIG,
            workers=2,
        )

        assert summary['total_funds'] == 3
        assert summary['completed'] == 2
        assert summary['failed'] == 1
        assert summary['success_rate'] == pytest.approx(2 / 3)
        # Results keep input order
        assert [r['fund'] for r in summary['results']] == ['alpha', 'broken', 'beta']
        assert (tmp_path / 'metrics' / 'alpha.json').exists()
        assert (tmp_path / 'metrics' / 'beta.json').exists()

    def test_empty_batch(self, tmp_path):
        summary = batch_analyze_funds({}, tmp_path, config=CONFIG)

        assert summary['total_funds'] == 0
        assert summary['success_rate'] == 0
