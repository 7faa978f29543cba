"""
Metrics aggregator - composes all financial calculations into one MetricsResult.
Pure function over portfolio levels, optional benchmark levels and a
risk-free rate. Individual metrics degrade to None; only an empty date
overlap between portfolio and benchmark raises.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Import all calculation modules
from analysis.calculations.benchmark import benchmark_relative_metrics
from analysis.calculations.drawdown import max_drawdown_pct
from analysis.calculations.periodicity import estimate_periods_per_year
from analysis.calculations.returns import (
    annualized_return_pct,
    compute_returns_from_levels,
    cumulative_return_pct,
    return_values,
)
from analysis.calculations.risk_adjusted import (
    DEFAULT_ANNUAL_RISK_FREE_RATE,
    period_risk_free_rate,
    sharpe_ratio,
    sortino_ratio,
)
from analysis.calculations.series import (
    AlignmentError,
    LevelPoint,
    ReturnPoint,
    align_by_date,
    normalize_series,
    series_dates,
    series_values,
)
from analysis.calculations.trading_profile import (
    best_return_pct,
    hit_rate_pct,
    worst_return_pct,
)
from analysis.calculations.volatility import (
    annualized_volatility_pct,
    downside_deviation_pct,
)
from analysis.config import MetricsConfig
from ingestion.transforms.normalizers import closes_to_levels, perf_series_to_levels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceMetrics:
    annualized_return_pct: Optional[float]
    excess_annualized_return_pct: Optional[float]
    periods_per_year: int
    days_in_sample: int
    cumulative_return_pct: Optional[float]
    benchmark_annualized_return_pct: Optional[float]


@dataclass(frozen=True)
class RiskMetrics:
    annualized_volatility_pct: Optional[float]
    max_drawdown_pct: Optional[float]
    downside_deviation_pct: Optional[float]


@dataclass(frozen=True)
class RiskAdjustedMetrics:
    sharpe_ratio: Optional[float]
    sortino_ratio: Optional[float]


@dataclass(frozen=True)
class BenchmarkRelativeMetrics:
    beta: Optional[float]
    alpha_annualized_pct: Optional[float]
    tracking_error_pct: Optional[float]
    information_ratio: Optional[float]


@dataclass(frozen=True)
class TradingProfileMetrics:
    hit_rate_pct: Optional[float]
    best_day_return_pct: Optional[float]
    worst_day_return_pct: Optional[float]


@dataclass(frozen=True)
class MetricsResult:
    """
    Complete set of metrics for one portfolio.

    All *_pct fields are percents (12.3 = 12.3%), ratios are unscaled, and
    any numeric field may be None when it cannot be computed.
    ``relative_to_benchmark`` is None when no benchmark was supplied.
    """

    performance: PerformanceMetrics
    risk: RiskMetrics
    risk_adjusted: RiskAdjustedMetrics
    relative_to_benchmark: Optional[BenchmarkRelativeMetrics]
    trading_profile: TradingProfileMetrics

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready nested dict; the benchmark group is omitted when absent."""
        result = {
            'performance': asdict(self.performance),
            'risk': asdict(self.risk),
            'risk_adjusted': asdict(self.risk_adjusted),
        }
        if self.relative_to_benchmark is not None:
            result['relative_to_benchmark'] = asdict(self.relative_to_benchmark)
        result['trading_profile'] = asdict(self.trading_profile)
        return result


def _safe_float(value: Optional[float]) -> Optional[float]:
    """Convert to a plain float, returning None for None / nan / inf."""
    if value is None:
        return None
    f = float(value)
    if not math.isfinite(f):
        return None
    return f


def _period_rate_or_none(annual_rate: float, periods_per_year: int) -> Optional[float]:
    """Per-period risk-free rate, or None when the annual rate is unusable."""
    try:
        return period_risk_free_rate(annual_rate, periods_per_year)
    except ValueError as e:
        logger.warning("Skipping risk-free dependent metrics: %s", e)
        return None


def _paired_returns(
    portfolio: List[ReturnPoint],
    benchmark: List[ReturnPoint]
) -> Tuple[List[float], List[float]]:
    """
    Re-pair returns by date.

    Zero-level skips can drop different periods from each side, so the
    aligned level series do not guarantee aligned return series.
    """
    if not portfolio or not benchmark:
        return [], []
    try:
        p, b = align_by_date(portfolio, benchmark)
    except AlignmentError:
        # Levels overlapped but no return period survived on both sides
        return [], []
    return return_values(p), return_values(b)


def compute_metrics(
    portfolio_levels: Any,
    benchmark_levels: Any = None,
    annual_risk_free_rate: Optional[float] = DEFAULT_ANNUAL_RISK_FREE_RATE,
    config: Optional[MetricsConfig] = None
) -> MetricsResult:
    """
    Compute performance, risk, risk-adjusted, benchmark-relative and
    trading profile metrics from level series.

    Pure computation: nothing is read from disk or the environment here.
    Callers that want file/env settings pass a loaded config.

    Args:
        portfolio_levels: Raw portfolio levels ([{date, value}, ...] or any
            shape normalize_series accepts)
        benchmark_levels: Raw benchmark levels, or None for no benchmark
        annual_risk_free_rate: Annual rate as a decimal (0.02 = 2%); None
            takes the rate from ``config``. A non-finite rate or one at or
            below -1 leaves the rate-dependent fields None.
        config: Engine configuration; built-in defaults when omitted

    Returns:
        MetricsResult with every field populated or None

    Raises:
        AlignmentError: If portfolio and benchmark share no dates
    """
    if config is None:
        config = MetricsConfig()
    if annual_risk_free_rate is None:
        annual_risk_free_rate = config.annual_risk_free_rate

    portfolio = normalize_series(portfolio_levels)
    benchmark: Optional[List[LevelPoint]] = None

    if benchmark_levels is not None:
        benchmark = normalize_series(benchmark_levels)
        portfolio, benchmark = align_by_date(portfolio, benchmark)

    periods_per_year = estimate_periods_per_year(
        series_dates(portfolio),
        fallback=config.fallback_periods_per_year,
        thresholds=config.periodicity_thresholds,
        min_gaps=config.min_periodicity_gaps,
    )

    portfolio_returns = compute_returns_from_levels(portfolio)
    returns = return_values(portfolio_returns)

    logger.info(
        "Computing metrics over %d levels (%d returns, %d periods/year, benchmark=%s)",
        len(portfolio), len(returns), periods_per_year, benchmark is not None
    )

    rf_period = _period_rate_or_none(annual_risk_free_rate, periods_per_year)

    ann_return = _safe_float(annualized_return_pct(returns, periods_per_year))

    bench_ann_return = None
    excess_ann_return = None
    relative = None

    if benchmark is not None:
        benchmark_returns = compute_returns_from_levels(benchmark)
        bench_ann_return = _safe_float(
            annualized_return_pct(return_values(benchmark_returns), periods_per_year)
        )
        if ann_return is not None and bench_ann_return is not None:
            excess_ann_return = ann_return - bench_ann_return

        p_returns, b_returns = _paired_returns(portfolio_returns, benchmark_returns)
        relative_values = benchmark_relative_metrics(p_returns, b_returns, periods_per_year)
        relative = BenchmarkRelativeMetrics(
            **{key: _safe_float(value) for key, value in relative_values.items()}
        )

    performance = PerformanceMetrics(
        annualized_return_pct=ann_return,
        excess_annualized_return_pct=_safe_float(excess_ann_return),
        periods_per_year=periods_per_year,
        days_in_sample=len(returns),
        cumulative_return_pct=_safe_float(cumulative_return_pct(returns)),
        benchmark_annualized_return_pct=bench_ann_return,
    )

    downside = None
    sharpe = None
    sortino = None
    if rf_period is not None:
        downside = downside_deviation_pct(returns, periods_per_year, rf_period)
        sharpe = sharpe_ratio(returns, periods_per_year, annual_risk_free_rate)
        sortino = sortino_ratio(returns, periods_per_year, annual_risk_free_rate)

    risk = RiskMetrics(
        annualized_volatility_pct=_safe_float(annualized_volatility_pct(returns, periods_per_year)),
        max_drawdown_pct=_safe_float(max_drawdown_pct(series_values(portfolio))),
        downside_deviation_pct=_safe_float(downside),
    )

    risk_adjusted = RiskAdjustedMetrics(
        sharpe_ratio=_safe_float(sharpe),
        sortino_ratio=_safe_float(sortino),
    )

    trading_profile = TradingProfileMetrics(
        hit_rate_pct=_safe_float(hit_rate_pct(returns)),
        best_day_return_pct=_safe_float(best_return_pct(returns)),
        worst_day_return_pct=_safe_float(worst_return_pct(returns)),
    )

    return MetricsResult(
        performance=performance,
        risk=risk,
        risk_adjusted=risk_adjusted,
        relative_to_benchmark=relative,
        trading_profile=trading_profile,
    )


def compute_metrics_from_perf_series(
    series: Sequence[Dict[str, Any]],
    annual_risk_free_rate: Optional[float] = DEFAULT_ANNUAL_RISK_FREE_RATE,
    config: Optional[MetricsConfig] = None
) -> MetricsResult:
    """
    Compute metrics from a cumulative performance chart series.

    Rows carry ``date``, ``fundPct`` and ``benchPct`` (cumulative percent
    points) and optionally ``fundValue``/``benchValue`` money levels, which
    are preferred when every row has both.

    Args:
        series: Performance rows
        annual_risk_free_rate: Annual rate as a decimal; None takes it from config
        config: Engine configuration

    Returns:
        MetricsResult with the benchmark group always present
    """
    portfolio_levels, benchmark_levels = perf_series_to_levels(series)
    return compute_metrics(
        portfolio_levels,
        benchmark_levels,
        annual_risk_free_rate=annual_risk_free_rate,
        config=config,
    )


def compute_risk_from_closes(
    closes: Sequence[Dict[str, Any]],
    annual_risk_free_rate: Optional[float] = DEFAULT_ANNUAL_RISK_FREE_RATE,
    config: Optional[MetricsConfig] = None
) -> Dict[str, Any]:
    """
    Flat risk summary for a single instrument's closing prices.

    Args:
        closes: Rows with ``date`` and ``close``
        annual_risk_free_rate: Annual rate as a decimal; None takes it from config
        config: Engine configuration

    Returns:
        Dictionary of risk fields (None where undefined)
    """
    result = compute_metrics(
        closes_to_levels(closes),
        annual_risk_free_rate=annual_risk_free_rate,
        config=config,
    )

    return {
        'annualized_volatility_pct': result.risk.annualized_volatility_pct,
        'max_drawdown_pct': result.risk.max_drawdown_pct,
        'sharpe_ratio': result.risk_adjusted.sharpe_ratio,
        'sortino_ratio': result.risk_adjusted.sortino_ratio,
        'hit_rate_pct': result.trading_profile.hit_rate_pct,
        'best_day_return_pct': result.trading_profile.best_day_return_pct,
        'worst_day_return_pct': result.trading_profile.worst_day_return_pct,
        'periods_per_year': result.performance.periods_per_year,
        'sample_periods': result.performance.days_in_sample,
    }
