"""
Metrics engine configuration.
Defaults live here; an optional YAML file and environment variables
override them (env wins over YAML).
"""

import logging
import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from analysis.calculations.periodicity import (
    DEFAULT_PERIODICITY_THRESHOLDS,
    MIN_USABLE_GAPS,
    TRADING_DAYS,
)
from analysis.calculations.risk_adjusted import DEFAULT_ANNUAL_RISK_FREE_RATE

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = './config/metrics.yml'


class MetricsConfigError(Exception):
    """Raised when metrics configuration is missing or invalid."""
    pass


@dataclass(frozen=True)
class MetricsConfig:
    """
    Tunable constants of the metrics engine.

    Attributes:
        annual_risk_free_rate: Default annual risk-free rate (0.02 = 2%)
        fallback_periods_per_year: Used when the date axis is too short
        min_periodicity_gaps: Usable date gaps needed to estimate frequency
        periodicity_thresholds: Ascending (max_gap_days, periods_per_year)
        min_periods_warning: Guardrail warns below this many return periods
        min_overlap_ratio_warning: Guardrail warns when alignment keeps less
            than this share of the portfolio's observations
    """

    annual_risk_free_rate: float = DEFAULT_ANNUAL_RISK_FREE_RATE
    fallback_periods_per_year: int = TRADING_DAYS
    min_periodicity_gaps: int = MIN_USABLE_GAPS
    periodicity_thresholds: Tuple[Tuple[float, int], ...] = DEFAULT_PERIODICITY_THRESHOLDS
    min_periods_warning: int = 20
    min_overlap_ratio_warning: float = 0.5


def _parse_thresholds(raw: Any) -> Tuple[Tuple[float, int], ...]:
    """
    Accept either [[2.5, 252], ...] or [{max_gap_days: 2.5, periods_per_year: 252}, ...].
    """
    if not isinstance(raw, list) or not raw:
        raise MetricsConfigError("periodicity_thresholds must be a non-empty list")

    parsed = []
    for entry in raw:
        if isinstance(entry, dict):
            max_gap = entry.get('max_gap_days')
            periods = entry.get('periods_per_year')
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            max_gap, periods = entry
        else:
            raise MetricsConfigError(f"Invalid periodicity threshold entry: {entry!r}")

        try:
            parsed.append((float(max_gap), int(periods)))
        except (TypeError, ValueError):
            raise MetricsConfigError(f"Invalid periodicity threshold entry: {entry!r}")

    return tuple(parsed)


def validate_config(config: MetricsConfig) -> MetricsConfig:
    """
    Check a config for values the engine cannot work with.

    Raises:
        MetricsConfigError: If any value is out of range
    """
    rate = config.annual_risk_free_rate
    if not math.isfinite(rate) or rate <= -1.0:
        raise MetricsConfigError(f"annual_risk_free_rate must be a decimal above -1, got {rate}")

    if config.fallback_periods_per_year <= 0:
        raise MetricsConfigError("fallback_periods_per_year must be positive")

    if config.min_periodicity_gaps < 1:
        raise MetricsConfigError("min_periodicity_gaps must be at least 1")

    gaps = [gap for gap, _ in config.periodicity_thresholds]
    if any(b <= a for a, b in zip(gaps, gaps[1:])):
        raise MetricsConfigError("periodicity_thresholds must be strictly ascending by gap")

    if any(periods <= 0 for _, periods in config.periodicity_thresholds):
        raise MetricsConfigError("periodicity_thresholds periods_per_year must be positive")

    if not 0.0 <= config.min_overlap_ratio_warning <= 1.0:
        raise MetricsConfigError("min_overlap_ratio_warning must be between 0 and 1")

    return config


def _from_mapping(base: MetricsConfig, data: Dict[str, Any]) -> MetricsConfig:
    overrides = {}
    try:
        if 'annual_risk_free_rate' in data:
            overrides['annual_risk_free_rate'] = float(data['annual_risk_free_rate'])
        if 'fallback_periods_per_year' in data:
            overrides['fallback_periods_per_year'] = int(data['fallback_periods_per_year'])
        if 'min_periodicity_gaps' in data:
            overrides['min_periodicity_gaps'] = int(data['min_periodicity_gaps'])
        if 'min_periods_warning' in data:
            overrides['min_periods_warning'] = int(data['min_periods_warning'])
        if 'min_overlap_ratio_warning' in data:
            overrides['min_overlap_ratio_warning'] = float(data['min_overlap_ratio_warning'])
    except (TypeError, ValueError) as e:
        raise MetricsConfigError(f"Invalid metrics config value: {e}")

    if 'periodicity_thresholds' in data:
        overrides['periodicity_thresholds'] = _parse_thresholds(data['periodicity_thresholds'])

    unknown = set(data) - set(MetricsConfig.__dataclass_fields__)
    if unknown:
        logger.warning("Ignoring unknown metrics config keys: %s", sorted(unknown))

    return replace(base, **overrides)


def _from_env(base: MetricsConfig) -> MetricsConfig:
    overrides = {}
    rate = os.getenv('METRICS_RISK_FREE_RATE')
    if rate:
        overrides['annual_risk_free_rate'] = rate
    fallback = os.getenv('METRICS_FALLBACK_PERIODS_PER_YEAR')
    if fallback:
        overrides['fallback_periods_per_year'] = fallback
    return _from_mapping(base, overrides) if overrides else base


def load_metrics_config(config_path: Optional[str] = None) -> MetricsConfig:
    """
    Load metrics configuration from YAML file and environment.

    Args:
        config_path: Path to a YAML config file. When omitted,
            METRICS_CONFIG_PATH or ./config/metrics.yml is tried and
            silently skipped if absent.

    Returns:
        Validated MetricsConfig

    Raises:
        MetricsConfigError: If an explicit config file is missing or any
            value is invalid
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = os.getenv('METRICS_CONFIG_PATH', DEFAULT_CONFIG_PATH)

    config = MetricsConfig()
    config_file = Path(config_path)

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise MetricsConfigError(f"Failed to load metrics config: {e}")

        if not isinstance(data, dict):
            raise MetricsConfigError("Metrics config must be a mapping")

        # Allow the settings to sit under a top-level 'metrics' section
        data = data.get('metrics', data)
        if not isinstance(data, dict):
            raise MetricsConfigError("Metrics config 'metrics' section must be a mapping")
        config = _from_mapping(config, data)
    elif explicit:
        raise MetricsConfigError(f"Metrics config file not found: {config_path}")

    return validate_config(_from_env(config))
