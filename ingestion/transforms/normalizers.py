"""
Normalizers for transforming provider rows into level series.
Pure functions - no IO, network, or side effects.
Minimal normalization - only field mapping and unit conversion; cleaning
and ordering happen in analysis.calculations.series.normalize_series.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

# Field names providers commonly use, in order of preference
DATE_FIELDS = ('date', 'Date', 'time', 'timestamp')
VALUE_FIELDS = ('value', 'close', 'Close', 'Adj Close', 'adj_close', 'level', 'nav')

PERF_BASE_LEVEL = 100.0


class NormalizerError(Exception):
    """Raised when rows cannot be mapped to a level series."""
    pass


def _first_present(row: Dict[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        if field in row and row[field] is not None:
            return row[field]
    return None


def rows_to_levels(
    raw_rows: Sequence[Dict[str, Any]],
    *,
    date_field: Optional[str] = None,
    value_field: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Map provider-native rows to {date, value} level rows.

    Args:
        raw_rows: Provider rows (e.g. yfinance-style Date/Close)
        date_field: Explicit date field; otherwise DATE_FIELDS are tried
        value_field: Explicit value field; otherwise VALUE_FIELDS are tried

    Returns:
        List of {'date', 'value'} dicts in original order. Values are passed
        through untouched so that bad points are dropped downstream.
    """
    if not raw_rows:
        return []

    date_fields = (date_field,) if date_field else DATE_FIELDS
    value_fields = (value_field,) if value_field else VALUE_FIELDS

    return [
        {
            'date': _first_present(raw, date_fields),
            'value': _first_present(raw, value_fields),
        }
        for raw in raw_rows
    ]


def closes_to_levels(closes: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Closing-price rows ({date, close}) to level rows."""
    return rows_to_levels(closes, date_field='date', value_field='close')


def _pct_to_level(pct: Any) -> Any:
    # Cumulative percent points (12.3 = +12.3%) on a base of 100
    if isinstance(pct, bool) or not isinstance(pct, (int, float)):
        return None
    return PERF_BASE_LEVEL * (1 + pct / 100)


def perf_series_to_levels(
    series: Sequence[Dict[str, Any]]
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Convert a cumulative performance series to fund and benchmark levels.

    Rows hold ``fundPct``/``benchPct`` as cumulative percent points and
    optionally ``fundValue``/``benchValue`` money levels. Money levels are
    used only when every row has both; otherwise levels are synthesized as
    100 × (1 + pct / 100).

    Args:
        series: Performance rows with a ``date`` field

    Returns:
        Tuple of (fund_levels, benchmark_levels) as {date, value} rows

    Raises:
        NormalizerError: If a row is not a mapping
    """
    rows = list(series or [])
    if any(not isinstance(row, dict) for row in rows):
        raise NormalizerError("Performance series rows must be dictionaries")

    have_money = bool(rows) and all(
        isinstance(row.get('fundValue'), (int, float)) and isinstance(row.get('benchValue'), (int, float))
        for row in rows
    )

    fund_levels = []
    bench_levels = []
    for row in rows:
        if have_money:
            fund_value = row['fundValue']
            bench_value = row['benchValue']
        else:
            fund_value = _pct_to_level(row.get('fundPct'))
            bench_value = _pct_to_level(row.get('benchPct'))

        fund_levels.append({'date': row.get('date'), 'value': fund_value})
        bench_levels.append({'date': row.get('date'), 'value': bench_value})

    return fund_levels, bench_levels
