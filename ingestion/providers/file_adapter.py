"""
File adapter - read level series from local CSV or JSON exports.
File IO allowed here, but minimal business logic.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ingestion.transforms.normalizers import rows_to_levels

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {'.csv', '.json'}


class FileAdapterError(Exception):
    """Raised when a level file cannot be read."""
    pass


def read_level_rows(
    path: Union[str, Path],
    date_column: str = 'date',
    value_column: str = 'value'
) -> List[Dict[str, Any]]:
    """
    Read a level file into {date, value} rows.

    CSV files need a header row with the date and value columns. JSON files
    hold either a list of row objects or an object with a ``levels`` list.

    Args:
        path: Path to a .csv or .json file
        date_column: Name of the date column/field
        value_column: Name of the value column/field

    Returns:
        List of {'date', 'value'} rows in file order, unvalidated

    Raises:
        FileAdapterError: If the file is missing, unsupported, or lacks the
            requested columns
    """
    file_path = Path(path)
    _validate_path(file_path)

    if file_path.suffix.lower() == '.csv':
        raw_rows = _read_csv(file_path, date_column, value_column)
    else:
        raw_rows = _read_json(file_path)

    rows = rows_to_levels(raw_rows, date_field=date_column, value_field=value_column)
    logger.debug("Read %d level rows from %s", len(rows), file_path)
    return rows


def _validate_path(file_path: Path) -> None:
    if not file_path.exists():
        raise FileAdapterError(f"Level file not found: {file_path}")

    if file_path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise FileAdapterError(
            f"Unsupported level file type '{file_path.suffix}' "
            f"(expected one of {sorted(SUPPORTED_SUFFIXES)})"
        )


def _read_csv(file_path: Path, date_column: str, value_column: str) -> List[Dict[str, Any]]:
    try:
        # Dates stay as strings; parsing belongs to the series normalizer
        df = pd.read_csv(file_path, dtype={date_column: str})
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise FileAdapterError(f"Failed to read CSV {file_path}: {e}") from e

    missing = {date_column, value_column} - set(df.columns)
    if missing:
        raise FileAdapterError(f"Missing required columns in {file_path}: {sorted(missing)}")

    # NaN cells become None so they read as missing values
    subset = df[[date_column, value_column]]
    subset = subset.astype(object).where(subset.notna(), None)
    return subset.to_dict('records')


def _read_json(file_path: Path) -> List[Dict[str, Any]]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FileAdapterError(f"Failed to read JSON {file_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get('levels')

    if not isinstance(data, list):
        raise FileAdapterError(f"JSON level file must hold a list of rows: {file_path}")

    return [row for row in data if isinstance(row, dict)]
