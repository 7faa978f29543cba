"""
Level series utilities.
Pure functions for cleaning, ordering and date-aligning dated level series.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

ISO_DATE_PREFIX = re.compile(r'^\d{4}-\d{2}-\d{2}')
ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}([T ].*)?$')

# Every field differs between the two
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


class AlignmentError(Exception):
    """Raised when series share no common dates."""
    pass


@dataclass(frozen=True)
class LevelPoint:
    """Price or index level on a given day."""

    date: date
    value: float


@dataclass(frozen=True)
class ReturnPoint:
    """Simple return for the period ending on ``date``."""

    date: date
    ret: float


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date from the shapes callers hand us.

    Accepts date/datetime objects, pandas Timestamps, ISO strings and
    anything dateutil understands. Returns None when the value is missing
    or unparsable.
    """
    if value is None:
        return None

    # pd.Timestamp subclasses datetime, so this covers both
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None

        if ISO_DATE_PREFIX.match(text):
            # ISO date, optionally followed by a time part
            if not ISO_DATE.match(text):
                return None
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None

        return _parse_full_date(text)

    return None


def _parse_full_date(text: str) -> Optional[date]:
    """
    Parse free-form text with dateutil, rejecting partial dates.

    dateutil fills missing fields from its default, so '7' or 'May' would
    become a date. Parsing against two different defaults exposes that.
    """
    try:
        first = date_parser.parse(text, default=_PARSE_DEFAULTS[0]).date()
        second = date_parser.parse(text, default=_PARSE_DEFAULTS[1]).date()
    except (ValueError, OverflowError):
        return None

    if first != second:
        return None
    return first


def _parse_value(value: Any) -> Optional[float]:
    """Return value as a finite float, or None."""
    # bool is an int subclass; a True/False level is a data error
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        return None
    try:
        f = float(value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(f):
        return None
    return f


def _iter_raw_points(points: Any) -> Iterable[Any]:
    if isinstance(points, pd.DataFrame):
        return points.to_dict('records')
    return points


def _unpack(raw: Any):
    if isinstance(raw, LevelPoint):
        return raw.date, raw.value
    if isinstance(raw, dict):
        return raw.get('date'), raw.get('value')
    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        return raw[0], raw[1]
    return None, None


def normalize_series(points: Any) -> List[LevelPoint]:
    """
    Validate and sort a raw level series.

    Drops entries whose value is not a finite number or whose date is
    missing/unparsable, then sorts ascending by date. The sort is stable,
    so duplicate dates keep their insertion order.

    Args:
        points: Iterable of {date, value} mappings, LevelPoints,
            (date, value) pairs, or a DataFrame with date/value columns

    Returns:
        New list of LevelPoint in ascending date order (possibly empty)
    """
    if points is None:
        return []

    cleaned = []
    dropped = 0

    for raw in _iter_raw_points(points):
        raw_date, raw_value = _unpack(raw)
        point_date = parse_date(raw_date)
        point_value = _parse_value(raw_value)

        if point_date is None or point_value is None:
            dropped += 1
            continue

        cleaned.append(LevelPoint(date=point_date, value=point_value))

    if dropped:
        logger.debug("Dropped %d malformed level points", dropped)

    return sorted(cleaned, key=lambda p: p.date)


def align_by_date(*series: Sequence[Any]) -> List[List[Any]]:
    """
    Align series by common dates (inner join).

    Args:
        *series: Sequences of points exposing a ``date`` attribute

    Returns:
        One list per input, all restricted to the shared dates in
        ascending order

    Raises:
        AlignmentError: If the inputs have no date in common
    """
    if not series:
        return []

    # Keyed by date, so a duplicated date resolves to its last occurrence
    by_date = [{p.date: p for p in points} for points in series]

    common = set(by_date[0])
    for mapping in by_date[1:]:
        common &= set(mapping)

    if not common:
        raise AlignmentError(
            "Alignment removed all observations. Check that series share dates."
        )

    dates = sorted(common)
    aligned = [[mapping[d] for d in dates] for mapping in by_date]

    largest = max(len(points) for points in series)
    if len(dates) < largest:
        logger.debug("Alignment kept %d of up to %d observations", len(dates), largest)

    return aligned


def series_dates(points: Sequence[Any]) -> List[date]:
    """Date axis of a series."""
    return [p.date for p in points]


def series_values(points: Sequence[LevelPoint]) -> List[float]:
    return [p.value for p in points]
