"""
Display formatters for fund metrics documents.
Deterministic string formatting for percents, ratios, periods and dates.
"""

import math
from datetime import datetime, date
from typing import Optional, Union

NOT_AVAILABLE = "n/a"


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _check_numeric(value, kind: str) -> None:
    # bool is an int subclass but never a metric
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"{kind} value must be numeric, got {type(value)}")


def format_percentage(value: Optional[float], decimal_places: int = 2) -> str:
    """
    Format a value that is already expressed in percent.

    Args:
        value: Percent value (12.345 = 12.345%)
        decimal_places: Number of decimal places (default: 2)

    Returns:
        Formatted percentage string (e.g., "12.35%"), or "n/a"

    Example:
        >>> format_percentage(-9.5238)
        '-9.52%'
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    _check_numeric(value, "Percentage")

    if math.isinf(value):
        return NOT_AVAILABLE

    return f"{value:.{decimal_places}f}%"


def format_signed_percentage(value: Optional[float], decimal_places: int = 2) -> str:
    """Like format_percentage but always shows the sign ("+3.10%")."""
    if _is_missing(value):
        return NOT_AVAILABLE

    _check_numeric(value, "Percentage")

    if math.isinf(value):
        return NOT_AVAILABLE

    return f"{value:+.{decimal_places}f}%"


def format_ratio(value: Optional[float], decimal_places: int = 2) -> str:
    """
    Format an unscaled ratio such as Sharpe or beta.

    Args:
        value: Ratio value
        decimal_places: Number of decimal places (default: 2)

    Returns:
        Formatted ratio string (e.g., "1.23"), or "n/a"
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    _check_numeric(value, "Ratio")

    if math.isinf(value):
        return NOT_AVAILABLE

    return f"{value:.{decimal_places}f}"


def format_periods(value: Optional[int]) -> str:
    """
    Format a sampling frequency for display.

    Args:
        value: Periods per year

    Returns:
        Frequency label (e.g., "daily (252/yr)"), or "n/a"
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    _check_numeric(value, "Periods")

    if value <= 0:
        raise FormatterError(f"Periods per year must be positive, got {value}")

    labels = {
        252: 'daily',
        52: 'weekly',
        12: 'monthly',
        4: 'quarterly',
        1: 'annual'
    }

    periods = int(value)
    label = labels.get(periods)
    if label is None:
        return f"{periods}/yr"
    return f"{label} ({periods}/yr)"


def format_date_display(date_input: Union[str, date, datetime, None]) -> str:
    """
    Format date as "Month D, YYYY".

    Args:
        date_input: Date as string, date object, or datetime object

    Returns:
        Formatted date string (e.g., "July 15, 2025")
    """
    if date_input is None:
        return NOT_AVAILABLE

    # Convert to date object
    if isinstance(date_input, str):
        try:
            if 'T' in date_input:
                # ISO datetime string
                date_obj = datetime.fromisoformat(date_input.replace('Z', '+00:00')).date()
            else:
                date_obj = date.fromisoformat(date_input)
        except ValueError:
            raise FormatterError(f"Invalid date string: {date_input}")
    elif isinstance(date_input, datetime):
        date_obj = date_input.date()
    elif isinstance(date_input, date):
        date_obj = date_input
    else:
        raise FormatterError(f"Date must be string, date, or datetime, got {type(date_input)}")

    return date_obj.strftime("%B %d, %Y")


def format_recovery_status(
    recovery_date: Optional[str],
    as_of_date: str
) -> str:
    """
    Format recovery status message.

    Args:
        recovery_date: Recovery date string or None
        as_of_date: Analysis as-of date

    Returns:
        Recovery status message
    """
    if recovery_date is None:
        return f"unrecovered as of {format_date_display(as_of_date)}"
    return f"fully recovered by {format_date_display(recovery_date)}"
