"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_PERIODS = ("week", "month", "year")


def _period_start(period: str, today: date) -> date:
    if period == "week":
        return today - timedelta(days=today.weekday())
    if period == "month":
        return today.replace(day=1)
    return today.replace(month=1, day=1)


def _shift(start: date, period: str, steps: int) -> date:
    if period == "week":
        return start + timedelta(weeks=steps)
    if period == "month":
        return start + relativedelta(months=steps)
    return start + relativedelta(years=steps)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts absolute dates ("2024-01-15", "15 Jan 2024") and relative ones:
    "today", "yesterday", "tomorrow", and "last/this/next week|month|year",
    which resolve to the first day of that period.

    Args:
        date_str: Date string
        today: Reference date for relative expressions (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in fixed:
        return fixed[text]

    parts = text.split()
    if len(parts) == 2 and parts[1] in _PERIODS:
        steps = {"last": -1, "this": 0, "next": 1}.get(parts[0])
        if steps is not None:
            return _shift(_period_start(parts[1], today), parts[1], steps)

    try:
        return date_parser.parse(text, dayfirst=False).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get inclusive start and end dates for a named period.

    Args:
        period: One of this-week, this-month, this-year, last-week,
            last-month, last-year

    Returns:
        Tuple of (start_date, end_date). "this-*" periods end today.

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    text = period.strip().lower()
    which, _, unit = text.partition("-")
    if unit not in _PERIODS or which not in ("this", "last"):
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: "
            "this-week, this-month, this-year, last-week, last-month, last-year"
        )

    start = _period_start(unit, today)
    if which == "this":
        return start, today
    previous = _shift(start, unit, -1)
    return previous, start - timedelta(days=1)
