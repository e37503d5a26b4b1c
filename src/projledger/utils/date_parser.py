"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2025-01-15", "January 15, 2025", ...) and
    relative ones:
    - "today", "yesterday", "tomorrow"
    - "end of month", "end of last month", "end of year", "end of last year"

    Args:
        date_str: Date string
        today: Reference date for relative dates (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "end of month": month_end(today),
        "end of last month": today.replace(day=1) - timedelta(days=1),
        "end of year": today.replace(month=12, day=31),
        "end of last year": today.replace(month=1, day=1) - timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        # Day-first only when the string does not start with a year
        dayfirst = not date_str[:4].isdigit()
        return date_parser.parse(date_str, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_end(day: date) -> date:
    """Return the last day of the month containing a date."""
    return day.replace(day=1) + relativedelta(months=1) - timedelta(days=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates of a closed accounting period.

    Args:
        period: One of this-month, last-month, this-year, last-year
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (start_date, end_date). Current periods end on their last
        calendar day, not on today.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    if today is None:
        today = date.today()

    if period == "this-month":
        return today.replace(day=1), month_end(today)

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        return start_date, month_end(start_date)

    elif period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)

    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return start_date, start_date.replace(month=12, day=31)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: "
            "this-month, last-month, this-year, last-year"
        )
