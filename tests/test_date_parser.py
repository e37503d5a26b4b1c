"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from projledger.utils.date_parser import parse_date, get_date_range, month_end

TODAY = date(2025, 3, 15)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    result = parse_date("yesterday")
    assert result == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    """Test parsing 'tomorrow'."""
    assert parse_date("Tomorrow", today=TODAY) == date(2025, 3, 16)


def test_parse_end_of_month():
    """Test parsing month-end closing dates."""
    assert parse_date("end of month", today=TODAY) == date(2025, 3, 31)
    assert parse_date("end of last month", today=TODAY) == date(2025, 2, 28)


def test_parse_end_of_year():
    """Test parsing year-end closing dates."""
    assert parse_date("end of year", today=TODAY) == date(2025, 12, 31)
    assert parse_date("end of last year", today=TODAY) == date(2024, 12, 31)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_standard_formats():
    """Test parsing various standard date formats."""
    # These should all work via dateutil parser
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)
    assert parse_date("03/04/2025") == date(2025, 4, 3)
    assert parse_date("2025/04/03") == date(2025, 4, 3)


def test_month_end():
    """Test month_end across leap years."""
    assert month_end(date(2024, 2, 10)) == date(2024, 2, 29)
    assert month_end(date(2025, 12, 31)) == date(2025, 12, 31)


def test_get_date_range_this_month():
    """Test get_date_range for this-month."""
    start, end = get_date_range("this-month", today=TODAY)
    assert start == date(2025, 3, 1)
    assert end == date(2025, 3, 31)


def test_get_date_range_this_year():
    """Test get_date_range for this-year."""
    start, end = get_date_range("this-year", today=TODAY)
    assert start == date(2025, 1, 1)
    assert end == date(2025, 12, 31)


def test_get_date_range_last_month():
    """Test get_date_range for last-month."""
    start, end = get_date_range("last-month", today=TODAY)
    assert start == date(2025, 2, 1)
    assert end == date(2025, 2, 28)


def test_get_date_range_last_month_in_january():
    """Test get_date_range for last-month across a year boundary."""
    start, end = get_date_range("last-month", today=date(2025, 1, 20))
    assert start == date(2024, 12, 1)
    assert end == date(2024, 12, 31)


def test_get_date_range_last_year():
    """Test get_date_range for last-year."""
    start, end = get_date_range("last-year", today=TODAY)
    assert start == date(2024, 1, 1)
    assert end == date(2024, 12, 31)


def test_get_date_range_defaults_to_today():
    """Test get_date_range without a reference date."""
    today = date.today()
    start, end = get_date_range("this-month")
    assert start == date(today.year, today.month, 1)
    assert end == month_end(today)


def test_get_date_range_invalid_period():
    """Test get_date_range with invalid period."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("this-week")
