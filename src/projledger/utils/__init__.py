"""Utility functions for projledger."""

from projledger.utils.date_parser import parse_date, get_date_range
from projledger.utils.amount_parser import parse_amount, format_money

__all__ = ["parse_date", "get_date_range", "parse_amount", "format_money"]
