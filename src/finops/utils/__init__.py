"""Utility functions for finops."""

from finops.utils.date_parser import parse_date
from finops.utils.amount_parser import parse_amount
from finops.utils.formatting import format_amount, format_currency, sanitize_filename

__all__ = ["parse_date", "parse_amount", "format_amount", "format_currency", "sanitize_filename"]
