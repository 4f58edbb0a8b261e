"""Parsing helpers shared by the importers."""

from restops.utils.amount_parser import parse_amount, parse_numeric_value
from restops.utils.date_parser import parse_date, parse_user_date

__all__ = ["parse_amount", "parse_numeric_value", "parse_date", "parse_user_date"]
