"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from dateutil import parser as date_parser

EXCEL_EPOCH = date(1899, 12, 30)

_DMY_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DMY_SLASH_SHORT = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")
_ISO = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_DMY_DASH = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_DMY_DOT = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_excel_date(value: Any) -> Optional[date]:
    """Convert a spreadsheet serial day number into a date.

    Strings are delegated to parse_date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return EXCEL_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError):
            return None
    return parse_date(value)


def parse_date(value: Any) -> Optional[date]:
    """Parse a date found in a bank statement.

    Supported inputs:
    - date and datetime objects
    - spreadsheet serial numbers (days since 1899-12-30)
    - "15/01/2024", "15/01/24" (years below 50 are 20xx, others 19xx)
    - "2024-01-15" ("2024-15-01" when the middle field cannot be a month)
    - "15-01-2024", "15.01.2024"
    - other text understood by dateutil, day first

    Args:
        value: Raw cell value

    Returns:
        Date, or None when the value is empty or not a valid calendar date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return parse_excel_date(value)

    text = str(value).strip()
    if not text:
        return None

    match = _DMY_SLASH.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    match = _DMY_SLASH_SHORT.match(text)
    if match:
        day, month, short_year = (int(g) for g in match.groups())
        year = 2000 + short_year if short_year < 50 else 1900 + short_year
        return _safe_date(year, month, day)

    match = _ISO.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        if month > 12:
            month, day = day, month
        return _safe_date(year, month, day)

    match = _DMY_DASH.match(text) or _DMY_DOT.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def parse_day_month_year(text: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """Parse "DD/MM/YYYY" or "DD/MM/YY" as written by point-of-sale exports.

    Two-digit years belong to the current century.
    """
    if not text:
        return None
    parts = text.strip().split("/")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    day, month, year = (int(p) for p in parts)
    if len(parts[2]) == 2:
        today = today or date.today()
        year += today.year // 100 * 100
    return _safe_date(year, month, day)


def parse_user_date(date_str: str) -> date:
    """Parse a date typed on the command line.

    Accepts "today", "yesterday", "tomorrow" and any absolute date
    supported by parse_date.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    parsed = parse_date(text)
    if parsed is None:
        raise ValueError(f"Could not parse date '{date_str}'")
    return parsed
