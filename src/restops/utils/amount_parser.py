"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any, Optional

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥\s ]")


def _normalize_separators(text: str) -> str:
    """Turn European or decimal-comma notation into a plain decimal string."""
    if "." in text and "," in text:
        # 1.234,56 -> 1234.56
        return text.replace(".", "").replace(",", ".")
    if "," in text:
        return text.replace(",", ".")
    return text


def parse_numeric_value(value: Any) -> Optional[Decimal]:
    """Parse a number read from a statement file.

    Spreadsheets sometimes store amounts as integer cents (``12345`` for
    ``123.45``): an integral native number whose absolute value is 100 or
    more is divided by 100. Strings accept ``1234.56``, ``1234,56`` and
    ``1.234,56``.

    Args:
        value: Raw cell value (str, int, float, Decimal or None)

    Returns:
        Decimal value, or None when the value is empty or not a number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        if not number.is_finite():
            return None
        if number == number.to_integral_value() and abs(number) >= 100:
            return number / 100
        return number

    text = _CURRENCY_SYMBOLS.sub("", str(value))
    if not text:
        return None

    try:
        number = Decimal(_normalize_separators(text))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount typed by a user into a Decimal.

    Handles various formats:
    - "123.45"
    - "123,45"
    - "1.234,56"
    - "-123.45"
    - "(123.45)" (negative in parentheses)
    - "€ 123,45"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = _CURRENCY_SYMBOLS.sub("", text)

    try:
        amount = Decimal(_normalize_separators(text))
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_lenient_amount(value: Any) -> Decimal:
    """Parse a point-of-sale export amount; anything unparseable counts as zero."""
    if value is None:
        return Decimal("0")
    text = str(value).replace(" ", "").replace(",", ".")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")
