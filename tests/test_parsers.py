"""Tests for amount, date, hour, column and account number parsing."""

import pytest
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from restops.utils.account_number import AccountMatcher, compact, normalize_account_number
from restops.utils.amount_parser import parse_amount, parse_lenient_amount, parse_numeric_value
from restops.utils.column_parser import (
    COLUMN_TYPE_AMOUNT,
    COLUMN_TYPE_DATE,
    COLUMN_TYPE_TEXT,
    parse_column_definition,
    parse_column_definitions,
)
from restops.utils.date_parser import (
    parse_date,
    parse_day_month_year,
    parse_excel_date,
    parse_user_date,
)
from restops.utils.time_parser import format_hour, hour_in_slot, to_minutes


def test_parse_numeric_value_decimal_comma():
    """Test decimal comma and thousands dot notations."""
    assert parse_numeric_value("-42,50") == Decimal("-42.50")
    assert parse_numeric_value("1.234,56") == Decimal("1234.56")
    assert parse_numeric_value("1234.56") == Decimal("1234.56")
    assert parse_numeric_value("€ 12,00") == Decimal("12.00")


def test_parse_numeric_value_integral_cents():
    """Test integral native numbers of 100 or more are read as cents."""
    assert parse_numeric_value(12345) == Decimal("123.45")
    assert parse_numeric_value(-250.0) == Decimal("-2.5")
    assert parse_numeric_value(99) == Decimal("99")
    assert parse_numeric_value(-42.5) == Decimal("-42.5")
    # Text is never divided
    assert parse_numeric_value("12345") == Decimal("12345")


def test_parse_numeric_value_invalid():
    """Test empty and non-numeric values give None."""
    assert parse_numeric_value(None) is None
    assert parse_numeric_value("") is None
    assert parse_numeric_value("abc") is None
    assert parse_numeric_value(True) is None


def test_parse_amount():
    """Test parsing amounts typed by users."""
    assert parse_amount("123.45") == Decimal("123.45")
    assert parse_amount("(12,30)") == Decimal("-12.30")
    with pytest.raises(ValueError):
        parse_amount("")
    with pytest.raises(ValueError):
        parse_amount("twelve")


def test_parse_lenient_amount():
    """Test point-of-sale amounts default to zero."""
    assert parse_lenient_amount("11,50") == Decimal("11.50")
    assert parse_lenient_amount("") == Decimal("0")
    assert parse_lenient_amount("n/a") == Decimal("0")
    assert parse_lenient_amount(None) == Decimal("0")


def test_parse_date_formats():
    """Test the date layouts found in bank statements."""
    assert parse_date("15/01/2024") == date(2024, 1, 15)
    assert parse_date("15/01/24") == date(2024, 1, 15)
    assert parse_date("15/01/98") == date(1998, 1, 15)
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("2024-15-01") == date(2024, 1, 15)
    assert parse_date("15-01-2024") == date(2024, 1, 15)
    assert parse_date("15.01.2024") == date(2024, 1, 15)
    assert parse_date(datetime(2024, 1, 15, 10, 30)) == date(2024, 1, 15)


def test_parse_date_invalid():
    """Test impossible or empty dates give None."""
    assert parse_date("31/02/2024") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_parse_excel_date():
    """Test spreadsheet serial numbers."""
    assert parse_excel_date(45306) == date(2024, 1, 15)
    assert parse_date(45306) == date(2024, 1, 15)
    assert parse_excel_date("15/01/2024") == date(2024, 1, 15)


def test_parse_day_month_year():
    """Test point-of-sale dates with two or four digit years."""
    assert parse_day_month_year("03/03/2026") == date(2026, 3, 3)
    assert parse_day_month_year("03/03/26", today=date(2026, 10, 1)) == date(2026, 3, 3)
    assert parse_day_month_year("31/02/2026") is None
    assert parse_day_month_year("2026-03-03") is None


def test_parse_user_date_relative():
    """Test relative dates typed on the command line."""
    assert parse_user_date("today") == date.today()
    assert parse_user_date("yesterday") == date.today() - timedelta(days=1)
    assert parse_user_date("2024-01-15") == date(2024, 1, 15)
    with pytest.raises(ValueError):
        parse_user_date("not a date")


def test_format_hour():
    """Test hour normalisation."""
    assert format_hour("7:00") == "07:00"
    assert format_hour("7H30") == "07:30"
    assert format_hour("7h") == "07:00"
    assert format_hour("13") == "13:00"
    assert format_hour("") == ""


def test_format_hour_pads_single_digit_minutes():
    """Test one-digit minutes are zero-padded."""
    assert format_hour("7:5") == "07:05"
    assert format_hour("20h5") == "20:05"


def test_to_minutes():
    """Test minutes since midnight."""
    assert to_minutes("12:15") == 735
    assert to_minutes(time(18, 0)) == 1080
    assert to_minutes("12") is None
    assert to_minutes(None) is None


def test_hour_in_slot():
    """Test service slot membership including late-night sales."""
    assert hour_in_slot("12:00", "11:00", "15:00")
    assert hour_in_slot("15:00", "11:00", "15:00")
    assert not hour_in_slot("16:30", "11:00", "15:00")
    # After midnight counts as 23:00
    assert hour_in_slot("00:45", time(18, 0), time(23, 30))
    assert not hour_in_slot("00:45", time(11, 0), time(15, 0))
    # Slot wrapping past midnight
    assert hour_in_slot("23:45", "22:00", "02:00")


def test_parse_column_definition():
    """Test name:type descriptors."""
    column = parse_column_definition("Date Operation:date")
    assert column.source_name == "Date Operation"
    assert column.type == COLUMN_TYPE_DATE
    assert parse_column_definition("Montant:montant").type == COLUMN_TYPE_AMOUNT
    assert parse_column_definition("Valor:number").type == COLUMN_TYPE_AMOUNT
    assert parse_column_definition("Libelle").type == COLUMN_TYPE_TEXT
    assert parse_column_definition(":date") is None
    assert parse_column_definition("  ") is None


def test_parse_column_definitions_drops_invalid():
    """Test invalid descriptors are skipped."""
    columns = parse_column_definitions(["date:date", "", None, "libelle"])
    assert [c.source_name for c in columns] == ["date", "libelle"]


def test_normalize_account_number():
    """Test only digits are kept and leading zeros dropped."""
    assert normalize_account_number("FR76 0001 2345") == "7600012345"
    assert normalize_account_number("00012345678") == "12345678"
    assert normalize_account_number(None) == ""
    assert compact(" FR76 3000 4000 ") == "FR7630004000"


class _Account:
    def __init__(self, id, iban):
        self.id = id
        self.iban = iban


def test_account_matcher():
    """Test matching statement numbers against IBANs."""
    matcher = AccountMatcher(
        [_Account(1, "FR76 3000 4000 0312 3456 7890 143"), _Account(2, "00099887766"), _Account(3, "")]
    )
    assert matcher.match("FR7630004000031234567890143") == 1
    assert matcher.match("30004000031234567890143") == 1
    assert matcher.match("4567890143") == 1
    assert matcher.match("99887766") == 2
    assert matcher.match("55555") is None
    assert matcher.match("") is None
    assert matcher.match(None) is None
