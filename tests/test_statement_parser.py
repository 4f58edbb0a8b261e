"""Tests for bank statement file parsing."""

import json
import pytest
from datetime import date, datetime
from decimal import Decimal

from openpyxl import Workbook

from restops.domain.statement_parser import StatementParser, detect_delimiter, to_statement_fields


@pytest.fixture
def parser():
    """Create a StatementParser."""
    return StatementParser()


def test_parse_csv_with_header(parser, sample_format, fixtures_dir):
    """Test a delimited file whose first line holds the column names."""
    result = parser.parse_file(str(fixtures_dir / "releve_bnp.csv"), sample_format)

    assert result.success
    assert len(result.rows) == 3
    assert result.columns[:3] == ["date", "date_valeur", "libelle"]
    first = result.rows[0]
    assert first["date"] == date(2024, 1, 15)
    assert first["date_valeur"] == date(2024, 1, 15)
    assert first["montant"] == Decimal("-42.50")
    assert first["libelle"] == "CB CARREFOUR"


def test_parse_csv_detects_delimiter(parser, format_service, tmp_path):
    """Test a comma-separated file read with a ";" format."""
    format_id = format_service.create_format(
        code="COMMA", label="Comma", columns=["date:date", "montant:montant"], separator=";"
    )
    fmt = format_service.get_format(format_id)
    path = tmp_path / "comma.csv"
    path.write_text("date,libelle,montant\n15/01/2024,Loyer,-1200.00\n", encoding="utf-8")

    result = parser.parse_file(str(path), fmt)

    assert result.success
    assert result.rows[0]["montant"] == Decimal("-1200.00")


def test_parse_csv_strips_bom(parser, sample_format, tmp_path):
    """Test a UTF-8 byte order mark does not end up in the first column name."""
    path = tmp_path / "bom.csv"
    path.write_text(
        "\ufeffdate;libelle;montant;compte\n15/01/2024;CB;-1,00;123\n", encoding="utf-8"
    )

    result = parser.parse_file(str(path), sample_format)

    assert result.success
    assert result.columns[0] == "date"


def test_parse_csv_positional_columns(parser, format_service, tmp_path):
    """Test columns are read by position when data starts after line 1."""
    format_id = format_service.create_format(
        code="CGD",
        label="Caixa",
        columns=["Data:date", "Descricao", "Valor:montant", "Conta"],
        separator=";",
        first_data_line=3,
    )
    fmt = format_service.get_format(format_id)
    path = tmp_path / "extrato.csv"
    path.write_text(
        "Extrato de conta\nConta: 0012345678\n"
        "15-01-2024;Pagamento;-12,30;0012345678\n"
        "16-01-2024;Deposito;100,00;0012345678\n",
        encoding="utf-8",
    )

    result = parser.parse_file(str(path), fmt)

    assert result.success
    assert len(result.rows) == 2
    assert result.rows[0] == {
        "Data": date(2024, 1, 15),
        "Descricao": "Pagamento",
        "Valor": Decimal("-12.30"),
        "Conta": "0012345678",
    }


def test_parse_csv_field_count_mismatch(parser, sample_format, fixtures_dir):
    """Test a row with too many fields fails with a separator hint."""
    result = parser.parse_file(str(fixtures_dir / "releve_bad_width.csv"), sample_format)

    assert not result.success
    assert result.errors[0] == "Row 3: Too many fields: expected 4 fields but parsed 5"
    assert "separator" in result.errors[-1]


def test_parse_missing_columns(parser, format_service, fixtures_dir):
    """Test a file lacking a format column lists expected and found columns."""
    format_id = format_service.create_format(
        code="STRICT", label="Strict", columns=["date:date", "montant:montant", "reference"]
    )
    fmt = format_service.get_format(format_id)

    result = parser.parse_file(str(fixtures_dir / "releve_bnp.csv"), fmt)

    assert not result.success
    assert result.errors[0] == "Missing columns: reference"
    assert result.errors[1] == "Expected columns: date, montant, reference"
    assert result.errors[2].startswith("Found columns: date, date_valeur")


def test_parse_empty_file(parser, sample_format, tmp_path):
    """Test an empty file is reported."""
    path = tmp_path / "empty.csv"
    path.write_text("\n\n", encoding="utf-8")

    result = parser.parse_file(str(path), sample_format)

    assert not result.success
    assert result.errors == ["The file contains no data"]


def test_parse_header_only(parser, sample_format, tmp_path):
    """Test a file with a header but no rows is reported as empty."""
    path = tmp_path / "header.csv"
    path.write_text("date;libelle;montant;compte\n", encoding="utf-8")

    result = parser.parse_file(str(path), sample_format)

    assert not result.success
    assert result.errors == ["The file contains no data"]


def test_parse_unsupported_extension(parser, sample_format, tmp_path):
    """Test unsupported file types are rejected."""
    path = tmp_path / "statement.pdf"
    path.write_bytes(b"%PDF")

    result = parser.parse_file(str(path), sample_format)

    assert not result.success
    assert "Unsupported file type '.pdf'" in result.errors[0]


def test_parse_missing_file(parser, sample_format, tmp_path):
    """Test a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        parser.parse_file(str(tmp_path / "nope.csv"), sample_format)


def test_parse_xlsx(parser, format_service, tmp_path):
    """Test a spreadsheet statement with native dates and numbers."""
    format_id = format_service.create_format(
        code="XLSX",
        label="Spreadsheet",
        columns=["date:date", "libelle", "montant:montant", "compte"],
        extension="xlsx",
    )
    fmt = format_service.get_format(format_id)

    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["date", "libelle", "montant", "compte"])
    sheet.append([datetime(2024, 1, 15), "CB CARREFOUR", -42.5, "30004000031234567890143"])
    sheet.append([datetime(2024, 1, 16), "LOYER", -120000, "30004000031234567890143"])
    sheet.append([None, None, None, None])
    path = tmp_path / "releve.xlsx"
    workbook.save(path)

    result = parser.parse_file(str(path), fmt)

    assert result.success
    assert len(result.rows) == 2
    assert result.rows[0]["date"] == date(2024, 1, 15)
    assert result.rows[0]["montant"] == Decimal("-42.5")
    # Integral numbers are stored in cents
    assert result.rows[1]["montant"] == Decimal("-1200")


def test_parse_xls(parser, format_service, fixtures_dir):
    """Test a legacy Excel 97 statement with date cells and an empty cell."""
    format_id = format_service.create_format(
        code="XLS",
        label="Legacy spreadsheet",
        columns=["date:date", "libelle", "montant:montant", "compte"],
        extension="xls",
    )
    fmt = format_service.get_format(format_id)

    result = parser.parse_file(str(fixtures_dir / "releve_legacy.xls"), fmt)

    assert result.success
    assert len(result.rows) == 3
    assert [row["date"] for row in result.rows] == [date(2024, 1, 15), date(2024, 1, 16), date(2024, 1, 17)]
    assert result.rows[0]["libelle"] == "CB CARREFOUR"
    assert result.rows[0]["montant"] == Decimal("-42.5")
    assert result.rows[0]["compte"] == "30004000031234567890143"
    assert result.rows[1]["montant"] == Decimal("-1200")
    assert result.rows[2]["libelle"] is None
    assert result.rows[2]["montant"] == Decimal("15")


def test_detect_delimiter():
    """Test delimiter detection on the first line."""
    assert detect_delimiter("a;b;c", ";") == ";"
    assert detect_delimiter("a,b,c", ";") == ","
    assert detect_delimiter("a\tb\tc", ",") == "\t"
    assert detect_delimiter("a;b", ";") == ";"
    assert detect_delimiter("single", ";") == ";"


def test_to_statement_fields():
    """Test standard column names are mapped onto statement line fields."""
    row = {
        "Data_Lancamento": "15/01/2024",
        "Descricao": "Pagamento",
        "Valor": "-12,30",
        "Saldo": "1.000,00",
        "Conta": "PT50 0012 3456",
        "Other": "x",
    }

    fields = to_statement_fields(row)

    assert fields["operation_date"] == date(2024, 1, 15)
    assert fields["description"] == "Pagamento"
    assert fields["amount"] == Decimal("-12.30")
    assert fields["balance"] == Decimal("1000.00")
    assert fields["account_number"] == "5000123456"
    assert fields["value_date"] is None
    assert json.loads(fields["source_row"])["Other"] == "x"
