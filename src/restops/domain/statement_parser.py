"""Bank statement file parsing."""

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import openpyxl
import xlrd

from restops.domain.entities import ImportFormat
from restops.domain.import_format import (
    DELIMITED_EXTENSIONS,
    SUPPORTED_EXTENSIONS,
    resolve_separator,
)
from restops.utils.account_number import normalize_account_number
from restops.utils.amount_parser import parse_numeric_value
from restops.utils.column_parser import (
    COLUMN_TYPE_AMOUNT,
    COLUMN_TYPE_DATE,
    ColumnDefinition,
    parse_column_definitions,
)
from restops.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")

# Column names banks commonly use for each statement line field
STANDARD_COLUMN_NAMES = {
    "operation_date": ("data_lancamento", "date", "date_operation"),
    "value_date": ("data_valor", "date_valeur"),
    "amount": ("valor", "montant", "amount"),
    "balance": ("saldo", "solde", "balance"),
    "description": ("descricao", "libelle", "description"),
    "reference": ("referencia_doc", "reference"),
    "account_number": ("conta", "compte", "account", "account_number"),
    "currency": ("moeda", "devise", "currency"),
}
DATE_FIELDS = ("operation_date", "value_date")
AMOUNT_FIELDS = ("amount", "balance")


@dataclass
class ParseResult:
    """Outcome of parsing a statement file."""

    success: bool
    rows: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)


def _separator_label(separator: str) -> str:
    return "TAB" if separator == "\t" else f"'{separator}'"


def detect_delimiter(line: str, configured: str) -> str:
    """Return the delimiter to use for a file whose first line is given.

    The configured delimiter wins when it appears at least twice; otherwise
    the most frequent candidate delimiter is used if it appears more often.
    """
    configured_count = line.count(configured)
    if configured_count >= 2:
        return configured

    best = max(CANDIDATE_DELIMITERS, key=line.count)
    if line.count(best) > configured_count:
        logger.debug(
            "Separator %s found %d time(s), using %s instead",
            _separator_label(configured),
            configured_count,
            _separator_label(best),
        )
        return best
    return configured


def _is_blank(cells: list[Any]) -> bool:
    return all(cell is None or (isinstance(cell, str) and not cell.strip()) for cell in cells)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _standard_field(column: str) -> Optional[str]:
    key = column.strip().lower().replace(" ", "_")
    for field_name, names in STANDARD_COLUMN_NAMES.items():
        if key in names:
            return field_name
    return None


def to_statement_fields(row: dict[str, Any]) -> dict[str, Any]:
    """Map a parsed row onto statement line fields.

    Columns are recognised through the standard column names; the raw row is
    kept as JSON in ``source_row``.

    Args:
        row: Parsed row keyed by source column name

    Returns:
        Dict with operation_date, value_date, description, amount, balance,
        reference, account_number, currency and source_row
    """
    fields: dict[str, Any] = {name: None for name in STANDARD_COLUMN_NAMES}
    for column, value in row.items():
        field_name = _standard_field(column)
        if field_name is None or fields[field_name] is not None:
            continue
        if field_name in DATE_FIELDS:
            fields[field_name] = value if isinstance(value, date) else parse_date(value)
        elif field_name in AMOUNT_FIELDS:
            fields[field_name] = value if isinstance(value, Decimal) else parse_numeric_value(value)
        else:
            fields[field_name] = _text(value)

    if fields["account_number"] is not None:
        fields["account_number"] = normalize_account_number(fields["account_number"]) or None
    fields["source_row"] = json.dumps(row, default=_json_default, ensure_ascii=False)
    return fields


class StatementParser:
    """Parse delimited and spreadsheet statement files against an import format."""

    def parse_file(self, file_path: str, fmt: ImportFormat) -> ParseResult:
        """Parse a statement file.

        Args:
            file_path: Path to the statement file
            fmt: Import format describing the file

        Returns:
            ParseResult with converted rows, or errors when the file does not
            match the format

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {file_path}")

        extension = path.suffix.lower().lstrip(".")
        if extension not in SUPPORTED_EXTENSIONS:
            return ParseResult(
                success=False,
                errors=[
                    f"Unsupported file type '.{extension}'. "
                    f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
                ],
            )

        definitions = parse_column_definitions(fmt.columns)
        skip = max(fmt.first_data_line, 1) - 1
        positional = bool(definitions) and fmt.first_data_line > 1

        if extension in DELIMITED_EXTENSIONS:
            return self._parse_delimited(path, fmt, definitions, skip, positional)

        try:
            raw_rows = self._read_xls(path) if extension == "xls" else self._read_xlsx(path)
        except Exception as e:
            logger.error("Could not read spreadsheet %s", path, exc_info=True)
            return ParseResult(success=False, errors=[f"Could not read spreadsheet: {e}"])
        return self._build_rows(raw_rows[skip:], definitions, positional, strict_width=False)

    def _parse_delimited(
        self,
        path: Path,
        fmt: ImportFormat,
        definitions: list[ColumnDefinition],
        skip: int,
        positional: bool,
    ) -> ParseResult:
        try:
            content = path.read_text(encoding=fmt.encoding or "utf-8")
        except (LookupError, UnicodeDecodeError) as e:
            return ParseResult(
                success=False,
                errors=[f"Could not decode file with encoding '{fmt.encoding}': {e}"],
            )
        content = content.lstrip("\ufeff")

        lines = content.splitlines()[skip:]
        first_line = next((line for line in lines if line.strip()), "")
        if not first_line:
            return ParseResult(success=False, errors=["The file contains no data"])

        delimiter = detect_delimiter(first_line, resolve_separator(fmt.separator))
        reader = csv.reader(io.StringIO("\n".join(lines)), delimiter=delimiter)
        raw_rows = [list(cells) for cells in reader]

        result = self._build_rows(raw_rows, definitions, positional, strict_width=True)
        if not result.success and result.errors and result.errors[0].startswith("Row "):
            result.errors.append(
                f"The separator used in the file does not match the format ({_separator_label(delimiter)}). "
                f"Check that every column is separated by {_separator_label(delimiter)}."
            )
        return result

    def _read_xlsx(self, path: Path) -> list[list[Any]]:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            sheet = workbook.worksheets[0]
            return [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

    def _read_xls(self, path: Path) -> list[list[Any]]:
        workbook = xlrd.open_workbook(str(path))
        sheet = workbook.sheet_by_index(0)
        rows = []
        for row_index in range(sheet.nrows):
            values = []
            for cell in sheet.row(row_index):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    values.append(xlrd.xldate_as_datetime(cell.value, workbook.datemode))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    values.append(None)
                else:
                    values.append(cell.value)
            rows.append(values)
        return rows

    def _build_rows(
        self,
        raw_rows: list[list[Any]],
        definitions: list[ColumnDefinition],
        positional: bool,
        strict_width: bool,
    ) -> ParseResult:
        raw_rows = [cells for cells in raw_rows if not _is_blank(cells)]
        if not raw_rows:
            return ParseResult(success=False, errors=["The file contains no data"])

        if positional:
            headers = [d.source_name for d in definitions]
            data_rows = raw_rows
            first_row_number = 1
        else:
            headers = [_text(cell) or "" for cell in raw_rows[0]]
            data_rows = raw_rows[1:]
            first_row_number = 2
            if not data_rows:
                return ParseResult(success=False, errors=["The file contains no data"])

        lowered = {h.lower() for h in headers if h}
        missing = [d.source_name for d in definitions if d.source_name.lower() not in lowered]
        if missing:
            return ParseResult(
                success=False,
                errors=[
                    f"Missing columns: {', '.join(missing)}",
                    f"Expected columns: {', '.join(d.source_name for d in definitions)}",
                    f"Found columns: {', '.join(h for h in headers if h)}",
                    "Check that the column order in the file matches the import format.",
                ],
            )

        by_name = {d.source_name.lower(): d for d in definitions}
        rows = []
        errors = []
        for row_number, cells in enumerate(data_rows, start=first_row_number):
            if strict_width and len(cells) != len(headers):
                problem = "Too many fields" if len(cells) > len(headers) else "Too few fields"
                errors.append(
                    f"Row {row_number}: {problem}: expected {len(headers)} fields but parsed {len(cells)}"
                )
                continue

            row = {}
            for index, header in enumerate(headers):
                if not header:
                    continue
                value = cells[index] if index < len(cells) else None
                row[header] = self._convert(header, value, by_name.get(header.lower()))
            rows.append(row)

        if errors:
            return ParseResult(success=False, errors=errors, columns=headers)

        logger.info("Parsed %d statement row(s)", len(rows))
        return ParseResult(success=True, rows=rows, columns=[h for h in headers if h])

    @staticmethod
    def _convert(header: str, value: Any, definition: Optional[ColumnDefinition]) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                value = None

        if definition is not None:
            if definition.type == COLUMN_TYPE_DATE:
                return parse_date(value)
            if definition.type == COLUMN_TYPE_AMOUNT:
                return parse_numeric_value(value)
            return _text(value)

        if _standard_field(header) in DATE_FIELDS and value is not None:
            return parse_date(value)
        if isinstance(value, datetime):
            return value.date()
        return value
