"""Statement import format domain service."""

from typing import Any, Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, ImportFormat
from restops.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    duplicate_code,
    import_format_not_found,
)
from restops.utils.column_parser import ColumnDefinition, parse_column_definition, parse_column_definitions

DELIMITED_EXTENSIONS = ("csv", "txt", "tsv")
SPREADSHEET_EXTENSIONS = ("xls", "xlsx")
SUPPORTED_EXTENSIONS = DELIMITED_EXTENSIONS + SPREADSHEET_EXTENSIONS

TAB_SEPARATOR = "\\t"


def resolve_separator(separator: Optional[str]) -> str:
    """Turn the stored separator into the character used for splitting."""
    if not separator:
        return ";"
    if separator == TAB_SEPARATOR:
        return "\t"
    return separator


class ImportFormatService:
    """Service for managing bank statement file formats."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize import format service.

        Args:
            db: Database instance
            client_id: Tenant the formats belong to
        """
        self.db = db
        self.client_id = client_id

    def _validate(self, values: dict[str, Any]) -> dict[str, Any]:
        errors = {}
        cleaned = dict(values)

        if "extension" in cleaned:
            extension = (cleaned["extension"] or "").strip().lower().lstrip(".")
            if extension not in SUPPORTED_EXTENSIONS:
                errors["extension"] = (
                    f"Unsupported extension '{extension}'. "
                    f"Must be one of: {', '.join(SUPPORTED_EXTENSIONS)}"
                )
            cleaned["extension"] = extension

        if "separator" in cleaned and not cleaned["separator"]:
            errors["separator"] = "Separator is required"

        if "first_data_line" in cleaned and (
            cleaned["first_data_line"] is None or int(cleaned["first_data_line"]) < 1
        ):
            errors["first_data_line"] = "First data line must be 1 or greater"

        if "columns" in cleaned:
            columns = [c.strip() for c in cleaned["columns"] or [] if c and c.strip()]
            invalid = [c for c in columns if parse_column_definition(c) is None]
            if invalid:
                errors["columns"] = f"Invalid column definition(s): {', '.join(invalid)}"
            cleaned["columns"] = columns

        if errors:
            raise ValidationError("Invalid import format", errors)
        return cleaned

    def create_format(
        self,
        code: str,
        label: str,
        columns: list[str],
        bank: Optional[str] = None,
        extension: str = "csv",
        encoding: str = "utf-8",
        separator: str = ";",
        first_data_line: int = 1,
    ) -> int:
        """Create a new import format.

        Args:
            code: Format code, unique per client
            label: Format label
            columns: Column descriptors in "name:type" form
            bank: Bank the format belongs to
            extension: File extension (csv, txt, tsv, xls, xlsx)
            encoding: Text encoding of delimited files
            separator: Field separator; the literal "\\t" means TAB
            first_data_line: 1-based line of the first data row

        Returns:
            Format ID

        Raises:
            ValidationError: If a value is invalid
            ConflictError: If the code is already used
        """
        code = (code or "").strip()
        if not code:
            raise ValidationError("Invalid import format", {"code": "Code is required"})
        if self.db.get_import_format_by_code(self.client_id, code) is not None:
            raise ConflictError(duplicate_code("Import format", code))

        values = self._validate(
            {
                "extension": extension,
                "separator": separator,
                "first_data_line": first_data_line,
                "columns": columns,
            }
        )
        return self.db.create_import_format(
            client_id=self.client_id,
            code=code,
            label=label or code,
            bank=bank,
            encoding=encoding or "utf-8",
            **values,
        )

    def get_format(self, format_id: int) -> Optional[ImportFormat]:
        """Get import format by ID."""
        return self.db.get_import_format(format_id)

    def get_format_by_code(self, code: str) -> Optional[ImportFormat]:
        """Get import format by code."""
        return self.db.get_import_format_by_code(self.client_id, code)

    def require_format(self, code: str) -> ImportFormat:
        """Get import format by code.

        Raises:
            NotFoundError: If the format does not exist
        """
        fmt = self.get_format_by_code(code)
        if fmt is None:
            raise NotFoundError(import_format_not_found(code))
        return fmt

    def list_formats(self, active_only: bool = True) -> list[ImportFormat]:
        """List import formats ordered by bank then code."""
        return self.db.list_import_formats(self.client_id, active_only=active_only)

    def update_format(self, format_id: int, **fields: Any) -> None:
        """Update an import format.

        Raises:
            NotFoundError: If format not found
            ValidationError: If a value is invalid
        """
        if self.db.get_import_format(format_id) is None:
            raise NotFoundError(import_format_not_found(format_id))
        self.db.update_import_format(format_id, self._validate(fields))

    def deactivate_format(self, format_id: int) -> None:
        """Hide a format from the default listing."""
        self.update_format(format_id, active=False)

    def delete_format(self, format_id: int) -> None:
        """Delete an import format.

        Raises:
            NotFoundError: If format not found
            DependencyError: If statement imports were made with it
        """
        if self.db.get_import_format(format_id) is None:
            raise NotFoundError(import_format_not_found(format_id))
        count = self.db.count_statement_imports(format_id)
        if count > 0:
            raise DependencyError(
                f"Cannot delete import format {format_id}: "
                f"{count} import{'s' if count != 1 else ''} use it. Deactivate it instead."
            )
        self.db.delete_import_format(format_id)

    @staticmethod
    def column_definitions(fmt: ImportFormat) -> list[ColumnDefinition]:
        """Return the parsed column descriptors of a format."""
        return parse_column_definitions(fmt.columns)
