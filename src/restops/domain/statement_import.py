"""Bank statement import domain service."""

import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from restops.database.base import Database
from restops.domain.entities import (
    DEFAULT_CLIENT_ID,
    ImportStatus,
    LineStatus,
    StatementImport,
    StatementLine,
)
from restops.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    file_already_imported,
    statement_import_not_found,
)
from restops.domain.import_format import ImportFormatService
from restops.domain.statement_parser import ParseResult, StatementParser, to_statement_fields

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 255
DEFAULT_BATCH_SIZE = 100

ProgressCallback = Callable[[int, int, str], None]


class StatementImportService:
    """Service for importing bank statement files into statement lines."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize statement import service.

        Args:
            db: Database instance
            client_id: Tenant the imports belong to
        """
        self.db = db
        self.client_id = client_id
        self.format_service = ImportFormatService(db, client_id)
        self.parser = StatementParser()

    @staticmethod
    def _file_name(file_path: str) -> str:
        return Path(file_path).name[:MAX_FILE_NAME_LENGTH]

    def file_already_imported(self, file_name: str) -> bool:
        """Check whether a file with this name was already imported."""
        name = file_name[:MAX_FILE_NAME_LENGTH]
        return self.db.get_statement_import_by_file_name(self.client_id, name) is not None

    def preview(self, file_path: str, format_code: str) -> ParseResult:
        """Parse a statement file without writing anything.

        Args:
            file_path: Path to the statement file
            format_code: Code of the import format to use

        Returns:
            ParseResult of the file

        Raises:
            NotFoundError: If the format doesn't exist
            FileNotFoundError: If the file doesn't exist
        """
        fmt = self.format_service.require_format(format_code)
        return self.parser.parse_file(file_path, fmt)

    def import_file(
        self,
        file_path: str,
        format_code: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress: Optional[ProgressCallback] = None,
    ) -> dict[str, Any]:
        """Import a statement file.

        Lines are stored with status "A TRAITER" and reconciled later by the
        bank entry processor.

        Args:
            file_path: Path to the statement file
            format_code: Code of the import format to use
            batch_size: Number of lines inserted per transaction
            progress: Optional callback receiving (current, total, message)

        Returns:
            Dict with import statistics:
            - import_id: ID of the batch header
            - imported: number of lines stored
            - message: completion message

        Raises:
            ConflictError: If the file name was already imported
            NotFoundError: If the format doesn't exist
            ValidationError: If the file doesn't match the format
            FileNotFoundError: If the file doesn't exist
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        file_name = self._file_name(file_path)
        if self.file_already_imported(file_name):
            raise ConflictError(file_already_imported(file_name))

        fmt = self.format_service.require_format(format_code)
        result = self.parser.parse_file(file_path, fmt)
        if not result.success:
            raise ValidationError("; ".join(result.errors))

        total = len(result.rows)
        import_id = self.db.create_statement_import(
            client_id=self.client_id,
            import_uuid=str(uuid.uuid4()),
            file_name=file_name,
            format_id=fmt.id,
            line_count=total,
            status=ImportStatus.IN_PROGRESS,
        )
        logger.info("Importing %d line(s) from %s as import %d", total, file_name, import_id)

        imported = 0
        try:
            for start in range(0, total, batch_size):
                batch = [
                    dict(to_statement_fields(row), status=LineStatus.PENDING)
                    for row in result.rows[start : start + batch_size]
                ]
                imported += self.db.add_statement_lines(import_id, self.client_id, batch)
                if progress is not None:
                    progress(imported, total, f"Imported {imported} of {total} lines")
        except Exception as e:
            logger.error("Import %d of %s failed", import_id, file_name, exc_info=True)
            self.db.update_statement_import_status(import_id, ImportStatus.FAILED, str(e))
            raise

        message = f"Import completed: {imported} lines imported."
        self.db.update_statement_import_status(import_id, ImportStatus.COMPLETED, message)
        return {"import_id": import_id, "imported": imported, "message": message}

    def get_import(self, import_id: int) -> Optional[StatementImport]:
        """Get statement import by ID."""
        return self.db.get_statement_import(import_id)

    def list_imports(self) -> list[StatementImport]:
        """List imports of the client, newest first."""
        return self.db.list_statement_imports(self.client_id)

    def get_lines(
        self, import_id: Optional[int] = None, status: Optional[LineStatus] = None
    ) -> list[StatementLine]:
        """List statement lines, optionally of one import and one status."""
        statuses = [status] if status is not None else None
        return self.db.list_statement_lines(self.client_id, import_id=import_id, statuses=statuses)

    def delete_import(self, import_id: int) -> None:
        """Delete an import and its lines.

        Raises:
            NotFoundError: If import not found
        """
        if self.db.get_statement_import(import_id) is None:
            raise NotFoundError(statement_import_not_found(import_id))
        self.db.delete_statement_import(import_id)
