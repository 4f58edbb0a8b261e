"""Reconciliation of imported statement lines into bank ledger entries."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, BankEntry, LineStatus, StatementLine
from restops.domain.errors import (
    BankEntryError,
    BankEntryErrorCode,
    NotFoundError,
    format_bank_entry_error,
)
from restops.utils.account_number import AccountMatcher, normalize_account_number

logger = logging.getLogger(__name__)

ENTRY_CREATED_MESSAGE = "Bank entry created"


@dataclass(frozen=True)
class ProcessProgress:
    """Snapshot of a reconciliation run passed to progress callbacks."""

    total: int = 0
    processed: int = 0
    created: int = 0
    duplicates: int = 0
    errors: int = 0
    current_line: str = ""
    phase: str = "Initialisation"


@dataclass
class ProcessResult:
    """Outcome of a reconciliation run."""

    success: bool
    created: int = 0
    duplicates: int = 0
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"Processing completed: {self.created} entr{'ies' if self.created != 1 else 'y'} created, "
            f"{self.duplicates} duplicate(s), {self.errors} error(s)"
        )


ProgressCallback = Callable[[ProcessProgress], None]


def _same(line_value, entry_value) -> bool:
    """Null-aware equality: a null line value only matches a null column."""
    if line_value is None:
        return entry_value is None
    return entry_value is not None and line_value == entry_value


def _description(value: Optional[str]) -> Optional[str]:
    return value or None


class BankEntryProcessor:
    """Turn pending statement lines into bank ledger entries.

    Each line in status "A TRAITER" or "ERREUR" is matched to a bank account
    by its account number, checked for an existing identical entry and
    either linked to it ("DOUBLON") or booked as a new entry ("CREER").
    Lines that fail are marked "ERREUR" with a coded message and processing
    moves on to the next line, so running it again is always safe.
    """

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        self.db = db
        self.client_id = client_id

    def process(
        self, progress: Optional[ProgressCallback] = None, import_id: Optional[int] = None
    ) -> ProcessResult:
        """Reconcile pending statement lines.

        Args:
            progress: Optional callback receiving ProcessProgress snapshots
            import_id: Only process lines of this import

        Returns:
            ProcessResult with created/duplicate/error counts
        """
        state = ProcessProgress()

        def report(**changes) -> None:
            nonlocal state
            state = replace(state, **changes)
            if progress is not None:
                progress(state)

        report(phase="Loading bank accounts")
        accounts = self.db.list_bank_accounts(self.client_id, active_only=True)
        if not accounts:
            message = format_bank_entry_error(
                BankEntryErrorCode.NO_ACCOUNTS, "No active bank account found"
            )
            logger.warning(message)
            report(phase=f"Error: {message}")
            return ProcessResult(success=False, error_messages=[message])
        matcher = AccountMatcher(accounts)
        report(phase=f"{len(accounts)} bank account(s) found")

        lines = self.db.list_statement_lines(
            self.client_id,
            import_id=import_id,
            statuses=[LineStatus.PENDING, LineStatus.ERROR],
        )
        if not lines:
            report(phase="No lines to process")
            return ProcessResult(success=True)

        result = ProcessResult(success=True)
        total = len(lines)
        report(total=total, phase=f"Processing {total} line(s)")

        for index, line in enumerate(lines, start=1):
            report(
                current_line=(
                    f"Line {index}/{total}: {line.description or 'No description'} "
                    f"({line.amount} {line.currency or 'EUR'})"
                ),
                phase="Matching bank account",
            )
            try:
                duplicate_of = self._process_line(line, matcher)
            except BankEntryError as e:
                self._record_error(result, line, str(e))
            except Exception as e:
                logger.exception("Unexpected error on statement line %d", line.id)
                self._record_error(
                    result,
                    line,
                    format_bank_entry_error(BankEntryErrorCode.GENERAL, "Unexpected error", str(e)),
                )
            else:
                if duplicate_of is not None:
                    result.duplicates += 1
                else:
                    result.created += 1
            report(
                processed=index,
                created=result.created,
                duplicates=result.duplicates,
                errors=result.errors,
            )

        report(phase="Processing completed")
        logger.info(result.summary)
        return result

    def _record_error(self, result: ProcessResult, line: StatementLine, message: str) -> None:
        logger.warning("Statement line %d: %s", line.id, message)
        result.errors += 1
        result.error_messages.append(f"Line {line.id}: {message}")
        self.db.update_statement_line_status(line.id, LineStatus.ERROR, message)

    def _process_line(self, line: StatementLine, matcher: AccountMatcher) -> Optional[int]:
        """Reconcile one line; returns the existing entry ID for a duplicate."""
        account_id = matcher.match(line.account_number)
        if account_id is None:
            raise BankEntryError(
                BankEntryErrorCode.ACCOUNT_NOT_FOUND,
                "Bank account not found",
                f'Number "{line.account_number or ""}" (normalised: '
                f'"{normalize_account_number(line.account_number)}") matches no configured IBAN',
            )

        if line.operation_date is None:
            raise BankEntryError(
                BankEntryErrorCode.MISSING_OPERATION_DATE, "Missing operation date"
            )

        existing = self._find_duplicate(account_id, line)
        if existing is not None:
            self.db.update_statement_line_status(
                line.id,
                LineStatus.DUPLICATE,
                f"Duplicate of bank entry {existing.id}",
                bank_entry_id=existing.id,
            )
            return existing.id

        try:
            entry_id = self.db.create_bank_entry(
                client_id=self.client_id,
                bank_account_id=account_id,
                operation_date=line.operation_date,
                value_date=line.value_date,
                description=_description(line.description),
                amount=line.amount,
                balance=line.balance,
                reference=line.reference,
                statement_line_id=line.id,
            )
        except Exception as e:
            raise BankEntryError(
                BankEntryErrorCode.ENTRY_CREATION_FAILED, "Could not create bank entry", str(e)
            ) from e

        try:
            self.db.update_statement_line_status(
                line.id, LineStatus.CREATED, ENTRY_CREATED_MESSAGE, bank_entry_id=entry_id
            )
        except Exception as e:
            raise BankEntryError(
                BankEntryErrorCode.ENTRY_UPDATE_FAILED, "Could not update statement line", str(e)
            ) from e
        return None

    def _find_duplicate(self, account_id: int, line: StatementLine) -> Optional[BankEntry]:
        try:
            candidates = self.db.find_bank_entries(account_id, line.operation_date)
        except Exception as e:
            raise BankEntryError(
                BankEntryErrorCode.DUPLICATE_CHECK_FAILED, "Duplicate check failed", str(e)
            ) from e

        for entry in candidates:
            if (
                _same(line.amount, entry.amount)
                and _same(_description(line.description), _description(entry.description))
                and _same(line.balance, entry.balance)
            ):
                return entry
        return None


class BankEntryService:
    """Service for reading and deleting bank ledger entries."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        self.db = db
        self.client_id = client_id

    def list_entries(
        self,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankEntry]:
        """List bank entries ordered by operation date."""
        return self.db.list_bank_entries(
            self.client_id,
            bank_account_id=bank_account_id,
            start_date=start_date,
            end_date=end_date,
        )

    def get_entry(self, entry_id: int) -> Optional[BankEntry]:
        """Get bank entry by ID."""
        return self.db.get_bank_entry(entry_id)

    def delete_entry(self, entry_id: int) -> None:
        """Delete a bank entry; its statement line goes back to "A TRAITER".

        Raises:
            NotFoundError: If entry not found
        """
        if self.db.get_bank_entry(entry_id) is None:
            raise NotFoundError(f"Bank entry {entry_id} not found")
        self.db.delete_bank_entry(entry_id)
