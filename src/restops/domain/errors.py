"""Shared domain error messages and error types."""

from enum import Enum
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic.

    Form-style validations report every failing field at once in ``errors``.
    """

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class BankEntryErrorCode(str, Enum):
    """Error codes recorded on statement lines during reconciliation."""

    NO_ACCOUNTS = "BE001"
    ACCOUNT_NOT_FOUND = "BE002"
    DUPLICATE_CHECK_FAILED = "BE003"
    ENTRY_CREATION_FAILED = "BE004"
    ENTRY_UPDATE_FAILED = "BE005"
    MISSING_OPERATION_DATE = "BE006"
    GENERAL = "BE999"


class BankEntryError(DomainError):
    """A statement line could not be reconciled."""

    def __init__(self, code: BankEntryErrorCode, message: str, details: Optional[str] = None):
        self.code = code
        self.details = details
        super().__init__(format_bank_entry_error(code, message, details))


def format_bank_entry_error(
    code: BankEntryErrorCode, message: str, details: Optional[str] = None
) -> str:
    """Return "[code] message - details" as stored on statement lines."""
    text = f"[{code.value}] {message}"
    if details:
        text += f" - {details}"
    return text


def validation_failed(errors: dict[str, str]) -> str:
    """Return a one-line summary of field errors."""
    return "Validation failed: " + "; ".join(f"{field}: {msg}" for field, msg in errors.items())


def restaurant_not_found(restaurant: int | str) -> str:
    """Return message for missing restaurant."""
    return f"Restaurant {restaurant} not found"


def bank_account_not_found(account: int | str) -> str:
    """Return message for missing bank account."""
    return f"Bank account {account} not found"


def import_format_not_found(fmt: int | str) -> str:
    """Return message for missing import format."""
    return f"Import format '{fmt}' not found"


def statement_import_not_found(import_id: int) -> str:
    """Return message for missing statement import."""
    return f"Statement import {import_id} not found"


def file_already_imported(file_name: str) -> str:
    """Return message when a statement file name has already been imported."""
    return f"File '{file_name}' has already been imported"


def cash_closure_not_found(closure_id: int) -> str:
    """Return message for missing cash closure."""
    return f"Cash closure {closure_id} not found"


def ca_budget_not_found(budget_id: int) -> str:
    """Return message for missing CA budget."""
    return f"CA budget {budget_id} not found"


def employee_not_found(employee_id: int) -> str:
    """Return message for missing employee."""
    return f"Employee {employee_id} not found"


def purchase_invoice_not_found(invoice_id: int) -> str:
    """Return message for missing purchase invoice."""
    return f"Purchase invoice {invoice_id} not found"


def duplicate_code(kind: str, code: str) -> str:
    """Return message for a code already used by another record."""
    return f"{kind} with code '{code}' already exists"


def bank_account_delete_blocked(account_id: int, entry_count: int) -> str:
    """Return message when a bank account still has ledger entries."""
    return (
        f"Cannot delete bank account {account_id}: it has "
        f"{entry_count} bank entr{'ies' if entry_count != 1 else 'y'}. "
        "Please delete them first."
    )


def purchase_invoice_delete_blocked(invoice_id: int, closure_ids: list[int]) -> str:
    """Return message when a purchase invoice is attached to cash closures."""
    closures = ", ".join(str(c) for c in closure_ids)
    return f"Cannot delete purchase invoice {invoice_id}: it is attached to cash closure(s) {closures}"
