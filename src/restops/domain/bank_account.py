"""Bank account domain service."""

import logging
from typing import Any, Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, BankAccount
from restops.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    bank_account_delete_blocked,
    bank_account_not_found,
    duplicate_code,
    restaurant_not_found,
)
from restops.utils.account_number import compact

logger = logging.getLogger(__name__)


class BankAccountService:
    """Service for managing the chart of bank accounts."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize bank account service.

        Args:
            db: Database instance
            client_id: Tenant the accounts belong to
        """
        self.db = db
        self.client_id = client_id

    def create_account(
        self, code: str, label: str, iban: str, restaurant_id: Optional[int] = None
    ) -> int:
        """Create a new bank account.

        Args:
            code: Account code, unique per client
            label: Account label
            iban: IBAN or local account number
            restaurant_id: Optional restaurant owning the account

        Returns:
            Account ID

        Raises:
            ValidationError: If code, label or IBAN is empty
            ConflictError: If the code is already used
            NotFoundError: If the restaurant does not exist
        """
        code = (code or "").strip()
        errors = {}
        if not code:
            errors["code"] = "Code is required"
        if not (label or "").strip():
            errors["label"] = "Label is required"
        if not compact(iban):
            errors["iban"] = "IBAN is required"
        if errors:
            raise ValidationError("Invalid bank account", errors)

        if self.db.get_bank_account_by_code(self.client_id, code) is not None:
            raise ConflictError(duplicate_code("Bank account", code))
        if restaurant_id is not None and self.db.get_restaurant(restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(restaurant_id))

        account_id = self.db.create_bank_account(
            client_id=self.client_id,
            code=code,
            label=label.strip(),
            iban=iban.strip(),
            restaurant_id=restaurant_id,
        )
        logger.info("Created bank account %s (%s)", code, account_id)
        return account_id

    def get_account(self, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        return self.db.get_bank_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[BankAccount]:
        """Get bank account by code."""
        return self.db.get_bank_account_by_code(self.client_id, code)

    def list_accounts(self, active_only: bool = False) -> list[BankAccount]:
        """List bank accounts of the client."""
        return self.db.list_bank_accounts(self.client_id, active_only=active_only)

    def update_account(self, account_id: int, **fields: Any) -> None:
        """Update label, IBAN, restaurant or active flag of an account.

        Raises:
            NotFoundError: If account not found
            ValidationError: If the IBAN is set to an empty value
        """
        if self.db.get_bank_account(account_id) is None:
            raise NotFoundError(bank_account_not_found(account_id))
        if "iban" in fields and not compact(fields["iban"]):
            raise ValidationError("Invalid bank account", {"iban": "IBAN is required"})
        self.db.update_bank_account(account_id, fields)

    def deactivate_account(self, account_id: int) -> None:
        """Deactivate an account so that reconciliation ignores it."""
        self.update_account(account_id, active=False)

    def delete_account(self, account_id: int) -> None:
        """Delete a bank account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If ledger entries still reference the account
        """
        if self.db.get_bank_account(account_id) is None:
            raise NotFoundError(bank_account_not_found(account_id))

        entry_count = self.db.count_bank_entries(account_id)
        if entry_count > 0:
            raise DependencyError(bank_account_delete_blocked(account_id, entry_count))

        self.db.delete_bank_account(account_id)
