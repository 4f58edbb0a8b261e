"""Cash register closure (fermeture de caisse) domain service."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from restops.database.base import Database
from restops.domain.entities import (
    DEFAULT_CLIENT_ID,
    CardPayment,
    CashClosure,
    ClosureExpense,
    PurchaseInvoice,
)
from restops.domain.errors import (
    NotFoundError,
    ValidationError,
    cash_closure_not_found,
    purchase_invoice_not_found,
    restaurant_not_found,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class ClosureDraft:
    """Header values of a closure being entered."""

    restaurant_id: Optional[int]
    closure_date: Optional[date]
    revenue_incl_tax: Optional[Decimal]
    actual_deposit: Optional[Decimal]
    opening_float: Optional[Decimal]
    revenue_excl_tax: Optional[Decimal] = None
    comment: Optional[str] = None
    id: Optional[int] = None


@dataclass
class CardPaymentDraft:
    """Card takings line; id is set for lines already saved."""

    gross_amount: Decimal
    actual_amount: Decimal
    period: Optional[str] = None
    comment: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ExpenseDraft:
    """Expense invoice paid from the till; id is set for lines already saved."""

    amount_incl_tax: Decimal
    invoice_reference: Optional[str] = None
    comment: Optional[str] = None
    purchase_invoice_id: Optional[int] = None
    id: Optional[int] = None

    @classmethod
    def from_invoice(cls, invoice: PurchaseInvoice) -> "ExpenseDraft":
        """Expense line settling a purchase invoice from the till."""
        return cls(
            amount_incl_tax=invoice.amount_incl_tax,
            invoice_reference=invoice.document_number,
            purchase_invoice_id=invoice.id,
        )


@dataclass(frozen=True)
class ClosureTotals:
    """Derived amounts of a closure."""

    total_card_gross: Decimal
    total_card_actual: Decimal
    total_expenses: Decimal
    theoretical_deposit: Decimal
    cash_kept: Optional[Decimal]
    closing_float: Optional[Decimal]


def compute_totals(
    draft: ClosureDraft,
    card_payments: Iterable[CardPaymentDraft],
    expenses: Iterable[ExpenseDraft],
) -> ClosureTotals:
    """Compute card, expense and deposit totals of a closure.

    The theoretical bank deposit is the revenue incl. tax minus card takings
    and expenses paid in cash. What is not deposited stays in the till, so the
    closing float is the opening float plus the cash kept.
    """
    card_payments = list(card_payments)
    total_card_gross = sum((p.gross_amount or ZERO for p in card_payments), ZERO)
    total_card_actual = sum((p.actual_amount or ZERO for p in card_payments), ZERO)
    total_expenses = sum((e.amount_incl_tax or ZERO for e in expenses), ZERO)

    theoretical = (draft.revenue_incl_tax or ZERO) - total_card_gross - total_expenses

    cash_kept = None
    if draft.actual_deposit is not None:
        cash_kept = theoretical - draft.actual_deposit

    closing_float = None
    if draft.opening_float is not None and cash_kept is not None:
        closing_float = draft.opening_float + cash_kept

    return ClosureTotals(
        total_card_gross=total_card_gross,
        total_card_actual=total_card_actual,
        total_expenses=total_expenses,
        theoretical_deposit=theoretical,
        cash_kept=cash_kept,
        closing_float=closing_float,
    )


class CashClosureService:
    """Service for entering and reviewing cash register closures."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize cash closure service.

        Args:
            db: Database instance
            client_id: Tenant the closures belong to
        """
        self.db = db
        self.client_id = client_id

    @staticmethod
    def validate(draft: ClosureDraft) -> None:
        """Check the required header fields.

        Raises:
            ValidationError: With one message per missing field
        """
        errors = {}
        if draft.restaurant_id is None:
            errors["restaurant_id"] = "Restaurant is required"
        if draft.closure_date is None:
            errors["closure_date"] = "Closure date is required"
        if draft.revenue_incl_tax is None:
            errors["revenue_incl_tax"] = "Revenue incl. tax is required"
        if draft.actual_deposit is None:
            errors["actual_deposit"] = "Actual bank deposit is required"
        if draft.opening_float is None:
            errors["opening_float"] = "Opening cash float is required"
        if errors:
            raise ValidationError("Invalid cash closure", errors)

    def save(
        self,
        draft: ClosureDraft,
        card_payments: Iterable[CardPaymentDraft] = (),
        expenses: Iterable[ExpenseDraft] = (),
        validate: bool = False,
    ) -> int:
        """Create or update a closure with its card takings and expenses.

        ``card_payments`` and ``expenses`` describe the full content of the
        closure and drive its totals. Card takings with an id are updated,
        the others inserted; only expenses without an id are inserted.

        Args:
            draft: Header values; draft.id set means update
            card_payments: Card takings lines
            expenses: Expense invoice lines
            validate: Mark the closure as validated

        Returns:
            Closure ID

        Raises:
            ValidationError: If a required field is missing
            NotFoundError: If the restaurant or the closure doesn't exist
        """
        self.validate(draft)
        if self.db.get_restaurant(draft.restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(draft.restaurant_id))

        card_payments = list(card_payments)
        expenses = list(expenses)
        self._check_invoices(draft, expenses)
        totals = compute_totals(draft, card_payments, expenses)

        fields = {
            "restaurant_id": draft.restaurant_id,
            "closure_date": draft.closure_date,
            "revenue_excl_tax": draft.revenue_excl_tax,
            "revenue_incl_tax": draft.revenue_incl_tax,
            "opening_float": draft.opening_float,
            "closing_float": totals.closing_float,
            "theoretical_deposit": totals.theoretical_deposit,
            "actual_deposit": draft.actual_deposit,
            "total_card_gross": totals.total_card_gross,
            "total_card_actual": totals.total_card_actual,
            "total_expenses": totals.total_expenses,
            "comment": draft.comment,
        }
        if validate:
            fields["validated"] = True

        if draft.id is None:
            closure_id = self.db.create_cash_closure(self.client_id, fields)
        else:
            if self.db.get_cash_closure(draft.id) is None:
                raise NotFoundError(cash_closure_not_found(draft.id))
            closure_id = draft.id
            self.db.update_cash_closure(closure_id, fields)

        for payment in card_payments:
            if payment.id is None:
                self.db.create_card_payment(
                    closure_id,
                    gross_amount=payment.gross_amount,
                    actual_amount=payment.actual_amount,
                    period=payment.period,
                    comment=payment.comment,
                )
            else:
                self.db.update_card_payment(
                    payment.id,
                    gross_amount=payment.gross_amount,
                    actual_amount=payment.actual_amount,
                    period=payment.period,
                    comment=payment.comment,
                )

        for expense in expenses:
            if expense.id is None:
                self.db.create_closure_expense(
                    closure_id,
                    amount_incl_tax=expense.amount_incl_tax,
                    invoice_reference=expense.invoice_reference,
                    comment=expense.comment,
                    purchase_invoice_id=expense.purchase_invoice_id,
                )

        logger.info(
            "Saved cash closure %d (theoretical deposit %s, validated=%s)",
            closure_id,
            totals.theoretical_deposit,
            validate,
        )
        return closure_id

    def _check_invoices(self, draft: ClosureDraft, expenses: list[ExpenseDraft]) -> None:
        """Linked invoices must exist, belong to the restaurant and be free."""
        errors = {}
        for expense in expenses:
            if expense.id is not None or expense.purchase_invoice_id is None:
                continue
            invoice_id = expense.purchase_invoice_id
            key = f"invoice_{invoice_id}"
            invoice = self.db.get_purchase_invoice(invoice_id)
            if invoice is None:
                errors[key] = purchase_invoice_not_found(invoice_id)
            elif invoice.restaurant_id != draft.restaurant_id:
                errors[key] = f"Purchase invoice {invoice_id} belongs to another restaurant"
            elif any(c != draft.id for c in self.db.list_invoice_closure_ids(invoice_id)):
                errors[key] = f"Purchase invoice {invoice_id} is already attached to a cash closure"
        if errors:
            raise ValidationError("Invalid cash closure expenses", errors)

    def get_closure(self, closure_id: int) -> Optional[CashClosure]:
        """Get closure by ID."""
        return self.db.get_cash_closure(closure_id)

    def list_closures(
        self,
        restaurant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CashClosure]:
        """List closures, newest first."""
        return self.db.list_cash_closures(
            self.client_id, restaurant_id=restaurant_id, start_date=start_date, end_date=end_date
        )

    def list_card_payments(self, closure_id: int) -> list[CardPayment]:
        """List card takings of a closure."""
        return self.db.list_card_payments(closure_id)

    def list_expenses(self, closure_id: int) -> list[ClosureExpense]:
        """List expense invoices of a closure."""
        return self.db.list_closure_expenses(closure_id)

    def delete_card_payment(self, payment_id: int) -> None:
        """Delete card takings."""
        self.db.delete_card_payment(payment_id)

    def delete_expense(self, expense_id: int) -> None:
        """Detach an expense invoice from its closure."""
        self.db.delete_closure_expense(expense_id)

    def delete_closure(self, closure_id: int) -> None:
        """Delete a closure with its card takings and expenses.

        Raises:
            NotFoundError: If closure not found
        """
        if self.db.get_cash_closure(closure_id) is None:
            raise NotFoundError(cash_closure_not_found(closure_id))
        self.db.delete_cash_closure(closure_id)
