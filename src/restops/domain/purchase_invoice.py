"""Purchase invoice (facture d'achat) domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from restops.database.base import Database
from restops.domain.entities import DEFAULT_CLIENT_ID, PaymentMode, PurchaseInvoice, Supplier
from restops.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    duplicate_code,
    purchase_invoice_delete_blocked,
    purchase_invoice_not_found,
    restaurant_not_found,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PurchaseInvoiceService:
    """Service for purchase invoices and the payment modes they are settled with."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize purchase invoice service.

        Args:
            db: Database instance
            client_id: Tenant the invoices belong to
        """
        self.db = db
        self.client_id = client_id

    # Payment modes
    def create_payment_mode(self, code: str, label: str, cash_payment: bool = False) -> int:
        """Create a payment mode.

        Args:
            code: Mode code, stored upper-cased
            label: Display name
            cash_payment: Invoices settled with this mode are paid from the till

        Returns:
            Payment mode ID

        Raises:
            ValidationError: If code or label is empty
            ConflictError: If the code is already used
        """
        code = (code or "").strip().upper()
        label = (label or "").strip()
        errors = {}
        if not code:
            errors["code"] = "Code is required"
        if not label:
            errors["label"] = "Label is required"
        if errors:
            raise ValidationError("Invalid payment mode", errors)

        if self.db.get_payment_mode_by_code(self.client_id, code) is not None:
            raise ConflictError(duplicate_code("Payment mode", code))

        return self.db.create_payment_mode(self.client_id, code, label, cash_payment=cash_payment)

    def get_payment_mode_by_code(self, code: str) -> Optional[PaymentMode]:
        """Get payment mode by code (case-insensitive)."""
        return self.db.get_payment_mode_by_code(self.client_id, (code or "").strip().upper())

    def list_payment_modes(self, active_only: bool = True, cash_only: bool = False) -> list[PaymentMode]:
        """List payment modes of the client."""
        return self.db.list_payment_modes(self.client_id, active_only=active_only, cash_only=cash_only)

    # Suppliers
    def get_or_create_supplier(self, name: str) -> Supplier:
        """Find a supplier by name, creating it when unknown.

        Raises:
            ValidationError: If name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Invalid supplier", {"supplier": "Supplier is required"})

        supplier = self.db.get_supplier_by_name(self.client_id, name)
        if supplier is None:
            supplier_id = self.db.create_supplier(self.client_id, name)
            supplier = self.db.get_supplier(supplier_id)
        return supplier

    def list_suppliers(self) -> list[Supplier]:
        """List suppliers of the client."""
        return self.db.list_suppliers(self.client_id)

    # Invoices
    def create_invoice(
        self,
        restaurant_id: Optional[int],
        supplier_name: Optional[str],
        payment_mode_id: Optional[int],
        invoice_date: Optional[date],
        amount_excl_tax: Optional[Decimal],
        amount_vat: Optional[Decimal],
        amount_incl_tax: Optional[Decimal] = None,
        document_number: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> int:
        """Record a purchase invoice header.

        The amount incl. tax defaults to excl. tax plus VAT.

        Returns:
            Invoice ID

        Raises:
            ValidationError: With one message per invalid field
            NotFoundError: If the restaurant doesn't exist
        """
        if amount_incl_tax is None and amount_excl_tax is not None and amount_vat is not None:
            amount_incl_tax = amount_excl_tax + amount_vat

        errors = {}
        if restaurant_id is None:
            errors["restaurant_id"] = "Restaurant is required"
        if not (supplier_name or "").strip():
            errors["supplier"] = "Supplier is required"
        if invoice_date is None:
            errors["invoice_date"] = "Invoice date is required"
        if amount_excl_tax is None or amount_excl_tax <= ZERO:
            errors["amount_excl_tax"] = "Amount excl. tax must be greater than 0"
        if amount_vat is None:
            errors["amount_vat"] = "VAT amount is required"
        if amount_incl_tax is None or amount_incl_tax <= ZERO:
            errors["amount_incl_tax"] = "Amount incl. tax must be greater than 0"
        if payment_mode_id is None:
            errors["payment_mode_id"] = "Payment mode is required"
        elif self.db.get_payment_mode(payment_mode_id) is None:
            errors["payment_mode_id"] = f"Payment mode {payment_mode_id} not found"
        if errors:
            raise ValidationError("Invalid purchase invoice", errors)

        if self.db.get_restaurant(restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(restaurant_id))

        supplier = self.get_or_create_supplier(supplier_name)
        invoice_id = self.db.create_purchase_invoice(
            self.client_id,
            {
                "restaurant_id": restaurant_id,
                "supplier_id": supplier.id,
                "payment_mode_id": payment_mode_id,
                "invoice_date": invoice_date,
                "document_number": (document_number or "").strip() or None,
                "amount_excl_tax": amount_excl_tax,
                "amount_vat": amount_vat,
                "amount_incl_tax": amount_incl_tax,
                "comment": comment,
            },
        )
        logger.info("Created purchase invoice %d from %s (%s)", invoice_id, supplier.name, amount_incl_tax)
        return invoice_id

    def get_invoice(self, invoice_id: int) -> Optional[PurchaseInvoice]:
        """Get purchase invoice by ID."""
        return self.db.get_purchase_invoice(invoice_id)

    def list_invoices(
        self,
        restaurant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PurchaseInvoice]:
        """List purchase invoices, newest first."""
        return self.db.list_purchase_invoices(
            self.client_id, restaurant_id=restaurant_id, start_date=start_date, end_date=end_date
        )

    def cash_invoices(self, restaurant_id: int, closure_id: Optional[int] = None) -> list[PurchaseInvoice]:
        """Invoices of a restaurant that can be paid from the till.

        Only invoices settled with an active cash payment mode are returned.
        Invoices already attached to a closure other than ``closure_id`` are
        left out.
        """
        modes = self.db.list_payment_modes(self.client_id, active_only=True, cash_only=True)
        if not modes:
            return []

        invoices = self.db.list_purchase_invoices(
            self.client_id, restaurant_id=restaurant_id, payment_mode_ids=[m.id for m in modes]
        )
        available = []
        for invoice in invoices:
            closure_ids = self.db.list_invoice_closure_ids(invoice.id)
            if not closure_ids or closure_ids == [closure_id]:
                available.append(invoice)
        return available

    def delete_invoice(self, invoice_id: int) -> None:
        """Delete a purchase invoice.

        Raises:
            NotFoundError: If invoice not found
            DependencyError: If the invoice is attached to a cash closure
        """
        if self.db.get_purchase_invoice(invoice_id) is None:
            raise NotFoundError(purchase_invoice_not_found(invoice_id))

        closure_ids = self.db.list_invoice_closure_ids(invoice_id)
        if closure_ids:
            raise DependencyError(purchase_invoice_delete_blocked(invoice_id, closure_ids))

        self.db.delete_purchase_invoice(invoice_id)
