"""Tests for purchase invoices and their link to cash closures."""

import pytest
from datetime import date
from decimal import Decimal

from restops.domain.cash_closure import ClosureDraft, ExpenseDraft
from restops.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


@pytest.fixture
def cash_mode(invoice_service):
    """Create an active cash payment mode."""
    invoice_service.create_payment_mode("esp", "Espèces", cash_payment=True)
    return invoice_service.get_payment_mode_by_code("ESP")


@pytest.fixture
def transfer_mode(invoice_service):
    """Create a payment mode not paid from the till."""
    invoice_service.create_payment_mode("VIR", "Virement")
    return invoice_service.get_payment_mode_by_code("VIR")


def _invoice(invoice_service, restaurant_id, mode_id, **overrides):
    values = dict(
        restaurant_id=restaurant_id,
        supplier_name="Metro",
        payment_mode_id=mode_id,
        invoice_date=date(2026, 3, 2),
        amount_excl_tax=Decimal("35.75"),
        amount_vat=Decimal("7.15"),
        document_number="F-1021",
    )
    values.update(overrides)
    return invoice_service.create_invoice(**values)


def _closure(restaurant_id):
    return ClosureDraft(
        restaurant_id=restaurant_id,
        closure_date=date(2026, 3, 3),
        revenue_incl_tax=Decimal("900.00"),
        actual_deposit=Decimal("300.00"),
        opening_float=Decimal("150.00"),
    )


def test_create_payment_mode(invoice_service, cash_mode):
    """Test payment mode codes are upper-cased and unique."""
    assert cash_mode.code == "ESP"
    assert cash_mode.cash_payment is True
    assert cash_mode.active is True

    with pytest.raises(ConflictError):
        invoice_service.create_payment_mode("ESP", "Cash again")

    with pytest.raises(ValidationError) as exc_info:
        invoice_service.create_payment_mode("", "")
    assert set(exc_info.value.errors) == {"code", "label"}


def test_list_cash_payment_modes(invoice_service, cash_mode, transfer_mode):
    """Test filtering payment modes paid from the till."""
    assert [m.code for m in invoice_service.list_payment_modes()] == ["ESP", "VIR"]
    assert [m.code for m in invoice_service.list_payment_modes(cash_only=True)] == ["ESP"]


def test_create_invoice_defaults_amount_incl_tax(invoice_service, sample_restaurant, cash_mode):
    """Test amount incl. tax is excl. tax plus VAT when not given."""
    invoice_id = _invoice(invoice_service, sample_restaurant.id, cash_mode.id)

    invoice = invoice_service.get_invoice(invoice_id)
    assert invoice.amount_incl_tax == Decimal("42.90")
    assert invoice.supplier_name == "Metro"
    assert invoice.payment_mode_label == "Espèces"
    assert invoice.document_number == "F-1021"


def test_create_invoice_reuses_supplier(invoice_service, sample_restaurant, cash_mode):
    """Test suppliers are matched by name regardless of case."""
    _invoice(invoice_service, sample_restaurant.id, cash_mode.id)
    _invoice(invoice_service, sample_restaurant.id, cash_mode.id, supplier_name="METRO")

    assert [s.name for s in invoice_service.list_suppliers()] == ["Metro"]


def test_create_invoice_validation(invoice_service, sample_restaurant):
    """Test every invalid field is reported."""
    with pytest.raises(ValidationError) as exc_info:
        invoice_service.create_invoice(
            restaurant_id=sample_restaurant.id,
            supplier_name=" ",
            payment_mode_id=None,
            invoice_date=None,
            amount_excl_tax=Decimal("0"),
            amount_vat=None,
        )

    assert set(exc_info.value.errors) == {
        "supplier",
        "payment_mode_id",
        "invoice_date",
        "amount_excl_tax",
        "amount_vat",
        "amount_incl_tax",
    }


def test_create_invoice_unknown_restaurant(invoice_service, cash_mode):
    """Test creating an invoice for a missing restaurant."""
    with pytest.raises(NotFoundError):
        _invoice(invoice_service, 999, cash_mode.id)


def test_list_invoices_newest_first(invoice_service, sample_restaurant, cash_mode):
    """Test invoices are listed by date, newest first."""
    older = _invoice(invoice_service, sample_restaurant.id, cash_mode.id, invoice_date=date(2026, 2, 1))
    newer = _invoice(invoice_service, sample_restaurant.id, cash_mode.id)

    assert [i.id for i in invoice_service.list_invoices()] == [newer, older]
    assert [i.id for i in invoice_service.list_invoices(start_date=date(2026, 3, 1))] == [newer]


def test_cash_invoices(invoice_service, restaurant_service, sample_restaurant, cash_mode, transfer_mode):
    """Test only the restaurant's invoices paid with a cash mode are offered."""
    other = restaurant_service.create_restaurant("LYO01", "Lyon")
    cash_invoice = _invoice(invoice_service, sample_restaurant.id, cash_mode.id)
    _invoice(invoice_service, sample_restaurant.id, transfer_mode.id)
    _invoice(invoice_service, other, cash_mode.id)

    assert [i.id for i in invoice_service.cash_invoices(sample_restaurant.id)] == [cash_invoice]


def test_cash_invoices_without_cash_mode(invoice_service, sample_restaurant, transfer_mode):
    """Test no invoice is offered when no cash payment mode exists."""
    _invoice(invoice_service, sample_restaurant.id, transfer_mode.id)

    assert invoice_service.cash_invoices(sample_restaurant.id) == []


def test_closure_expense_from_invoice(invoice_service, closure_service, sample_restaurant, cash_mode):
    """Test an invoice paid from the till becomes a linked closure expense."""
    invoice = invoice_service.get_invoice(_invoice(invoice_service, sample_restaurant.id, cash_mode.id))

    closure_id = closure_service.save(
        _closure(sample_restaurant.id), expenses=[ExpenseDraft.from_invoice(invoice)]
    )

    closure = closure_service.get_closure(closure_id)
    assert closure.total_expenses == Decimal("42.90")
    assert closure.theoretical_deposit == Decimal("857.10")
    expenses = closure_service.list_expenses(closure_id)
    assert [(e.purchase_invoice_id, e.invoice_reference) for e in expenses] == [(invoice.id, "F-1021")]

    # Attached invoices are no longer offered, except to their own closure
    assert invoice_service.cash_invoices(sample_restaurant.id) == []
    assert [i.id for i in invoice_service.cash_invoices(sample_restaurant.id, closure_id)] == [invoice.id]


def test_closure_rejects_invoice_already_attached(invoice_service, closure_service, sample_restaurant, cash_mode):
    """Test an invoice can only be paid by one closure."""
    invoice = invoice_service.get_invoice(_invoice(invoice_service, sample_restaurant.id, cash_mode.id))
    closure_service.save(_closure(sample_restaurant.id), expenses=[ExpenseDraft.from_invoice(invoice)])

    with pytest.raises(ValidationError) as exc_info:
        closure_service.save(_closure(sample_restaurant.id), expenses=[ExpenseDraft.from_invoice(invoice)])

    assert f"invoice_{invoice.id}" in exc_info.value.errors
    assert len(closure_service.list_closures()) == 1


def test_closure_rejects_invoice_of_other_restaurant(
    invoice_service, closure_service, restaurant_service, sample_restaurant, cash_mode
):
    """Test a closure cannot pay another restaurant's invoice."""
    other = restaurant_service.create_restaurant("LYO01", "Lyon")
    invoice = invoice_service.get_invoice(_invoice(invoice_service, other, cash_mode.id))

    with pytest.raises(ValidationError) as exc_info:
        closure_service.save(_closure(sample_restaurant.id), expenses=[ExpenseDraft.from_invoice(invoice)])

    assert "another restaurant" in exc_info.value.errors[f"invoice_{invoice.id}"]


def test_closure_rejects_missing_invoice(closure_service, sample_restaurant):
    """Test linking a closure expense to an unknown invoice."""
    expense = ExpenseDraft(amount_incl_tax=Decimal("10.00"), purchase_invoice_id=999)

    with pytest.raises(ValidationError) as exc_info:
        closure_service.save(_closure(sample_restaurant.id), expenses=[expense])

    assert exc_info.value.errors == {"invoice_999": "Purchase invoice 999 not found"}


def test_delete_invoice(invoice_service, closure_service, sample_restaurant, cash_mode):
    """Test an attached invoice cannot be deleted until its closure is."""
    invoice = invoice_service.get_invoice(_invoice(invoice_service, sample_restaurant.id, cash_mode.id))
    closure_id = closure_service.save(
        _closure(sample_restaurant.id), expenses=[ExpenseDraft.from_invoice(invoice)]
    )

    with pytest.raises(DependencyError):
        invoice_service.delete_invoice(invoice.id)

    closure_service.delete_closure(closure_id)
    invoice_service.delete_invoice(invoice.id)

    assert invoice_service.get_invoice(invoice.id) is None
    with pytest.raises(NotFoundError):
        invoice_service.delete_invoice(invoice.id)
