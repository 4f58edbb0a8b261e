"""Domain model entities for restops.

These are pure data classes representing business concepts, independent of
database schema. Amounts are Decimals; every record belongs to a client
contract (the tenant) through ``client_id``.
"""

from dataclasses import dataclass
from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum
from typing import Optional

DEFAULT_CLIENT_ID = "default"


class ImportStatus(str, Enum):
    """Status of a statement import batch."""

    IN_PROGRESS = "EN_COURS"
    COMPLETED = "TERMINE"
    FAILED = "ERREUR"


class LineStatus(str, Enum):
    """Processing status of an imported statement line."""

    PENDING = "A TRAITER"
    CREATED = "CREER"
    DUPLICATE = "DOUBLON"
    ERROR = "ERREUR"


class FlowType(str, Enum):
    """Direction of a financial flow category."""

    INCOME = "produit"
    EXPENSE = "charge"


@dataclass(frozen=True)
class Restaurant:
    """Restaurant (entité) domain entity."""

    id: int
    client_id: str
    code: str
    label: str
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    client_id: str
    code: str
    label: str
    iban: str
    restaurant_id: Optional[int]
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class ImportFormat:
    """Statement file format domain entity."""

    id: int
    client_id: str
    code: str
    label: str
    bank: Optional[str]
    extension: str
    encoding: str
    separator: str
    first_data_line: int
    columns: tuple[str, ...]
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class StatementImport:
    """Statement import batch header."""

    id: int
    client_id: str
    import_uuid: str
    file_name: str
    format_id: int
    line_count: int
    status: ImportStatus
    message: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class StatementLine:
    """One imported statement row awaiting or after reconciliation."""

    id: int
    import_id: int
    client_id: str
    operation_date: Optional[date]
    value_date: Optional[date]
    description: Optional[str]
    amount: Optional[Decimal]
    balance: Optional[Decimal]
    reference: Optional[str]
    account_number: Optional[str]
    currency: Optional[str]
    source_row: Optional[str]
    status: LineStatus
    message: Optional[str]
    bank_entry_id: Optional[int]


@dataclass(frozen=True)
class BankEntry:
    """Reconciled bank ledger entry (écriture bancaire)."""

    id: int
    client_id: str
    bank_account_id: int
    operation_date: date
    value_date: Optional[date]
    description: Optional[str]
    amount: Optional[Decimal]
    balance: Optional[Decimal]
    reference: Optional[str]
    statement_line_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class CashClosure:
    """End-of-day cash register closure (fermeture de caisse)."""

    id: int
    client_id: str
    restaurant_id: int
    closure_date: date
    revenue_excl_tax: Optional[Decimal]
    revenue_incl_tax: Optional[Decimal]
    opening_float: Optional[Decimal]
    closing_float: Optional[Decimal]
    theoretical_deposit: Optional[Decimal]
    actual_deposit: Optional[Decimal]
    total_card_gross: Decimal
    total_card_actual: Decimal
    total_expenses: Decimal
    validated: bool
    comment: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CardPayment:
    """Card terminal takings attached to a cash closure."""

    id: int
    closure_id: int
    period: Optional[str]
    gross_amount: Decimal
    actual_amount: Decimal
    comment: Optional[str]


@dataclass(frozen=True)
class ClosureExpense:
    """Expense invoice paid from the till during a cash closure."""

    id: int
    closure_id: int
    invoice_reference: Optional[str]
    amount_incl_tax: Decimal
    comment: Optional[str]
    purchase_invoice_id: Optional[int] = None


@dataclass(frozen=True)
class PaymentMode:
    """Payment mode; cash_payment marks modes paid from the till."""

    id: int
    client_id: str
    code: str
    label: str
    cash_payment: bool
    active: bool


@dataclass(frozen=True)
class Supplier:
    """Third party (tiers) invoices are received from."""

    id: int
    client_id: str
    name: str
    active: bool


@dataclass(frozen=True)
class PurchaseInvoice:
    """Purchase invoice (facture d'achat) header."""

    id: int
    client_id: str
    restaurant_id: int
    supplier_id: int
    payment_mode_id: int
    invoice_date: date
    document_number: Optional[str]
    amount_excl_tax: Decimal
    amount_vat: Decimal
    amount_incl_tax: Decimal
    comment: Optional[str]
    supplier_name: str = ""
    payment_mode_label: str = ""


@dataclass(frozen=True)
class FlowCategory:
    """Financial flow category; restaurant_id None means shared by all."""

    id: int
    client_id: str
    code: str
    label: str
    flow_type: FlowType
    restaurant_id: Optional[int]
    active: bool


@dataclass(frozen=True)
class FlowSubcategory:
    """Financial flow subcategory."""

    id: int
    client_id: str
    category_id: int
    code: str
    label: str
    active: bool


@dataclass(frozen=True)
class ServiceType:
    """Restaurant service (lunch, dinner...) with its time slot."""

    id: int
    client_id: str
    restaurant_id: int
    code: str
    label: str
    start_time: Optional[time]
    end_time: Optional[time]
    subcategory_id: Optional[int]
    active: bool


@dataclass(frozen=True)
class OpeningDays:
    """Planned opening days of a restaurant for one month."""

    id: int
    client_id: str
    restaurant_id: int
    year: int
    month: int
    open_days: int
    planned_food_cost_rate: Optional[Decimal]


@dataclass(frozen=True)
class CABudget:
    """Monthly revenue budget header."""

    id: int
    client_id: str
    restaurant_id: int
    year: int
    month: int
    category_id: int
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal
    open_days: Optional[int]
    covers: Optional[int]
    average_cover_price: Optional[Decimal]
    comment: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CABudgetDetail:
    """Revenue budget line for one service type."""

    id: int
    budget_id: int
    service_type_id: int
    subcategory_id: int
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal
    open_days: Optional[int]
    covers: Optional[int]
    average_cover_price: Optional[Decimal]


@dataclass(frozen=True)
class CAActual:
    """Actual revenue of a restaurant for a day and category."""

    id: int
    client_id: str
    restaurant_id: int
    sale_date: date
    category_id: int
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal


@dataclass(frozen=True)
class CAActualDetail:
    """Actual revenue split by service type."""

    id: int
    actual_id: int
    service_type_id: int
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal


@dataclass(frozen=True)
class CAActualHourly:
    """Actual revenue by hour and sales document."""

    id: int
    detail_id: int
    hour: str
    document: Optional[str]
    unit_price_excl_tax: Decimal
    unit_price_incl_tax: Decimal
    amount_excl_tax: Decimal
    amount_incl_tax: Decimal


@dataclass(frozen=True)
class JobFunction:
    """Job function (fonction) such as cook or waiter."""

    id: int
    client_id: str
    code: str
    label: str
    display_order: int
    active: bool


@dataclass(frozen=True)
class ContractType:
    """Employment contract type."""

    id: int
    client_id: str
    code: str
    label: str


@dataclass(frozen=True)
class Employee:
    """Staff member (personnel)."""

    id: int
    client_id: str
    staff_number: Optional[str]
    short_code: Optional[str]
    last_name: str
    first_name: str
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class EmploymentContract:
    """Contract history entry of an employee."""

    id: int
    employee_id: int
    contract_type_id: Optional[int]
    start_date: date
    end_date: Optional[date]


@dataclass(frozen=True)
class Assignment:
    """Assignment (affectation) of an employee to a restaurant and function."""

    id: int
    employee_id: int
    restaurant_id: int
    job_function_id: int
    start_date: date
    end_date: Optional[date]
    presence_rate: Optional[Decimal]

    def is_active_on(self, day: date) -> bool:
        """Return True when the assignment covers the given day."""
        return self.start_date <= day and (self.end_date is None or self.end_date >= day)


@dataclass(frozen=True)
class SalaryHistory:
    """Monthly pay element of an employee booked on a subcategory."""

    id: int
    client_id: str
    employee_id: int
    contract_id: Optional[int]
    subcategory_id: Optional[int]
    start_date: date
    end_date: Optional[date]
    amount: Decimal


@dataclass(frozen=True)
class HRSettings:
    """General HR parameters valid over a period."""

    id: int
    client_id: str
    start_date: date
    end_date: Optional[date]
    employer_rate: Decimal
    employee_rate: Decimal
    staff_number_prefix: Optional[str]
    staff_number_counter: Optional[int]
    staff_number_width: Optional[int]
    active: bool

    def applies_on(self, day: date) -> bool:
        """Return True when the settings are valid on the given day."""
        return self.start_date <= day and (self.end_date is None or self.end_date >= day)


@dataclass(frozen=True)
class HRSubcategorySetting:
    """Which social charges a pay subcategory bears and where they are booked."""

    id: int
    client_id: str
    subcategory_id: int
    employer_charges: bool
    employee_charges: bool
    employer_charge_subcategory_id: Optional[int]
    employee_charge_subcategory_id: Optional[int]
    active: bool

