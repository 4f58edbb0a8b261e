"""SQLAlchemy models for restops database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Time,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Restaurant(Base):
    """Restaurant (entité) model."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "code", name="uq_restaurant_code"),)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    iban = Column(String, nullable=False)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "code", name="uq_bank_account_code"),)

    # Relationships
    entries = relationship("BankEntry", back_populates="bank_account")


class ImportFormat(Base):
    """Statement file format model."""

    __tablename__ = "import_formats"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    bank = Column(String, nullable=True)
    extension = Column(String, default="csv", nullable=False)
    encoding = Column(String, default="utf-8", nullable=False)
    separator = Column(String, default=";", nullable=False)
    first_data_line = Column(Integer, default=1, nullable=False)
    # One "name:type" descriptor per line
    columns = Column(Text, default="", nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "code", name="uq_import_format_code"),)


class StatementImport(Base):
    """Statement import batch header model."""

    __tablename__ = "statement_imports"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    import_uuid = Column(String(36), nullable=False, unique=True)
    file_name = Column(String(255), nullable=False)
    format_id = Column(Integer, ForeignKey("import_formats.id"), nullable=False)
    line_count = Column(Integer, default=0, nullable=False)
    status = Column(String, nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "file_name", name="uq_statement_file_name"),)

    # Relationships
    lines = relationship("StatementLine", back_populates="statement_import", cascade="all, delete-orphan")


class StatementLine(Base):
    """Imported statement row model."""

    __tablename__ = "statement_lines"

    id = Column(Integer, primary_key=True)
    import_id = Column(Integer, ForeignKey("statement_imports.id"), nullable=False, index=True)
    client_id = Column(String, nullable=False, index=True)
    operation_date = Column(Date, nullable=True)
    value_date = Column(Date, nullable=True)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    balance = Column(Numeric(12, 2), nullable=True)
    reference = Column(String, nullable=True)
    account_number = Column(String, nullable=True)
    currency = Column(String, nullable=True)
    source_row = Column(Text, nullable=True)
    status = Column(String, nullable=False, index=True)
    message = Column(Text, nullable=True)
    bank_entry_id = Column(Integer, ForeignKey("bank_entries.id"), nullable=True)

    # Relationships
    statement_import = relationship("StatementImport", back_populates="lines")


class BankEntry(Base):
    """Bank ledger entry model."""

    __tablename__ = "bank_entries"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    operation_date = Column(Date, nullable=False)
    value_date = Column(Date, nullable=True)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    balance = Column(Numeric(12, 2), nullable=True)
    reference = Column(String, nullable=True)
    statement_line_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    bank_account = relationship("BankAccount", back_populates="entries")


class CashClosure(Base):
    """Cash register closure header model."""

    __tablename__ = "cash_closures"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    closure_date = Column(Date, nullable=False)
    revenue_excl_tax = Column(Numeric(12, 2), nullable=True)
    revenue_incl_tax = Column(Numeric(12, 2), nullable=True)
    opening_float = Column(Numeric(12, 2), nullable=True)
    closing_float = Column(Numeric(12, 2), nullable=True)
    theoretical_deposit = Column(Numeric(12, 2), nullable=True)
    actual_deposit = Column(Numeric(12, 2), nullable=True)
    total_card_gross = Column(Numeric(12, 2), default=0, nullable=False)
    total_card_actual = Column(Numeric(12, 2), default=0, nullable=False)
    total_expenses = Column(Numeric(12, 2), default=0, nullable=False)
    validated = Column(Boolean, default=False, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    card_payments = relationship("CardPayment", back_populates="closure", cascade="all, delete-orphan")
    expenses = relationship("ClosureExpense", back_populates="closure", cascade="all, delete-orphan")


class CardPayment(Base):
    """Card terminal takings of a closure."""

    __tablename__ = "closure_card_payments"

    id = Column(Integer, primary_key=True)
    closure_id = Column(Integer, ForeignKey("cash_closures.id"), nullable=False)
    period = Column(String, nullable=True)
    gross_amount = Column(Numeric(12, 2), default=0, nullable=False)
    actual_amount = Column(Numeric(12, 2), default=0, nullable=False)
    comment = Column(Text, nullable=True)

    # Relationships
    closure = relationship("CashClosure", back_populates="card_payments")


class ClosureExpense(Base):
    """Expense invoice paid from the till."""

    __tablename__ = "closure_expenses"

    id = Column(Integer, primary_key=True)
    closure_id = Column(Integer, ForeignKey("cash_closures.id"), nullable=False)
    invoice_reference = Column(String, nullable=True)
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=True)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    comment = Column(Text, nullable=True)

    # Relationships
    closure = relationship("CashClosure", back_populates="expenses")
    purchase_invoice = relationship("PurchaseInvoice")


class PaymentMode(Base):
    """Payment mode model; cash_payment marks modes paid from the till."""

    __tablename__ = "payment_modes"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    cash_payment = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "code", name="uq_payment_mode_code"),)


class Supplier(Base):
    """Third party (tiers) invoices are received from."""

    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("client_id", "name", name="uq_supplier_name"),)


class PurchaseInvoice(Base):
    """Purchase invoice header model."""

    __tablename__ = "purchase_invoices"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    payment_mode_id = Column(Integer, ForeignKey("payment_modes.id"), nullable=False)
    invoice_date = Column(Date, nullable=False)
    document_number = Column(String, nullable=True)
    amount_excl_tax = Column(Numeric(12, 2), nullable=False)
    amount_vat = Column(Numeric(12, 2), nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    supplier = relationship("Supplier")
    payment_mode = relationship("PaymentMode")


class FlowCategory(Base):
    """Financial flow category model."""

    __tablename__ = "flow_categories"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    flow_type = Column(String, nullable=False)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)


class FlowSubcategory(Base):
    """Financial flow subcategory model."""

    __tablename__ = "flow_subcategories"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("flow_categories.id"), nullable=False)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)


class ServiceType(Base):
    """Restaurant service type model."""

    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    subcategory_id = Column(Integer, ForeignKey("flow_subcategories.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)


class OpeningDays(Base):
    """Planned opening days per restaurant and month."""

    __tablename__ = "opening_days"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    open_days = Column(Integer, nullable=False)
    planned_food_cost_rate = Column(Numeric(6, 2), nullable=True)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "year", "month", name="uq_opening_days_period"),
    )


class CABudget(Base):
    """Monthly revenue budget header model."""

    __tablename__ = "ca_budgets"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    category_id = Column(Integer, ForeignKey("flow_categories.id"), nullable=False)
    amount_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    open_days = Column(Integer, nullable=True)
    covers = Column(Integer, nullable=True)
    average_cover_price = Column(Numeric(12, 2), nullable=True)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "restaurant_id", "year", "month", "category_id", name="uq_ca_budget_period"
        ),
    )

    # Relationships
    details = relationship("CABudgetDetail", back_populates="budget", cascade="all, delete-orphan")


class CABudgetDetail(Base):
    """Revenue budget line per service type."""

    __tablename__ = "ca_budget_details"

    id = Column(Integer, primary_key=True)
    budget_id = Column(Integer, ForeignKey("ca_budgets.id"), nullable=False)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False)
    subcategory_id = Column(Integer, ForeignKey("flow_subcategories.id"), nullable=False)
    amount_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    open_days = Column(Integer, nullable=True)
    covers = Column(Integer, nullable=True)
    average_cover_price = Column(Numeric(12, 2), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "budget_id", "service_type_id", "subcategory_id", name="uq_ca_budget_detail"
        ),
    )

    # Relationships
    budget = relationship("CABudget", back_populates="details")


class CAActual(Base):
    """Actual revenue per restaurant, day and category."""

    __tablename__ = "ca_actuals"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    sale_date = Column(Date, nullable=False)
    category_id = Column(Integer, ForeignKey("flow_categories.id"), nullable=False)
    amount_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "sale_date", "category_id", name="uq_ca_actual"),
    )


class CAActualDetail(Base):
    """Actual revenue per service type."""

    __tablename__ = "ca_actual_details"

    id = Column(Integer, primary_key=True)
    actual_id = Column(Integer, ForeignKey("ca_actuals.id"), nullable=False)
    service_type_id = Column(Integer, ForeignKey("service_types.id"), nullable=False)
    amount_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("actual_id", "service_type_id", name="uq_ca_actual_detail"),
    )


class CAActualHourly(Base):
    """Actual revenue per hour and sales document."""

    __tablename__ = "ca_actual_hourly"

    id = Column(Integer, primary_key=True)
    detail_id = Column(Integer, ForeignKey("ca_actual_details.id"), nullable=False)
    hour = Column(String(5), nullable=False)
    # Empty string stands for "no document" so the unique key stays usable
    document = Column(String, default="", nullable=False)
    unit_price_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    unit_price_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_excl_tax = Column(Numeric(12, 2), default=0, nullable=False)
    amount_incl_tax = Column(Numeric(12, 2), default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("detail_id", "hour", "document", name="uq_ca_actual_hourly"),
    )


class JobFunction(Base):
    """Job function model."""

    __tablename__ = "job_functions"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)


class ContractType(Base):
    """Contract type model."""

    __tablename__ = "contract_types"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    label = Column(String, nullable=False)


class Employee(Base):
    """Staff member model."""

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    staff_number = Column(String, nullable=True)
    short_code = Column(String, nullable=True)
    last_name = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    contracts = relationship("EmploymentContract", cascade="all, delete-orphan")
    assignments = relationship("Assignment", cascade="all, delete-orphan")


class EmploymentContract(Base):
    """Employment contract history model."""

    __tablename__ = "employment_contracts"

    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    contract_type_id = Column(Integer, ForeignKey("contract_types.id"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)


class Assignment(Base):
    """Assignment of an employee to a restaurant and job function."""

    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    job_function_id = Column(Integer, ForeignKey("job_functions.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    presence_rate = Column(Numeric(5, 2), nullable=True)


class SalaryHistory(Base):
    """Pay element history model."""

    __tablename__ = "salary_history"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    contract_id = Column(Integer, ForeignKey("employment_contracts.id"), nullable=True)
    subcategory_id = Column(Integer, ForeignKey("flow_subcategories.id"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)


class HRSettings(Base):
    """General HR parameters model."""

    __tablename__ = "hr_settings"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    employer_rate = Column(Numeric(6, 3), default=0, nullable=False)
    employee_rate = Column(Numeric(6, 3), default=0, nullable=False)
    staff_number_prefix = Column(String, nullable=True)
    staff_number_counter = Column(Integer, nullable=True)
    staff_number_width = Column(Integer, nullable=True)
    active = Column(Boolean, default=True, nullable=False)


class HRSubcategorySetting(Base):
    """Social charge settings of a pay subcategory."""

    __tablename__ = "hr_subcategory_settings"

    id = Column(Integer, primary_key=True)
    client_id = Column(String, nullable=False, index=True)
    subcategory_id = Column(Integer, ForeignKey("flow_subcategories.id"), nullable=False)
    employer_charges = Column(Boolean, default=False, nullable=False)
    employee_charges = Column(Boolean, default=False, nullable=False)
    employer_charge_subcategory_id = Column(
        Integer, ForeignKey("flow_subcategories.id"), nullable=True
    )
    employee_charge_subcategory_id = Column(
        Integer, ForeignKey("flow_subcategories.id"), nullable=True
    )
    active = Column(Boolean, default=True, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
