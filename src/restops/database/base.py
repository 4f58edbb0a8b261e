"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date, time
from decimal import Decimal
from typing import Any, Iterable, Optional

from restops.domain.entities import (
    Assignment,
    BankAccount,
    BankEntry,
    CAActual,
    CAActualDetail,
    CAActualHourly,
    CABudget,
    CABudgetDetail,
    CardPayment,
    CashClosure,
    ClosureExpense,
    ContractType,
    Employee,
    EmploymentContract,
    FlowCategory,
    FlowSubcategory,
    HRSettings,
    HRSubcategorySetting,
    ImportFormat,
    ImportStatus,
    JobFunction,
    LineStatus,
    OpeningDays,
    PaymentMode,
    PurchaseInvoice,
    Restaurant,
    SalaryHistory,
    ServiceType,
    StatementImport,
    StatementLine,
    Supplier,
)


class Database(ABC):
    """Abstract database interface for restops."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Restaurant operations
    @abstractmethod
    def create_restaurant(self, client_id: str, code: str, label: str) -> int:
        """Create a restaurant. Returns restaurant ID."""
        pass

    @abstractmethod
    def get_restaurant(self, restaurant_id: int) -> Optional[Restaurant]:
        """Get restaurant by ID."""
        pass

    @abstractmethod
    def get_restaurant_by_code(self, client_id: str, code: str) -> Optional[Restaurant]:
        """Get restaurant by code."""
        pass

    @abstractmethod
    def list_restaurants(self, client_id: str, active_only: bool = True) -> list[Restaurant]:
        """List restaurants ordered by label."""
        pass

    @abstractmethod
    def update_restaurant(
        self, restaurant_id: int, label: Optional[str] = None, active: Optional[bool] = None
    ) -> None:
        """Update restaurant label and/or active flag."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        client_id: str,
        code: str,
        label: str,
        iban: str,
        restaurant_id: Optional[int] = None,
    ) -> int:
        """Create a bank account. Returns account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def get_bank_account_by_code(self, client_id: str, code: str) -> Optional[BankAccount]:
        """Get bank account by code."""
        pass

    @abstractmethod
    def list_bank_accounts(self, client_id: str, active_only: bool = False) -> list[BankAccount]:
        """List bank accounts ordered by code."""
        pass

    @abstractmethod
    def update_bank_account(self, account_id: int, fields: dict[str, Any]) -> None:
        """Update bank account fields (label, iban, restaurant_id, active)."""
        pass

    @abstractmethod
    def delete_bank_account(self, account_id: int) -> None:
        """Delete a bank account."""
        pass

    @abstractmethod
    def count_bank_entries(self, account_id: int) -> int:
        """Count ledger entries booked on a bank account."""
        pass

    # Import format operations
    @abstractmethod
    def create_import_format(
        self,
        client_id: str,
        code: str,
        label: str,
        columns: list[str],
        bank: Optional[str] = None,
        extension: str = "csv",
        encoding: str = "utf-8",
        separator: str = ";",
        first_data_line: int = 1,
    ) -> int:
        """Create an import format. Returns format ID."""
        pass

    @abstractmethod
    def get_import_format(self, format_id: int) -> Optional[ImportFormat]:
        """Get import format by ID."""
        pass

    @abstractmethod
    def get_import_format_by_code(self, client_id: str, code: str) -> Optional[ImportFormat]:
        """Get import format by code."""
        pass

    @abstractmethod
    def list_import_formats(self, client_id: str, active_only: bool = True) -> list[ImportFormat]:
        """List import formats ordered by bank then code."""
        pass

    @abstractmethod
    def update_import_format(self, format_id: int, fields: dict[str, Any]) -> None:
        """Update import format fields."""
        pass

    @abstractmethod
    def delete_import_format(self, format_id: int) -> None:
        """Delete an import format."""
        pass

    @abstractmethod
    def count_statement_imports(self, format_id: int) -> int:
        """Count statement imports made with a format."""
        pass

    # Statement import operations
    @abstractmethod
    def create_statement_import(
        self,
        client_id: str,
        import_uuid: str,
        file_name: str,
        format_id: int,
        line_count: int,
        status: ImportStatus,
        message: Optional[str] = None,
    ) -> int:
        """Create a statement import header. Returns import ID."""
        pass

    @abstractmethod
    def get_statement_import(self, import_id: int) -> Optional[StatementImport]:
        """Get statement import by ID."""
        pass

    @abstractmethod
    def get_statement_import_by_file_name(
        self, client_id: str, file_name: str
    ) -> Optional[StatementImport]:
        """Get statement import by file name."""
        pass

    @abstractmethod
    def list_statement_imports(self, client_id: str) -> list[StatementImport]:
        """List statement imports, newest first."""
        pass

    @abstractmethod
    def update_statement_import_status(
        self, import_id: int, status: ImportStatus, message: Optional[str] = None
    ) -> None:
        """Update the status and message of a statement import."""
        pass

    @abstractmethod
    def delete_statement_import(self, import_id: int) -> None:
        """Delete a statement import and its lines."""
        pass

    # Statement line operations
    @abstractmethod
    def add_statement_lines(
        self, import_id: int, client_id: str, lines: list[dict[str, Any]]
    ) -> int:
        """Insert statement lines in one transaction. Returns number inserted."""
        pass

    @abstractmethod
    def list_statement_lines(
        self,
        client_id: str,
        import_id: Optional[int] = None,
        statuses: Optional[Iterable[LineStatus]] = None,
    ) -> list[StatementLine]:
        """List statement lines ordered by ID, optionally filtered."""
        pass

    @abstractmethod
    def update_statement_line_status(
        self,
        line_id: int,
        status: LineStatus,
        message: Optional[str] = None,
        bank_entry_id: Optional[int] = None,
    ) -> None:
        """Update the processing status of a statement line."""
        pass

    # Bank entry operations
    @abstractmethod
    def create_bank_entry(
        self,
        client_id: str,
        bank_account_id: int,
        operation_date: date,
        amount: Optional[Decimal],
        value_date: Optional[date] = None,
        description: Optional[str] = None,
        balance: Optional[Decimal] = None,
        reference: Optional[str] = None,
        statement_line_id: Optional[int] = None,
    ) -> int:
        """Create a bank ledger entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_bank_entry(self, entry_id: int) -> Optional[BankEntry]:
        """Get bank entry by ID."""
        pass

    @abstractmethod
    def find_bank_entries(self, bank_account_id: int, operation_date: date) -> list[BankEntry]:
        """List entries of an account booked on an operation date."""
        pass

    @abstractmethod
    def list_bank_entries(
        self,
        client_id: str,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankEntry]:
        """List bank entries with optional filters."""
        pass

    @abstractmethod
    def delete_bank_entry(self, entry_id: int) -> None:
        """Delete a bank entry."""
        pass

    # Cash closure operations
    @abstractmethod
    def create_cash_closure(self, client_id: str, fields: dict[str, Any]) -> int:
        """Create a cash closure header. Returns closure ID."""
        pass

    @abstractmethod
    def update_cash_closure(self, closure_id: int, fields: dict[str, Any]) -> None:
        """Update cash closure header fields."""
        pass

    @abstractmethod
    def get_cash_closure(self, closure_id: int) -> Optional[CashClosure]:
        """Get cash closure by ID."""
        pass

    @abstractmethod
    def list_cash_closures(
        self,
        client_id: str,
        restaurant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CashClosure]:
        """List cash closures, newest first."""
        pass

    @abstractmethod
    def delete_cash_closure(self, closure_id: int) -> None:
        """Delete a cash closure with its details."""
        pass

    @abstractmethod
    def create_card_payment(
        self,
        closure_id: int,
        gross_amount: Decimal,
        actual_amount: Decimal,
        period: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> int:
        """Add card takings to a closure. Returns payment ID."""
        pass

    @abstractmethod
    def update_card_payment(
        self,
        payment_id: int,
        gross_amount: Decimal,
        actual_amount: Decimal,
        period: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> None:
        """Update card takings."""
        pass

    @abstractmethod
    def list_card_payments(self, closure_id: int) -> list[CardPayment]:
        """List card takings of a closure."""
        pass

    @abstractmethod
    def delete_card_payment(self, payment_id: int) -> None:
        """Delete card takings."""
        pass

    @abstractmethod
    def create_closure_expense(
        self,
        closure_id: int,
        amount_incl_tax: Decimal,
        invoice_reference: Optional[str] = None,
        comment: Optional[str] = None,
        purchase_invoice_id: Optional[int] = None,
    ) -> int:
        """Attach an expense invoice to a closure. Returns expense ID."""
        pass

    @abstractmethod
    def list_closure_expenses(self, closure_id: int) -> list[ClosureExpense]:
        """List expense invoices of a closure."""
        pass

    @abstractmethod
    def delete_closure_expense(self, expense_id: int) -> None:
        """Delete an expense invoice line."""
        pass

    # Purchase invoice operations
    @abstractmethod
    def create_payment_mode(self, client_id: str, code: str, label: str, cash_payment: bool = False) -> int:
        """Create a payment mode. Returns mode ID."""
        pass

    @abstractmethod
    def get_payment_mode(self, mode_id: int) -> Optional[PaymentMode]:
        """Get payment mode by ID."""
        pass

    @abstractmethod
    def get_payment_mode_by_code(self, client_id: str, code: str) -> Optional[PaymentMode]:
        """Get payment mode by code."""
        pass

    @abstractmethod
    def list_payment_modes(
        self, client_id: str, active_only: bool = True, cash_only: bool = False
    ) -> list[PaymentMode]:
        """List payment modes ordered by code."""
        pass

    @abstractmethod
    def create_supplier(self, client_id: str, name: str) -> int:
        """Create a supplier. Returns supplier ID."""
        pass

    @abstractmethod
    def get_supplier(self, supplier_id: int) -> Optional[Supplier]:
        """Get supplier by ID."""
        pass

    @abstractmethod
    def get_supplier_by_name(self, client_id: str, name: str) -> Optional[Supplier]:
        """Get supplier by name (case-insensitive)."""
        pass

    @abstractmethod
    def list_suppliers(self, client_id: str) -> list[Supplier]:
        """List suppliers ordered by name."""
        pass

    @abstractmethod
    def create_purchase_invoice(self, client_id: str, fields: dict[str, Any]) -> int:
        """Create a purchase invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_purchase_invoice(self, invoice_id: int) -> Optional[PurchaseInvoice]:
        """Get purchase invoice by ID."""
        pass

    @abstractmethod
    def list_purchase_invoices(
        self,
        client_id: str,
        restaurant_id: Optional[int] = None,
        payment_mode_ids: Optional[Iterable[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PurchaseInvoice]:
        """List purchase invoices, newest first."""
        pass

    @abstractmethod
    def delete_purchase_invoice(self, invoice_id: int) -> None:
        """Delete a purchase invoice."""
        pass

    @abstractmethod
    def list_invoice_closure_ids(self, invoice_id: int) -> list[int]:
        """IDs of the closures whose expenses reference an invoice."""
        pass

    # Flow category, service type and opening days operations
    @abstractmethod
    def create_flow_category(
        self,
        client_id: str,
        code: str,
        label: str,
        flow_type: str,
        restaurant_id: Optional[int] = None,
    ) -> int:
        """Create a flow category. Returns category ID."""
        pass

    @abstractmethod
    def get_flow_category(self, category_id: int) -> Optional[FlowCategory]:
        """Get flow category by ID."""
        pass

    @abstractmethod
    def list_flow_categories(
        self, client_id: str, restaurant_id: Optional[int] = None
    ) -> list[FlowCategory]:
        """List active flow categories.

        When restaurant_id is given, only categories of that restaurant and
        categories shared by all restaurants are returned.
        """
        pass

    @abstractmethod
    def create_flow_subcategory(
        self, client_id: str, category_id: int, code: str, label: str
    ) -> int:
        """Create a flow subcategory. Returns subcategory ID."""
        pass

    @abstractmethod
    def get_flow_subcategory(self, subcategory_id: int) -> Optional[FlowSubcategory]:
        """Get flow subcategory by ID."""
        pass

    @abstractmethod
    def list_flow_subcategories(
        self, client_id: str, category_id: Optional[int] = None
    ) -> list[FlowSubcategory]:
        """List active flow subcategories."""
        pass

    @abstractmethod
    def create_service_type(
        self,
        client_id: str,
        restaurant_id: int,
        code: str,
        label: str,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        subcategory_id: Optional[int] = None,
    ) -> int:
        """Create a service type. Returns service type ID."""
        pass

    @abstractmethod
    def get_service_type(self, service_type_id: int) -> Optional[ServiceType]:
        """Get service type by ID."""
        pass

    @abstractmethod
    def list_service_types(
        self, client_id: str, restaurant_id: Optional[int] = None
    ) -> list[ServiceType]:
        """List active service types ordered by start time."""
        pass

    @abstractmethod
    def set_opening_days(
        self,
        client_id: str,
        restaurant_id: int,
        year: int,
        month: int,
        open_days: int,
        planned_food_cost_rate: Optional[Decimal] = None,
    ) -> int:
        """Create or replace the opening days of a month. Returns record ID."""
        pass

    @abstractmethod
    def get_opening_days(self, restaurant_id: int, year: int, month: int) -> Optional[OpeningDays]:
        """Get opening days of a restaurant for a month."""
        pass

    @abstractmethod
    def list_opening_days(
        self, client_id: str, restaurant_id: Optional[int] = None, year: Optional[int] = None
    ) -> list[OpeningDays]:
        """List opening days ordered by restaurant, year and month."""
        pass

    # CA budget operations
    @abstractmethod
    def create_ca_budget(self, client_id: str, fields: dict[str, Any]) -> int:
        """Create a CA budget header. Returns budget ID."""
        pass

    @abstractmethod
    def update_ca_budget(self, budget_id: int, fields: dict[str, Any]) -> None:
        """Update CA budget header fields."""
        pass

    @abstractmethod
    def get_ca_budget(self, budget_id: int) -> Optional[CABudget]:
        """Get CA budget by ID."""
        pass

    @abstractmethod
    def find_ca_budget(
        self, restaurant_id: int, year: int, month: int, category_id: int
    ) -> Optional[CABudget]:
        """Get the CA budget of a restaurant, month and category."""
        pass

    @abstractmethod
    def list_ca_budgets(
        self, client_id: str, restaurant_id: Optional[int] = None, year: Optional[int] = None
    ) -> list[CABudget]:
        """List CA budgets ordered by period."""
        pass

    @abstractmethod
    def replace_ca_budget_details(self, budget_id: int, details: list[dict[str, Any]]) -> None:
        """Replace all detail lines of a CA budget."""
        pass

    @abstractmethod
    def list_ca_budget_details(self, budget_id: int) -> list[CABudgetDetail]:
        """List detail lines of a CA budget."""
        pass

    @abstractmethod
    def delete_ca_budget(self, budget_id: int) -> None:
        """Delete a CA budget with its details."""
        pass

    # CA actual operations
    @abstractmethod
    def upsert_ca_actual(
        self,
        client_id: str,
        restaurant_id: int,
        sale_date: date,
        category_id: int,
        amount_excl_tax: Decimal,
        amount_incl_tax: Decimal,
    ) -> int:
        """Create or replace actual revenue for a day and category. Returns ID."""
        pass

    @abstractmethod
    def upsert_ca_actual_detail(
        self,
        actual_id: int,
        service_type_id: int,
        amount_excl_tax: Decimal,
        amount_incl_tax: Decimal,
    ) -> int:
        """Create or replace actual revenue of a service type. Returns ID."""
        pass

    @abstractmethod
    def upsert_ca_actual_hourly(
        self,
        detail_id: int,
        hour: str,
        document: Optional[str],
        unit_price_excl_tax: Decimal,
        unit_price_incl_tax: Decimal,
        amount_excl_tax: Decimal,
        amount_incl_tax: Decimal,
    ) -> int:
        """Create or replace actual revenue of an hour and document. Returns ID."""
        pass

    @abstractmethod
    def list_ca_actuals(
        self,
        client_id: str,
        restaurant_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CAActual]:
        """List actual revenue records."""
        pass

    @abstractmethod
    def list_ca_actual_details(self, actual_id: int) -> list[CAActualDetail]:
        """List service type details of an actual revenue record."""
        pass

    @abstractmethod
    def list_ca_actual_hourly(self, detail_id: int) -> list[CAActualHourly]:
        """List hourly lines of a service type detail."""
        pass

    # HR operations
    @abstractmethod
    def create_job_function(
        self, client_id: str, code: str, label: str, display_order: int = 0
    ) -> int:
        """Create a job function. Returns function ID."""
        pass

    @abstractmethod
    def get_job_function(self, function_id: int) -> Optional[JobFunction]:
        """Get job function by ID."""
        pass

    @abstractmethod
    def list_job_functions(self, client_id: str) -> list[JobFunction]:
        """List job functions in display order."""
        pass

    @abstractmethod
    def create_contract_type(self, client_id: str, code: str, label: str) -> int:
        """Create a contract type. Returns type ID."""
        pass

    @abstractmethod
    def list_contract_types(self, client_id: str) -> list[ContractType]:
        """List contract types."""
        pass

    @abstractmethod
    def create_employee(
        self,
        client_id: str,
        last_name: str,
        first_name: str,
        staff_number: Optional[str] = None,
        short_code: Optional[str] = None,
    ) -> int:
        """Create an employee. Returns employee ID."""
        pass

    @abstractmethod
    def get_employee(self, employee_id: int) -> Optional[Employee]:
        """Get employee by ID."""
        pass

    @abstractmethod
    def list_employees(self, client_id: str, active_only: bool = True) -> list[Employee]:
        """List employees ordered by name."""
        pass

    @abstractmethod
    def create_employment_contract(
        self,
        employee_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        contract_type_id: Optional[int] = None,
    ) -> int:
        """Create a contract history entry. Returns contract ID."""
        pass

    @abstractmethod
    def list_employment_contracts(self, employee_id: int) -> list[EmploymentContract]:
        """List contracts of an employee."""
        pass

    @abstractmethod
    def create_assignment(
        self,
        employee_id: int,
        restaurant_id: int,
        job_function_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        presence_rate: Optional[Decimal] = None,
    ) -> int:
        """Create an assignment. Returns assignment ID."""
        pass

    @abstractmethod
    def list_assignments(
        self, employee_id: Optional[int] = None, restaurant_id: Optional[int] = None
    ) -> list[Assignment]:
        """List assignments with optional filters."""
        pass

    @abstractmethod
    def create_salary_history(
        self,
        client_id: str,
        employee_id: int,
        start_date: date,
        amount: Decimal,
        end_date: Optional[date] = None,
        subcategory_id: Optional[int] = None,
        contract_id: Optional[int] = None,
    ) -> int:
        """Create a pay element history row. Returns row ID."""
        pass

    @abstractmethod
    def list_salary_history(
        self,
        client_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
    ) -> list[SalaryHistory]:
        """List pay element rows overlapping the [start_date, end_date] period."""
        pass

    @abstractmethod
    def create_hr_settings(
        self,
        client_id: str,
        start_date: date,
        employer_rate: Decimal,
        employee_rate: Decimal,
        end_date: Optional[date] = None,
        staff_number_prefix: Optional[str] = None,
        staff_number_counter: Optional[int] = None,
        staff_number_width: Optional[int] = None,
    ) -> int:
        """Create general HR settings. Returns settings ID."""
        pass

    @abstractmethod
    def list_hr_settings(self, client_id: str) -> list[HRSettings]:
        """List active HR settings, most recent start date first."""
        pass

    @abstractmethod
    def update_staff_number_counter(self, settings_id: int, counter: int) -> None:
        """Store the last staff number counter used."""
        pass

    @abstractmethod
    def create_hr_subcategory_setting(
        self,
        client_id: str,
        subcategory_id: int,
        employer_charges: bool = False,
        employee_charges: bool = False,
        employer_charge_subcategory_id: Optional[int] = None,
        employee_charge_subcategory_id: Optional[int] = None,
    ) -> int:
        """Create social charge settings for a subcategory. Returns ID."""
        pass

    @abstractmethod
    def list_hr_subcategory_settings(self, client_id: str) -> list[HRSubcategorySetting]:
        """List active subcategory charge settings."""
        pass
