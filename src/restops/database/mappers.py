"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal
from typing import Optional

from restops.domain import entities as domain
from restops.database import models as orm


def _amount(value) -> Decimal:
    return value if value is not None else Decimal("0")


def split_columns(columns: Optional[str]) -> tuple[str, ...]:
    """Split stored column descriptors (one per line)."""
    if not columns:
        return ()
    return tuple(line for line in columns.splitlines() if line.strip())


def join_columns(columns) -> str:
    """Store column descriptors one per line."""
    return "\n".join(c.strip() for c in columns if c and c.strip())


def restaurant_to_domain(orm_restaurant: orm.Restaurant) -> domain.Restaurant:
    """Convert SQLAlchemy Restaurant model to domain Restaurant entity."""
    return domain.Restaurant(
        id=orm_restaurant.id,
        client_id=orm_restaurant.client_id,
        code=orm_restaurant.code,
        label=orm_restaurant.label,
        active=orm_restaurant.active,
        created_at=orm_restaurant.created_at,
    )


def bank_account_to_domain(orm_account: orm.BankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        client_id=orm_account.client_id,
        code=orm_account.code,
        label=orm_account.label,
        iban=orm_account.iban,
        restaurant_id=orm_account.restaurant_id,
        active=orm_account.active,
        created_at=orm_account.created_at,
    )


def import_format_to_domain(orm_format: orm.ImportFormat) -> domain.ImportFormat:
    """Convert SQLAlchemy ImportFormat model to domain ImportFormat entity."""
    return domain.ImportFormat(
        id=orm_format.id,
        client_id=orm_format.client_id,
        code=orm_format.code,
        label=orm_format.label,
        bank=orm_format.bank,
        extension=orm_format.extension,
        encoding=orm_format.encoding,
        separator=orm_format.separator,
        first_data_line=orm_format.first_data_line,
        columns=split_columns(orm_format.columns),
        active=orm_format.active,
        created_at=orm_format.created_at,
    )


def statement_import_to_domain(orm_import: orm.StatementImport) -> domain.StatementImport:
    """Convert SQLAlchemy StatementImport model to domain StatementImport entity."""
    return domain.StatementImport(
        id=orm_import.id,
        client_id=orm_import.client_id,
        import_uuid=orm_import.import_uuid,
        file_name=orm_import.file_name,
        format_id=orm_import.format_id,
        line_count=orm_import.line_count,
        status=domain.ImportStatus(orm_import.status),
        message=orm_import.message,
        created_at=orm_import.created_at,
    )


def statement_line_to_domain(orm_line: orm.StatementLine) -> domain.StatementLine:
    """Convert SQLAlchemy StatementLine model to domain StatementLine entity."""
    return domain.StatementLine(
        id=orm_line.id,
        import_id=orm_line.import_id,
        client_id=orm_line.client_id,
        operation_date=orm_line.operation_date,
        value_date=orm_line.value_date,
        description=orm_line.description,
        amount=orm_line.amount,
        balance=orm_line.balance,
        reference=orm_line.reference,
        account_number=orm_line.account_number,
        currency=orm_line.currency,
        source_row=orm_line.source_row,
        status=domain.LineStatus(orm_line.status),
        message=orm_line.message,
        bank_entry_id=orm_line.bank_entry_id,
    )


def bank_entry_to_domain(orm_entry: orm.BankEntry) -> domain.BankEntry:
    """Convert SQLAlchemy BankEntry model to domain BankEntry entity."""
    return domain.BankEntry(
        id=orm_entry.id,
        client_id=orm_entry.client_id,
        bank_account_id=orm_entry.bank_account_id,
        operation_date=orm_entry.operation_date,
        value_date=orm_entry.value_date,
        description=orm_entry.description,
        amount=orm_entry.amount,
        balance=orm_entry.balance,
        reference=orm_entry.reference,
        statement_line_id=orm_entry.statement_line_id,
        created_at=orm_entry.created_at,
    )


def cash_closure_to_domain(orm_closure: orm.CashClosure) -> domain.CashClosure:
    """Convert SQLAlchemy CashClosure model to domain CashClosure entity."""
    return domain.CashClosure(
        id=orm_closure.id,
        client_id=orm_closure.client_id,
        restaurant_id=orm_closure.restaurant_id,
        closure_date=orm_closure.closure_date,
        revenue_excl_tax=orm_closure.revenue_excl_tax,
        revenue_incl_tax=orm_closure.revenue_incl_tax,
        opening_float=orm_closure.opening_float,
        closing_float=orm_closure.closing_float,
        theoretical_deposit=orm_closure.theoretical_deposit,
        actual_deposit=orm_closure.actual_deposit,
        total_card_gross=_amount(orm_closure.total_card_gross),
        total_card_actual=_amount(orm_closure.total_card_actual),
        total_expenses=_amount(orm_closure.total_expenses),
        validated=orm_closure.validated,
        comment=orm_closure.comment,
        created_at=orm_closure.created_at,
    )


def card_payment_to_domain(orm_payment: orm.CardPayment) -> domain.CardPayment:
    """Convert SQLAlchemy CardPayment model to domain CardPayment entity."""
    return domain.CardPayment(
        id=orm_payment.id,
        closure_id=orm_payment.closure_id,
        period=orm_payment.period,
        gross_amount=_amount(orm_payment.gross_amount),
        actual_amount=_amount(orm_payment.actual_amount),
        comment=orm_payment.comment,
    )


def closure_expense_to_domain(orm_expense: orm.ClosureExpense) -> domain.ClosureExpense:
    """Convert SQLAlchemy ClosureExpense model to domain ClosureExpense entity."""
    return domain.ClosureExpense(
        id=orm_expense.id,
        closure_id=orm_expense.closure_id,
        invoice_reference=orm_expense.invoice_reference,
        amount_incl_tax=_amount(orm_expense.amount_incl_tax),
        comment=orm_expense.comment,
        purchase_invoice_id=orm_expense.purchase_invoice_id,
    )


def payment_mode_to_domain(orm_mode: orm.PaymentMode) -> domain.PaymentMode:
    """Convert SQLAlchemy PaymentMode model to domain PaymentMode entity."""
    return domain.PaymentMode(
        id=orm_mode.id,
        client_id=orm_mode.client_id,
        code=orm_mode.code,
        label=orm_mode.label,
        cash_payment=bool(orm_mode.cash_payment),
        active=bool(orm_mode.active),
    )


def supplier_to_domain(orm_supplier: orm.Supplier) -> domain.Supplier:
    """Convert SQLAlchemy Supplier model to domain Supplier entity."""
    return domain.Supplier(
        id=orm_supplier.id,
        client_id=orm_supplier.client_id,
        name=orm_supplier.name,
        active=bool(orm_supplier.active),
    )


def purchase_invoice_to_domain(orm_invoice: orm.PurchaseInvoice) -> domain.PurchaseInvoice:
    """Convert SQLAlchemy PurchaseInvoice model to domain PurchaseInvoice entity."""
    return domain.PurchaseInvoice(
        id=orm_invoice.id,
        client_id=orm_invoice.client_id,
        restaurant_id=orm_invoice.restaurant_id,
        supplier_id=orm_invoice.supplier_id,
        payment_mode_id=orm_invoice.payment_mode_id,
        invoice_date=orm_invoice.invoice_date,
        document_number=orm_invoice.document_number,
        amount_excl_tax=_amount(orm_invoice.amount_excl_tax),
        amount_vat=_amount(orm_invoice.amount_vat),
        amount_incl_tax=_amount(orm_invoice.amount_incl_tax),
        comment=orm_invoice.comment,
        supplier_name=orm_invoice.supplier.name if orm_invoice.supplier else "",
        payment_mode_label=orm_invoice.payment_mode.label if orm_invoice.payment_mode else "",
    )


def flow_category_to_domain(orm_category: orm.FlowCategory) -> domain.FlowCategory:
    """Convert SQLAlchemy FlowCategory model to domain FlowCategory entity."""
    return domain.FlowCategory(
        id=orm_category.id,
        client_id=orm_category.client_id,
        code=orm_category.code,
        label=orm_category.label,
        flow_type=domain.FlowType(orm_category.flow_type),
        restaurant_id=orm_category.restaurant_id,
        active=orm_category.active,
    )


def flow_subcategory_to_domain(orm_subcategory: orm.FlowSubcategory) -> domain.FlowSubcategory:
    """Convert SQLAlchemy FlowSubcategory model to domain FlowSubcategory entity."""
    return domain.FlowSubcategory(
        id=orm_subcategory.id,
        client_id=orm_subcategory.client_id,
        category_id=orm_subcategory.category_id,
        code=orm_subcategory.code,
        label=orm_subcategory.label,
        active=orm_subcategory.active,
    )


def service_type_to_domain(orm_service: orm.ServiceType) -> domain.ServiceType:
    """Convert SQLAlchemy ServiceType model to domain ServiceType entity."""
    return domain.ServiceType(
        id=orm_service.id,
        client_id=orm_service.client_id,
        restaurant_id=orm_service.restaurant_id,
        code=orm_service.code,
        label=orm_service.label,
        start_time=orm_service.start_time,
        end_time=orm_service.end_time,
        subcategory_id=orm_service.subcategory_id,
        active=orm_service.active,
    )


def opening_days_to_domain(orm_days: orm.OpeningDays) -> domain.OpeningDays:
    """Convert SQLAlchemy OpeningDays model to domain OpeningDays entity."""
    return domain.OpeningDays(
        id=orm_days.id,
        client_id=orm_days.client_id,
        restaurant_id=orm_days.restaurant_id,
        year=orm_days.year,
        month=orm_days.month,
        open_days=orm_days.open_days,
        planned_food_cost_rate=orm_days.planned_food_cost_rate,
    )


def ca_budget_to_domain(orm_budget: orm.CABudget) -> domain.CABudget:
    """Convert SQLAlchemy CABudget model to domain CABudget entity."""
    return domain.CABudget(
        id=orm_budget.id,
        client_id=orm_budget.client_id,
        restaurant_id=orm_budget.restaurant_id,
        year=orm_budget.year,
        month=orm_budget.month,
        category_id=orm_budget.category_id,
        amount_excl_tax=_amount(orm_budget.amount_excl_tax),
        amount_incl_tax=_amount(orm_budget.amount_incl_tax),
        open_days=orm_budget.open_days,
        covers=orm_budget.covers,
        average_cover_price=orm_budget.average_cover_price,
        comment=orm_budget.comment,
        created_at=orm_budget.created_at,
    )


def ca_budget_detail_to_domain(orm_detail: orm.CABudgetDetail) -> domain.CABudgetDetail:
    """Convert SQLAlchemy CABudgetDetail model to domain CABudgetDetail entity."""
    return domain.CABudgetDetail(
        id=orm_detail.id,
        budget_id=orm_detail.budget_id,
        service_type_id=orm_detail.service_type_id,
        subcategory_id=orm_detail.subcategory_id,
        amount_excl_tax=_amount(orm_detail.amount_excl_tax),
        amount_incl_tax=_amount(orm_detail.amount_incl_tax),
        open_days=orm_detail.open_days,
        covers=orm_detail.covers,
        average_cover_price=orm_detail.average_cover_price,
    )


def ca_actual_to_domain(orm_actual: orm.CAActual) -> domain.CAActual:
    """Convert SQLAlchemy CAActual model to domain CAActual entity."""
    return domain.CAActual(
        id=orm_actual.id,
        client_id=orm_actual.client_id,
        restaurant_id=orm_actual.restaurant_id,
        sale_date=orm_actual.sale_date,
        category_id=orm_actual.category_id,
        amount_excl_tax=_amount(orm_actual.amount_excl_tax),
        amount_incl_tax=_amount(orm_actual.amount_incl_tax),
    )


def ca_actual_detail_to_domain(orm_detail: orm.CAActualDetail) -> domain.CAActualDetail:
    """Convert SQLAlchemy CAActualDetail model to domain CAActualDetail entity."""
    return domain.CAActualDetail(
        id=orm_detail.id,
        actual_id=orm_detail.actual_id,
        service_type_id=orm_detail.service_type_id,
        amount_excl_tax=_amount(orm_detail.amount_excl_tax),
        amount_incl_tax=_amount(orm_detail.amount_incl_tax),
    )


def ca_actual_hourly_to_domain(orm_hourly: orm.CAActualHourly) -> domain.CAActualHourly:
    """Convert SQLAlchemy CAActualHourly model to domain CAActualHourly entity."""
    return domain.CAActualHourly(
        id=orm_hourly.id,
        detail_id=orm_hourly.detail_id,
        hour=orm_hourly.hour,
        document=orm_hourly.document or None,
        unit_price_excl_tax=_amount(orm_hourly.unit_price_excl_tax),
        unit_price_incl_tax=_amount(orm_hourly.unit_price_incl_tax),
        amount_excl_tax=_amount(orm_hourly.amount_excl_tax),
        amount_incl_tax=_amount(orm_hourly.amount_incl_tax),
    )


def job_function_to_domain(orm_function: orm.JobFunction) -> domain.JobFunction:
    """Convert SQLAlchemy JobFunction model to domain JobFunction entity."""
    return domain.JobFunction(
        id=orm_function.id,
        client_id=orm_function.client_id,
        code=orm_function.code,
        label=orm_function.label,
        display_order=orm_function.display_order,
        active=orm_function.active,
    )


def contract_type_to_domain(orm_type: orm.ContractType) -> domain.ContractType:
    """Convert SQLAlchemy ContractType model to domain ContractType entity."""
    return domain.ContractType(
        id=orm_type.id,
        client_id=orm_type.client_id,
        code=orm_type.code,
        label=orm_type.label,
    )


def employee_to_domain(orm_employee: orm.Employee) -> domain.Employee:
    """Convert SQLAlchemy Employee model to domain Employee entity."""
    return domain.Employee(
        id=orm_employee.id,
        client_id=orm_employee.client_id,
        staff_number=orm_employee.staff_number,
        short_code=orm_employee.short_code,
        last_name=orm_employee.last_name,
        first_name=orm_employee.first_name,
        active=orm_employee.active,
        created_at=orm_employee.created_at,
    )


def employment_contract_to_domain(orm_contract: orm.EmploymentContract) -> domain.EmploymentContract:
    """Convert SQLAlchemy EmploymentContract model to domain entity."""
    return domain.EmploymentContract(
        id=orm_contract.id,
        employee_id=orm_contract.employee_id,
        contract_type_id=orm_contract.contract_type_id,
        start_date=orm_contract.start_date,
        end_date=orm_contract.end_date,
    )


def assignment_to_domain(orm_assignment: orm.Assignment) -> domain.Assignment:
    """Convert SQLAlchemy Assignment model to domain Assignment entity."""
    return domain.Assignment(
        id=orm_assignment.id,
        employee_id=orm_assignment.employee_id,
        restaurant_id=orm_assignment.restaurant_id,
        job_function_id=orm_assignment.job_function_id,
        start_date=orm_assignment.start_date,
        end_date=orm_assignment.end_date,
        presence_rate=orm_assignment.presence_rate,
    )


def salary_history_to_domain(orm_history: orm.SalaryHistory) -> domain.SalaryHistory:
    """Convert SQLAlchemy SalaryHistory model to domain SalaryHistory entity."""
    return domain.SalaryHistory(
        id=orm_history.id,
        client_id=orm_history.client_id,
        employee_id=orm_history.employee_id,
        contract_id=orm_history.contract_id,
        subcategory_id=orm_history.subcategory_id,
        start_date=orm_history.start_date,
        end_date=orm_history.end_date,
        amount=_amount(orm_history.amount),
    )


def hr_settings_to_domain(orm_settings: orm.HRSettings) -> domain.HRSettings:
    """Convert SQLAlchemy HRSettings model to domain HRSettings entity."""
    return domain.HRSettings(
        id=orm_settings.id,
        client_id=orm_settings.client_id,
        start_date=orm_settings.start_date,
        end_date=orm_settings.end_date,
        employer_rate=_amount(orm_settings.employer_rate),
        employee_rate=_amount(orm_settings.employee_rate),
        staff_number_prefix=orm_settings.staff_number_prefix,
        staff_number_counter=orm_settings.staff_number_counter,
        staff_number_width=orm_settings.staff_number_width,
        active=orm_settings.active,
    )


def hr_subcategory_setting_to_domain(
    orm_setting: orm.HRSubcategorySetting,
) -> domain.HRSubcategorySetting:
    """Convert SQLAlchemy HRSubcategorySetting model to domain entity."""
    return domain.HRSubcategorySetting(
        id=orm_setting.id,
        client_id=orm_setting.client_id,
        subcategory_id=orm_setting.subcategory_id,
        employer_charges=orm_setting.employer_charges,
        employee_charges=orm_setting.employee_charges,
        employer_charge_subcategory_id=orm_setting.employer_charge_subcategory_id,
        employee_charge_subcategory_id=orm_setting.employee_charge_subcategory_id,
        active=orm_setting.active,
    )
