"""Shared pytest fixtures for restops tests."""

import tempfile
import os
from datetime import date, time
from decimal import Decimal
from pathlib import Path
import pytest

from restops.database.factories import create_sqlite_database
from restops.domain.restaurant import RestaurantService
from restops.domain.bank_account import BankAccountService
from restops.domain.import_format import ImportFormatService
from restops.domain.statement_import import StatementImportService
from restops.domain.bank_entries import BankEntryProcessor, BankEntryService
from restops.domain.cash_closure import CashClosureService
from restops.domain.purchase_invoice import PurchaseInvoiceService
from restops.domain.ca_budget import CABudgetService
from restops.domain.ca_actual import CAActualImportService
from restops.domain.hr import EmployeeService
from restops.domain.hr_budget import HRBudgetService

SAMPLE_IBAN = "FR76 3000 4000 0312 3456 7890 143"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def restaurant_service(temp_db):
    """Create a RestaurantService with a temporary database."""
    return RestaurantService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create a BankAccountService with a temporary database."""
    return BankAccountService(temp_db)


@pytest.fixture
def format_service(temp_db):
    """Create an ImportFormatService with a temporary database."""
    return ImportFormatService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def processor(temp_db):
    """Create a BankEntryProcessor with a temporary database."""
    return BankEntryProcessor(temp_db)


@pytest.fixture
def entry_service(temp_db):
    """Create a BankEntryService with a temporary database."""
    return BankEntryService(temp_db)


@pytest.fixture
def closure_service(temp_db):
    """Create a CashClosureService with a temporary database."""
    return CashClosureService(temp_db)


@pytest.fixture
def invoice_service(temp_db):
    """Create a PurchaseInvoiceService with a temporary database."""
    return PurchaseInvoiceService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a CABudgetService with a temporary database."""
    return CABudgetService(temp_db)


@pytest.fixture
def actual_service(temp_db):
    """Create a CAActualImportService with a temporary database."""
    return CAActualImportService(temp_db)


@pytest.fixture
def employee_service(temp_db):
    """Create an EmployeeService with a temporary database."""
    return EmployeeService(temp_db)


@pytest.fixture
def hr_budget_service(temp_db):
    """Create an HRBudgetService with a temporary database."""
    return HRBudgetService(temp_db)


@pytest.fixture
def sample_restaurant(restaurant_service):
    """Create a sample restaurant for testing."""
    restaurant_id = restaurant_service.create_restaurant(code="PAR01", label="Paris Bastille")
    return restaurant_service.get_restaurant(restaurant_id)


@pytest.fixture
def sample_account(account_service, sample_restaurant):
    """Create a sample bank account for testing."""
    account_id = account_service.create_account(
        code="BNP1",
        label="BNP current account",
        iban=SAMPLE_IBAN,
        restaurant_id=sample_restaurant.id,
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_format(format_service):
    """Create a ";"-separated format whose columns are read from the header."""
    format_id = format_service.create_format(
        code="BNP",
        label="BNP Paribas CSV",
        columns=["date:date", "libelle", "montant:montant", "compte"],
        bank="BNP Paribas",
        extension="csv",
        separator=";",
    )
    return format_service.get_format(format_id)


@pytest.fixture
def revenue_setup(budget_service, sample_restaurant):
    """Create a revenue category with lunch and dinner services."""
    category_id = budget_service.create_category(code="CA", label="Revenue")
    food_id = budget_service.create_subcategory(category_id, "FOOD", "Food sales")
    bar_id = budget_service.create_subcategory(category_id, "BAR", "Bar sales")
    lunch_id = budget_service.create_service_type(
        sample_restaurant.id, "MIDI", "Lunch", time(11, 0), time(15, 0), food_id
    )
    dinner_id = budget_service.create_service_type(
        sample_restaurant.id, "SOIR", "Dinner", time(18, 0), time(23, 30), food_id
    )
    return {
        "restaurant_id": sample_restaurant.id,
        "category_id": category_id,
        "food_id": food_id,
        "bar_id": bar_id,
        "lunch_id": lunch_id,
        "dinner_id": dinner_id,
    }


@pytest.fixture
def hr_setup(employee_service, budget_service, sample_restaurant):
    """Create pay subcategories, HR settings, a job function and an employee."""
    category_id = budget_service.create_category(code="RH", label="Staff costs", flow_type="charge")
    salary_id = budget_service.create_subcategory(category_id, "SAL", "Gross salary")
    employer_id = budget_service.create_subcategory(category_id, "CHP", "Employer charges")
    employee_charges_id = budget_service.create_subcategory(category_id, "CHS", "Employee charges")
    employee_service.create_settings(
        date(2020, 1, 1),
        Decimal("40"),
        Decimal("20"),
        staff_number_prefix="EMP",
        staff_number_counter=1,
        staff_number_width=3,
    )
    employee_service.create_subcategory_setting(
        salary_id,
        employer_charges=True,
        employee_charges=True,
        employer_charge_subcategory_id=employer_id,
        employee_charge_subcategory_id=employee_charges_id,
    )
    function_id = employee_service.create_job_function("CUI", "Cook", display_order=1)
    employee_id = employee_service.create_employee("Martin", "Claire")
    return {
        "restaurant_id": sample_restaurant.id,
        "salary_id": salary_id,
        "employer_id": employer_id,
        "employee_charges_id": employee_charges_id,
        "function_id": function_id,
        "employee_id": employee_id,
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
