"""Tests for employees, HR settings and the HR budget projection."""

import csv
import pytest
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from restops.domain.errors import NotFoundError, ValidationError
from restops.domain.hr_budget import BudgetLevel, EXPORT_HEADERS, month_range, settings_for


def _project(hr_budget_service, year=2026):
    return hr_budget_service.project(year)


def test_create_employee_generates_staff_number(employee_service, hr_setup):
    """Test staff numbers come from the HR settings counter."""
    first = employee_service.get_employee(hr_setup["employee_id"])
    second_id = employee_service.create_employee("Durand", "Paul")

    assert first.staff_number == "EMP002"
    assert employee_service.get_employee(second_id).staff_number == "EMP003"


def test_create_employee_with_staff_number(employee_service):
    """Test an explicit staff number needs no HR settings."""
    employee_id = employee_service.create_employee("Durand", "Paul", staff_number="X42")

    assert employee_service.get_employee(employee_id).staff_number == "X42"


def test_create_employee_without_settings(employee_service):
    """Test staff numbers cannot be generated without HR settings."""
    with pytest.raises(NotFoundError):
        employee_service.create_employee("Durand", "Paul")


def test_create_employee_requires_names(employee_service):
    """Test both names are required."""
    with pytest.raises(ValidationError) as exc_info:
        employee_service.create_employee(" ", "", staff_number="X1")

    assert set(exc_info.value.errors) == {"last_name", "first_name"}


def test_next_staff_number_width_and_counter(hr_budget_service, employee_service):
    """Test an empty counter starts from one and the width pads the number."""
    employee_service.create_settings(
        date(2020, 1, 1), Decimal("40"), Decimal("20"), staff_number_prefix="R", staff_number_width=5
    )

    assert hr_budget_service.next_staff_number() == "R00002"
    assert hr_budget_service.next_staff_number() == "R00003"


def test_assign_validation(employee_service, hr_setup):
    """Test presence rate range and period order."""
    with pytest.raises(ValidationError) as exc_info:
        employee_service.assign(
            hr_setup["employee_id"],
            hr_setup["restaurant_id"],
            hr_setup["function_id"],
            date(2026, 6, 1),
            end_date=date(2026, 1, 1),
            presence_rate=Decimal("1.5"),
        )

    assert set(exc_info.value.errors) == {"end_date", "presence_rate"}


def test_assign_defaults_presence(employee_service, hr_setup):
    """Test the presence rate defaults to full time."""
    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2026, 1, 1)
    )

    assignment = employee_service.list_assignments(employee_id=hr_setup["employee_id"])[0]
    assert assignment.presence_rate == Decimal("1")
    assert assignment.end_date is None


def test_assign_unknown_function(employee_service, hr_setup):
    """Test assignments need an existing job function."""
    with pytest.raises(NotFoundError):
        employee_service.assign(hr_setup["employee_id"], hr_setup["restaurant_id"], 999, date(2026, 1, 1))


def test_add_contract(employee_service, hr_setup):
    """Test contracts are recorded with their type."""
    type_id = employee_service.create_contract_type("CDI", "Permanent")
    employee_service.add_contract(hr_setup["employee_id"], date(2025, 9, 1), contract_type_id=type_id)

    contracts = employee_service.list_contracts(hr_setup["employee_id"])
    assert len(contracts) == 1
    assert contracts[0].contract_type_id == type_id
    with pytest.raises(ValidationError):
        employee_service.add_contract(hr_setup["employee_id"], date(2025, 9, 1), end_date=date(2025, 1, 1))


def test_settings_for_latest_start():
    """Test the most recent applicable settings win."""

    class Settings:
        def __init__(self, id, start, end=None):
            self.id = id
            self.start_date = start
            self.end_date = end

        def applies_on(self, day):
            return self.start_date <= day and (self.end_date is None or self.end_date >= day)

    rows = [Settings(1, date(2020, 1, 1)), Settings(2, date(2026, 7, 1)), Settings(3, date(2019, 1, 1), date(2019, 12, 31))]

    assert settings_for(rows, date(2026, 3, 15)).id == 1
    assert settings_for(rows, date(2026, 8, 15)).id == 2
    assert settings_for(rows, date(2018, 1, 1)) is None


def test_month_range():
    """Test the months of a year covered by a pay element."""

    class Row:
        def __init__(self, start, end=None):
            self.start_date = start
            self.end_date = end

    assert month_range(Row(date(2025, 5, 1)), 2026) == range(1, 13)
    assert month_range(Row(date(2026, 3, 1), date(2026, 8, 31)), 2026) == range(3, 9)
    assert month_range(Row(date(2027, 1, 1)), 2026) == range(0)
    assert month_range(Row(date(2024, 1, 1), date(2025, 12, 31)), 2026) == range(0)


def test_project_full_year(employee_service, hr_budget_service, hr_setup):
    """Test the projection hierarchy and charge lines."""
    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2025, 9, 1)
    )
    employee_service.add_salary(hr_setup["employee_id"], hr_setup["salary_id"], date(2026, 1, 1), Decimal("2000"))

    lines = _project(hr_budget_service)

    assert [line.level for line in lines] == [
        BudgetLevel.RESTAURANT,
        BudgetLevel.FUNCTION,
        BudgetLevel.EMPLOYEE,
        BudgetLevel.SUBCATEGORY,
        BudgetLevel.SUBCATEGORY,
        BudgetLevel.SUBCATEGORY,
    ]
    assert lines[1].label == "Cook"
    assert lines[2].label == "Martin Claire"
    assert lines[3].label == "Gross salary"
    assert lines[4].label == "Employer charges (employer charges)"
    assert lines[5].label == "Employee charges (employee charges)"
    assert lines[3].months == [Decimal("2000")] * 12
    assert lines[4].months[0] == Decimal("800")
    assert lines[5].months[0] == Decimal("400")
    assert lines[2].total == Decimal("38400")
    assert lines[0].total == Decimal("38400")


def test_project_partial_assignment_and_presence(employee_service, hr_budget_service, hr_setup):
    """Test months without an active assignment on the 15th are skipped."""
    employee_service.assign(
        hr_setup["employee_id"],
        hr_setup["restaurant_id"],
        hr_setup["function_id"],
        date(2026, 1, 1),
        end_date=date(2026, 3, 10),
        presence_rate=Decimal("0.5"),
    )
    employee_service.add_salary(hr_setup["employee_id"], hr_setup["salary_id"], date(2026, 1, 1), Decimal("2000"))

    salary_line = _project(hr_budget_service)[3]

    assert salary_line.months[:3] == [Decimal("1000"), Decimal("1000"), Decimal("0")]
    assert salary_line.total == Decimal("2000")


def test_project_without_charge_settings(employee_service, budget_service, hr_budget_service, hr_setup):
    """Test a subcategory without charge settings has no charge lines."""
    bonus_id = budget_service.create_subcategory(
        budget_service.get_subcategory(hr_setup["salary_id"]).category_id, "PRI", "Bonus"
    )
    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2026, 1, 1)
    )
    employee_service.add_salary(
        hr_setup["employee_id"], bonus_id, date(2026, 12, 1), Decimal("500"), end_date=date(2026, 12, 31)
    )

    lines = _project(hr_budget_service)

    assert [line.label for line in lines[3:]] == ["Bonus"]
    assert lines[3].months[11] == Decimal("500")
    assert lines[0].total == Decimal("500")


def test_project_empty_restaurant(hr_budget_service, sample_restaurant):
    """Test a restaurant without staff yields only its own line."""
    lines = _project(hr_budget_service)

    assert len(lines) == 1
    assert lines[0].total == Decimal("0")


def test_export_xlsx(employee_service, hr_budget_service, hr_setup, tmp_path):
    """Test the Excel export writes one row per budget line."""
    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2026, 1, 1)
    )
    employee_service.add_salary(hr_setup["employee_id"], hr_setup["salary_id"], date(2026, 1, 1), Decimal("2000"))
    lines = _project(hr_budget_service)

    path = hr_budget_service.export_xlsx(lines, str(tmp_path / "budget.xlsx"), year=2026)

    sheet = load_workbook(path).active
    assert sheet.title == "HR budget 2026"
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0] == EXPORT_HEADERS
    assert len(rows) == len(lines) + 1
    assert rows[4][4] == "Gross salary"
    assert rows[4][-1] == pytest.approx(24000)
    assert sheet["A1"].font.bold


def test_export_csv(employee_service, hr_budget_service, hr_setup, tmp_path):
    """Test the CSV export uses a semicolon delimiter."""
    employee_service.assign(
        hr_setup["employee_id"], hr_setup["restaurant_id"], hr_setup["function_id"], date(2026, 1, 1)
    )
    employee_service.add_salary(hr_setup["employee_id"], hr_setup["salary_id"], date(2026, 1, 1), Decimal("2000"))
    lines = _project(hr_budget_service)

    path = hr_budget_service.export_csv(lines, str(tmp_path / "budget.csv"))

    with open(path, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f, delimiter=";"))
    assert tuple(rows[0]) == EXPORT_HEADERS
    assert rows[1][0] == "restaurant"
    assert rows[4][-1] == "24000.00"
