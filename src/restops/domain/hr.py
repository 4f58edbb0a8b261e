"""Employee and HR reference data domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from restops.database.base import Database
from restops.domain.entities import (
    DEFAULT_CLIENT_ID,
    Assignment,
    ContractType,
    Employee,
    EmploymentContract,
    HRSettings,
    HRSubcategorySetting,
    JobFunction,
    SalaryHistory,
)
from restops.domain.errors import NotFoundError, ValidationError, employee_not_found, restaurant_not_found
from restops.domain.hr_budget import HRBudgetService

logger = logging.getLogger(__name__)


def _check_period(start_date: date, end_date: Optional[date], errors: dict[str, str]) -> None:
    if start_date is None:
        errors["start_date"] = "Start date is required"
    elif end_date is not None and end_date < start_date:
        errors["end_date"] = "End date must be on or after the start date"


class EmployeeService:
    """Service for staff records, their contracts, assignments and pay history."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize employee service.

        Args:
            db: Database instance
            client_id: Tenant the employees belong to
        """
        self.db = db
        self.client_id = client_id
        self.budget_service = HRBudgetService(db, client_id)

    def create_employee(
        self,
        last_name: str,
        first_name: str,
        staff_number: Optional[str] = None,
        short_code: Optional[str] = None,
    ) -> int:
        """Create an employee.

        Args:
            last_name: Family name
            first_name: Given name
            staff_number: Staff number; generated from the HR settings when omitted
            short_code: Optional short code

        Returns:
            Employee ID

        Raises:
            ValidationError: If a name is missing
            NotFoundError: If no staff number is given and none can be generated
        """
        errors = {}
        if not (last_name or "").strip():
            errors["last_name"] = "Last name is required"
        if not (first_name or "").strip():
            errors["first_name"] = "First name is required"
        if errors:
            raise ValidationError("Invalid employee", errors)

        if not staff_number:
            staff_number = self.budget_service.next_staff_number()

        return self.db.create_employee(
            client_id=self.client_id,
            last_name=last_name.strip(),
            first_name=first_name.strip(),
            staff_number=staff_number,
            short_code=short_code,
        )

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        """Get employee by ID."""
        return self.db.get_employee(employee_id)

    def list_employees(self, active_only: bool = True) -> list[Employee]:
        """List employees ordered by name."""
        return self.db.list_employees(self.client_id, active_only=active_only)

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self.db.get_employee(employee_id)
        if employee is None:
            raise NotFoundError(employee_not_found(employee_id))
        return employee

    def create_job_function(self, code: str, label: str, display_order: int = 0) -> int:
        """Create a job function shown in display_order in the HR budget."""
        if not code or not label:
            raise ValidationError("Job function code and label are required")
        return self.db.create_job_function(
            client_id=self.client_id, code=code, label=label, display_order=display_order
        )

    def list_job_functions(self) -> list[JobFunction]:
        """List job functions in display order."""
        return self.db.list_job_functions(self.client_id)

    def create_contract_type(self, code: str, label: str) -> int:
        """Create a contract type."""
        if not code or not label:
            raise ValidationError("Contract type code and label are required")
        return self.db.create_contract_type(client_id=self.client_id, code=code, label=label)

    def list_contract_types(self) -> list[ContractType]:
        """List contract types."""
        return self.db.list_contract_types(self.client_id)

    def add_contract(
        self,
        employee_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        contract_type_id: Optional[int] = None,
    ) -> int:
        """Add a contract to an employee's history.

        Raises:
            NotFoundError: If employee not found
            ValidationError: If the period is invalid
        """
        self._require_employee(employee_id)
        errors: dict[str, str] = {}
        _check_period(start_date, end_date, errors)
        if errors:
            raise ValidationError("Invalid contract", errors)
        return self.db.create_employment_contract(
            employee_id, start_date, end_date=end_date, contract_type_id=contract_type_id
        )

    def list_contracts(self, employee_id: int) -> list[EmploymentContract]:
        """List contracts of an employee."""
        return self.db.list_employment_contracts(employee_id)

    def assign(
        self,
        employee_id: int,
        restaurant_id: int,
        job_function_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        presence_rate: Optional[Decimal] = None,
    ) -> int:
        """Assign an employee to a restaurant and function.

        Args:
            employee_id: Employee ID
            restaurant_id: Restaurant ID
            job_function_id: Job function ID
            start_date: First day of the assignment
            end_date: Last day, None when open-ended
            presence_rate: Share of full time between 0 and 1, default 1

        Returns:
            Assignment ID

        Raises:
            NotFoundError: If the employee, restaurant or function doesn't exist
            ValidationError: If the period or rate is invalid
        """
        self._require_employee(employee_id)
        if self.db.get_restaurant(restaurant_id) is None:
            raise NotFoundError(restaurant_not_found(restaurant_id))
        if self.db.get_job_function(job_function_id) is None:
            raise NotFoundError(f"Job function {job_function_id} not found")

        if presence_rate is None:
            presence_rate = Decimal("1")
        errors: dict[str, str] = {}
        _check_period(start_date, end_date, errors)
        if not Decimal("0") <= presence_rate <= Decimal("1"):
            errors["presence_rate"] = "Presence rate must be between 0 and 1"
        if errors:
            raise ValidationError("Invalid assignment", errors)

        return self.db.create_assignment(
            employee_id,
            restaurant_id,
            job_function_id,
            start_date,
            end_date=end_date,
            presence_rate=presence_rate,
        )

    def list_assignments(
        self, employee_id: Optional[int] = None, restaurant_id: Optional[int] = None
    ) -> list[Assignment]:
        """List assignments."""
        return self.db.list_assignments(employee_id=employee_id, restaurant_id=restaurant_id)

    def add_salary(
        self,
        employee_id: int,
        subcategory_id: int,
        start_date: date,
        amount: Decimal,
        end_date: Optional[date] = None,
        contract_id: Optional[int] = None,
    ) -> int:
        """Record a monthly pay element booked on a flow subcategory.

        Raises:
            NotFoundError: If the employee or subcategory doesn't exist
            ValidationError: If the period is invalid
        """
        self._require_employee(employee_id)
        if self.db.get_flow_subcategory(subcategory_id) is None:
            raise NotFoundError(f"Flow subcategory {subcategory_id} not found")
        errors: dict[str, str] = {}
        _check_period(start_date, end_date, errors)
        if errors:
            raise ValidationError("Invalid pay element", errors)
        return self.db.create_salary_history(
            client_id=self.client_id,
            employee_id=employee_id,
            start_date=start_date,
            amount=amount,
            end_date=end_date,
            subcategory_id=subcategory_id,
            contract_id=contract_id,
        )

    def list_salary_history(self, employee_id: Optional[int] = None) -> list[SalaryHistory]:
        """List pay elements, optionally of one employee."""
        return self.db.list_salary_history(self.client_id, employee_id=employee_id)

    def create_settings(
        self,
        start_date: date,
        employer_rate: Decimal,
        employee_rate: Decimal,
        end_date: Optional[date] = None,
        staff_number_prefix: Optional[str] = None,
        staff_number_counter: Optional[int] = None,
        staff_number_width: Optional[int] = None,
    ) -> int:
        """Create general HR settings valid from start_date.

        Raises:
            ValidationError: If the period, rates or staff number width are invalid
        """
        errors: dict[str, str] = {}
        _check_period(start_date, end_date, errors)
        if employer_rate < 0:
            errors["employer_rate"] = "Employer rate cannot be negative"
        if employee_rate < 0:
            errors["employee_rate"] = "Employee rate cannot be negative"
        if staff_number_width is not None and staff_number_width < 1:
            errors["staff_number_width"] = "Staff number width must be 1 or greater"
        if errors:
            raise ValidationError("Invalid HR settings", errors)
        return self.db.create_hr_settings(
            client_id=self.client_id,
            start_date=start_date,
            employer_rate=employer_rate,
            employee_rate=employee_rate,
            end_date=end_date,
            staff_number_prefix=staff_number_prefix,
            staff_number_counter=staff_number_counter,
            staff_number_width=staff_number_width,
        )

    def list_settings(self) -> list[HRSettings]:
        """List HR settings, most recent first."""
        return self.db.list_hr_settings(self.client_id)

    def create_subcategory_setting(
        self,
        subcategory_id: int,
        employer_charges: bool = False,
        employee_charges: bool = False,
        employer_charge_subcategory_id: Optional[int] = None,
        employee_charge_subcategory_id: Optional[int] = None,
    ) -> int:
        """Declare which charges a pay subcategory bears and where they are booked."""
        for sub_id in (subcategory_id, employer_charge_subcategory_id, employee_charge_subcategory_id):
            if sub_id is not None and self.db.get_flow_subcategory(sub_id) is None:
                raise NotFoundError(f"Flow subcategory {sub_id} not found")
        return self.db.create_hr_subcategory_setting(
            client_id=self.client_id,
            subcategory_id=subcategory_id,
            employer_charges=employer_charges,
            employee_charges=employee_charges,
            employer_charge_subcategory_id=employer_charge_subcategory_id,
            employee_charge_subcategory_id=employee_charge_subcategory_id,
        )

    def list_subcategory_settings(self) -> list[HRSubcategorySetting]:
        """List subcategory charge settings."""
        return self.db.list_hr_subcategory_settings(self.client_id)
