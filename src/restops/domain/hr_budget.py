"""HR budget projection and staff number generation."""

import csv
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from restops.database.base import Database
from restops.domain.entities import (
    DEFAULT_CLIENT_ID,
    Assignment,
    Employee,
    HRSettings,
    SalaryHistory,
)
from restops.domain.errors import NotFoundError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
ONE = Decimal("1")
DEFAULT_STAFF_NUMBER_WIDTH = 3
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
EXPORT_HEADERS = ("Level", "Restaurant", "Function", "Employee", "Subcategory") + MONTH_NAMES + ("Total",)


class BudgetLevel(str, Enum):
    """Level of a line in the HR budget hierarchy."""

    RESTAURANT = "restaurant"
    FUNCTION = "function"
    EMPLOYEE = "employee"
    SUBCATEGORY = "subcategory"


def _zero_months() -> list[Decimal]:
    return [ZERO] * 12


@dataclass
class BudgetLine:
    """One line of the projected HR budget with twelve monthly amounts."""

    level: BudgetLevel
    label: str
    restaurant_id: int
    restaurant_label: str
    job_function_id: Optional[int] = None
    function_label: str = ""
    employee_id: Optional[int] = None
    employee_name: str = ""
    subcategory_id: Optional[int] = None
    months: list[Decimal] = field(default_factory=_zero_months)

    @property
    def total(self) -> Decimal:
        return sum(self.months, ZERO)

    def add(self, months: list[Decimal]) -> None:
        self.months = [a + b for a, b in zip(self.months, months)]


def settings_for(settings: list[HRSettings], day: date) -> Optional[HRSettings]:
    """Settings applicable on a day; the latest start date wins."""
    applicable = [s for s in settings if s.applies_on(day)]
    if not applicable:
        return None
    return max(applicable, key=lambda s: (s.start_date, s.id))


def month_range(row: SalaryHistory, year: int) -> range:
    """Months (1-12) of the year covered by a pay element row."""
    if row.start_date.year > year or (row.end_date is not None and row.end_date.year < year):
        return range(0)
    first = row.start_date.month if row.start_date.year == year else 1
    last = row.end_date.month if row.end_date is not None and row.end_date.year == year else 12
    return range(first, last + 1)


class HRBudgetService:
    """Project payroll costs over a year and manage staff numbers."""

    def __init__(self, db: Database, client_id: str = DEFAULT_CLIENT_ID):
        """Initialize HR budget service.

        Args:
            db: Database instance
            client_id: Tenant the employees belong to
        """
        self.db = db
        self.client_id = client_id

    def project(self, year: int, restaurant_id: Optional[int] = None) -> list[BudgetLine]:
        """Project the HR budget of a year.

        Lines are returned depth-first: restaurant, then its job functions in
        display order, then the employees assigned to each function, then one
        line per pay subcategory followed by its charge lines. Parent lines
        sum their children.

        A pay element counts for a month only when the employee has an
        assignment to the restaurant and function active on the 15th; the
        amount is multiplied by the sum of the presence rates of those
        assignments. Charges use the HR settings applicable on the 15th.

        Args:
            year: Budget year
            restaurant_id: Limit the projection to one restaurant

        Returns:
            Flat list of BudgetLine in display order
        """
        restaurants = self.db.list_restaurants(self.client_id)
        if restaurant_id is not None:
            restaurants = [r for r in restaurants if r.id == restaurant_id]

        employees = {e.id: e for e in self.db.list_employees(self.client_id)}
        functions = {f.id: f for f in self.db.list_job_functions(self.client_id)}
        subcategories = {s.id: s for s in self.db.list_flow_subcategories(self.client_id)}
        charge_settings = {
            s.subcategory_id: s for s in self.db.list_hr_subcategory_settings(self.client_id)
        }
        all_settings = self.db.list_hr_settings(self.client_id)
        monthly_settings = [settings_for(all_settings, date(year, m, 15)) for m in range(1, 13)]

        history: dict[int, list[SalaryHistory]] = {}
        for row in self.db.list_salary_history(
            self.client_id, start_date=date(year, 1, 1), end_date=date(year, 12, 31)
        ):
            history.setdefault(row.employee_id, []).append(row)

        lines: list[BudgetLine] = []
        for restaurant in restaurants:
            restaurant_line = BudgetLine(
                level=BudgetLevel.RESTAURANT,
                label=restaurant.label,
                restaurant_id=restaurant.id,
                restaurant_label=restaurant.label,
            )
            lines.append(restaurant_line)

            assignments = [
                a for a in self.db.list_assignments(restaurant_id=restaurant.id) if a.employee_id in employees
            ]
            staff_by_function: dict[int, list[int]] = {}
            for assignment in assignments:
                staff = staff_by_function.setdefault(assignment.job_function_id, [])
                if assignment.employee_id not in staff:
                    staff.append(assignment.employee_id)

            ordered_functions = sorted(
                (functions[f] for f in staff_by_function if f in functions),
                key=lambda f: (f.display_order or 0, f.label),
            )
            for function in ordered_functions:
                function_line = BudgetLine(
                    level=BudgetLevel.FUNCTION,
                    label=function.label,
                    restaurant_id=restaurant.id,
                    restaurant_label=restaurant.label,
                    job_function_id=function.id,
                    function_label=function.label,
                )
                lines.append(function_line)

                for employee_id in staff_by_function[function.id]:
                    employee = employees[employee_id]
                    employee_assignments = [
                        a
                        for a in assignments
                        if a.employee_id == employee_id and a.job_function_id == function.id
                    ]
                    employee_lines = self._employee_lines(
                        function_line,
                        employee,
                        employee_assignments,
                        history.get(employee_id, []),
                        year,
                        monthly_settings,
                        subcategories,
                        charge_settings,
                    )
                    lines.extend(employee_lines)
                    function_line.add(employee_lines[0].months)

                restaurant_line.add(function_line.months)

        logger.info("Projected HR budget %d: %d line(s)", year, len(lines))
        return lines

    def _employee_lines(
        self,
        function_line: BudgetLine,
        employee: Employee,
        assignments: list[Assignment],
        history: list[SalaryHistory],
        year: int,
        monthly_settings: list[Optional[HRSettings]],
        subcategories: dict,
        charge_settings: dict,
    ) -> list[BudgetLine]:
        name = f"{employee.last_name} {employee.first_name}"

        def make_line(level: BudgetLevel, label: str, subcategory_id: Optional[int] = None) -> BudgetLine:
            return BudgetLine(
                level=level,
                label=label,
                restaurant_id=function_line.restaurant_id,
                restaurant_label=function_line.restaurant_label,
                job_function_id=function_line.job_function_id,
                function_label=function_line.function_label,
                employee_id=employee.id,
                employee_name=name,
                subcategory_id=subcategory_id,
            )

        employee_line = make_line(BudgetLevel.EMPLOYEE, name)
        amounts: dict[int, list[Decimal]] = {}
        employer_charges: dict[int, list[Decimal]] = {}
        employee_charges: dict[int, list[Decimal]] = {}

        for row in history:
            if row.subcategory_id is None:
                continue
            months = amounts.setdefault(row.subcategory_id, _zero_months())
            employer = employer_charges.setdefault(row.subcategory_id, _zero_months())
            employee_share = employee_charges.setdefault(row.subcategory_id, _zero_months())
            setting = charge_settings.get(row.subcategory_id)

            for month in month_range(row, year):
                day = date(year, month, 15)
                active = [a for a in assignments if a.is_active_on(day)]
                if not active:
                    continue
                presence = sum((a.presence_rate if a.presence_rate else ONE for a in active), ZERO)
                amount = row.amount * presence
                months[month - 1] += amount

                settings = monthly_settings[month - 1]
                if setting is None:
                    continue
                if setting.employer_charges:
                    rate = settings.employer_rate if settings is not None else ZERO
                    employer[month - 1] += amount * rate / HUNDRED
                if setting.employee_charges:
                    rate = settings.employee_rate if settings is not None else ZERO
                    employee_share[month - 1] += amount * rate / HUNDRED

        lines = [employee_line]
        for subcategory_id, months in amounts.items():
            subcategory = subcategories.get(subcategory_id)
            line = make_line(
                BudgetLevel.SUBCATEGORY,
                subcategory.label if subcategory is not None else str(subcategory_id),
                subcategory_id,
            )
            line.months = months
            lines.append(line)
            employee_line.add(months)

            setting = charge_settings.get(subcategory_id)
            if setting is None:
                continue
            for applies, target_id, charges, suffix in (
                (setting.employer_charges, setting.employer_charge_subcategory_id, employer_charges, "employer charges"),
                (setting.employee_charges, setting.employee_charge_subcategory_id, employee_charges, "employee charges"),
            ):
                if not applies or target_id is None:
                    continue
                target = subcategories.get(target_id)
                label = target.label if target is not None else str(target_id)
                charge_line = make_line(BudgetLevel.SUBCATEGORY, f"{label} ({suffix})", target_id)
                charge_line.months = charges[subcategory_id]
                lines.append(charge_line)
                employee_line.add(charge_line.months)
        return lines

    @staticmethod
    def _export_row(line: BudgetLine) -> list:
        return [
            line.level.value,
            line.restaurant_label,
            line.function_label,
            line.employee_name,
            line.label if line.level == BudgetLevel.SUBCATEGORY else "",
            *[m.quantize(Decimal("0.01")) for m in line.months],
            line.total.quantize(Decimal("0.01")),
        ]

    def export_xlsx(self, lines: list[BudgetLine], file_path: str, year: Optional[int] = None) -> Path:
        """Write the budget to an Excel workbook.

        Args:
            lines: Lines returned by project()
            file_path: Destination .xlsx path
            year: Budget year used for the sheet title

        Returns:
            Path of the written file
        """
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = f"HR budget {year}" if year else "HR budget"
        sheet.append(list(EXPORT_HEADERS))
        for cell in sheet[1]:
            cell.font = Font(bold=True)

        for line in lines:
            row = self._export_row(line)
            sheet.append([float(v) if isinstance(v, Decimal) else v for v in row])
            if line.level != BudgetLevel.SUBCATEGORY:
                for cell in sheet[sheet.max_row]:
                    cell.font = Font(bold=True)

        sheet.freeze_panes = "B2"
        path = Path(file_path)
        workbook.save(path)
        logger.info("Exported %d HR budget line(s) to %s", len(lines), path)
        return path

    def export_csv(self, lines: list[BudgetLine], file_path: str) -> Path:
        """Write the budget to a ";"-delimited CSV file."""
        path = Path(file_path)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, delimiter=";")
            writer.writerow(EXPORT_HEADERS)
            for line in lines:
                writer.writerow(self._export_row(line))
        logger.info("Exported %d HR budget line(s) to %s", len(lines), path)
        return path

    def next_staff_number(self, today: Optional[date] = None) -> str:
        """Generate the next staff number (matricule) and persist the counter.

        Raises:
            NotFoundError: If no HR settings apply today or they define no prefix
        """
        settings = settings_for(self.db.list_hr_settings(self.client_id), today or date.today())
        if settings is None or not settings.staff_number_prefix:
            raise NotFoundError("No HR settings with a staff number prefix apply today")

        counter = (settings.staff_number_counter or 1) + 1
        width = settings.staff_number_width or DEFAULT_STAFF_NUMBER_WIDTH
        self.db.update_staff_number_counter(settings.id, counter)
        staff_number = f"{settings.staff_number_prefix}{str(counter).zfill(width)}"
        logger.info("Generated staff number %s", staff_number)
        return staff_number
