"""HR commands: employees, assignments, pay history and HR budget."""

from pathlib import Path

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import (
    parse_date_option,
    parse_decimal_option,
    resolve_restaurant_or_exit,
    services_context,
)
from restops.domain.hr import EmployeeService
from restops.domain.hr_budget import BudgetLevel, HRBudgetService

INDENT = {
    BudgetLevel.RESTAURANT: "",
    BudgetLevel.FUNCTION: "  ",
    BudgetLevel.EMPLOYEE: "    ",
    BudgetLevel.SUBCATEGORY: "      ",
}


@click.group()
def hr_group():
    """Manage staff and project the HR budget."""
    pass


@hr_group.command("add-employee")
@click.argument("last_name")
@click.argument("first_name")
@click.option("--staff-number", help="Staff number; generated from the HR settings when omitted")
@click.option("--short-code", help="Short code")
@click.pass_context
def add_employee(ctx, last_name: str, first_name: str, staff_number: str | None, short_code: str | None):
    """Create an employee."""
    service = EmployeeService(*services_context(ctx))

    try:
        employee_id = service.create_employee(
            last_name=last_name, first_name=first_name, staff_number=staff_number, short_code=short_code
        )
        employee = service.get_employee(employee_id)
        click.echo(f"Created employee {employee.staff_number} '{last_name} {first_name}' (ID: {employee_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("employees")
@click.pass_context
def list_employees(ctx):
    """List active employees."""
    service = EmployeeService(*services_context(ctx))

    employees = service.list_employees()
    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\nEmployees:")
    click.echo("-" * 60)
    for e in employees:
        click.echo(f"ID: {e.id:3d} | {e.staff_number or '-':10s} | {e.last_name} {e.first_name}")


@hr_group.command("add-function")
@click.argument("code")
@click.argument("label")
@click.option("--order", "display_order", type=int, default=0, help="Display order in the HR budget")
@click.pass_context
def add_function(ctx, code: str, label: str, display_order: int):
    """Create a job function."""
    service = EmployeeService(*services_context(ctx))

    try:
        function_id = service.create_job_function(code, label, display_order)
        click.echo(f"Created job function '{code}' (ID: {function_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("add-contract")
@click.argument("employee_id", type=int)
@click.option("--start-date", required=True)
@click.option("--end-date")
@click.option("--type", "contract_type", help="Contract type code, created when unknown")
@click.pass_context
def add_contract(ctx, employee_id: int, start_date: str, end_date: str | None, contract_type: str | None):
    """Add an employment contract to an employee."""
    service = EmployeeService(*services_context(ctx))

    try:
        contract_type_id = None
        if contract_type:
            known = {t.code: t.id for t in service.list_contract_types()}
            contract_type_id = known.get(contract_type) or service.create_contract_type(
                contract_type, contract_type
            )
        contract_id = service.add_contract(
            employee_id,
            parse_date_option(ctx, start_date, "start date"),
            end_date=parse_date_option(ctx, end_date, "end date"),
            contract_type_id=contract_type_id,
        )
        click.echo(f"Added contract {contract_id} to employee {employee_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("assign")
@click.argument("employee_id", type=int)
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--function-id", type=int, required=True, help="Job function ID")
@click.option("--start-date", required=True)
@click.option("--end-date")
@click.option("--presence", help="Presence rate between 0 and 1 (default 1)")
@click.pass_context
def assign(
    ctx,
    employee_id: int,
    restaurant: str,
    function_id: int,
    start_date: str,
    end_date: str | None,
    presence: str | None,
):
    """Assign an employee to a restaurant and job function."""
    service = EmployeeService(*services_context(ctx))

    try:
        assignment_id = service.assign(
            employee_id,
            resolve_restaurant_or_exit(ctx, restaurant),
            function_id,
            parse_date_option(ctx, start_date, "start date"),
            end_date=parse_date_option(ctx, end_date, "end date"),
            presence_rate=parse_decimal_option(ctx, presence, "presence rate"),
        )
        click.echo(f"Created assignment {assignment_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("add-salary")
@click.argument("employee_id", type=int)
@click.option("--subcategory-id", type=int, required=True, help="Flow subcategory of the pay element")
@click.option("--amount", required=True, help="Monthly amount")
@click.option("--start-date", required=True)
@click.option("--end-date")
@click.pass_context
def add_salary(
    ctx, employee_id: int, subcategory_id: int, amount: str, start_date: str, end_date: str | None
):
    """Record a monthly pay element of an employee."""
    service = EmployeeService(*services_context(ctx))

    try:
        salary_id = service.add_salary(
            employee_id,
            subcategory_id,
            parse_date_option(ctx, start_date, "start date"),
            parse_decimal_option(ctx, amount, "amount"),
            end_date=parse_date_option(ctx, end_date, "end date"),
        )
        click.echo(f"Recorded pay element {salary_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("settings")
@click.option("--start-date", required=True)
@click.option("--end-date")
@click.option("--employer-rate", required=True, help="Employer charge rate in percent")
@click.option("--employee-rate", required=True, help="Employee charge rate in percent")
@click.option("--prefix", help="Staff number prefix")
@click.option("--counter", type=int, help="Last staff number issued")
@click.option("--width", type=int, help="Digits of the staff number counter")
@click.pass_context
def add_settings(
    ctx,
    start_date: str,
    end_date: str | None,
    employer_rate: str,
    employee_rate: str,
    prefix: str | None,
    counter: int | None,
    width: int | None,
):
    """Create HR settings (charge rates and staff numbering)."""
    service = EmployeeService(*services_context(ctx))

    try:
        settings_id = service.create_settings(
            parse_date_option(ctx, start_date, "start date"),
            parse_decimal_option(ctx, employer_rate, "employer rate"),
            parse_decimal_option(ctx, employee_rate, "employee rate"),
            end_date=parse_date_option(ctx, end_date, "end date"),
            staff_number_prefix=prefix,
            staff_number_counter=counter,
            staff_number_width=width,
        )
        click.echo(f"Created HR settings {settings_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("charges")
@click.argument("subcategory_id", type=int)
@click.option("--employer-to", type=int, help="Subcategory employer charges are booked on")
@click.option("--employee-to", type=int, help="Subcategory employee charges are booked on")
@click.pass_context
def set_charges(ctx, subcategory_id: int, employer_to: int | None, employee_to: int | None):
    """Declare the charges a pay subcategory bears."""
    service = EmployeeService(*services_context(ctx))

    try:
        service.create_subcategory_setting(
            subcategory_id,
            employer_charges=employer_to is not None,
            employee_charges=employee_to is not None,
            employer_charge_subcategory_id=employer_to,
            employee_charge_subcategory_id=employee_to,
        )
        click.echo(f"Saved charge settings of subcategory {subcategory_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hr_group.command("budget")
@click.argument("year", type=int)
@click.option("--restaurant", help="Restaurant code or ID")
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    help="Export to a file (.xlsx or .csv) instead of printing",
)
@click.pass_context
def hr_budget(ctx, year: int, restaurant: str | None, output: str | None):
    """Project the HR budget of YEAR.

    Examples:
        restops hr budget 2026
        restops hr budget 2026 --restaurant PAR01 --output budget_rh_2026.xlsx
    """
    service = HRBudgetService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    lines = service.project(year, restaurant_id=restaurant_id)
    if not lines:
        click.echo("No HR budget data found.")
        return

    if output:
        suffix = Path(output).suffix.lower()
        if suffix == ".xlsx":
            path = service.export_xlsx(lines, output, year=year)
        elif suffix == ".csv":
            path = service.export_csv(lines, output)
        else:
            click.echo("Error: Output file must end with .xlsx or .csv", err=True)
            ctx.exit(1)
        click.echo(f"Exported {len(lines)} line(s) to {path}")
        return

    click.echo(f"\nHR budget {year}:")
    click.echo("-" * 60)
    for line in lines:
        label = f"{INDENT[line.level]}{line.label}"
        click.echo(f"{label[:44]:44s} {line.total:>14.2f}")


@hr_group.command("next-number")
@click.pass_context
def next_number(ctx):
    """Issue the next staff number."""
    service = HRBudgetService(*services_context(ctx))

    try:
        click.echo(service.next_staff_number())
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register HR commands with main CLI."""
    cli.add_command(hr_group, name="hr")
