"""Revenue budget (CA budget) commands."""

from datetime import datetime, time
from decimal import Decimal, InvalidOperation

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import parse_decimal_option, resolve_restaurant_or_exit, services_context
from restops.domain.ca_budget import BudgetDetailDraft, BudgetHeader, CABudgetService
from restops.domain.entities import FlowType


@click.group()
def ca_budget_group():
    """Plan monthly revenue by restaurant and service."""
    pass


def _parse_time(ctx, value: str | None, label: str) -> time | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        click.echo(f"Error: Invalid {label} (expected HH:MM): {value}", err=True)
        ctx.exit(1)


@ca_budget_group.command("category")
@click.argument("code")
@click.argument("label")
@click.option(
    "--flow-type",
    type=click.Choice([t.value for t in FlowType]),
    default=FlowType.INCOME.value,
    show_default=True,
    help="Income (produit) or expense (charge)",
)
@click.option("--restaurant", help="Restrict the category to one restaurant")
@click.pass_context
def create_category(ctx, code: str, label: str, flow_type: str, restaurant: str | None):
    """Create a flow category."""
    service = CABudgetService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    try:
        category_id = service.create_category(
            code=code, label=label, flow_type=FlowType(flow_type), restaurant_id=restaurant_id
        )
        click.echo(f"Created flow category '{code}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@ca_budget_group.command("subcategory")
@click.argument("category_id", type=int)
@click.argument("code")
@click.argument("label")
@click.pass_context
def create_subcategory(ctx, category_id: int, code: str, label: str):
    """Create a flow subcategory under CATEGORY_ID."""
    service = CABudgetService(*services_context(ctx))

    try:
        subcategory_id = service.create_subcategory(category_id, code, label)
        click.echo(f"Created flow subcategory '{code}' (ID: {subcategory_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@ca_budget_group.command("categories")
@click.pass_context
def list_categories(ctx):
    """List flow categories with their subcategories."""
    service = CABudgetService(*services_context(ctx))

    categories = service.list_categories()
    if not categories:
        click.echo("No flow categories found.")
        return

    click.echo("\nFlow categories:")
    click.echo("-" * 60)
    for category in categories:
        scope = f" (restaurant {category.restaurant_id})" if category.restaurant_id else ""
        click.echo(f"ID: {category.id:3d} | {category.code:10s} | {category.label}{scope}")
        for sub in service.list_subcategories(category.id):
            click.echo(f"       ID: {sub.id:3d} | {sub.code:10s} | {sub.label}")


@ca_budget_group.command("service")
@click.argument("code")
@click.argument("label")
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--start", "start_time", help="Start of the time slot (HH:MM)")
@click.option("--end", "end_time", help="End of the time slot (HH:MM)")
@click.option("--subcategory-id", type=int, help="Subcategory revenue of this service is booked on")
@click.pass_context
def create_service_type(
    ctx,
    code: str,
    label: str,
    restaurant: str,
    start_time: str | None,
    end_time: str | None,
    subcategory_id: int | None,
):
    """Create a service type such as lunch or dinner.

    Examples:
        restops ca-budget service MIDI "Lunch" --restaurant PAR01 --start 11:00 --end 15:00 --subcategory-id 1
    """
    service = CABudgetService(*services_context(ctx))

    try:
        service_type_id = service.create_service_type(
            restaurant_id=resolve_restaurant_or_exit(ctx, restaurant),
            code=code,
            label=label,
            start_time=_parse_time(ctx, start_time, "start time"),
            end_time=_parse_time(ctx, end_time, "end time"),
            subcategory_id=subcategory_id,
        )
        click.echo(f"Created service type '{code}' (ID: {service_type_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@ca_budget_group.command("services")
@click.option("--restaurant", help="Restaurant code or ID")
@click.pass_context
def list_service_types(ctx, restaurant: str | None):
    """List service types."""
    service = CABudgetService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    service_types = service.list_service_types(restaurant_id)
    if not service_types:
        click.echo("No service types found.")
        return

    click.echo("\nService types:")
    click.echo("-" * 60)
    for st in service_types:
        slot = "-"
        if st.start_time is not None and st.end_time is not None:
            slot = f"{st.start_time:%H:%M}-{st.end_time:%H:%M}"
        click.echo(f"ID: {st.id:3d} | restaurant {st.restaurant_id:3d} | {st.code:8s} | {slot:11s} | {st.label}")


@ca_budget_group.command("opening-days")
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--year", type=int, required=True)
@click.option("--month", type=int, required=True)
@click.option("--days", type=int, required=True, help="Planned opening days")
@click.option("--food-cost-rate", help="Planned food cost rate")
@click.pass_context
def set_opening_days(ctx, restaurant: str, year: int, month: int, days: int, food_cost_rate: str | None):
    """Set the planned opening days of a month."""
    service = CABudgetService(*services_context(ctx))

    try:
        service.set_opening_days(
            restaurant_id=resolve_restaurant_or_exit(ctx, restaurant),
            year=year,
            month=month,
            open_days=days,
            planned_food_cost_rate=parse_decimal_option(ctx, food_cost_rate, "food cost rate"),
        )
        click.echo(f"Set {days} opening day(s) for {year}-{month:02d}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def _detail(ctx, service: CABudgetService, value: str, category_id: int) -> BudgetDetailDraft:
    parts = [p.strip() for p in value.split(":")]
    try:
        service_type_id = int(parts[0])
        amount_excl_tax = Decimal(parts[1].replace(",", "."))
        amount_incl_tax = Decimal(parts[2].replace(",", ".")) if len(parts) > 2 and parts[2] else amount_excl_tax
        subcategory_id = int(parts[3]) if len(parts) > 3 and parts[3] else None
        covers = int(parts[4]) if len(parts) > 4 and parts[4] else None
    except (IndexError, ValueError, InvalidOperation):
        click.echo(f"Error: Invalid budget line: {value}", err=True)
        ctx.exit(1)
    if subcategory_id is None:
        subcategory_id = service.default_subcategory(service_type_id, category_id)
    return BudgetDetailDraft(
        service_type_id=service_type_id,
        subcategory_id=subcategory_id,
        amount_excl_tax=amount_excl_tax,
        amount_incl_tax=amount_incl_tax,
        covers=covers,
    )


@ca_budget_group.command("set")
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--year", type=int, required=True)
@click.option("--month", type=int, required=True)
@click.option("--category-id", type=int, required=True, help="Flow category of the budget")
@click.option(
    "--line",
    "lines",
    multiple=True,
    required=True,
    help='Budget line "service_type_id:amount_excl_tax[:amount_incl_tax[:subcategory_id[:covers]]]"',
)
@click.option("--open-days", type=int, help="Defaults to the month's opening days")
@click.option("--covers", type=int)
@click.option("--comment")
@click.option("--budget-id", type=int, help="Update this budget instead of creating one")
@click.pass_context
def set_budget(
    ctx,
    restaurant: str,
    year: int,
    month: int,
    category_id: int,
    lines: tuple[str, ...],
    open_days: int | None,
    covers: int | None,
    comment: str | None,
    budget_id: int | None,
):
    """Create or update the revenue budget of a month.

    When a line omits its subcategory, the service type's subcategory is
    used if it belongs to the budget category.

    Examples:
        restops ca-budget set --restaurant PAR01 --year 2026 --month 3 --category-id 1 \\
            --line 1:42000 --line 2:58000:63800
    """
    service = CABudgetService(*services_context(ctx))

    header = BudgetHeader(
        restaurant_id=resolve_restaurant_or_exit(ctx, restaurant),
        year=year,
        month=month,
        category_id=category_id,
        open_days=open_days,
        covers=covers,
        comment=comment,
        details=[_detail(ctx, service, line, category_id) for line in lines],
    )

    try:
        saved_id = service.save_budget(header, budget_id)
        budget = service.get_budget(saved_id)
        click.echo(
            f"Saved CA budget {year}-{month:02d} (ID: {saved_id}): "
            f"{budget.amount_excl_tax:.2f} excl. tax, {budget.amount_incl_tax:.2f} incl. tax"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@ca_budget_group.command("list")
@click.option("--restaurant", help="Restaurant code or ID")
@click.option("--year", type=int)
@click.pass_context
def list_budgets(ctx, restaurant: str | None, year: int | None):
    """List revenue budgets."""
    service = CABudgetService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    budgets = service.list_budgets(restaurant_id=restaurant_id, year=year)
    if not budgets:
        click.echo("No CA budgets found.")
        return

    click.echo("\nCA budgets:")
    click.echo("-" * 60)
    for b in budgets:
        click.echo(
            f"ID: {b.id:3d} | {b.year}-{b.month:02d} | restaurant {b.restaurant_id:3d} | "
            f"category {b.category_id:3d} | {b.amount_excl_tax:>12.2f} | {b.open_days or '-'} day(s)"
        )


@ca_budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a revenue budget with its lines."""
    service = CABudgetService(*services_context(ctx))

    try:
        service.delete_budget(budget_id)
        click.echo(f"Deleted CA budget {budget_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register CA budget commands with main CLI."""
    cli.add_command(ca_budget_group, name="ca-budget")
