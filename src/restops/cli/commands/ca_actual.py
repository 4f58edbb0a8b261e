"""Actual revenue (CA réel) import commands."""

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import parse_date_option, resolve_restaurant_or_exit, services_context
from restops.domain.ca_actual import CAActualImportService


@click.group()
def ca_actual_group():
    """Import actual revenue from point-of-sale exports."""
    pass


@ca_actual_group.command("import")
@click.argument("revenue_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Only parse and simulate the file")
@click.pass_context
def import_revenue(ctx, revenue_file: str, dry_run: bool):
    """Import a ";"-delimited point-of-sale revenue file.

    Each sale is assigned to the service type whose time slot contains its
    hour. Nothing is written if any line cannot be resolved.

    Examples:
        restops ca-actual import ventes_mars.csv --dry-run
        restops ca-actual import ventes_mars.csv
    """
    service = CAActualImportService(*services_context(ctx))

    try:
        lines = service.simulate(service.parse(revenue_file))
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    totals = service.totals(lines)
    errors = [line for line in lines if line.error]
    click.echo(f"\n{len(lines)} line(s) read, {len(errors)} with errors")
    click.echo(f"  Total excl. tax: {totals['amount_excl_tax']:.2f}")
    click.echo(f"  Total incl. tax: {totals['amount_incl_tax']:.2f}")
    for line in errors:
        click.echo(f"    Line {line.line_number}: {line.error}", err=True)

    if errors:
        ctx.exit(1)
    if dry_run:
        click.echo("Dry run: nothing imported.")
        return

    try:
        result = service.import_lines(lines)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Daily records: {result.actuals}")
    click.echo(f"  Service records: {result.details}")
    click.echo(f"  Hourly records: {result.hourly}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)
        ctx.exit(1)


@ca_actual_group.command("list")
@click.option("--restaurant", help="Restaurant code or ID")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def list_actuals(ctx, restaurant: str | None, start_date: str | None, end_date: str | None):
    """List imported daily revenue."""
    service = CAActualImportService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    actuals = service.list_actuals(
        restaurant_id=restaurant_id,
        start_date=parse_date_option(ctx, start_date, "start date"),
        end_date=parse_date_option(ctx, end_date, "end date"),
    )
    if not actuals:
        click.echo("No actual revenue found.")
        return

    click.echo("\nActual revenue:")
    click.echo("-" * 60)
    for a in actuals:
        click.echo(
            f"{a.sale_date} | restaurant {a.restaurant_id:3d} | category {a.category_id:3d} | "
            f"{a.amount_excl_tax:>12.2f} | {a.amount_incl_tax:>12.2f}"
        )


def register_commands(cli):
    """Register CA actual commands with main CLI."""
    cli.add_command(ca_actual_group, name="ca-actual")
