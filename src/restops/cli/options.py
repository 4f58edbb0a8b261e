"""Shared CLI option converters."""

from datetime import date
from decimal import Decimal, InvalidOperation

import click

from restops.domain.restaurant import RestaurantService
from restops.utils.date_parser import parse_user_date


def services_context(ctx: click.Context) -> tuple:
    """Return the database and client id stored by the root group."""
    return ctx.obj["db"], ctx.obj["client_id"]


def parse_date_option(ctx: click.Context, value: str | None, label: str = "date") -> date | None:
    """Parse a date option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_user_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_decimal_option(ctx: click.Context, value: str | None, label: str) -> Decimal | None:
    """Parse a decimal option accepting a comma as decimal separator."""
    if value is None:
        return None
    try:
        return Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        click.echo(f"Error: Invalid {label}: {value}", err=True)
        ctx.exit(1)


def resolve_restaurant_or_exit(ctx: click.Context, reference: str) -> int:
    """Resolve a restaurant code or ID, or exit with a CLI error."""
    db, client_id = services_context(ctx)
    try:
        return RestaurantService(db, client_id).resolve(reference).id
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
