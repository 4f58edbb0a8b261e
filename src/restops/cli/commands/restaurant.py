"""Restaurant management commands."""

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import services_context
from restops.domain.restaurant import RestaurantService


@click.group()
def restaurant_group():
    """Manage restaurants."""
    pass


@restaurant_group.command("create")
@click.argument("code")
@click.argument("label")
@click.pass_context
def create_restaurant(ctx, code: str, label: str):
    """Create a new restaurant.

    Examples:
        restops restaurant create PAR01 "Paris Bastille"
    """
    service = RestaurantService(*services_context(ctx))

    try:
        restaurant_id = service.create_restaurant(code=code, label=label)
        click.echo(f"Created restaurant '{code.strip().upper()}' (ID: {restaurant_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@restaurant_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive restaurants")
@click.pass_context
def list_restaurants(ctx, show_all: bool):
    """List restaurants."""
    service = RestaurantService(*services_context(ctx))

    restaurants = service.list_restaurants(active_only=not show_all)
    if not restaurants:
        click.echo("No restaurants found.")
        return

    click.echo("\nRestaurants:")
    click.echo("-" * 60)
    for r in restaurants:
        status = "" if r.active else " (inactive)"
        click.echo(f"ID: {r.id:3d} | {r.code:10s} | {r.label}{status}")


@restaurant_group.command("deactivate")
@click.argument("restaurant", metavar="RESTAURANT")
@click.pass_context
def deactivate_restaurant(ctx, restaurant: str):
    """Deactivate a restaurant.

    RESTAURANT can be a restaurant code or ID.
    """
    service = RestaurantService(*services_context(ctx))

    try:
        found = service.resolve(restaurant)
        service.deactivate_restaurant(found.id)
        click.echo(f"Deactivated restaurant '{found.code}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register restaurant commands with main CLI."""
    cli.add_command(restaurant_group, name="restaurant")
