"""Main CLI entry point."""

import logging

import click
from restops.database.factories import create_sqlite_database
from restops.domain.entities import DEFAULT_CLIENT_ID

# Import and register all commands at module level
from restops.cli.commands import (
    restaurant,
    account,
    format,
    statement,
    closure,
    invoice,
    ca_budget,
    ca_actual,
    hr,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides RESTOPS_DB_PATH environment variable)",
    envvar="RESTOPS_DB_PATH",
)
@click.option(
    "--client",
    default=DEFAULT_CLIENT_ID,
    show_default=True,
    help="Client (tenant) whose data is used",
    envvar="RESTOPS_CLIENT",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Log debug messages to stderr",
    envvar="RESTOPS_VERBOSE",
)
@click.pass_context
def cli(ctx, db_path: str | None, client: str, verbose: bool):
    """Restops - Restaurant back-office application.

    Import and reconcile bank statements, record cash register closures,
    plan and import revenue, and project HR budgets.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["client_id"] = client


# Register all commands
restaurant.register_commands(cli)
account.register_commands(cli)
format.register_commands(cli)
statement.register_commands(cli)
closure.register_commands(cli)
invoice.register_commands(cli)
ca_budget.register_commands(cli)
ca_actual.register_commands(cli)
hr.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
