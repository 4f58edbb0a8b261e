"""CLI error handling helpers."""

import click

from restops.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | Exception) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ValidationError):
        for field_name, message in error.errors.items():
            click.echo(f"  {field_name}: {message}", err=True)
    ctx.exit(1)
