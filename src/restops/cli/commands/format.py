"""Statement import format management commands."""

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import services_context
from restops.domain.import_format import SUPPORTED_EXTENSIONS, ImportFormatService


@click.group()
def format_group():
    """Manage bank statement import formats."""
    pass


@format_group.command("create")
@click.argument("code")
@click.option("--label", help="Format label (defaults to the code)")
@click.option("--bank", help="Bank the format belongs to")
@click.option(
    "--extension",
    type=click.Choice(SUPPORTED_EXTENSIONS, case_sensitive=False),
    default="csv",
    show_default=True,
    help="File extension",
)
@click.option("--encoding", default="utf-8", show_default=True, help="Text encoding of delimited files")
@click.option("--separator", default=";", show_default=True, help='Field separator ("\\t" for TAB)')
@click.option(
    "--first-data-line",
    type=int,
    default=1,
    show_default=True,
    help="Line of the first data row; above 1, columns are read by position",
)
@click.option(
    "--column",
    "columns",
    multiple=True,
    help='Column descriptor "name:type" (text, date, amount); repeat in file order',
)
@click.pass_context
def create_format(
    ctx,
    code: str,
    label: str | None,
    bank: str | None,
    extension: str,
    encoding: str,
    separator: str,
    first_data_line: int,
    columns: tuple[str, ...],
):
    """Create a new import format.

    Examples:
        restops format create BNP --separator ";" --column date:date --column libelle --column montant:amount
        restops format create CGD --extension xlsx --first-data-line 8 --column data_lancamento:date
    """
    service = ImportFormatService(*services_context(ctx))

    try:
        format_id = service.create_format(
            code=code,
            label=label or code,
            columns=list(columns),
            bank=bank,
            extension=extension.lower(),
            encoding=encoding,
            separator=separator,
            first_data_line=first_data_line,
        )
        click.echo(f"Created import format '{code}' (ID: {format_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@format_group.command("list")
@click.pass_context
def list_formats(ctx):
    """List import formats."""
    service = ImportFormatService(*services_context(ctx))

    formats = service.list_formats()
    if not formats:
        click.echo("No import formats found.")
        return

    click.echo("\nImport formats:")
    click.echo("-" * 60)
    for fmt in formats:
        click.echo(
            f"ID: {fmt.id:3d} | {fmt.code:10s} | {fmt.extension:4s} | "
            f"sep {fmt.separator!r} | first line {fmt.first_data_line}"
        )
        if fmt.columns:
            click.echo(f"       columns: {', '.join(fmt.columns)}")


@format_group.command("delete")
@click.argument("code")
@click.pass_context
def delete_format(ctx, code: str):
    """Delete an import format that was never used."""
    service = ImportFormatService(*services_context(ctx))

    try:
        fmt = service.require_format(code)
        service.delete_format(fmt.id)
        click.echo(f"Deleted import format '{code}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register format commands with main CLI."""
    cli.add_command(format_group, name="format")
