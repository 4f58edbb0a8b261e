"""Bank statement import and reconciliation commands."""

from pathlib import Path

import click
from sqlalchemy.exc import SQLAlchemyError

from restops.cli.error_handling import handle_domain_error
from restops.cli.options import parse_date_option, services_context
from restops.domain.bank_entries import BankEntryProcessor, BankEntryService, ProcessProgress
from restops.domain.entities import LineStatus
from restops.domain.statement_import import StatementImportService

PREVIEW_ROWS = 10


@click.group()
def statement_group():
    """Import bank statements and book bank entries."""
    pass


@statement_group.command("preview")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "format_code", required=True, help="Import format code")
@click.option("--rows", type=int, default=PREVIEW_ROWS, show_default=True, help="Rows to show")
@click.pass_context
def preview_statement(ctx, statement_file: str, format_code: str, rows: int):
    """Parse a statement file and show its first rows without importing."""
    service = StatementImportService(*services_context(ctx))

    try:
        result = service.preview(statement_file, format_code)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    if not result.success:
        click.echo("The file does not match the format:", err=True)
        for error in result.errors:
            click.echo(f"  {error}", err=True)
        ctx.exit(1)

    click.echo(f"\n{len(result.rows)} row(s), columns: {', '.join(result.columns)}")
    click.echo("-" * 60)
    for row in result.rows[:rows]:
        click.echo(" | ".join("" if v is None else str(v) for v in row.values()))
    if service.file_already_imported(Path(statement_file).name):
        click.echo("\nWarning: a file with this name was already imported.")


@statement_group.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "format_code", required=True, help="Import format code")
@click.option("--batch-size", type=int, default=100, show_default=True, help="Lines per transaction")
@click.option("--process", "process_now", is_flag=True, help="Book bank entries right after the import")
@click.pass_context
def import_statement(ctx, statement_file: str, format_code: str, batch_size: int, process_now: bool):
    """Import a bank statement file.

    Lines are stored with status "A TRAITER"; run 'statement process' to
    book them as bank entries.

    Examples:
        restops statement import releve_janvier.csv --format BNP
        restops statement import extrato.xlsx --format CGD --process
    """
    db, client_id = services_context(ctx)
    service = StatementImportService(db, client_id)

    try:
        result = service.import_file(statement_file, format_code, batch_size=batch_size)
    except (ValueError, FileNotFoundError, SQLAlchemyError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{result['message']}")
    click.echo(f"  Import ID: {result['import_id']}")

    if process_now:
        _run_processor(ctx, BankEntryProcessor(db, client_id), import_id=result["import_id"])


@statement_group.command("list")
@click.pass_context
def list_imports(ctx):
    """List statement imports."""
    service = StatementImportService(*services_context(ctx))

    imports = service.list_imports()
    if not imports:
        click.echo("No statement imports found.")
        return

    click.echo("\nStatement imports:")
    click.echo("-" * 60)
    for imp in imports:
        click.echo(
            f"ID: {imp.id:3d} | {imp.created_at:%Y-%m-%d %H:%M} | {imp.status.value:8s} | "
            f"{imp.line_count:5d} lines | {imp.file_name}"
        )


@statement_group.command("lines")
@click.option("--import-id", type=int, help="Only lines of this import")
@click.option(
    "--status",
    type=click.Choice([s.value for s in LineStatus]),
    help="Only lines with this status",
)
@click.pass_context
def list_lines(ctx, import_id: int | None, status: str | None):
    """List imported statement lines."""
    service = StatementImportService(*services_context(ctx))

    lines = service.get_lines(
        import_id=import_id, status=LineStatus(status) if status else None
    )
    if not lines:
        click.echo("No statement lines found.")
        return

    click.echo("\nStatement lines:")
    click.echo("-" * 60)
    for line in lines:
        operation_date = line.operation_date.isoformat() if line.operation_date else "-"
        amount = f"{line.amount:>12.2f}" if line.amount is not None else f"{'-':>12s}"
        description = (line.description or "")[:30]
        click.echo(
            f"ID: {line.id:4d} | {operation_date} | {amount} | {line.status.value:9s} | {description}"
        )
        if line.status == LineStatus.ERROR and line.message:
            click.echo(f"       {line.message}")


def _run_processor(ctx, processor: BankEntryProcessor, import_id: int | None = None) -> None:
    def report(snapshot: ProcessProgress) -> None:
        if not snapshot.total:
            return
        click.echo(
            f"\r  {snapshot.processed}/{snapshot.total} line(s) processed", nl=False, err=True
        )

    result = processor.process(progress=report, import_id=import_id)
    click.echo("", err=True)
    click.echo(f"\n{result.summary}")
    for message in result.error_messages:
        click.echo(f"    {message}", err=True)
    if not result.success:
        ctx.exit(1)


@statement_group.command("process")
@click.option("--import-id", type=int, help="Only process lines of this import")
@click.pass_context
def process_lines(ctx, import_id: int | None):
    """Book pending and failed statement lines as bank entries.

    Each line is matched to a bank account by its account number. Lines
    identical to an existing entry are marked "DOUBLON"; the others are
    booked and marked "CREER". Failures are marked "ERREUR" and retried on
    the next run.
    """
    _run_processor(ctx, BankEntryProcessor(*services_context(ctx)), import_id=import_id)


@statement_group.command("entries")
@click.option("--account-id", type=int, help="Only entries of this bank account")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def list_entries(ctx, account_id: int | None, start_date: str | None, end_date: str | None):
    """List booked bank entries."""
    service = BankEntryService(*services_context(ctx))
    start = parse_date_option(ctx, start_date, "start date")
    end = parse_date_option(ctx, end_date, "end date")

    entries = service.list_entries(bank_account_id=account_id, start_date=start, end_date=end)
    if not entries:
        click.echo("No bank entries found.")
        return

    click.echo("\nBank entries:")
    click.echo("-" * 60)
    for entry in entries:
        amount = f"{entry.amount:>12.2f}" if entry.amount is not None else f"{'-':>12s}"
        click.echo(
            f"ID: {entry.id:4d} | {entry.operation_date} | account {entry.bank_account_id:3d} | "
            f"{amount} | {(entry.description or '')[:30]}"
        )


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
