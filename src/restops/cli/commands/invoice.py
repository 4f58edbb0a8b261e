"""Purchase invoice commands."""

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import (
    parse_date_option,
    parse_decimal_option,
    resolve_restaurant_or_exit,
    services_context,
)
from restops.domain.purchase_invoice import PurchaseInvoiceService


@click.group()
def invoice_group():
    """Manage purchase invoices and payment modes."""
    pass


@invoice_group.command("payment-mode")
@click.argument("code")
@click.argument("label")
@click.option("--cash", is_flag=True, help="Invoices settled with this mode are paid from the till")
@click.pass_context
def create_payment_mode(ctx, code: str, label: str, cash: bool):
    """Create a payment mode.

    Examples:
        restops invoice payment-mode ESP "Espèces" --cash
        restops invoice payment-mode VIR "Virement"
    """
    service = PurchaseInvoiceService(*services_context(ctx))

    try:
        mode_id = service.create_payment_mode(code=code, label=label, cash_payment=cash)
        click.echo(f"Created payment mode '{code.strip().upper()}' (ID: {mode_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("payment-modes")
@click.option("--all", "show_all", is_flag=True, help="Include inactive payment modes")
@click.pass_context
def list_payment_modes(ctx, show_all: bool):
    """List payment modes."""
    service = PurchaseInvoiceService(*services_context(ctx))

    modes = service.list_payment_modes(active_only=not show_all)
    if not modes:
        click.echo("No payment modes found.")
        return

    click.echo("\nPayment modes:")
    click.echo("-" * 60)
    for m in modes:
        cash = " [cash]" if m.cash_payment else ""
        status = "" if m.active else " (inactive)"
        click.echo(f"ID: {m.id:3d} | {m.code:10s} | {m.label}{cash}{status}")


@invoice_group.command("suppliers")
@click.pass_context
def list_suppliers(ctx):
    """List suppliers."""
    service = PurchaseInvoiceService(*services_context(ctx))

    suppliers = service.list_suppliers()
    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo("\nSuppliers:")
    click.echo("-" * 60)
    for s in suppliers:
        click.echo(f"ID: {s.id:3d} | {s.name}")


@invoice_group.command("create")
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--supplier", required=True, help="Supplier name; created when unknown")
@click.option("--mode", "mode_code", required=True, help="Payment mode code")
@click.option("--date", "invoice_date", required=True, help="Invoice date")
@click.option("--excl-tax", required=True, help="Amount excl. tax")
@click.option("--vat", required=True, help="VAT amount")
@click.option("--incl-tax", help="Amount incl. tax (default: excl. tax + VAT)")
@click.option("--number", "document_number", help="Supplier document number")
@click.option("--comment", help="Free comment")
@click.pass_context
def create_invoice(
    ctx,
    restaurant: str,
    supplier: str,
    mode_code: str,
    invoice_date: str,
    excl_tax: str,
    vat: str,
    incl_tax: str | None,
    document_number: str | None,
    comment: str | None,
):
    """Record a purchase invoice.

    Examples:
        restops invoice create --restaurant PAR01 --supplier Metro --mode ESP \\
            --date today --excl-tax 35.75 --vat 7.15 --number F-1021
    """
    service = PurchaseInvoiceService(*services_context(ctx))

    mode = service.get_payment_mode_by_code(mode_code)
    if mode is None:
        click.echo(f"Error: Payment mode '{mode_code}' not found", err=True)
        ctx.exit(1)

    try:
        invoice_id = service.create_invoice(
            restaurant_id=resolve_restaurant_or_exit(ctx, restaurant),
            supplier_name=supplier,
            payment_mode_id=mode.id,
            invoice_date=parse_date_option(ctx, invoice_date, "invoice date"),
            amount_excl_tax=parse_decimal_option(ctx, excl_tax, "amount excl. tax"),
            amount_vat=parse_decimal_option(ctx, vat, "VAT amount"),
            amount_incl_tax=parse_decimal_option(ctx, incl_tax, "amount incl. tax"),
            document_number=document_number,
            comment=comment,
        )
        click.echo(f"Created purchase invoice (ID: {invoice_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("list")
@click.option("--restaurant", help="Restaurant code or ID")
@click.option("--cash", is_flag=True, help="Only invoices still payable from the till (needs --restaurant)")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def list_invoices(ctx, restaurant: str | None, cash: bool, start_date: str | None, end_date: str | None):
    """List purchase invoices, newest first."""
    service = PurchaseInvoiceService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    if cash:
        if restaurant_id is None:
            click.echo("Error: --cash needs --restaurant", err=True)
            ctx.exit(1)
        invoices = service.cash_invoices(restaurant_id)
    else:
        invoices = service.list_invoices(
            restaurant_id=restaurant_id,
            start_date=parse_date_option(ctx, start_date, "start date"),
            end_date=parse_date_option(ctx, end_date, "end date"),
        )
    if not invoices:
        click.echo("No purchase invoices found.")
        return

    click.echo("\nPurchase invoices:")
    click.echo("-" * 60)
    for i in invoices:
        click.echo(
            f"ID: {i.id:4d} | {i.invoice_date} | {i.supplier_name:20s} | "
            f"{i.document_number or '':10s} | {i.amount_incl_tax:>10.2f} | {i.payment_mode_label}"
        )


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.pass_context
def delete_invoice(ctx, invoice_id: int):
    """Delete a purchase invoice not attached to any cash closure."""
    service = PurchaseInvoiceService(*services_context(ctx))

    try:
        service.delete_invoice(invoice_id)
        click.echo(f"Deleted purchase invoice {invoice_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register purchase invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
