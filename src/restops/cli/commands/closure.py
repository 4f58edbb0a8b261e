"""Cash register closure commands."""

from decimal import Decimal, InvalidOperation

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import (
    parse_date_option,
    parse_decimal_option,
    resolve_restaurant_or_exit,
    services_context,
)
from restops.domain.cash_closure import (
    CardPaymentDraft,
    CashClosureService,
    ClosureDraft,
    ExpenseDraft,
    compute_totals,
)
from restops.domain.purchase_invoice import PurchaseInvoiceService


@click.group()
def closure_group():
    """Record cash register closures."""
    pass


def _split_amounts(ctx, value: str, label: str) -> list:
    parts = value.split(":")
    try:
        parts[0] = Decimal(parts[0].strip().replace(",", "."))
        if label == "card" and len(parts) > 1:
            parts[1] = Decimal(parts[1].strip().replace(",", "."))
    except InvalidOperation:
        click.echo(f"Error: Invalid {label} amount: {value}", err=True)
        ctx.exit(1)
    return parts


def _card_payment(ctx, value: str) -> CardPaymentDraft:
    parts = _split_amounts(ctx, value, "card")
    gross = parts[0]
    actual = parts[1] if len(parts) > 1 else gross
    period = parts[2] if len(parts) > 2 else None
    return CardPaymentDraft(gross_amount=gross, actual_amount=actual, period=period)


def _expense(ctx, value: str) -> ExpenseDraft:
    parts = _split_amounts(ctx, value, "expense")
    reference = parts[1] if len(parts) > 1 else None
    return ExpenseDraft(amount_incl_tax=parts[0], invoice_reference=reference)


def _echo_amount(label: str, value) -> None:
    text = f"{value:.2f}" if value is not None else "-"
    click.echo(f"  {label:22s} {text:>12s}")


@closure_group.command("create")
@click.option("--restaurant", required=True, help="Restaurant code or ID")
@click.option("--date", "closure_date", required=True, help="Closure date")
@click.option("--revenue", required=True, help="Revenue incl. tax")
@click.option("--revenue-excl-tax", help="Revenue excl. tax")
@click.option("--deposit", required=True, help="Cash actually deposited at the bank")
@click.option("--opening-float", required=True, help="Cash in the till at opening")
@click.option(
    "--card",
    "cards",
    multiple=True,
    help='Card takings "gross[:actual[:period]]"; repeatable',
)
@click.option(
    "--expense",
    "expenses",
    multiple=True,
    help='Expense paid from the till "amount[:invoice]"; repeatable',
)
@click.option(
    "--invoice",
    "invoice_ids",
    type=int,
    multiple=True,
    help="Purchase invoice ID paid from the till; repeatable",
)
@click.option("--comment", help="Free comment")
@click.option("--validate", is_flag=True, help="Mark the closure as validated")
@click.pass_context
def create_closure(
    ctx,
    restaurant: str,
    closure_date: str,
    revenue: str,
    revenue_excl_tax: str | None,
    deposit: str,
    opening_float: str,
    cards: tuple[str, ...],
    expenses: tuple[str, ...],
    invoice_ids: tuple[int, ...],
    comment: str | None,
    validate: bool,
):
    """Record the closure of a restaurant's cash register.

    The theoretical deposit is the revenue minus card takings and expenses;
    the difference with the actual deposit stays in the till.

    Examples:
        restops closure create --restaurant PAR01 --date today --revenue 2450 \\
            --deposit 800 --opening-float 150 --card 1500:1487.50:midi --expense 42.90:F-1021
        restops closure create --restaurant PAR01 --date today --revenue 900 \\
            --deposit 300 --opening-float 150 --invoice 12
    """
    service = CashClosureService(*services_context(ctx))

    draft = ClosureDraft(
        restaurant_id=resolve_restaurant_or_exit(ctx, restaurant),
        closure_date=parse_date_option(ctx, closure_date, "closure date"),
        revenue_incl_tax=parse_decimal_option(ctx, revenue, "revenue"),
        revenue_excl_tax=parse_decimal_option(ctx, revenue_excl_tax, "revenue excl. tax"),
        actual_deposit=parse_decimal_option(ctx, deposit, "deposit"),
        opening_float=parse_decimal_option(ctx, opening_float, "opening float"),
        comment=comment,
    )
    card_payments = [_card_payment(ctx, c) for c in cards]
    expense_lines = [_expense(ctx, e) for e in expenses]
    if invoice_ids:
        invoices = PurchaseInvoiceService(*services_context(ctx))
        for invoice_id in invoice_ids:
            invoice = invoices.get_invoice(invoice_id)
            if invoice is None:
                click.echo(f"Error: Purchase invoice {invoice_id} not found", err=True)
                ctx.exit(1)
            expense_lines.append(ExpenseDraft.from_invoice(invoice))

    try:
        closure_id = service.save(draft, card_payments, expense_lines, validate=validate)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    totals = compute_totals(draft, card_payments, expense_lines)
    click.echo(f"Saved cash closure (ID: {closure_id}){' - validated' if validate else ''}")
    _echo_amount("Card takings:", totals.total_card_gross)
    _echo_amount("Expenses:", totals.total_expenses)
    _echo_amount("Theoretical deposit:", totals.theoretical_deposit)
    _echo_amount("Cash kept:", totals.cash_kept)
    _echo_amount("Closing float:", totals.closing_float)


@closure_group.command("list")
@click.option("--restaurant", help="Restaurant code or ID")
@click.option("--start-date", help="Start date (inclusive)")
@click.option("--end-date", help="End date (inclusive)")
@click.pass_context
def list_closures(ctx, restaurant: str | None, start_date: str | None, end_date: str | None):
    """List cash closures, newest first."""
    service = CashClosureService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    closures = service.list_closures(
        restaurant_id=restaurant_id,
        start_date=parse_date_option(ctx, start_date, "start date"),
        end_date=parse_date_option(ctx, end_date, "end date"),
    )
    if not closures:
        click.echo("No cash closures found.")
        return

    click.echo("\nCash closures:")
    click.echo("-" * 60)
    for c in closures:
        flag = "V" if c.validated else " "
        click.echo(
            f"ID: {c.id:4d} | {c.closure_date} | restaurant {c.restaurant_id:3d} | "
            f"revenue {c.revenue_incl_tax or 0:>10.2f} | deposit {c.actual_deposit or 0:>10.2f} | {flag}"
        )


@closure_group.command("show")
@click.argument("closure_id", type=int)
@click.pass_context
def show_closure(ctx, closure_id: int):
    """Show a closure with its card takings and expenses."""
    service = CashClosureService(*services_context(ctx))

    closure = service.get_closure(closure_id)
    if closure is None:
        click.echo(f"Error: Cash closure {closure_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"\nCash closure {closure.id} - {closure.closure_date}")
    click.echo("-" * 60)
    _echo_amount("Revenue incl. tax:", closure.revenue_incl_tax)
    _echo_amount("Opening float:", closure.opening_float)
    _echo_amount("Card takings:", closure.total_card_gross)
    _echo_amount("Expenses:", closure.total_expenses)
    _echo_amount("Theoretical deposit:", closure.theoretical_deposit)
    _echo_amount("Actual deposit:", closure.actual_deposit)
    _echo_amount("Closing float:", closure.closing_float)
    for payment in service.list_card_payments(closure_id):
        click.echo(
            f"  card {payment.id}: {payment.gross_amount:.2f} -> {payment.actual_amount:.2f}"
            f" {payment.period or ''}"
        )
    for expense in service.list_expenses(closure_id):
        linked = f" (invoice {expense.purchase_invoice_id})" if expense.purchase_invoice_id else ""
        click.echo(
            f"  expense {expense.id}: {expense.amount_incl_tax:.2f} {expense.invoice_reference or ''}{linked}"
        )


@closure_group.command("delete")
@click.argument("closure_id", type=int)
@click.pass_context
def delete_closure(ctx, closure_id: int):
    """Delete a closure with its card takings and expenses."""
    service = CashClosureService(*services_context(ctx))

    try:
        service.delete_closure(closure_id)
        click.echo(f"Deleted cash closure {closure_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register closure commands with main CLI."""
    cli.add_command(closure_group, name="closure")
