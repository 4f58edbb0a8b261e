"""Bank account management commands."""

import click
from restops.cli.error_handling import handle_domain_error
from restops.cli.options import resolve_restaurant_or_exit, services_context
from restops.domain.bank_account import BankAccountService


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


def _resolve_account(ctx, service: BankAccountService, account: str) -> int:
    found = None
    if account.isdigit():
        found = service.get_account(int(account))
    if found is None:
        found = service.get_account_by_code(account)
    if found is None:
        click.echo(f"Error: Bank account '{account}' not found", err=True)
        ctx.exit(1)
    return found.id


@account_group.command("create")
@click.argument("code")
@click.argument("label")
@click.option("--iban", required=True, help="Account number (IBAN or domestic number)")
@click.option("--restaurant", help="Restaurant code or ID the account belongs to")
@click.pass_context
def create_account(ctx, code: str, label: str, iban: str, restaurant: str | None):
    """Create a new bank account.

    Statement lines are matched to accounts by their account number, so
    IBAN must be the number as it appears in the bank's statement files.

    Examples:
        restops account create BNP1 "BNP current account" --iban "FR76 3000 4000 0312 3456 7890 143"
        restops account create CIC1 "CIC Bastille" --iban 00012345678 --restaurant PAR01
    """
    service = BankAccountService(*services_context(ctx))
    restaurant_id = resolve_restaurant_or_exit(ctx, restaurant) if restaurant else None

    try:
        account_id = service.create_account(
            code=code, label=label, iban=iban, restaurant_id=restaurant_id
        )
        click.echo(f"Created bank account '{code}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List bank accounts."""
    service = BankAccountService(*services_context(ctx))

    accounts = service.list_accounts(active_only=active_only)
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 60)
    for acc in accounts:
        status = "" if acc.active else " (inactive)"
        click.echo(f"ID: {acc.id:3d} | {acc.code:10s} | {acc.label:25s} | {acc.iban}{status}")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str):
    """Deactivate a bank account so statement lines no longer match it.

    ACCOUNT can be an account code or ID.
    """
    service = BankAccountService(*services_context(ctx))
    account_id = _resolve_account(ctx, service, account)

    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated bank account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool):
    """Delete a bank account.

    ACCOUNT can be an account code or ID. The account can only be deleted
    if no bank entries were booked on it.
    """
    service = BankAccountService(*services_context(ctx))
    account_id = _resolve_account(ctx, service, account)

    if not yes and not click.confirm(f"Are you sure you want to delete bank account {account_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted bank account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
