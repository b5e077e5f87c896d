"""Account management commands."""

import click

from finplan.cli.error_handling import handle_domain_error
from finplan.domain.entities import Account, AccountType
from finplan.domain.errors import ValidationError
from finplan.utils.amount_parser import parse_money, parse_rate

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("add")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.option("--name", help="Display name (defaults to ACCOUNT_ID)")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--balance", default="0", help="Current balance; for debts, the amount owed")
@click.option("--rate", help="Annual interest rate in percent (e.g., 19.99)")
@click.option("--min-payment", help="Required monthly payment")
@click.pass_context
def add_account(
    ctx,
    account_id: str,
    name: str | None,
    account_type: str,
    balance: str,
    rate: str | None,
    min_payment: str | None,
):
    """Add an account.

    Debt balances are stored as negative amounts whichever sign is given.

    Examples:
        finplan account add chequing --balance 2500
        finplan account add visa --type credit_card --balance 2000 --rate 19.99
        finplan account add "emergency" --type savings --name "Emergency Fund" --balance 5000
    """
    store = ctx.obj["store"]
    kind = AccountType(account_type)

    try:
        amount = parse_money(balance)
        interest_rate = parse_rate(rate) if rate is not None else None
        minimum = parse_money(min_payment).absolute_value if min_payment is not None else None
        if kind.is_debt:
            amount = -amount.absolute_value
        store.add_account(
            Account(
                id=account_id,
                name=name or account_id,
                account_type=kind,
                balance=amount,
                interest_rate=interest_rate,
                minimum_payment=minimum,
            )
        )
    except ValidationError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added {kind.value} account '{name or account_id}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    store = ctx.obj["store"]

    accounts = store.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        rate = f" @ {acc.interest_rate}%" if acc.interest_rate is not None else ""
        click.echo(
            f"{acc.id:15s} | {acc.name:20s} | {acc.account_type.value:12s} | {acc.balance}{rate}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
