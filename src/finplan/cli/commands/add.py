"""Add transaction command."""

import uuid

import click

from finplan.cli.error_handling import handle_domain_error
from finplan.domain.entities import Transaction
from finplan.domain.errors import ValidationError, category_not_found
from finplan.utils.amount_parser import parse_money
from finplan.utils.date_parser import parse_date


@click.command("add")
@click.option("--account", required=True, help="Account ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (negative for spending)")
@click.option("--description", default="", help="Transaction description")
@click.option("--merchant", help="Merchant name")
@click.option("--location", help="Where the transaction happened")
@click.option("--category", help="Category ID")
@click.option("--recurring", is_flag=True, help="Mark as a recurring charge")
@click.option("--id", "transaction_id", help="Transaction ID (auto-generated if not provided)")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    description: str,
    merchant: str | None,
    location: str | None,
    category: str | None,
    recurring: bool,
    transaction_id: str | None,
):
    """Add a transaction manually.

    Examples:
        finplan add --account chequing --date 2024-01-15 --amount -50.00 --description "Loblaws" --merchant Loblaws
        finplan add --account chequing --date today --amount 2500 --category salary
    """
    store = ctx.obj["store"]

    if store.get_account(account) is None:
        click.echo(f"Error: Account '{account}' not found", err=True)
        ctx.exit(1)

    if category is not None and store.get_category(category) is None:
        click.echo(f"Error: {category_not_found(category)}", err=True)
        ctx.exit(1)

    try:
        txn_date = parse_date(date)
        txn_amount = parse_money(amount)
    except ValidationError as e:
        handle_domain_error(ctx, e)

    transaction = Transaction(
        id=transaction_id or f"txn_{uuid.uuid4().hex[:10]}",
        account_id=account,
        date=txn_date,
        amount=txn_amount,
        description=description,
        merchant_name=merchant,
        location=location,
        category_id=category,
        is_recurring=recurring,
    )
    try:
        store.add_transaction(transaction)
    except ValidationError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added transaction {transaction.id}: {transaction.amount} on {transaction.date.isoformat()}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
