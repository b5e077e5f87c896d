"""Automatic categorization, feedback and retraining commands."""

import click

from finplan.cli.error_handling import unwrap_or_exit
from finplan.domain.errors import category_not_found, transaction_not_found


@click.command("categorize")
@click.argument("transaction_ids", nargs=-1)
@click.option("--uncategorized", is_flag=True, help="Categorize every transaction without a category")
@click.option("--apply", "apply_results", is_flag=True, help="Save the predicted categories")
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    default=0.0,
    show_default=True,
    help="Only apply predictions at or above this confidence",
)
@click.pass_context
def categorize_transactions(
    ctx, transaction_ids: tuple[str, ...], uncategorized: bool, apply_results: bool, min_confidence: float
):
    """Predict categories for transactions.

    Examples:
        finplan categorize txn_1 txn_2
        finplan categorize --uncategorized --apply --min-confidence 0.5
    """
    store = ctx.obj["store"]
    engine = ctx.obj["engine"]

    if not transaction_ids and not uncategorized:
        click.echo("Error: Give transaction IDs or --uncategorized", err=True)
        ctx.exit(1)

    transactions = []
    seen = set()
    for txn_id in transaction_ids:
        if txn_id in seen:
            continue
        seen.add(txn_id)
        transaction = store.get_transaction(txn_id)
        if transaction is None:
            click.echo(f"Error: {transaction_not_found(txn_id)}", err=True)
            ctx.exit(1)
        transactions.append(transaction)
    if uncategorized:
        transactions.extend(
            t for t in store.list_transactions() if t.category_id is None and t.id not in seen
        )

    if not transactions:
        click.echo("No transactions to categorize.")
        return

    results = unwrap_or_exit(ctx, engine.categorize_batch(transactions))
    applied = 0
    for transaction, result in zip(transactions, results):
        alternatives = ", ".join(f"{a.category_id} {a.confidence:.2f}" for a in result.alternatives)
        click.echo(
            f"{transaction.id}: {result.category_id} ({result.confidence:.2f})"
            + (f" | also: {alternatives}" if alternatives else "")
        )
        if apply_results and result.confidence >= min_confidence:
            store.update_transaction(transaction.with_category(result.category_id))
            applied += 1

    if apply_results:
        click.echo(f"Applied {applied} of {len(results)} predictions")


@click.command("feedback")
@click.argument("transaction_id")
@click.argument("category_id")
@click.option(
    "--confidence",
    type=click.FloatRange(0.0, 1.0),
    default=1.0,
    show_default=True,
    help="How sure you are about the correction",
)
@click.pass_context
def provide_feedback(ctx, transaction_id: str, category_id: str, confidence: float):
    """Correct a transaction's category and teach the categorizer.

    Examples:
        finplan feedback txn_1 groceries
    """
    store = ctx.obj["store"]
    engine = ctx.obj["engine"]

    transaction = store.get_transaction(transaction_id)
    if transaction is None:
        click.echo(f"Error: {transaction_not_found(transaction_id)}", err=True)
        ctx.exit(1)
    if store.get_category(category_id) is None:
        click.echo(f"Error: {category_not_found(category_id)}", err=True)
        ctx.exit(1)

    unwrap_or_exit(ctx, engine.provide_feedback(transaction_id, category_id, confidence))
    store.update_transaction(transaction.with_category(category_id))
    click.echo(f"Transaction {transaction_id} categorized as '{category_id}'")


@click.command("retrain")
@click.pass_context
def retrain_models(ctx):
    """Rebuild the categorization and anomaly models from stored data."""
    engine = ctx.obj["engine"]
    count = unwrap_or_exit(ctx, engine.retrain())
    click.echo(f"Retrained models on {count} examples")


def register_commands(cli):
    """Register categorization commands with main CLI."""
    cli.add_command(categorize_transactions)
    cli.add_command(provide_feedback)
    cli.add_command(retrain_models)
