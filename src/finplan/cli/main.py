"""Main CLI entry point."""

import click
from finplan.database.factories import create_sqlite_store
from finplan.domain.engine import FinancialEngine
from finplan.logging_config import setup_logging

# Import and register all commands at module level
from finplan.cli.commands import (
    account,
    add,
    anomalies,
    categorize,
    category,
    goal,
    init,
    plan,
    tax,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINPLAN_DB_PATH environment variable)",
    envvar="FINPLAN_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINPLAN_LOG_LEVEL",
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    envvar="FINPLAN_LOG_FORMAT",
    help="Log record format",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_format: str):
    """Finplan - personal finance analytics and planning.

    Categorize transactions, spot unusual spending, estimate taxes and get
    ranked recommendations for debt, savings and goals.
    """
    ctx.ensure_object(dict)

    # Initialize the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        setup_logging(log_level, json_format=log_format == "json")
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["store"] = store
        ctx.obj["engine"] = FinancialEngine(store, store, store, store)
        ctx.call_on_close(store.disconnect)


# Register all commands
init.register_commands(cli)
account.register_commands(cli)
add.register_commands(cli)
goal.register_commands(cli)
category.register_commands(cli)
categorize.register_commands(cli)
anomalies.register_commands(cli)
tax.register_commands(cli)
plan.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
