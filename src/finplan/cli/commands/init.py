"""Database initialization command."""

import click

from finplan.domain.defaults import DEFAULT_CATEGORIES


@click.command("init")
@click.pass_context
def init_database(ctx):
    """Create the database schema.

    Default categories are built in and need no setup.

    Examples:
        finplan init
        finplan --db-path ./budget.db init
    """
    store = ctx.obj["store"]
    store.initialize_schema()
    click.echo(f"Initialized database at {store.database_path}")
    click.echo(f"{len(DEFAULT_CATEGORIES)} default categories available")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init_database)
