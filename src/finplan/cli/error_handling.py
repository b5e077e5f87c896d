"""CLI error handling helpers."""

from typing import TypeVar

import click

from finplan.domain.errors import DomainError
from finplan.domain.results import Result

T = TypeVar("T")


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def unwrap_or_exit(ctx: click.Context, result: Result[T]) -> T:
    """Return a successful result's value, or render the failure and exit."""
    if not result.is_success:
        click.echo(f"Error: {result.message}", err=True)
        ctx.exit(1)
    return result.value
