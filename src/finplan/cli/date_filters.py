"""CLI helpers for date range resolution."""

from typing import Optional

import click

from finplan.domain.errors import ValidationError
from finplan.domain.money import DateRange
from finplan.utils.date_parser import get_date_range, parse_date


def period_options(command):
    """Add --start-date, --end-date and the named period flags to a command."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')"),
        click.option("--this-month", is_flag=True, help="Use the current month"),
        click.option("--last-month", is_flag=True, help="Use the previous month"),
        click.option("--this-year", is_flag=True, help="Use the current year"),
        click.option("--last-year", is_flag=True, help="Use the previous year"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: Optional[DateRange] = None,
) -> Optional[DateRange]:
    """Resolve a CLI date range from period flags or explicit dates.

    Returns:
        DateRange, or None when nothing was given and there is no default.
        An open end is filled with the default range's bound or today.
    """
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --last-month, --this-year, --last-year) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period_count == 1:
        period = next(name for name, is_set in period_flags.items() if is_set)
        return get_date_range(period)

    start = end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValidationError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValidationError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is None and end is None:
        return default_range

    if start is None:
        start = default_range.start if default_range is not None else end
    if end is None:
        end = default_range.end if default_range is not None else parse_date("today")

    try:
        return DateRange(start, end)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def period_flags_from(this_month: bool, last_month: bool, this_year: bool, last_year: bool) -> dict[str, bool]:
    return {
        "this-month": this_month,
        "last-month": last_month,
        "this-year": this_year,
        "last-year": last_year,
    }
