"""Unusual spending command."""

import click

from finplan.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from finplan.cli.error_handling import unwrap_or_exit
from finplan.domain.entities import AlertSeverity

SEVERITIES = [s.name.lower() for s in AlertSeverity]


@click.command("anomalies")
@period_options
@click.option(
    "--min-severity",
    type=click.Choice(SEVERITIES),
    default="low",
    show_default=True,
    help="Hide alerts below this severity",
)
@click.pass_context
def detect_anomalies(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
    min_severity: str,
):
    """Find unusual amounts, repeated charges, new merchants and duplicates.

    Without a period every stored transaction is scanned.

    Examples:
        finplan anomalies --last-month
        finplan anomalies --start-date 2024-01-01 --min-severity high
    """
    store = ctx.obj["store"]
    engine = ctx.obj["engine"]

    period = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, last_month, this_year, last_year),
    )
    history = store.list_transactions()
    if period is None:
        transactions = history
    else:
        transactions = store.get_transactions_in_range(period.start, period.end)

    engine.anomaly_detector.rebuild_model(history)
    alerts = unwrap_or_exit(ctx, engine.detect_unusual_spending(transactions))
    threshold = AlertSeverity[min_severity.upper()]
    alerts = [a for a in alerts if a.severity >= threshold]

    if not alerts:
        click.echo("No unusual spending found.")
        return

    for alert in alerts:
        click.echo(f"[{alert.severity.name}] {alert.transaction_id}: {alert.message}")
        click.echo(f"    {alert.suggested_action}")


def register_commands(cli):
    """Register anomaly command with main CLI."""
    cli.add_command(detect_anomalies)
