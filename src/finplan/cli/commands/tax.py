"""Tax and registered account commands."""

import click

from finplan.cli.error_handling import handle_domain_error, unwrap_or_exit
from finplan.domain.entities import Jurisdiction
from finplan.domain.errors import ValidationError
from finplan.utils.amount_parser import parse_money

JURISDICTIONS = [j.value for j in Jurisdiction]


def _parse_income(ctx, income: str):
    try:
        return parse_money(income)
    except ValidationError as e:
        handle_domain_error(ctx, e)


@click.command("taxes")
@click.argument("income")
@click.option(
    "--jurisdiction",
    type=click.Choice(JURISDICTIONS, case_sensitive=False),
    default="ON",
    show_default=True,
    help="Province or territory",
)
@click.pass_context
def calculate_taxes(ctx, income: str, jurisdiction: str):
    """Estimate income tax for a gross annual INCOME.

    Examples:
        finplan taxes 80000
        finplan taxes 120000 --jurisdiction BC
    """
    engine = ctx.obj["engine"]
    breakdown = unwrap_or_exit(
        ctx, engine.calculate_taxes(_parse_income(ctx, income), Jurisdiction(jurisdiction.upper()))
    )

    rows = [
        ("Gross income", breakdown.gross_income),
        ("Federal tax", breakdown.federal_tax),
        ("Provincial tax", breakdown.provincial_tax),
        ("Pension contribution", breakdown.pension_contribution),
        ("Employment insurance", breakdown.insurance_premium),
        ("Total deductions", breakdown.total_tax),
        ("After-tax income", breakdown.after_tax_income),
    ]
    click.echo(f"\nTax estimate ({breakdown.jurisdiction.value}):")
    click.echo("-" * 40)
    for label, amount in rows:
        click.echo(f"{label:22s} {str(amount):>16s}")
    click.echo(f"{'Marginal rate':22s} {breakdown.marginal_rate:>15}%")
    click.echo(f"{'Average rate':22s} {breakdown.average_rate:>15}%")


@click.command("registered")
@click.argument("income")
@click.pass_context
def registered_accounts(ctx, income: str):
    """Show tax-deferred and tax-free contribution room for INCOME."""
    engine = ctx.obj["engine"]
    gross = _parse_income(ctx, income)
    analysis = unwrap_or_exit(ctx, engine.analyze_registered_accounts(gross))

    deferred = analysis.tax_deferred
    tax_free = analysis.tax_free
    click.echo("\nTax-deferred account:")
    click.echo(f"  Maximum contribution:     {deferred.max_contribution}")
    click.echo(f"  Estimated contributions:  {deferred.current_contributions}")
    click.echo(f"  Contribution room:        {deferred.contribution_room}")
    click.echo(f"  Potential tax savings:    {deferred.tax_savings}")
    click.echo(f"  Recommended contribution: {deferred.recommended_contribution}")
    click.echo("\nTax-free account:")
    click.echo(f"  Annual limit:             {tax_free.annual_limit}")
    click.echo(f"  Estimated contributions:  {tax_free.current_contributions}")
    click.echo(f"  Contribution room:        {tax_free.contribution_room}")
    click.echo(f"  Recommended contribution: {tax_free.recommended_contribution}")

    suggestions = unwrap_or_exit(ctx, engine.generate_tax_recommendations(gross))
    if suggestions:
        click.echo("\nSuggestions:")
        for suggestion in suggestions:
            deadline = f" (by {suggestion.deadline.isoformat()})" if suggestion.deadline else ""
            click.echo(f"  - {suggestion.title}: saves about {suggestion.potential_savings}{deadline}")


def register_commands(cli):
    """Register tax commands with main CLI."""
    cli.add_command(calculate_taxes)
    cli.add_command(registered_accounts)
