"""Debt payoff and recommendation commands."""

import click

from finplan.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from finplan.cli.error_handling import handle_domain_error, unwrap_or_exit
from finplan.domain.entities import Jurisdiction, RiskTolerance, TimeHorizon
from finplan.domain.errors import ValidationError
from finplan.domain.profile import ProfileBuilder
from finplan.utils.amount_parser import parse_money


def profile_options(command):
    """Add the options needed to assemble a financial profile."""
    options = [
        click.option("--user", "user_id", default="me", show_default=True, help="User ID"),
        click.option("--income", required=True, help="Gross annual income"),
        click.option("--age", required=True, type=click.IntRange(min=0), help="Age in years"),
        click.option(
            "--jurisdiction",
            type=click.Choice([j.value for j in Jurisdiction], case_sensitive=False),
            default="ON",
            show_default=True,
        ),
        click.option(
            "--risk",
            type=click.Choice([r.value for r in RiskTolerance]),
            default=RiskTolerance.MODERATE.value,
            show_default=True,
        ),
        click.option(
            "--horizon",
            type=click.Choice([h.value for h in TimeHorizon]),
            default=TimeHorizon.MEDIUM.value,
            show_default=True,
        ),
    ]
    command = period_options(command)
    for option in reversed(options):
        command = option(command)
    return command


def build_profile(ctx, params: dict):
    """Assemble a profile from stored data and the command's options."""
    store = ctx.obj["store"]
    engine = ctx.obj["engine"]

    period = resolve_cli_date_range(
        ctx,
        start_date=params["start_date"],
        end_date=params["end_date"],
        period_flags=period_flags_from(
            params["this_month"], params["last_month"], params["this_year"], params["last_year"]
        ),
    )
    builder = ProfileBuilder(store, store, store, engine.spending_analyzer, engine.tax_calculator)
    try:
        return builder.build(
            user_id=params["user_id"],
            age=params["age"],
            jurisdiction=Jurisdiction(params["jurisdiction"].upper()),
            gross_annual_income=parse_money(params["income"]),
            risk_tolerance=RiskTolerance(params["risk"]),
            time_horizon=TimeHorizon(params["horizon"]),
            period=period,
        )
    except ValidationError as e:
        handle_domain_error(ctx, e)


@click.command("debt")
@profile_options
@click.pass_context
def debt_plan(ctx, **params):
    """Build a debt payoff plan from your debt accounts.

    Examples:
        finplan debt --income 65000 --age 34
    """
    engine = ctx.obj["engine"]
    profile = build_profile(ctx, params)
    strategy = unwrap_or_exit(ctx, engine.optimize_debt_payoff(profile))

    if not strategy.plan:
        click.echo(strategy.reasoning)
        return

    click.echo(f"\nStrategy: {strategy.method.value}")
    click.echo(strategy.reasoning)
    click.echo(f"Total debt: {strategy.total_debt}  Extra each month: {strategy.extra_payment}")
    click.echo("-" * 72)
    for plan in strategy.plan:
        months = (
            f"{plan.estimated_payoff_months} months"
            if plan.estimated_payoff_months is not None
            else "never at this payment"
        )
        click.echo(
            f"{plan.payoff_order}. {plan.account_name:20s} {str(plan.balance):>12s} @ {plan.interest_rate}% "
            f"| pay {plan.recommended_payment}/month | {months}"
        )
    payoff = f"{strategy.payoff_months} months" if strategy.payoff_months is not None else "not within 50 years"
    click.echo("-" * 72)
    click.echo(f"Projected interest: {strategy.projected_interest}  Debt-free in: {payoff}")

    if strategy.alternatives:
        click.echo("\nAlternatives:")
        for alt in strategy.alternatives:
            alt_months = f"{alt.payoff_months} months" if alt.payoff_months is not None else "n/a"
            click.echo(f"  {alt.method.value:10s} interest {alt.projected_interest}, {alt_months}")


@click.command("recommend")
@profile_options
@click.option("--explain", "explain_id", help="Explain one recommendation by ID")
@click.pass_context
def recommend(ctx, explain_id: str | None, **params):
    """Show ranked financial planning recommendations.

    Examples:
        finplan recommend --income 80000 --age 29
        finplan recommend --income 80000 --age 29 --explain me:emergency_fund
    """
    engine = ctx.obj["engine"]
    profile = build_profile(ctx, params)
    recommendations = unwrap_or_exit(
        ctx, engine.generate_financial_planning_recommendations(profile.user_id, profile)
    )

    if explain_id is not None:
        explanation = unwrap_or_exit(ctx, engine.explain(explain_id))
        reasoning = explanation.reasoning
        click.echo(explanation.summary)
        click.echo(f"\nMethod: {reasoning.methodology} (confidence {reasoning.confidence:.0%})")
        click.echo("Factors:")
        for factor in reasoning.factors:
            click.echo(f"  - {factor}")
        click.echo("Assumptions:")
        for assumption in reasoning.assumptions:
            click.echo(f"  - {assumption}")
        for step in reasoning.calculations:
            click.echo(f"Calculation: {step.description} = {step.formula} = {step.result}")
        if explanation.action_steps:
            click.echo("Steps:")
            for action in explanation.action_steps:
                click.echo(f"  {action.order}. {action.description}")
        if explanation.risks:
            click.echo("Risks: " + "; ".join(explanation.risks))
        return

    if not recommendations:
        click.echo("No recommendations. Your finances look on track.")
        return

    for rec in recommendations:
        click.echo(f"[{rec.priority.name}] {rec.title} (ID: {rec.id})")
        click.echo(f"    {rec.description}")
        click.echo(f"    Expected impact: {rec.expected_impact.amount}")


@click.command("savings")
@profile_options
@click.pass_context
def savings_plan(ctx, **params):
    """Show a savings strategy and registered account contributions.

    Examples:
        finplan savings --income 90000 --age 41 --risk aggressive
    """
    engine = ctx.obj["engine"]
    profile = build_profile(ctx, params)
    strategy = unwrap_or_exit(ctx, engine.optimize_savings_strategy(profile))
    deferred = unwrap_or_exit(ctx, engine.optimize_tax_deferred_contributions(profile))
    tax_free = unwrap_or_exit(ctx, engine.optimize_tax_free_contributions(profile))

    click.echo(
        f"\nSavings rate: {strategy.current_savings_rate:.1%} now, "
        f"{strategy.recommended_savings_rate:.1%} recommended"
    )
    click.echo(
        f"Emergency fund: {strategy.current_emergency_fund} of {strategy.emergency_fund_target}"
    )
    click.echo(strategy.reasoning)
    if strategy.allocations:
        click.echo("\nWhere new savings should go:")
        for allocation in strategy.allocations:
            click.echo(
                f"  {allocation.account_type.value:20s} {allocation.percentage:3d}% "
                f"{str(allocation.amount):>12s}  {allocation.reasoning}"
            )

    click.echo(f"\nTax-deferred contribution: {deferred.recommended_contribution}")
    click.echo(f"  {deferred.reasoning}")
    click.echo(f"\nTax-free contribution: {tax_free.recommended_contribution}")
    click.echo(f"  {tax_free.reasoning}")
    for allocation in tax_free.allocations:
        click.echo(
            f"  {allocation.asset_class.value:22s} {allocation.percentage:3d}%  "
            f"{allocation.reasoning} ({allocation.risk_level.value} risk)"
        )


def register_commands(cli):
    """Register planning commands with main CLI."""
    cli.add_command(debt_plan)
    cli.add_command(recommend)
    cli.add_command(savings_plan)
