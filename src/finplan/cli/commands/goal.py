"""Savings goal commands."""

from datetime import date

import click

from finplan.cli.error_handling import handle_domain_error
from finplan.domain.entities import FinancialGoal
from finplan.domain.errors import ValidationError
from finplan.utils.amount_parser import parse_money
from finplan.utils.date_parser import parse_date


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("add")
@click.argument("goal_id", metavar="GOAL_ID")
@click.argument("title", metavar="TITLE")
@click.option("--target", required=True, help="Target amount")
@click.option("--saved", default="0", show_default=True, help="Amount saved so far")
@click.option("--by", "target_date", required=True, help="Target date")
@click.option("--started", help="Date the goal started (defaults to today)")
@click.pass_context
def add_goal(ctx, goal_id: str, title: str, target: str, saved: str, target_date: str, started: str | None):
    """Add a savings goal.

    Examples:
        finplan goal add house "House down payment" --target 60000 --saved 12000 --by 2027-06-01
    """
    store = ctx.obj["store"]
    try:
        goal = FinancialGoal(
            id=goal_id,
            title=title,
            target_amount=parse_money(target),
            current_amount=parse_money(saved),
            target_date=parse_date(target_date),
            created_at=parse_date(started) if started else date.today(),
        )
        store.add_goal(goal)
    except ValidationError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added goal '{title}' (ID: {goal_id}) targeting {goal.target_amount} by {goal.target_date.isoformat()}")


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List savings goals with progress."""
    store = ctx.obj["store"]
    goals = store.list_goals()
    if not goals:
        click.echo("No goals found.")
        return

    today = date.today()
    click.echo("\nGoals:")
    click.echo("-" * 72)
    for goal in goals:
        status = "off track" if goal.is_off_track(today) else "on track"
        click.echo(
            f"{goal.id:12s} | {goal.title:25s} | {goal.current_amount} of {goal.target_amount} "
            f"({goal.progress * 100:.0f}%) | {status}"
        )


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
