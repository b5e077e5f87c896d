"""Category management commands."""

import click

from finplan.cli.error_handling import unwrap_or_exit


def print_category_tree(tree) -> None:
    """Print top-level categories with their children indented."""
    for category, children in tree:
        marker = " *" if category.is_custom else ""
        click.echo(f"{category.name} (ID: {category.id}){marker}")
        for child in children:
            child_marker = " *" if child.is_custom else ""
            click.echo(f"  {child.name} (ID: {child.id}){child_marker}")


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories in tree format. Custom categories are marked with *."""
    manager = ctx.obj["engine"].category_manager

    click.echo("\nCategories:")
    print_category_tree(manager.get_category_tree())


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category ID")
@click.option("--color", help="Color as #RRGGBB")
@click.option("--icon", help="Icon name")
@click.pass_context
def create_category(ctx, name: str, parent: str | None, color: str | None, icon: str | None):
    """Create a custom category.

    Examples:
        finplan category create "Coffee Shops" --parent food --color "#8B4513"
    """
    manager = ctx.obj["engine"].category_manager
    category = unwrap_or_exit(
        ctx, manager.create_category(name=name, parent_id=parent, color=color, icon=icon)
    )
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{category.name}'{parent_str} (ID: {category.id})")


@category_group.command("update")
@click.argument("category_id")
@click.option("--name", help="New name")
@click.option("--parent", help="New parent category ID")
@click.option("--no-parent", is_flag=True, help="Move to the top level")
@click.option("--color", help="Color as #RRGGBB")
@click.option("--icon", help="Icon name")
@click.pass_context
def update_category(
    ctx,
    category_id: str,
    name: str | None,
    parent: str | None,
    no_parent: bool,
    color: str | None,
    icon: str | None,
):
    """Update a custom category. Default categories cannot be changed."""
    if parent and no_parent:
        click.echo("Error: --parent cannot be combined with --no-parent", err=True)
        ctx.exit(1)

    manager = ctx.obj["engine"].category_manager
    category = unwrap_or_exit(
        ctx,
        manager.update_category(
            category_id,
            name=name,
            parent_id=parent,
            color=color,
            icon=icon,
            clear_parent=no_parent,
        ),
    )
    click.echo(f"Updated category '{category.name}' (ID: {category.id})")


@category_group.command("delete")
@click.argument("category_id")
@click.option("--reassign-to", help="Category ID that receives this category's transactions")
@click.pass_context
def delete_category(ctx, category_id: str, reassign_to: str | None):
    """Delete a custom category.

    A category with transactions can only be deleted with --reassign-to.

    Examples:
        finplan category delete coffee_shops
        finplan category delete coffee_shops --reassign-to restaurants
    """
    manager = ctx.obj["engine"].category_manager
    moved = unwrap_or_exit(ctx, manager.delete_category(category_id, reassign_to=reassign_to))
    click.echo(f"Deleted category '{category_id}'")
    if moved:
        click.echo(f"Reassigned {moved} transaction{'s' if moved != 1 else ''} to '{reassign_to}'")


@category_group.command("merge")
@click.argument("source_id")
@click.argument("target_id")
@click.pass_context
def merge_categories(ctx, source_id: str, target_id: str):
    """Move every transaction from SOURCE_ID to TARGET_ID and delete SOURCE_ID."""
    manager = ctx.obj["engine"].category_manager
    target = unwrap_or_exit(ctx, manager.merge_categories(source_id, target_id))
    click.echo(f"Merged '{source_id}' into '{target.name}'")


@category_group.command("stats")
@click.option("--all", "show_all", is_flag=True, help="Include categories with no transactions")
@click.pass_context
def category_stats(ctx, show_all: bool):
    """Show usage statistics per category."""
    manager = ctx.obj["engine"].category_manager
    stats = [s for s in manager.get_usage_statistics() if show_all or s.transaction_count]
    if not stats:
        click.echo("No categorized transactions found.")
        return

    click.echo(f"\n{'Category':25s} {'Count':>6s} {'Total':>14s} {'Average':>12s}  Usage")
    click.echo("-" * 75)
    for stat in stats:
        click.echo(
            f"{stat.category.name:25s} {stat.transaction_count:6d} {str(stat.total_amount):>14s} "
            f"{str(stat.average_amount):>12s}  {stat.frequency.value}"
        )


@category_group.command("suggest")
@click.pass_context
def suggest_improvements(ctx):
    """Suggest category cleanups based on usage."""
    manager = ctx.obj["engine"].category_manager
    suggestions = manager.get_suggestions()
    if not suggestions:
        click.echo("No suggestions. Your categories look good.")
        return

    for suggestion in suggestions:
        click.echo(f"[{suggestion.suggestion_type.value}] {suggestion.message}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
