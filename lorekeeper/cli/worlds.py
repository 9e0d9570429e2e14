"""
World Commands
--------------

Commands:
    - world add: Create a world, optionally with its era order
    - world list: List worlds
    - world eras: Show or replace a world's era order
"""
import click

from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.logging_manager import handle_cli_error
from . import get_db


def _format_eras(eras) -> str:
    return " → ".join(eras) if eras else "(single era)"


@click.group()
def world():
    """Manage worlds."""
    pass


@world.command("add")
@click.argument("name")
@click.option("--era", "eras", multiple=True, help="Era name, oldest first (repeatable)")
@click.option("--description", help="World description")
@click.pass_context
def world_add(ctx, name, eras, description):
    """Create a world."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            created = db.worlds.create(
                {"name": name, "eras": list(eras), "description": description}
            )
            click.echo(f"✅ Created world {created.name} (id {created.id}, slug {created.slug})")
            click.echo(f"   Eras: {_format_eras(created.era_order)}")
    except (ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, "world_add", {"name": name})


@world.command("list")
@click.pass_context
def world_list(ctx):
    """List all worlds."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            worlds = db.worlds.get_all()
            if not worlds:
                click.echo("No worlds yet.")
                return
            for item in worlds:
                click.echo(
                    f"{item.id:>4}  {item.name} ({item.slug})  "
                    f"timelines: {len(item.timelines)}  eras: {_format_eras(item.era_order)}"
                )
    except DatabaseError as e:
        handle_cli_error(ctx, e, "world_list")


@world.command("eras")
@click.argument("name")
@click.option("--set", "eras", multiple=True, help="Replace the era order (repeatable)")
@click.pass_context
def world_eras(ctx, name, eras):
    """Show a world's era order, or replace it with --set."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            if eras:
                target = db.worlds.set_era_order(name, list(eras))
            else:
                target = db.worlds.resolve(name)
            click.echo(f"{target.name}: {_format_eras(target.era_order)}")
    except (ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, "world_eras", {"name": name})
