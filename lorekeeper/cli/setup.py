"""
Setup Commands
--------------

Database initialization and schema status.

Commands:
    - init: Create or migrate the database schema
    - status: Show the current Alembic revision
"""
import click

from lorekeeper.core.exceptions import DatabaseError
from lorekeeper.core.logging_manager import handle_cli_error
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Create the database schema, or migrate an existing one."""
    try:
        click.echo("🚀 Initializing Lorekeeper database...")
        db = get_db(ctx)
        db.initialize_schema()
        click.echo(f"✅ Database ready: {db.db_path}")
    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.command()
@click.pass_context
def status(ctx):
    """Show the current migration status."""
    try:
        history = get_db(ctx).get_migration_history()
    except DatabaseError as e:
        handle_cli_error(ctx, e, "status")

    if "error" in history:
        click.echo(f"❌ Could not read migration status: {history['error']}", err=True)
        ctx.exit(1)

    click.echo(f"Revision: {history['current_revision'] or '(none)'}")
    click.echo(f"Status:   {history['status']}")
