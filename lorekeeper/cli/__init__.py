#!/usr/bin/env python3
"""
Lorekeeper Command Line Interface
---------------------------------

Command-line access to worlds, timelines and timeline events.

This module provides the main CLI group and shared context setup for all
commands.

Command Structure:
    - Setup (init, status)
    - Worlds (world add, world list, world eras)
    - Timelines (timeline add, show, move, swap, remove, compact)
    - Events (event add, update, list, delete)
    - Dates (date check)

Usage:
    lorekeeper --help
    lorekeeper timeline --help
    lorekeeper event add Arda "Fall of Gondolin" \\
        --date '{"type": "exact", "era": "First Age", "year": 510}' --timeline 1
"""
import logging
from pathlib import Path

import click

from lorekeeper.core.config import load_eras
from lorekeeper.core.exceptions import ValidationError
from lorekeeper.core.logging_manager import handle_cli_error, setup_logger
from lorekeeper.core.paths import ALEMBIC_DIR, DB_PATH, ERAS_FILE, LOG_DIR
from lorekeeper.database import LorekeeperDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(ALEMBIC_DIR),
    help="Path to Alembic directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--eras-file",
    type=click.Path(),
    default=str(ERAS_FILE),
    help="YAML file with era order for worlds that define none",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, log_dir, eras_file, verbose):
    """Lorekeeper timeline management CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["eras_file"] = Path(eras_file)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = setup_logger(Path(log_dir), "cli")


def get_db(ctx) -> LorekeeperDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        try:
            era_config = load_eras(ctx.obj["eras_file"])
        except ValidationError as e:
            handle_cli_error(ctx, e, "load_eras")
        ctx.obj["db"] = LorekeeperDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            log_dir=ctx.obj["log_dir"],
            era_config=era_config,
        )
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, status  # noqa: E402
from .worlds import world  # noqa: E402
from .timelines import timeline  # noqa: E402
from .events import event  # noqa: E402
from .dates import date  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(status)

# Register command groups
cli.add_command(world)
cli.add_command(timeline)
cli.add_command(event)
cli.add_command(date)


if __name__ == "__main__":
    cli(obj={})
