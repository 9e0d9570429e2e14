"""
Date Commands
-------------

Commands:
    - date check: Validate a date JSON value and show how it displays
"""
import json

import click

from lorekeeper.chronology.dates import date_to_dict
from lorekeeper.chronology.eras import EraRegistry
from lorekeeper.chronology.formatting import format_date
from lorekeeper.chronology.validation import validate_date_data
from lorekeeper.core.exceptions import ValidationError
from lorekeeper.core.logging_manager import handle_cli_error


@click.group()
def date():
    """Inspect date values."""
    pass


@date.command("check")
@click.argument("date_json", metavar="JSON")
@click.option("--era", "eras", multiple=True, help="Era order for range checks (repeatable)")
@click.pass_context
def date_check(ctx, date_json, eras):
    """Validate a date and print its normalized form."""
    try:
        value = validate_date_data(date_json, EraRegistry(eras, logger=ctx.obj.get("logger")))
    except ValidationError as e:
        handle_cli_error(ctx, e, "date_check", {"date": date_json})

    click.echo(f"✅ {format_date(value)}")
    click.echo(json.dumps(date_to_dict(value), sort_keys=True))
