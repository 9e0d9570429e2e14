"""
Event Commands
--------------

Commands:
    - event add: Create an event and place it on timelines
    - event update: Edit an event; existing positions are kept
    - event list: List a world's events
    - event delete: Delete an event and its memberships

Exit codes for add/update:
    0  every timeline placement succeeded
    1  invalid input or database error (nothing written)
    2  the event was saved but some timelines failed
"""
import json

import click

from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.logging_manager import handle_cli_error
from . import get_db

PARTIAL_FAILURE_EXIT_CODE = 2


def _echo_report(ctx, report) -> None:
    for result in report.results:
        if result.ok:
            state = "added" if result.created else "kept"
            click.echo(f"   timeline {result.timeline_id}: position {result.position} ({state})")
        else:
            click.echo(f"   timeline {result.timeline_id}: ❌ {result.error}", err=True)

    if not report.ok:
        failed = ", ".join(str(tid) for tid in report.failed_timeline_ids)
        click.echo(f"⚠️  Saved, but could not place on timelines: {failed}", err=True)
        ctx.exit(PARTIAL_FAILURE_EXIT_CODE)


def _save(ctx, metadata, operation):
    db = get_db(ctx)
    try:
        return db.save_event(metadata)
    except (ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, operation, {"title": metadata.get("title")})


@click.group()
def event():
    """Manage timeline events."""
    pass


@event.command("add")
@click.argument("world_name", metavar="WORLD")
@click.argument("title")
@click.option("--date", "date_json", help="Date as JSON, e.g. '{\"type\": \"exact\", \"year\": 1977}'")
@click.option("--timeline", "timeline_ids", type=int, multiple=True, help="Timeline ID (repeatable)")
@click.option("--description", help="Event description")
@click.option("--location", help="Where it happened")
@click.option("--category", "categories", multiple=True, help="Category label (repeatable)")
@click.option("--key", "is_key_event", is_flag=True, help="Mark as a key event")
@click.pass_context
def event_add(ctx, world_name, title, date_json, timeline_ids, description, location,
              categories, is_key_event):
    """Create an event in WORLD and place it on timelines by date."""
    metadata = {
        "world": world_name,
        "title": title,
        "date": date_json,
        "timelines": list(timeline_ids),
        "description": description,
        "location": location,
        "categories": list(categories),
        "is_key_event": is_key_event,
    }
    saved, report = _save(ctx, metadata, "event_add")
    click.echo(f"✅ Created event {saved.title} (id {saved.id}) {saved.date_display}")
    _echo_report(ctx, report)


@event.command("update")
@click.argument("event_id", type=int)
@click.option("--title", help="New title")
@click.option("--date", "date_json", help="New date as JSON")
@click.option("--timeline", "timeline_ids", type=int, multiple=True, help="Add to timeline (repeatable)")
@click.option("--remove-timeline", "remove_ids", type=int, multiple=True, help="Remove from timeline (repeatable)")
@click.option("--description", help="New description")
@click.pass_context
def event_update(ctx, event_id, title, date_json, timeline_ids, remove_ids, description):
    """Edit an event. Positions it already holds are never changed."""
    metadata = {"id": event_id, "timelines": list(timeline_ids)}
    if title is not None:
        metadata["title"] = title
    if date_json is not None:
        metadata["date"] = date_json
    if description is not None:
        metadata["description"] = description
    if remove_ids:
        metadata["remove_timelines"] = list(remove_ids)

    saved, report = _save(ctx, metadata, "event_update")
    click.echo(f"✅ Updated event {saved.title} (id {saved.id}) {saved.date_display}")
    _echo_report(ctx, report)


@event.command("list")
@click.argument("world_name", metavar="WORLD")
@click.option("--by-date", is_flag=True, help="Sort chronologically")
@click.option("--json", "as_json", is_flag=True, help="Print date_data as JSON")
@click.pass_context
def event_list(ctx, world_name, by_date, as_json):
    """List the events of WORLD."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            events = db.events.get_for_world(world_name, by_date=by_date)
            if not events:
                click.echo("No events.")
                return
            for item in events:
                if as_json:
                    click.echo(f"{item.id:>5}  {item.title}  {json.dumps(item.date_data)}")
                else:
                    click.echo(f"{item.id:>5}  {item.date_display or '-':<24} {item.title}")
    except DatabaseError as e:
        handle_cli_error(ctx, e, "event_list", {"world": world_name})


@event.command("delete")
@click.argument("event_id", type=int)
@click.confirmation_option(prompt="Delete this event from every timeline?")
@click.pass_context
def event_delete(ctx, event_id):
    """Delete an event; its timeline memberships go with it."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            db.events.delete(event_id)
        click.echo(f"✅ Deleted event {event_id}")
    except DatabaseError as e:
        handle_cli_error(ctx, e, "event_delete", {"event_id": event_id})
