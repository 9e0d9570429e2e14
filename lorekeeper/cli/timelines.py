"""
Timeline Commands
-----------------

Commands:
    - timeline add: Create a timeline in a world
    - timeline show: List a timeline's events by position or by date
    - timeline move: Move an event to a position
    - timeline swap: Exchange two events' positions
    - timeline remove: Take an event off a timeline
    - timeline compact: Renumber positions to 0..n-1
"""
import click

from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.logging_manager import handle_cli_error
from . import get_db


def _event_line(label: str, item) -> str:
    key = "★" if item.is_key_event else " "
    return f"{label:>5} {key} [#{item.id}] {item.date_display or '-':<24} {item.title}"


@click.group()
def timeline():
    """Manage timelines and the order of their events."""
    pass


@timeline.command("add")
@click.argument("world_name", metavar="WORLD")
@click.argument("name")
@click.option("--description", help="Timeline description")
@click.pass_context
def timeline_add(ctx, world_name, name, description):
    """Create a timeline in WORLD."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            created = db.timelines.create(
                {"world": world_name, "name": name, "description": description}
            )
            click.echo(f"✅ Created timeline {created.name} (id {created.id})")
    except (ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, "timeline_add", {"world": world_name, "name": name})


@timeline.command("show")
@click.argument("timeline_id", type=int)
@click.option("--by-date", is_flag=True, help="Sort by date instead of stored position")
@click.pass_context
def timeline_show(ctx, timeline_id, by_date):
    """List the events of a timeline."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            target = db.timelines.resolve(timeline_id)
            click.echo(f"📜 {target.name} ({target.world.name})")

            if by_date:
                rows = [
                    (str(index), item)
                    for index, item in enumerate(db.memberships.get_by_date(target), 1)
                ]
            else:
                rows = [
                    (str(position), item)
                    for position, item in db.memberships.get_ordered(target)
                ]

            if not rows:
                click.echo("   (no events)")
                return
            for label, item in rows:
                click.echo(_event_line(label, item))

            collisions = db.memberships.collisions(target)
            for position, event_ids in sorted(collisions.items()):
                ids = ", ".join(f"#{event_id}" for event_id in event_ids)
                click.echo(
                    f"⚠️  Position {position} is shared by {ids}; "
                    f"run 'timeline compact {timeline_id}'",
                    err=True,
                )
    except DatabaseError as e:
        handle_cli_error(ctx, e, "timeline_show", {"timeline_id": timeline_id})


@timeline.command("move")
@click.argument("timeline_id", type=int)
@click.argument("event_id", type=int)
@click.argument("position", type=int)
@click.pass_context
def timeline_move(ctx, timeline_id, event_id, position):
    """Move EVENT_ID to POSITION (0 is first)."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            final = db.memberships.move(timeline_id, event_id, position)
        click.echo(f"✅ Moved event {event_id} to position {final}")
    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "timeline_move", {"timeline_id": timeline_id, "event_id": event_id}
        )


@timeline.command("swap")
@click.argument("timeline_id", type=int)
@click.argument("first_event", type=int, metavar="EVENT_A")
@click.argument("second_event", type=int, metavar="EVENT_B")
@click.pass_context
def timeline_swap(ctx, timeline_id, first_event, second_event):
    """Exchange the positions of EVENT_A and EVENT_B."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            db.memberships.swap(timeline_id, first_event, second_event)
        click.echo(f"✅ Swapped events {first_event} and {second_event}")
    except DatabaseError as e:
        handle_cli_error(ctx, e, "timeline_swap", {"timeline_id": timeline_id})


@timeline.command("remove")
@click.argument("timeline_id", type=int)
@click.argument("event_id", type=int)
@click.option("--compact", is_flag=True, help="Renumber the remaining events")
@click.pass_context
def timeline_remove(ctx, timeline_id, event_id, compact):
    """Take EVENT_ID off a timeline; the event itself is kept."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            removed = db.memberships.remove(timeline_id, event_id, compact=compact)
    except DatabaseError as e:
        handle_cli_error(
            ctx, e, "timeline_remove", {"timeline_id": timeline_id, "event_id": event_id}
        )

    if not removed:
        click.echo(f"Event {event_id} is not on timeline {timeline_id}")
        ctx.exit(1)
    click.echo(f"✅ Removed event {event_id} from timeline {timeline_id}")


@timeline.command("compact")
@click.argument("timeline_id", type=int)
@click.pass_context
def timeline_compact(ctx, timeline_id):
    """Renumber positions to 0..n-1, keeping the current order."""
    db = get_db(ctx)
    try:
        with db.session_scope():
            changed = db.memberships.compact(timeline_id)
        click.echo(f"✅ Compacted timeline {timeline_id} ({changed} positions changed)")
    except DatabaseError as e:
        handle_cli_error(ctx, e, "timeline_compact", {"timeline_id": timeline_id})
