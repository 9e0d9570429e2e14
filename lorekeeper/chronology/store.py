#!/usr/bin/env python3
"""
store.py
--------------------
Storage contract consumed by the insertion engine.

The engine never talks to SQLAlchemy directly; it works against this
protocol. lorekeeper.database.event_store.SqlEventStore is the production
implementation.

Every call may block on I/O. Implementations raise DatabaseError for
failed writes and StoreUnavailableError when the backend cannot be reached.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ContextManager, Dict, Iterable, List, Protocol

from .dates import DateValue


@dataclass(frozen=True)
class MembershipRecord:
    """Persisted shape of one event's place on one timeline."""

    timeline_id: int
    event_id: int
    position: int


class EventStore(Protocol):
    """Get-by-timeline, get-by-ids, insert, update-position and delete."""

    def get_by_timeline(self, timeline_id: int) -> List[MembershipRecord]:
        """Memberships of a timeline ordered by position ascending."""
        ...

    def get_by_ids(self, event_ids: Iterable[int]) -> Dict[int, DateValue]:
        """Dates of the given events, keyed by event id."""
        ...

    def insert(self, record: MembershipRecord) -> None:
        """Create a membership."""
        ...

    def update_position(self, timeline_id: int, event_id: int, position: int) -> None:
        """Move an existing membership to a new position."""
        ...

    def delete(self, timeline_id: int, event_id: int) -> bool:
        """Remove a membership; returns False if it did not exist."""
        ...

    def timeline_scope(self, timeline_id: int) -> ContextManager[None]:
        """
        Scope for the writes of one timeline.

        A failure inside the scope must leave the store usable for the
        next timeline.
        """
        ...
