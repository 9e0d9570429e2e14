#!/usr/bin/env python3
"""
event_store.py
--------------------
SQLAlchemy implementation of the chronology EventStore protocol.

Reads and writes timeline_event_timelines rows on the session it is given;
committing is left to the caller's session scope. Each timeline's writes
run inside a SAVEPOINT so a failure on one timeline rolls back only that
timeline and leaves the session usable for the next.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

# --- Third party imports ---
from sqlalchemy.exc import SQLAlchemyError

# --- Local imports ---
from lorekeeper.chronology.dates import DateValue
from lorekeeper.chronology.store import MembershipRecord
from lorekeeper.core.exceptions import MembershipError

from .decorators import handle_db_errors, translate_db_error
from .managers.base_manager import BaseManager
from .models import Timeline, TimelineEvent, TimelineMembership


class SqlEventStore(BaseManager):
    """EventStore backed by the timeline_event_timelines table."""

    def _membership(
        self, timeline_id: int, event_id: int
    ) -> Optional[TimelineMembership]:
        return (
            self.session.query(TimelineMembership)
            .filter_by(timeline_id=timeline_id, timeline_event_id=event_id)
            .first()
        )

    @handle_db_errors
    def get_by_timeline(self, timeline_id: int) -> List[MembershipRecord]:
        rows = self._execute_with_retry(
            lambda: self.session.query(TimelineMembership)
            .filter_by(timeline_id=timeline_id)
            .order_by(TimelineMembership.position, TimelineMembership.id)
            .all()
        )
        return [
            MembershipRecord(row.timeline_id, row.timeline_event_id, row.position)
            for row in rows
        ]

    @handle_db_errors
    def get_by_ids(self, event_ids: Iterable[int]) -> Dict[int, DateValue]:
        ids = sorted(set(event_ids))
        if not ids:
            return {}
        rows = self._execute_with_retry(
            lambda: self.session.query(TimelineEvent)
            .filter(TimelineEvent.id.in_(ids))
            .all()
        )
        return {row.id: row.date_value for row in rows}

    @handle_db_errors
    def insert(self, record: MembershipRecord) -> None:
        self.session.add(
            TimelineMembership(
                timeline_id=record.timeline_id,
                timeline_event_id=record.event_id,
                position=record.position,
            )
        )
        self._execute_with_retry(self.session.flush)

    @handle_db_errors
    def update_position(self, timeline_id: int, event_id: int, position: int) -> None:
        membership = self._membership(timeline_id, event_id)
        if membership is None:
            raise MembershipError(f"Event {event_id} is not on timeline {timeline_id}")
        membership.position = position
        self._execute_with_retry(self.session.flush)

    @handle_db_errors
    def delete(self, timeline_id: int, event_id: int) -> bool:
        membership = self._membership(timeline_id, event_id)
        if membership is None:
            return False
        self.session.delete(membership)
        self._execute_with_retry(self.session.flush)
        return True

    @contextmanager
    def timeline_scope(self, timeline_id: int) -> Iterator[None]:
        """
        SAVEPOINT around one timeline's reads and writes.

        Raises:
            MembershipError: If the timeline does not exist
            DatabaseError: If the savepoint cannot be opened or released
        """
        try:
            with self.session.begin_nested():
                if self.session.get(Timeline, timeline_id) is None:
                    raise MembershipError(f"Timeline not found: {timeline_id}")
                yield
        except SQLAlchemyError as e:
            raise translate_db_error(e) from e
