#!/usr/bin/env python3
"""
membership_manager.py
--------------------
Timeline membership operations backed by the chronology InsertionEngine.

Every position write goes through an InsertionEngine running on a
SqlEventStore bound to this manager's session. This manager adds the
database-facing parts: resolving worlds, timelines and events, choosing
the era registry that applies to a world, and listing a timeline either
in stored position order or in date order.

Era registry precedence:
    1. The world's own era_order column
    2. The eras file entry for the world's name (or its default list)
    3. No eras (single implicit era)

Usage:
    memberships = MembershipManager(session, logger)

    report = memberships.place(event, [timeline.id, other.id])
    memberships.move(timeline, event, 0)
    memberships.swap(timeline, first_event, second_event)
    rows = memberships.get_ordered(timeline)     # [(position, event), ...]
    events = memberships.get_by_date(timeline)    # [event, ...]
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Union

from lorekeeper.chronology.eras import EraRegistry
from lorekeeper.chronology.insertion import InsertionEngine, InsertionReport, TimelineLocks
from lorekeeper.chronology.sorting import sort_events
from lorekeeper.core.config import EraConfig
from lorekeeper.core.logging_manager import LorekeeperLogger
from lorekeeper.database.decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)
from lorekeeper.database.event_store import SqlEventStore
from lorekeeper.database.models import Timeline, TimelineEvent, TimelineMembership, World

from .base_manager import BaseManager


class MembershipManager(BaseManager):
    """
    Manages timeline_event_timelines rows.

    Attributes:
        era_config: Fallback era lists from the eras file
        locks: Optional per-timeline locks shared across sessions
    """

    def __init__(
        self,
        session,
        logger: Optional[LorekeeperLogger] = None,
        era_config: Optional[EraConfig] = None,
        locks: Optional[TimelineLocks] = None,
    ):
        super().__init__(session, logger)
        self.era_config = era_config or EraConfig()
        self.locks = locks
        self.store = SqlEventStore(session, logger)

    # -------------------------------------------------------------------------
    # Engine wiring
    # -------------------------------------------------------------------------

    def registry_for(self, world: World) -> EraRegistry:
        """Era registry that applies to a world."""
        if world.era_order:
            return EraRegistry.from_world(world, logger=self.logger)
        return self.era_config.registry_for(world.name, logger=self.logger)

    def engine_for(self, world: World) -> InsertionEngine:
        return InsertionEngine(
            self.store,
            eras=self.registry_for(world),
            logger=self.logger,
            locks=self.locks,
        )

    def _timeline(self, timeline: Union[Timeline, int]) -> Timeline:
        return self._resolve_object(timeline, Timeline)

    def _event_id(self, event: Union[TimelineEvent, int]) -> int:
        if isinstance(event, TimelineEvent):
            return event.id
        return int(event)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    @log_database_operation("place_event")
    def place(
        self,
        event: Union[TimelineEvent, int],
        timeline_ids: Iterable[int],
    ) -> InsertionReport:
        """
        Put an event on every listed timeline at its chronological slot.

        Timelines the event is already on keep their positions. Failures
        are reported per timeline; see InsertionEngine for the semantics.

        Returns:
            InsertionReport
        """
        event = self._resolve_object(event, TimelineEvent)
        engine = self.engine_for(event.world)
        report = engine.insert_or_update_memberships(
            event.id, event.date_value, list(timeline_ids)
        )
        self.session.expire(event, ["memberships"])
        return report

    @handle_db_errors
    def unplace(
        self,
        event: Union[TimelineEvent, int],
        timeline_ids: Iterable[int],
        compact: bool = False,
    ) -> List[int]:
        """
        Remove an event from several timelines.

        Returns:
            IDs of the timelines the event was actually removed from
        """
        event = self._resolve_object(event, TimelineEvent)
        engine = self.engine_for(event.world)
        removed = [
            timeline_id
            for timeline_id in dict.fromkeys(timeline_ids)
            if engine.remove(timeline_id, event.id, compact=compact)
        ]
        self.session.expire(event, ["memberships"])
        return removed

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("list_timeline")
    def get_ordered(self, timeline: Union[Timeline, int]) -> List[Tuple[int, TimelineEvent]]:
        """
        Events of a timeline in stored position order.

        Returns:
            [(position, event), ...]; ties (only possible after a race)
            are ordered by membership id
        """
        timeline = self._timeline(timeline)
        rows = (
            self.session.query(TimelineMembership)
            .filter_by(timeline_id=timeline.id)
            .order_by(TimelineMembership.position, TimelineMembership.id)
            .all()
        )
        return [(row.position, row.event) for row in rows]

    @handle_db_errors
    @log_database_operation("list_timeline_by_date")
    def get_by_date(self, timeline: Union[Timeline, int]) -> List[TimelineEvent]:
        """Events of a timeline sorted chronologically, ignoring positions."""
        timeline = self._timeline(timeline)
        events = [event for _, event in self.get_ordered(timeline)]
        return sort_events(events, self.registry_for(timeline.world))

    @handle_db_errors
    def positions(self, timeline: Union[Timeline, int]) -> Dict[int, int]:
        """{event_id: position} for a timeline."""
        timeline = self._timeline(timeline)
        return {
            record.event_id: record.position
            for record in self.store.get_by_timeline(timeline.id)
        }

    # -------------------------------------------------------------------------
    # Manual ordering
    # -------------------------------------------------------------------------

    @handle_db_errors
    def move(
        self,
        timeline: Union[Timeline, int],
        event: Union[TimelineEvent, int],
        position: int,
    ) -> int:
        """Move an event to an index; returns its final position."""
        timeline = self._timeline(timeline)
        event_id = self._event_id(event)
        with DatabaseOperation(
            self.logger, "move_event", {"timeline_id": timeline.id, "event_id": event_id}
        ):
            return self.engine_for(timeline.world).move(timeline.id, event_id, position)

    @handle_db_errors
    def swap(
        self,
        timeline: Union[Timeline, int],
        first: Union[TimelineEvent, int],
        second: Union[TimelineEvent, int],
    ) -> None:
        timeline = self._timeline(timeline)
        first_id, second_id = self._event_id(first), self._event_id(second)
        with DatabaseOperation(
            self.logger,
            "swap_events",
            {"timeline_id": timeline.id, "events": [first_id, second_id]},
        ):
            self.engine_for(timeline.world).swap(timeline.id, first_id, second_id)

    @handle_db_errors
    def remove(
        self,
        timeline: Union[Timeline, int],
        event: Union[TimelineEvent, int],
        compact: bool = False,
    ) -> bool:
        timeline = self._timeline(timeline)
        event_id = self._event_id(event)
        with DatabaseOperation(
            self.logger,
            "remove_membership",
            {"timeline_id": timeline.id, "event_id": event_id},
        ):
            return self.engine_for(timeline.world).remove(
                timeline.id, event_id, compact=compact
            )

    @handle_db_errors
    def compact(self, timeline: Union[Timeline, int]) -> int:
        timeline = self._timeline(timeline)
        with DatabaseOperation(
            self.logger, "compact_timeline", {"timeline_id": timeline.id}
        ):
            return self.engine_for(timeline.world).compact(timeline.id)

    @handle_db_errors
    def collisions(self, timeline: Union[Timeline, int]) -> Dict[int, List[int]]:
        timeline = self._timeline(timeline)
        return self.engine_for(timeline.world).collisions(timeline.id)
