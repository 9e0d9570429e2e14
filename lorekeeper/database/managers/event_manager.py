#!/usr/bin/env python3
"""
event_manager.py
--------------------
Manages TimelineEvent entities and their dates.

Events belong to one world and can sit on any number of that world's
timelines. Dates are validated against the world's era registry before
anything is written. Saving an event never changes the position it
already holds on a timeline; only newly added timelines are positioned
(chronologically, by the InsertionEngine).

Key Features:
    - CRUD operations for timeline events
    - Structured dates (date_data) with legacy year/month/day/date_text
    - save(): create-or-update plus timeline placement in one call
    - Hard delete; memberships cascade

Usage:
    event_mgr = EventManager(session, logger)

    event, report = event_mgr.save({
        "world": "Arda",
        "title": "Fall of Gondolin",
        "date": {"type": "exact", "era": "First Age", "year": 510},
        "timelines": [1, 2],
    })

    event_mgr.update(event, {"description": "The hidden city falls"})
    event_mgr.delete(event)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from lorekeeper.chronology.comparator import date_key
from lorekeeper.chronology.dates import DateValue, date_to_dict, legacy_date
from lorekeeper.chronology.formatting import format_date
from lorekeeper.chronology.insertion import InsertionReport, TimelineLocks
from lorekeeper.chronology.sorting import sort_events
from lorekeeper.chronology.validation import validate, validate_date_data
from lorekeeper.core.config import EraConfig
from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.logging_manager import LorekeeperLogger
from lorekeeper.core.validators import DataValidator
from lorekeeper.database.decorators import handle_db_errors, log_database_operation
from lorekeeper.database.models import TimelineEvent, World

from .base_manager import BaseManager
from .membership_manager import MembershipManager
from .world_manager import WorldManager

LEGACY_DATE_FIELDS = ("year", "month", "day", "date_text")


class EventManager(BaseManager):
    """
    Manages timeline_events table operations.

    Attributes:
        memberships: MembershipManager sharing this session
    """

    def __init__(
        self,
        session,
        logger: Optional[LorekeeperLogger] = None,
        era_config: Optional[EraConfig] = None,
        locks: Optional[TimelineLocks] = None,
    ):
        super().__init__(session, logger)
        self.memberships = MembershipManager(session, logger, era_config, locks)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("get_event")
    def get(self, event_id: int) -> Optional[TimelineEvent]:
        return self._get_by_id(TimelineEvent, event_id)

    def resolve(self, event: Union[TimelineEvent, int]) -> TimelineEvent:
        return self._resolve_object(event, TimelineEvent)

    @handle_db_errors
    @log_database_operation("get_events_for_world")
    def get_for_world(
        self, world: Union[World, int, str], by_date: bool = False
    ) -> List[TimelineEvent]:
        """
        Events of a world, by id or chronologically.

        Args:
            world: World instance, ID, name or slug
            by_date: Sort chronologically using the world's era registry
        """
        world_obj = WorldManager(self.session, self.logger).resolve(world)
        events = self._get_all(TimelineEvent, order_by="id", world_id=world_obj.id)
        if by_date:
            return sort_events(events, self.memberships.registry_for(world_obj))
        return events

    # -------------------------------------------------------------------------
    # Date handling
    # -------------------------------------------------------------------------

    def _parse_date(self, world: World, metadata: Dict[str, Any]) -> Optional[DateValue]:
        """
        Validated DateValue from metadata, or None if no date keys are given.

        "date" (DateValue, wire dict or JSON string) wins over the legacy
        year/month/day/date_text keys.
        """
        registry = self.memberships.registry_for(world)

        if metadata.get("date") is not None:
            return validate_date_data(metadata["date"], registry)

        if any(key in metadata for key in LEGACY_DATE_FIELDS):
            value = legacy_date(
                DataValidator.normalize_int(metadata.get("year")),
                DataValidator.normalize_int(metadata.get("month")),
                DataValidator.normalize_int(metadata.get("day")),
                DataValidator.normalize_string(metadata.get("date_text")),
            )
            validate(value, registry)
            return value

        return None

    @staticmethod
    def _apply_date(event: TimelineEvent, value: DateValue) -> None:
        """Store date_data and keep the legacy columns in step."""
        key = date_key(value)
        event.date_data = date_to_dict(value)
        event.year = key.year
        event.month = key.month
        event.day = key.day
        event.date_text = format_date(value) or None

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("create_event")
    def create(self, metadata: Dict[str, Any]) -> TimelineEvent:
        """
        Create a new event. Timelines are not touched; see save().

        Args:
            metadata: Dictionary with required keys:
                - world: World instance, ID, name or slug
                - title: Event title
                Optional keys:
                - date: DateValue, wire dict or JSON string
                - year, month, day, date_text: legacy date fields
                - description, location: Free text
                - categories: List of labels
                - is_key_event: Boolean

        Returns:
            Created TimelineEvent

        Raises:
            ValidationError: Missing title or world
            DateValidationError: Malformed date (nothing is written)
            DatabaseError: World not found
        """
        DataValidator.validate_required_fields(metadata, ["world", "title"])
        title = DataValidator.normalize_string(metadata["title"])
        if not title:
            raise ValidationError(f"Invalid event title: {metadata['title']!r}")

        world = WorldManager(self.session, self.logger).resolve(metadata["world"])
        date = self._parse_date(world, metadata)

        event = TimelineEvent(
            world_id=world.id,
            title=title,
            description=DataValidator.normalize_string(metadata.get("description")),
            location=DataValidator.normalize_string(metadata.get("location")),
            categories=DataValidator.normalize_string_list(metadata.get("categories")),
            is_key_event=bool(DataValidator.normalize_bool(metadata.get("is_key_event"))),
        )
        if date is not None:
            self._apply_date(event, date)

        self.session.add(event)
        self._execute_with_retry(self.session.flush)
        return event

    @handle_db_errors
    @log_database_operation("update_event")
    def update(
        self, event: Union[TimelineEvent, int], metadata: Dict[str, Any]
    ) -> TimelineEvent:
        """
        Update an event's fields.

        A date change does not move the event on any timeline.

        Raises:
            DateValidationError: Malformed date (nothing is written)
        """
        event = self.resolve(event)
        date = self._parse_date(event.world, metadata)

        self._update_scalar_fields(
            event,
            metadata,
            [
                ("title", DataValidator.normalize_string),
                ("description", DataValidator.normalize_string, True),
                ("location", DataValidator.normalize_string, True),
                ("categories", DataValidator.normalize_string_list),
                ("is_key_event", DataValidator.normalize_bool),
            ],
        )
        if date is not None:
            self._apply_date(event, date)

        self._execute_with_retry(self.session.flush)
        return event

    @handle_db_errors
    @log_database_operation("delete_event")
    def delete(self, event: Union[TimelineEvent, int]) -> None:
        """Delete an event and every membership it has."""
        event = self.resolve(event)
        self.session.delete(event)
        self._execute_with_retry(self.session.flush)

    # -------------------------------------------------------------------------
    # Save with placement
    # -------------------------------------------------------------------------

    @log_database_operation("save_event")
    def save(self, metadata: Dict[str, Any]) -> Tuple[TimelineEvent, InsertionReport]:
        """
        Create or update an event, then place it on timelines.

        Args:
            metadata: create()/update() keys plus:
                - id: Existing event to update (omit to create)
                - timelines: Timeline IDs the event must be on
                - remove_timelines: Timeline IDs to take it off

        Returns:
            (event, InsertionReport for the "timelines" list)

        Raises:
            DateValidationError: Malformed date (nothing is written)
            StoreUnavailableError: Store lost during placement
        """
        event_id = metadata.get("id")
        if event_id is not None:
            event = self.get(DataValidator.normalize_int(event_id))
            if event is None:
                raise DatabaseError(f"TimelineEvent not found: {event_id}")
            event = self.update(event, metadata)
        else:
            event = self.create(metadata)

        if metadata.get("remove_timelines"):
            self.memberships.unplace(event, metadata["remove_timelines"])

        timeline_ids = [
            tid
            for tid in map(DataValidator.normalize_int, metadata.get("timelines") or [])
            if tid is not None
        ]
        report = self.memberships.place(event, timeline_ids)
        return event, report
