#!/usr/bin/env python3
"""
timeline_manager.py
--------------------
Manages Timeline entities.

Positions of events on a timeline are not handled here; see
MembershipManager.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.validators import DataValidator
from lorekeeper.database.decorators import handle_db_errors, log_database_operation
from lorekeeper.database.models import Timeline, World

from .base_manager import BaseManager
from .world_manager import WorldManager


class TimelineManager(BaseManager):
    """Manages Timeline table operations."""

    @handle_db_errors
    @log_database_operation("get_timeline")
    def get(
        self,
        timeline_id: Optional[int] = None,
        world: Optional[Union[World, int, str]] = None,
        name: Optional[str] = None,
    ) -> Optional[Timeline]:
        """
        Retrieve a timeline by ID, or by world and name.

        Returns:
            Timeline if found, None otherwise
        """
        if timeline_id is not None:
            return self._get_by_id(Timeline, timeline_id)
        if world is not None and name is not None:
            world_obj = WorldManager(self.session, self.logger).resolve(world)
            normalized = DataValidator.normalize_string(name)
            return (
                self.session.query(Timeline)
                .filter_by(world_id=world_obj.id, name=normalized)
                .first()
            )
        return None

    def resolve(self, timeline: Union[Timeline, int]) -> Timeline:
        return self._resolve_object(timeline, Timeline)

    @handle_db_errors
    @log_database_operation("get_timelines_for_world")
    def get_for_world(self, world: Union[World, int, str]) -> List[Timeline]:
        world_obj = WorldManager(self.session, self.logger).resolve(world)
        return self._get_all(Timeline, order_by="name", world_id=world_obj.id)

    @handle_db_errors
    @log_database_operation("create_timeline")
    def create(self, metadata: Dict[str, Any]) -> Timeline:
        """
        Create a timeline in a world.

        Args:
            metadata: Dictionary with required keys:
                - world: World instance, ID, name or slug
                - name: Timeline name (unique within the world)
                Optional keys:
                - description: Free text

        Raises:
            ValidationError: If required fields are missing
            DatabaseError: If the world does not exist or the name is taken
        """
        DataValidator.validate_required_fields(metadata, ["world", "name"])
        name = DataValidator.normalize_string(metadata["name"])
        if not name:
            raise ValidationError(f"Invalid timeline name: {metadata['name']!r}")

        world = WorldManager(self.session, self.logger).resolve(metadata["world"])
        if self.get(world=world, name=name) is not None:
            raise DatabaseError(f"Timeline already exists in {world.name}: {name}")

        timeline = Timeline(
            world_id=world.id,
            name=name,
            description=DataValidator.normalize_string(metadata.get("description")),
        )
        self.session.add(timeline)
        self._execute_with_retry(self.session.flush)
        return timeline

    @handle_db_errors
    @log_database_operation("update_timeline")
    def update(self, timeline: Union[Timeline, int], metadata: Dict[str, Any]) -> Timeline:
        timeline = self.resolve(timeline)
        self._update_scalar_fields(
            timeline,
            metadata,
            [
                ("name", DataValidator.normalize_string),
                ("description", DataValidator.normalize_string, True),
            ],
        )
        self._execute_with_retry(self.session.flush)
        return timeline

    @handle_db_errors
    @log_database_operation("delete_timeline")
    def delete(self, timeline: Union[Timeline, int]) -> None:
        """Delete a timeline and its memberships; events are kept."""
        timeline = self.resolve(timeline)
        self.session.delete(timeline)
        self._execute_with_retry(self.session.flush)
