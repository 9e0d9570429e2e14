#!/usr/bin/env python3
"""
world_manager.py
--------------------
Manages World entities and their era order.

Usage:
    world_mgr = WorldManager(session, logger)

    world = world_mgr.create({"name": "Arda", "eras": ["First Age", "Second Age"]})
    world_mgr.set_era_order(world, ["Years of the Trees", "First Age", "Second Age"])
    registry = world_mgr.era_registry(world)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from lorekeeper.chronology.eras import EraRegistry
from lorekeeper.core.exceptions import DatabaseError, ValidationError
from lorekeeper.core.validators import DataValidator
from lorekeeper.database.decorators import handle_db_errors, log_database_operation
from lorekeeper.database.models import World
from lorekeeper.utils.slugify import slugify

from .base_manager import BaseManager


class WorldManager(BaseManager):
    """Manages World table operations."""

    @handle_db_errors
    def exists(self, name: str) -> bool:
        return self._exists(World, "name", name)

    @handle_db_errors
    @log_database_operation("get_world")
    def get(
        self,
        world_name: Optional[str] = None,
        world_id: Optional[int] = None,
        slug: Optional[str] = None,
    ) -> Optional[World]:
        """
        Retrieve a world by ID, name or slug (checked in that order).

        Returns:
            World if found, None otherwise
        """
        if world_id is not None:
            return self._get_by_id(World, world_id)
        if world_name is not None:
            return self._get_by_field(World, "name", world_name)
        if slug is not None:
            return self._get_by_field(World, "slug", slug)
        return None

    def resolve(self, world: Union[World, int, str]) -> World:
        """
        Resolve a World from an instance, ID, name or slug.

        A numeric string that matches no name or slug is tried as an ID.

        Raises:
            DatabaseError: If no such world exists
        """
        if isinstance(world, str):
            found = self.get(world_name=world) or self.get(slug=world)
            if found is None and world.strip().isdigit():
                found = self.get(world_id=int(world))
            if found is None:
                raise DatabaseError(f"World not found: {world}")
            return found
        return self._resolve_object(world, World)

    @handle_db_errors
    @log_database_operation("get_all_worlds")
    def get_all(self) -> List[World]:
        return self._get_all(World, order_by="name")

    @handle_db_errors
    @log_database_operation("create_world")
    def create(self, metadata: Dict[str, Any]) -> World:
        """
        Create a new world.

        Args:
            metadata: Dictionary with required key:
                - name: Display name (unique)
                Optional keys:
                - slug: Defaults to slugify(name)
                - description: Free text
                - eras: Era names in chronological order

        Returns:
            Created World

        Raises:
            ValidationError: If the name is missing or yields an empty slug
            DatabaseError: If the name or slug is already taken
        """
        DataValidator.validate_required_fields(metadata, ["name"])
        name = DataValidator.normalize_string(metadata["name"])
        if not name:
            raise ValidationError(f"Invalid world name: {metadata['name']!r}")

        slug = slugify(metadata.get("slug") or name)
        if not slug:
            raise ValidationError(f"Cannot derive a slug from world name {name!r}")

        if self.exists(name):
            raise DatabaseError(f"World already exists: {name}")
        if self._exists(World, "slug", slug):
            raise DatabaseError(f"World slug already in use: {slug}")

        world = World(
            name=name,
            slug=slug,
            description=DataValidator.normalize_string(metadata.get("description")),
            era_order=list(EraRegistry(metadata.get("eras") or ())),
        )
        self.session.add(world)
        self._execute_with_retry(self.session.flush)
        return world

    @handle_db_errors
    @log_database_operation("update_world")
    def update(self, world: Union[World, int, str], metadata: Dict[str, Any]) -> World:
        """
        Update name, description or era order.

        Renaming does not change the slug.
        """
        world = self.resolve(world)
        self._update_scalar_fields(
            world,
            metadata,
            [
                ("name", DataValidator.normalize_string),
                ("description", DataValidator.normalize_string, True),
            ],
        )
        if "eras" in metadata:
            world.era_order = list(EraRegistry(metadata["eras"] or ()))
        self._execute_with_retry(self.session.flush)
        return world

    def set_era_order(self, world: Union[World, int, str], eras: List[str]) -> World:
        return self.update(world, {"eras": eras})

    def era_registry(self, world: Union[World, int, str]) -> EraRegistry:
        return EraRegistry.from_world(self.resolve(world), logger=self.logger)

    @handle_db_errors
    @log_database_operation("delete_world")
    def delete(self, world: Union[World, int, str]) -> None:
        """Delete a world with its timelines, events and memberships."""
        world = self.resolve(world)
        self.session.delete(world)
        self._execute_with_retry(self.session.flush)
