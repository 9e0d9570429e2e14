#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common CRUD helpers for entity managers.

Key Features:
    - Retry with exponential backoff when SQLite reports a locked database
    - Object resolution from ORM instances or integer IDs
    - Generic lookup, listing and counting helpers
    - Scalar field updates driven by normalizer tables

Usage:
    class TimelineManager(BaseManager):
        def create(self, metadata: Dict[str, Any]) -> Timeline:
            DataValidator.validate_required_fields(metadata, ["world", "name"])
            with DatabaseOperation(self.logger, "create_timeline"):
                ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar, Union

# --- Third party imports ---
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from lorekeeper.core.exceptions import DatabaseError
from lorekeeper.core.logging_manager import LorekeeperLogger, safe_logger
from lorekeeper.core.validators import DataValidator


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager shared by every entity manager.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[LorekeeperLogger] = None):
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable[[], Any],
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If the error is not a lock or retries ran out
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _resolve_object(self, item: Union[T, int], model_class: Type[T]) -> T:
        """
        Resolve an ORM instance or integer ID to a persisted object.

        Raises:
            DatabaseError: If no object with that ID exists
            TypeError: If item is neither an instance nor an int
        """
        if isinstance(item, model_class):
            if item.id is None:
                raise DatabaseError(f"{model_class.__name__} instance must be persisted")
            return item
        if isinstance(item, int) and not isinstance(item, bool):
            obj = self.session.get(model_class, item)
            if obj is None:
                raise DatabaseError(f"{model_class.__name__} not found: {item}")
            return obj
        raise TypeError(
            f"Expected {model_class.__name__} instance or int, got {type(item).__name__}"
        )

    # -------------------------------------------------------------------------
    # Generic CRUD Helpers
    # -------------------------------------------------------------------------

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        return self.session.get(model_class, entity_id)

    def _get_by_field(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
        normalize: bool = True,
    ) -> Optional[T]:
        """
        Get entity by a specific field value.

        Args:
            model_class: ORM model class
            field_name: Field name to filter by
            value: Value to look up
            normalize: Whether to normalize string values

        Returns:
            Entity if found, None otherwise
        """
        if value is None:
            return None

        if normalize and isinstance(value, str):
            value = DataValidator.normalize_string(value)
            if not value:
                return None

        return self.session.query(model_class).filter_by(**{field_name: value}).first()

    def _exists(self, model_class: Type[T], field_name: str, value: Any) -> bool:
        return self._get_by_field(model_class, field_name, value) is not None

    def _get_all(
        self,
        model_class: Type[T],
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[T]:
        """
        Get all entities of a type with optional filtering and ordering.

        Args:
            model_class: ORM model class
            order_by: Column name to order by
            **filters: Equality filters

        Returns:
            List of entities
        """
        query = self.session.query(model_class)

        if filters:
            query = query.filter_by(**filters)

        if order_by and hasattr(model_class, order_by):
            attr = getattr(model_class, order_by)
            # Skip plain Python properties
            if hasattr(attr, "__clause_element__"):
                query = query.order_by(attr)

        return query.all()

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        query = self.session.query(model_class)
        if filters:
            query = query.filter_by(**filters)
        return query.count()

    # -------------------------------------------------------------------------
    # Scalar Field Update Helpers
    # -------------------------------------------------------------------------

    def _update_scalar_fields(
        self,
        entity: Any,
        metadata: Dict[str, Any],
        field_configs: List[tuple],
    ) -> None:
        """
        Update multiple scalar fields from metadata using normalizers.

        Args:
            entity: Entity to update
            metadata: Dictionary containing field values
            field_configs: List of tuples:
                - (field_name, normalizer) for required fields
                - (field_name, normalizer, allow_none) for optional fields

        Example:
            self._update_scalar_fields(event, metadata, [
                ("title", DataValidator.normalize_string),
                ("location", DataValidator.normalize_string, True),
            ])
        """
        for config in field_configs:
            field_name = config[0]
            normalizer = config[1]
            allow_none = config[2] if len(config) > 2 else False

            if field_name not in metadata:
                continue

            value = normalizer(metadata[field_name])
            if value is not None or allow_none:
                setattr(entity, field_name, value)
