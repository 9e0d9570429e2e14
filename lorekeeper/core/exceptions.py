#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Lorekeeper project.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all persistence errors
    │   ├── StoreUnavailableError - Event store could not be reached
    │   └── MembershipError - Invalid timeline membership operation
    ├── ValidationError - Data validation failures
    │   └── DateValidationError - Malformed date value (carries the field)
    └── PartialInsertionError - Some timelines failed during insertion

Usage:
    from lorekeeper.core.exceptions import DatabaseError, DateValidationError

    try:
        db.save_event(metadata)
    except DateValidationError as e:
        click.echo(f"Invalid date ({e.field}): {e.message}")
    except DatabaseError as e:
        logger.log_error(e)
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from lorekeeper.chronology.insertion import InsertionReport


class DatabaseError(Exception):
    """
    Base exception for persistence errors.

    Raised when store operations fail due to integrity violations, query
    errors or other database problems. Catch this to handle any storage
    error, or catch a subclass for more granular handling.

    Examples:
        >>> raise DatabaseError("Timeline not found: 12")
        >>> raise DatabaseError("Data integrity violation: duplicate membership")
    """

    pass


class StoreUnavailableError(DatabaseError):
    """
    Exception for an unreachable event store.

    Fatal for the current operation. Because membership writes are not
    wrapped in a single transaction, the error records every timeline the
    engine had already started writing so callers know what to re-check.

    Attributes:
        attempted_timeline_ids: Timelines touched before the failure
        report: Partial InsertionReport, when raised by the engine
    """

    def __init__(
        self,
        message: str,
        attempted_timeline_ids: Optional[Sequence[int]] = None,
        report: Optional["InsertionReport"] = None,
    ) -> None:
        super().__init__(message)
        self.attempted_timeline_ids: List[int] = list(attempted_timeline_ids or [])
        self.report = report


class MembershipError(DatabaseError):
    """
    Exception for invalid timeline membership operations.

    Examples:
        >>> raise MembershipError("Event 4 is not on timeline 2")
        >>> raise MembershipError("Position must be non-negative, got -1")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input metadata fails validation checks:
    - Missing required fields
    - Type mismatches
    - Constraint violations

    Examples:
        >>> raise ValidationError("Required field 'title' missing or empty")
    """

    pass


class DateValidationError(ValidationError):
    """
    Exception for structurally invalid date values.

    Identifies the offending field with a dotted path so callers can point
    the user at it ("day", "year_range", "start.year").

    Attributes:
        field: Name of the offending field
        message: Human-readable description
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class PartialInsertionError(Exception):
    """
    Exception for insertions where some target timelines failed.

    Only raised on request through InsertionReport.raise_for_failures();
    the engine itself always returns the per-timeline report.

    Attributes:
        report: The InsertionReport with per-timeline results
    """

    def __init__(self, report: "InsertionReport") -> None:
        failed = ", ".join(str(tid) for tid in report.failed_timeline_ids)
        super().__init__(
            f"Event {report.event_id} could not be placed on timelines: {failed}"
        )
        self.report = report
