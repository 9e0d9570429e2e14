"""
Chronology engine: date model, ordering and timeline positions.

Modules:
    - dates: DateValue variants and their JSON wire codec
    - eras: ordered era registry
    - comparator: total ordering over DateValues
    - validation: structural date validation
    - sorting: read-time chronological sort
    - formatting: display text for dates
    - store: storage contract used by the insertion engine
    - insertion: position maintenance for timeline memberships
"""
from .comparator import DateKey, Ordering, Precision, compare, date_key, date_sort_key
from .dates import (
    ApproximateDate,
    DateRange,
    DateValue,
    ExactDate,
    PartialDate,
    Period,
    RelativeDate,
    UnknownDate,
    coerce_date,
    date_from_dict,
    date_to_dict,
    legacy_date,
    resolve_event_date,
)
from .eras import NO_ERAS, EraRegistry
from .formatting import format_date
from .insertion import (
    InsertionEngine,
    InsertionPlan,
    InsertionReport,
    TimelineLocks,
    TimelineResult,
)
from .sorting import sort_events
from .store import EventStore, MembershipRecord
from .validation import validate, validate_date_data

__all__ = [
    # Dates
    "ApproximateDate",
    "DateRange",
    "DateValue",
    "ExactDate",
    "PartialDate",
    "Period",
    "RelativeDate",
    "UnknownDate",
    "coerce_date",
    "date_from_dict",
    "date_to_dict",
    "legacy_date",
    "resolve_event_date",
    # Ordering
    "DateKey",
    "EraRegistry",
    "NO_ERAS",
    "Ordering",
    "Precision",
    "compare",
    "date_key",
    "date_sort_key",
    "sort_events",
    # Validation and display
    "format_date",
    "validate",
    "validate_date_data",
    # Positions
    "EventStore",
    "InsertionEngine",
    "InsertionPlan",
    "InsertionReport",
    "MembershipRecord",
    "TimelineLocks",
    "TimelineResult",
]
