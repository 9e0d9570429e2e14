#!/usr/bin/env python3
"""
sorting.py
--------------------
Read-time chronological ordering of event collections.

Used by "sort by date" views. The stored membership positions are ignored;
events are ordered by comparing their dates with compare(). Python's sort
is stable, so events whose dates compare equal keep their original order.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from .comparator import Precision, compare
from .dates import DateValue, resolve_event_date
from .eras import EraRegistry

E = TypeVar("E")


def sort_events(
    events: Iterable[E],
    eras: Optional[EraRegistry] = None,
    date_of: Callable[[Any], DateValue] = resolve_event_date,
    precision: Precision = Precision.COARSE_FIRST,
) -> List[E]:
    """
    Return events in chronological order.

    Args:
        events: ORM rows, mappings or any objects date_of understands
        eras: Era registry for cross-era ordering
        date_of: Function resolving an event to its DateValue
        precision: Placement of values lacking month/day

    Returns:
        New list; ties keep their input order

    Examples:
        >>> sort_events([{"year": 1970}, {"year": 1960}])
        [{'year': 1960}, {'year': 1970}]
    """
    dated = [(date_of(event), event) for event in events]
    dated.sort(
        key=cmp_to_key(lambda x, y: int(compare(x[0], y[0], eras, precision)))
    )
    return [event for _, event in dated]
