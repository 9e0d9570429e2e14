#!/usr/bin/env python3
"""
comparator.py
--------------------
Total, deterministic ordering over DateValues.

compare(a, b, eras) walks these keys in order and returns on the first
difference:

    1. Era rank (only when the registry is non-empty). A value with
       neither era nor year ranks past the last era, so undated values
       sort after every dated one whatever its era.
    2. Year: Exact.year; Approximate.year, else the floored midpoint of
       year_range; Range.start.year; None for Relative/Unknown.
       A missing year always sorts after a present one.
    3. Month: a missing month sorts according to the precision policy
    4. Day: same policy, reached only when years and months tie
    5. Period weight: Early 1, Mid 2, Late 3; anything else 2
    6. Equal

Precision policy for a missing month or day:
    COARSE_FIRST  a year-only value stands for the start of its year and
                  sorts before more precise values of the same year (default)
    COARSE_LAST   a missing month/day sorts after a present one

The period weight is never consulted before the date keys, so a precise
date and a same-year approximate date are ordered by precision, not period.

compare() never breaks ties itself. Callers that need a repeatable order
use a stable sort or a secondary key (list position, id).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import cmp_to_key
from typing import Any, Callable, Optional

from .dates import (
    DEFAULT_PERIOD_WEIGHT,
    ApproximateDate,
    DateRange,
    DateValue,
    ExactDate,
    PartialDate,
    RelativeDate,
    UnknownDate,
    unsupported_date,
)
from .eras import NO_ERAS, EraRegistry


class Ordering(IntEnum):
    """Result of a comparison; values match the classic cmp convention."""

    LESS = -1
    EQUAL = 0
    GREATER = 1

    def reverse(self) -> "Ordering":
        return Ordering(-self.value)


class Precision(str, Enum):
    """Where a value lacking month/day sorts relative to a precise one."""

    COARSE_FIRST = "coarse_first"
    COARSE_LAST = "coarse_last"


@dataclass(frozen=True)
class DateKey:
    """The comparable parts of a DateValue."""

    era: Optional[str]
    year: Optional[int]
    month: Optional[int]
    day: Optional[int]
    period_weight: int = DEFAULT_PERIOD_WEIGHT


def _midpoint(year_range: Any) -> Optional[int]:
    if year_range is None:
        return None
    lo, hi = year_range
    return (lo + hi) // 2


def partial_key(partial: PartialDate) -> DateKey:
    return DateKey(partial.era, partial.year, partial.month, partial.day)


def date_key(value: DateValue) -> DateKey:
    """
    Extract the ordering key of a date.

    Raises:
        TypeError: For anything that is not one of the five variants
    """
    if isinstance(value, ExactDate):
        return DateKey(value.era, value.year, value.month, value.day)

    if isinstance(value, ApproximateDate):
        year = value.year if value.year is not None else _midpoint(value.year_range)
        weight = value.period.weight if value.period is not None else DEFAULT_PERIOD_WEIGHT
        return DateKey(value.era, year, value.month, None, weight)

    if isinstance(value, DateRange):
        # A range is placed at its start
        return partial_key(value.start)

    if isinstance(value, (RelativeDate, UnknownDate)):
        return DateKey(None, None, None, None)

    raise unsupported_date(value)


def _era_rank(key: DateKey, eras: EraRegistry) -> int:
    if key.era is None and key.year is None:
        return len(eras)
    return eras.rank(key.era)


def _cmp(x: int, y: int) -> int:
    return (x > y) - (x < y)


def _cmp_optional(x: Optional[int], y: Optional[int], missing_last: bool) -> int:
    if x is None and y is None:
        return 0
    if x is None:
        return 1 if missing_last else -1
    if y is None:
        return -1 if missing_last else 1
    return _cmp(x, y)


def compare_keys(
    a: DateKey,
    b: DateKey,
    eras: Optional[EraRegistry] = None,
    precision: Precision = Precision.COARSE_FIRST,
) -> Ordering:
    """Compare two extracted keys. See the module docstring for the rules."""
    eras = eras if eras is not None else NO_ERAS

    if eras and (a.era is not None or b.era is not None):
        result = _cmp(_era_rank(a, eras), _era_rank(b, eras))
        if result:
            return Ordering(result)

    result = _cmp_optional(a.year, b.year, missing_last=True)
    if result:
        return Ordering(result)

    missing_last = precision == Precision.COARSE_LAST

    result = _cmp_optional(a.month, b.month, missing_last)
    if result:
        return Ordering(result)

    result = _cmp_optional(a.day, b.day, missing_last)
    if result:
        return Ordering(result)

    return Ordering(_cmp(a.period_weight, b.period_weight))


def compare(
    a: DateValue,
    b: DateValue,
    eras: Optional[EraRegistry] = None,
    precision: Precision = Precision.COARSE_FIRST,
) -> Ordering:
    """
    Order two dates.

    Args:
        a: First date
        b: Second date
        eras: Era registry; None or empty means a single implicit era
        precision: Placement of values lacking month/day

    Returns:
        Ordering.LESS if a sorts first, GREATER if b does, EQUAL on a tie

    Examples:
        >>> compare(ExactDate(1960), ExactDate(1965))
        <Ordering.LESS: -1>
        >>> compare(UnknownDate(), ExactDate(1))
        <Ordering.GREATER: 1>
    """
    return compare_keys(date_key(a), date_key(b), eras, precision)


def date_sort_key(
    eras: Optional[EraRegistry] = None,
    precision: Precision = Precision.COARSE_FIRST,
) -> Callable[[DateValue], Any]:
    """Key function for sorted() over DateValues."""
    return cmp_to_key(lambda a, b: int(compare(a, b, eras, precision)))
