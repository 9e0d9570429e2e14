#!/usr/bin/env python3
"""
validation.py
--------------------
Structural validation of DateValues.

validate() runs before a date is compared or stored. It raises
DateValidationError naming the offending field; nothing has been written
at that point, so stored data is never affected.

Rules:
    Exact        year required; day requires month; month 1..12; day 1..31
    Approximate  at least one of year/year_range/period/text;
                 year_range start <= end; month 1..12
    Range        start and end both carry a year; start is not after end
    Relative     no constraint
    Unknown      no constraint
"""
from __future__ import annotations

from typing import Any, Optional

from lorekeeper.core.exceptions import DateValidationError

from .comparator import Ordering, Precision, compare_keys, partial_key
from .dates import (
    ApproximateDate,
    DateRange,
    DateValue,
    ExactDate,
    PartialDate,
    RelativeDate,
    UnknownDate,
    coerce_date,
    unsupported_date,
)
from .eras import EraRegistry

MAX_MONTH = 12
MAX_DAY = 31


def _check_month_day(
    month: Optional[int], day: Optional[int], prefix: str = ""
) -> None:
    if month is not None and not 1 <= month <= MAX_MONTH:
        raise DateValidationError(f"{prefix}month", f"must be 1-{MAX_MONTH}, got {month}")
    if day is not None:
        if month is None:
            raise DateValidationError(f"{prefix}day", "a day requires a month")
        if not 1 <= day <= MAX_DAY:
            raise DateValidationError(f"{prefix}day", f"must be 1-{MAX_DAY}, got {day}")


def _check_partial(partial: PartialDate, name: str) -> None:
    if partial.year is None:
        raise DateValidationError(f"{name}.year", "range bounds require a year")
    _check_month_day(partial.month, partial.day, f"{name}.")


def validate(value: DateValue, eras: Optional[EraRegistry] = None) -> None:
    """
    Validate a DateValue.

    Args:
        value: Date to check
        eras: Registry used to order range bounds in different eras

    Raises:
        DateValidationError: On the first rule violation
        TypeError: If value is not a DateValue variant

    Notes:
        Range bounds in two different eras are only ordered when the
        registry knows about eras; otherwise their years are not comparable
        and the order check is skipped.
    """
    if isinstance(value, ExactDate):
        if value.year is None:
            raise DateValidationError("year", "exact dates require a year")
        _check_month_day(value.month, value.day)
        return

    if isinstance(value, ApproximateDate):
        if (
            value.year is None
            and value.year_range is None
            and value.period is None
            and not value.text
        ):
            raise DateValidationError(
                "year", "approximate dates need a year, year range, period or text"
            )
        if value.year_range is not None:
            lo, hi = value.year_range
            if lo > hi:
                raise DateValidationError(
                    "year_range", f"start {lo} is after end {hi}"
                )
        _check_month_day(value.month, None)
        return

    if isinstance(value, DateRange):
        _check_partial(value.start, "start")
        _check_partial(value.end, "end")
        if value.start.era != value.end.era and not eras:
            return
        # A year-only bound covers its whole year, so the start is only
        # rejected when it is after the end under both precision policies
        start, end = partial_key(value.start), partial_key(value.end)
        if all(
            compare_keys(start, end, eras, precision) == Ordering.GREATER
            for precision in Precision
        ):
            raise DateValidationError("start", "range start is after its end")
        return

    if isinstance(value, (RelativeDate, UnknownDate)):
        return

    raise unsupported_date(value)


def validate_date_data(data: Any, eras: Optional[EraRegistry] = None) -> DateValue:
    """
    Decode and validate raw date input in one step.

    Args:
        data: DateValue, wire dict or JSON string

    Returns:
        The validated DateValue

    Raises:
        DateValidationError: If decoding or validation fails
    """
    value = coerce_date(data)
    validate(value, eras)
    return value
