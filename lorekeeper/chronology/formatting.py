#!/usr/bin/env python3
"""
formatting.py
--------------------
Human-readable rendering of DateValues for timeline listings.

Examples:
    ExactDate(1977, month=3, day=12)               -> "1977-03-12"
    ExactDate(1977, era="AE", approximate=True)    -> "c. 1977 AE"
    ApproximateDate(year=1977, period=EARLY)       -> "Early 1977"
    ApproximateDate(year=1977, month=3, period=LATE) -> "Late March 1977"
    ApproximateDate(year_range=(1970, 1975))       -> "c. 1970–1975"
    DateRange(start=1960, end=1965)                -> "1960 to 1965"
    UnknownDate()                                  -> "Date unknown"
"""
from __future__ import annotations

import calendar
from typing import List, Optional

from .dates import (
    ApproximateDate,
    DateRange,
    DateValue,
    ExactDate,
    PartialDate,
    RelativeDate,
    UnknownDate,
    unsupported_date,
)

UNKNOWN_LABEL = "Date unknown"


def _numeric(year: Optional[int], month: Optional[int], day: Optional[int]) -> str:
    parts: List[str] = [str(year) if year is not None else "?"]
    if month:
        parts.append(f"{month:02d}")
        if day:
            parts.append(f"{day:02d}")
    return "-".join(parts)


def _with_era(text: str, era: Optional[str]) -> str:
    return f"{text} {era}" if era else text


def _partial(partial: PartialDate) -> str:
    return _with_era(_numeric(partial.year, partial.month, partial.day), partial.era)


def format_date(value: Optional[DateValue]) -> str:
    """
    Render a date for display.

    Args:
        value: Date to render; None renders as an empty string

    Returns:
        Display text
    """
    if value is None:
        return ""

    if isinstance(value, ExactDate):
        text = _with_era(_numeric(value.year, value.month, value.day), value.era)
        return f"c. {text}" if value.approximate else text

    if isinstance(value, ApproximateDate):
        if value.text:
            return value.text
        words: List[str] = []
        if value.period is not None:
            words.append(value.period.display_name)
        if value.month:
            words.append(calendar.month_name[value.month])
        if value.year is not None:
            words.append(str(value.year))
        elif value.year_range is not None:
            words.append(f"{value.year_range[0]}–{value.year_range[1]}")
        text = " ".join(words)
        if value.period is None and value.month is None:
            text = f"c. {text}"
        return _with_era(text, value.era)

    if isinstance(value, DateRange):
        text = f"{_partial(value.start)} to {_partial(value.end)}"
        return f"{text} ({value.text})" if value.text else text

    if isinstance(value, RelativeDate):
        return value.text

    if isinstance(value, UnknownDate):
        return value.text or UNKNOWN_LABEL

    raise unsupported_date(value)
