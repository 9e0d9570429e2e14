#!/usr/bin/env python3
"""
dates.py
--------------------
Tagged-union model of in-universe dates.

A timeline event can be dated in five ways, each a frozen dataclass:

    ExactDate        calendar date, month/day optional (year-only precision)
    ApproximateDate  fuzzy date: year, year range and/or Early/Mid/Late period
    DateRange        span between two partial dates
    RelativeDate     free text relative to another event
    UnknownDate      explicitly undated

DateValue is the union of the five. Code that consumes a DateValue handles
every variant and raises TypeError on anything else.

Wire format (the JSON stored in timeline_events.date_data):
    {"type": "exact", "era": "AE", "year": 1977, "month": 3, "day": 12, "approximate": false}
    {"type": "approximate", "year": 1977, "period": "early"}
    {"type": "approximate", "year_range": [1970, 1975]}
    {"type": "range", "start": {"year": 1960}, "end": {"year": 1965}}
    {"type": "relative", "text": "Before the Great War"}
    {"type": "unknown", "text": "Date unknown"}

Records written before date_data existed only carry the scalar columns
year/month/day/date_text; resolve_event_date() maps those onto an ExactDate
or UnknownDate.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from lorekeeper.core.exceptions import DateValidationError, ValidationError
from lorekeeper.core.validators import DataValidator


class Period(str, Enum):
    """
    Sub-year bucket for approximate dates.
    - EARLY: first part of the year (or month, when paired with one)
    - MID: middle part; also the weight assumed when no period is given
    - LATE: last part
    """

    EARLY = "early"
    MID = "mid"
    LATE = "late"

    @classmethod
    def choices(cls) -> List[str]:
        return [period.value for period in cls]

    @property
    def weight(self) -> int:
        """Ordering weight: Early 1, Mid 2, Late 3."""
        return {Period.EARLY: 1, Period.MID: 2, Period.LATE: 3}[self]

    @property
    def display_name(self) -> str:
        return self.value.title()


# Weight used when no period applies
DEFAULT_PERIOD_WEIGHT = 2


@dataclass(frozen=True)
class PartialDate:
    """One end of a DateRange; every part is optional."""

    era: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None


@dataclass(frozen=True)
class ExactDate:
    """
    A calendar date with year precision or finer.

    Attributes:
        year: Year within the era
        era: Era name, None for the implicit era
        month: 1..12, optional
        day: 1..31, optional (requires month)
        approximate: Display hint ("c. 1977"); not used for ordering
    """

    TYPE: ClassVar[str] = "exact"

    year: int
    era: Optional[str] = None
    month: Optional[int] = None
    day: Optional[int] = None
    approximate: bool = False


@dataclass(frozen=True)
class ApproximateDate:
    """
    A fuzzy date, e.g. "early 1977", "1970-1975", "late March 1977".

    Attributes:
        era: Era name, optional
        year: Representative year, optional
        year_range: Inclusive (start, end) years, optional
        period: Early/Mid/Late bucket, optional
        month: 1..12, for "early March 1977"-style values
        text: Free-text description
    """

    TYPE: ClassVar[str] = "approximate"

    era: Optional[str] = None
    year: Optional[int] = None
    year_range: Optional[Tuple[int, int]] = None
    period: Optional[Period] = None
    month: Optional[int] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    """A span of time. Ordering only looks at the start."""

    TYPE: ClassVar[str] = "range"

    start: PartialDate
    end: PartialDate
    text: Optional[str] = None


@dataclass(frozen=True)
class RelativeDate:
    """A date expressed relative to another event ("After the coronation")."""

    TYPE: ClassVar[str] = "relative"

    text: str = ""
    reference_event_id: Optional[int] = None


@dataclass(frozen=True)
class UnknownDate:
    """An explicitly undated event."""

    TYPE: ClassVar[str] = "unknown"

    text: Optional[str] = None


DateValue = Union[ExactDate, ApproximateDate, DateRange, RelativeDate, UnknownDate]

DATE_TYPES = (ExactDate, ApproximateDate, DateRange, RelativeDate, UnknownDate)


def unsupported_date(value: Any) -> TypeError:
    """Build the error raised when a non-DateValue reaches a consumer."""
    return TypeError(f"Unsupported date value: {type(value).__name__}")


# -------------------------------------------------------------------------
# Field decoding helpers
# -------------------------------------------------------------------------


def _era(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _int(data: Mapping[str, Any], key: str, prefix: str = "") -> Optional[int]:
    """Read an optional integer; 0 and "" count as absent for month/day."""
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise DateValidationError(f"{prefix}{key}", f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise DateValidationError(f"{prefix}{key}", f"expected an integer, got {value!r}")


def _month_or_day(data: Mapping[str, Any], key: str, prefix: str = "") -> Optional[int]:
    # The editor stores 0 for "no month"
    value = _int(data, key, prefix)
    return None if value == 0 else value


def _partial(data: Any, name: str) -> PartialDate:
    if data is None:
        return PartialDate()
    if not isinstance(data, Mapping):
        raise DateValidationError(name, f"expected an object, got {data!r}")
    prefix = f"{name}."
    return PartialDate(
        era=_era(data.get("era")),
        year=_int(data, "year", prefix),
        month=_month_or_day(data, "month", prefix),
        day=_month_or_day(data, "day", prefix),
    )


def _year_range(value: Any) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise DateValidationError("year_range", f"expected [start, end], got {value!r}")
    lo = _int({"year_range": value[0]}, "year_range")
    hi = _int({"year_range": value[1]}, "year_range")
    if lo is None or hi is None:
        raise DateValidationError("year_range", "both bounds are required")
    return (lo, hi)


def _flag(value: Any, name: str) -> bool:
    try:
        return bool(DataValidator.normalize_bool(value))
    except ValidationError:
        raise DateValidationError(name, f"expected true or false, got {value!r}")


def _period(value: Any) -> Optional[Period]:
    if value is None or value == "":
        return None
    if isinstance(value, Period):
        return value
    try:
        return Period(str(value).strip().lower())
    except ValueError:
        raise DateValidationError(
            "period", f"expected one of {Period.choices()}, got {value!r}"
        )


# -------------------------------------------------------------------------
# Wire codec
# -------------------------------------------------------------------------


def date_from_dict(data: Mapping[str, Any]) -> DateValue:
    """
    Decode the JSON wire representation of a date.

    Args:
        data: Mapping with a "type" tag and the variant's fields

    Returns:
        The matching DateValue variant

    Raises:
        DateValidationError: Unknown type tag or malformed field

    Notes:
        Decoding only checks types; structural rules (day needs month,
        ordered ranges, ...) are enforced by validation.validate().
    """
    if not isinstance(data, Mapping):
        raise DateValidationError("type", f"expected an object, got {data!r}")

    kind = str(data.get("type") or "").strip().lower()

    if kind == ExactDate.TYPE:
        year = _int(data, "year")
        if year is None:
            raise DateValidationError("year", "exact dates require a year")
        return ExactDate(
            year=year,
            era=_era(data.get("era")),
            month=_month_or_day(data, "month"),
            day=_month_or_day(data, "day"),
            approximate=_flag(data.get("approximate"), "approximate"),
        )

    if kind == ApproximateDate.TYPE:
        return ApproximateDate(
            era=_era(data.get("era")),
            year=_int(data, "year"),
            year_range=_year_range(data.get("year_range")),
            period=_period(data.get("period")),
            month=_month_or_day(data, "month"),
            text=_text(data.get("text")),
        )

    if kind == DateRange.TYPE:
        return DateRange(
            start=_partial(data.get("start"), "start"),
            end=_partial(data.get("end"), "end"),
            text=_text(data.get("text")),
        )

    if kind == RelativeDate.TYPE:
        return RelativeDate(
            text=_text(data.get("text")) or "",
            reference_event_id=_int(data, "reference_event_id"),
        )

    if kind == UnknownDate.TYPE:
        return UnknownDate(text=_text(data.get("text")))

    raise DateValidationError(
        "type",
        f"expected one of {[t.TYPE for t in DATE_TYPES]}, got {data.get('type')!r}",
    )


def _partial_to_dict(partial: PartialDate) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in ("era", "year", "month", "day"):
        value = getattr(partial, key)
        if value is not None:
            result[key] = value
    return result


def date_to_dict(value: DateValue) -> Dict[str, Any]:
    """
    Encode a DateValue in the JSON wire format.

    Absent optional fields are omitted, except the exact-date
    "approximate" flag which is always written.
    """
    if isinstance(value, ExactDate):
        result: Dict[str, Any] = {"type": ExactDate.TYPE}
        if value.era is not None:
            result["era"] = value.era
        result["year"] = value.year
        if value.month is not None:
            result["month"] = value.month
        if value.day is not None:
            result["day"] = value.day
        result["approximate"] = value.approximate
        return result

    if isinstance(value, ApproximateDate):
        result = {"type": ApproximateDate.TYPE}
        if value.era is not None:
            result["era"] = value.era
        if value.year is not None:
            result["year"] = value.year
        if value.year_range is not None:
            result["year_range"] = list(value.year_range)
        if value.period is not None:
            result["period"] = value.period.value
        if value.month is not None:
            result["month"] = value.month
        if value.text is not None:
            result["text"] = value.text
        return result

    if isinstance(value, DateRange):
        result = {
            "type": DateRange.TYPE,
            "start": _partial_to_dict(value.start),
            "end": _partial_to_dict(value.end),
        }
        if value.text is not None:
            result["text"] = value.text
        return result

    if isinstance(value, RelativeDate):
        result = {"type": RelativeDate.TYPE, "text": value.text}
        if value.reference_event_id is not None:
            result["reference_event_id"] = value.reference_event_id
        return result

    if isinstance(value, UnknownDate):
        result = {"type": UnknownDate.TYPE}
        if value.text is not None:
            result["text"] = value.text
        return result

    raise unsupported_date(value)


def coerce_date(value: Any) -> DateValue:
    """
    Accept a DateValue, a wire dict or a JSON string and return a DateValue.

    Raises:
        DateValidationError: If the input cannot be decoded
    """
    if isinstance(value, DATE_TYPES):
        return value
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise DateValidationError("type", f"invalid JSON: {e.msg}")
    return date_from_dict(value)


# -------------------------------------------------------------------------
# Legacy fallback
# -------------------------------------------------------------------------


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def legacy_date(
    year: Optional[int],
    month: Optional[int] = None,
    day: Optional[int] = None,
    date_text: Optional[str] = None,
) -> DateValue:
    """Map the pre-date_data scalar columns onto a DateValue."""
    if year is not None:
        return ExactDate(year=year, month=month or None, day=day or None)
    return UnknownDate(text=_text(date_text))


def resolve_event_date(event: Any) -> DateValue:
    """
    Resolve the date of an event record.

    Works on ORM TimelineEvent rows and plain mappings alike. date_data
    wins when present; a date_data stored as a JSON string is parsed, and
    one that cannot be decoded falls back to the legacy columns.

    Args:
        event: Object or mapping with date_data/year/month/day/date_text

    Returns:
        The event's DateValue (UnknownDate when nothing is set)
    """
    raw = _field(event, "date_data")

    if isinstance(raw, DATE_TYPES):
        return raw

    if raw is not None:
        try:
            return coerce_date(raw)
        except DateValidationError:
            pass

    return legacy_date(
        _field(event, "year"),
        _field(event, "month"),
        _field(event, "day"),
        _field(event, "date_text"),
    )
