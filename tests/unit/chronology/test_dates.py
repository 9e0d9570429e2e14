"""Tests for the date model, wire codec and legacy fallback."""
import json

import pytest

from lorekeeper.chronology.dates import (
    ApproximateDate,
    DateRange,
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
from lorekeeper.core.exceptions import DateValidationError


class TestPeriod:
    """Tests for Period weights and names."""

    def test_weights(self):
        assert Period.EARLY.weight == 1
        assert Period.MID.weight == 2
        assert Period.LATE.weight == 3

    def test_display_name(self):
        assert Period.LATE.display_name == "Late"

    def test_choices(self):
        assert Period.choices() == ["early", "mid", "late"]


class TestDateFromDict:
    """Tests for decoding the JSON wire format."""

    def test_exact_full(self):
        value = date_from_dict(
            {"type": "exact", "era": "AE", "year": 1977, "month": 3, "day": 12}
        )
        assert value == ExactDate(year=1977, era="AE", month=3, day=12)

    def test_exact_zero_month_means_absent(self):
        """The editor stores 0 for an unset month or day."""
        value = date_from_dict({"type": "exact", "year": 1977, "month": 0, "day": 0})
        assert value == ExactDate(year=1977)

    def test_exact_numeric_strings(self):
        value = date_from_dict({"type": "exact", "year": "1977", "month": "3"})
        assert value == ExactDate(year=1977, month=3)

    def test_exact_requires_year(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "exact", "month": 3})
        assert exc_info.value.field == "year"

    def test_exact_rejects_non_integer_year(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "exact", "year": "nineteen"})
        assert exc_info.value.field == "year"

    def test_exact_rejects_boolean_year(self):
        with pytest.raises(DateValidationError):
            date_from_dict({"type": "exact", "year": True})

    def test_type_tag_is_case_insensitive(self):
        assert date_from_dict({"type": "EXACT", "year": 5}) == ExactDate(year=5)

    def test_approximate_with_period(self):
        value = date_from_dict({"type": "approximate", "year": 1977, "period": "Late"})
        assert value == ApproximateDate(year=1977, period=Period.LATE)

    def test_approximate_year_range(self):
        value = date_from_dict({"type": "approximate", "year_range": [1970, 1975]})
        assert value.year_range == (1970, 1975)

    def test_approximate_bad_period(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "approximate", "year": 1977, "period": "dawn"})
        assert exc_info.value.field == "period"

    def test_approximate_bad_year_range(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "approximate", "year_range": [1970]})
        assert exc_info.value.field == "year_range"

    def test_year_range_must_be_a_list(self):
        for bad in ({"a": 1970, "b": 1975}, "19", b"19", 1970):
            with pytest.raises(DateValidationError) as exc_info:
                date_from_dict({"type": "approximate", "year_range": bad})
            assert exc_info.value.field == "year_range"

    def test_year_range_tuple_accepted(self):
        value = date_from_dict({"type": "approximate", "year_range": (1970, 1975)})
        assert value.year_range == (1970, 1975)

    def test_exact_approximate_flag_strings(self):
        assert date_from_dict({"type": "exact", "year": 1, "approximate": "false"}).approximate is False
        assert date_from_dict({"type": "exact", "year": 1, "approximate": "yes"}).approximate is True
        assert date_from_dict({"type": "exact", "year": 1}).approximate is False

    def test_exact_approximate_flag_invalid(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "exact", "year": 1, "approximate": "maybe"})
        assert exc_info.value.field == "approximate"

    def test_range(self):
        value = date_from_dict(
            {"type": "range", "start": {"year": 1960}, "end": {"year": 1965, "month": 2}}
        )
        assert value == DateRange(
            start=PartialDate(year=1960), end=PartialDate(year=1965, month=2)
        )

    def test_range_bound_field_path(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "range", "start": {"year": "x"}, "end": {"year": 1}})
        assert exc_info.value.field == "start.year"

    def test_relative(self):
        value = date_from_dict({"type": "relative", "text": "After the coronation"})
        assert value == RelativeDate(text="After the coronation")

    def test_unknown(self):
        assert date_from_dict({"type": "unknown"}) == UnknownDate()

    def test_unknown_type_tag(self):
        with pytest.raises(DateValidationError) as exc_info:
            date_from_dict({"type": "someday"})
        assert exc_info.value.field == "type"

    def test_not_a_mapping(self):
        with pytest.raises(DateValidationError):
            date_from_dict(["exact", 1977])


class TestDateToDict:
    """Tests for encoding DateValues."""

    def test_exact_always_writes_approximate_flag(self):
        assert date_to_dict(ExactDate(year=1977)) == {
            "type": "exact",
            "year": 1977,
            "approximate": False,
        }

    def test_approximate_omits_absent_fields(self):
        assert date_to_dict(ApproximateDate(year=1977, period=Period.EARLY)) == {
            "type": "approximate",
            "year": 1977,
            "period": "early",
        }

    def test_range(self):
        value = DateRange(start=PartialDate(year=1960), end=PartialDate(era="AE", year=3))
        assert date_to_dict(value) == {
            "type": "range",
            "start": {"year": 1960},
            "end": {"era": "AE", "year": 3},
        }

    def test_decoding_the_encoding_gives_the_same_value(self):
        value = ApproximateDate(era="AE", year_range=(1970, 1975), month=4, text="spring")
        assert date_from_dict(date_to_dict(value)) == value

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            date_to_dict({"type": "exact", "year": 1})


class TestCoerceDate:
    """Tests for accepting DateValues, dicts and JSON strings."""

    def test_passes_date_values_through(self):
        value = ExactDate(year=1)
        assert coerce_date(value) is value

    def test_parses_json_strings(self):
        assert coerce_date('{"type": "exact", "year": 1960}') == ExactDate(year=1960)

    def test_invalid_json(self):
        with pytest.raises(DateValidationError):
            coerce_date("{not json")


class TestLegacyFallback:
    """Tests for records that predate date_data."""

    def test_year_only_record(self):
        assert legacy_date(1960) == ExactDate(year=1960)

    def test_zero_month_and_day(self):
        assert legacy_date(1960, 0, 0) == ExactDate(year=1960)

    def test_no_year_is_unknown(self):
        assert legacy_date(None, date_text="  Long ago ") == UnknownDate(text="Long ago")

    def test_resolve_prefers_date_data(self):
        record = {
            "date_data": {"type": "approximate", "year": 1977, "period": "late"},
            "year": 1900,
        }
        assert resolve_event_date(record) == ApproximateDate(year=1977, period=Period.LATE)

    def test_resolve_parses_json_string(self):
        record = {"date_data": json.dumps({"type": "exact", "year": 1965})}
        assert resolve_event_date(record) == ExactDate(year=1965)

    def test_resolve_falls_back_on_undecodable_data(self):
        record = {"date_data": {"type": "bogus"}, "year": 1963, "month": 4}
        assert resolve_event_date(record) == ExactDate(year=1963, month=4)

    def test_resolve_from_attributes(self):
        class Row:
            date_data = None
            year = 1970
            month = None
            day = None
            date_text = None

        assert resolve_event_date(Row()) == ExactDate(year=1970)

    def test_resolve_empty_record(self):
        assert resolve_event_date({}) == UnknownDate()
