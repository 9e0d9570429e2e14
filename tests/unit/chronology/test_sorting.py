"""Tests for read-time chronological sorting."""
from types import SimpleNamespace

from lorekeeper.chronology.comparator import Precision
from lorekeeper.chronology.dates import ApproximateDate, ExactDate, Period, UnknownDate
from lorekeeper.chronology.eras import EraRegistry
from lorekeeper.chronology.sorting import sort_events


def _titles(events):
    return [event["title"] for event in events]


class TestSortEvents:
    """Tests for sort_events."""

    def test_sorts_by_date(self):
        events = [
            {"title": "C", "date_data": {"type": "exact", "year": 1970}},
            {"title": "A", "date_data": {"type": "exact", "year": 1960}},
            {"title": "B", "date_data": {"type": "exact", "year": 1965}},
        ]
        assert _titles(sort_events(events)) == ["A", "B", "C"]

    def test_stable_for_equal_dates(self):
        events = [
            {"title": "second", "year": 1960},
            {"title": "first", "year": 1960},
            {"title": "third", "year": 1960},
        ]
        assert _titles(sort_events(events)) == ["second", "first", "third"]

    def test_unknown_dates_last(self):
        events = [
            {"title": "undated"},
            {"title": "dated", "year": 1},
        ]
        assert _titles(sort_events(events)) == ["dated", "undated"]

    def test_does_not_mutate_input(self):
        events = [{"title": "B", "year": 2}, {"title": "A", "year": 1}]
        sort_events(events)
        assert _titles(events) == ["B", "A"]

    def test_custom_date_function(self):
        events = [
            SimpleNamespace(name="late", when=ApproximateDate(year=1977, period=Period.LATE)),
            SimpleNamespace(name="early", when=ApproximateDate(year=1977, period=Period.EARLY)),
            SimpleNamespace(name="unknown", when=UnknownDate()),
        ]
        result = sort_events(events, date_of=lambda e: e.when)
        assert [e.name for e in result] == ["early", "late", "unknown"]

    def test_era_registry(self):
        eras = EraRegistry(["First Age", "Second Age"])
        events = [
            {"title": "SA 1", "date_data": {"type": "exact", "era": "Second Age", "year": 1}},
            {"title": "FA 500", "date_data": {"type": "exact", "era": "First Age", "year": 500}},
        ]
        assert _titles(sort_events(events, eras)) == ["FA 500", "SA 1"]

    def test_undated_last_with_eras(self):
        eras = EraRegistry(["First Age", "Second Age"])
        events = [
            {"title": "undated"},
            {"title": "SA 5", "date_data": {"type": "exact", "era": "Second Age", "year": 5}},
            {"title": "FA 9", "date_data": {"type": "exact", "era": "First Age", "year": 9}},
        ]
        assert _titles(sort_events(events, eras)) == ["FA 9", "SA 5", "undated"]

    def test_precision_policy(self):
        events = [
            SimpleNamespace(name="year", when=ExactDate(1977)),
            SimpleNamespace(name="march", when=ExactDate(1977, month=3)),
        ]
        first = sort_events(events, date_of=lambda e: e.when)
        last = sort_events(events, date_of=lambda e: e.when, precision=Precision.COARSE_LAST)
        assert [e.name for e in first] == ["year", "march"]
        assert [e.name for e in last] == ["march", "year"]

    def test_empty(self):
        assert sort_events([]) == []
