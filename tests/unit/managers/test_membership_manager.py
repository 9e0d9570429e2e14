"""Tests for MembershipManager: placement, listing and manual ordering."""
import pytest

from lorekeeper.core.config import EraConfig
from lorekeeper.core.exceptions import DatabaseError, MembershipError
from lorekeeper.database.managers.membership_manager import MembershipManager


@pytest.fixture
def dated_events(event_manager, sample_world, main_timeline):
    """1960, 1965 and 1970 on main_timeline at positions 0..2."""
    events = []
    for title, year in [("Founding", 1960), ("Treaty", 1965), ("Flood", 1970)]:
        event, _ = event_manager.save(
            {"world": sample_world, "title": title, "year": year,
             "timelines": [main_timeline.id]}
        )
        events.append(event)
    return events


class TestRegistry:
    """Tests for era registry precedence."""

    def test_world_eras_win(self, db_session, era_world):
        manager = MembershipManager(db_session, era_config=EraConfig(default=["X", "Y"]))
        assert manager.registry_for(era_world).names == (
            "Years of the Trees", "First Age", "Second Age",
        )

    def test_eras_file_entry_for_world(self, db_session, sample_world):
        config = EraConfig(default=["X"], worlds={"Velmora": ["Dawn", "Dusk"]})
        manager = MembershipManager(db_session, era_config=config)
        assert manager.registry_for(sample_world).names == ("Dawn", "Dusk")

    def test_eras_file_default(self, db_session, sample_world):
        manager = MembershipManager(db_session, era_config=EraConfig(default=["X", "Y"]))
        assert manager.registry_for(sample_world).names == ("X", "Y")

    def test_no_eras(self, membership_manager, sample_world):
        assert not membership_manager.registry_for(sample_world)


class TestPlacement:
    """Tests for place and unplace."""

    def test_place_between(self, event_manager, membership_manager, sample_world, main_timeline, dated_events):
        event = event_manager.create({"world": sample_world, "title": "Siege", "year": 1963})

        report = membership_manager.place(event, [main_timeline.id])

        assert report.positions == {main_timeline.id: 1}
        assert [e.title for _, e in membership_manager.get_ordered(main_timeline)] == [
            "Founding", "Siege", "Treaty", "Flood",
        ]

    def test_place_by_id(self, event_manager, membership_manager, sample_world, main_timeline):
        event = event_manager.create({"world": sample_world, "title": "Solo"})
        report = membership_manager.place(event.id, [main_timeline.id])
        assert report.positions == {main_timeline.id: 0}

    def test_place_uses_world_eras(self, event_manager, membership_manager, timeline_manager, era_world):
        timeline = timeline_manager.create({"world": era_world, "name": "Annals"})
        for title, era, year in [("Dagor", "First Age", 455), ("Numenor", "Second Age", 32),
                                 ("Trees", "Years of the Trees", 1400)]:
            event_manager.save(
                {"world": era_world, "title": title,
                 "date": {"type": "exact", "era": era, "year": year},
                 "timelines": [timeline.id]}
            )

        titles = [e.title for _, e in membership_manager.get_ordered(timeline)]
        assert titles == ["Trees", "Dagor", "Numenor"]

    def test_unplace(self, membership_manager, timeline_manager, sample_world, main_timeline, dated_events):
        side = timeline_manager.create({"world": sample_world, "name": "Side"})
        removed = membership_manager.unplace(dated_events[1], [main_timeline.id, side.id])
        assert removed == [main_timeline.id]
        assert membership_manager.positions(main_timeline) == {
            dated_events[0].id: 0, dated_events[2].id: 2,
        }

    def test_unplace_with_compact(self, membership_manager, main_timeline, dated_events):
        membership_manager.unplace(dated_events[0], [main_timeline.id], compact=True)
        assert membership_manager.positions(main_timeline) == {
            dated_events[1].id: 0, dated_events[2].id: 1,
        }


class TestListing:
    """Tests for position order and date order."""

    def test_get_ordered_returns_positions(self, membership_manager, main_timeline, dated_events):
        rows = membership_manager.get_ordered(main_timeline.id)
        assert [position for position, _ in rows] == [0, 1, 2]
        assert [event.id for _, event in rows] == [e.id for e in dated_events]

    def test_get_by_date_ignores_manual_order(self, membership_manager, main_timeline, dated_events):
        membership_manager.move(main_timeline, dated_events[2], 0)

        by_position = [e.title for _, e in membership_manager.get_ordered(main_timeline)]
        by_date = [e.title for e in membership_manager.get_by_date(main_timeline)]

        assert by_position == ["Flood", "Founding", "Treaty"]
        assert by_date == ["Founding", "Treaty", "Flood"]

    def test_empty_timeline(self, membership_manager, main_timeline):
        assert membership_manager.get_ordered(main_timeline) == []
        assert membership_manager.collisions(main_timeline) == {}

    def test_missing_timeline(self, membership_manager):
        with pytest.raises(DatabaseError, match="Timeline not found"):
            membership_manager.get_ordered(404)


class TestManualOrdering:
    """Tests for move, swap, remove and compact."""

    def test_move(self, membership_manager, main_timeline, dated_events):
        final = membership_manager.move(main_timeline, dated_events[0], 2)
        assert final == 2
        assert membership_manager.positions(main_timeline) == {
            dated_events[1].id: 0, dated_events[2].id: 1, dated_events[0].id: 2,
        }

    def test_move_not_member(self, event_manager, membership_manager, sample_world, main_timeline, dated_events):
        outsider = event_manager.create({"world": sample_world, "title": "Outsider"})
        with pytest.raises(MembershipError, match="is not on timeline"):
            membership_manager.move(main_timeline, outsider, 0)

    def test_move_negative(self, membership_manager, main_timeline, dated_events):
        with pytest.raises(MembershipError):
            membership_manager.move(main_timeline, dated_events[0].id, -3)

    def test_swap(self, membership_manager, main_timeline, dated_events):
        membership_manager.swap(main_timeline, dated_events[0], dated_events[2].id)
        assert membership_manager.positions(main_timeline) == {
            dated_events[0].id: 2, dated_events[1].id: 1, dated_events[2].id: 0,
        }

    def test_remove(self, membership_manager, main_timeline, dated_events):
        assert membership_manager.remove(main_timeline, dated_events[1]) is True
        assert membership_manager.remove(main_timeline, dated_events[1]) is False

    def test_compact_after_remove(self, membership_manager, main_timeline, dated_events):
        membership_manager.remove(main_timeline, dated_events[0])
        assert membership_manager.compact(main_timeline) == 2
        assert sorted(membership_manager.positions(main_timeline).values()) == [0, 1]

    def test_saved_edit_keeps_manual_order(
        self, event_manager, membership_manager, main_timeline, dated_events
    ):
        membership_manager.move(main_timeline, dated_events[2], 0)

        event_manager.save(
            {"id": dated_events[2].id, "year": 1999, "timelines": [main_timeline.id]}
        )

        assert membership_manager.positions(main_timeline)[dated_events[2].id] == 0
