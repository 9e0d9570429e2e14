"""Tests for WorldManager."""
import pytest

from lorekeeper.core.exceptions import DatabaseError, ValidationError


class TestCreate:
    """Tests for world creation."""

    def test_create_with_eras(self, world_manager):
        world = world_manager.create(
            {"name": "  Arda ", "eras": ["First Age", " Second Age", "First Age"],
             "description": "The world"}
        )
        assert world.id is not None
        assert world.name == "Arda"
        assert world.slug == "arda"
        assert world.era_order == ["First Age", "Second Age"]
        assert world.description == "The world"

    def test_create_without_eras(self, world_manager):
        assert world_manager.create({"name": "Velmora"}).era_order == []

    def test_custom_slug(self, world_manager):
        world = world_manager.create({"name": "Middle Earth", "slug": "Middle-earth"})
        assert world.slug == "middle-earth"

    def test_name_required(self, world_manager):
        with pytest.raises(ValidationError):
            world_manager.create({"name": ""})

    def test_unsluggable_name(self, world_manager):
        with pytest.raises(ValidationError, match="slug"):
            world_manager.create({"name": "日本"})

    def test_duplicate_name(self, world_manager, sample_world):
        with pytest.raises(DatabaseError, match="World already exists"):
            world_manager.create({"name": sample_world.name})

    def test_duplicate_slug(self, world_manager, sample_world):
        with pytest.raises(DatabaseError, match="slug already in use"):
            world_manager.create({"name": "VELMORA!"})


class TestLookup:
    """Tests for get/resolve/get_all."""

    def test_get_by_name_id_and_slug(self, world_manager, era_world):
        assert world_manager.get(world_name="Arda") is era_world
        assert world_manager.get(world_id=era_world.id) is era_world
        assert world_manager.get(slug="arda") is era_world
        assert world_manager.get() is None

    def test_resolve(self, world_manager, era_world):
        assert world_manager.resolve("Arda") is era_world
        assert world_manager.resolve("arda") is era_world
        assert world_manager.resolve(str(era_world.id)) is era_world
        assert world_manager.resolve(era_world.id) is era_world
        assert world_manager.resolve(era_world) is era_world

    def test_resolve_missing(self, world_manager):
        with pytest.raises(DatabaseError, match="World not found"):
            world_manager.resolve("Nowhere")
        with pytest.raises(DatabaseError):
            world_manager.resolve(404)

    def test_get_all_sorted_by_name(self, world_manager):
        world_manager.create({"name": "Zeth"})
        world_manager.create({"name": "Ardent"})
        assert [w.name for w in world_manager.get_all()] == ["Ardent", "Zeth"]


class TestUpdate:
    """Tests for updates and era order."""

    def test_rename_keeps_slug(self, world_manager, sample_world):
        world = world_manager.update(sample_world, {"name": "New Velmora"})
        assert world.name == "New Velmora"
        assert world.slug == "velmora"

    def test_set_era_order(self, world_manager, sample_world):
        world_manager.set_era_order(sample_world, ["Dawn", "Dusk"])
        assert sample_world.era_order == ["Dawn", "Dusk"]
        assert world_manager.era_registry(sample_world).rank("Dusk") == 1

    def test_clear_eras(self, world_manager, era_world):
        world_manager.update(era_world, {"eras": None})
        assert era_world.era_order == []
        assert not world_manager.era_registry(era_world)


class TestDelete:
    """Tests for cascading delete."""

    def test_delete_cascades(
        self, world_manager, timeline_manager, event_manager, sample_world, main_timeline
    ):
        event, _ = event_manager.save(
            {"world": sample_world, "title": "Coronation", "timelines": [main_timeline.id]}
        )
        world_id, timeline_id, event_id = sample_world.id, main_timeline.id, event.id

        world_manager.delete(sample_world)

        assert world_manager.get(world_id=world_id) is None
        assert timeline_manager.get(timeline_id=timeline_id) is None
        assert event_manager.get(event_id) is None
