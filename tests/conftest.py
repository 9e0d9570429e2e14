"""
conftest.py
-----------
Shared pytest fixtures for Lorekeeper tests.

Provides fixtures for:
- Temporary directories
- An in-memory EventStore for insertion engine tests
- Database setup and teardown
- Entity managers bound to a test session
"""
from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

from lorekeeper.chronology.dates import DateValue, UnknownDate
from lorekeeper.chronology.store import MembershipRecord
from lorekeeper.core.exceptions import (
    DatabaseError,
    MembershipError,
    StoreUnavailableError,
)


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ----- In-memory Event Store -----

class FakeEventStore:
    """
    Dictionary-backed EventStore.

    timeline_scope() snapshots the memberships and restores them when the
    block raises, like a SAVEPOINT. Failures can be injected per timeline:

        fail_timelines         DatabaseError on entering the scope
        unavailable_timelines  StoreUnavailableError on entering the scope
        fail_insert_timelines  DatabaseError from insert(), after shifts
    """

    def __init__(self, dates: Optional[Dict[int, DateValue]] = None):
        self.dates: Dict[int, DateValue] = dict(dates or {})
        self.rows: Dict[Tuple[int, int], int] = {}
        self.calls: List[tuple] = []
        self.scoped: List[int] = []
        self.fail_timelines: Set[int] = set()
        self.unavailable_timelines: Set[int] = set()
        self.fail_insert_timelines: Set[int] = set()

    # ---- Test helpers ----
    def add_event(self, event_id: int, date: DateValue) -> None:
        self.dates[event_id] = date

    def add_member(self, timeline_id: int, event_id: int, position: int) -> None:
        self.rows[(timeline_id, event_id)] = position

    def positions(self, timeline_id: int) -> Dict[int, int]:
        return {eid: pos for (tid, eid), pos in self.rows.items() if tid == timeline_id}

    def order(self, timeline_id: int) -> List[int]:
        return [record.event_id for record in self.get_by_timeline(timeline_id)]

    # ---- EventStore protocol ----
    def get_by_timeline(self, timeline_id: int) -> List[MembershipRecord]:
        records = [
            MembershipRecord(tid, eid, pos)
            for (tid, eid), pos in self.rows.items()
            if tid == timeline_id
        ]
        return sorted(records, key=lambda record: record.position)

    def get_by_ids(self, event_ids: Iterable[int]) -> Dict[int, DateValue]:
        return {eid: self.dates.get(eid, UnknownDate()) for eid in event_ids}

    def insert(self, record: MembershipRecord) -> None:
        if record.timeline_id in self.fail_insert_timelines:
            raise DatabaseError(f"insert failed on timeline {record.timeline_id}")
        key = (record.timeline_id, record.event_id)
        if key in self.rows:
            raise DatabaseError(f"Data integrity violation: duplicate membership {key}")
        self.rows[key] = record.position
        self.calls.append(("insert", record.timeline_id, record.event_id, record.position))

    def update_position(self, timeline_id: int, event_id: int, position: int) -> None:
        key = (timeline_id, event_id)
        if key not in self.rows:
            raise MembershipError(f"Event {event_id} is not on timeline {timeline_id}")
        self.rows[key] = position
        self.calls.append(("update", timeline_id, event_id, position))

    def delete(self, timeline_id: int, event_id: int) -> bool:
        removed = self.rows.pop((timeline_id, event_id), None)
        if removed is not None:
            self.calls.append(("delete", timeline_id, event_id))
        return removed is not None

    @contextmanager
    def timeline_scope(self, timeline_id: int):
        self.scoped.append(timeline_id)
        if timeline_id in self.unavailable_timelines:
            raise StoreUnavailableError(f"connection lost on timeline {timeline_id}")
        if timeline_id in self.fail_timelines:
            raise DatabaseError(f"Timeline not found: {timeline_id}")
        snapshot = dict(self.rows)
        try:
            yield
        except Exception:
            self.rows = snapshot
            raise


@pytest.fixture
def fake_store():
    """Empty in-memory EventStore."""
    return FakeEventStore()


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_alembic_dir():
    """Path to the package's Alembic directory."""
    from lorekeeper.core.paths import ALEMBIC_DIR
    return ALEMBIC_DIR


@pytest.fixture
def test_db(test_db_path, test_alembic_dir):
    """
    Create test database instance with schema.

    Returns a LorekeeperDB on a fresh SQLite file. The database is torn
    down after the test.
    """
    from lorekeeper.database.manager import LorekeeperDB

    db = LorekeeperDB(db_path=test_db_path, alembic_dir=test_alembic_dir)

    yield db

    db.engine.dispose()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def world_manager(db_session):
    """Create WorldManager instance for testing."""
    from lorekeeper.database.managers.world_manager import WorldManager
    return WorldManager(db_session)


@pytest.fixture
def timeline_manager(db_session):
    """Create TimelineManager instance for testing."""
    from lorekeeper.database.managers.timeline_manager import TimelineManager
    return TimelineManager(db_session)


@pytest.fixture
def event_manager(db_session):
    """Create EventManager instance for testing."""
    from lorekeeper.database.managers.event_manager import EventManager
    return EventManager(db_session)


@pytest.fixture
def membership_manager(event_manager):
    """MembershipManager sharing the EventManager's session."""
    return event_manager.memberships


@pytest.fixture
def sample_world(world_manager):
    """World without eras."""
    return world_manager.create({"name": "Velmora"})


@pytest.fixture
def era_world(world_manager):
    """World with three ordered eras."""
    return world_manager.create(
        {"name": "Arda", "eras": ["Years of the Trees", "First Age", "Second Age"]}
    )


@pytest.fixture
def main_timeline(timeline_manager, sample_world):
    """Timeline in sample_world."""
    return timeline_manager.create({"world": sample_world, "name": "Main"})
