"""
Entity managers for the Lorekeeper database.

Each manager wraps one SQLAlchemy session and exposes CRUD operations for
one kind of entity. LorekeeperDB creates them inside session_scope().

- BaseManager: shared helpers (retry, resolution, scalar updates)
- WorldManager: worlds and their era order
- TimelineManager: timelines
- MembershipManager: positions of events on timelines
- EventManager: timeline events, dates and placement
"""
from .base_manager import BaseManager, HasId
from .world_manager import WorldManager
from .timeline_manager import TimelineManager
from .membership_manager import MembershipManager
from .event_manager import EventManager

__all__ = [
    "BaseManager",
    "HasId",
    "WorldManager",
    "TimelineManager",
    "MembershipManager",
    "EventManager",
]
