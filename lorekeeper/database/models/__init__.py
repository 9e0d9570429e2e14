"""
Database Models Package
------------------------

SQLAlchemy ORM models for the Lorekeeper database.

- base: Base class and mixins
- world: World, Timeline
- timeline: TimelineEvent, TimelineMembership

Usage:
    from lorekeeper.database.models import World, Timeline, TimelineEvent
"""
# Base classes
from .base import Base, TimestampMixin

# Containers
from .world import Timeline, World

# Events and positions
from .timeline import TimelineEvent, TimelineMembership

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Models
    "World",
    "Timeline",
    "TimelineEvent",
    "TimelineMembership",
]
