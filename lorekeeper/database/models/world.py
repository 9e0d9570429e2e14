"""
World Models
------------

Containers for timelines and events.

Models:
    - World: A setting with its own era order
    - Timeline: Curated, ordered sequence of events within a world
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, CheckConstraint, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lorekeeper.chronology.eras import EraRegistry

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from lorekeeper.core.logging_manager import LorekeeperLogger

    from .timeline import TimelineEvent, TimelineMembership


class World(TimestampMixin, Base):
    """
    A fictional world.

    Attributes:
        id: Primary key
        name: Display name (unique)
        slug: URL-safe identifier (unique)
        description: Free text
        era_order: Era names in chronological order; empty for worlds that
            use a single calendar

    Relationships:
        timelines: One-to-many with Timeline
        events: One-to-many with TimelineEvent
    """

    __tablename__ = "worlds"
    __table_args__ = (CheckConstraint("name != ''", name="ck_world_non_empty_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    era_order: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    timelines: Mapped[List["Timeline"]] = relationship(
        "Timeline", back_populates="world", cascade="all, delete-orphan"
    )
    events: Mapped[List["TimelineEvent"]] = relationship(
        "TimelineEvent", back_populates="world", cascade="all, delete-orphan"
    )

    def era_registry(self, logger: Optional["LorekeeperLogger"] = None) -> EraRegistry:
        return EraRegistry.from_world(self, logger=logger)

    def __repr__(self) -> str:
        return f"<World(id={self.id}, name={self.name!r})>"


class Timeline(TimestampMixin, Base):
    """
    An ordered list of events within a world.

    Order is stored per membership (TimelineMembership.position), so the
    same event can sit at different positions on different timelines.
    """

    __tablename__ = "timelines"
    __table_args__ = (
        UniqueConstraint("world_id", "name", name="uq_timeline_world_name"),
        CheckConstraint("name != ''", name="ck_timeline_non_empty_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    world_id: Mapped[int] = mapped_column(
        ForeignKey("worlds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    world: Mapped["World"] = relationship("World", back_populates="timelines")
    memberships: Mapped[List["TimelineMembership"]] = relationship(
        "TimelineMembership",
        back_populates="timeline",
        cascade="all, delete-orphan",
        order_by="TimelineMembership.position",
    )

    @property
    def event_count(self) -> int:
        return len(self.memberships)

    def __repr__(self) -> str:
        return f"<Timeline(id={self.id}, name={self.name!r}, world_id={self.world_id})>"
