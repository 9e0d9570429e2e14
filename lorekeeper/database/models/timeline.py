"""
Timeline Event Models
---------------------

Dated events and their positions on timelines.

Models:
    - TimelineEvent: Something that happened in a world
    - TimelineMembership: An event's position on one timeline

Dates are stored twice: date_data holds the structured DateValue in its
JSON wire format, and the legacy year/month/day/date_text columns are
kept for rows written before date_data existed.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lorekeeper.chronology.dates import DateValue, resolve_event_date
from lorekeeper.chronology.formatting import format_date

from .base import Base, TimestampMixin, utc_now

if TYPE_CHECKING:
    from .world import Timeline, World


class TimelineEvent(TimestampMixin, Base):
    """
    An event that can appear on any number of timelines of its world.

    Attributes:
        id: Primary key
        world_id: Owning world
        title: Short title (required)
        description: Free text
        date_data: DateValue wire dict, or None for legacy rows
        date_text: Legacy free-text date
        year, month, day: Legacy scalar date columns
        categories: List of category labels
        is_key_event: Highlight flag
        location: Free-text place name

    Relationships:
        world: Many-to-one with World
        memberships: One-to-many with TimelineMembership (cascade delete)
    """

    __tablename__ = "timeline_events"
    __table_args__ = (
        CheckConstraint("title != ''", name="ck_timeline_event_non_empty_title"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    world_id: Mapped[int] = mapped_column(
        ForeignKey("worlds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # ---- Date ----
    date_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    date_text: Mapped[Optional[str]] = mapped_column(String(255))
    year: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    month: Mapped[Optional[int]] = mapped_column(Integer)
    day: Mapped[Optional[int]] = mapped_column(Integer)

    # ---- Opaque attributes ----
    categories: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    is_key_event: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255))

    # ---- Relationships ----
    world: Mapped["World"] = relationship("World", back_populates="events")
    memberships: Mapped[List["TimelineMembership"]] = relationship(
        "TimelineMembership",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    # ---- Computed properties ----
    @property
    def date_value(self) -> DateValue:
        """Structured date, falling back to the legacy columns."""
        return resolve_event_date(self)

    @property
    def date_display(self) -> str:
        return format_date(self.date_value)

    @property
    def timeline_ids(self) -> List[int]:
        return [membership.timeline_id for membership in self.memberships]

    def __repr__(self) -> str:
        return f"<TimelineEvent(id={self.id}, title={self.title!r})>"


class TimelineMembership(Base):
    """
    Position of one event on one timeline.

    Created when an event first joins a timeline, shifted when earlier
    siblings are inserted, deleted with the event or the timeline.
    Positions are written only through the chronology InsertionEngine.
    """

    __tablename__ = "timeline_event_timelines"
    __table_args__ = (
        UniqueConstraint(
            "timeline_id", "timeline_event_id", name="uq_timeline_membership"
        ),
        CheckConstraint("position >= 0", name="ck_membership_non_negative_position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    timeline_id: Mapped[int] = mapped_column(
        ForeignKey("timelines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timeline_event_id: Mapped[int] = mapped_column(
        ForeignKey("timeline_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    timeline: Mapped["Timeline"] = relationship("Timeline", back_populates="memberships")
    event: Mapped["TimelineEvent"] = relationship(
        "TimelineEvent", back_populates="memberships"
    )

    def __repr__(self) -> str:
        return (
            f"<TimelineMembership(timeline_id={self.timeline_id}, "
            f"event_id={self.timeline_event_id}, position={self.position})>"
        )
