#!/usr/bin/env python3
"""
insertion.py
--------------------
Per-timeline position maintenance.

Every event on a timeline has an integer position that defines display
order. The InsertionEngine is the only writer of positions. When an event
first joins a timeline it is placed at its chronological slot and every
later sibling shifts down by one; once placed, its position belongs to the
curators and re-saving the event never moves it.

Placement of a new event E with date D on a timeline:
    1. Load the timeline's memberships ordered by position.
    2. If E is already a member, keep its position (no shifts).
    3. Otherwise find the first member whose date compares GREATER than D.
       Its position is the target. With no such member the target is
       max(position) + 1, or 0 for an empty timeline.
    4. Shift every member with position >= target by +1, highest first.
    5. Insert E at the target.

Equal dates never satisfy step 3, so a new event lands after existing
events with the same date.

Concurrency:
    Steps 1-5 are a read-then-write sequence with no lock around it. Two
    requests placing events on the same timeline can both plan from the
    same snapshot; applying both plans leaves two memberships on the same
    position (last write wins). plan() and apply() are public so this
    window can be exercised directly. Passing a TimelineLocks instance
    serializes plan+apply per timeline inside one process.

Failure semantics:
    insert_or_update_memberships() handles each timeline independently. A
    DatabaseError on one timeline is logged and reported in that
    timeline's TimelineResult; the remaining timelines still run. A
    StoreUnavailableError stops the run and is re-raised with the list of
    timelines already attempted and the partial report. Shifts that were
    written before a failure are not undone by the engine.
"""
from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Any, ContextManager, Dict, Iterable, Iterator, List, Optional, Tuple

from lorekeeper.core.exceptions import (
    DatabaseError,
    MembershipError,
    PartialInsertionError,
    StoreUnavailableError,
)
from lorekeeper.core.logging_manager import LorekeeperLogger, safe_logger

from .comparator import Ordering, Precision, compare
from .dates import DateValue, UnknownDate
from .eras import EraRegistry
from .store import EventStore, MembershipRecord
from .validation import validate


# -------------------------------------------------------------------------
# Results
# -------------------------------------------------------------------------


@dataclass
class TimelineResult:
    """
    Outcome for one target timeline.

    Attributes:
        timeline_id: Target timeline
        position: Event's position after the call (None on failure)
        created: True if the membership was created by this call
        shifted: Number of siblings moved to make room
        error: Failure description, None on success
    """

    timeline_id: int
    position: Optional[int] = None
    created: bool = False
    shifted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "timeline_id": self.timeline_id,
            "position": self.position,
            "created": self.created,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class InsertionReport:
    """Per-timeline results of insert_or_update_memberships()."""

    event_id: int
    results: List[TimelineResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed_timeline_ids(self) -> List[int]:
        return [r.timeline_id for r in self.results if not r.ok]

    @property
    def succeeded_timeline_ids(self) -> List[int]:
        return [r.timeline_id for r in self.results if r.ok]

    @property
    def positions(self) -> Dict[int, int]:
        """Final position per successful timeline."""
        return {
            r.timeline_id: r.position
            for r in self.results
            if r.ok and r.position is not None
        }

    def result_for(self, timeline_id: int) -> Optional[TimelineResult]:
        for result in self.results:
            if result.timeline_id == timeline_id:
                return result
        return None

    def raise_for_failures(self) -> None:
        """
        Raise PartialInsertionError if any timeline failed.

        Raises:
            PartialInsertionError: Carrying this report
        """
        if not self.ok:
            raise PartialInsertionError(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "ok": self.ok,
            "timelines": [result.to_dict() for result in self.results],
        }


@dataclass(frozen=True)
class Shift:
    """One sibling moved to make room."""

    event_id: int
    old_position: int
    new_position: int


@dataclass(frozen=True)
class InsertionPlan:
    """
    Writes needed to place one event on one timeline.

    Computed from a snapshot by InsertionEngine.plan(); nothing is written
    until InsertionEngine.apply().
    """

    timeline_id: int
    event_id: int
    position: int
    shifts: Tuple[Shift, ...] = ()
    existing: bool = False

    @property
    def created(self) -> bool:
        return not self.existing


# -------------------------------------------------------------------------
# Locking
# -------------------------------------------------------------------------


class TimelineLocks:
    """
    Per-timeline mutexes for serializing placement within one process.

    Different timelines never block each other. A lock lives only while
    someone holds a reference to it, so the map does not grow with every
    timeline ever touched.
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._locks)

    def get(self, timeline_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(timeline_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[timeline_id] = lock
            return lock

    @contextmanager
    def hold(self, timeline_id: int) -> Iterator[None]:
        with self.get(timeline_id):
            yield


# -------------------------------------------------------------------------
# Engine
# -------------------------------------------------------------------------


class InsertionEngine:
    """
    Computes and maintains membership positions.

    Attributes:
        store: EventStore implementation
        eras: Era registry used for date comparison
        logger: Optional logger
        locks: Optional per-timeline locks
        precision: Comparator precision policy
    """

    def __init__(
        self,
        store: EventStore,
        eras: Optional[EraRegistry] = None,
        logger: Optional[LorekeeperLogger] = None,
        locks: Optional[TimelineLocks] = None,
        precision: Precision = Precision.COARSE_FIRST,
    ) -> None:
        self.store = store
        self.eras = eras
        self.logger = logger
        self.locks = locks
        self.precision = precision

    def _serialized(self, timeline_id: int) -> ContextManager[None]:
        if self.locks is None:
            return nullcontext()
        return self.locks.hold(timeline_id)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def plan(self, timeline_id: int, event_id: int, date: DateValue) -> InsertionPlan:
        """
        Compute where an event belongs on a timeline.

        Args:
            timeline_id: Target timeline
            event_id: Event being placed
            date: The event's date

        Returns:
            InsertionPlan; existing=True when the event is already a member
        """
        members = self.store.get_by_timeline(timeline_id)

        for member in members:
            if member.event_id == event_id:
                return InsertionPlan(
                    timeline_id, event_id, member.position, existing=True
                )

        if not members:
            return InsertionPlan(timeline_id, event_id, 0)

        dates = self.store.get_by_ids([m.event_id for m in members])

        target: Optional[int] = None
        for member in members:
            sibling_date = dates.get(member.event_id, UnknownDate())
            if compare(sibling_date, date, self.eras, self.precision) == Ordering.GREATER:
                target = member.position
                break

        if target is None:
            target = max(member.position for member in members) + 1

        shifts = tuple(
            Shift(member.event_id, member.position, member.position + 1)
            for member in sorted(members, key=lambda m: m.position, reverse=True)
            if member.position >= target
        )
        return InsertionPlan(timeline_id, event_id, target, shifts)

    def apply(self, plan: InsertionPlan) -> TimelineResult:
        """
        Write a plan: shift siblings, then insert the membership.

        Args:
            plan: Plan from plan()

        Returns:
            TimelineResult for the plan's timeline
        """
        if plan.existing:
            return TimelineResult(plan.timeline_id, plan.position, created=False)

        for shift in plan.shifts:
            self.store.update_position(
                plan.timeline_id, shift.event_id, shift.new_position
            )
        self.store.insert(
            MembershipRecord(plan.timeline_id, plan.event_id, plan.position)
        )

        safe_logger(self.logger).log_debug(
            "Placed event on timeline",
            {
                "timeline_id": plan.timeline_id,
                "event_id": plan.event_id,
                "position": plan.position,
                "shifted": len(plan.shifts),
            },
        )
        return TimelineResult(
            plan.timeline_id, plan.position, created=True, shifted=len(plan.shifts)
        )

    def place(self, timeline_id: int, event_id: int, date: DateValue) -> TimelineResult:
        """Plan and apply the placement of an event on one timeline."""
        with self._serialized(timeline_id), self.store.timeline_scope(timeline_id):
            return self.apply(self.plan(timeline_id, event_id, date))

    def insert_or_update_memberships(
        self,
        event_id: int,
        date: DateValue,
        timeline_ids: Iterable[int],
    ) -> InsertionReport:
        """
        Ensure the event is a member of every target timeline.

        Args:
            event_id: Event being saved
            date: The event's date
            timeline_ids: Target timelines (duplicates ignored)

        Returns:
            InsertionReport with one result per distinct timeline

        Raises:
            DateValidationError: If date is malformed (nothing is written)
            StoreUnavailableError: If the store cannot be reached; carries
                the timelines attempted so far and the partial report
        """
        validate(date, self.eras)

        report = InsertionReport(event_id)
        attempted: List[int] = []

        for timeline_id in dict.fromkeys(timeline_ids):
            attempted.append(timeline_id)
            try:
                result = self.place(timeline_id, event_id, date)
            except StoreUnavailableError as e:
                report.results.append(TimelineResult(timeline_id, error=str(e)))
                safe_logger(self.logger).log_error(
                    e,
                    {
                        "operation": "insert_or_update_memberships",
                        "event_id": event_id,
                        "attempted_timelines": attempted,
                    },
                )
                raise StoreUnavailableError(
                    f"Event store unavailable while placing event {event_id} "
                    f"on timeline {timeline_id}: {e}",
                    attempted_timeline_ids=attempted,
                    report=report,
                ) from e
            except DatabaseError as e:
                report.results.append(TimelineResult(timeline_id, error=str(e)))
                safe_logger(self.logger).log_error(
                    e,
                    {
                        "operation": "insert_or_update_memberships",
                        "event_id": event_id,
                        "timeline_id": timeline_id,
                    },
                )
                continue
            report.results.append(result)

        safe_logger(self.logger).log_operation(
            "insert_or_update_memberships",
            {
                "event_id": event_id,
                "placed": report.positions,
                "failed": report.failed_timeline_ids,
            },
        )
        return report

    # -------------------------------------------------------------------------
    # Manual ordering
    # -------------------------------------------------------------------------

    def _require_member(
        self, members: List[MembershipRecord], timeline_id: int, event_id: int
    ) -> MembershipRecord:
        for member in members:
            if member.event_id == event_id:
                return member
        raise MembershipError(f"Event {event_id} is not on timeline {timeline_id}")

    def _renumber(self, timeline_id: int, order: List[MembershipRecord]) -> int:
        """Write positions 0..n-1 following order; returns rows changed."""
        changed = 0
        for index, member in enumerate(order):
            if member.position != index:
                self.store.update_position(timeline_id, member.event_id, index)
                changed += 1
        return changed

    def move(self, timeline_id: int, event_id: int, position: int) -> int:
        """
        Move an event to a new index on its timeline.

        The timeline is renumbered densely (0..n-1) around the moved event,
        so no two members share a position afterwards.

        Args:
            timeline_id: Timeline containing the event
            event_id: Event to move
            position: Desired index; values past the end move it last

        Returns:
            The event's final position

        Raises:
            MembershipError: Negative position or event not on the timeline
        """
        if position < 0:
            raise MembershipError(f"Position must be non-negative, got {position}")

        with self._serialized(timeline_id), self.store.timeline_scope(timeline_id):
            members = self.store.get_by_timeline(timeline_id)
            moving = self._require_member(members, timeline_id, event_id)

            order = [m for m in members if m.event_id != event_id]
            final = min(position, len(order))
            order.insert(final, moving)
            changed = self._renumber(timeline_id, order)

        safe_logger(self.logger).log_debug(
            "Moved event on timeline",
            {
                "timeline_id": timeline_id,
                "event_id": event_id,
                "position": final,
                "changed": changed,
            },
        )
        return final

    def swap(self, timeline_id: int, first_event_id: int, second_event_id: int) -> None:
        """
        Exchange the positions of two members ("move up"/"move down").

        Raises:
            MembershipError: If either event is not on the timeline
        """
        with self._serialized(timeline_id), self.store.timeline_scope(timeline_id):
            members = self.store.get_by_timeline(timeline_id)
            first = self._require_member(members, timeline_id, first_event_id)
            second = self._require_member(members, timeline_id, second_event_id)

            self.store.update_position(timeline_id, first.event_id, second.position)
            self.store.update_position(timeline_id, second.event_id, first.position)

    def remove(self, timeline_id: int, event_id: int, compact: bool = False) -> bool:
        """
        Remove an event from a timeline.

        Other members keep their positions unless compact=True.

        Returns:
            True if a membership was removed
        """
        with self._serialized(timeline_id), self.store.timeline_scope(timeline_id):
            removed = self.store.delete(timeline_id, event_id)
            if removed and compact:
                self._renumber(timeline_id, self.store.get_by_timeline(timeline_id))
        return removed

    def compact(self, timeline_id: int) -> int:
        """
        Renumber a timeline to positions 0..n-1, keeping its order.

        Returns:
            Number of memberships whose position changed
        """
        with self._serialized(timeline_id), self.store.timeline_scope(timeline_id):
            return self._renumber(timeline_id, self.store.get_by_timeline(timeline_id))

    def collisions(self, timeline_id: int) -> Dict[int, List[int]]:
        """
        Positions held by more than one event.

        Empty unless concurrent unsynchronized placements raced.

        Returns:
            {position: [event_id, ...]} for every shared position
        """
        by_position: Dict[int, List[int]] = {}
        for member in self.store.get_by_timeline(timeline_id):
            by_position.setdefault(member.position, []).append(member.event_id)
        return {pos: ids for pos, ids in by_position.items() if len(ids) > 1}
