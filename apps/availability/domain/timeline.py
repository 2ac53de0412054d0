"""
Event timeline replay

The timeline stores ``*_start`` / ``*_end`` events. Intervals are
reconstructed by replaying events in time order and matching each end
with the most recent unmatched start of the same root type and booking
reference. A start with no end yet is an open-ended interval.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)

RESERVATION = "reservation"
MAINTENANCE = "maintenance"
BLOCK = "block"

# Status shown for an instant covered by an interval of each root type,
# in order of precedence.
ROOT_STATUS = {
    RESERVATION: "booked",
    BLOCK: "blocked",
    MAINTENANCE: "maintenance",
}


class TimelineEntry(Protocol):
    time: datetime
    event_type: str
    booking_ref: str


def root_of(event_type: str) -> str:
    return event_type.rsplit("_", 1)[0]


def is_start(event_type: str) -> bool:
    return event_type.endswith("_start")


@dataclass(frozen=True)
class Interval:
    root: str
    ref: str
    start: datetime
    end: datetime | None = None

    @property
    def open_ended(self) -> bool:
        return self.end is None

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open overlap test; an open-ended interval runs forever."""
        if self.start >= end:
            return False
        return self.end is None or self.end > start

    def covers(self, instant: datetime) -> bool:
        return self.start <= instant and (self.end is None or instant < self.end)

    @property
    def status(self) -> str:
        return ROOT_STATUS.get(self.root, self.root)


def _replay_order(entry: TimelineEntry):
    # Ends sort before starts at the same instant: back-to-back intervals
    # must not appear to overlap.
    return (entry.time, 1 if is_start(entry.event_type) else 0)


def build_intervals(
    events: Iterable[TimelineEntry],
    roots: Iterable[str] | None = None,
) -> list[Interval]:
    """Pair start/end events into intervals ordered by start."""
    wanted = set(roots) if roots is not None else None
    open_starts: dict[tuple[str, str], list[datetime]] = {}
    intervals: list[Interval] = []

    for entry in sorted(events, key=_replay_order):
        root = root_of(entry.event_type)
        if wanted is not None and root not in wanted:
            continue
        key = (root, entry.booking_ref)
        if is_start(entry.event_type):
            open_starts.setdefault(key, []).append(entry.time)
            continue
        pending = open_starts.get(key)
        if not pending:
            logger.warning(
                f"Unmatched {entry.event_type} for {entry.booking_ref} at {entry.time.isoformat()}"
            )
            continue
        intervals.append(Interval(root=root, ref=entry.booking_ref, start=pending.pop(), end=entry.time))

    for (root, ref), starts in open_starts.items():
        for start in starts:
            intervals.append(Interval(root=root, ref=ref, start=start))

    intervals.sort(key=lambda interval: interval.start)
    return intervals


def status_at(intervals: Iterable[Interval], instant: datetime) -> tuple[str, str | None]:
    """Status and booking reference in effect at ``instant``."""
    covering = [interval for interval in intervals if interval.covers(instant)]
    for root in ROOT_STATUS:
        for interval in covering:
            if interval.root == root:
                return interval.status, interval.ref
    return "available", None


@dataclass(frozen=True)
class TimelineSlot:
    time: datetime
    status: str
    booking_ref: str | None

    def to_dict(self) -> dict:
        return {"time": self.time.isoformat(), "status": self.status, "booking_ref": self.booking_ref}


def stepped_statuses(
    intervals: list[Interval],
    start: datetime,
    end: datetime,
    step: timedelta,
) -> list[TimelineSlot]:
    slots = []
    current = start
    while current < end:
        status, ref = status_at(intervals, current)
        slots.append(TimelineSlot(time=current, status=status, booking_ref=ref))
        current += step
    return slots
