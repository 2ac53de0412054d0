"""
Scheduling domain entities

Plain dataclasses exchanged between the engine components and returned
to callers. None of them touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from apps.availability.exceptions import PartialFailureError, StateConflictError


@dataclass(frozen=True)
class ResourceProfile:
    """
    Scheduling settings of one property

    Built from the Property collaborator; the engine never reads the
    Property model directly outside the directory.
    """
    resource_id: int
    zone: ZoneInfo
    check_in_time: time
    check_out_time: time
    buffer_hours: int

    @property
    def buffer(self) -> timedelta:
        return timedelta(hours=self.buffer_hours)


@dataclass(frozen=True)
class DayOutcome:
    """Result of one date inside a multi-date operation."""
    date: date
    ok: bool
    status: str
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "ok": self.ok,
            "status": self.status,
            "reason": self.reason,
        }


@dataclass
class MultiDateResult:
    """
    Per-date outcomes of acquire/release/update operations

    Overall success requires every date to succeed. Dates that did
    succeed stay committed; the caller decides whether to compensate.
    """
    operation: str
    outcomes: list[DayOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.outcomes) and all(o.ok for o in self.outcomes)

    @property
    def succeeded(self) -> list[date]:
        return [o.date for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[date]:
        return [o.date for o in self.outcomes if not o.ok]

    def raise_for_failure(self) -> None:
        """Raise StateConflictError or PartialFailureError unless every date succeeded."""
        if self.success:
            return
        failures = [o.to_dict() for o in self.outcomes if not o.ok]
        if self.succeeded:
            raise PartialFailureError(
                f"{self.operation} succeeded for {len(self.succeeded)} of {len(self.outcomes)} dates",
                succeeded=self.succeeded,
                failed=self.failed,
                failures=failures,
            )
        raise StateConflictError(
            f"{self.operation} failed for every requested date",
            failures=failures,
        )

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "success": self.success,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


@dataclass(frozen=True)
class Conflict:
    """
    One reason a window cannot be booked

    ``resume_at`` is the earliest start that could avoid this conflict,
    when it is known. The slot finder uses it to skip ahead.
    """
    status: str
    reason: str
    date: date | None = None
    time: datetime | None = None
    resume_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.isoformat() if self.time else None,
            "status": self.status,
            "reason": self.reason,
        }


@dataclass
class SlotCheck:
    resource_id: int
    start: datetime
    end: datetime
    conflicts: list[Conflict] = field(default_factory=list)
    notices: list[Conflict] = field(default_factory=list)
    earliest_check_in: datetime | None = None

    @property
    def available(self) -> bool:
        return not self.conflicts

    def to_dict(self) -> dict:
        return {
            "resource_id": self.resource_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "available": self.available,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "notices": [n.to_dict() for n in self.notices],
            "earliest_check_in": self.earliest_check_in.isoformat() if self.earliest_check_in else None,
        }


@dataclass(frozen=True)
class SlotSearch:
    found: bool
    start: datetime | None = None
    end: datetime | None = None
    checks: int = 0
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "checks": self.checks,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ConfirmationResult:
    booking_ref: str
    dates: list[date]
    check_in: datetime
    check_out: datetime
    maintenance_end: datetime

    def to_dict(self) -> dict:
        return {
            "booking_ref": self.booking_ref,
            "dates": [d.isoformat() for d in self.dates],
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "next_available_at": self.maintenance_end.isoformat(),
        }


@dataclass(frozen=True)
class CancellationResult:
    booking_ref: str
    days_released: int
    events_deleted: int

    def to_dict(self) -> dict:
        return {
            "booking_ref": self.booking_ref,
            "days_released": self.days_released,
            "events_deleted": self.events_deleted,
        }


@dataclass(frozen=True)
class SweepResult:
    cleaned_count: int
    cutoff: datetime

    def to_dict(self) -> dict:
        return {"cleaned_count": self.cleaned_count, "cutoff": self.cutoff.isoformat()}


@dataclass
class Timeline:
    """Events of a range plus the stepped status they imply."""
    resource_id: int
    start: datetime
    end: datetime
    events: list[dict] = field(default_factory=list)
    slots: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "resource_id": self.resource_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "events": self.events,
            "slots": [slot.to_dict() for slot in self.slots],
        }
