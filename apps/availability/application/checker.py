"""
Slot Availability Checker

Read-only answer to "can [start, end) be reserved on this property?".

Order of checks:
1. Local days touched by the window must have a day record.
2. Days held by someone else (and not lapsed) conflict.
3. Booked, blocked and unavailable days conflict, except the checkout
   day of a booking that ends before the requested start.
4. On the check-in day the requested start must fall inside the
   available hours when any are declared.
5. ...and outside unavailable or held hours.
6. Maintenance buffers after recent checkouts block or flag the window.
7. Reservation and block intervals on the timeline must not overlap it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from apps.availability.domain.buffer import PARTIALLY_AVAILABLE, assess_checkout
from apps.availability.domain.entities import Conflict, ResourceProfile, SlotCheck
from apps.availability.domain.timeline import BLOCK, RESERVATION, Interval, build_intervals
from apps.availability.exceptions import ValidationError
from apps.availability.models import AvailabilityDay
from apps.availability.repositories import AvailabilityDayStore, AvailabilityEventStore, PropertyDirectory
from apps.availability.timeutils import Clock, day_bounds, local_days_spanning, localize, system_clock

logger = logging.getLogger(__name__)

Status = AvailabilityDay.Status

VOIDED_BOOKING_STATUSES = frozenset({"cancelled", "rejected", "expired"})


class BookingStatusLookup(Protocol):
    """Booking collaborator: lifecycle status for a booking reference, if known."""

    def status_of(self, booking_ref: str) -> str | None:
        ...


class SlotAvailabilityChecker:
    def __init__(
        self,
        days: AvailabilityDayStore,
        events: AvailabilityEventStore,
        directory: PropertyDirectory,
        ttl_seconds: int,
        clock: Clock = system_clock,
        booking_lookup: BookingStatusLookup | None = None,
    ):
        self.days = days
        self.events = events
        self.directory = directory
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.booking_lookup = booking_lookup

    def _voided(self, booking_ref: str) -> bool:
        if not booking_ref or self.booking_lookup is None:
            return False
        return self.booking_lookup.status_of(booking_ref) in VOIDED_BOOKING_STATUSES

    def check_slot(self, resource_id: int, start: datetime, end: datetime, holder: str | None = None) -> SlotCheck:
        profile = self.directory.profile(resource_id)
        start = localize(start, profile.zone)
        end = localize(end, profile.zone)
        if start >= end:
            raise ValidationError("start must be before end")

        now = self.clock()
        check = SlotCheck(resource_id=resource_id, start=start, end=end)
        intervals = build_intervals(self.events.events_before(resource_id, end, (RESERVATION, BLOCK)))

        self._check_days(check, profile, intervals, holder, now)
        self._check_buffers(check, profile, now)
        self._check_intervals(check, intervals, profile)

        if check.conflicts:
            logger.debug(f"Slot {start.isoformat()}..{end.isoformat()} on property {resource_id}: {len(check.conflicts)} conflict(s)")
        return check

    # ------------------------------------------------------------------

    def _check_days(
        self,
        check: SlotCheck,
        profile: ResourceProfile,
        intervals: list[Interval],
        holder: str | None,
        now: datetime,
    ) -> None:
        zone = profile.zone
        dates = local_days_spanning(check.start, check.end, zone)
        records = self.days.for_dates(check.resource_id, dates)
        reservation_end = {
            interval.ref: interval.end
            for interval in intervals
            if interval.root == RESERVATION and interval.end is not None
        }

        for index, day in enumerate(dates):
            _, next_midnight = day_bounds(day, zone)
            record = records.get(day)
            if record is None:
                check.conflicts.append(
                    Conflict(Status.UNAVAILABLE, "Day is not open for booking", date=day, resume_at=next_midnight)
                )
                continue

            status = record.status
            if status == Status.ON_HOLD:
                lapsed = record.held_at is None or record.held_at < now - self.ttl
                if not lapsed and record.held_by != holder:
                    check.conflicts.append(
                        Conflict(Status.ON_HOLD, "Day is held by another guest", date=day, resume_at=next_midnight)
                    )
                    continue
            elif status == Status.BOOKED:
                ends_at = reservation_end.get(record.booking_ref)
                checkout_day = ends_at is not None and ends_at.astimezone(zone).date() == day and ends_at <= check.start
                voided = self._voided(record.booking_ref)
                if not checkout_day and not voided:
                    check.conflicts.append(
                        Conflict(Status.BOOKED, "Day is booked", date=day, resume_at=next_midnight)
                    )
                    continue
                if not voided:
                    # The grid keeps the whole day booked; day holds on it will fail.
                    check.notices.append(
                        Conflict(
                            PARTIALLY_AVAILABLE,
                            f"Day stays booked under {record.booking_ref} in the calendar",
                            date=day,
                            time=ends_at,
                        )
                    )
            elif status in (Status.BLOCKED, Status.UNAVAILABLE):
                check.conflicts.append(
                    Conflict(status, record.reason or f"Day is {status}", date=day, resume_at=next_midnight)
                )
                continue

            if index == 0:
                self._check_hours(check, record)

    def _check_hours(self, check: SlotCheck, record: AvailabilityDay) -> None:
        moment = check.start.time()
        day = record.date
        open_hours = record.hour_ranges("available_hours")
        if open_hours and not any(hours.contains(moment) for hours in open_hours):
            check.conflicts.append(
                Conflict(Status.UNAVAILABLE, "Check-in time is outside available hours", date=day, time=check.start)
            )
            return
        for hours in record.hour_ranges("unavailable_hours"):
            if hours.contains(moment):
                check.conflicts.append(
                    Conflict(Status.UNAVAILABLE, f"Hours {hours} are unavailable", date=day, time=check.start)
                )
                return
        for hours in record.hour_ranges("on_hold_hours"):
            if hours.contains(moment):
                check.conflicts.append(
                    Conflict(Status.ON_HOLD, f"Hours {hours} are on hold", date=day, time=check.start)
                )
                return

    def _check_buffers(self, check: SlotCheck, profile: ResourceProfile, now: datetime) -> None:
        # Checkouts earlier on the check-in day still restrict it.
        day_start, _ = day_bounds(check.start.date(), profile.zone)
        window_start = min(check.start - profile.buffer, day_start)
        for event in self.events.checkouts_between(check.resource_id, window_start, check.end):
            if self._voided(event.booking_ref):
                continue
            assessment = assess_checkout(event.time, profile.buffer_hours, profile.zone, now, check.start)
            local_checkout = assessment.checkout_at
            if assessment.blocks:
                check.conflicts.append(
                    Conflict(
                        AvailabilityDay.MAINTENANCE,
                        f"Maintenance until {assessment.maintenance_end.isoformat()}",
                        date=local_checkout.date(),
                        time=local_checkout,
                        resume_at=assessment.maintenance_end,
                    )
                )
            elif assessment.status == PARTIALLY_AVAILABLE:
                check.notices.append(
                    Conflict(
                        PARTIALLY_AVAILABLE,
                        f"Check-in possible from {assessment.maintenance_end.isoformat()}",
                        date=local_checkout.date(),
                        time=assessment.maintenance_end,
                    )
                )
                if check.earliest_check_in is None or assessment.maintenance_end > check.earliest_check_in:
                    check.earliest_check_in = assessment.maintenance_end

    def _check_intervals(self, check: SlotCheck, intervals: list[Interval], profile: ResourceProfile) -> None:
        for interval in intervals:
            if not interval.overlaps(check.start, check.end) or self._voided(interval.ref):
                continue
            check.conflicts.append(
                Conflict(
                    interval.status,
                    f"Overlaps {interval.root} {interval.ref}",
                    date=interval.start.astimezone(profile.zone).date(),
                    time=interval.start,
                    resume_at=interval.end,
                )
            )
