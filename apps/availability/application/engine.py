"""
Availability Engine

Public boundary of the scheduling subsystem. Views, Celery tasks and the
booking flow talk to this facade; the components behind it receive their
collaborators in their constructors so tests can swap the clock.

Usage:
    engine = build_engine()
    result = engine.acquire_hold(property_id, [date(2025, 7, 1)], holder="guest-42")
    result.raise_for_failure()
    engine.confirm_hold(property_id, [date(2025, 7, 1)], "guest-42", booking_ref="BK-1")
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable

from django.conf import settings  # type: ignore

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork

from apps.availability.application.calendar import CalendarManager
from apps.availability.application.checker import (
    VOIDED_BOOKING_STATUSES,
    BookingStatusLookup,
    SlotAvailabilityChecker,
)
from apps.availability.application.finder import NextAvailableSlotFinder
from apps.availability.application.holds import HoldManager
from apps.availability.application.sweeper import CleanupSweeper
from apps.availability.domain.entities import (
    CancellationResult,
    ConfirmationResult,
    MultiDateResult,
    SlotCheck,
    SlotSearch,
    SweepResult,
    Timeline,
)
from apps.availability.domain.timeline import BLOCK, MAINTENANCE, RESERVATION, build_intervals, stepped_statuses
from apps.availability.exceptions import ValidationError
from apps.availability.models import AvailabilityDay
from apps.availability.repositories import AvailabilityDayStore, AvailabilityEventStore, PropertyDirectory
from apps.availability.timeutils import Clock, localize, system_clock

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "confirmed"
MAX_TIMELINE_SLOTS = 24 * 366


def _event_dict(event) -> dict:
    return {
        "id": event.pk,
        "time": event.time.isoformat(),
        "event_type": event.event_type,
        "booking_ref": event.booking_ref,
        "actor_ref": event.actor_ref,
        "metadata": event.metadata,
    }


class AvailabilityEngine:
    def __init__(
        self,
        directory: PropertyDirectory,
        events: AvailabilityEventStore,
        holds: HoldManager,
        checker: SlotAvailabilityChecker,
        sweeper: CleanupSweeper,
        finder: NextAvailableSlotFinder,
        calendar: CalendarManager,
    ):
        self.directory = directory
        self.events = events
        self.holds = holds
        self.checker = checker
        self.sweeper = sweeper
        self.finder = finder
        self.calendar = calendar

    # Holds
    def acquire_hold(self, resource_id: int, dates: Iterable[date], holder: str, ttl=None) -> MultiDateResult:
        return self.holds.acquire_hold(resource_id, dates, holder, ttl=ttl)

    def confirm_hold(self, resource_id: int, dates: Iterable[date], holder: str, booking_ref: str, **options) -> ConfirmationResult:
        return self.holds.confirm_hold(resource_id, dates, holder, booking_ref, **options)

    def release_hold(self, resource_id: int, dates: Iterable[date], holder: str) -> int:
        return self.holds.release_hold(resource_id, dates, holder)

    def cancel_booking(self, resource_id: int, booking_ref: str) -> CancellationResult:
        return self.holds.cancel_booking(resource_id, booking_ref)

    # Queries
    def check_slot(self, resource_id: int, start: datetime, end: datetime, holder: str | None = None) -> SlotCheck:
        return self.checker.check_slot(resource_id, start, end, holder=holder)

    def find_next(self, resource_id: int, from_time: datetime | None = None, duration_hours: float = 1, **options) -> SlotSearch:
        return self.finder.find_next(resource_id, from_time, duration_hours, **options)

    def get_timeline(
        self,
        resource_id: int,
        start: datetime,
        end: datetime,
        step: timedelta = timedelta(hours=1),
    ) -> Timeline:
        """
        Events inside [start, end) and the status at every step.

        Events before ``start`` are replayed too, so an interval that began
        earlier still shows up in the first slots.
        """
        profile = self.directory.profile(resource_id)
        start = localize(start, profile.zone)
        end = localize(end, profile.zone)
        if start >= end:
            raise ValidationError("start must be before end")
        if step <= timedelta(0):
            raise ValidationError("step must be positive")
        if (end - start) / step > MAX_TIMELINE_SLOTS:
            raise ValidationError(f"Range too large for step; at most {MAX_TIMELINE_SLOTS} slots")

        history = self.events.events_before(resource_id, end, (RESERVATION, MAINTENANCE, BLOCK))
        intervals = build_intervals(history)
        return Timeline(
            resource_id=resource_id,
            start=start,
            end=end,
            events=[_event_dict(event) for event in history if start <= event.time < end],
            slots=stepped_statuses(intervals, start, end, step),
        )

    # Cleanup
    def expire_holds(self, now: datetime | None = None) -> SweepResult:
        return self.sweeper.expire_holds(now)

    # Calendar
    def update_days(self, resource_id: int, updates: Iterable[dict]) -> MultiDateResult:
        return self.calendar.update_days(resource_id, updates)

    def get_days(self, resource_id: int, start_date: date, end_date: date) -> list[AvailabilityDay]:
        return self.calendar.get_days(resource_id, start_date, end_date)

    def block_period(self, resource_id: int, start: datetime, end: datetime, actor_ref: str = "", reason: str = "") -> str:
        return self.calendar.block_period(resource_id, start, end, actor_ref=actor_ref, reason=reason)

    def unblock_period(self, resource_id: int, block_ref: str) -> int:
        return self.calendar.unblock_period(resource_id, block_ref)

    # Booking collaborator
    def handle_booking_transition(self, resource_id: int, booking_ref: str, status: str) -> CancellationResult | None:
        """
        React to a booking lifecycle change.

        Voided bookings release their days and drop their maintenance
        buffer; a confirmation needs no action here.
        """
        status = (status or "").strip().lower()
        if status in VOIDED_BOOKING_STATUSES:
            logger.info(f"Booking {booking_ref} is {status}; releasing property {resource_id}")
            return self.cancel_booking(resource_id, booking_ref)
        if status == BOOKING_CONFIRMED:
            return None
        raise ValidationError(f"Unknown booking status {status!r}", status=status)


def build_engine(
    clock: Clock | None = None,
    ttl_seconds: int | None = None,
    booking_lookup: BookingStatusLookup | None = None,
    uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
) -> AvailabilityEngine:
    """Wire the engine from Django settings."""
    clock = clock or system_clock
    if ttl_seconds is None:
        ttl_seconds = getattr(settings, "AVAILABILITY_HOLD_TTL_SECONDS", 900)
    directory = PropertyDirectory()
    days = AvailabilityDayStore()
    events = AvailabilityEventStore()
    checker = SlotAvailabilityChecker(days, events, directory, ttl_seconds, clock=clock, booking_lookup=booking_lookup)
    return AvailabilityEngine(
        directory=directory,
        events=events,
        holds=HoldManager(days, events, directory, ttl_seconds, clock=clock, uow_factory=uow_factory),
        checker=checker,
        sweeper=CleanupSweeper(days, ttl_seconds, clock=clock, uow_factory=uow_factory),
        finder=NextAvailableSlotFinder(
            checker,
            directory,
            horizon_days=getattr(settings, "AVAILABILITY_FINDER_HORIZON_DAYS", 90),
            step_minutes=getattr(settings, "AVAILABILITY_FINDER_STEP_MINUTES", 60),
            clock=clock,
        ),
        calendar=CalendarManager(days, events, directory, clock=clock, uow_factory=uow_factory),
    )
