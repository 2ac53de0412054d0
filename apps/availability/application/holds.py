"""
Hold Manager

State machine for temporary soft locks on property days:

    available --acquire--> on-hold --confirm--> booked
        ^                     |                   |
        +------release--------+                   |
        +------cancel-----------------------------+

Each per-date transition is one conditional UPDATE. There is no
cross-date atomicity: a multi-date acquire may partially succeed and the
caller decides whether to release what it got.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork

from apps.availability.domain.buffer import maintenance_window
from apps.availability.domain.entities import (
    CancellationResult,
    ConfirmationResult,
    DayOutcome,
    MultiDateResult,
    ResourceProfile,
)
from apps.availability.domain.events import BookingCancelled, HoldConfirmed, HoldReleased, HoldsAcquired
from apps.availability.domain.timeline import MAINTENANCE, RESERVATION
from apps.availability.exceptions import (
    ExpiredHoldError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from apps.availability.models import AvailabilityDay
from apps.availability.repositories import AvailabilityDayStore, AvailabilityEventStore, PropertyDirectory
from apps.availability.timeutils import Clock, combine_local, localize, system_clock

logger = logging.getLogger(__name__)

Status = AvailabilityDay.Status


def normalize_dates(dates: Iterable[date]) -> list[date]:
    unique = sorted(set(dates or []))
    if not unique:
        raise ValidationError("At least one date is required")
    return unique


def _require(value: str, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{name} is required")
    return value


class HoldManager:
    """Acquire, confirm, release and cancel holds on the day grid."""

    def __init__(
        self,
        days: AvailabilityDayStore,
        events: AvailabilityEventStore,
        directory: PropertyDirectory,
        ttl_seconds: int,
        clock: Clock = system_clock,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
    ):
        if ttl_seconds <= 0:
            raise ValidationError("Hold TTL must be positive")
        self.days = days
        self.events = events
        self.directory = directory
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.uow_factory = uow_factory

    def _check_ttl(self, ttl) -> None:
        # Holds do not persist their own TTL; the sweeper needs one value.
        if ttl is None:
            return
        if timedelta(seconds=int(ttl)) != self.ttl:
            raise ValidationError(
                f"Hold TTL is fixed at {int(self.ttl.total_seconds())} seconds",
                ttl=int(self.ttl.total_seconds()),
            )

    def _is_live(self, record: AvailabilityDay, now: datetime) -> bool:
        return record.held_at is not None and record.held_at >= now - self.ttl

    # ------------------------------------------------------------------
    # acquire
    # ------------------------------------------------------------------

    def acquire_hold(self, resource_id: int, dates: Iterable[date], holder: str, ttl=None) -> MultiDateResult:
        holder = _require(holder, "holder")
        dates = normalize_dates(dates)
        self._check_ttl(ttl)
        self.directory.profile(resource_id)

        now = self.clock()
        cutoff = now - self.ttl
        records = self.days.for_dates(resource_id, dates)
        result = MultiDateResult(operation="acquire_hold")
        acquired: list[date] = []

        for day in dates:
            record = records.get(day)
            if record is None:
                result.outcomes.append(
                    DayOutcome(day, False, Status.UNAVAILABLE, "Day is not open for booking")
                )
                continue
            if record.status == Status.ON_HOLD and record.held_by == holder and self._is_live(record, now):
                result.outcomes.append(DayOutcome(day, True, Status.ON_HOLD, "Already held by holder"))
                continue
            if self.days.acquire(resource_id, day, holder, now, cutoff):
                acquired.append(day)
                result.outcomes.append(DayOutcome(day, True, Status.ON_HOLD))
                continue
            result.outcomes.append(DayOutcome(day, False, record.status, f"Day is {record.status}"))

        if acquired:
            logger.info(f"Holder {holder} acquired {len(acquired)} day(s) on property {resource_id}")
            with self.uow_factory() as uow:
                uow.record(HoldsAcquired(resource_id=resource_id, holder=holder, dates=acquired))
        if not result.success:
            logger.warning(
                f"Hold for {holder} on property {resource_id} failed for {[d.isoformat() for d in result.failed]}"
            )
        return result

    # ------------------------------------------------------------------
    # confirm
    # ------------------------------------------------------------------

    def _validate_for_confirm(
        self,
        resource_id: int,
        dates: list[date],
        holder: str,
        booking_ref: str,
        now: datetime,
    ) -> tuple[dict[date, datetime], list[date]]:
        """Observed ``held_at`` per date still to confirm, and dates already booked under the ref."""
        records = self.days.for_dates(resource_id, dates)
        pending: dict[date, datetime] = {}
        already: list[date] = []
        for day in dates:
            record = records.get(day)
            if record is None:
                raise NotFoundError(f"No availability record for {day.isoformat()}", date=day.isoformat())
            if record.status == Status.BOOKED and record.booking_ref == booking_ref:
                already.append(day)
                continue
            if record.status != Status.ON_HOLD:
                raise StateConflictError(
                    f"{day.isoformat()} is {record.status}, not on hold", date=day.isoformat(), status=record.status
                )
            if record.held_by != holder:
                raise StateConflictError(f"{day.isoformat()} is held by another holder", date=day.isoformat())
            if not self._is_live(record, now):
                raise ExpiredHoldError(
                    f"Hold on {day.isoformat()} expired at {(record.held_at + self.ttl).isoformat()}",
                    date=day.isoformat(),
                )
            pending[day] = record.held_at
        return pending, already

    def _reservation_window(
        self,
        profile: ResourceProfile,
        booked: list[date],
        check_in: datetime | None,
        check_out: datetime | None,
        extension_hours: int,
    ) -> tuple[datetime, datetime]:
        zone = profile.zone
        start = localize(check_in, zone) if check_in else combine_local(booked[0], profile.check_in_time, zone)
        if check_out:
            end = localize(check_out, zone)
        else:
            end = combine_local(booked[-1] + timedelta(days=1), profile.check_out_time, zone)
        end += timedelta(hours=extension_hours)
        if start >= end:
            raise ValidationError("check_in must be before check_out")
        return start, end

    def confirm_hold(
        self,
        resource_id: int,
        dates: Iterable[date],
        holder: str,
        booking_ref: str,
        check_in: datetime | None = None,
        check_out: datetime | None = None,
        extension_hours: int = 0,
        actor_ref: str = "",
    ) -> ConfirmationResult:
        """
        Turn the holder's live holds into a booking.

        Every date is validated before anything is written. Dates are then
        confirmed one conditional update at a time; if a concurrent sweep or
        release wins on some date, the dates already confirmed stay booked
        and StateConflictError lists both sets. The reservation and
        maintenance pairs always describe every day booked under the ref.
        """
        holder = _require(holder, "holder")
        booking_ref = _require(booking_ref, "booking_ref")
        dates = normalize_dates(dates)
        if extension_hours < 0:
            raise ValidationError("extension_hours must not be negative")
        profile = self.directory.profile(resource_id)
        if check_in and check_out and localize(check_in, profile.zone) >= localize(check_out, profile.zone):
            raise ValidationError("check_in must be before check_out")

        now = self.clock()
        pending, already = self._validate_for_confirm(resource_id, dates, holder, booking_ref, now)
        confirmed: list[date] = list(already)
        lost: list[date] = []

        with self.uow_factory() as uow:
            for day, held_at in pending.items():
                if self.days.confirm(resource_id, day, holder, held_at, booking_ref, now):
                    confirmed.append(day)
                else:
                    lost.append(day)

            booked = self.days.booked_dates(resource_id, booking_ref)
            start = end = maintenance_end = None
            if booked:
                start, end = self._reservation_window(profile, booked, check_in, check_out, extension_hours)
                _, maintenance_end = maintenance_window(end.date(), end.time(), profile.buffer_hours, profile.zone)
                metadata = {"holder": holder, "dates": [d.isoformat() for d in booked]}
                self.events.delete_for_ref(resource_id, booking_ref, roots=(RESERVATION, MAINTENANCE))
                self.events.append_pair(resource_id, RESERVATION, booking_ref, start, end, actor_ref, metadata)
                self.events.append_pair(resource_id, MAINTENANCE, booking_ref, end, maintenance_end, actor_ref)
                uow.record(
                    HoldConfirmed(
                        resource_id=resource_id,
                        holder=holder,
                        booking_ref=booking_ref,
                        dates=sorted(confirmed),
                        check_in=start,
                        check_out=end,
                    )
                )

        if lost:
            logger.warning(
                f"Confirmation {booking_ref} on property {resource_id} lost {len(lost)} date(s) to a concurrent update"
            )
            raise StateConflictError(
                f"Hold changed before confirmation for {len(lost)} date(s)",
                confirmed=[d.isoformat() for d in sorted(confirmed)],
                failed=[d.isoformat() for d in sorted(lost)],
            )

        logger.info(f"Booking {booking_ref} confirmed on property {resource_id} for {len(confirmed)} day(s)")
        return ConfirmationResult(
            booking_ref=booking_ref,
            dates=sorted(confirmed),
            check_in=start,
            check_out=end,
            maintenance_end=maintenance_end,
        )

    # ------------------------------------------------------------------
    # release / cancel
    # ------------------------------------------------------------------

    def release_hold(self, resource_id: int, dates: Iterable[date], holder: str) -> int:
        holder = _require(holder, "holder")
        dates = normalize_dates(dates)
        self.directory.profile(resource_id)
        released = self.days.release(resource_id, dates, holder, self.clock())
        if released:
            logger.info(f"Holder {holder} released {released} day(s) on property {resource_id}")
            with self.uow_factory() as uow:
                uow.record(HoldReleased(resource_id=resource_id, holder=holder, released=released))
        return released

    def cancel_booking(self, resource_id: int, booking_ref: str) -> CancellationResult:
        """Void a booking: its days become available and its intervals disappear."""
        booking_ref = _require(booking_ref, "booking_ref")
        self.directory.profile(resource_id)
        with self.uow_factory() as uow:
            days_released = self.days.release_booking(resource_id, booking_ref, self.clock())
            events_deleted = self.events.delete_for_ref(resource_id, booking_ref, roots=(RESERVATION, MAINTENANCE))
            if days_released or events_deleted:
                uow.record(
                    BookingCancelled(
                        resource_id=resource_id,
                        booking_ref=booking_ref,
                        days_released=days_released,
                        events_deleted=events_deleted,
                    )
                )
        if days_released or events_deleted:
            logger.info(
                f"Booking {booking_ref} cancelled on property {resource_id}: "
                f"{days_released} day(s), {events_deleted} event(s)"
            )
        return CancellationResult(booking_ref=booking_ref, days_released=days_released, events_deleted=events_deleted)
