"""
Persistence for the day grid and the event timeline.

Every state transition of ``AvailabilityDay`` is a single
``QuerySet.update()`` filtered on the state it expects to find, so the
database serialises concurrent writers and each caller learns from the
affected row count whether it won.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable

from django.db.models import Q  # type: ignore

from apps.properties.models import Property, default_buffer_hours

from .domain.entities import ResourceProfile
from .domain.timeline import is_start, root_of
from .exceptions import NotFoundError
from .models import AvailabilityDay, AvailabilityEvent
from .timeutils import zone_for

logger = logging.getLogger(__name__)

Status = AvailabilityDay.Status
EventType = AvailabilityEvent.EventType

# Statuses a host may set through calendar updates.
WRITABLE_STATUSES = (
    Status.AVAILABLE,
    Status.BLOCKED,
    Status.UNAVAILABLE,
    Status.PARTIALLY_AVAILABLE,
)

_CLEARED_HOLD = {"held_by": "", "held_at": None}
_CLEARED_BOOKING = {"booking_ref": "", "booked_at": None}


class PropertyDirectory:
    """Reads the scheduling profile of a property."""

    def profile(self, resource_id: int) -> ResourceProfile:
        row = (
            Property.objects.filter(pk=resource_id)
            .values("timezone", "check_in_time", "check_out_time", "maintenance_buffer_hours")
            .first()
        )
        if row is None:
            raise NotFoundError(f"Property {resource_id} does not exist", resource_id=resource_id)
        buffer_hours = row["maintenance_buffer_hours"]
        return ResourceProfile(
            resource_id=resource_id,
            zone=zone_for(row["timezone"]),
            check_in_time=row["check_in_time"],
            check_out_time=row["check_out_time"],
            buffer_hours=buffer_hours if buffer_hours is not None else default_buffer_hours(),
        )


class AvailabilityDayStore:
    """Conditional transitions over ``AvailabilityDay`` rows."""

    def _days(self, resource_id: int):
        return AvailabilityDay.objects.filter(property_id=resource_id)

    def for_dates(self, resource_id: int, dates: Iterable[date]) -> dict[date, AvailabilityDay]:
        return {day.date: day for day in self._days(resource_id).filter(date__in=list(dates))}

    def between(self, resource_id: int, start: date, end: date):
        """Rows with ``start <= date <= end``."""
        return self._days(resource_id).filter(date__gte=start, date__lte=end).order_by("date")

    def booked_dates(self, resource_id: int, booking_ref: str) -> list[date]:
        return list(
            self._days(resource_id)
            .filter(status=Status.BOOKED, booking_ref=booking_ref)
            .order_by("date")
            .values_list("date", flat=True)
        )

    def acquire(self, resource_id: int, day: date, holder: str, now: datetime, cutoff: datetime) -> bool:
        """available -> on-hold, or take over a hold older than ``cutoff``."""
        updated = (
            self._days(resource_id)
            .filter(date=day)
            .filter(Q(status=Status.AVAILABLE) | Q(status=Status.ON_HOLD, held_at__lt=cutoff))
            .update(status=Status.ON_HOLD, held_by=holder, held_at=now, updated_at=now)
        )
        return updated == 1

    def confirm(
        self,
        resource_id: int,
        day: date,
        holder: str,
        held_at: datetime,
        booking_ref: str,
        now: datetime,
    ) -> bool:
        """on-hold -> booked, only if the hold observed at validation is still there."""
        updated = (
            self._days(resource_id)
            .filter(date=day, status=Status.ON_HOLD, held_by=holder, held_at=held_at)
            .update(status=Status.BOOKED, booking_ref=booking_ref, booked_at=now, updated_at=now, **_CLEARED_HOLD)
        )
        return updated == 1

    def release(self, resource_id: int, dates: Iterable[date], holder: str, now: datetime) -> int:
        return (
            self._days(resource_id)
            .filter(date__in=list(dates), status=Status.ON_HOLD, held_by=holder)
            .update(status=Status.AVAILABLE, updated_at=now, **_CLEARED_HOLD)
        )

    def release_booking(self, resource_id: int, booking_ref: str, now: datetime) -> int:
        return (
            self._days(resource_id)
            .filter(status=Status.BOOKED, booking_ref=booking_ref)
            .update(status=Status.AVAILABLE, updated_at=now, **_CLEARED_BOOKING)
        )

    def expire_stale_holds(self, cutoff: datetime, now: datetime) -> int:
        """Revert every hold acquired before ``cutoff``, across all properties."""
        return AvailabilityDay.objects.filter(status=Status.ON_HOLD, held_at__lt=cutoff).update(
            status=Status.AVAILABLE, updated_at=now, **_CLEARED_HOLD
        )

    def apply_update(self, resource_id: int, day: date, fields: dict, now: datetime) -> tuple[bool, str]:
        """
        Create the row if missing, then overwrite host-managed fields.

        Rows that are on-hold or booked are left untouched. Returns
        ``(applied, status_after)``.
        """
        record, created = AvailabilityDay.objects.get_or_create(
            property_id=resource_id,
            date=day,
            defaults={"status": Status.UNAVAILABLE},
        )
        if created:
            logger.info(f"Created availability day {day} for property {resource_id}")
        updated = (
            self._days(resource_id)
            .filter(pk=record.pk, status__in=WRITABLE_STATUSES)
            .update(updated_at=now, **fields)
        )
        if updated:
            return True, fields.get("status", record.status)
        current = self._days(resource_id).filter(pk=record.pk).values_list("status", flat=True).first()
        return False, current or record.status


class AvailabilityEventStore:
    """Append/delete access to the event timeline; events are never mutated."""

    def _events(self, resource_id: int):
        return AvailabilityEvent.objects.filter(property_id=resource_id)

    def append_pair(
        self,
        resource_id: int,
        root: str,
        booking_ref: str,
        start: datetime,
        end: datetime,
        actor_ref: str = "",
        metadata: dict | None = None,
    ) -> list[AvailabilityEvent]:
        metadata = metadata or {}
        pair = [
            AvailabilityEvent(
                property_id=resource_id,
                time=start,
                event_type=f"{root}_start",
                booking_ref=booking_ref,
                actor_ref=actor_ref,
                metadata=metadata,
            ),
            AvailabilityEvent(
                property_id=resource_id,
                time=end,
                event_type=f"{root}_end",
                booking_ref=booking_ref,
                actor_ref=actor_ref,
                metadata=metadata,
            ),
        ]
        return AvailabilityEvent.objects.bulk_create(pair)

    def delete_for_ref(self, resource_id: int, booking_ref: str, roots: Iterable[str] | None = None) -> int:
        queryset = self._events(resource_id).filter(booking_ref=booking_ref)
        if roots is not None:
            types = [f"{root}_{edge}" for root in roots for edge in ("start", "end")]
            queryset = queryset.filter(event_type__in=types)
        deleted, _ = queryset.delete()
        return deleted

    def events_before(self, resource_id: int, end: datetime, roots: Iterable[str]) -> list[AvailabilityEvent]:
        """
        Events of the given root types strictly before ``end``, in time order,
        followed by the closing ``*_end`` of every interval still open at ``end``.
        """
        types = [f"{root}_{edge}" for root in roots for edge in ("start", "end")]
        events = list(self._events(resource_id).filter(time__lt=end, event_type__in=types).order_by("time", "id"))

        balance: dict[tuple[str, str], int] = {}
        for event in events:
            key = (root_of(event.event_type), event.booking_ref)
            balance[key] = balance.get(key, 0) + (1 if is_start(event.event_type) else -1)
        still_open = [key for key, count in balance.items() if count > 0]
        if not still_open:
            return events

        closing = Q()
        for root, ref in still_open:
            closing |= Q(event_type=f"{root}_end", booking_ref=ref)
        events.extend(self._events(resource_id).filter(closing, time__gte=end).order_by("time", "id"))
        return events

    def events_between(self, resource_id: int, start: datetime, end: datetime):
        return self._events(resource_id).filter(time__gte=start, time__lt=end).order_by("time", "id")

    def checkouts_between(self, resource_id: int, start: datetime, end: datetime) -> list[AvailabilityEvent]:
        """``reservation_end`` events with ``start <= time < end``."""
        return list(
            self._events(resource_id)
            .filter(event_type=EventType.RESERVATION_END, time__gte=start, time__lt=end)
            .order_by("time", "id")
        )
