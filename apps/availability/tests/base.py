"""Shared fixtures for availability tests."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from django.test import TestCase

from apps.availability.application.engine import build_engine
from apps.availability.models import AvailabilityDay
from apps.properties.models import Property


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class EngineTestCase(TestCase):
    ttl_seconds = 180
    zone_name = "UTC"
    buffer_hours = 2

    day = date(2030, 6, 10)

    def setUp(self) -> None:
        self.zone = ZoneInfo(self.zone_name)
        self.clock = FrozenClock(datetime(2030, 6, 1, 9, 0, tzinfo=timezone.utc))
        self.property = Property.objects.create(
            title="Студия у парка",
            timezone=self.zone_name,
            maintenance_buffer_hours=self.buffer_hours,
        )
        self.engine = self.make_engine()

    def make_engine(self, **kwargs):
        kwargs.setdefault("clock", self.clock)
        kwargs.setdefault("ttl_seconds", self.ttl_seconds)
        return build_engine(**kwargs)

    def at(self, day: date, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(day, time(hour, minute), tzinfo=self.zone)

    def open_days(self, *days: date, **fields) -> list[AvailabilityDay]:
        return [
            AvailabilityDay.objects.create(property=self.property, date=day, **fields)
            for day in days
        ]

    def reload(self, day: date) -> AvailabilityDay:
        return AvailabilityDay.objects.get(property=self.property, date=day)

    def book(self, days: list[date], booking_ref: str, holder: str = "guest-1", **options):
        """Acquire and confirm ``days`` in one go."""
        self.engine.acquire_hold(self.property.pk, days, holder).raise_for_failure()
        return self.engine.confirm_hold(self.property.pk, days, holder, booking_ref, **options)
