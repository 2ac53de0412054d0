"""Unit tests for the maintenance buffer calculator."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from apps.availability.domain.buffer import (
    AVAILABLE,
    MAINTENANCE,
    PARTIALLY_AVAILABLE,
    assess_buffer,
    assess_checkout,
    maintenance_window,
)
from apps.availability.exceptions import ValidationError

ZONE = ZoneInfo("Asia/Tokyo")
CHECKOUT_DAY = date(2030, 6, 10)


def local(hour: int, minute: int = 0, day: date = CHECKOUT_DAY) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=ZONE)


class MaintenanceBufferTests(SimpleTestCase):
    def assess(self, now: datetime, start: datetime, buffer_hours: int | None = 2, checkout: time | None = time(11, 0)):
        return assess_buffer(CHECKOUT_DAY, checkout, buffer_hours, ZONE, now, start)

    def test_window_is_built_in_local_time(self) -> None:
        checkout_at, maintenance_end = maintenance_window(CHECKOUT_DAY, time(11, 0), 2, ZONE)
        self.assertEqual(checkout_at, local(11))
        self.assertEqual(maintenance_end, local(13))
        self.assertEqual(checkout_at.utcoffset(), timedelta(hours=9))

    def test_future_checkout_blocks_early_start(self) -> None:
        result = self.assess(now=local(8, day=date(2030, 6, 1)), start=local(12))
        self.assertEqual(result.status, MAINTENANCE)
        self.assertTrue(result.blocks)

    def test_future_checkout_flags_start_after_buffer(self) -> None:
        result = self.assess(now=local(8, day=date(2030, 6, 1)), start=local(13))
        self.assertEqual(result.status, PARTIALLY_AVAILABLE)
        self.assertFalse(result.blocks)
        self.assertEqual(result.maintenance_end, local(13))

    def test_maintenance_in_progress(self) -> None:
        self.assertEqual(self.assess(now=local(11, 30), start=local(12)).status, MAINTENANCE)
        self.assertEqual(self.assess(now=local(11, 30), start=local(13)).status, AVAILABLE)

    def test_elapsed_buffer_is_inert(self) -> None:
        result = self.assess(now=local(13), start=local(12))
        self.assertEqual(result.status, AVAILABLE)

    def test_defaults_apply_when_values_missing(self) -> None:
        result = self.assess(now=local(8, day=date(2030, 6, 1)), start=local(12), buffer_hours=None, checkout=None)
        self.assertEqual(result.checkout_at, local(11))
        self.assertEqual(result.maintenance_end, local(13))

    def test_negative_buffer_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            maintenance_window(CHECKOUT_DAY, time(11, 0), -1, ZONE)

    def test_status_is_monotonic_as_time_passes(self) -> None:
        start = local(12)
        order = {MAINTENANCE: 0, PARTIALLY_AVAILABLE: 1, AVAILABLE: 2}
        previous = -1
        now = local(9)
        while now <= local(14):
            rank = order[self.assess(now=now, start=start).status]
            self.assertGreaterEqual(rank, previous)
            previous = rank
            now += timedelta(minutes=15)
        self.assertEqual(previous, order[AVAILABLE])

    def test_checkout_read_from_utc_timeline(self) -> None:
        checkout_utc = local(11).astimezone(ZoneInfo("UTC"))
        result = assess_checkout(checkout_utc, 2, ZONE, local(8, day=date(2030, 6, 1)), local(13))
        self.assertEqual(result.checkout_at, local(11))
        self.assertEqual(result.status, PARTIALLY_AVAILABLE)
