"""Tests for host calendar management."""

from __future__ import annotations

from datetime import timedelta

from apps.availability.exceptions import NotFoundError, ValidationError
from apps.availability.models import AvailabilityDay, AvailabilityEvent

from .base import EngineTestCase

Status = AvailabilityDay.Status


class UpdateDaysTests(EngineTestCase):
    def test_creates_missing_days(self) -> None:
        result = self.engine.update_days(self.property.pk, [
            {"date": self.day, "status": Status.AVAILABLE},
            {
                "date": self.day + timedelta(days=1),
                "status": Status.PARTIALLY_AVAILABLE,
                "available_hours": [{"start_time": "9:00", "end_time": "18:00"}],
            },
        ])

        self.assertTrue(result.success)
        self.assertEqual(self.reload(self.day).status, Status.AVAILABLE)
        second = self.reload(self.day + timedelta(days=1))
        self.assertEqual(second.available_hours, [{"start_time": "09:00", "end_time": "18:00"}])

    def test_held_and_booked_days_are_not_overwritten(self) -> None:
        booked_day = self.day + timedelta(days=1)
        self.open_days(self.day, booked_day)
        self.engine.acquire_hold(self.property.pk, [self.day], "guest-1")
        self.book([booked_day], "BK-1", holder="guest-2")

        result = self.engine.update_days(self.property.pk, [
            {"date": self.day, "status": Status.BLOCKED},
            {"date": booked_day, "status": Status.BLOCKED},
        ])

        self.assertEqual(result.failed, [self.day, booked_day])
        self.assertEqual([o.status for o in result.outcomes], [Status.ON_HOLD, Status.BOOKED])
        self.assertEqual(self.reload(self.day).status, Status.ON_HOLD)

    def test_invalid_input_writes_nothing(self) -> None:
        bad_updates = [
            [{"date": self.day, "status": Status.BOOKED}],
            [{"date": self.day, "available_hours": [{"start_time": "18:00", "end_time": "09:00"}]}],
            [{"date": self.day}, {"date": self.day}],
            [],
        ]
        for updates in bad_updates:
            with self.subTest(updates=updates), self.assertRaises(ValidationError):
                self.engine.update_days(self.property.pk, updates)
        self.assertFalse(AvailabilityDay.objects.exists())

    def test_get_days(self) -> None:
        self.open_days(self.day + timedelta(days=2), self.day, self.day + timedelta(days=9))
        days = self.engine.get_days(self.property.pk, self.day, self.day + timedelta(days=3))
        self.assertEqual([d.date for d in days], [self.day, self.day + timedelta(days=2)])
        with self.assertRaises(ValidationError):
            self.engine.get_days(self.property.pk, self.day, self.day - timedelta(days=1))


class BlockPeriodTests(EngineTestCase):
    def test_block_writes_pair(self) -> None:
        ref = self.engine.block_period(
            self.property.pk, self.at(self.day, 10), self.at(self.day, 12), actor_ref="host", reason="Фотосъёмка"
        )
        self.assertTrue(ref.startswith("block-"))
        events = AvailabilityEvent.objects.filter(booking_ref=ref).order_by("time")
        self.assertEqual([e.event_type for e in events], ["block_start", "block_end"])
        self.assertEqual(events[0].metadata, {"reason": "Фотосъёмка"})

    def test_unblock_unknown_ref(self) -> None:
        with self.assertRaises(NotFoundError):
            self.engine.unblock_period(self.property.pk, "block-missing")
        with self.assertRaises(ValidationError):
            self.engine.unblock_period(self.property.pk, "BK-1")

    def test_empty_block_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.engine.block_period(self.property.pk, self.at(self.day, 12), self.at(self.day, 10))
