"""Tests for the next available slot finder."""

from __future__ import annotations

from datetime import timedelta

from apps.availability.exceptions import ValidationError

from .base import EngineTestCase


class NextAvailableSlotTests(EngineTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.checkout_day = self.day + timedelta(days=1)
        self.open_days(self.day, self.checkout_day, self.day + timedelta(days=2))

    def assert_sound(self, search) -> None:
        self.assertTrue(search.found, search.reason)
        check = self.engine.check_slot(self.property.pk, search.start, search.end)
        self.assertTrue(check.available, [c.to_dict() for c in check.conflicts])

    def test_first_candidate_is_returned_when_free(self) -> None:
        search = self.engine.find_next(self.property.pk, self.at(self.day, 10), duration_hours=2)
        self.assertEqual(search.start, self.at(self.day, 10))
        self.assertEqual(search.end, self.at(self.day, 12))
        self.assertEqual(search.checks, 1)

    def test_jumps_past_block(self) -> None:
        self.engine.block_period(self.property.pk, self.at(self.day, 0), self.at(self.day, 10))

        search = self.engine.find_next(self.property.pk, self.at(self.day, 0), duration_hours=2)

        self.assertEqual(search.start, self.at(self.day, 10))
        self.assertEqual(search.checks, 2)
        self.assert_sound(search)

    def test_jumps_past_maintenance(self) -> None:
        self.book([self.day], "BK-1")

        search = self.engine.find_next(self.property.pk, self.at(self.checkout_day, 11), duration_hours=1)

        self.assertEqual(search.start, self.at(self.checkout_day, 13))
        self.assert_sound(search)

    def test_skips_closed_days(self) -> None:
        start = self.day - timedelta(days=3)
        search = self.engine.find_next(self.property.pk, self.at(start, 9), duration_hours=3)
        self.assertEqual(search.start, self.at(self.day, 0))
        self.assert_sound(search)

    def test_respects_hour_rules(self) -> None:
        later = self.day + timedelta(days=5)
        self.open_days(later, available_hours=[{"start_time": "15:00", "end_time": "20:00"}])
        search = self.engine.find_next(self.property.pk, self.at(later, 9), duration_hours=1, horizon_days=1)
        self.assertEqual(search.start, self.at(later, 15))

    def test_nothing_within_horizon(self) -> None:
        far = self.day + timedelta(days=30)
        search = self.engine.find_next(self.property.pk, self.at(far, 0), duration_hours=2, horizon_days=3)
        self.assertFalse(search.found)
        self.assertIsNone(search.start)
        self.assertGreater(search.checks, 0)
        self.assertIn("3 day", search.reason)

    def test_custom_step(self) -> None:
        self.engine.block_period(self.property.pk, self.at(self.day, 0), self.at(self.day, 10, 20))
        search = self.engine.find_next(
            self.property.pk, self.at(self.day, 0), duration_hours=1, step=timedelta(minutes=30)
        )
        self.assertEqual(search.start, self.at(self.day, 10, 30))

    def test_validation(self) -> None:
        with self.assertRaises(ValidationError):
            self.engine.find_next(self.property.pk, self.at(self.day, 0), duration_hours=0)
        with self.assertRaises(ValidationError):
            self.engine.find_next(self.property.pk, self.at(self.day, 0), duration_hours=1, horizon_days=0)
