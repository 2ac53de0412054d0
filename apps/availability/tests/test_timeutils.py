"""Unit tests for day-boundary arithmetic."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from apps.availability.exceptions import ValidationError
from apps.availability.timeutils import (
    align_forward,
    day_bounds,
    format_hhmm,
    local_days_spanning,
    localize,
    parse_hhmm,
    zone_for,
)

TOKYO = ZoneInfo("Asia/Tokyo")


class TimeUtilsTests(SimpleTestCase):
    def test_days_spanning_uses_local_calendar(self) -> None:
        # 16:00 UTC is 01:00 the next day in Tokyo.
        start = datetime(2030, 6, 10, 16, 0, tzinfo=timezone.utc)
        end = start + timedelta(hours=2)
        self.assertEqual(local_days_spanning(start, end, TOKYO), [date(2030, 6, 11)])

    def test_range_ending_at_midnight_stays_on_one_day(self) -> None:
        start = datetime(2030, 6, 10, 20, 0, tzinfo=TOKYO)
        end = datetime(2030, 6, 11, 0, 0, tzinfo=TOKYO)
        self.assertEqual(local_days_spanning(start, end, TOKYO), [date(2030, 6, 10)])

    def test_multi_day_range(self) -> None:
        start = datetime(2030, 6, 10, 14, 0, tzinfo=TOKYO)
        end = datetime(2030, 6, 12, 11, 0, tzinfo=TOKYO)
        self.assertEqual(
            local_days_spanning(start, end, TOKYO),
            [date(2030, 6, 10), date(2030, 6, 11), date(2030, 6, 12)],
        )

    def test_empty_range_is_rejected(self) -> None:
        moment = datetime(2030, 6, 10, 14, 0, tzinfo=TOKYO)
        with self.assertRaises(ValidationError):
            local_days_spanning(moment, moment, TOKYO)

    def test_naive_values_are_local_wall_time(self) -> None:
        value = localize(datetime(2030, 6, 10, 9, 0), TOKYO)
        self.assertEqual(value.utcoffset(), timedelta(hours=9))
        self.assertEqual(value.hour, 9)

    def test_day_bounds(self) -> None:
        start, end = day_bounds(date(2030, 6, 10), TOKYO)
        self.assertEqual(start, datetime(2030, 6, 10, tzinfo=TOKYO))
        self.assertEqual(end - start, timedelta(days=1))

    def test_hhmm_round_trip_and_errors(self) -> None:
        self.assertEqual(parse_hhmm("09:30"), time(9, 30))
        self.assertEqual(format_hhmm(time(9, 30)), "09:30")
        for bad in ("24:00", "9:3", "noon"):
            with self.subTest(value=bad), self.assertRaises(ValidationError):
                parse_hhmm(bad)

    def test_unknown_zone(self) -> None:
        with self.assertRaises(ValidationError):
            zone_for("Mars/Olympus")

    def test_align_forward(self) -> None:
        origin = datetime(2030, 6, 10, 8, 0, tzinfo=TOKYO)
        step = timedelta(hours=1)
        self.assertEqual(align_forward(origin, origin - step, step), origin)
        self.assertEqual(align_forward(origin, origin + timedelta(minutes=1), step), origin + step)
        self.assertEqual(align_forward(origin, origin + 2 * step, step), origin + 2 * step)
