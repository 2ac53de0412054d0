"""Timezone-aware day-boundary and buffer arithmetic.

All conversions between absolute instants and a property's local calendar
go through this module. Local datetimes are always built with
``datetime.combine(..., tzinfo=zone)`` in the property's zone, never by
shifting UTC values.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.utils import timezone as dj_timezone  # type: ignore

from shared.domain.value_objects import parse_hhmm as _parse_hhmm

from .exceptions import ValidationError

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return dj_timezone.now()


def zone_for(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone {name!r}") from exc


def localize(value: datetime, zone: ZoneInfo) -> datetime:
    """Return ``value`` expressed in ``zone``.

    Naive datetimes are read as wall-clock time of the property.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def combine_local(day: date, moment: time, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, moment, tzinfo=zone)


def day_bounds(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Local midnight of ``day`` and of the following day."""
    return combine_local(day, time.min, zone), combine_local(day + timedelta(days=1), time.min, zone)


def local_date(value: datetime, zone: ZoneInfo) -> date:
    return localize(value, zone).date()


def local_days_spanning(start: datetime, end: datetime, zone: ZoneInfo) -> list[date]:
    """Local calendar days touched by the half-open range [start, end).

    A range ending exactly at local midnight does not touch the next day.
    """
    if start >= end:
        raise ValidationError("start must be before end")
    first = local_date(start, zone)
    last = local_date(end - timedelta(microseconds=1), zone)
    return [first + timedelta(days=offset) for offset in range((last - first).days + 1)]


def parse_hhmm(value: str) -> time:
    try:
        return _parse_hhmm(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def align_forward(origin: datetime, candidate: datetime, step: timedelta) -> datetime:
    """Smallest ``origin + k * step`` (k >= 0) that is not before ``candidate``."""
    if candidate <= origin:
        return origin
    steps = math.ceil((candidate - origin) / step)
    return origin + steps * step
