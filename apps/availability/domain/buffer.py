"""
Maintenance buffer calculator

After a guest checks out the property needs time for turnover. The
buffer window is [checkout, checkout + buffer_hours). The calculation is
a pure function of its inputs so it can be tested without a database.

Rules (``M`` is the end of maintenance, ``C`` the checkout instant):
- now >= M: the buffer is inert, the day follows ordinary policy.
- C <= now < M: maintenance in progress, any request starting before M
  is blocked.
- now < C: a request starting at or after M is bookable but flagged
  partially-available; a request starting earlier is blocked.

A cancelled, rejected or expired booking never reaches this module: its
events are gone and the day is back to ordinary policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from apps.availability.exceptions import ValidationError
from apps.availability.timeutils import combine_local

AVAILABLE = "available"
MAINTENANCE = "maintenance"
PARTIALLY_AVAILABLE = "partially-available"

DEFAULT_CHECKOUT_TIME = time(11, 0)
DEFAULT_BUFFER_HOURS = 2


@dataclass(frozen=True)
class BufferAssessment:
    status: str
    checkout_at: datetime
    maintenance_end: datetime

    @property
    def blocks(self) -> bool:
        return self.status == MAINTENANCE


def maintenance_window(
    checkout_date: date,
    checkout_time: time | None,
    buffer_hours: int,
    zone: ZoneInfo,
) -> tuple[datetime, datetime]:
    """Checkout instant and maintenance end, built in the property's zone."""
    if buffer_hours < 0:
        raise ValidationError("buffer_hours must not be negative")
    checkout_at = combine_local(checkout_date, checkout_time or DEFAULT_CHECKOUT_TIME, zone)
    return checkout_at, checkout_at + timedelta(hours=buffer_hours)


def assess_buffer(
    checkout_date: date,
    checkout_time: time | None,
    buffer_hours: int | None,
    zone: ZoneInfo,
    now: datetime,
    requested_start: datetime,
) -> BufferAssessment:
    """Classify ``requested_start`` against the buffer after one checkout."""
    if buffer_hours is None:
        buffer_hours = DEFAULT_BUFFER_HOURS
    checkout_at, maintenance_end = maintenance_window(checkout_date, checkout_time, buffer_hours, zone)

    if now >= maintenance_end:
        status = AVAILABLE
    elif checkout_at <= now:
        status = MAINTENANCE if requested_start < maintenance_end else AVAILABLE
    elif requested_start >= maintenance_end:
        status = PARTIALLY_AVAILABLE
    else:
        status = MAINTENANCE

    return BufferAssessment(status=status, checkout_at=checkout_at, maintenance_end=maintenance_end)


def assess_checkout(
    checkout_at: datetime,
    buffer_hours: int | None,
    zone: ZoneInfo,
    now: datetime,
    requested_start: datetime,
) -> BufferAssessment:
    """Same as :func:`assess_buffer` for a checkout read from the timeline."""
    local_checkout = checkout_at.astimezone(zone)
    return assess_buffer(
        local_checkout.date(),
        local_checkout.time(),
        buffer_hours,
        zone,
        now,
        requested_start,
    )
