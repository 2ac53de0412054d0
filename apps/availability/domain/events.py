"""
Availability Domain Events

Published through the message bus after the transaction that produced
them commits.
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from shared.domain.base import DomainEvent


def _dates(values) -> list[str]:
    return [value.isoformat() for value in values]


@dataclass(kw_only=True)
class HoldsAcquired(DomainEvent):
    """
    Event: One or more dates moved available -> on-hold

    Triggers:
    - Payment flow for the holder may start
    """
    holder: str
    dates: list[date] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'holder': self.holder, 'dates': _dates(self.dates)})
        return data


@dataclass(kw_only=True)
class HoldReleased(DomainEvent):
    """Event: A holder gave up its hold voluntarily"""
    holder: str
    released: int = 0


@dataclass(kw_only=True)
class HoldConfirmed(DomainEvent):
    """
    Event: Held dates became booked (on-hold -> booked)

    Triggers:
    - Reservation and maintenance intervals written to the timeline
    """
    holder: str
    booking_ref: str
    dates: list[date] = field(default_factory=list)
    check_in: datetime | None = None
    check_out: datetime | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'holder': self.holder,
            'booking_ref': self.booking_ref,
            'dates': _dates(self.dates),
            'check_in': self.check_in.isoformat() if self.check_in else None,
            'check_out': self.check_out.isoformat() if self.check_out else None,
        })
        return data


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: A booking was voided (booked -> available)

    Triggers:
    - Maintenance buffer of the booking no longer applies
    """
    booking_ref: str
    days_released: int = 0
    events_deleted: int = 0


@dataclass(kw_only=True)
class HoldsExpired(DomainEvent):
    """Event: The sweeper reverted lapsed holds"""
    cleaned_count: int
    cutoff: datetime


@dataclass(kw_only=True)
class PeriodBlocked(DomainEvent):
    block_ref: str
    start: datetime
    end: datetime
    reason: str = ''


@dataclass(kw_only=True)
class PeriodUnblocked(DomainEvent):
    block_ref: str
