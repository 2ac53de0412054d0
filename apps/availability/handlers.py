"""Message bus handlers for availability domain events."""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

from .domain.events import (
    BookingCancelled,
    HoldConfirmed,
    HoldReleased,
    HoldsAcquired,
    HoldsExpired,
    PeriodBlocked,
    PeriodUnblocked,
)

logger = logging.getLogger("apps.availability.events")

PUBLISHED_EVENTS = (
    HoldsAcquired,
    HoldConfirmed,
    HoldReleased,
    BookingCancelled,
    HoldsExpired,
    PeriodBlocked,
    PeriodUnblocked,
)


def log_domain_event(event: DomainEvent) -> None:
    """Audit trail: one structured log line per committed event."""
    logger.info(event.__class__.__name__, extra={"event": event.to_dict()})


def register_handlers(bus: MessageBus) -> None:
    for event_type in PUBLISHED_EVENTS:
        bus.register_event_handler(event_type, log_domain_event)
