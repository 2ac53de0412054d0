"""
Cleanup Sweeper

Reclaims holds whose TTL elapsed. The sweep is a single conditional
UPDATE; a concurrent confirm_hold filters on the same row state, so only
one of them can change a given record.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork

from apps.availability.domain.entities import SweepResult
from apps.availability.domain.events import HoldsExpired
from apps.availability.exceptions import ValidationError
from apps.availability.repositories import AvailabilityDayStore
from apps.availability.timeutils import Clock, system_clock

logger = logging.getLogger(__name__)


class CleanupSweeper:
    def __init__(
        self,
        days: AvailabilityDayStore,
        ttl_seconds: int,
        clock: Clock = system_clock,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
    ):
        if ttl_seconds <= 0:
            raise ValidationError("Hold TTL must be positive")
        self.days = days
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.uow_factory = uow_factory

    def expire_holds(self, now: datetime | None = None) -> SweepResult:
        now = now or self.clock()
        cutoff = now - self.ttl
        with self.uow_factory() as uow:
            cleaned = self.days.expire_stale_holds(cutoff, now)
            if cleaned:
                uow.record(HoldsExpired(cleaned_count=cleaned, cutoff=cutoff))
        if cleaned:
            logger.info(f"Expired {cleaned} hold(s) acquired before {cutoff.isoformat()}")
        return SweepResult(cleaned_count=cleaned, cutoff=cutoff)
