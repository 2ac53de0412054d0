"""
Next Available Slot Finder

Walks forward from a start time in fixed steps and returns the first
window accepted by the slot checker. Conflicts that know when they end
(``resume_at``) let the walk jump ahead; a start before ``resume_at``
would hit the same conflict again.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from apps.availability.application.checker import SlotAvailabilityChecker
from apps.availability.domain.entities import SlotSearch
from apps.availability.exceptions import ValidationError
from apps.availability.repositories import PropertyDirectory
from apps.availability.timeutils import Clock, align_forward, localize, system_clock

logger = logging.getLogger(__name__)


class NextAvailableSlotFinder:
    def __init__(
        self,
        checker: SlotAvailabilityChecker,
        directory: PropertyDirectory,
        horizon_days: int = 90,
        step_minutes: int = 60,
        clock: Clock = system_clock,
    ):
        self.checker = checker
        self.directory = directory
        self.horizon_days = horizon_days
        self.step = timedelta(minutes=step_minutes)
        self.clock = clock

    def find_next(
        self,
        resource_id: int,
        from_time: datetime | None = None,
        duration_hours: float = 1,
        horizon_days: int | None = None,
        step: timedelta | None = None,
        holder: str | None = None,
    ) -> SlotSearch:
        if duration_hours is None or duration_hours <= 0:
            raise ValidationError("duration_hours must be positive")
        horizon_days = self.horizon_days if horizon_days is None else horizon_days
        if horizon_days <= 0:
            raise ValidationError("horizon_days must be positive")
        step = step or self.step
        if step <= timedelta(0):
            raise ValidationError("step must be positive")

        profile = self.directory.profile(resource_id)
        origin = localize(from_time, profile.zone) if from_time else self.clock().astimezone(profile.zone)
        duration = timedelta(hours=duration_hours)
        limit = origin + timedelta(days=horizon_days)

        candidate = origin
        checks = 0
        while candidate + duration <= limit:
            checks += 1
            result = self.checker.check_slot(resource_id, candidate, candidate + duration, holder=holder)
            if result.available:
                logger.debug(f"Found slot on property {resource_id} at {candidate.isoformat()} after {checks} check(s)")
                return SlotSearch(found=True, start=result.start, end=result.end, checks=checks)
            resume = [c.resume_at for c in result.conflicts if c.resume_at is not None]
            target = max(resume + [candidate + step])
            candidate = align_forward(origin, target, step)

        return SlotSearch(
            found=False,
            checks=checks,
            reason=f"No free {duration_hours}h window within {horizon_days} day(s)",
        )
