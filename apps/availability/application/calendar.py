"""
Calendar management for hosts.

Days are opt-in: a date without an ``AvailabilityDay`` row cannot be
booked, so hosts open dates here. Host blocks that cover part of a day
live on the timeline as ``block_start``/``block_end`` pairs.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable
from uuid import uuid4

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.value_objects import HourRange

from apps.availability.domain.entities import DayOutcome, MultiDateResult
from apps.availability.domain.events import PeriodBlocked, PeriodUnblocked
from apps.availability.domain.timeline import BLOCK
from apps.availability.exceptions import NotFoundError, ValidationError
from apps.availability.models import AvailabilityDay
from apps.availability.repositories import (
    WRITABLE_STATUSES,
    AvailabilityDayStore,
    AvailabilityEventStore,
    PropertyDirectory,
)
from apps.availability.timeutils import Clock, localize, system_clock

logger = logging.getLogger(__name__)

BLOCK_REF_PREFIX = "block-"


def _hour_list(raw, field_name: str) -> list[dict]:
    try:
        return [HourRange.parse(item).to_dict() for item in raw or []]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {field_name}: {exc}", field=field_name) from exc


class CalendarManager:
    def __init__(
        self,
        days: AvailabilityDayStore,
        events: AvailabilityEventStore,
        directory: PropertyDirectory,
        clock: Clock = system_clock,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
    ):
        self.days = days
        self.events = events
        self.directory = directory
        self.clock = clock
        self.uow_factory = uow_factory

    def _prepare(self, update: dict) -> tuple[date, dict]:
        day = update.get("date")
        if not isinstance(day, date):
            raise ValidationError("Each update needs a date")
        status = update.get("status", AvailabilityDay.Status.AVAILABLE)
        if status not in WRITABLE_STATUSES:
            raise ValidationError(
                f"Status {status!r} cannot be set directly",
                allowed=[str(s) for s in WRITABLE_STATUSES],
            )
        fields = {"status": status, "reason": update.get("reason", "") or ""}
        for field_name in AvailabilityDay.HOUR_FIELDS:
            if field_name in update:
                fields[field_name] = _hour_list(update[field_name], field_name)
        return day, fields

    def update_days(self, resource_id: int, updates: Iterable[dict]) -> MultiDateResult:
        """
        Open, close or reshape days in bulk.

        All updates are validated before the first write. Days that are on
        hold or booked are reported as failures and left as they are.
        """
        prepared = [self._prepare(update) for update in updates or []]
        if not prepared:
            raise ValidationError("At least one update is required")
        seen = [day for day, _ in prepared]
        if len(seen) != len(set(seen)):
            raise ValidationError("Each date may appear only once")
        self.directory.profile(resource_id)

        now = self.clock()
        result = MultiDateResult(operation="update_days")
        for day, fields in sorted(prepared, key=lambda item: item[0]):
            applied, status = self.days.apply_update(resource_id, day, fields, now)
            reason = "" if applied else f"Day is {status}"
            result.outcomes.append(DayOutcome(day, applied, status, reason))
        logger.info(
            f"Calendar update on property {resource_id}: {len(result.succeeded)} applied, {len(result.failed)} skipped"
        )
        return result

    def get_days(self, resource_id: int, start_date: date, end_date: date) -> list[AvailabilityDay]:
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        self.directory.profile(resource_id)
        return list(self.days.between(resource_id, start_date, end_date))

    def block_period(
        self,
        resource_id: int,
        start: datetime,
        end: datetime,
        actor_ref: str = "",
        reason: str = "",
    ) -> str:
        profile = self.directory.profile(resource_id)
        start = localize(start, profile.zone)
        end = localize(end, profile.zone)
        if start >= end:
            raise ValidationError("start must be before end")

        block_ref = f"{BLOCK_REF_PREFIX}{uuid4().hex}"
        with self.uow_factory() as uow:
            self.events.append_pair(resource_id, BLOCK, block_ref, start, end, actor_ref, {"reason": reason})
            uow.record(PeriodBlocked(resource_id=resource_id, block_ref=block_ref, start=start, end=end, reason=reason))
        logger.info(f"Blocked property {resource_id} from {start.isoformat()} to {end.isoformat()} ({block_ref})")
        return block_ref

    def unblock_period(self, resource_id: int, block_ref: str) -> int:
        if not block_ref or not block_ref.startswith(BLOCK_REF_PREFIX):
            raise ValidationError("Not a block reference", block_ref=block_ref)
        self.directory.profile(resource_id)
        with self.uow_factory() as uow:
            deleted = self.events.delete_for_ref(resource_id, block_ref, roots=(BLOCK,))
            if not deleted:
                raise NotFoundError(f"Block {block_ref} does not exist", block_ref=block_ref)
            uow.record(PeriodUnblocked(resource_id=resource_id, block_ref=block_ref))
        logger.info(f"Removed block {block_ref} from property {resource_id}")
        return deleted
