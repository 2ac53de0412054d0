"""Errors raised by the availability engine.

Every failure is reported to the caller; the API layer maps each class
to an HTTP status.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable


class AvailabilityError(Exception):
    """Base class for scheduling errors."""

    code = "availability_error"

    def __init__(self, message: str = "", **details) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"code": self.code, "detail": self.message}
        payload.update(self.details)
        return payload


class ValidationError(AvailabilityError):
    """Malformed input (empty date list, start >= end, bad HH:MM...)."""

    code = "validation_error"


class NotFoundError(AvailabilityError):
    """Property, day record or event is absent."""

    code = "not_found"


class StateConflictError(AvailabilityError):
    """The record is not in the state the transition requires."""

    code = "state_conflict"


class ExpiredHoldError(AvailabilityError):
    """The hold TTL elapsed before confirmation."""

    code = "hold_expired"


class PartialFailureError(AvailabilityError):
    """A multi-date operation succeeded for some dates only."""

    code = "partial_failure"

    def __init__(self, message: str, succeeded: Iterable[date], failed: Iterable[date], **details) -> None:
        self.succeeded = sorted(succeeded)
        self.failed = sorted(failed)
        super().__init__(
            message,
            succeeded=[d.isoformat() for d in self.succeeded],
            failed=[d.isoformat() for d in self.failed],
            **details,
        )
