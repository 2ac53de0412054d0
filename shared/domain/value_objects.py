"""
Common Value Objects

Value objects used across the scheduling domain:
- HourRange: A local time-of-day range inside one calendar day
"""

import re
from dataclasses import dataclass
from datetime import time

from shared.domain.base import ValueObject

HHMM_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_hhmm(value: str) -> time:
    """Parse a local "HH:MM" string (00:00-23:59)."""
    match = HHMM_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError(f"Time must be in HH:MM format (00:00-23:59), got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


@dataclass(frozen=True)
class HourRange(ValueObject):
    """
    Local time-of-day range, e.g. 09:00-18:00

    start_time is inclusive and end_time exclusive.
    """
    start_time: time
    end_time: time

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"end_time ({self.end_time:%H:%M}) must be after start_time ({self.start_time:%H:%M})"
            )

    @classmethod
    def parse(cls, payload: dict) -> 'HourRange':
        """Build a range from {"start_time": "HH:MM", "end_time": "HH:MM"}."""
        return cls(parse_hhmm(payload["start_time"]), parse_hhmm(payload["end_time"]))

    def contains(self, moment: time) -> bool:
        return self.start_time <= moment < self.end_time

    def to_dict(self) -> dict:
        return {
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
        }

    def __str__(self):
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
