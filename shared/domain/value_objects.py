"""
Common Value Objects

- TimeRange: half-open interval of UTC instants ([start_at, end_at))
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents the interval from start_at (inclusive) to end_at (exclusive).
    Used for booking periods, maintenance windows and availability checks.
    """
    start_at: datetime
    end_at: datetime

    def __post_init__(self):
        if self.start_at >= self.end_at:
            raise ValueError(f"Start ({self.start_at}) must be before end ({self.end_at})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Note: end_at is exclusive, so back-to-back ranges don't overlap.

        Examples:
            - [09:00, 10:00) overlaps with [09:30, 11:00) -> True
            - [09:00, 10:00) overlaps with [10:00, 11:00) -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        return self.start_at < other.end_at and other.start_at < self.end_at

    def __str__(self):
        return f"{self.start_at.isoformat()} - {self.end_at.isoformat()}"

    def __repr__(self):
        return f"TimeRange({self.start_at.isoformat()}, {self.end_at.isoformat()})"
