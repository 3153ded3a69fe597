"""
Booking Domain Errors

Every rejection the booking engine can produce has its own kind so callers
can choose a response without inspecting message text.
"""

from dataclasses import dataclass
from enum import Enum

from shared.domain.base import DomainError


class BookingErrorKind(str, Enum):
    """Closed set of reasons a booking command can be rejected."""

    # Rule validator
    INVALID_TIME_RANGE = 'INVALID_TIME_RANGE'
    OUTSIDE_OPERATING_HOURS = 'OUTSIDE_OPERATING_HOURS'
    INVALID_TIME_SLOT = 'INVALID_TIME_SLOT'
    DURATION_TOO_SHORT = 'DURATION_TOO_SHORT'
    DURATION_TOO_LONG = 'DURATION_TOO_LONG'
    TOO_SOON = 'TOO_SOON'
    TOO_FAR_AHEAD = 'TOO_FAR_AHEAD'

    # Fair usage
    MAX_ACTIVE_BOOKINGS_EXCEEDED = 'MAX_ACTIVE_BOOKINGS_EXCEEDED'
    MAX_CONSECUTIVE_EXCEEDED = 'MAX_CONSECUTIVE_EXCEEDED'
    COOLDOWN_ACTIVE = 'COOLDOWN_ACTIVE'

    # Conflict checker
    ROOM_NOT_FOUND = 'ROOM_NOT_FOUND'
    ROOM_ARCHIVED = 'ROOM_ARCHIVED'
    ROOM_MAINTENANCE = 'ROOM_MAINTENANCE'
    ROOM_UNAVAILABLE = 'ROOM_UNAVAILABLE'
    MAINTENANCE_CONFLICT = 'MAINTENANCE_CONFLICT'

    # Lifecycle
    BOOKING_NOT_FOUND = 'BOOKING_NOT_FOUND'
    FORBIDDEN = 'FORBIDDEN'
    ALREADY_CANCELLED = 'ALREADY_CANCELLED'
    PAST_BOOKING = 'PAST_BOOKING'
    INVALID_TRANSITION = 'INVALID_TRANSITION'


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation step."""
    valid: bool
    kind: BookingErrorKind | None = None
    message: str = ''

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def fail(cls, kind: BookingErrorKind, message: str) -> 'ValidationResult':
        return cls(valid=False, kind=kind, message=message)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise BookingRejected(self.kind, self.message)

    def __bool__(self) -> bool:
        return self.valid


class BookingRejected(DomainError):
    """A booking command was refused by a business rule."""

    def __init__(self, kind: BookingErrorKind, message: str = ''):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    def __repr__(self):
        return f"BookingRejected({self.kind.value}, {self.message!r})"


class BookingStorageError(Exception):
    """The database failed for a reason other than a conflicting write."""


class RuleConfigError(DomainError):
    """The rule configuration is missing or an update would break its invariants."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)
