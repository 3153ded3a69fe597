"""
Booking Status Finite State Machine

State transitions:
- CONFIRMED -> CANCELLED (owner or admin cancelled before the end)
- CONFIRMED -> EXPIRED (end passed while still confirmed)

CANCELLED and EXPIRED are terminal. Nothing returns to CONFIRMED.
"""

from enum import Enum

from apps.bookings.domain.errors import BookingErrorKind, BookingRejected


class BookingStatus(str, Enum):
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'


TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.EXPIRED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.EXPIRED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_transition(current: str, target: str) -> None:
    """
    Raise BookingRejected unless ``current -> target`` is allowed.

    Cancelling an already cancelled booking gets its own kind so callers
    can tell a repeated request apart from an illegal one.
    """
    if can_transition(current, target):
        return

    if BookingStatus(current) == BookingStatus.CANCELLED and BookingStatus(target) == BookingStatus.CANCELLED:
        raise BookingRejected(BookingErrorKind.ALREADY_CANCELLED, 'Booking is already cancelled')

    raise BookingRejected(
        BookingErrorKind.INVALID_TRANSITION,
        f'Cannot change booking status from {current} to {target}',
    )
