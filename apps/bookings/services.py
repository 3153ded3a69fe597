"""Conflict checks for booking workflows."""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import DEFAULT_DB_ALIAS, transaction  # type: ignore

from apps.rooms.models import Room
from apps.rooms.selectors import get_room, list_overlapping_maintenance

from .domain.errors import BookingErrorKind, ValidationResult
from .models import Booking

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset, using: str):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection(using).in_atomic_block:
        return queryset
    return queryset.select_for_update()


def confirmed_bookings_between(start_at: datetime, end_at: datetime, *, using: str = DEFAULT_DB_ALIAS):
    """Confirmed bookings of any room intersecting ``[start_at, end_at)``."""

    return Booking.objects.using(using).filter(
        status=Booking.Status.CONFIRMED,
        start_at__lt=end_at,
        end_at__gt=start_at,
    )


def overlapping_bookings(room_id, start_at: datetime, end_at: datetime, *, using: str = DEFAULT_DB_ALIAS):
    """Confirmed bookings of the room intersecting ``[start_at, end_at)``."""

    return confirmed_bookings_between(start_at, end_at, using=using).filter(room_id=room_id)


def check_room_status(room: Room | None) -> ValidationResult:
    if room is None:
        return ValidationResult.fail(BookingErrorKind.ROOM_NOT_FOUND, "Room not found")

    if room.is_bookable:
        return ValidationResult.ok()

    if room.status == Room.Status.ARCHIVED:
        return ValidationResult.fail(
            BookingErrorKind.ROOM_ARCHIVED,
            "Room is archived and cannot be booked",
        )

    return ValidationResult.fail(
        BookingErrorKind.ROOM_MAINTENANCE,
        "Room is under maintenance and cannot be booked",
    )


def check_room_availability(
    room_id,
    start_at: datetime,
    end_at: datetime,
    *,
    lock: bool = False,
    using: str = DEFAULT_DB_ALIAS,
) -> ValidationResult:
    """Ensure the room is bookable and free for ``[start_at, end_at)``.

    Order: room status, overlapping confirmed bookings, overlapping
    maintenance blocks. A room whose own status forbids booking is rejected
    without querying bookings at all.

    With ``lock=True`` (inside the admission transaction) the room row and
    the overlapping rows are read ``FOR UPDATE`` where the backend supports it.
    """

    room = get_room(room_id, lock=lock, using=using)
    status_result = check_room_status(room)
    if not status_result.valid:
        return status_result

    bookings_qs = overlapping_bookings(room_id, start_at, end_at, using=using)
    if lock:
        bookings_qs = _lock_queryset_if_possible(bookings_qs, using)

    if bookings_qs.exists():
        return ValidationResult.fail(
            BookingErrorKind.ROOM_UNAVAILABLE,
            "Room is already booked for this time slot",
        )

    if list_overlapping_maintenance(room_id, start_at, end_at, using=using).exists():
        return ValidationResult.fail(
            BookingErrorKind.MAINTENANCE_CONFLICT,
            "Room has scheduled maintenance during this time slot",
        )

    return ValidationResult.ok()


def is_room_available(room_id, start_at: datetime, end_at: datetime, *, using: str = DEFAULT_DB_ALIAS) -> bool:
    """Read-only availability query for presentation layers."""

    return check_room_availability(room_id, start_at, end_at, using=using).valid
