"""Read-only booking queries for presentation layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from django.db.models import QuerySet  # type: ignore

from apps.rooms.models import Room
from apps.rooms.selectors import list_maintenance_between, list_rooms

from .models import Booking
from .services import confirmed_bookings_between

AVAILABLE = "available"
UNAVAILABLE = "unavailable"
MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class RoomAvailability:
    room: Room
    availability_status: str


def list_user_bookings(user_id) -> QuerySet[Booking]:
    """Every booking of the user, newest start first."""

    return Booking.objects.select_related("room").filter(user_id=user_id).order_by("-start_at", "-id")


def list_active_bookings(user_id, now: datetime) -> QuerySet[Booking]:
    """Confirmed bookings of the user that have not ended, soonest first."""

    return (
        Booking.objects.select_related("room")
        .filter(user_id=user_id, status=Booking.Status.CONFIRMED, end_at__gt=now)
        .order_by("start_at", "id")
    )


def _availability_status(room: Room, booked: set, blocked: set) -> str:
    if room.status == Room.Status.MAINTENANCE or room.pk in blocked:
        return MAINTENANCE
    if not room.is_bookable or room.pk in booked:
        return UNAVAILABLE
    return AVAILABLE


def search_rooms(
    start_at: datetime,
    end_at: datetime,
    *,
    min_capacity: int | None = None,
    equipment=(),
) -> list[RoomAvailability]:
    """Label every matching room for ``[start_at, end_at)``.

    A room under maintenance, or with a maintenance block in the interval,
    is ``maintenance``; an archived room or one with an overlapping
    confirmed booking is ``unavailable``. Nothing is locked.
    """

    rooms = list_rooms(min_capacity=min_capacity, equipment=equipment)
    if not rooms:
        return []

    room_ids = [room.pk for room in rooms]
    booked = set(
        confirmed_bookings_between(start_at, end_at)
        .filter(room_id__in=room_ids)
        .values_list("room_id", flat=True)
    )
    blocked = set(
        list_maintenance_between(start_at, end_at)
        .filter(room_id__in=room_ids)
        .values_list("room_id", flat=True)
    )
    return [RoomAvailability(room, _availability_status(room, booked, blocked)) for room in rooms]
