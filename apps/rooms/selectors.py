"""Read-only room lookups used by the booking engine."""

from __future__ import annotations

from datetime import datetime

from django.db import DEFAULT_DB_ALIAS, transaction  # type: ignore
from django.db.models import QuerySet  # type: ignore

from .models import MaintenanceBlock, Room


def get_room(room_id, *, lock: bool = False, using: str = DEFAULT_DB_ALIAS) -> Room | None:
    """Return the room or ``None``.

    With ``lock=True`` inside an atomic block the row is read with
    ``SELECT ... FOR UPDATE`` so concurrent admissions for the same room
    queue behind each other. Backends without row locks ignore it.
    """

    queryset = Room.objects.using(using).filter(pk=room_id)
    if lock and transaction.get_connection(using).in_atomic_block:
        queryset = queryset.select_for_update()
    return queryset.first()


def list_maintenance_between(
    start_at: datetime,
    end_at: datetime,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> QuerySet[MaintenanceBlock]:
    """Maintenance blocks of any room intersecting ``[start_at, end_at)``."""

    return MaintenanceBlock.objects.using(using).filter(
        start_at__lt=end_at,
        end_at__gt=start_at,
    )


def list_overlapping_maintenance(
    room_id,
    start_at: datetime,
    end_at: datetime,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> QuerySet[MaintenanceBlock]:
    """Maintenance blocks of the room intersecting ``[start_at, end_at)``."""

    return list_maintenance_between(start_at, end_at, using=using).filter(room_id=room_id)


def list_rooms(*, min_capacity: int | None = None, equipment=()) -> list[Room]:
    """Rooms in listing order with at least ``min_capacity`` seats and every tag in ``equipment``.

    Equipment is a JSON list; the tag match runs in Python because SQLite
    has no JSON containment lookup.
    """

    queryset = Room.objects.all()
    if min_capacity is not None:
        queryset = queryset.filter(capacity__gte=min_capacity)

    wanted = set(equipment)
    if not wanted:
        return list(queryset)
    return [room for room in queryset if wanted.issubset(room.equipment or ())]
