"""Builders shared by the booking tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.contrib.auth import get_user_model

from apps.bookings.models import RULE_CONFIG_ID, Booking, RuleConfig
from apps.rooms.models import Room

# Sunday 09:00 UTC; bookings below are placed on the following Monday.
NOW = datetime(2030, 1, 6, 9, 0, tzinfo=timezone.utc)
TOMORROW = datetime(2030, 1, 7, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, *, day: datetime = TOMORROW) -> datetime:
    return day + timedelta(hours=hour, minutes=minute)


def make_rules(**overrides) -> RuleConfig:
    values = dict(RuleConfig.DEFAULTS)
    values.update(overrides)
    config, _ = RuleConfig.objects.update_or_create(pk=RULE_CONFIG_ID, defaults=values)
    return config


def make_user(username: str = "alice", *, is_staff: bool = False):
    return get_user_model().objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="Secret123!",
        is_staff=is_staff,
    )


def make_room(name: str = "Orion", *, status: str = Room.Status.ACTIVE, capacity: int = 6) -> Room:
    return Room.objects.create(name=name, capacity=capacity, equipment=["projector"], status=status)


def make_booking(user, room, start_at: datetime, end_at: datetime, *, status=Booking.Status.CONFIRMED,
                 created_at: datetime | None = None) -> Booking:
    return Booking.objects.create(
        user=user,
        room=room,
        start_at=start_at,
        end_at=end_at,
        status=status,
        created_at=created_at or NOW - timedelta(days=1),
    )
