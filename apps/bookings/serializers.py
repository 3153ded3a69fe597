"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.rules import BookingRules
from .models import Booking, RuleConfig


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    user_id = serializers.ReadOnlyField(source="user.id")
    room_id = serializers.ReadOnlyField(source="room.id")
    room_name = serializers.ReadOnlyField(source="room.name")
    cancelled_by_id = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "room_id",
            "room_name",
            "start_at",
            "end_at",
            "status",
            "cancelled_at",
            "cancelled_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingIntervalSerializer(serializers.Serializer):
    """A proposed interval ``[start_at, end_at)``."""

    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()


class BookingCreateSerializer(BookingIntervalSerializer):
    room = serializers.IntegerField(min_value=1)


class AvailabilityQuerySerializer(BookingCreateSerializer):
    """Query string of the availability endpoint."""


class RoomSearchQuerySerializer(BookingIntervalSerializer):
    """Query string of the room search; repeat ``equipment`` for several tags."""

    min_capacity = serializers.IntegerField(min_value=0, required=False)
    equipment = serializers.ListField(child=serializers.CharField(), required=False)


class RoomAvailabilitySerializer(serializers.Serializer):
    id = serializers.IntegerField(source="room.id")
    name = serializers.CharField(source="room.name")
    capacity = serializers.IntegerField(source="room.capacity")
    equipment = serializers.JSONField(source="room.equipment")
    availability_status = serializers.CharField()


class RuleConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = RuleConfig
        fields = [*BookingRules.field_names(), "updated_at"]
        read_only_fields = fields
