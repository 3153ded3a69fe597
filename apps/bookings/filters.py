"""FilterSet definitions for the admin booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filter bookings by owner, room, status and interval bounds."""

    user = django_filters.NumberFilter(field_name="user_id", lookup_expr="exact")
    room = django_filters.NumberFilter(field_name="room_id", lookup_expr="exact")
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    start_date = django_filters.IsoDateTimeFilter(field_name="start_at", lookup_expr="gte")
    end_date = django_filters.IsoDateTimeFilter(field_name="end_at", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["user", "room", "status", "start_date", "end_date"]
