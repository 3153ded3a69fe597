"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.utils import timezone  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.pagination import PageNumberPagination  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.application.message_bus import message_bus

from .application.command_handlers import CancelBookingCommand, CreateBookingCommand
from .application.rule_config import get_rule_config, get_rules, update_rules
from .domain.errors import BookingRejected, BookingStorageError, RuleConfigError
from .domain.rules import validate_booking_request
from .filters import BookingFilterSet
from .models import Booking
from .responses import (
    internal_error_response,
    rejection_response,
    rule_error_response,
    validation_error_response,
)
from .selectors import list_active_bookings, list_user_bookings, search_rooms
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCreateSerializer,
    BookingIntervalSerializer,
    BookingSerializer,
    RoomAvailabilitySerializer,
    RoomSearchQuerySerializer,
    RuleConfigSerializer,
)
from .services import check_room_availability

logger = logging.getLogger(__name__)


class BookingPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 100


class BookingViewSet(viewsets.GenericViewSet):
    """Create, list and cancel room bookings."""

    queryset = Booking.objects.select_related("room", "user").order_by("-start_at", "-id")
    serializer_class = BookingSerializer
    pagination_class = BookingPagination
    lookup_value_regex = r"\d+"
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.IsAuthenticated(), permissions.IsAdminUser()]
        return super().get_permissions()

    def _cancel(self, request, pk):  # type: ignore
        command = CancelBookingCommand(
            booking_id=pk,
            caller_id=request.user.id,
            is_admin=request.user.is_staff,
        )
        try:
            booking = message_bus.handle_command(command)
        except BookingRejected as exc:
            return rejection_response(request, exc.kind, exc.message)
        except BookingStorageError:
            return internal_error_response(request)
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    def list(self, request, *args, **kwargs):  # type: ignore
        """Admin listing with filters and page-number pagination."""
        filterset = BookingFilterSet(request.query_params, queryset=self.get_queryset(), request=request)
        if not filterset.is_valid():
            return validation_error_response(request, filterset.errors)

        page = self.paginate_queryset(filterset.qs)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(request, serializer.errors)

        data = serializer.validated_data
        command = CreateBookingCommand(
            user_id=request.user.id,
            room_id=data["room"],
            start_at=data["start_at"],
            end_at=data["end_at"],
        )
        try:
            booking = message_bus.handle_command(command)
        except BookingRejected as exc:
            return rejection_response(request, exc.kind, exc.message)
        except RuleConfigError as exc:
            return rule_error_response(request, exc)
        except BookingStorageError:
            return internal_error_response(request)

        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):  # type: ignore
        return self._cancel(request, pk)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._cancel(request, pk)

    @action(detail=False, methods=["get"])
    def my(self, request):  # type: ignore
        bookings = list_user_bookings(request.user.id)
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=False, methods=["get"])
    def active(self, request):  # type: ignore
        bookings = list_active_bookings(request.user.id, timezone.now())
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=False, methods=["post"])
    def validate(self, request):  # type: ignore
        """Run the time window, duration and horizon checks without booking."""
        serializer = BookingIntervalSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(request, serializer.errors)

        try:
            rules = get_rules()
        except RuleConfigError as exc:
            return rule_error_response(request, exc)

        data = serializer.validated_data
        result = validate_booking_request(data["start_at"], data["end_at"], rules, timezone.now())
        if not result.valid:
            return rejection_response(request, result.kind, result.message)
        return Response({"valid": True})

    @action(detail=False, methods=["get"])
    def availability(self, request):  # type: ignore
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return validation_error_response(request, serializer.errors)

        data = serializer.validated_data
        if data["start_at"] >= data["end_at"]:
            return validation_error_response(request, {"end_at": ["must be after start_at"]})

        result = check_room_availability(data["room"], data["start_at"], data["end_at"])
        body = {
            "room": data["room"],
            "start_at": data["start_at"],
            "end_at": data["end_at"],
            "available": result.valid,
        }
        if not result.valid:
            body["reason"] = {"code": result.kind.value, "message": result.message}
        return Response(body)


class RuleConfigView(APIView):
    """Read the booking rules; administrators may change them."""

    def get_permissions(self):  # type: ignore
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), permissions.IsAdminUser()]

    def get(self, request):  # type: ignore
        try:
            config = get_rule_config()
        except RuleConfigError as exc:
            return rule_error_response(request, exc)
        return Response(RuleConfigSerializer(config).data)

    def put(self, request):  # type: ignore
        return self._update(request)

    def patch(self, request):  # type: ignore
        return self._update(request)

    def _update(self, request):  # type: ignore
        if not isinstance(request.data, dict):
            return validation_error_response(request, {"non_field_errors": ["Expected a JSON object"]})

        try:
            config = update_rules(dict(request.data), actor_id=request.user.id)
        except RuleConfigError as exc:
            return rule_error_response(request, exc)

        logger.info(f"Rules updated via API by user {request.user.id}")
        return Response(RuleConfigSerializer(config).data)


class RoomSearchView(APIView):
    """Every room matching capacity and equipment, labelled for an interval."""

    def get(self, request):  # type: ignore
        serializer = RoomSearchQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return validation_error_response(request, serializer.errors)

        data = serializer.validated_data
        if data["start_at"] >= data["end_at"]:
            return validation_error_response(request, {"end_at": ["must be after start_at"]})

        results = search_rooms(
            data["start_at"],
            data["end_at"],
            min_capacity=data.get("min_capacity"),
            equipment=data.get("equipment", ()),
        )
        return Response(RoomAvailabilitySerializer(results, many=True).data)
