"""Error bodies and HTTP statuses for booking API responses."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore

from .domain.errors import BookingErrorKind, RuleConfigError

ERROR_STATUS: dict[BookingErrorKind, int] = {
    BookingErrorKind.INVALID_TIME_RANGE: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.OUTSIDE_OPERATING_HOURS: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.INVALID_TIME_SLOT: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.DURATION_TOO_SHORT: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.DURATION_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.TOO_SOON: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.TOO_FAR_AHEAD: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.MAX_ACTIVE_BOOKINGS_EXCEEDED: status.HTTP_409_CONFLICT,
    BookingErrorKind.MAX_CONSECUTIVE_EXCEEDED: status.HTTP_409_CONFLICT,
    BookingErrorKind.COOLDOWN_ACTIVE: status.HTTP_409_CONFLICT,
    BookingErrorKind.ROOM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingErrorKind.ROOM_ARCHIVED: status.HTTP_409_CONFLICT,
    BookingErrorKind.ROOM_MAINTENANCE: status.HTTP_409_CONFLICT,
    BookingErrorKind.ROOM_UNAVAILABLE: status.HTTP_409_CONFLICT,
    BookingErrorKind.MAINTENANCE_CONFLICT: status.HTTP_409_CONFLICT,
    BookingErrorKind.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    BookingErrorKind.ALREADY_CANCELLED: status.HTTP_409_CONFLICT,
    BookingErrorKind.PAST_BOOKING: status.HTTP_409_CONFLICT,
    BookingErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
}

INVALID_INPUT = "INVALID_INPUT"
INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(request, code: str, message: str, http_status: int) -> Response:
    """``{"error": {"code", "message"}, "timestamp", "path"}`` with the given status."""

    return Response(
        {
            "error": {"code": code, "message": message},
            "timestamp": timezone.now().isoformat(),
            "path": request.path,
        },
        status=http_status,
    )


def rejection_response(request, kind: BookingErrorKind, message: str) -> Response:
    return error_response(request, kind.value, message, ERROR_STATUS.get(kind, status.HTTP_400_BAD_REQUEST))


def rule_error_response(request, exc: RuleConfigError) -> Response:
    http_status = status.HTTP_404_NOT_FOUND if exc.code == "RULES_NOT_FOUND" else status.HTTP_400_BAD_REQUEST
    return error_response(request, exc.code, exc.message, http_status)


def validation_error_response(request, errors) -> Response:
    """Request-shape failures from a serializer."""

    message = "; ".join(
        f"{field}: {' '.join(str(item) for item in (details if isinstance(details, list) else [details]))}"
        for field, details in errors.items()
    )
    return error_response(request, INVALID_INPUT, message or "Invalid request", status.HTTP_400_BAD_REQUEST)


def internal_error_response(request) -> Response:
    return error_response(
        request,
        INTERNAL_ERROR,
        "An internal error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
