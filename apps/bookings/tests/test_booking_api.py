"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.bookings.domain.errors import BookingStorageError
from apps.bookings.models import Booking
from apps.rooms.models import MaintenanceBlock

from .factories import make_booking, make_room, make_rules, make_user


def tomorrow_at(hour: int, minute: int = 0) -> datetime:
    day = (timezone.now() + timedelta(days=1)).astimezone(dt_timezone.utc)
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, listing and cancellation over HTTP."""

    def setUp(self) -> None:
        make_rules()
        self.user = make_user()
        self.other = make_user("bob")
        self.admin = make_user("root", is_staff=True)
        self.room = make_room()
        self.client.force_authenticate(self.user)
        self.list_url = reverse("booking-list")

    def _payload(self, start: datetime, end: datetime, room=None) -> dict:
        return {
            "room": (room or self.room).id,
            "start_at": start.isoformat(),
            "end_at": end.isoformat(),
        }

    def test_user_can_create_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(tomorrow_at(9), tomorrow_at(9, 30)), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "confirmed")
        self.assertEqual(response.data["room_name"], self.room.name)
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.user)

    def test_audit_entry_after_create(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.list_url, self._payload(tomorrow_at(9), tomorrow_at(10)), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(AuditLog.objects.filter(action="booking_created", entity_id=str(response.data["id"])).exists())

    def test_prevent_double_booking_on_overlap(self) -> None:
        first = self.client.post(self.list_url, self._payload(tomorrow_at(9), tomorrow_at(10)), format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)

        self.client.force_authenticate(self.other)
        conflict = self.client.post(self.list_url, self._payload(tomorrow_at(9, 30), tomorrow_at(10, 30)), format="json")

        self.assertEqual(conflict.status_code, status.HTTP_409_CONFLICT, conflict.data)
        self.assertEqual(conflict.data["error"]["code"], "ROOM_UNAVAILABLE")
        self.assertEqual(conflict.data["path"], self.list_url)
        self.assertIn("timestamp", conflict.data)

    def test_error_statuses(self) -> None:
        MaintenanceBlock.objects.create(room=self.room, start_at=tomorrow_at(14), end_at=tomorrow_at(15))
        cases = [
            (self._payload(tomorrow_at(7, 45), tomorrow_at(8, 15)), 400, "OUTSIDE_OPERATING_HOURS"),
            (self._payload(tomorrow_at(9, 5), tomorrow_at(9, 35)), 400, "INVALID_TIME_SLOT"),
            (self._payload(tomorrow_at(10), tomorrow_at(9)), 400, "INVALID_TIME_RANGE"),
            ({**self._payload(tomorrow_at(9), tomorrow_at(10)), "room": 999_999}, 404, "ROOM_NOT_FOUND"),
            (self._payload(tomorrow_at(14), tomorrow_at(15)), 409, "MAINTENANCE_CONFLICT"),
        ]
        for payload, expected_status, code in cases:
            with self.subTest(code=code):
                response = self.client.post(self.list_url, payload, format="json")
                self.assertEqual(response.status_code, expected_status, response.data)
                self.assertEqual(response.data["error"]["code"], code)

    def test_request_shape_errors(self) -> None:
        response = self.client.post(self.list_url, {"room": self.room.id, "start_at": "soon"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "INVALID_INPUT")
        self.assertIn("start_at", response.data["error"]["message"])

    def test_fourth_active_booking_conflicts(self) -> None:
        for hour in (9, 11, 13):
            make_booking(self.user, self.room, tomorrow_at(hour), tomorrow_at(hour + 1))

        response = self.client.post(self.list_url, self._payload(tomorrow_at(15), tomorrow_at(16)), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "MAX_ACTIVE_BOOKINGS_EXCEEDED")

    def test_storage_failure_is_internal_error(self) -> None:
        with mock.patch(
            "apps.bookings.application.command_handlers.check_room_availability",
            side_effect=BookingStorageError("down"),
        ):
            response = self.client.post(self.list_url, self._payload(tomorrow_at(9), tomorrow_at(10)), format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"]["code"], "INTERNAL_ERROR")

    def test_authentication_required(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.list_url, self._payload(tomorrow_at(9), tomorrow_at(10)), format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_my_and_active_bookings(self) -> None:
        past = make_booking(self.user, self.room, timezone.now() - timedelta(days=2), timezone.now() - timedelta(days=2) + timedelta(hours=1))
        later = make_booking(self.user, self.room, tomorrow_at(13), tomorrow_at(14))
        sooner = make_booking(self.user, self.room, tomorrow_at(9), tomorrow_at(10))
        make_booking(self.user, self.room, tomorrow_at(11), tomorrow_at(12), status=Booking.Status.CANCELLED)
        make_booking(self.other, self.room, tomorrow_at(15), tomorrow_at(16))

        my = self.client.get(reverse("booking-my"))
        active = self.client.get(reverse("booking-active"))

        self.assertEqual(my.status_code, status.HTTP_200_OK)
        self.assertEqual(len(my.data), 4)
        self.assertEqual(my.data[0]["id"], later.id)
        self.assertEqual(my.data[-1]["id"], past.id)
        self.assertEqual([item["id"] for item in active.data], [sooner.id, later.id])

    def test_owner_cancels_via_action_and_delete(self) -> None:
        first = make_booking(self.user, self.room, tomorrow_at(9), tomorrow_at(10))
        second = make_booking(self.user, self.room, tomorrow_at(11), tomorrow_at(12))

        response = self.client.post(reverse("booking-cancel", args=[first.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "cancelled")

        response = self.client.delete(reverse("booking-detail", args=[second.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        again = self.client.post(reverse("booking-cancel", args=[first.id]))
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["error"]["code"], "ALREADY_CANCELLED")

    def test_cancel_permissions(self) -> None:
        booking = make_booking(self.other, self.room, tomorrow_at(9), tomorrow_at(10))

        forbidden = self.client.post(reverse("booking-cancel", args=[booking.id]))
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(forbidden.data["error"]["code"], "FORBIDDEN")

        missing = self.client.post(reverse("booking-cancel", args=[999_999]))
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.admin)
        allowed = self.client.post(reverse("booking-cancel", args=[booking.id]))
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)

    def test_past_booking_cannot_be_cancelled(self) -> None:
        start = timezone.now() - timedelta(hours=3)
        booking = make_booking(self.user, self.room, start, start + timedelta(hours=1))

        response = self.client.post(reverse("booking-cancel", args=[booking.id]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "PAST_BOOKING")

    def test_validate_endpoint(self) -> None:
        url = reverse("booking-validate")

        ok = self.client.post(url, {"start_at": tomorrow_at(9).isoformat(), "end_at": tomorrow_at(10).isoformat()}, format="json")
        self.assertEqual(ok.status_code, status.HTTP_200_OK)
        self.assertEqual(ok.data, {"valid": True})

        short = self.client.post(url, {"start_at": tomorrow_at(9).isoformat(), "end_at": tomorrow_at(9, 15).isoformat()}, format="json")
        self.assertEqual(short.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(short.data["error"]["code"], "DURATION_TOO_SHORT")
        self.assertFalse(Booking.objects.exists())

    def test_availability_endpoint(self) -> None:
        booking = make_booking(self.other, self.room, tomorrow_at(9), tomorrow_at(10))
        url = reverse("booking-availability")
        query = {"room": self.room.id, "start_at": tomorrow_at(9).isoformat(), "end_at": tomorrow_at(10).isoformat()}

        busy = self.client.get(url, query)
        self.assertEqual(busy.status_code, status.HTTP_200_OK)
        self.assertFalse(busy.data["available"])
        self.assertEqual(busy.data["reason"]["code"], "ROOM_UNAVAILABLE")

        self.client.force_authenticate(self.admin)
        self.client.post(reverse("booking-cancel", args=[booking.id]))

        free = self.client.get(url, query)
        self.assertTrue(free.data["available"])

    def test_admin_listing_with_filters_and_pagination(self) -> None:
        for hour in (9, 11, 13):
            make_booking(self.user, self.room, tomorrow_at(hour), tomorrow_at(hour + 1))
        make_booking(self.other, make_room("Vega"), tomorrow_at(9), tomorrow_at(10))

        forbidden = self.client.get(self.list_url)
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        everything = self.client.get(self.list_url)
        self.assertEqual(everything.status_code, status.HTTP_200_OK)
        self.assertEqual(everything.data["count"], 4)

        by_user = self.client.get(self.list_url, {"user": self.user.id, "page_size": 2})
        self.assertEqual(by_user.data["count"], 3)
        self.assertEqual(len(by_user.data["results"]), 2)
        self.assertIsNotNone(by_user.data["next"])

        by_room = self.client.get(self.list_url, {"room": self.room.id, "start_date": tomorrow_at(10).isoformat()})
        self.assertEqual(by_room.data["count"], 2)

        by_end = self.client.get(self.list_url, {"end_date": tomorrow_at(10).isoformat()})
        self.assertEqual(by_end.data["count"], 2)

    def test_admin_listing_rejects_bad_filters(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.list_url, {"start_date": "not-a-date"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "INVALID_INPUT")


class RuleConfigAPITests(APITestCase):
    def setUp(self) -> None:
        make_rules()
        self.url = reverse("booking-rules")
        self.admin = make_user("root", is_staff=True)

    def test_rules_are_public(self) -> None:
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["open_hour"], 8)
        self.assertIsNone(response.data["max_consecutive"])

    def test_only_admins_update_rules(self) -> None:
        self.client.force_authenticate(make_user())

        response = self.client.patch(self.url, {"open_hour": 7}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_patch_merges(self) -> None:
        self.client.force_authenticate(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(self.url, {"open_hour": 7, "cooldown_minutes": 15}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["open_hour"], 7)
        self.assertEqual(response.data["close_hour"], 22)
        self.assertEqual(response.data["cooldown_minutes"], 15)
        self.assertTrue(AuditLog.objects.filter(action="rules_updated", actor=self.admin).exists())

    def test_invalid_update_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.put(self.url, {"open_hour": 23}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "INVALID_HOURS")

    def test_unknown_field(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.patch(self.url, {"colour": 3}, format="json")

        self.assertEqual(response.data["error"]["code"], "UNKNOWN_RULE_FIELD")
