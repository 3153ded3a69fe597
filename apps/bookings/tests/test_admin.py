"""The Django admin cannot bypass admission or rule validation."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.audit.models import AuditLog
from apps.bookings.application.rule_config import get_rules
from apps.bookings.domain.rules import BookingRules
from apps.bookings.models import RULE_CONFIG_ID, Booking, RuleConfig

from .factories import at, make_booking, make_room, make_rules, make_user


def make_superuser():
    return get_user_model().objects.create_superuser(username="root", email="root@example.com", password="x")


class BookingAdminTests(TestCase):
    def setUp(self) -> None:
        make_rules()
        self.admin = make_superuser()
        self.client.force_login(self.admin)
        self.room = make_room()
        self.owner = make_user()
        self.other = make_user("bob")
        self.cancelled = make_booking(self.owner, self.room, at(9), at(10), status=Booking.Status.CANCELLED)
        self.confirmed = make_booking(self.other, self.room, at(9), at(10))

    def test_change_form_cannot_reconfirm_or_move_a_booking(self) -> None:
        url = reverse("admin:bookings_booking_change", args=[self.cancelled.pk])

        response = self.client.post(url, {
            "user": self.other.pk,
            "room": self.room.pk,
            "start_at_0": "2030-01-07",
            "start_at_1": "11:00:00",
            "end_at_0": "2030-01-07",
            "end_at_1": "12:00:00",
            "status": Booking.Status.CONFIRMED,
        })

        self.assertEqual(response.status_code, 302)
        self.cancelled.refresh_from_db()
        self.assertEqual(self.cancelled.status, Booking.Status.CANCELLED)
        self.assertEqual(self.cancelled.user_id, self.owner.pk)
        self.assertEqual(self.cancelled.start_at, at(9))
        self.assertEqual(
            Booking.objects.filter(
                room=self.room,
                status=Booking.Status.CONFIRMED,
                start_at__lt=at(10),
                end_at__gt=at(9),
            ).count(),
            1,
        )

    def test_bookings_cannot_be_added_or_deleted(self) -> None:
        self.assertEqual(self.client.get(reverse("admin:bookings_booking_add")).status_code, 403)
        self.assertEqual(
            self.client.post(reverse("admin:bookings_booking_delete", args=[self.confirmed.pk]), {"post": "yes"}).status_code,
            403,
        )
        self.assertTrue(Booking.objects.filter(pk=self.confirmed.pk).exists())

    def test_cancel_action_goes_through_cancellation(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("admin:bookings_booking_changelist"), {
                "action": "cancel_bookings",
                "_selected_action": [self.confirmed.pk, self.cancelled.pk],
            })

        self.assertEqual(response.status_code, 302)
        self.confirmed.refresh_from_db()
        self.assertEqual(self.confirmed.status, Booking.Status.CANCELLED)
        self.assertEqual(self.confirmed.cancelled_by_id, self.admin.pk)
        entry = AuditLog.objects.get(action="booking_cancelled")
        self.assertEqual(entry.entity_id, str(self.confirmed.pk))
        self.assertEqual(entry.actor_id, self.admin.pk)


class RuleConfigAdminTests(TestCase):
    def setUp(self) -> None:
        make_rules()
        self.admin = make_superuser()
        self.client.force_login(self.admin)
        self.url = reverse("admin:bookings_ruleconfig_change", args=[RULE_CONFIG_ID])

    def form_data(self, **overrides) -> dict:
        values = {**RuleConfig.DEFAULTS, **overrides}
        return {name: "" if values[name] is None else values[name] for name in BookingRules.field_names()}

    def test_inconsistent_rules_are_rejected(self) -> None:
        response = self.client.post(self.url, self.form_data(
            open_hour=22,
            close_hour=8,
            min_duration_minutes=200,
            max_duration_minutes=30,
        ))

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context["adminform"].form.errors)
        rules = get_rules()
        self.assertEqual((rules.open_hour, rules.close_hour), (8, 22))
        self.assertEqual((rules.min_duration_minutes, rules.max_duration_minutes), (30, 120))
        self.assertFalse(AuditLog.objects.exists())

    def test_valid_change_is_saved_and_audited(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, self.form_data(open_hour=7, max_consecutive=2))

        self.assertEqual(response.status_code, 302)
        rules = get_rules()
        self.assertEqual(rules.open_hour, 7)
        self.assertEqual(rules.max_consecutive, 2)
        entry = AuditLog.objects.get(action="rules_updated")
        self.assertEqual(entry.actor_id, self.admin.pk)
        self.assertEqual(entry.payload["changes"], {"open_hour": 7, "max_consecutive": 2})
        self.assertEqual(entry.payload["before"]["open_hour"], 8)
