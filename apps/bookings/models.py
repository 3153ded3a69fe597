"""Booking domain models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeRange

from .domain.lifecycle import BookingStatus
from .domain.rules import BookingRules

RULE_CONFIG_ID = 1


class Booking(models.Model):
    """A reservation of a room for a half-open interval ``[start_at, end_at)``."""

    class Status(models.TextChoices):
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        EXPIRED = BookingStatus.EXPIRED.value, _("Expired")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.CONFIRMED,
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_bookings",
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-start_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_at__gt=models.F("start_at")),
                name="booking_valid_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_at", "end_at"], name="booking_room_range_idx"),
            models.Index(fields=["user"], name="booking_user_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["start_at"], name="booking_start_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} of room {self.room_id} ({self.status})"

    @property
    def period(self) -> TimeRange:
        return TimeRange(self.start_at, self.end_at)


class RuleConfig(models.Model):
    """The single active booking policy (always stored with primary key 1)."""

    id = models.PositiveSmallIntegerField(primary_key=True, default=RULE_CONFIG_ID, editable=False)
    open_hour = models.PositiveSmallIntegerField()
    close_hour = models.PositiveSmallIntegerField()
    slot_interval_minutes = models.PositiveIntegerField()
    min_duration_minutes = models.PositiveIntegerField()
    max_duration_minutes = models.PositiveIntegerField()
    max_active_bookings = models.PositiveIntegerField()
    max_consecutive = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Empty means no limit on back-to-back bookings."),
    )
    cooldown_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Empty means no cooldown between bookings."),
    )
    min_notice_minutes = models.PositiveIntegerField()
    max_days_ahead = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    DEFAULTS = {
        "open_hour": 8,
        "close_hour": 22,
        "slot_interval_minutes": 15,
        "min_duration_minutes": 30,
        "max_duration_minutes": 120,
        "max_active_bookings": 3,
        "max_consecutive": None,
        "cooldown_minutes": None,
        "min_notice_minutes": 30,
        "max_days_ahead": 14,
    }

    class Meta:
        verbose_name = _("Booking rules")
        verbose_name_plural = _("Booking rules")

    def __str__(self) -> str:
        return f"Booking rules {self.open_hour}:00-{self.close_hour}:00"

    def to_rules(self) -> BookingRules:
        return BookingRules(**{name: getattr(self, name) for name in BookingRules.field_names()})
