"""Room and maintenance models.

Rooms and their maintenance windows are managed through the Django admin;
the booking engine only reads them.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeRange


class Room(models.Model):
    """A bookable meeting room."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        MAINTENANCE = "maintenance", _("Under maintenance")
        ARCHIVED = "archived", _("Archived")

    name = models.CharField(max_length=255, unique=True)
    capacity = models.PositiveIntegerField()
    equipment = models.JSONField(
        default=list,
        blank=True,
        help_text=_("List of equipment tags, e.g. projector, whiteboard."),
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["status", "name"]
        indexes = [
            models.Index(fields=["status"], name="rooms_room_status_idx"),
            models.Index(fields=["capacity"], name="rooms_room_capacity_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_status_display()})"

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.ACTIVE


class MaintenanceBlock(models.Model):
    """A scheduled window during which a room cannot be booked."""

    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="maintenance_blocks",
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Maintenance block")
        verbose_name_plural = _("Maintenance blocks")
        ordering = ["start_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_at__gt=models.F("start_at")),
                name="maintenance_block_valid_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_at", "end_at"], name="rooms_maint_room_range_idx"),
        ]

    def __str__(self) -> str:
        return f"Maintenance of {self.room_id}: {self.period}"

    @property
    def period(self) -> TimeRange:
        return TimeRange(self.start_at, self.end_at)
