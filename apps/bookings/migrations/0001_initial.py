import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rooms", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="RuleConfig",
            fields=[
                ("id", models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ("open_hour", models.PositiveSmallIntegerField()),
                ("close_hour", models.PositiveSmallIntegerField()),
                ("slot_interval_minutes", models.PositiveIntegerField()),
                ("min_duration_minutes", models.PositiveIntegerField()),
                ("max_duration_minutes", models.PositiveIntegerField()),
                ("max_active_bookings", models.PositiveIntegerField()),
                (
                    "max_consecutive",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Empty means no limit on back-to-back bookings.",
                        null=True,
                    ),
                ),
                (
                    "cooldown_minutes",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Empty means no cooldown between bookings.",
                        null=True,
                    ),
                ),
                ("min_notice_minutes", models.PositiveIntegerField()),
                ("max_days_ahead", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Booking rules",
                "verbose_name_plural": "Booking rules",
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_at", models.DateTimeField()),
                ("end_at", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("expired", "Expired"),
                        ],
                        default="confirmed",
                        max_length=16,
                    ),
                ),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cancelled_bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="rooms.room",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-start_at"],
                "indexes": [
                    models.Index(fields=["room", "start_at", "end_at"], name="booking_room_range_idx"),
                    models.Index(fields=["user"], name="booking_user_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                    models.Index(fields=["start_at"], name="booking_start_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_at__gt=models.F("start_at")),
                        name="booking_valid_range",
                    ),
                ],
            },
        ),
    ]
