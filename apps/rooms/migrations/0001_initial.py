import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("capacity", models.PositiveIntegerField()),
                (
                    "equipment",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="List of equipment tags, e.g. projector, whiteboard.",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("maintenance", "Under maintenance"),
                            ("archived", "Archived"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["status", "name"],
                "indexes": [
                    models.Index(fields=["status"], name="rooms_room_status_idx"),
                    models.Index(fields=["capacity"], name="rooms_room_capacity_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MaintenanceBlock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_at", models.DateTimeField()),
                ("end_at", models.DateTimeField()),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="maintenance_blocks",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Maintenance block",
                "verbose_name_plural": "Maintenance blocks",
                "ordering": ["start_at"],
                "indexes": [
                    models.Index(fields=["room", "start_at", "end_at"], name="rooms_maint_room_range_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_at__gt=models.F("start_at")),
                        name="maintenance_block_valid_range",
                    ),
                ],
            },
        ),
    ]
