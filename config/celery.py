import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("room_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expire elapsed confirmed bookings - hourly, on the hour
    "expire-elapsed-bookings": {
        "task": "bookings.expire_elapsed_bookings",
        "schedule": crontab(minute=0),
        "options": {"expires": 50 * 60},
    },
}

app.conf.timezone = "UTC"
