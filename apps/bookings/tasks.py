"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .application.command_handlers import expire_elapsed

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_elapsed_bookings")
def expire_elapsed_bookings() -> dict[str, int]:
    """
    Expire confirmed bookings whose interval has ended.

    Runs hourly through Celery Beat. Running it twice in a row is harmless:
    the second run finds nothing to expire.

    Returns:
        dict: {"expired": number of bookings moved to EXPIRED}
    """
    expired_count = expire_elapsed()

    if expired_count > 0:
        logger.info(f"Expired {expired_count} elapsed bookings")

    return {"expired": expired_count}
