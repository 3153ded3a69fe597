"""Fair-usage limits per user: active bookings, back-to-back chains and cooldown.

These checks only read committed bookings and take no locks. They accept a
database alias so a caller can run them on the connection (and inside the
transaction) of its choice.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from django.db import DEFAULT_DB_ALIAS  # type: ignore

from .domain.errors import BookingErrorKind, ValidationResult
from .domain.rules import BookingRules
from .models import Booking

logger = logging.getLogger(__name__)


def _confirmed_bookings(user_id, using: str):
    return Booking.objects.using(using).filter(user_id=user_id, status=Booking.Status.CONFIRMED)


def count_active_bookings(user_id, now: datetime, *, using: str = DEFAULT_DB_ALIAS) -> int:
    """Confirmed bookings of the user that have not ended yet."""

    return _confirmed_bookings(user_id, using).filter(end_at__gt=now).count()


def validate_max_active_bookings(
    user_id,
    rules: BookingRules,
    now: datetime,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> ValidationResult:
    active = count_active_bookings(user_id, now, using=using)
    if active >= rules.max_active_bookings:
        return ValidationResult.fail(
            BookingErrorKind.MAX_ACTIVE_BOOKINGS_EXCEEDED,
            f"Maximum active bookings limit ({rules.max_active_bookings}) reached",
        )
    return ValidationResult.ok()


def consecutive_chain_length(
    user_id,
    room_id,
    start_at: datetime,
    limit: int,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> int:
    """Length of the back-to-back chain of bookings ending exactly at ``start_at``.

    Walks backwards one booking at a time: a booking belongs to the chain
    when it ends exactly where the next one starts. Any gap ends the chain.
    The walk stops after ``limit`` links so the cost is bounded by the cap.
    """

    bookings = _confirmed_bookings(user_id, using).filter(room_id=room_id)
    length = 0
    boundary = start_at
    while length < limit:
        previous_start = (
            bookings.filter(end_at=boundary)
            .order_by("start_at")
            .values_list("start_at", flat=True)
            .first()
        )
        if previous_start is None:
            break
        length += 1
        boundary = previous_start
    return length


def validate_consecutive_bookings(
    user_id,
    room_id,
    start_at: datetime,
    rules: BookingRules,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> ValidationResult:
    if not rules.max_consecutive:
        return ValidationResult.ok()

    length = consecutive_chain_length(user_id, room_id, start_at, rules.max_consecutive, using=using)
    if length >= rules.max_consecutive:
        return ValidationResult.fail(
            BookingErrorKind.MAX_CONSECUTIVE_EXCEEDED,
            f"Maximum consecutive bookings limit ({rules.max_consecutive}) reached for this room",
        )
    return ValidationResult.ok()


def validate_cooldown(
    user_id,
    rules: BookingRules,
    now: datetime,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> ValidationResult:
    if not rules.cooldown_minutes:
        return ValidationResult.ok()

    last_created_at = (
        _confirmed_bookings(user_id, using)
        .order_by("-created_at")
        .values_list("created_at", flat=True)
        .first()
    )
    if last_created_at is None:
        return ValidationResult.ok()

    cooldown_ends_at = last_created_at + timedelta(minutes=rules.cooldown_minutes)
    if now < cooldown_ends_at:
        remaining = math.ceil((cooldown_ends_at - now) / timedelta(minutes=1))
        return ValidationResult.fail(
            BookingErrorKind.COOLDOWN_ACTIVE,
            f"Cooldown period active. Please wait {remaining} more minute(s) "
            "before creating another booking",
        )
    return ValidationResult.ok()


def validate_fair_usage(
    user_id,
    room_id,
    start_at: datetime,
    rules: BookingRules,
    now: datetime,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> ValidationResult:
    """Active cap, then consecutive cap, then cooldown; first failure wins."""

    checks = (
        lambda: validate_max_active_bookings(user_id, rules, now, using=using),
        lambda: validate_consecutive_bookings(user_id, room_id, start_at, rules, using=using),
        lambda: validate_cooldown(user_id, rules, now, using=using),
    )
    for check in checks:
        result = check()
        if not result.valid:
            logger.info(f"Fair-usage check failed for user {user_id}: {result.kind.value}")
            return result
    return ValidationResult.ok()
