"""
Booking Rule Validator

Pure checks of a proposed interval against the active rule configuration.
Nothing here touches the database; ``now`` is always passed in.

Rounding: minute-denominated bounds compare whole minutes (floored), the
day-denominated horizon compares the exact elapsed time. Because every bound
is an integer, flooring the lower bounds gives the same answer as an exact
comparison; only ``max_duration_minutes`` tolerates a trailing partial
minute.
"""

from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from apps.bookings.domain.errors import BookingErrorKind, RuleConfigError, ValidationResult

MINUTE = timedelta(minutes=1)
DAY = timedelta(days=1)


@dataclass(frozen=True)
class BookingRules:
    """Snapshot of the rule configuration used by the validators."""
    open_hour: int
    close_hour: int
    slot_interval_minutes: int
    min_duration_minutes: int
    max_duration_minutes: int
    max_active_bookings: int
    min_notice_minutes: int
    max_days_ahead: int
    max_consecutive: int | None = None
    cooldown_minutes: int | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


def _whole_minutes(delta: timedelta) -> int:
    return delta // MINUTE


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def validate_time_window(start_at: datetime, end_at: datetime, rules: BookingRules) -> ValidationResult:
    """Check ordering, operating hours and slot alignment (all in UTC)."""
    start_at, end_at = _as_utc(start_at), _as_utc(end_at)
    if start_at >= end_at:
        return ValidationResult.fail(
            BookingErrorKind.INVALID_TIME_RANGE,
            'Start time must be before end time',
        )

    start_minute_of_day = start_at.hour * 60 + start_at.minute
    if start_minute_of_day < rules.open_hour * 60 or start_minute_of_day > rules.close_hour * 60:
        return ValidationResult.fail(
            BookingErrorKind.OUTSIDE_OPERATING_HOURS,
            f'Booking must start between {rules.open_hour}:00 and {rules.close_hour}:00',
        )

    day_start = start_at.replace(hour=0, minute=0, second=0, microsecond=0)
    closes_at = day_start + timedelta(hours=rules.close_hour)
    if end_at > closes_at:
        return ValidationResult.fail(
            BookingErrorKind.OUTSIDE_OPERATING_HOURS,
            f'Booking must end by {rules.close_hour}:00',
        )

    if start_minute_of_day % rules.slot_interval_minutes or start_at.second or start_at.microsecond:
        return ValidationResult.fail(
            BookingErrorKind.INVALID_TIME_SLOT,
            f'Start time must align to {rules.slot_interval_minutes}-minute intervals',
        )

    return ValidationResult.ok()


def validate_duration(start_at: datetime, end_at: datetime, rules: BookingRules) -> ValidationResult:
    """Check the booking length; both bounds are inclusive."""
    duration_minutes = _whole_minutes(end_at - start_at)

    if duration_minutes < rules.min_duration_minutes:
        return ValidationResult.fail(
            BookingErrorKind.DURATION_TOO_SHORT,
            f'Booking duration must be at least {rules.min_duration_minutes} minutes',
        )

    if duration_minutes > rules.max_duration_minutes:
        return ValidationResult.fail(
            BookingErrorKind.DURATION_TOO_LONG,
            f'Booking duration must not exceed {rules.max_duration_minutes} minutes',
        )

    return ValidationResult.ok()


def validate_horizon(start_at: datetime, rules: BookingRules, now: datetime) -> ValidationResult:
    """Check minimum notice and maximum days ahead relative to ``now``."""
    lead_time = start_at - now

    if _whole_minutes(lead_time) < rules.min_notice_minutes:
        return ValidationResult.fail(
            BookingErrorKind.TOO_SOON,
            f'Booking must be made at least {rules.min_notice_minutes} minutes in advance',
        )

    if lead_time / DAY > rules.max_days_ahead:
        return ValidationResult.fail(
            BookingErrorKind.TOO_FAR_AHEAD,
            f'Booking cannot be made more than {rules.max_days_ahead} days in advance',
        )

    return ValidationResult.ok()


def validate_booking_request(
    start_at: datetime,
    end_at: datetime,
    rules: BookingRules,
    now: datetime,
) -> ValidationResult:
    """Run time window, duration and horizon checks; first failure wins."""
    for result in (
        validate_time_window(start_at, end_at, rules),
        validate_duration(start_at, end_at, rules),
        validate_horizon(start_at, rules, now),
    ):
        if not result.valid:
            return result
    return ValidationResult.ok()


# ===== Rule configuration invariants =====

def validate_rule_values(values: Mapping[str, Any]) -> None:
    """
    Check the internal consistency of a complete rule configuration.

    Raises:
        RuleConfigError: with the code of the first violated invariant
    """
    open_hour = values.get('open_hour')
    close_hour = values.get('close_hour')

    if open_hour is not None and not 0 <= open_hour <= 23:
        raise RuleConfigError('INVALID_OPEN_HOUR', 'open_hour must be between 0 and 23')

    if close_hour is not None and not 0 <= close_hour <= 24:
        raise RuleConfigError('INVALID_CLOSE_HOUR', 'close_hour must be between 0 and 24')

    if open_hour is not None and close_hour is not None and open_hour >= close_hour:
        raise RuleConfigError('INVALID_HOURS', 'open_hour must be less than close_hour')

    slot = values.get('slot_interval_minutes')
    if slot is not None and slot <= 0:
        raise RuleConfigError('INVALID_TIME_SLOT_INTERVAL', 'slot_interval_minutes must be positive')

    min_duration = values.get('min_duration_minutes')
    max_duration = values.get('max_duration_minutes')
    if min_duration is not None and min_duration <= 0:
        raise RuleConfigError('INVALID_MIN_DURATION', 'min_duration_minutes must be positive')

    if max_duration is not None and max_duration <= 0:
        raise RuleConfigError('INVALID_MAX_DURATION', 'max_duration_minutes must be positive')

    if min_duration is not None and max_duration is not None and min_duration > max_duration:
        raise RuleConfigError(
            'INVALID_DURATION_RANGE',
            'min_duration_minutes must be less than or equal to max_duration_minutes',
        )

    max_active = values.get('max_active_bookings')
    if max_active is not None and max_active <= 0:
        raise RuleConfigError('INVALID_MAX_ACTIVE_BOOKINGS', 'max_active_bookings must be positive')

    max_consecutive = values.get('max_consecutive')
    if max_consecutive is not None and max_consecutive <= 0:
        raise RuleConfigError('INVALID_MAX_CONSECUTIVE', 'max_consecutive must be positive or null')

    cooldown = values.get('cooldown_minutes')
    if cooldown is not None and cooldown < 0:
        raise RuleConfigError('INVALID_COOLDOWN', 'cooldown_minutes must be non-negative or null')

    min_notice = values.get('min_notice_minutes')
    if min_notice is not None and min_notice < 0:
        raise RuleConfigError('INVALID_MIN_NOTICE', 'min_notice_minutes must be non-negative')

    max_days_ahead = values.get('max_days_ahead')
    if max_days_ahead is not None and max_days_ahead <= 0:
        raise RuleConfigError('INVALID_MAX_DAYS_AHEAD', 'max_days_ahead must be positive')
