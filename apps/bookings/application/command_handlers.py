"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Admit a new booking
- CancelBookingCommand: Cancel a booking
- ExpireElapsedBookingsCommand: Expire confirmed bookings whose interval has passed
"""

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
import logging

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from shared.application.uow import SERIALIZABLE, DjangoUnitOfWork
from shared.domain.value_objects import TimeRange
from apps.bookings.domain.errors import (
    BookingErrorKind,
    BookingRejected,
    BookingStorageError,
)
from apps.bookings.domain.events import BookingCancelled, BookingCreated, BookingExpired
from apps.bookings.domain.lifecycle import BookingStatus, ensure_transition
from apps.bookings.domain.rules import validate_duration, validate_horizon, validate_time_window
from apps.bookings.fair_usage import validate_fair_usage
from apps.bookings.models import Booking
from apps.bookings.services import check_room_availability
from apps.bookings.application.rule_config import get_rules

logger = logging.getLogger(__name__)

# SQLSTATEs raised when the database refuses a transaction because of a
# concurrent writer or because the transaction ran out of time.
WRITE_CONFLICT_SQLSTATES = frozenset({
    '40001',  # serialization_failure
    '40P01',  # deadlock_detected
    '55P03',  # lock_not_available
    '57014',  # query_canceled (statement_timeout)
})
SQLITE_LOCK_MESSAGES = ('database is locked', 'database table is locked')


def is_write_conflict(exc: DatabaseError) -> bool:
    """True when ``exc`` means another transaction won the race."""
    cause = exc.__cause__
    sqlstate = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if sqlstate in WRITE_CONFLICT_SQLSTATES:
        return True
    message = str(exc).lower()
    return any(text in message for text in SQLITE_LOCK_MESSAGES)


def _aware(value: datetime) -> datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value, dt_timezone.utc)
    return value


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to admit a new booking

    This is the primary entry point for creating bookings.
    """
    user_id: int
    room_id: int
    start_at: datetime
    end_at: datetime
    now: datetime | None = None


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    caller_id: int
    is_admin: bool = False
    now: datetime | None = None


@dataclass
class ExpireElapsedBookingsCommand:
    """Command to expire every confirmed booking that has already ended"""
    now: datetime | None = None


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Strategy:
    1. Load the current rules (fresh read, no cache)
    2. Time window -> duration -> horizon (pure, fail fast)
    3. Active cap -> consecutive cap -> cooldown (reads, no locks)
    4. Open one SERIALIZABLE transaction: lock the room row, re-read its
       status, re-run the overlap and maintenance queries, insert
    5. Commit; a serialization failure or transaction timeout becomes
       ROOM_UNAVAILABLE and is never retried
    6. Publish BookingCreated (audit) only after the commit
    """

    def __init__(self, *, timeout_ms: int | None = None):
        self.timeout_ms = timeout_ms

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking admission

        Returns: the persisted Booking in CONFIRMED state

        Raises:
            BookingRejected: first failing check, see BookingErrorKind
            BookingStorageError: unexpected database failure
        """
        now = command.now or timezone.now()
        start_at = _aware(command.start_at)
        end_at = _aware(command.end_at)

        logger.info(
            f"Admitting booking for room {command.room_id}, "
            f"user {command.user_id}, {start_at.isoformat()} - {end_at.isoformat()}"
        )

        rules = get_rules()

        validate_time_window(start_at, end_at, rules).raise_if_invalid()
        validate_duration(start_at, end_at, rules).raise_if_invalid()
        validate_horizon(start_at, rules, now).raise_if_invalid()
        validate_fair_usage(command.user_id, command.room_id, start_at, rules, now).raise_if_invalid()

        timeout_ms = self.timeout_ms or getattr(settings, 'BOOKING_TRANSACTION_TIMEOUT_MS', None)
        try:
            with DjangoUnitOfWork(isolation=SERIALIZABLE, timeout_ms=timeout_ms) as uow:
                check_room_availability(
                    command.room_id, start_at, end_at, lock=True
                ).raise_if_invalid()

                booking = Booking.objects.create(
                    user_id=command.user_id,
                    room_id=command.room_id,
                    start_at=start_at,
                    end_at=end_at,
                    status=Booking.Status.CONFIRMED,
                    created_at=now,
                )

                uow.add_event(BookingCreated(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    room_id=booking.room_id,
                    room_name=booking.room.name,
                    user_id=booking.user_id,
                    period=booking.period,
                ))
        except BookingRejected as exc:
            logger.info(f"Booking for room {command.room_id} rejected: {exc.kind.value}")
            raise
        except DatabaseError as exc:
            if is_write_conflict(exc):
                logger.warning(
                    f"Concurrent write conflict while booking room {command.room_id}: {exc}"
                )
                raise BookingRejected(
                    BookingErrorKind.ROOM_UNAVAILABLE,
                    'Room is already booked for this time slot',
                ) from exc
            logger.error(f"Storage failure while booking room {command.room_id}: {exc}", exc_info=True)
            raise BookingStorageError('An error occurred while creating the booking') from exc

        logger.info(f"Booking {booking.pk} confirmed for room {booking.room_id}")
        return booking


class CancelBookingHandler:
    """
    Handler for CancelBooking command

    Checks, in order: existence, ownership (unless admin), that the
    interval has not elapsed, and that CONFIRMED -> CANCELLED is allowed.
    The row is locked for the duration of the transaction.
    """

    def handle(self, command: CancelBookingCommand) -> Booking:
        now = command.now or timezone.now()

        try:
            with DjangoUnitOfWork() as uow:
                booking = (
                    Booking.objects.select_for_update()
                    .filter(pk=command.booking_id)
                    .first()
                )

                if booking is None:
                    raise BookingRejected(BookingErrorKind.BOOKING_NOT_FOUND, 'Booking not found')

                if not command.is_admin and str(booking.user_id) != str(command.caller_id):
                    raise BookingRejected(
                        BookingErrorKind.FORBIDDEN,
                        'You can only cancel your own bookings',
                    )

                if booking.end_at <= now:
                    raise BookingRejected(BookingErrorKind.PAST_BOOKING, 'Cannot cancel past bookings')

                ensure_transition(booking.status, BookingStatus.CANCELLED)

                booking.status = Booking.Status.CANCELLED
                booking.cancelled_at = now
                booking.cancelled_by_id = command.caller_id
                booking.save(update_fields=['status', 'cancelled_at', 'cancelled_by', 'updated_at'])

                uow.add_event(BookingCancelled(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    room_id=booking.room_id,
                    room_name=booking.room.name,
                    cancelled_by=command.caller_id,
                    period=booking.period,
                ))
        except DatabaseError as exc:
            logger.error(f"Storage failure while cancelling booking {command.booking_id}: {exc}", exc_info=True)
            raise BookingStorageError('An error occurred while cancelling the booking') from exc

        logger.info(f"Booking {booking.pk} cancelled by {command.caller_id}")
        return booking


class ExpireElapsedBookingsHandler:
    """
    Handler for ExpireElapsedBookings command

    Moves every CONFIRMED booking with end_at < now to EXPIRED in one
    statement. Cancelled bookings are never touched and a second run with
    the same ``now`` changes nothing.
    """

    def handle(self, command: ExpireElapsedBookingsCommand) -> int:
        now = command.now or timezone.now()

        with DjangoUnitOfWork() as uow:
            elapsed = list(
                Booking.objects.select_for_update()
                .filter(status=Booking.Status.CONFIRMED, end_at__lt=now)
                .values_list('id', 'room_id', 'start_at', 'end_at')
            )
            if not elapsed:
                return 0

            expired_count = Booking.objects.filter(
                pk__in=[row[0] for row in elapsed],
                status=Booking.Status.CONFIRMED,
            ).update(status=Booking.Status.EXPIRED, updated_at=now)

            for booking_id, room_id, start_at, end_at in elapsed:
                uow.add_event(BookingExpired(
                    aggregate_id=booking_id,
                    booking_id=booking_id,
                    room_id=room_id,
                    period=TimeRange(start_at, end_at),
                ))

        logger.info(f"Expired {expired_count} elapsed bookings")
        return expired_count


# ===== Entry points =====

def create_booking(user_id, room_id, start_at: datetime, end_at: datetime, *, now: datetime | None = None) -> Booking:
    return CreateBookingHandler().handle(CreateBookingCommand(user_id, room_id, start_at, end_at, now))


def cancel_booking(booking_id, caller_id, is_admin: bool = False, *, now: datetime | None = None) -> Booking:
    return CancelBookingHandler().handle(CancelBookingCommand(booking_id, caller_id, is_admin, now))


def expire_elapsed(*, now: datetime | None = None) -> int:
    return ExpireElapsedBookingsHandler().handle(ExpireElapsedBookingsCommand(now))


def register_handlers(bus) -> None:
    """Wire the booking commands into the message bus."""
    for command_type, handler in (
        (CreateBookingCommand, CreateBookingHandler().handle),
        (CancelBookingCommand, CancelBookingHandler().handle),
        (ExpireElapsedBookingsCommand, ExpireElapsedBookingsHandler().handle),
    ):
        if not bus.has_command_handler(command_type):
            bus.register_command_handler(command_type, handler)
