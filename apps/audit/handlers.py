"""
Audit Event Handlers

Subscribe the audit trail to booking domain events. Handlers run after the
originating transaction has committed; a failure here is logged by the
message bus and never affects the committed booking.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCreated,
    BookingExpired,
    RulesUpdated,
)

from .services import record

logger = logging.getLogger(__name__)

BOOKING = 'booking'
RULE_CONFIG = 'rule_config'


def _period(period) -> dict:
    return {'start_at': period.start_at.isoformat(), 'end_at': period.end_at.isoformat()}


def on_booking_created(event: BookingCreated):
    record(
        'booking_created',
        actor_id=event.user_id,
        entity_type=BOOKING,
        entity_id=event.booking_id,
        payload={'room_id': event.room_id, 'room_name': event.room_name, **_period(event.period)},
    )


def on_booking_cancelled(event: BookingCancelled):
    record(
        'booking_cancelled',
        actor_id=event.cancelled_by,
        entity_type=BOOKING,
        entity_id=event.booking_id,
        payload={'room_id': event.room_id, 'room_name': event.room_name, **_period(event.period)},
    )


def on_booking_expired(event: BookingExpired):
    record(
        'booking_expired',
        entity_type=BOOKING,
        entity_id=event.booking_id,
        payload={'room_id': event.room_id, **_period(event.period)},
    )


def on_rules_updated(event: RulesUpdated):
    record(
        'rules_updated',
        actor_id=event.actor_id,
        entity_type=RULE_CONFIG,
        entity_id=event.aggregate_id,
        payload={'before': event.before, 'after': event.after, 'changes': event.changes},
    )


def register_handlers():
    """Register audit handlers (idempotent)."""
    message_bus.register_event_handler(BookingCreated, on_booking_created)
    message_bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    message_bus.register_event_handler(BookingExpired, on_booking_expired)
    message_bus.register_event_handler(RulesUpdated, on_rules_updated)
    logger.debug("Audit event handlers registered")
