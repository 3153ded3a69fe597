"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from typing import Any

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeRange


# ===== Booking Events =====

@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A booking was admitted in CONFIRMED state

    Triggers:
    - Audit entry ``booking_created``
    """
    booking_id: int
    room_id: int
    room_name: str
    user_id: int
    period: TimeRange


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: A booking was cancelled by its owner or an admin

    Triggers:
    - Audit entry ``booking_cancelled``
    """
    booking_id: int
    room_id: int
    room_name: str
    cancelled_by: int
    period: TimeRange


@dataclass
class BookingExpired(DomainEvent):
    """
    Event: A confirmed booking's interval elapsed (CONFIRMED -> EXPIRED)

    Triggers:
    - Audit entry ``booking_expired``
    """
    booking_id: int
    room_id: int
    period: TimeRange


# ===== Rule Events =====

@dataclass
class RulesUpdated(DomainEvent):
    """
    Event: An administrator changed the booking rules

    Triggers:
    - Audit entry ``rules_updated`` with before/after snapshots
    """
    actor_id: int | None
    before: dict[str, Any]
    after: dict[str, Any]
    changes: dict[str, Any]
