"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from typing import List
import logging

from django.db import DEFAULT_DB_ALIAS, transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

SERIALIZABLE = 'serializable'


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Manages a Django database transaction and ensures domain events
    are published after a successful commit. Events collected inside
    a transaction that rolls back are discarded.

    When ``isolation`` is ``SERIALIZABLE`` and the backend is PostgreSQL,
    the transaction is switched to SERIALIZABLE isolation and given a local
    statement/lock timeout. SQLite transactions are serializable already.
    The isolation level can only be chosen by the outermost block; a nested
    unit of work runs inside a savepoint of the enclosing transaction.

    Usage:
        with DjangoUnitOfWork(isolation=SERIALIZABLE) as uow:
            booking = Booking.objects.create(...)
            uow.add_event(BookingCreated(...))
            # Transaction commits here
        # Events are published after commit
    """

    def __init__(self, *, isolation: str | None = None, timeout_ms: int | None = None,
                 using: str = DEFAULT_DB_ALIAS):
        self.isolation = isolation
        self.timeout_ms = timeout_ms
        self.using = using
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        connection = transaction.get_connection(self.using)
        outermost = not connection.in_atomic_block

        self._transaction = transaction.atomic(using=self.using)
        self._transaction.__enter__()

        try:
            if outermost:
                self._configure_transaction(connection)
            elif self.isolation:
                logger.debug(
                    f"Nested unit of work keeps the isolation level of the enclosing "
                    f"transaction (requested {self.isolation})"
                )
        except BaseException as exc:
            self._transaction.__exit__(type(exc), exc, exc.__traceback__)
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def _configure_transaction(self, connection):
        if connection.vendor != 'postgresql':
            return

        with connection.cursor() as cursor:
            if self.isolation == SERIALIZABLE:
                cursor.execute('SET TRANSACTION ISOLATION LEVEL SERIALIZABLE')
            if self.timeout_ms:
                cursor.execute(f'SET LOCAL statement_timeout = {int(self.timeout_ms)}')
                cursor.execute(f'SET LOCAL lock_timeout = {int(self.timeout_ms)}')

    def add_event(self, event: DomainEvent):
        """Queue a domain event for publishing after commit"""
        self._events.append(event)

    def commit(self):
        """
        Schedule publishing of the collected events

        Events are published using Django's transaction.on_commit()
        so they are only sent after the database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit.
        """
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        failed = message_bus.publish_events(events)
        if failed:
            logger.warning(f"{failed} event deliveries failed after commit")
