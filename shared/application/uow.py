"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from django.conf import settings
from django.db import connection, transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def store_timeout_seconds() -> float:
    """Upper bound for any single lock wait or statement inside a unit of work"""
    return float(getattr(settings, 'BOOKING_ENGINE', {}).get('STORE_TIMEOUT_SECONDS', 5))


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps ``transaction.atomic()``, bounds lock waits on PostgreSQL and
    publishes domain events through ``transaction.on_commit()``.

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = booking_repo.get_by_id(booking_id, lock=True)
            booking.complete()
            uow.collect_events(booking)
            booking_repo.save(booking)
        # Events are published after commit
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._timeout = timeout_seconds if timeout_seconds is not None else store_timeout_seconds()

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        self._apply_timeouts()
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

    def _apply_timeouts(self):
        # SQLite bounds lock waits through the connection "timeout" option instead.
        if connection.vendor != 'postgresql' or not self._timeout:
            return
        millis = int(self._timeout * 1000)
        with connection.cursor() as cursor:
            cursor.execute(f"SET LOCAL lock_timeout = {millis}")
            cursor.execute(f"SET LOCAL statement_timeout = {millis}")

    def commit(self):
        """
        Commit changes and publish events

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        logger.debug("Committing transaction with %d events", len(self._events))

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning("Rolling back transaction, discarding %d events", len(self._events))
        self._events.clear()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and
        clears them from the aggregate.
        """
        new_events = getattr(aggregate, 'events', None)
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                "Collected %d events from %s (ID: %s)",
                len(new_events), aggregate.__class__.__name__, aggregate.id,
            )

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit.
        """
        from shared.application.message_bus import message_bus

        logger.info("Publishing %d domain events after commit", len(events))

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The transaction is already committed; a lost event must not fail the request.
            logger.error("Error publishing events: %s", e, exc_info=True)
