"""
Booking Event Handlers

Subscribed to the message bus at app start. Handlers run after commit and
only enqueue work; the message bus logs any failure without propagating.
"""

import logging

from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingCompleted,
    BookingCreated,
    BookingEvent,
    BookingRejected,
)
from shared.application.message_bus import message_bus

logger = logging.getLogger(__name__)

NOTIFIED_EVENTS = (
    BookingCreated,
    BookingApproved,
    BookingRejected,
    BookingCancelled,
    BookingCompleted,
)


def enqueue_booking_email(event: BookingEvent) -> None:
    from .tasks import send_booking_status_email_task

    send_booking_status_email_task.delay(event.booking_id, event.name)
    logger.info("Queued %s e-mail for booking %s", event.name, event.booking_id)


def register_handlers() -> None:
    for event_type in NOTIFIED_EVENTS:
        message_bus.register_event_handler(event_type, enqueue_booking_email)
