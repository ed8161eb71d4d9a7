"""Celery tasks for booking notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .services import send_booking_status_email

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_booking_status_email", ignore_result=True)
def send_booking_status_email_task(booking_id: int, event_name: str) -> bool:
    """Load the committed booking and e-mail its owner."""

    try:
        booking = Booking.objects.select_related("user", "department", "service").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning("Booking %s vanished before %s e-mail", booking_id, event_name)
        return False

    return send_booking_status_email(booking, event_name)
