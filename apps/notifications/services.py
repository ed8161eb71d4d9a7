"""Notification services for sending booking e-mails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    message: str,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one e-mail through Django's mail backend.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        message: Plain-text body
        html_message: Optional HTML body; the text body is derived from it

    Returns:
        bool: True if the backend accepted the message
    """
    if not recipient_email:
        logger.warning("Skipping e-mail without recipient: %s", subject)
        return False

    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message) if html_message else message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        logger.error("Failed to send email to %s: %s", recipient_email, e, exc_info=True)
        return False

    logger.info("Email sent to %s: %s", recipient_email, subject)
    return True


def _citizen_name(booking: "Booking") -> str:
    return booking.user.get_full_name() or booking.user.email


def _slot_line(booking: "Booking") -> str:
    return (
        f"{booking.service.name} at {booking.department.name}\n"
        f"Date: {booking.date:%d %b %Y}, slot {booking.slot_time}\n"
        f"Token number: {booking.token_number}"
    )


def _created(booking: "Booking") -> tuple[str, str]:
    next_step = (
        "Please upload the required documents to continue."
        if booking.status == "PENDING_DOCS"
        else "Your booking is now with the department for review."
    )
    return (
        f"Token #{booking.token_number} booked for {booking.date:%d %b}",
        f"Your slot has been reserved.\n\n{_slot_line(booking)}\n\n{next_step}",
    )


def _approved(booking: "Booking") -> tuple[str, str]:
    return (
        f"Booking approved: token #{booking.token_number}",
        f"Your booking has been approved. Please arrive before your slot.\n\n{_slot_line(booking)}",
    )


def _rejected(booking: "Booking") -> tuple[str, str]:
    return (
        f"Booking rejected: token #{booking.token_number}",
        f"Your booking was rejected.\nReason: {booking.rejection_reason}\n\n{_slot_line(booking)}",
    )


def _cancelled(booking: "Booking") -> tuple[str, str]:
    who = "by the department" if booking.cancelled_by == "OFFICER" else "at your request"
    reason = f"\nReason: {booking.cancellation_reason}" if booking.cancellation_reason else ""
    return (
        f"Booking cancelled: token #{booking.token_number}",
        f"Your booking was cancelled {who}.{reason}\n\n{_slot_line(booking)}",
    )


def _completed(booking: "Booking") -> tuple[str, str]:
    return (
        f"Thank you for visiting {booking.department.name}",
        f"Your service has been completed.\n\n{_slot_line(booking)}",
    )


BOOKING_MESSAGES = {
    "BookingCreated": _created,
    "BookingApproved": _approved,
    "BookingRejected": _rejected,
    "BookingCancelled": _cancelled,
    "BookingCompleted": _completed,
}


def send_booking_status_email(booking: "Booking", event_name: str) -> bool:
    """E-mail the citizen about a booking event; unknown events are ignored."""
    build = BOOKING_MESSAGES.get(event_name)
    if build is None:
        logger.debug("No e-mail defined for %s", event_name)
        return False

    subject, body = build(booking)
    return send_email_notification(
        booking.user.email,
        subject,
        f"Dear {_citizen_name(booking)},\n\n{body}\n\nQueueIndia",
    )
