"""Booking status e-mails."""

from __future__ import annotations

from django.core import mail
from django.test import TestCase

from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.domain.events import BookingApproved, BookingCreated, DocumentApproved
from apps.bookings.models import Booking
from apps.bookings.tests.factories import make_citizen, make_department, make_service, tomorrow
from apps.notifications.handlers import enqueue_booking_email
from apps.notifications.services import send_booking_status_email
from apps.notifications.tasks import send_booking_status_email_task
from shared.application.message_bus import message_bus


class BookingEmailTests(TestCase):
    def setUp(self) -> None:
        self.citizen = make_citizen(first_name="Asha", last_name="Verma")
        service = make_service(make_department(), documents=[("Aadhaar card", True)])
        with self.captureOnCommitCallbacks(execute=False):
            booking = CreateBookingHandler().handle(CreateBookingCommand(
                department_id=service.department_id,
                service_id=service.id,
                user_id=self.citizen.id,
                date=tomorrow(),
                slot_time="11:00-11:15",
            ))
        self.booking = Booking.objects.get(pk=booking.id)

    def test_created_email_asks_for_documents(self) -> None:
        self.assertTrue(send_booking_status_email(self.booking, "BookingCreated"))

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, [self.citizen.email])
        self.assertIn(f"Token #{self.booking.token_number}", message.subject)
        self.assertIn("Dear Asha Verma", message.body)
        self.assertIn("upload the required documents", message.body)
        self.assertIn("11:00-11:15", message.body)

    def test_events_without_template_send_nothing(self) -> None:
        self.assertFalse(send_booking_status_email(self.booking, "DocumentApproved"))
        self.assertEqual(mail.outbox, [])

    def test_task_ignores_missing_booking(self) -> None:
        self.assertFalse(send_booking_status_email_task(999_999, "BookingApproved"))
        self.assertEqual(mail.outbox, [])

    def test_creation_is_notified_after_commit(self) -> None:
        service = make_service(self.booking.department, name="Caste certificate", code="cc-02")

        with self.captureOnCommitCallbacks(execute=True):
            CreateBookingHandler().handle(CreateBookingCommand(
                department_id=service.department_id,
                service_id=service.id,
                user_id=self.citizen.id,
                date=tomorrow(),
                slot_time="11:00-11:15",
            ))

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("booked", mail.outbox[0].subject)

    def test_only_citizen_facing_events_are_subscribed(self) -> None:
        self.assertIn(enqueue_booking_email, message_bus.handlers_for(BookingCreated))
        self.assertIn(enqueue_booking_email, message_bus.handlers_for(BookingApproved))
        self.assertNotIn(enqueue_booking_email, message_bus.handlers_for(DocumentApproved))
