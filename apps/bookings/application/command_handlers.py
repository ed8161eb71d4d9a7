"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Admit a token and create a booking
- UploadDocumentCommand: Citizen submits or replaces a document
- ApproveDocumentCommand / RejectDocumentCommand: Officer verifies a document
- ApproveBookingCommand / RejectBookingCommand: Officer resolves a booking
- CompleteBookingCommand: Officer marks the citizen as served
- CancelBookingCommand: Owner or officer cancels and frees the slot
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
import logging

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import OperationalError
from django.utils import timezone
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from apps.bookings.domain.admission import parse_priority_type, priority_category_allowed, validate_booking_request
from apps.bookings.domain.entities import UPLOADABLE_STATUSES, Booking, CancelledBy, PriorityType
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.exceptions import (
    AdmissionError,
    AdmissionFailure,
    BookingValidationError,
    InvalidTransition,
    StoreUnavailable,
)
from apps.bookings.domain.slots import Slot
from apps.bookings.ledger import CapacityLedger, SlotKey
from apps.bookings.models import SlotHold
from apps.bookings.repositories import DjangoBookingRepository
from apps.departments.domain import DepartmentRules, ServiceRules
from apps.departments.selectors import booking_rules
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import ClockTime

logger = logging.getLogger(__name__)


def engine_setting(name: str, default: Any) -> Any:
    return getattr(settings, 'BOOKING_ENGINE', {}).get(name, default)


@contextmanager
def store_errors():
    """Turn driver-level contention or timeouts into a retryable domain error"""
    try:
        yield
    except OperationalError as exc:
        logger.error("Booking store unavailable: %s", exc)
        raise StoreUnavailable() from exc


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to book a token

    This is the primary entry point for creating bookings.
    """
    department_id: int
    service_id: int
    user_id: int
    date: date
    slot_time: str
    priority_type: Optional[str] = None
    notes: str = ''


@dataclass
class UploadDocumentCommand:
    """Command to attach a file to a booking"""
    booking_id: int
    user_id: int
    required_document_id: int
    file: Any
    name: str = ''


@dataclass
class ApproveDocumentCommand:
    booking_id: int
    document_id: int
    officer_id: int


@dataclass
class RejectDocumentCommand:
    booking_id: int
    document_id: int
    officer_id: int
    reason: str


@dataclass
class ApproveBookingCommand:
    booking_id: int
    officer_id: int


@dataclass
class RejectBookingCommand:
    booking_id: int
    officer_id: int
    reason: str


@dataclass
class CompleteBookingCommand:
    booking_id: int
    officer_id: int


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking; ``cancelled_by`` records who asked"""
    booking_id: int
    actor_id: int
    cancelled_by: CancelledBy
    reason: str = ''


# ===== Command Handlers =====

def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Admission attempt %s hit store contention (%s), retrying",
        retry_state.attempt_number,
        exc,
    )


class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Admission runs in three steps:
    1. Validate the request against department and service rules
       (nothing is written when this fails)
    2. Inside one unit of work, reserve capacity in the ledger and store
       the booking; a refusal rolls both back
    3. Retry step 2 with exponential backoff on store contention, then
       give up with a retryable STORE_UNAVAILABLE
    """

    def __init__(self, booking_repo=None, ledger=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.ledger = ledger or CapacityLedger()

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate

        Raises:
            BookingValidationError: request outside the rules
            AdmissionError: the ledger refused, or the store stayed unavailable
        """
        logger.info(
            "Booking request: department %s service %s user %s on %s at %s (%s)",
            command.department_id, command.service_id, command.user_id,
            command.date, command.slot_time, command.priority_type or 'NONE',
        )

        department, service = booking_rules(command.department_id, command.service_id)
        priority_type = parse_priority_type(command.priority_type)
        now = timezone.localtime()
        slot = validate_booking_request(
            department,
            service,
            command.date,
            command.slot_time,
            priority_type,
            today=now.date(),
            now=ClockTime.from_time(now.time()),
        )

        admit = retry(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(engine_setting('RESERVE_RETRY_ATTEMPTS', 3)),
            wait=wait_exponential(
                multiplier=engine_setting('RESERVE_RETRY_BACKOFF_SECONDS', 0.05),
                max=engine_setting('RESERVE_RETRY_BACKOFF_MAX_SECONDS', 1.0),
            ),
            before_sleep=_log_before_sleep,
            reraise=True,
        )(self._admit)

        try:
            booking = admit(command, department, service, slot, priority_type)
        except OperationalError as exc:
            logger.error("Admission gave up after retries: %s", exc)
            raise AdmissionError(AdmissionFailure.STORE_UNAVAILABLE) from exc

        logger.info(
            "Booking %s created: token %s, status %s",
            booking.id, booking.token_number, booking.status.value,
        )
        return booking

    def _admit(
        self,
        command: CreateBookingCommand,
        department: DepartmentRules,
        service: ServiceRules,
        slot: Slot,
        priority_type: PriorityType,
    ) -> Booking:
        with DjangoUnitOfWork() as uow:
            key = SlotKey(department.id, service.id, slot.date, slot.slot_time)
            result = self.ledger.reserve(
                key,
                priority_type,
                slot,
                service.token_config,
                priority_allowed=service.priority_allowed and priority_category_allowed(department, priority_type),
            )
            if not result.granted:
                raise AdmissionError(result.failure_reason)

            booking = Booking(
                department_id=department.id,
                service_id=service.id,
                user_id=command.user_id,
                date=slot.date,
                slot_time=slot.slot_time,
                token_number=result.token_number,
                priority_type=priority_type,
                status=Booking.initial_status(service.needs_document_stage),
                notes=(command.notes or '').strip(),
                hold_id=result.hold.pk,
            )
            self.booking_repo.save(booking)

            booking.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=booking.user_id,
                department_id=booking.department_id,
                service_id=booking.service_id,
                date=booking.date,
                slot_time=booking.slot_time,
                token_number=booking.token_number,
                priority_type=booking.priority_type.value,
                status=booking.status.value,
            ))
            uow.collect_events(booking)

        return booking


class UploadDocumentHandler:
    """
    Handler for a citizen's document upload

    The file goes through Django's storage API; the booking keeps the URL.
    """

    def __init__(self, booking_repo=None, storage=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.storage = storage or default_storage

    def handle(self, command: UploadDocumentCommand) -> Booking:
        logger.info(
            "Uploading document for booking %s (required document %s)",
            command.booking_id, command.required_document_id,
        )

        stored = None
        try:
            with store_errors(), DjangoUnitOfWork() as uow:
                booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
                if booking.status not in UPLOADABLE_STATUSES:
                    raise InvalidTransition(booking.status, 'UPLOAD_DOCUMENT')

                _, service = booking_rules(booking.department_id, booking.service_id)
                required = service.required_document(command.required_document_id)
                if required is None:
                    raise BookingValidationError(
                        f"Document {command.required_document_id} is not required for this service",
                        field='requiredDocId',
                    )

                filename = getattr(command.file, 'name', '') or 'document'
                stored = self.storage.save(f"booking_documents/{booking.id}/{filename}", command.file)
                booking.upload_document(
                    name=(command.name or '').strip() or required.name,
                    url=self.storage.url(stored),
                    required_document_id=required.id,
                    mandatory_document_ids=service.mandatory_document_ids,
                )

                uow.collect_events(booking)
                self.booking_repo.save(booking)
        except Exception:
            # The row never committed, so the file has no owner.
            if stored:
                logger.warning("Upload for booking %s rolled back, removing %s", command.booking_id, stored)
                self.storage.delete(stored)
            raise

        logger.info("Booking %s now %s with %d document(s)", booking.id, booking.status.value, len(booking.documents))
        return booking


class ApproveDocumentHandler:
    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: ApproveDocumentCommand) -> Booking:
        logger.info(
            "Officer %s approving document %s of booking %s",
            command.officer_id, command.document_id, command.booking_id,
        )

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.approve_document(command.document_id)
            uow.collect_events(booking)
            self.booking_repo.save(booking)

        return booking


class RejectDocumentHandler:
    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: RejectDocumentCommand) -> Booking:
        logger.info(
            "Officer %s rejecting document %s of booking %s",
            command.officer_id, command.document_id, command.booking_id,
        )

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.reject_document(command.document_id, command.reason)
            uow.collect_events(booking)
            self.booking_repo.save(booking)

        return booking


class ApproveBookingHandler:
    """Handler for UNDER_REVIEW -> APPROVED"""

    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: ApproveBookingCommand) -> Booking:
        logger.info("Officer %s approving booking %s", command.officer_id, command.booking_id)

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.approve()
            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info("Booking %s approved", booking.id)
        return booking


class RejectBookingHandler:
    """Handler for UNDER_REVIEW -> REJECTED; the slot stays consumed"""

    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: RejectBookingCommand) -> Booking:
        logger.info("Officer %s rejecting booking %s", command.officer_id, command.booking_id)

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.reject(command.reason)
            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info("Booking %s rejected", booking.id)
        return booking


class CompleteBookingHandler:
    """Handler for APPROVED -> COMPLETED"""

    def __init__(self, booking_repo=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()

    def handle(self, command: CompleteBookingCommand) -> Booking:
        logger.info("Officer %s completing booking %s", command.officer_id, command.booking_id)

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.complete()
            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info("Booking %s completed", booking.id)
        return booking


class CancelBookingHandler:
    """Handler for cancelling booking and releasing its ledger hold"""

    def __init__(self, booking_repo=None, ledger=None):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.ledger = ledger or CapacityLedger()

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(
            "Cancelling booking %s by %s %s, reason: %s",
            command.booking_id, command.cancelled_by.value, command.actor_id, command.reason or '-',
        )

        with store_errors(), DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.cancel(command.cancelled_by, command.reason)

            hold = SlotHold.objects.get(pk=booking.hold_id)
            self.ledger.release(hold)

            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info("Booking %s cancelled, slot %s %s freed", booking.id, booking.date, booking.slot_time)
        return booking
