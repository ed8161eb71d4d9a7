"""Booking admission through the command handlers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest import mock

import pytest
from django.db import OperationalError, connections
from django.utils import timezone

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
)
from apps.bookings.domain.entities import BookingStatus, CancelledBy
from apps.bookings.domain.exceptions import AdmissionError, AdmissionFailure, BookingValidationError
from apps.bookings.ledger import CapacityLedger
from apps.bookings.models import Booking, DailyLedger, SlotHold, SlotLedger
from apps.bookings.tests.factories import make_citizen, make_department, make_service, make_token_config, tomorrow
from apps.departments.domain import weekday_key
from apps.departments.models import Department, TokenManagementConfig

pytestmark = pytest.mark.django_db


@pytest.fixture
def citizen():
    return make_citizen()


@pytest.fixture
def department():
    return make_department()


@pytest.fixture
def service(department):
    return make_service(department)


def command(service, user, **overrides) -> CreateBookingCommand:
    values = {
        "department_id": service.department_id,
        "service_id": service.id,
        "user_id": user.id,
        "date": tomorrow(),
        "slot_time": "10:00-10:15",
    }
    values.update(overrides)
    return CreateBookingCommand(**values)


def test_booking_without_documents_goes_to_review(service, citizen):
    booking = CreateBookingHandler().handle(command(service, citizen, notes="  first visit "))

    assert booking.status is BookingStatus.UNDER_REVIEW
    assert booking.token_number == 1
    assert booking.notes == "first visit"
    row = Booking.objects.get(pk=booking.id)
    assert row.hold.token_number == 1
    assert row.slot_time == "10:00-10:15"


def test_booking_with_required_documents_waits_for_them(department, citizen):
    service = make_service(department, code="dl-03", documents=[("Aadhaar card", True)])

    booking = CreateBookingHandler().handle(command(service, citizen))

    assert booking.status is BookingStatus.PENDING_DOCS


def test_document_flag_without_checklist_skips_document_stage(department, citizen):
    service = make_service(department, code="dl-04", is_document_upload_required=True)

    booking = CreateBookingHandler().handle(command(service, citizen))

    assert booking.status is BookingStatus.UNDER_REVIEW


def test_slot_label_is_normalised(service, citizen):
    booking = CreateBookingHandler().handle(command(service, citizen, slot_time="10:15 - 10:30"))

    assert booking.slot_time == "10:15-10:30"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"date": timezone.localdate() - timedelta(days=1)}, "date"),
        ({"date": timezone.localdate() + timedelta(days=7)}, "date"),
        ({"slot_time": "08:00-08:15"}, "slotTime"),
        ({"slot_time": "10:05-10:20"}, "slotTime"),
        ({"slot_time": "later"}, "slotTime"),
        ({"priority_type": "VIP"}, "priorityType"),
    ],
)
def test_invalid_requests_never_touch_the_ledger(service, citizen, overrides, field):
    with pytest.raises(BookingValidationError) as excinfo:
        CreateBookingHandler().handle(command(service, citizen, **overrides))

    assert excinfo.value.field == field
    assert not SlotLedger.objects.exists()
    assert not DailyLedger.objects.exists()
    assert not Booking.objects.exists()


def test_closed_day_is_refused(citizen):
    day = tomorrow()
    service = make_service(make_department(closed_days=[weekday_key(day)]))

    with pytest.raises(BookingValidationError):
        CreateBookingHandler().handle(command(service, citizen, date=day))


@pytest.mark.parametrize(
    "department_overrides",
    [
        {"status": Department.Status.UNDER_MAINTENANCE},
        {"is_slot_booking_enabled": False},
    ],
)
def test_department_not_accepting_bookings(citizen, department_overrides):
    service = make_service(make_department(**department_overrides))

    with pytest.raises(BookingValidationError):
        CreateBookingHandler().handle(command(service, citizen))


def test_offline_queue_is_refused(department, citizen):
    config = make_token_config(queue_type=TokenManagementConfig.QueueType.OFFLINE)
    service = make_service(department, code="of-05", token_config=config)

    with pytest.raises(BookingValidationError):
        CreateBookingHandler().handle(command(service, citizen))


def test_priority_category_disallowed_by_department(citizen):
    service = make_service(make_department(allow_pregnant_women=False))

    with pytest.raises(AdmissionError) as excinfo:
        CreateBookingHandler().handle(command(service, citizen, priority_type="PREGNANT_WOMEN"))

    assert excinfo.value.reason is AdmissionFailure.PRIORITY_NOT_ALLOWED
    assert not Booking.objects.exists()
    assert CreateBookingHandler().handle(command(service, citizen, priority_type="SENIOR_CITIZEN")).token_number == 1


def test_priority_on_service_without_priority_is_a_conflict(department, citizen):
    service = make_service(department, code="np-06", priority_allowed=False)

    with pytest.raises(AdmissionError) as excinfo:
        CreateBookingHandler().handle(command(service, citizen, priority_type="SENIOR_CITIZEN"))

    assert excinfo.value.reason is AdmissionFailure.PRIORITY_NOT_ALLOWED
    assert not excinfo.value.retryable


def test_service_config_overrides_department_config(department, citizen):
    config = make_token_config(max_tokens_per_slot=1, priority_percentage=0)
    service = make_service(department, code="ov-07", token_config=config)
    handler = CreateBookingHandler()
    handler.handle(command(service, citizen))

    with pytest.raises(AdmissionError) as excinfo:
        handler.handle(command(service, make_citizen("second@example.com")))

    assert excinfo.value.reason is AdmissionFailure.SLOT_FULL
    assert Booking.objects.count() == 1


def test_store_contention_is_retried_then_reported(service, citizen):
    ledger = mock.Mock(spec=CapacityLedger)
    ledger.reserve.side_effect = OperationalError("database is locked")

    with pytest.raises(AdmissionError) as excinfo:
        CreateBookingHandler(ledger=ledger).handle(command(service, citizen))

    assert excinfo.value.reason is AdmissionFailure.STORE_UNAVAILABLE
    assert excinfo.value.retryable
    assert ledger.reserve.call_count == 3
    assert not Booking.objects.exists()


def test_transient_contention_recovers(service, citizen):
    ledger = CapacityLedger()

    with mock.patch.object(ledger, "reserve", side_effect=_fail_once(CapacityLedger().reserve)) as reserve:
        booking = CreateBookingHandler(ledger=ledger).handle(command(service, citizen))

    assert reserve.call_count == 2
    assert booking.token_number == 1
    assert Booking.objects.count() == 1


def _fail_once(func):
    calls = {"count": 0}

    def wrapper(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("database is locked")
        return func(*args, **kwargs)

    return wrapper


def test_cancel_releases_the_slot(service, citizen):
    config = make_token_config(max_tokens_per_slot=1, priority_percentage=0)
    service = make_service(service.department, code="cx-08", token_config=config)
    booking = CreateBookingHandler().handle(command(service, citizen))

    cancelled = CancelBookingHandler().handle(CancelBookingCommand(
        booking_id=booking.id,
        actor_id=citizen.id,
        cancelled_by=CancelledBy.USER,
        reason="Cannot travel",
    ))

    assert cancelled.status is BookingStatus.CANCELLED
    assert SlotHold.objects.get(pk=booking.hold_id).is_released
    again = CreateBookingHandler().handle(command(service, make_citizen("next@example.com")))
    assert again.token_number == 2


def test_rejected_booking_keeps_its_slot(service, citizen):
    config = make_token_config(max_tokens_per_slot=1, priority_percentage=0)
    service = make_service(service.department, code="rj-09", token_config=config)
    booking = CreateBookingHandler().handle(command(service, citizen))

    RejectBookingHandler().handle(RejectBookingCommand(booking_id=booking.id, officer_id=1, reason="Duplicate"))

    with pytest.raises(AdmissionError) as excinfo:
        CreateBookingHandler().handle(command(service, make_citizen("next@example.com")))
    assert excinfo.value.reason is AdmissionFailure.SLOT_FULL


@pytest.mark.django_db(transaction=True)
def test_concurrent_admissions_never_oversell():
    department = make_department()
    config = make_token_config(max_tokens_per_slot=5, priority_percentage=20)
    service = make_service(department, code="cc-10", token_config=config)
    citizens = [make_citizen(f"citizen{n}@example.com") for n in range(16)]
    priorities = ["SENIOR_CITIZEN" if n % 4 == 0 else None for n in range(len(citizens))]

    def book(user, priority_type):
        try:
            CreateBookingHandler().handle(command(service, user, priority_type=priority_type))
            return "ok"
        except AdmissionError as exc:
            return exc.reason.value
        except OperationalError:
            # Shared-cache SQLite may refuse a read outright; that is a refusal, not a grant.
            return "STORE_UNAVAILABLE"
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(book, citizens, priorities))

    assert set(outcomes) <= {"ok", "SLOT_FULL", "PRIORITY_QUOTA_EXHAUSTED", "STORE_UNAVAILABLE"}
    row = SlotLedger.objects.filter(service=service).first()
    regular = row.regular_consumed if row else 0
    priority = row.priority_consumed if row else 0
    assert regular <= 4
    assert priority <= 1
    assert outcomes.count("ok") == regular + priority
    assert Booking.objects.filter(service_id=service.id).count() == regular + priority
    assert SlotHold.objects.filter(service=service, released_at__isnull=True).count() == regular + priority
