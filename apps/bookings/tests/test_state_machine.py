"""Booking and document state machine."""

from __future__ import annotations

from datetime import date

import pytest

from apps.bookings.domain.entities import (
    TRANSITIONS,
    Booking,
    BookingStatus,
    CancelledBy,
    DocumentStatus,
    PriorityType,
)
from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingRejected,
    BookingUnderReview,
    DocumentRejected,
    DocumentsSubmitted,
)
from apps.bookings.domain.exceptions import BookingValidationError, DocumentNotFound, InvalidTransition

ID_PROOF, ADDRESS_PROOF, PHOTO = 11, 12, 13
MANDATORY = (ID_PROOF, ADDRESS_PROOF)


def booking(status: BookingStatus = BookingStatus.UNDER_REVIEW, **overrides) -> Booking:
    values = {
        "id": 1,
        "department_id": 1,
        "service_id": 1,
        "user_id": 1,
        "date": date(2026, 10, 20),
        "slot_time": "10:00-10:15",
        "token_number": 1,
        "status": status,
    }
    values.update(overrides)
    return Booking(**values)


def with_documents(status: BookingStatus, *required_ids: int) -> Booking:
    b = booking(BookingStatus.PENDING_DOCS)
    for index, required_id in enumerate(required_ids, start=1):
        doc = b.upload_document(f"doc-{required_id}", f"/media/{required_id}.pdf", required_id, MANDATORY)
        doc.id = index
    b.status = status
    b.clear_events()
    return b


def test_terminal_states_have_no_exits():
    terminal = {status for status in BookingStatus if status.is_terminal}

    assert terminal == {BookingStatus.REJECTED, BookingStatus.COMPLETED, BookingStatus.CANCELLED}
    assert set(TRANSITIONS) == set(BookingStatus)


@pytest.mark.parametrize("status", [s for s in BookingStatus if not s.is_terminal])
def test_every_live_state_can_be_cancelled(status):
    b = booking(status)

    b.cancel(CancelledBy.USER, "  change of plans ")

    assert b.status is BookingStatus.CANCELLED
    assert b.cancellation_reason == "change of plans"
    assert b.cancelled_by is CancelledBy.USER
    event = b.events[-1]
    assert isinstance(event, BookingCancelled)
    assert event.previous_status == status.value


@pytest.mark.parametrize("status", [s for s in BookingStatus if s.is_terminal])
def test_terminal_states_reject_every_operation(status):
    b = booking(status)

    for operation in (b.approve, b.complete, lambda: b.reject("no"), lambda: b.cancel(CancelledBy.OFFICER)):
        with pytest.raises(InvalidTransition):
            operation()
    assert b.status is status
    assert b.events == []


@pytest.mark.parametrize(
    "status",
    [BookingStatus.PENDING_DOCS, BookingStatus.DOCS_SUBMITTED, BookingStatus.APPROVED],
)
def test_approve_and_reject_only_from_review(status):
    b = booking(status)

    with pytest.raises(InvalidTransition) as excinfo:
        b.approve()
    with pytest.raises(InvalidTransition):
        b.reject("incomplete")

    assert excinfo.value.current == status.value
    assert excinfo.value.requested == BookingStatus.APPROVED.value
    assert b.status is status


def test_complete_requires_approval():
    b = booking(BookingStatus.UNDER_REVIEW)

    with pytest.raises(InvalidTransition):
        b.complete()

    b.approve()
    b.complete()
    assert b.status is BookingStatus.COMPLETED
    assert b.completed_at is not None


def test_approve_without_documents_is_allowed():
    b = booking(BookingStatus.UNDER_REVIEW)

    b.approve()

    assert b.status is BookingStatus.APPROVED
    assert isinstance(b.events[-1], BookingApproved)


def test_approve_requires_every_document_approved():
    b = with_documents(BookingStatus.UNDER_REVIEW, ID_PROOF, ADDRESS_PROOF)
    b.approve_document(1)

    with pytest.raises(InvalidTransition):
        b.approve()
    assert b.status is BookingStatus.UNDER_REVIEW

    b.approve_document(2)
    b.approve()
    assert b.status is BookingStatus.APPROVED


def test_reject_needs_reason_and_keeps_document_statuses():
    b = with_documents(BookingStatus.UNDER_REVIEW, ID_PROOF)
    b.approve_document(1)

    with pytest.raises(BookingValidationError):
        b.reject("   ")
    assert b.status is BookingStatus.UNDER_REVIEW

    b.reject("Address does not match")
    assert b.status is BookingStatus.REJECTED
    assert b.rejection_reason == "Address does not match"
    assert b.documents[0].status is DocumentStatus.APPROVED
    assert isinstance(b.events[-1], BookingRejected)


def test_first_upload_moves_to_submitted():
    b = booking(BookingStatus.PENDING_DOCS)

    b.upload_document("Aadhaar", "/media/a.pdf", ID_PROOF, MANDATORY)

    assert b.status is BookingStatus.DOCS_SUBMITTED
    assert [type(e) for e in b.events] == [DocumentsSubmitted]


def test_all_mandatory_documents_move_to_review():
    b = booking(BookingStatus.PENDING_DOCS)

    b.upload_document("Aadhaar", "/media/a.pdf", ID_PROOF, MANDATORY)
    b.upload_document("Photo", "/media/p.jpg", PHOTO, MANDATORY)
    assert b.status is BookingStatus.DOCS_SUBMITTED

    b.upload_document("Electricity bill", "/media/e.pdf", ADDRESS_PROOF, MANDATORY)
    assert b.status is BookingStatus.UNDER_REVIEW
    assert [type(e) for e in b.events] == [DocumentsSubmitted, BookingUnderReview]


def test_single_upload_covering_all_mandatory_goes_straight_to_review():
    b = booking(BookingStatus.PENDING_DOCS)

    b.upload_document("Aadhaar", "/media/a.pdf", ID_PROOF, (ID_PROOF,))

    assert b.status is BookingStatus.UNDER_REVIEW


def test_reupload_replaces_rejected_document():
    b = with_documents(BookingStatus.UNDER_REVIEW, ID_PROOF, ADDRESS_PROOF)
    b.reject_document(1, "Blurry scan")
    assert isinstance(b.events[-1], DocumentRejected)

    replaced = b.upload_document("Aadhaar v2", "/media/a2.pdf", ID_PROOF, MANDATORY)

    assert len(b.documents) == 2
    assert replaced.id == 1
    assert replaced.status is DocumentStatus.PENDING
    assert replaced.rejection_reason == ""
    assert replaced.url == "/media/a2.pdf"
    assert b.status is BookingStatus.UNDER_REVIEW


def test_upload_refused_after_decision():
    for status in (BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED):
        b = booking(status)
        with pytest.raises(InvalidTransition):
            b.upload_document("Aadhaar", "/media/a.pdf", ID_PROOF, MANDATORY)
        assert b.documents == []


def test_document_review_rules():
    b = with_documents(BookingStatus.UNDER_REVIEW, ID_PROOF)

    with pytest.raises(DocumentNotFound):
        b.approve_document(99)
    with pytest.raises(BookingValidationError):
        b.reject_document(1, "")

    b.approve_document(1)
    with pytest.raises(InvalidTransition):
        b.approve_document(1)

    b.reject_document(1, "Expired")
    assert b.documents[0].status is DocumentStatus.REJECTED
    with pytest.raises(InvalidTransition):
        b.reject_document(1, "Expired again")


def test_document_review_needs_submitted_booking():
    b = with_documents(BookingStatus.APPROVED, ID_PROOF)

    with pytest.raises(InvalidTransition):
        b.approve_document(1)


def test_priority_rank_order():
    ranked = sorted(PriorityType, key=lambda p: p.rank, reverse=True)

    assert ranked == [
        PriorityType.DIFFERENTLY_ABLED,
        PriorityType.PREGNANT_WOMEN,
        PriorityType.SENIOR_CITIZEN,
        PriorityType.NONE,
    ]
