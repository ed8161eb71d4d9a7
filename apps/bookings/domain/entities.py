"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Aggregate root for one admitted token
- Document: A file submitted by the citizen for verification
- BookingStatus: FSM states for booking lifecycle
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from shared.domain.base import Aggregate, Entity, utcnow

from .events import (
    BookingApproved,
    BookingCancelled,
    BookingCompleted,
    BookingRejected,
    BookingUnderReview,
    DocumentApproved,
    DocumentRejected,
    DocumentsSubmitted,
)
from .exceptions import BookingValidationError, DocumentNotFound, InvalidTransition


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING_DOCS -> DOCS_SUBMITTED (first document uploaded)
    - DOCS_SUBMITTED -> UNDER_REVIEW (every mandatory document on file)
    - UNDER_REVIEW -> APPROVED (officer, all documents approved)
    - UNDER_REVIEW -> REJECTED (officer, reason required)
    - APPROVED -> COMPLETED (officer)
    - any non-terminal state -> CANCELLED (owner or officer)
    """
    PENDING_DOCS = 'PENDING_DOCS'
    DOCS_SUBMITTED = 'DOCS_SUBMITTED'
    UNDER_REVIEW = 'UNDER_REVIEW'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING_DOCS: frozenset({BookingStatus.DOCS_SUBMITTED, BookingStatus.CANCELLED}),
    BookingStatus.DOCS_SUBMITTED: frozenset({BookingStatus.UNDER_REVIEW, BookingStatus.CANCELLED}),
    BookingStatus.UNDER_REVIEW: frozenset({
        BookingStatus.APPROVED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses in which the citizen may still add or replace files
UPLOADABLE_STATUSES = frozenset({
    BookingStatus.PENDING_DOCS,
    BookingStatus.DOCS_SUBMITTED,
    BookingStatus.UNDER_REVIEW,
})

# Statuses in which officers verify individual documents
REVIEWABLE_STATUSES = frozenset({BookingStatus.DOCS_SUBMITTED, BookingStatus.UNDER_REVIEW})


class DocumentStatus(Enum):
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'


class PriorityType(Enum):
    """Priority category claimed by the citizen; ``rank`` orders the live queue"""
    NONE = 'NONE'
    SENIOR_CITIZEN = 'SENIOR_CITIZEN'
    PREGNANT_WOMEN = 'PREGNANT_WOMEN'
    DIFFERENTLY_ABLED = 'DIFFERENTLY_ABLED'

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @property
    def is_priority(self) -> bool:
        return self is not PriorityType.NONE


_PRIORITY_RANK = {
    PriorityType.DIFFERENTLY_ABLED: 3,
    PriorityType.PREGNANT_WOMEN: 2,
    PriorityType.SENIOR_CITIZEN: 1,
    PriorityType.NONE: 0,
}


class CancelledBy(Enum):
    USER = 'USER'
    OFFICER = 'OFFICER'


@dataclass(eq=False, kw_only=True)
class Document(Entity):
    """A submitted file; ``required_document_id`` links it to the service checklist"""
    name: str
    url: str = ''
    required_document_id: Optional[int] = None
    status: DocumentStatus = DocumentStatus.PENDING
    rejection_reason: str = ''
    uploaded_at: datetime = field(default_factory=utcnow)
    reviewed_at: Optional[datetime] = None


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    A citizen's admitted token for one slot of a department service.
    Capacity was already granted by the ledger when the aggregate is
    created; from then on only cancellation gives it back.

    Key invariants:
    - status only moves along TRANSITIONS
    - UNDER_REVIEW -> APPROVED requires every document APPROVED
    - rejection of the booking always carries a reason
    """

    department_id: int
    service_id: int
    user_id: int
    date: date
    slot_time: str
    token_number: int
    priority_type: PriorityType = PriorityType.NONE
    status: BookingStatus = BookingStatus.UNDER_REVIEW
    notes: str = ''
    documents: List[Document] = field(default_factory=list)

    rejection_reason: str = ''
    cancellation_reason: str = ''
    cancelled_by: Optional[CancelledBy] = None
    hold_id: Optional[int] = None

    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @staticmethod
    def initial_status(needs_documents: bool) -> BookingStatus:
        """PENDING_DOCS when the service has files to collect, else straight to review"""
        return BookingStatus.PENDING_DOCS if needs_documents else BookingStatus.UNDER_REVIEW

    # ----- state machine -----

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in TRANSITIONS[self.status]

    def _transition(self, target: BookingStatus):
        if not self.can_transition_to(target):
            raise InvalidTransition(self.status, target)
        self.status = target
        self.updated_at = utcnow()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _event_payload(self) -> dict:
        return {
            'aggregate_id': self.id,
            'booking_id': self.id,
            'user_id': self.user_id,
            'department_id': self.department_id,
        }

    # ----- documents -----

    def document(self, document_id: int) -> Document:
        for doc in self.documents:
            if doc.id == document_id:
                return doc
        raise DocumentNotFound(f"Document {document_id} not found on booking {self.id}")

    def upload_document(
        self,
        name: str,
        url: str,
        required_document_id: Optional[int],
        mandatory_document_ids: Iterable[int] = (),
    ) -> Document:
        """
        Attach a file, replacing an earlier upload for the same required document

        A replaced document goes back to PENDING with its rejection reason
        cleared. The derived status is re-evaluated afterwards.
        """
        if self.status not in UPLOADABLE_STATUSES:
            raise InvalidTransition(self.status, 'UPLOAD_DOCUMENT')

        existing = None
        if required_document_id is not None:
            existing = next(
                (d for d in self.documents if d.required_document_id == required_document_id),
                None,
            )

        if existing:
            existing.name = name
            existing.url = url
            existing.status = DocumentStatus.PENDING
            existing.rejection_reason = ''
            existing.uploaded_at = utcnow()
            existing.reviewed_at = None
            document = existing
        else:
            document = Document(name=name, url=url, required_document_id=required_document_id)
            self.documents.append(document)

        self.refresh_document_state(mandatory_document_ids)
        return document

    def refresh_document_state(self, mandatory_document_ids: Iterable[int]):
        """
        Derived-state check run after every document mutation

        PENDING_DOCS moves on once anything is uploaded; DOCS_SUBMITTED
        moves to review once every mandatory document has a record.
        """
        if self.status is BookingStatus.PENDING_DOCS and self.documents:
            self._transition(BookingStatus.DOCS_SUBMITTED)
            self.add_event(DocumentsSubmitted(**self._event_payload()))

        if self.status is BookingStatus.DOCS_SUBMITTED:
            submitted = {d.required_document_id for d in self.documents}
            if set(mandatory_document_ids) <= submitted:
                self._transition(BookingStatus.UNDER_REVIEW)
                self.add_event(BookingUnderReview(**self._event_payload()))

    def approve_document(self, document_id: int) -> Document:
        """Approving a document never approves the booking itself"""
        if self.status not in REVIEWABLE_STATUSES:
            raise InvalidTransition(self.status, 'APPROVE_DOCUMENT')
        doc = self.document(document_id)
        if doc.status is DocumentStatus.APPROVED:
            raise InvalidTransition(doc.status, DocumentStatus.APPROVED)

        doc.status = DocumentStatus.APPROVED
        doc.rejection_reason = ''
        doc.reviewed_at = utcnow()
        self.add_event(DocumentApproved(document_id=doc.id, **self._event_payload()))
        return doc

    def reject_document(self, document_id: int, reason: str) -> Document:
        """Rejecting a document never rejects the booking; the citizen may re-upload"""
        if not (reason or '').strip():
            raise BookingValidationError("A rejection reason is required", field='reason')
        if self.status not in REVIEWABLE_STATUSES:
            raise InvalidTransition(self.status, 'REJECT_DOCUMENT')
        doc = self.document(document_id)
        if doc.status is DocumentStatus.REJECTED:
            raise InvalidTransition(doc.status, DocumentStatus.REJECTED)

        doc.status = DocumentStatus.REJECTED
        doc.rejection_reason = reason.strip()
        doc.reviewed_at = utcnow()
        self.add_event(DocumentRejected(
            document_id=doc.id,
            reason=doc.rejection_reason,
            required_document_id=doc.required_document_id,
            **self._event_payload(),
        ))
        return doc

    def all_documents_approved(self) -> bool:
        return all(d.status is DocumentStatus.APPROVED for d in self.documents)

    # ----- officer decisions -----

    def approve(self):
        """
        Approve booking (UNDER_REVIEW -> APPROVED)

        Events: BookingApproved
        """
        if not self.can_transition_to(BookingStatus.APPROVED):
            raise InvalidTransition(self.status, BookingStatus.APPROVED)
        if not self.all_documents_approved():
            raise InvalidTransition(
                self.status,
                BookingStatus.APPROVED,
                "Every submitted document must be approved first",
            )

        self._transition(BookingStatus.APPROVED)
        self.approved_at = utcnow()
        self.add_event(BookingApproved(
            token_number=self.token_number,
            date=self.date,
            slot_time=self.slot_time,
            **self._event_payload(),
        ))

    def reject(self, reason: str):
        """
        Reject booking (UNDER_REVIEW -> REJECTED)

        Documents keep their individual statuses.
        Events: BookingRejected
        """
        if not (reason or '').strip():
            raise BookingValidationError("A rejection reason is required", field='reason')

        self._transition(BookingStatus.REJECTED)
        self.rejection_reason = reason.strip()
        self.rejected_at = utcnow()
        self.add_event(BookingRejected(reason=self.rejection_reason, **self._event_payload()))

    def complete(self):
        """
        Complete booking (APPROVED -> COMPLETED)

        Events: BookingCompleted
        """
        self._transition(BookingStatus.COMPLETED)
        self.completed_at = utcnow()
        self.add_event(BookingCompleted(**self._event_payload()))

    def cancel(self, cancelled_by: CancelledBy, reason: str = ''):
        """
        Cancel booking from any non-terminal state

        The caller releases the ledger hold in the same unit of work.
        Events: BookingCancelled
        """
        previous = self.status
        self._transition(BookingStatus.CANCELLED)
        self.cancelled_by = cancelled_by
        self.cancellation_reason = (reason or '').strip()
        self.cancelled_at = utcnow()
        self.add_event(BookingCancelled(
            cancelled_by=cancelled_by.value,
            reason=self.cancellation_reason,
            previous_status=previous.value,
            **self._event_payload(),
        ))

    def __str__(self):
        return f"Booking {self.id} token {self.token_number} ({self.status.value})"
