"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    """Common payload of every booking event"""
    booking_id: int
    user_id: int
    department_id: int

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(booking_id=self.booking_id, user_id=self.user_id, department_id=self.department_id)
        return data


# ===== Booking Events =====

@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    Event: A token was admitted and the booking stored

    Triggers:
    - Send booking confirmation with token number to the citizen
    """
    service_id: int
    date: date
    slot_time: str
    token_number: int
    priority_type: str
    status: str


@dataclass(kw_only=True)
class DocumentsSubmitted(BookingEvent):
    """Event: First document uploaded (PENDING_DOCS -> DOCS_SUBMITTED)"""


@dataclass(kw_only=True)
class BookingUnderReview(BookingEvent):
    """Event: Every mandatory document is on file (DOCS_SUBMITTED -> UNDER_REVIEW)"""


@dataclass(kw_only=True)
class BookingApproved(BookingEvent):
    """
    Event: Officer approved the booking (UNDER_REVIEW -> APPROVED)

    Triggers:
    - Notify the citizen; the token joins the live queue
    """
    token_number: int
    date: date
    slot_time: str


@dataclass(kw_only=True)
class BookingRejected(BookingEvent):
    """Event: Officer rejected the booking (UNDER_REVIEW -> REJECTED)"""
    reason: str


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """Event: Citizen was served (APPROVED -> COMPLETED)"""


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Event: Booking cancelled by its owner or an officer

    The ledger hold is released in the same transaction.
    """
    cancelled_by: str
    reason: str
    previous_status: str


# ===== Document Events =====

@dataclass(kw_only=True)
class DocumentApproved(BookingEvent):
    document_id: int


@dataclass(kw_only=True)
class DocumentRejected(BookingEvent):
    document_id: int
    reason: str
    required_document_id: Optional[int] = None
