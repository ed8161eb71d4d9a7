"""
Booking Domain Exceptions

Typed failures of the admission engine and the booking state machine.
The API layer renders them through ``shared.api.exceptions``.
"""

from enum import Enum

from shared.domain.exceptions import Conflict, NotFound, ValidationFailed


class AdmissionFailure(Enum):
    """Why the capacity ledger refused a reservation"""
    SLOT_FULL = 'SLOT_FULL'
    PRIORITY_QUOTA_EXHAUSTED = 'PRIORITY_QUOTA_EXHAUSTED'
    DAILY_LIMIT_REACHED = 'DAILY_LIMIT_REACHED'
    PRIORITY_NOT_ALLOWED = 'PRIORITY_NOT_ALLOWED'
    STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'


_ADMISSION_MESSAGES = {
    AdmissionFailure.SLOT_FULL: "The selected slot is fully booked.",
    AdmissionFailure.PRIORITY_QUOTA_EXHAUSTED: "No priority tokens left in the selected slot.",
    AdmissionFailure.DAILY_LIMIT_REACHED: "The department has reached its daily token limit.",
    AdmissionFailure.PRIORITY_NOT_ALLOWED: "Priority tokens are not available for this service.",
    AdmissionFailure.STORE_UNAVAILABLE: "Booking store is busy, please retry.",
}


class BookingValidationError(ValidationFailed):
    """Request rejected before the ledger was consulted"""

    code = 'validation_error'

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field

    def details(self) -> dict:
        return {'field': self.field} if self.field else {}


class AdmissionError(Conflict):
    """The capacity ledger did not grant a token"""

    def __init__(self, reason: AdmissionFailure, message: str = ''):
        super().__init__(message or _ADMISSION_MESSAGES[reason], code=reason.value)
        self.reason = reason

    @property
    def retryable(self) -> bool:
        return self.reason is AdmissionFailure.STORE_UNAVAILABLE

    def details(self) -> dict:
        return {'reason': self.reason.value, 'retryable': self.retryable}


class InvalidTransition(Conflict):
    """Requested state change is not an edge of the booking or document state machine"""

    code = 'invalid_transition'

    def __init__(self, current, requested, message: str = ''):
        current_value = getattr(current, 'value', current)
        requested_value = getattr(requested, 'value', requested)
        super().__init__(message or f"Cannot move from {current_value} to {requested_value}")
        self.current = current_value
        self.requested = requested_value

    def details(self) -> dict:
        return {'current': self.current, 'requested': self.requested}


class BookingNotFound(NotFound):
    code = 'booking_not_found'


class DocumentNotFound(NotFound):
    code = 'document_not_found'


class StoreUnavailable(Conflict):
    """Lock wait or statement timed out; the client may retry"""

    code = AdmissionFailure.STORE_UNAVAILABLE.value
    retryable = True

    def __init__(self, message: str = ''):
        super().__init__(message or _ADMISSION_MESSAGES[AdmissionFailure.STORE_UNAVAILABLE])

    def details(self) -> dict:
        return {'retryable': True}
