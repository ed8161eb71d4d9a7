"""
Booking Repository

Maps the ``Booking`` aggregate to and from the ORM rows.
"""

from typing import List, Optional
import logging

from apps.bookings.domain.entities import (
    Booking,
    BookingStatus,
    CancelledBy,
    Document,
    DocumentStatus,
    PriorityType,
)
from apps.bookings.domain.exceptions import BookingNotFound
from apps.bookings.models import Booking as BookingModel
from apps.bookings.models import BookingDocument

logger = logging.getLogger(__name__)


class DjangoBookingRepository:
    """Loads and stores booking aggregates with their documents"""

    def get_model(self, booking_id, lock: bool = False) -> BookingModel:
        queryset = BookingModel.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=booking_id)
        except (BookingModel.DoesNotExist, ValueError, TypeError):
            raise BookingNotFound(f"Booking {booking_id} not found")

    def get_by_id(self, booking_id, lock: bool = False) -> Booking:
        """
        Load a booking aggregate

        With ``lock=True`` the booking row stays locked (SELECT FOR UPDATE)
        until the surrounding transaction ends.
        """
        row = self.get_model(booking_id, lock=lock)
        return self.to_entity(row, list(row.documents.all()))

    def save(self, booking: Booking) -> Booking:
        if booking.id is None:
            row = BookingModel.objects.create(
                user_id=booking.user_id,
                department_id=booking.department_id,
                service_id=booking.service_id,
                hold_id=booking.hold_id,
                date=booking.date,
                slot_time=booking.slot_time,
                token_number=booking.token_number,
                priority_type=booking.priority_type.value,
                status=booking.status.value,
                notes=booking.notes,
            )
            booking.id = row.id
            booking.created_at = row.created_at
            booking.updated_at = row.updated_at
        else:
            BookingModel.objects.filter(pk=booking.id).update(**self._row_values(booking))

        self._save_documents(booking)
        logger.debug("Saved booking %s (%s)", booking.id, booking.status.value)
        return booking

    def _row_values(self, booking: Booking) -> dict:
        return {
            'status': booking.status.value,
            'notes': booking.notes,
            'rejection_reason': booking.rejection_reason,
            'cancellation_reason': booking.cancellation_reason,
            'cancelled_by': booking.cancelled_by.value if booking.cancelled_by else '',
            'approved_at': booking.approved_at,
            'rejected_at': booking.rejected_at,
            'completed_at': booking.completed_at,
            'cancelled_at': booking.cancelled_at,
            'updated_at': booking.updated_at,
        }

    def _save_documents(self, booking: Booking):
        for doc in booking.documents:
            values = {
                'name': doc.name,
                'document_url': doc.url,
                'required_document_id': doc.required_document_id,
                'status': doc.status.value,
                'rejection_reason': doc.rejection_reason,
                'uploaded_at': doc.uploaded_at,
                'reviewed_at': doc.reviewed_at,
            }
            if doc.id is None:
                doc.id = BookingDocument.objects.create(booking_id=booking.id, **values).id
            else:
                BookingDocument.objects.filter(pk=doc.id, booking_id=booking.id).update(**values)

    @staticmethod
    def to_entity(row: BookingModel, documents: Optional[List[BookingDocument]] = None) -> Booking:
        return Booking(
            id=row.id,
            created_at=row.created_at,
            updated_at=row.updated_at,
            department_id=row.department_id,
            service_id=row.service_id,
            user_id=row.user_id,
            hold_id=row.hold_id,
            date=row.date,
            slot_time=row.slot_time,
            token_number=row.token_number,
            priority_type=PriorityType(row.priority_type),
            status=BookingStatus(row.status),
            notes=row.notes,
            rejection_reason=row.rejection_reason,
            cancellation_reason=row.cancellation_reason,
            cancelled_by=CancelledBy(row.cancelled_by) if row.cancelled_by else None,
            approved_at=row.approved_at,
            rejected_at=row.rejected_at,
            completed_at=row.completed_at,
            cancelled_at=row.cancelled_at,
            documents=[
                Document(
                    id=doc.id,
                    name=doc.name,
                    url=doc.document_url,
                    required_document_id=doc.required_document_id,
                    status=DocumentStatus(doc.status),
                    rejection_reason=doc.rejection_reason,
                    uploaded_at=doc.uploaded_at,
                    reviewed_at=doc.reviewed_at,
                )
                for doc in (documents or [])
            ],
        )
