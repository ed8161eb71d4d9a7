"""API views for the booking domain."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from django.utils.dateparse import parse_date  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.pagination import PageNumberPagination  # type: ignore
from rest_framework.parsers import FormParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsBookingOwnerOrDepartmentOfficer, IsDepartmentOfficer

from .application import queries
from .application.command_handlers import (
    ApproveBookingCommand,
    ApproveBookingHandler,
    ApproveDocumentCommand,
    ApproveDocumentHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    RejectDocumentCommand,
    RejectDocumentHandler,
    UploadDocumentCommand,
    UploadDocumentHandler,
)
from .domain.entities import CancelledBy
from .domain.exceptions import BookingValidationError
from .filters import OfficerBookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingDateSerializer,
    BookingSerializer,
    CancelSerializer,
    DocumentUploadSerializer,
    LiveQueueEntrySerializer,
    ReasonSerializer,
    SlotAvailabilitySerializer,
)


def _date_param(request, name: str = "date", required: bool = True):
    raw = request.query_params.get(name)
    if not raw:
        if required:
            raise BookingValidationError(f"Query parameter '{name}' is required", field=name)
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise BookingValidationError(f"Invalid date: {raw}", field=name)
    return value


def _booking_response(booking_id: int, request, status_code: int = status.HTTP_200_OK) -> Response:
    booking = (
        Booking.objects.select_related("department", "service")
        .prefetch_related("documents")
        .get(pk=booking_id)
    )
    return Response(BookingSerializer(booking, context={"request": request}).data, status=status_code)


# ===== Department booking endpoints =====


class BookingDatesView(APIView):
    """Booking calendar of a department: today plus the booking window."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, department_id: int):  # type: ignore
        dates = queries.list_booking_dates(department_id)
        return Response(BookingDateSerializer(dates, many=True).data)


class SlotListView(APIView):
    """Slots of one service on one date with live remaining counts."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, department_id: int, service_id: int):  # type: ignore
        day = _date_param(request)
        slots = queries.list_slot_availability(department_id, service_id, day)
        return Response(SlotAvailabilitySerializer(slots, many=True).data)


class BookSlotView(APIView):
    """Admit a token for the requested slot."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, department_id: int, service_id: int):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = CreateBookingHandler().handle(CreateBookingCommand(
            department_id=department_id,
            service_id=service_id,
            user_id=request.user.id,
            date=data["date"],
            slot_time=data["slotTime"],
            priority_type=data["priorityType"],
            notes=data["notes"],
        ))
        return _booking_response(booking.id, request, status.HTTP_201_CREATED)


# ===== Citizen bookings =====


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    """A citizen's own bookings; department staff may open them too."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingOwnerOrDepartmentOfficer]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        return Booking.objects.select_related("department", "service").prefetch_related("documents")

    def list(self, request, *args, **kwargs):  # type: ignore
        return self.user(request)

    @action(detail=False, methods=["get"], url_path="user")
    def user(self, request):  # type: ignore
        bookings = queries.user_bookings(request.user)
        page = self.paginate_queryset(bookings)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(bookings, many=True).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cancelled_by = CancelledBy.USER if booking.user_id == request.user.id else CancelledBy.OFFICER
        CancelBookingHandler().handle(CancelBookingCommand(
            booking_id=booking.id,
            actor_id=request.user.id,
            cancelled_by=cancelled_by,
            reason=serializer.validated_data["reason"],
        ))
        return _booking_response(booking.id, request)

    @action(
        detail=True,
        methods=["post"],
        url_path="documents/upload",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload_document(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if booking.user_id != request.user.id:
            self.permission_denied(request, message="Only the citizen who booked may upload documents.")

        serializer = DocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        UploadDocumentHandler().handle(UploadDocumentCommand(
            booking_id=booking.id,
            user_id=request.user.id,
            required_document_id=data["requiredDocId"],
            file=data["file"],
            name=data["name"],
        ))
        return _booking_response(booking.id, request, status.HTTP_201_CREATED)


# ===== Officer endpoints =====


class OfficerBookingPagination(PageNumberPagination):
    page_size = 8
    page_size_query_param = "page_size"
    max_page_size = 50


class OfficerBookingViewSet(viewsets.ReadOnlyModelViewSet):
    """Department booking desk: listing, document checks and decisions."""

    serializer_class = BookingSerializer
    permission_classes = [IsDepartmentOfficer]
    pagination_class = OfficerBookingPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = OfficerBookingFilterSet
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        department_id = self.request.query_params.get("department")
        if department_id and not department_id.isdigit():
            department_id = None
        return queries.officer_bookings(self.request.user, int(department_id) if department_id else None)

    def _decide(self, request, handler, command) -> Response:
        handler.handle(command)
        return _booking_response(command.booking_id, request)

    @action(detail=True, methods=["post"], url_path=r"docs/(?P<doc_id>\d+)/approve")
    def approve_document(self, request, pk=None, doc_id=None):  # type: ignore
        booking = self.get_object()
        return self._decide(request, ApproveDocumentHandler(), ApproveDocumentCommand(
            booking_id=booking.id,
            document_id=int(doc_id),
            officer_id=request.user.id,
        ))

    @action(detail=True, methods=["post"], url_path=r"docs/(?P<doc_id>\d+)/reject")
    def reject_document(self, request, pk=None, doc_id=None):  # type: ignore
        booking = self.get_object()
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._decide(request, RejectDocumentHandler(), RejectDocumentCommand(
            booking_id=booking.id,
            document_id=int(doc_id),
            officer_id=request.user.id,
            reason=serializer.validated_data["reason"],
        ))

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        return self._decide(request, ApproveBookingHandler(), ApproveBookingCommand(
            booking_id=booking.id,
            officer_id=request.user.id,
        ))

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._decide(request, RejectBookingHandler(), RejectBookingCommand(
            booking_id=booking.id,
            officer_id=request.user.id,
            reason=serializer.validated_data["reason"],
        ))

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        return self._decide(request, CompleteBookingHandler(), CompleteBookingCommand(
            booking_id=booking.id,
            officer_id=request.user.id,
        ))

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._decide(request, CancelBookingHandler(), CancelBookingCommand(
            booking_id=booking.id,
            actor_id=request.user.id,
            cancelled_by=CancelledBy.OFFICER,
            reason=serializer.validated_data["reason"],
        ))


class LiveQueueView(APIView):
    """Approved tokens of the day in serving order."""

    permission_classes = [IsDepartmentOfficer]

    def get(self, request):  # type: ignore
        user = request.user
        department_id = user.department_id
        requested = request.query_params.get("department")
        if user.is_super_admin() and requested:
            if not requested.isdigit():
                raise BookingValidationError(f"Invalid department: {requested}", field="department")
            department_id = requested
        if not department_id:
            raise BookingValidationError("Query parameter 'department' is required", field="department")

        service = request.query_params.get("service")
        day = _date_param(request, required=False) or timezone.localdate()
        entries = queries.live_queue(
            int(department_id),
            service_id=int(service) if service and service.isdigit() else None,
            day=day,
        )
        return Response(LiveQueueEntrySerializer(entries, many=True).data)
