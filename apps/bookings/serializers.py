"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking, BookingDocument, PriorityType


class BookingCreateSerializer(serializers.Serializer):
    """Token request from a citizen."""

    date = serializers.DateField()
    slotTime = serializers.CharField(max_length=11)
    priorityType = serializers.ChoiceField(
        choices=PriorityType.choices,
        required=False,
        default=PriorityType.NONE,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=1000)


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    requiredDocId = serializers.IntegerField(min_value=1)
    name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class ReasonSerializer(serializers.Serializer):
    """Officer decision that must be explained."""

    reason = serializers.CharField(max_length=500, trim_whitespace=True)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class BookingDocumentSerializer(serializers.ModelSerializer):
    documentUrl = serializers.CharField(source="document_url", read_only=True)
    requiredDocId = serializers.IntegerField(source="required_document_id", read_only=True)
    rejectionReason = serializers.CharField(source="rejection_reason", read_only=True)
    uploadedAt = serializers.DateTimeField(source="uploaded_at", read_only=True)
    reviewedAt = serializers.DateTimeField(source="reviewed_at", read_only=True)

    class Meta:
        model = BookingDocument
        fields = [
            "id",
            "name",
            "documentUrl",
            "requiredDocId",
            "status",
            "rejectionReason",
            "uploadedAt",
            "reviewedAt",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Booking with its documents, as shown to citizens and officers."""

    departmentId = serializers.IntegerField(source="department_id", read_only=True)
    departmentName = serializers.CharField(source="department.name", read_only=True)
    serviceId = serializers.IntegerField(source="service_id", read_only=True)
    serviceName = serializers.CharField(source="service.name", read_only=True)
    userId = serializers.IntegerField(source="user_id", read_only=True)
    slotTime = serializers.CharField(source="slot_time", read_only=True)
    tokenNumber = serializers.IntegerField(source="token_number", read_only=True)
    priorityType = serializers.CharField(source="priority_type", read_only=True)
    bookingRejectionReason = serializers.CharField(source="rejection_reason", read_only=True)
    cancellationReason = serializers.CharField(source="cancellation_reason", read_only=True)
    cancelledBy = serializers.CharField(source="cancelled_by", read_only=True)
    documents = BookingDocumentSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "departmentId",
            "departmentName",
            "serviceId",
            "serviceName",
            "userId",
            "date",
            "slotTime",
            "tokenNumber",
            "priorityType",
            "status",
            "notes",
            "bookingRejectionReason",
            "cancellationReason",
            "cancelledBy",
            "documents",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class LiveQueueEntrySerializer(serializers.ModelSerializer):
    tokenNumber = serializers.IntegerField(source="token_number", read_only=True)
    priorityType = serializers.CharField(source="priority_type", read_only=True)
    priorityRank = serializers.IntegerField(source="priority_rank", read_only=True)
    slotTime = serializers.CharField(source="slot_time", read_only=True)
    serviceId = serializers.IntegerField(source="service_id", read_only=True)
    serviceName = serializers.CharField(source="service.name", read_only=True)
    citizen = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "tokenNumber",
            "priorityType",
            "priorityRank",
            "slotTime",
            "serviceId",
            "serviceName",
            "citizen",
        ]

    def get_citizen(self, obj: Booking) -> str:
        return obj.user.get_full_name() or obj.user.email


class BookingDateSerializer(serializers.Serializer):
    date = serializers.DateField()
    day = serializers.CharField()
    isClosed = serializers.BooleanField(source="is_closed")
    openTime = serializers.CharField(source="open_time", allow_null=True)
    closeTime = serializers.CharField(source="close_time", allow_null=True)
    isToday = serializers.BooleanField(source="is_today")
    isPast = serializers.BooleanField(source="is_past")


class SlotAvailabilitySerializer(serializers.Serializer):
    start = serializers.CharField(source="slot.start")
    end = serializers.CharField(source="slot.end")
    time = serializers.CharField(source="slot.slot_time")
    capacity = serializers.IntegerField(source="slot.capacity")
    priorityCapacity = serializers.IntegerField(source="slot.priority_capacity")
    available = serializers.BooleanField()
    remaining = serializers.IntegerField()
    regularRemaining = serializers.IntegerField(source="regular_remaining")
    priorityRemaining = serializers.IntegerField(source="priority_remaining")
    isFullyBooked = serializers.BooleanField(source="is_fully_booked")
