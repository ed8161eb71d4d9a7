"""Booking and capacity ledger models for QueueIndia."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PriorityType(models.TextChoices):
    NONE = "NONE", _("None")
    SENIOR_CITIZEN = "SENIOR_CITIZEN", _("Senior citizen")
    PREGNANT_WOMEN = "PREGNANT_WOMEN", _("Pregnant women")
    DIFFERENTLY_ABLED = "DIFFERENTLY_ABLED", _("Differently abled")


class SlotHold(models.Model):
    """One admitted token; the audit trail of the capacity ledger.

    A hold is written by every successful reservation and released at most
    once, which is what makes ``CapacityLedger.release`` idempotent.
    """

    department = models.ForeignKey("departments.Department", on_delete=models.PROTECT, related_name="slot_holds")
    service = models.ForeignKey("departments.Service", on_delete=models.PROTECT, related_name="slot_holds")
    date = models.DateField()
    slot_time = models.CharField(max_length=11)
    priority_type = models.CharField(max_length=20, choices=PriorityType.choices, default=PriorityType.NONE)
    token_number = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Slot hold")
        verbose_name_plural = _("Slot holds")
        constraints = [
            models.UniqueConstraint(
                fields=["department", "service", "date", "token_number"],
                name="slot_hold_unique_token",
            ),
        ]
        indexes = [
            models.Index(fields=["department", "service", "date", "slot_time"], name="bookings_sl_departm_4c1f2a_idx"),
        ]

    def __str__(self) -> str:
        return f"Hold #{self.token_number} {self.date} {self.slot_time}"

    @property
    def is_priority(self) -> bool:
        return self.priority_type != PriorityType.NONE

    @property
    def is_released(self) -> bool:
        return self.released_at is not None


class SlotLedger(models.Model):
    """Consumed token counters of one slot; limits come from the live token config."""

    department = models.ForeignKey("departments.Department", on_delete=models.CASCADE, related_name="+")
    service = models.ForeignKey("departments.Service", on_delete=models.CASCADE, related_name="slot_ledgers")
    date = models.DateField()
    slot_time = models.CharField(max_length=11)
    regular_consumed = models.PositiveIntegerField(default=0)
    priority_consumed = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Slot ledger")
        verbose_name_plural = _("Slot ledgers")
        constraints = [
            models.UniqueConstraint(
                fields=["department", "service", "date", "slot_time"],
                name="slot_ledger_unique_key",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.date} {self.slot_time}: {self.regular_consumed}+{self.priority_consumed}"

    @property
    def consumed(self) -> int:
        return self.regular_consumed + self.priority_consumed


class DailyLedger(models.Model):
    """Department-wide tokens consumed on one date."""

    department = models.ForeignKey("departments.Department", on_delete=models.CASCADE, related_name="daily_ledgers")
    date = models.DateField()
    consumed = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Daily ledger")
        verbose_name_plural = _("Daily ledgers")
        constraints = [
            models.UniqueConstraint(fields=["department", "date"], name="daily_ledger_unique_key"),
        ]

    def __str__(self) -> str:
        return f"{self.department_id} {self.date}: {self.consumed}"


class TokenSequence(models.Model):
    """Last token number issued for a department service on a date; never decremented."""

    department = models.ForeignKey("departments.Department", on_delete=models.CASCADE, related_name="+")
    service = models.ForeignKey("departments.Service", on_delete=models.CASCADE, related_name="token_sequences")
    date = models.DateField()
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Token sequence")
        verbose_name_plural = _("Token sequences")
        constraints = [
            models.UniqueConstraint(
                fields=["department", "service", "date"],
                name="token_sequence_unique_key",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.service_id} {self.date}: {self.last_number}"


class Booking(models.Model):
    """Citizen booking of a service slot. Rows are never deleted."""

    class Status(models.TextChoices):
        PENDING_DOCS = "PENDING_DOCS", _("Pending documents")
        DOCS_SUBMITTED = "DOCS_SUBMITTED", _("Documents submitted")
        UNDER_REVIEW = "UNDER_REVIEW", _("Under review")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")
        COMPLETED = "COMPLETED", _("Completed")
        CANCELLED = "CANCELLED", _("Cancelled")

    class CancelledBy(models.TextChoices):
        USER = "USER", _("User")
        OFFICER = "OFFICER", _("Officer")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    department = models.ForeignKey(
        "departments.Department",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    service = models.ForeignKey(
        "departments.Service",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    hold = models.OneToOneField(
        SlotHold,
        on_delete=models.PROTECT,
        related_name="booking",
    )
    date = models.DateField()
    slot_time = models.CharField(max_length=11)
    token_number = models.PositiveIntegerField()
    priority_type = models.CharField(max_length=20, choices=PriorityType.choices, default=PriorityType.NONE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.UNDER_REVIEW)
    notes = models.TextField(blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_by = models.CharField(max_length=10, choices=CancelledBy.choices, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["department", "service", "date", "token_number"],
                name="booking_unique_token",
            ),
        ]
        indexes = [
            models.Index(fields=["department", "date", "status"], name="bookings_bo_departm_9a7e31_idx"),
            models.Index(fields=["user", "-created_at"], name="bookings_bo_user_id_5d02c8_idx"),
            models.Index(fields=["status"], name="bookings_bo_status_b3e4f0_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} token {self.token_number} ({self.status})"


class BookingDocument(models.Model):
    """File submitted for a booking, optionally satisfying a required document."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="documents")
    required_document = models.ForeignKey(
        "departments.RequiredDocument",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="submissions",
    )
    name = models.CharField(max_length=255)
    document_url = models.CharField(max_length=500)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    rejection_reason = models.CharField(max_length=500, blank=True)
    uploaded_at = models.DateTimeField()
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Booking document")
        verbose_name_plural = _("Booking documents")
        ordering = ["uploaded_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "required_document"],
                condition=models.Q(required_document__isnull=False),
                name="booking_document_one_per_requirement",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
