"""Department configuration models.

Departments, their services and token rules are managed by the platform
administration; the booking engine only reads them (see ``selectors``).
"""

from __future__ import annotations

from datetime import time

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class TokenManagementConfig(models.Model):
    """Token rules shared by a department and optionally overridden per service."""

    class QueueType(models.TextChoices):
        ONLINE = "Online", _("Online")
        OFFLINE = "Offline", _("Offline")
        HYBRID = "Hybrid", _("Hybrid")

    slot_interval_minutes = models.PositiveSmallIntegerField(
        default=15,
        validators=[MinValueValidator(1), MaxValueValidator(24 * 60)],
    )
    slot_start_time = models.TimeField(default=time(10, 0))
    slot_end_time = models.TimeField(default=time(17, 0))
    max_daily_tokens = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Empty means no daily limit."),
    )
    max_tokens_per_slot = models.PositiveIntegerField(default=10)
    queue_type = models.CharField(
        max_length=10,
        choices=QueueType.choices,
        default=QueueType.HYBRID,
    )
    allow_priority_tokens = models.BooleanField(default=True)
    priority_percentage = models.PositiveSmallIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
        help_text=_("Share of each slot reserved for priority citizens, 0-100."),
    )
    auto_stop_on_overload = models.BooleanField(
        default=True,
        help_text=_("Refuse bookings once the daily limit is reached. When off the limit is advisory."),
    )

    class Meta:
        verbose_name = _("Token management config")
        verbose_name_plural = _("Token management configs")

    def __str__(self) -> str:
        return (
            f"{self.slot_start_time:%H:%M}-{self.slot_end_time:%H:%M} "
            f"every {self.slot_interval_minutes}m x{self.max_tokens_per_slot}"
        )

    def clean(self) -> None:
        if self.slot_start_time >= self.slot_end_time:
            raise ValidationError(_("Slot start time must be before slot end time."))


class Department(models.Model):
    """Government department offering bookable services."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")
        UNDER_MAINTENANCE = "under-maintenance", _("Under maintenance")

    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    is_slot_booking_enabled = models.BooleanField(default=True)
    booking_window_days = models.PositiveSmallIntegerField(
        default=7,
        validators=[MinValueValidator(1), MaxValueValidator(30)],
        help_text=_("How many days ahead, today included, citizens may book."),
    )
    allow_senior_citizen = models.BooleanField(default=True)
    senior_citizen_age = models.PositiveSmallIntegerField(default=60)
    allow_pregnant_women = models.BooleanField(default=True)
    allow_differently_abled = models.BooleanField(default=True)
    token_config = models.OneToOneField(
        TokenManagementConfig,
        on_delete=models.PROTECT,
        related_name="department",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Department")
        verbose_name_plural = _("Departments")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class WorkingHours(models.Model):
    """Opening hours of a department for one weekday."""

    class Day(models.TextChoices):
        MON = "Mon", _("Monday")
        TUE = "Tue", _("Tuesday")
        WED = "Wed", _("Wednesday")
        THU = "Thu", _("Thursday")
        FRI = "Fri", _("Friday")
        SAT = "Sat", _("Saturday")
        SUN = "Sun", _("Sunday")

    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name="working_hours")
    day = models.CharField(max_length=3, choices=Day.choices)
    is_closed = models.BooleanField(default=False)
    open_time = models.TimeField(null=True, blank=True)
    close_time = models.TimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Working hours")
        verbose_name_plural = _("Working hours")
        constraints = [
            models.UniqueConstraint(fields=["department", "day"], name="working_hours_one_per_day"),
        ]

    def __str__(self) -> str:
        if self.is_closed:
            return f"{self.day}: closed"
        return f"{self.day}: {self.open_time:%H:%M}-{self.close_time:%H:%M}"

    def clean(self) -> None:
        if self.is_closed:
            return
        if not self.open_time or not self.close_time:
            raise ValidationError(_("Open and close time are required for an open day."))
        if self.open_time >= self.close_time:
            raise ValidationError(_("Open time must be before close time."))


class Service(models.Model):
    """A service citizens can book a token for."""

    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=255)
    service_code = models.CharField(max_length=32)
    description = models.TextField(blank=True)
    priority_allowed = models.BooleanField(default=True)
    is_document_upload_required = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    token_config = models.OneToOneField(
        TokenManagementConfig,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="service",
        help_text=_("Overrides the department token rules when set."),
    )

    class Meta:
        verbose_name = _("Service")
        verbose_name_plural = _("Services")
        ordering = ["department", "name"]
        constraints = [
            models.UniqueConstraint(fields=["department", "service_code"], name="service_code_unique_per_department"),
        ]

    def __str__(self) -> str:
        return f"{self.service_code} {self.name}"

    def save(self, *args, **kwargs):  # type: ignore
        self.service_code = (self.service_code or "").strip().upper()
        super().save(*args, **kwargs)


class RequiredDocument(models.Model):
    """Document a citizen must (or may) provide for a service."""

    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="required_documents")
    name = models.CharField(max_length=255)
    description = models.CharField(max_length=500, blank=True)
    is_mandatory = models.BooleanField(default=True)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Required document")
        verbose_name_plural = _("Required documents")
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.name}{'' if self.is_mandatory else ' (optional)'}"
