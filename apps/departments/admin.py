"""Admin registration for department configuration."""

from __future__ import annotations

from django.contrib import admin

from .models import Department, RequiredDocument, Service, TokenManagementConfig, WorkingHours


class WorkingHoursInline(admin.TabularInline):
    model = WorkingHours
    extra = 0
    max_num = 7


class RequiredDocumentInline(admin.TabularInline):
    model = RequiredDocument
    extra = 0


@admin.register(TokenManagementConfig)
class TokenManagementConfigAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "slot_start_time",
        "slot_end_time",
        "slot_interval_minutes",
        "max_tokens_per_slot",
        "max_daily_tokens",
        "queue_type",
        "priority_percentage",
        "auto_stop_on_overload",
    )
    list_filter = ("queue_type", "allow_priority_tokens", "auto_stop_on_overload")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "status", "is_slot_booking_enabled", "booking_window_days", "created_at")
    list_filter = ("status", "is_slot_booking_enabled", "category")
    search_fields = ("name", "category")
    readonly_fields = ("created_at", "updated_at")
    inlines = [WorkingHoursInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("service_code", "name", "department", "is_document_upload_required", "priority_allowed", "is_active")
    list_filter = ("department", "is_document_upload_required", "priority_allowed", "is_active")
    search_fields = ("name", "service_code", "department__name")
    inlines = [RequiredDocumentInline]
