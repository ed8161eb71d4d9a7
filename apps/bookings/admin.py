"""Admin registration for bookings.

Bookings and ledger rows are read-only here: every change must go through
the command handlers so the ledger stays consistent with the bookings.
"""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingDocument, DailyLedger, SlotHold, SlotLedger, TokenSequence


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


class BookingDocumentInline(admin.TabularInline):
    model = BookingDocument
    extra = 0
    can_delete = False
    readonly_fields = ("name", "document_url", "required_document", "status", "rejection_reason", "uploaded_at")


@admin.register(Booking)
class BookingAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "token_number",
        "department",
        "service",
        "user",
        "date",
        "slot_time",
        "priority_type",
        "status",
        "created_at",
    )
    list_filter = ("status", "priority_type", "date", "department")
    search_fields = ("user__email", "service__name", "service__service_code")
    inlines = [BookingDocumentInline]


@admin.register(SlotLedger)
class SlotLedgerAdmin(ReadOnlyAdmin):
    list_display = ("department", "service", "date", "slot_time", "regular_consumed", "priority_consumed")
    list_filter = ("date", "department")


@admin.register(DailyLedger)
class DailyLedgerAdmin(ReadOnlyAdmin):
    list_display = ("department", "date", "consumed")
    list_filter = ("date",)


@admin.register(TokenSequence)
class TokenSequenceAdmin(ReadOnlyAdmin):
    list_display = ("department", "service", "date", "last_number")


@admin.register(SlotHold)
class SlotHoldAdmin(ReadOnlyAdmin):
    list_display = ("token_number", "department", "service", "date", "slot_time", "priority_type", "released_at")
    list_filter = ("date", "priority_type")
