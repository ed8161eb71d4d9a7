"""
Booking Queries

Read paths for the booking calendar, slot availability and the officer
views. Nothing here writes; live counts come straight from the ledger
tables and may lag a concurrent admission by one transaction.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from django.db.models import Case, IntegerField, QuerySet, Value, When
from django.utils import timezone

from apps.bookings.domain.entities import PriorityType
from apps.bookings.domain.exceptions import BookingValidationError
from apps.bookings.domain.slots import BookingDate, Slot, booking_dates, generate_slots, is_within_window
from apps.bookings.ledger import CapacityLedger, SlotUsage
from apps.bookings.models import Booking
from apps.departments.selectors import booking_rules, department_rules
from shared.domain.value_objects import ClockTime


@dataclass(frozen=True)
class SlotAvailability:
    slot: Slot
    usage: SlotUsage
    started: bool = False
    daily_limit_reached: bool = False

    @property
    def regular_remaining(self) -> int:
        return max(self.slot.regular_capacity - self.usage.regular_consumed, 0)

    @property
    def priority_remaining(self) -> int:
        return max(self.slot.priority_capacity - self.usage.priority_consumed, 0)

    @property
    def remaining(self) -> int:
        return self.regular_remaining + self.priority_remaining

    @property
    def is_fully_booked(self) -> bool:
        return self.remaining == 0

    @property
    def available(self) -> bool:
        return not (self.is_fully_booked or self.started or self.daily_limit_reached)


def list_booking_dates(department_id: int, today: Optional[date] = None) -> Tuple[BookingDate, ...]:
    department = department_rules(department_id)
    return booking_dates(
        department.working_hours,
        department.booking_window_days,
        today or timezone.localdate(),
    )


def list_slot_availability(
    department_id: int,
    service_id: int,
    day: date,
    ledger: Optional[CapacityLedger] = None,
) -> List[SlotAvailability]:
    """Slots of ``day`` with live remaining counts; past or out-of-window dates are refused"""
    ledger = ledger or CapacityLedger()
    department, service = booking_rules(department_id, service_id)
    now = timezone.localtime()
    today = now.date()

    if day < today:
        raise BookingValidationError("Cannot list slots for a date in the past", field='date')
    if not is_within_window(day, today, department.booking_window_days):
        raise BookingValidationError(
            f"Bookings are open for the next {department.booking_window_days} days only",
            field='date',
        )

    token_config = service.token_config
    slots = generate_slots(department.working_hours, token_config, day)
    usage = ledger.slot_usage(department.id, service.id, day)

    daily_limit_reached = False
    if token_config.max_daily_tokens is not None and token_config.auto_stop_on_overload:
        daily_limit_reached = ledger.daily_consumed(department.id, day) >= token_config.max_daily_tokens

    current = ClockTime.from_time(now.time())
    return [
        SlotAvailability(
            slot=slot,
            usage=usage.get(slot.slot_time, SlotUsage()),
            started=day == today and slot.start <= current,
            daily_limit_reached=daily_limit_reached,
        )
        for slot in slots
    ]


def user_bookings(user) -> QuerySet:
    return (
        Booking.objects.filter(user=user)
        .select_related("department", "service")
        .prefetch_related("documents")
        .order_by("-created_at")
    )


def officer_bookings(user, department_id: Optional[int] = None) -> QuerySet:
    """Bookings an officer may see; super admins see all or the department they ask for"""
    queryset = Booking.objects.select_related("department", "service", "user").prefetch_related("documents")
    if user.is_super_admin():
        if department_id:
            queryset = queryset.filter(department_id=department_id)
        return queryset.order_by("-date", "token_number")
    if not user.department_id:
        return queryset.none()
    return queryset.filter(department_id=user.department_id).order_by("-date", "token_number")


PRIORITY_RANK = Case(
    *[When(priority_type=priority.value, then=Value(priority.rank)) for priority in PriorityType],
    default=Value(0),
    output_field=IntegerField(),
)


def live_queue(department_id: int, service_id: Optional[int] = None, day: Optional[date] = None) -> QuerySet:
    """
    Approved bookings waiting to be served

    Highest priority rank first, then token number.
    """
    queryset = (
        Booking.objects.filter(
            department_id=department_id,
            status=Booking.Status.APPROVED,
            date=day or timezone.localdate(),
        )
        .select_related("service", "user")
        .annotate(priority_rank=PRIORITY_RANK)
    )
    if service_id:
        queryset = queryset.filter(service_id=service_id)
    return queryset.order_by("-priority_rank", "token_number")
