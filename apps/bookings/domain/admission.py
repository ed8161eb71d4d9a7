"""
Admission Rules

Checks a booking request against department and service rules before
the capacity ledger is touched. Pure: "today" and "now" are passed in.
"""

from datetime import date
from typing import Optional

from apps.departments.domain import DepartmentRules, QueueType, ServiceRules
from shared.domain.value_objects import ClockTime

from .entities import PriorityType
from .exceptions import BookingValidationError
from .slots import Slot, find_slot, generate_slots, is_within_window


def parse_priority_type(value: Optional[str]) -> PriorityType:
    if value in (None, ''):
        return PriorityType.NONE
    try:
        return PriorityType(str(value).upper())
    except ValueError:
        raise BookingValidationError(f"Unknown priority type: {value}", field='priorityType') from None


def priority_category_allowed(department: DepartmentRules, priority_type: PriorityType) -> bool:
    """Whether the department recognises this priority category at all"""
    criteria = department.priority
    return {
        PriorityType.NONE: True,
        PriorityType.SENIOR_CITIZEN: criteria.allow_senior_citizen,
        PriorityType.PREGNANT_WOMEN: criteria.allow_pregnant_women,
        PriorityType.DIFFERENTLY_ABLED: criteria.allow_differently_abled,
    }[priority_type]


def validate_booking_request(
    department: DepartmentRules,
    service: ServiceRules,
    day: date,
    slot_time: str,
    priority_type: PriorityType,
    *,
    today: date,
    now: ClockTime,
) -> Slot:
    """
    Return the requested slot or raise BookingValidationError

    Whether the priority category is accepted for the slot is a capacity
    question and is answered by the ledger, not here.
    """
    if not department.accepts_bookings:
        raise BookingValidationError(f"Department {department.name} is not accepting bookings")
    if not service.is_active:
        raise BookingValidationError(f"Service {service.name} is not available", field='serviceId')
    if service.token_config.queue_type is QueueType.OFFLINE:
        raise BookingValidationError(f"Service {service.name} only issues tokens at the counter")

    if day < today:
        raise BookingValidationError("Cannot book a date in the past", field='date')
    if not is_within_window(day, today, department.booking_window_days):
        raise BookingValidationError(
            f"Bookings are open for the next {department.booking_window_days} days only",
            field='date',
        )

    slots = generate_slots(department.working_hours, service.token_config, day)
    if not slots:
        raise BookingValidationError(f"Department is closed on {day.isoformat()}", field='date')

    slot = find_slot(slots, slot_time)
    if slot is None:
        raise BookingValidationError(f"No slot {slot_time} on {day.isoformat()}", field='slotTime')
    if day == today and slot.start <= now:
        raise BookingValidationError(f"Slot {slot.slot_time} has already started", field='slotTime')

    return slot
