"""
Department Rules (read model)

Immutable snapshots of the department configuration the booking engine
needs. They are built by ``selectors`` from the ORM and never written back.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from shared.domain.value_objects import ClockTime, TimeWindow

WEEKDAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')


def weekday_key(day: date) -> str:
    """Weekday key ("Mon".."Sun") of a calendar date"""
    return WEEKDAYS[day.weekday()]


class QueueType(Enum):
    ONLINE = 'Online'
    OFFLINE = 'Offline'
    HYBRID = 'Hybrid'


@dataclass(frozen=True)
class WorkingDay:
    """Opening hours for one weekday; ``hours`` is None when closed"""
    day: str
    is_closed: bool
    hours: Optional[TimeWindow] = None

    def __post_init__(self):
        if self.day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {self.day!r}")
        if not self.is_closed and self.hours is None:
            raise ValueError(f"Open day {self.day} needs opening hours")

    @classmethod
    def closed(cls, day: str) -> 'WorkingDay':
        return cls(day=day, is_closed=True)

    @classmethod
    def open(cls, day: str, open_time: str, close_time: str) -> 'WorkingDay':
        return cls(day=day, is_closed=False, hours=TimeWindow(ClockTime.parse(open_time), ClockTime.parse(close_time)))


@dataclass(frozen=True)
class WorkingHours:
    """Weekly opening schedule keyed by weekday; missing days count as closed"""
    days: Tuple[WorkingDay, ...] = ()

    def for_date(self, day: date) -> Optional[WorkingDay]:
        key = weekday_key(day)
        return next((d for d in self.days if d.day == key), None)


@dataclass(frozen=True)
class TokenConfig:
    """Token management rules effective for one service"""
    slot_interval_minutes: int = 15
    slot_bounds: TimeWindow = field(
        default_factory=lambda: TimeWindow(ClockTime.parse('10:00'), ClockTime.parse('17:00'))
    )
    max_tokens_per_slot: int = 10
    max_daily_tokens: Optional[int] = None
    queue_type: QueueType = QueueType.HYBRID
    allow_priority_tokens: bool = True
    priority_percentage: int = 0
    auto_stop_on_overload: bool = True

    def __post_init__(self):
        if self.slot_interval_minutes < 1:
            raise ValueError("Slot interval must be at least one minute")
        if self.max_tokens_per_slot < 0:
            raise ValueError("Max tokens per slot cannot be negative")
        if not 0 <= self.priority_percentage <= 100:
            raise ValueError("Priority percentage must be within 0-100")


@dataclass(frozen=True)
class RequiredDocumentSpec:
    id: int
    name: str
    description: str = ''
    is_mandatory: bool = True


@dataclass(frozen=True)
class PriorityCriteria:
    allow_senior_citizen: bool = True
    allow_pregnant_women: bool = True
    allow_differently_abled: bool = True
    senior_citizen_age: int = 60


@dataclass(frozen=True)
class ServiceRules:
    id: int
    department_id: int
    name: str
    service_code: str
    token_config: TokenConfig
    priority_allowed: bool = True
    requires_documents: bool = True
    required_documents: Tuple[RequiredDocumentSpec, ...] = ()
    is_active: bool = True

    @property
    def needs_document_stage(self) -> bool:
        """Bookings start in PENDING_DOCS only when there is something to upload"""
        return self.requires_documents and len(self.required_documents) > 0

    @property
    def mandatory_document_ids(self) -> Tuple[int, ...]:
        return tuple(d.id for d in self.required_documents if d.is_mandatory)

    def required_document(self, document_id: int) -> Optional[RequiredDocumentSpec]:
        return next((d for d in self.required_documents if d.id == document_id), None)


@dataclass(frozen=True)
class DepartmentRules:
    id: int
    name: str
    working_hours: WorkingHours
    token_config: TokenConfig
    booking_window_days: int = 7
    priority: PriorityCriteria = field(default_factory=PriorityCriteria)
    is_active: bool = True
    is_slot_booking_enabled: bool = True

    @property
    def accepts_bookings(self) -> bool:
        return self.is_active and self.is_slot_booking_enabled
