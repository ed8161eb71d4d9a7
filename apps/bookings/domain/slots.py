"""
Slot Grid

Pure projection of working hours and token rules onto bookable slots.
No clock reads and no storage access: the caller decides what "today"
is and overlays live ledger counts separately.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Optional, Sequence, Tuple

from apps.departments.domain import TokenConfig, WorkingHours, weekday_key
from shared.domain.value_objects import ClockTime, TimeWindow


@dataclass(frozen=True)
class Slot:
    """
    One bookable slot of a day

    ``capacity`` and ``priority_capacity`` come from configuration only;
    consumed counts live in the capacity ledger.
    """
    date: date
    window: TimeWindow
    capacity: int
    priority_capacity: int

    @property
    def start(self) -> ClockTime:
        return self.window.start

    @property
    def end(self) -> ClockTime:
        return self.window.end

    @property
    def slot_time(self) -> str:
        """Stable key of the slot within its day, e.g. "10:00-10:15" """
        return self.window.label

    @property
    def regular_capacity(self) -> int:
        return self.capacity - self.priority_capacity


@dataclass(frozen=True)
class BookingDate:
    """One row of the booking calendar"""
    date: date
    day: str
    is_closed: bool
    open_time: Optional[ClockTime]
    close_time: Optional[ClockTime]
    is_today: bool
    is_past: bool


def priority_capacity_for(token_config: TokenConfig) -> int:
    """
    Priority share of a slot

    round(capacity * percentage / 100), half rounded up, clamped to [0, capacity].
    Zero when priority tokens are switched off.
    """
    capacity = token_config.max_tokens_per_slot
    if not token_config.allow_priority_tokens or capacity <= 0:
        return 0
    share = (Decimal(capacity) * Decimal(token_config.priority_percentage) / Decimal(100))
    rounded = int(share.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return max(0, min(rounded, capacity))


def bookable_window(working_hours: WorkingHours, token_config: TokenConfig, day: date) -> Optional[TimeWindow]:
    """Part of the day that is both open and inside the configured slot bounds"""
    working_day = working_hours.for_date(day)
    if working_day is None or working_day.is_closed or working_day.hours is None:
        return None
    return working_day.hours.intersect(token_config.slot_bounds)


def generate_slots(working_hours: WorkingHours, token_config: TokenConfig, day: date) -> Tuple[Slot, ...]:
    """
    Slots of ``day`` in start-time order

    Walks the bookable window in ``slot_interval_minutes`` steps; a trailing
    step shorter than the interval is dropped, so the result has
    floor(window / interval) entries. Closed days yield nothing.
    """
    window = bookable_window(working_hours, token_config, day)
    if window is None:
        return ()

    interval = token_config.slot_interval_minutes
    capacity = token_config.max_tokens_per_slot
    priority_capacity = priority_capacity_for(token_config)

    slots = []
    current = window.start
    while current.minutes + interval <= window.end.minutes:
        slots.append(Slot(
            date=day,
            window=TimeWindow(current, current.plus(interval)),
            capacity=capacity,
            priority_capacity=priority_capacity,
        ))
        current = current.plus(interval)
    return tuple(slots)


def find_slot(slots: Sequence[Slot], slot_time: str) -> Optional[Slot]:
    """Slot whose label matches ``slot_time``; labels are normalised first"""
    try:
        label = TimeWindow.parse(slot_time).label
    except ValueError:
        return None
    return next((slot for slot in slots if slot.slot_time == label), None)


def window_dates(today: date, window_days: int) -> Iterator[date]:
    """``today`` and the following days, ``window_days`` dates in total"""
    for offset in range(max(window_days, 0)):
        yield today + timedelta(days=offset)


def is_within_window(day: date, today: date, window_days: int) -> bool:
    return today <= day < today + timedelta(days=max(window_days, 0))


def booking_dates(working_hours: WorkingHours, window_days: int, today: date) -> Tuple[BookingDate, ...]:
    """Calendar rows for the booking window, today first"""
    rows = []
    for day in window_dates(today, window_days):
        working_day = working_hours.for_date(day)
        is_closed = working_day is None or working_day.is_closed
        hours = None if is_closed else working_day.hours
        rows.append(BookingDate(
            date=day,
            day=weekday_key(day),
            is_closed=is_closed,
            open_time=hours.start if hours else None,
            close_time=hours.end if hours else None,
            is_today=day == today,
            is_past=day < today,
        ))
    return tuple(rows)
