"""Slot grid generation from working hours and token rules."""

from __future__ import annotations

from datetime import date

import pytest

from apps.bookings.domain.slots import (
    booking_dates,
    find_slot,
    generate_slots,
    is_within_window,
    priority_capacity_for,
)
from apps.departments.domain import WEEKDAYS, TokenConfig, WorkingDay, WorkingHours
from shared.domain.value_objects import ClockTime, TimeWindow

MONDAY = date(2026, 10, 19)
SUNDAY = date(2026, 10, 25)


def weekly(open_time: str = "09:00", close_time: str = "18:00", closed=("Sun",)) -> WorkingHours:
    return WorkingHours(tuple(
        WorkingDay.closed(day) if day in closed else WorkingDay.open(day, open_time, close_time)
        for day in WEEKDAYS
    ))


def token_config(**overrides) -> TokenConfig:
    values = {
        "slot_interval_minutes": 15,
        "slot_bounds": TimeWindow.parse("10:00-17:00"),
        "max_tokens_per_slot": 10,
        "priority_percentage": 20,
    }
    values.update(overrides)
    return TokenConfig(**values)


def test_grid_covers_intersection_of_hours_and_bounds():
    slots = generate_slots(weekly(), token_config(), MONDAY)

    assert len(slots) == 28
    assert slots[0].slot_time == "10:00-10:15"
    assert slots[-1].slot_time == "16:45-17:00"
    assert all(slot.date == MONDAY for slot in slots)


def test_opening_hours_narrower_than_bounds_win():
    slots = generate_slots(weekly("11:00", "13:00"), token_config(slot_interval_minutes=30), MONDAY)

    assert [s.slot_time for s in slots] == ["11:00-11:30", "11:30-12:00", "12:00-12:30", "12:30-13:00"]


def test_trailing_partial_step_is_dropped():
    config = token_config(slot_interval_minutes=25, slot_bounds=TimeWindow.parse("10:00-11:00"))

    slots = generate_slots(weekly(), config, MONDAY)

    assert [s.slot_time for s in slots] == ["10:00-10:25", "10:25-10:50"]


def test_slots_are_contiguous_and_ordered():
    slots = generate_slots(weekly(), token_config(slot_interval_minutes=20), MONDAY)

    for previous, current in zip(slots, slots[1:]):
        assert previous.end == current.start
        assert previous.start < current.start


def test_closed_or_missing_day_yields_nothing():
    assert generate_slots(weekly(), token_config(), SUNDAY) == ()
    assert generate_slots(WorkingHours(), token_config(), MONDAY) == ()


def test_no_overlap_between_hours_and_bounds_yields_nothing():
    config = token_config(slot_bounds=TimeWindow.parse("19:00-21:00"))

    assert generate_slots(weekly(), config, MONDAY) == ()


def test_every_slot_carries_configured_capacity():
    slots = generate_slots(weekly(), token_config(max_tokens_per_slot=10, priority_percentage=20), MONDAY)

    assert {(s.capacity, s.priority_capacity, s.regular_capacity) for s in slots} == {(10, 2, 8)}


@pytest.mark.parametrize(
    ("capacity", "percentage", "expected"),
    [
        (10, 20, 2),
        (10, 25, 3),
        (10, 24, 2),
        (3, 50, 2),
        (10, 0, 0),
        (10, 100, 10),
        (0, 50, 0),
    ],
)
def test_priority_capacity_rounds_half_up(capacity, percentage, expected):
    config = token_config(max_tokens_per_slot=capacity, priority_percentage=percentage)

    assert priority_capacity_for(config) == expected


def test_priority_capacity_is_zero_when_priority_tokens_are_off():
    config = token_config(priority_percentage=50, allow_priority_tokens=False)

    assert priority_capacity_for(config) == 0
    assert generate_slots(weekly(), config, MONDAY)[0].regular_capacity == 10


def test_find_slot_normalises_label():
    slots = generate_slots(weekly(), token_config(), MONDAY)

    assert find_slot(slots, "10:15-10:30").start == ClockTime.parse("10:15")
    assert find_slot(slots, "9:00-9:15") is None
    assert find_slot(slots, "10:05-10:20") is None
    assert find_slot(slots, "not a slot") is None
    assert find_slot(slots, "") is None


def test_booking_window_includes_today_and_excludes_day_n():
    assert is_within_window(MONDAY, MONDAY, 7)
    assert is_within_window(date(2026, 10, 25), MONDAY, 7)
    assert not is_within_window(date(2026, 10, 26), MONDAY, 7)
    assert not is_within_window(date(2026, 10, 18), MONDAY, 7)


def test_booking_dates_mark_today_and_closed_days():
    rows = booking_dates(weekly(), 7, MONDAY)

    assert [row.day for row in rows] == list(WEEKDAYS)
    assert rows[0].is_today and not rows[1].is_today
    assert not any(row.is_past for row in rows)
    assert rows[-1].is_closed
    assert rows[-1].open_time is None
    assert str(rows[0].open_time) == "09:00"
    assert str(rows[0].close_time) == "18:00"
