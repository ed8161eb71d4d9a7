"""Capacity ledger counters, quotas and release."""

from __future__ import annotations

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from apps.bookings.domain.entities import PriorityType
from apps.bookings.domain.exceptions import AdmissionFailure
from apps.bookings.domain.slots import Slot
from apps.bookings.ledger import CapacityLedger, SlotKey
from apps.bookings.models import DailyLedger, SlotHold, SlotLedger
from apps.bookings.tests.factories import make_department, make_service, tomorrow
from apps.departments.domain import TokenConfig
from shared.domain.value_objects import TimeWindow

pytestmark = pytest.mark.django_db

NONE = PriorityType.NONE
SENIOR = PriorityType.SENIOR_CITIZEN


@pytest.fixture
def service():
    return make_service(make_department())


@pytest.fixture
def ledger():
    return CapacityLedger()


def slot_setup(service, slot_time="10:00-10:15", capacity=10, priority=2, **config):
    config.setdefault("max_tokens_per_slot", capacity)
    token_config = TokenConfig(**config)
    slot = Slot(date=tomorrow(), window=TimeWindow.parse(slot_time), capacity=capacity, priority_capacity=priority)
    key = SlotKey(service.department_id, service.id, slot.date, slot.slot_time)
    return key, slot, token_config


def reserve(ledger, key, slot, token_config, priority=NONE, **kwargs):
    return ledger.reserve(key, priority, slot, token_config, **kwargs)


def test_regular_and_priority_pools_fill_independently(ledger, service):
    key, slot, config = slot_setup(service)

    regular = [reserve(ledger, key, slot, config) for _ in range(8)]
    assert all(r.granted for r in regular)
    assert reserve(ledger, key, slot, config).failure_reason is AdmissionFailure.SLOT_FULL

    priority = [reserve(ledger, key, slot, config, SENIOR) for _ in range(2)]
    assert all(r.granted for r in priority)
    third = reserve(ledger, key, slot, config, SENIOR)
    assert not third.granted
    assert third.failure_reason is AdmissionFailure.PRIORITY_QUOTA_EXHAUSTED

    usage = ledger.slot_usage(key.department_id, key.service_id, key.date)[key.slot_time]
    assert (usage.regular_consumed, usage.priority_consumed) == (8, 2)
    assert ledger.daily_consumed(key.department_id, key.date) == 10


def test_priority_never_borrows_from_regular_pool(ledger, service):
    key, slot, config = slot_setup(service, priority=0)

    result = reserve(ledger, key, slot, config, SENIOR)

    assert result.failure_reason is AdmissionFailure.PRIORITY_QUOTA_EXHAUSTED
    assert reserve(ledger, key, slot, config).granted


def test_token_numbers_are_unique_and_increasing_per_service_day(ledger, service):
    key, slot, config = slot_setup(service)
    other_key, other_slot, _ = slot_setup(service, slot_time="10:15-10:30")

    numbers = [
        reserve(ledger, key, slot, config).token_number,
        reserve(ledger, other_key, other_slot, config).token_number,
        reserve(ledger, key, slot, config, SENIOR).token_number,
    ]

    assert numbers == [1, 2, 3]
    assert SlotHold.objects.filter(service=service).count() == 3


def test_daily_limit_refuses_when_auto_stop_is_on(ledger, service):
    key, slot, config = slot_setup(service, max_daily_tokens=2, auto_stop_on_overload=True)

    assert reserve(ledger, key, slot, config).granted
    assert reserve(ledger, key, slot, config).granted
    result = reserve(ledger, key, slot, config)

    assert result.failure_reason is AdmissionFailure.DAILY_LIMIT_REACHED
    assert ledger.daily_consumed(key.department_id, key.date) == 2
    assert ledger.slot_usage(key.department_id, key.service_id, key.date)[key.slot_time].consumed == 2


def test_daily_limit_is_advisory_when_auto_stop_is_off(ledger, service):
    key, slot, config = slot_setup(service, max_daily_tokens=1, auto_stop_on_overload=False)

    results = [reserve(ledger, key, slot, config) for _ in range(3)]

    assert all(r.granted for r in results)
    assert ledger.daily_consumed(key.department_id, key.date) == 3


def test_daily_limit_spans_services_of_department(ledger, service):
    other = make_service(service.department, name="Police verification", code="pv-02")
    key, slot, config = slot_setup(service, max_daily_tokens=1)
    other_key = SlotKey(other.department_id, other.id, key.date, key.slot_time)

    assert reserve(ledger, key, slot, config).granted
    result = reserve(ledger, other_key, slot, config)

    assert result.failure_reason is AdmissionFailure.DAILY_LIMIT_REACHED


@pytest.mark.parametrize(
    ("allow_priority_tokens", "priority_allowed"),
    [(False, True), (True, False)],
)
def test_priority_refused_when_switched_off(ledger, service, allow_priority_tokens, priority_allowed):
    key, slot, config = slot_setup(service, allow_priority_tokens=allow_priority_tokens)

    result = reserve(ledger, key, slot, config, SENIOR, priority_allowed=priority_allowed)

    assert result.failure_reason is AdmissionFailure.PRIORITY_NOT_ALLOWED
    assert ledger.daily_consumed(key.department_id, key.date) == 0
    assert not SlotHold.objects.exists()


def test_refusal_leaves_no_trace(ledger, service):
    key, slot, config = slot_setup(service, capacity=1, priority=0)
    reserve(ledger, key, slot, config)

    result = reserve(ledger, key, slot, config)

    assert result.failure_reason is AdmissionFailure.SLOT_FULL
    assert SlotHold.objects.count() == 1
    assert DailyLedger.objects.get(department_id=key.department_id, date=key.date).consumed == 1


def test_release_is_idempotent(ledger, service):
    key, slot, config = slot_setup(service)
    hold = reserve(ledger, key, slot, config, SENIOR).hold
    reserve(ledger, key, slot, config)

    assert ledger.release(hold) is True
    assert ledger.release(hold) is False
    assert ledger.release(SlotHold.objects.get(pk=hold.pk)) is False

    row = SlotLedger.objects.get(service=service, date=key.date, slot_time=key.slot_time)
    assert (row.regular_consumed, row.priority_consumed) == (1, 0)
    assert ledger.daily_consumed(key.department_id, key.date) == 1
    assert SlotHold.objects.get(pk=hold.pk).is_released


def test_reserve_release_reserve_nets_one(ledger, service):
    key, slot, config = slot_setup(service, capacity=1, priority=0)

    first = reserve(ledger, key, slot, config)
    ledger.release(first.hold)
    second = reserve(ledger, key, slot, config)

    assert second.granted
    assert second.token_number == 2
    assert ledger.slot_usage(key.department_id, key.service_id, key.date)[key.slot_time].consumed == 1
    assert ledger.daily_consumed(key.department_id, key.date) == 1


def _updated_tables(queries):
    tables = (DailyLedger._meta.db_table, SlotLedger._meta.db_table)
    order = []
    for query in queries.captured_queries:
        sql = query["sql"]
        if not sql.startswith("UPDATE"):
            continue
        order.extend(table for table in tables if f'"{table}"' in sql and table not in order)
    return order


def test_reserve_and_release_lock_daily_before_slot(ledger, service):
    key, slot, config = slot_setup(service)

    with CaptureQueriesContext(connection) as reserving:
        hold = reserve(ledger, key, slot, config).hold
    with CaptureQueriesContext(connection) as releasing:
        ledger.release(hold)

    expected = [DailyLedger._meta.db_table, SlotLedger._meta.db_table]
    assert _updated_tables(reserving) == expected
    assert _updated_tables(releasing) == expected


@pytest.mark.skipif(connection.vendor != "sqlite", reason="SQLite locking mode only")
def test_sqlite_writers_lock_at_begin():
    assert connection.settings_dict["OPTIONS"]["transaction_mode"] == "IMMEDIATE"
