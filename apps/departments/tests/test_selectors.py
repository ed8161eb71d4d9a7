"""Department configuration read model."""

from __future__ import annotations

from datetime import time

import pytest

from apps.bookings.tests.factories import make_department, make_service, make_token_config
from apps.departments.domain import QueueType
from apps.departments.models import Service, TokenManagementConfig, WorkingHours
from apps.departments.selectors import (
    DepartmentNotFound,
    InvalidDepartmentConfig,
    ServiceNotFound,
    booking_rules,
    department_rules,
)

pytestmark = pytest.mark.django_db


def test_department_rules_snapshot():
    department = make_department(closed_days=["Sun"], booking_window_days=10, allow_pregnant_women=False)

    rules = department_rules(department.id)

    assert rules.booking_window_days == 10
    assert rules.accepts_bookings
    assert not rules.priority.allow_pregnant_women
    assert len(rules.working_hours.days) == 7
    sunday = next(day for day in rules.working_hours.days if day.day == "Sun")
    assert sunday.is_closed and sunday.hours is None
    assert rules.token_config.slot_bounds.label == "10:00-12:00"
    assert rules.token_config.queue_type is QueueType.HYBRID


def test_service_inherits_department_token_config():
    department = make_department()
    service = make_service(department, documents=[("Aadhaar card", True), ("Photograph", False)])

    _, rules = booking_rules(department.id, service.id)

    assert rules.token_config.max_tokens_per_slot == 10
    assert rules.needs_document_stage
    assert len(rules.mandatory_document_ids) == 1
    assert rules.service_code == "PR-01"


def test_service_token_config_overrides_department():
    department = make_department()
    override = make_token_config(slot_start_time=time(14, 0), slot_end_time=time(16, 0), max_tokens_per_slot=4)
    service = make_service(department, token_config=override)

    _, rules = booking_rules(department.id, service.id)

    assert rules.token_config.max_tokens_per_slot == 4
    assert rules.token_config.slot_bounds.label == "14:00-16:00"


def test_service_must_belong_to_department():
    department = make_department()
    foreign = make_service(make_department(name="Transport Office"))

    with pytest.raises(ServiceNotFound):
        booking_rules(department.id, foreign.id)
    with pytest.raises(DepartmentNotFound):
        department_rules(999)


def test_service_code_is_normalised():
    service = make_service(make_department(), code="  dl-renew ")

    assert Service.objects.get(pk=service.id).service_code == "DL-RENEW"


def test_inverted_token_bounds_saved_outside_forms_are_a_validation_error():
    department = make_department()
    override = make_token_config()
    service = make_service(department, token_config=override)
    # update() skips clean(), as a raw import or admin script would.
    TokenManagementConfig.objects.filter(pk=override.pk).update(slot_start_time=time(12, 0), slot_end_time=time(10, 0))

    with pytest.raises(InvalidDepartmentConfig):
        booking_rules(department.id, service.id)


def test_inverted_working_hours_are_a_validation_error():
    department = make_department()
    WorkingHours.objects.filter(department=department, day="Mon").update(open_time=time(18, 0), close_time=time(9, 0))

    with pytest.raises(InvalidDepartmentConfig):
        department_rules(department.id)
