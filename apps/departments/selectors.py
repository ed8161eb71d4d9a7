"""Read path from the department configuration tables to domain rules."""

from __future__ import annotations

from typing import Tuple

from shared.domain.exceptions import NotFound, ValidationFailed
from shared.domain.value_objects import ClockTime, TimeWindow

from .domain import (
    DepartmentRules,
    PriorityCriteria,
    QueueType,
    RequiredDocumentSpec,
    ServiceRules,
    TokenConfig,
    WorkingDay,
    WorkingHours,
)
from .models import Department, Service, TokenManagementConfig
from .models import WorkingHours as WorkingHoursModel


class DepartmentNotFound(NotFound):
    code = "department_not_found"


class ServiceNotFound(NotFound):
    code = "service_not_found"


class InvalidDepartmentConfig(ValidationFailed):
    """Stored hours or token bounds do not form a valid window."""

    code = "invalid_department_config"


def _window(start, end, what: str) -> TimeWindow:
    try:
        return TimeWindow(ClockTime.from_time(start), ClockTime.from_time(end))
    except ValueError as exc:
        raise InvalidDepartmentConfig(f"Invalid {what}: {exc}") from exc


def token_config_from_model(config: TokenManagementConfig) -> TokenConfig:
    return TokenConfig(
        slot_interval_minutes=config.slot_interval_minutes,
        slot_bounds=_window(config.slot_start_time, config.slot_end_time, "token slot bounds"),
        max_tokens_per_slot=config.max_tokens_per_slot,
        max_daily_tokens=config.max_daily_tokens,
        queue_type=QueueType(config.queue_type),
        allow_priority_tokens=config.allow_priority_tokens,
        priority_percentage=config.priority_percentage,
        auto_stop_on_overload=config.auto_stop_on_overload,
    )


def _working_day(row: WorkingHoursModel) -> WorkingDay:
    if row.is_closed or not row.open_time or not row.close_time:
        return WorkingDay.closed(row.day)
    return WorkingDay(
        day=row.day,
        is_closed=False,
        hours=_window(row.open_time, row.close_time, f"{row.day} working hours"),
    )


def department_rules(department_id: int) -> DepartmentRules:
    """Snapshot of a department's booking rules; raises DepartmentNotFound."""
    try:
        department = (
            Department.objects.select_related("token_config")
            .prefetch_related("working_hours")
            .get(pk=department_id)
        )
    except (Department.DoesNotExist, ValueError, TypeError):
        raise DepartmentNotFound(f"Department {department_id} not found")

    return DepartmentRules(
        id=department.id,
        name=department.name,
        working_hours=WorkingHours(tuple(_working_day(row) for row in department.working_hours.all())),
        token_config=token_config_from_model(department.token_config),
        booking_window_days=department.booking_window_days,
        priority=PriorityCriteria(
            allow_senior_citizen=department.allow_senior_citizen,
            allow_pregnant_women=department.allow_pregnant_women,
            allow_differently_abled=department.allow_differently_abled,
            senior_citizen_age=department.senior_citizen_age,
        ),
        is_active=department.status == Department.Status.ACTIVE,
        is_slot_booking_enabled=department.is_slot_booking_enabled,
    )


def service_rules(department: DepartmentRules, service_id: int) -> ServiceRules:
    """Rules of a service of ``department``; its own token config wins over the department's."""
    try:
        service = (
            Service.objects.select_related("token_config")
            .prefetch_related("required_documents")
            .get(pk=service_id, department_id=department.id)
        )
    except (Service.DoesNotExist, ValueError, TypeError):
        raise ServiceNotFound(f"Service {service_id} not found in department {department.id}")

    token_config = (
        token_config_from_model(service.token_config) if service.token_config_id else department.token_config
    )
    return ServiceRules(
        id=service.id,
        department_id=department.id,
        name=service.name,
        service_code=service.service_code,
        token_config=token_config,
        priority_allowed=service.priority_allowed,
        requires_documents=service.is_document_upload_required,
        required_documents=tuple(
            RequiredDocumentSpec(
                id=doc.id,
                name=doc.name,
                description=doc.description,
                is_mandatory=doc.is_mandatory,
            )
            for doc in service.required_documents.all()
        ),
        is_active=service.is_active,
    )


def booking_rules(department_id: int, service_id: int) -> Tuple[DepartmentRules, ServiceRules]:
    department = department_rules(department_id)
    return department, service_rules(department, service_id)
