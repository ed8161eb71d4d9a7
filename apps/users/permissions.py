"""Role-based permission classes shared by the booking API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsDepartmentOfficer(permissions.BasePermission):
    """
    Allows department officers, department admins and super admins.

    Officers and admins must be assigned to a department; the department
    scope of individual bookings is checked by the views.
    """

    message = "Officer access required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_super_admin():
            return True
        return user.is_department_staff() and user.department_id is not None


class IsBookingOwnerOrDepartmentOfficer(permissions.BasePermission):
    """Object-level: the citizen who booked, or staff of the booking's department."""

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if obj.user_id == user.id:
            return True
        return user.can_manage_department(obj.department_id)
