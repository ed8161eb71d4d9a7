"""Users app package.

Defines the custom user model used as ``AUTH_USER_MODEL``. Users carry a
role (citizen, department officer, department admin, super admin) and,
for staff, the department whose bookings they may act on.
"""
