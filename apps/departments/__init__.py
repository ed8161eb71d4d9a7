"""Departments app package.

Holds the department, working-hours, service and token-rule configuration
that the booking engine reads. The configuration is maintained through
the Django admin by platform staff; the booking engine never writes it.
"""
