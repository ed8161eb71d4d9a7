"""FilterSet definitions for the officer booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class OfficerBookingFilterSet(django_filters.FilterSet):
    """Filters officers use on the department booking list."""

    status = django_filters.ChoiceFilter(field_name="status", choices=Booking.Status.choices)
    date = django_filters.DateFilter(field_name="date")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    service = django_filters.NumberFilter(field_name="service_id")
    priority_type = django_filters.CharFilter(field_name="priority_type", lookup_expr="iexact")

    class Meta:
        model = Booking
        fields = ["status", "date", "service", "priority_type"]
