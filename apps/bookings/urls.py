"""URL routing for the booking domain.

Three route groups are mounted under ``/api/v1/`` by ``config.urls``:
``department_urlpatterns`` (booking calendar and admission),
``urlpatterns`` (citizen bookings) and ``officer_urlpatterns``.
"""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import (
    BookSlotView,
    BookingDatesView,
    BookingViewSet,
    LiveQueueView,
    OfficerBookingViewSet,
    SlotListView,
)

router = SimpleRouter()
router.register(r"", BookingViewSet, basename="booking")

officer_router = SimpleRouter()
officer_router.register(r"bookings", OfficerBookingViewSet, basename="officer-booking")

urlpatterns = [
    path("", include(router.urls)),
]

department_urlpatterns = [
    path(
        "<int:department_id>/booking/dates/",
        BookingDatesView.as_view(),
        name="booking-dates",
    ),
    path(
        "<int:department_id>/booking/<int:service_id>/slots/",
        SlotListView.as_view(),
        name="booking-slots",
    ),
    path(
        "<int:department_id>/booking/<int:service_id>/book/",
        BookSlotView.as_view(),
        name="booking-book",
    ),
]

officer_urlpatterns = [
    path("queue/live/", LiveQueueView.as_view(), name="officer-live-queue"),
    path("", include(officer_router.urls)),
]
