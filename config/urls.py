"""URL configuration for QueueIndia.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the OpenAPI schema and the booking API routers under `/api/v1/`.
"""
from django.conf import settings  # type: ignore
from django.conf.urls.static import static  # type: ignore
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

from apps.bookings.urls import department_urlpatterns, officer_urlpatterns

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/departments/', include(department_urlpatterns)),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/officer/', include(officer_urlpatterns)),
    # API docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
