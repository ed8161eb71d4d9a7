"""DRF exception handler that renders domain errors.

Registered via ``REST_FRAMEWORK['EXCEPTION_HANDLER']``.
"""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import Conflict, DomainError, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationFailed):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, Conflict):
        if exc.retryable:
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):  # type: ignore
    if not isinstance(exc, DomainError):
        return drf_exception_handler(exc, context)

    http_status = status_for(exc)
    body = {"detail": exc.message, "code": exc.code, **exc.details()}
    view = context.get("view")
    logger.info(
        "Domain error in %s: %s (%s) -> %s",
        view.__class__.__name__ if view else "-",
        exc.code,
        exc.message,
        http_status,
    )
    response = Response(body, status=http_status)
    if http_status == status.HTTP_503_SERVICE_UNAVAILABLE:
        response["Retry-After"] = "1"
    return response
