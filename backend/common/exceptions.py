"""
Domain error taxonomy shared by every app, plus the DRF exception handler that
turns those errors (and DRF's own) into ``{"error": "<message>"}`` responses.
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        # Extra keys are merged into the error payload (e.g. friendship status)
        self.extra = extra
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class NoLocationError(NotFoundError):
    """The user has no current location, so proximity is undefined."""

    default_message = "User location not found"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class StoreFailure(ServiceError):
    """A primary-store unit of work failed and was rolled back."""

    default_message = "Internal server error"


def _first_message(detail):
    """Flatten DRF error detail (dict / list / ErrorDetail) into one message."""
    if isinstance(detail, dict):
        if not detail:
            return "Invalid request"
        field, value = next(iter(detail.items()))
        message = _first_message(value)
        if field in ("non_field_errors", "detail"):
            return message
        return f"{field}: {message}"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def custom_exception_handler(exc, context):
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown view"

    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error(f"{view_name} failed: {exc.message}", exc_info=exc)
        return Response({"error": exc.message, **exc.extra}, status=exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.exception(f"Unhandled database error in {view_name}")
        return Response(
            {"error": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = exception_handler(exc, context)
    if response is None:
        return response

    if isinstance(exc, (InvalidToken, TokenError)):
        message = "Invalid or expired token"
    elif isinstance(exc, NotAuthenticated):
        message = "Authentication required"
    elif isinstance(exc, AuthenticationFailed):
        message = "Invalid credentials"
    elif isinstance(exc, PermissionDenied):
        message = "Permission denied"
    elif isinstance(exc, DRFValidationError):
        message = _first_message(exc.detail)
    else:
        message = _first_message(getattr(exc, "detail", str(exc)))

    response.data = {"error": message}
    return response
